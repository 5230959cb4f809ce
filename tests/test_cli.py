# tests/test_cli.py
import socket

import pytest

from nosdm import __version__
from nosdm.cli import build_parser, main
from nosdm.config import DEFAULT_PEER, DEFAULT_RELAY_URL
from nosdm.identity import Identity


def test_defaults_are_the_fixed_configuration() -> None:
    args = build_parser().parse_args([])
    assert args.relay == DEFAULT_RELAY_URL
    assert args.peer == DEFAULT_PEER
    assert args.verbose == 0


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_malformed_peer_exits_with_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--peer", "npub1bogus", "--relay", "ws://127.0.0.1:1/"]) == 1
    assert "Public key" not in capsys.readouterr().out


def test_unreachable_relay_exits_with_error(capsys: pytest.CaptureFixture[str], bob: Identity) -> None:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    assert main(["--peer", bob.npub, "--relay", f"ws://127.0.0.1:{port}/"]) == 1
    assert capsys.readouterr().out.startswith("Public key: npub1")
