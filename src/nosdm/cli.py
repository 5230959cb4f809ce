import argparse
import asyncio
import logging
import sys

from . import __version__
from .chat import DirectChat
from .config import DEFAULT_PEER, DEFAULT_RELAY_URL
from .exceptions import KeyDecodeError, RelayConnectionError

logger = logging.getLogger("nosdm")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nosdm",
        description="Encrypted direct messages (NIP-04) with one peer over one Nostr relay.",
    )
    parser.add_argument("--relay", default=DEFAULT_RELAY_URL, help="relay websocket url (default: %(default)s)")
    parser.add_argument("--peer", default=DEFAULT_PEER, help="npub or nprofile of the peer (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log more, repeat for debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser

def setup_logging(verbosity:int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

async def chat(relay:str, peer:str) -> None:
    session = DirectChat(peer=peer, url=relay)
    print(f"Public key: {session.identity.npub}", flush=True)
    async with session:
        await session.run()

def main(argv:list[str]=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        asyncio.run(chat(args.relay, args.peer))
    except (KeyDecodeError, RelayConnectionError) as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0
