# tests/conftest.py
from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import WSMsgType, web
from aiohttp.test_utils import TestServer

from nosdm.exceptions import PublishError
from nosdm.identity import Identity


class FakeRelay:
    """In-process websocket relay.

    Every accepted event is forwarded to every open subscription without
    looking at its filters, like a careless relay would.
    """

    def __init__(self) -> None:
        self.subscriptions: dict[str, web.WebSocketResponse] = {}
        self.clients: list[web.WebSocketResponse] = []
        self.received: list[list[Any]] = []
        self.closed_ids: list[str] = []
        self.accept = True
        self.ok_reason = ""
        self.answer_events = True
        app = web.Application()
        app.router.add_get("/", self.handler)
        self.server = TestServer(app)

    @property
    def url(self) -> str:
        return str(self.server.make_url("/")).replace("http://", "ws://", 1)

    async def handler(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.clients.append(ws)
        async for data in ws:
            if data.type != WSMsgType.TEXT:
                continue
            message = json.loads(data.data)
            self.received.append(message)
            match message:
                case ["REQ", sub_id, *_filters]:
                    self.subscriptions[sub_id] = ws
                    await ws.send_json(["EOSE", sub_id])
                case ["CLOSE", sub_id]:
                    self.subscriptions.pop(sub_id, None)
                    self.closed_ids.append(sub_id)
                case ["EVENT", event]:
                    if self.answer_events:
                        await ws.send_json(["OK", event["id"], self.accept, self.ok_reason])
                    if self.accept:
                        await self.deliver(event)
        self.clients.remove(ws)
        return ws

    async def deliver(self, event: dict[str, Any]) -> None:
        for sub_id, ws in list(self.subscriptions.items()):
            if not ws.closed:
                await ws.send_json(["EVENT", sub_id, event])

    async def send_raw(self, frame: str) -> None:
        for ws in list(self.clients):
            await ws.send_str(frame)

    async def drop_clients(self) -> None:
        for ws in list(self.clients):
            await ws.close()


class FakeSubscription:
    def __init__(self, filters: list[Any]) -> None:
        self.filters = filters
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def next(self) -> Any:
        return await self.queue.get()

    async def close(self) -> None:
        self.closed = True


class FakeTransport:
    """Stands in for Relay in controller tests."""

    def __init__(self, failures: int = 0) -> None:
        self.connected = False
        self.connects = 0
        self.failures = failures
        self.published: list[Any] = []
        self.subscriptions: list[FakeSubscription] = []

    async def connect(self) -> None:
        self.connects += 1
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def subscribe(self, filters: list[Any]) -> FakeSubscription:
        sub = FakeSubscription(filters)
        self.subscriptions.append(sub)
        return sub

    async def publish(self, event: Any) -> None:
        if self.failures:
            self.failures -= 1
            raise PublishError("relay said no")
        self.published.append(event)


async def eventually(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture()
def alice() -> Identity:
    return Identity()


@pytest.fixture()
def bob() -> Identity:
    return Identity()


@pytest.fixture()
def carol() -> Identity:
    return Identity()


@pytest_asyncio.fixture()
async def fake_relay() -> AsyncIterator[FakeRelay]:
    relay = FakeRelay()
    await relay.server.start_server()
    try:
        yield relay
    finally:
        await relay.server.close()
