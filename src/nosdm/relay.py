import asyncio
import logging
import secrets
from aiohttp import ClientSession, ClientTimeout, ClientError, ClientWebSocketResponse, ClientWSTimeout, WSMsgType

from .config import CLOSE_TIMEOUT, CONNECT_TIMEOUT, PUBLISH_TIMEOUT
from .event import Event
from .exceptions import EventError, MessageError, PublishError, RelayConnectionError
from .filter import Filter
from .message import Message

logger = logging.getLogger(__name__)

class Subscription:
    """Events delivered by a relay for one REQ.

    Events are checked against the filters and their signatures before being
    queued; a relay is never trusted to have applied the filters itself.
    """
    def __init__(self, relay:"Relay", id:str, filters:list[Filter]):
        self.relay = relay
        self.id:str = id
        self.filters:list[Filter] = filters
        self.events:asyncio.Queue = asyncio.Queue()
        self.eose:bool = False
        self.finished:bool = False
        self.closed:bool = False
        self.reason:str = ""

    def __aiter__(self):
        return self

    async def __anext__(self) -> Event:
        event = await self.next()
        if event is None:
            raise StopAsyncIteration
        return event

    async def next(self) -> Event|None:
        if self.finished and self.events.empty():
            return None
        return await self.events.get()

    def dispatchEvent(self, data:dict) -> bool:
        if self.finished:
            return False
        try:
            event = Event.fromDict(data)
        except EventError as e:
            logger.debug("subscription %s: dropping malformed event: %s", self.id, e)
            return False
        if not any(f.matchFilter(event) for f in self.filters):
            logger.debug("subscription %s: dropping %r, no filter matches", self.id, event)
            return False
        if not event.verifyEvent():
            logger.warning("subscription %s: dropping %r, bad signature", self.id, event)
            return False
        self.events.put_nowait(event)
        return True

    def finish(self, reason:str="") -> None:
        if self.finished:
            return
        self.finished = True
        self.reason = reason
        self.events.put_nowait(None)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.finish("closed by client")
        await self.relay.unsubscribe(self)

class Relay(Message):
    def __init__(
            self,
            url:str="",
            timeout:float=CONNECT_TIMEOUT,
            publish_timeout:float=PUBLISH_TIMEOUT,
            heartbeat:float=None,
            client_ssl_on:bool=True,
        ):
        super(Relay, self).__init__()

        self.session:ClientSession = None
        self.websocket:ClientWebSocketResponse = None
        self.connected:bool = False
        self.url:str = url
        self.timeout:float = timeout
        self.publish_timeout:float = publish_timeout
        self.heartbeat:float = heartbeat
        self.client_ssl_on:bool = client_ssl_on

        self.subscriptions:dict[str, Subscription] = {}
        self.pending:dict[str, asyncio.Future] = {}
        self.reader:asyncio.Task = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()
        return False

    async def connect(self, url:str="") -> None:
        self.url = url or self.url
        ctimeout = ClientTimeout(
            total=None,
            connect=self.timeout,
            sock_connect=self.timeout,
            sock_read=None
        )
        wstimeout = ClientWSTimeout(ws_receive=None, ws_close=CLOSE_TIMEOUT)

        self.session = ClientSession(timeout=ctimeout)
        try:
            self.websocket = await self.session.ws_connect(
                url=self.url,
                timeout=wstimeout,
                heartbeat=self.heartbeat,
                ssl=self.client_ssl_on,
            )
        except (ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            await self.session.close()
            self.session = None
            raise RelayConnectionError(f"cannot connect to {self.url}: {e}") from e

        self.connected = True
        self.reader = asyncio.create_task(self.receive(), name=f"relay-reader {self.url}")
        logger.info("connected to %s", self.url)

    async def send(self, message:str) -> None:
        if not self.connected:
            raise RelayConnectionError("Not Connected")
        try:
            await self.websocket.send_str(message)
        except (ClientError, ConnectionError) as e:
            raise RelayConnectionError(f"send to {self.url} failed: {e}") from e

    async def receive(self) -> None:
        try:
            async for msg in self.websocket:
                match(msg.type):
                    case WSMsgType.TEXT:
                        self.dispatch(msg.data)
                    case WSMsgType.ERROR:
                        logger.error("websocket error from %s: %s", self.url, self.websocket.exception())
                        break
                    case _:
                        logger.debug("ignoring %s frame from %s", msg.type.name, self.url)
        finally:
            self.connected = False
            for sub in list(self.subscriptions.values()):
                sub.finish("connection closed")
            for waiter in self.pending.values():
                if not waiter.done():
                    waiter.set_exception(RelayConnectionError("connection closed"))
            logger.info("disconnected from %s", self.url)

    def dispatch(self, raw:str) -> None:
        try:
            message = self.parseMessage(raw)
        except MessageError as e:
            logger.warning("%s: %s", self.url, e)
            return

        match message:
            case ["EVENT", str(sub_id), dict(data)]:
                sub = self.subscriptions.get(sub_id)
                if sub is None:
                    logger.debug("event for unknown subscription %s", sub_id)
                else:
                    sub.dispatchEvent(data)
            case ["OK", str(event_id), bool(accepted), *rest]:
                waiter = self.pending.get(event_id)
                if waiter is not None and not waiter.done():
                    waiter.set_result((accepted, rest[0] if rest and isinstance(rest[0], str) else ""))
            case ["EOSE", str(sub_id)]:
                sub = self.subscriptions.get(sub_id)
                if sub is not None:
                    sub.eose = True
                    logger.debug("subscription %s: end of stored events", sub_id)
            case ["CLOSED", str(sub_id), *rest]:
                sub = self.subscriptions.pop(sub_id, None)
                if sub is not None:
                    logger.warning("relay closed subscription %s: %s", sub_id, rest[0] if rest else "")
                    sub.finish(str(rest[0]) if rest else "closed by relay")
            case ["NOTICE", str(notice)]:
                logger.warning("notice from %s: %s", self.url, notice)
            case _:
                logger.debug("ignoring %s message from %s", message[0], self.url)

    async def subscribe(self, filters:list[Filter], id:str=None) -> Subscription:
        sub = Subscription(self, id or secrets.token_hex(8), filters)
        self.subscriptions[sub.id] = sub
        try:
            await self.send(self.reqMessage(sub.id, filters))
        except RelayConnectionError:
            del self.subscriptions[sub.id]
            raise
        logger.debug("subscribed %s with %r", sub.id, filters)
        return sub

    async def unsubscribe(self, sub:Subscription) -> None:
        known = self.subscriptions.pop(sub.id, None)
        if known is not None and self.connected:
            try:
                await self.send(self.closeMessage(sub.id))
            except RelayConnectionError as e:
                logger.debug("CLOSE for %s not delivered: %s", sub.id, e)

    async def publish(self, event:Event) -> None:
        waiter = asyncio.get_running_loop().create_future()
        self.pending[event.id] = waiter
        try:
            await self.send(self.eventMessage(event.signedEvent()))
            (accepted, reason) = await asyncio.wait_for(waiter, self.publish_timeout)
        except asyncio.TimeoutError as e:
            raise PublishError(f"no answer from {self.url} within {self.publish_timeout}s") from e
        finally:
            self.pending.pop(event.id, None)

        if not accepted:
            raise PublishError(reason or f"event rejected by {self.url}")
        logger.debug("%s accepted %r", self.url, event)

    async def close(self) -> None:
        for sub in list(self.subscriptions.values()):
            await sub.close()
        if self.websocket is not None:
            await self.websocket.close()
        if self.reader is not None:
            await self.reader
            self.reader = None
        if self.session is not None:
            await self.session.close()
            self.session = None
        self.connected = False
