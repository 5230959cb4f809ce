import asyncio
import logging
import sys
import threading
import time
from typing import TextIO

from .config import CONNECT_TIMEOUT, DEFAULT_PEER, DEFAULT_RELAY_URL, PUBLISH_TIMEOUT
from .event import Event
from .exceptions import DecryptError, NostrError, RelayConnectionError
from .filter import Filter
from .identity import Identity
from .kinds import ENCRYPTED_DIRECT_MESSAGE, Kinds
from .nips import Nips
from .relay import Relay, Subscription

logger = logging.getLogger(__name__)

PROMPT:str = "Send Message: "

class Receiver(Nips, Kinds):
    def __init__(
            self,
            relay:Relay,
            identity:Identity,
            peer:str,
            shared_key:bytes,
            output:TextIO=None,
            stop:asyncio.Event=None,
        ):
        super(Receiver, self).__init__()
        self.relay = relay
        self.identity = identity
        self.peer = peer
        self.shared_key = shared_key
        self.output = output if output is not None else sys.stdout
        self.stop = stop if stop is not None else asyncio.Event()

    def filters(self) -> list[Filter]:
        return [Filter(
            kinds=[ENCRYPTED_DIRECT_MESSAGE],
            authors=[self.peer],
            tags={"p": [self.identity.pubkey]},
        )]

    async def run(self) -> None:
        subscription = await self.relay.subscribe(self.filters())
        try:
            while not self.stop.is_set():
                event = await self.waitEvent(subscription)
                if event is None:
                    break
                self.handleEvent(event)
        finally:
            await subscription.close()
        logger.debug("receiver stopped")

    async def waitEvent(self, subscription:Subscription) -> Event|None:
        # returns None once stopped or when the relay ends the subscription
        getter = asyncio.ensure_future(subscription.next())
        stopper = asyncio.ensure_future(self.stop.wait())
        try:
            (done, _) = await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            getter.cancel()
            stopper.cancel()
        if stopper in done:
            return None
        return getter.result()

    def handleEvent(self, event:Event) -> None:
        if event.kind != ENCRYPTED_DIRECT_MESSAGE:
            logger.debug("ignoring %s event of kind %d", self.classifyKind(event.kind), event.kind)
            return
        try:
            text = self.decryptContent(event.content, self.shared_key)
        except DecryptError as e:
            logger.warning("skipping message %s: %s", event.id, e)
            return
        self.output.write(f"\rMessage received: {text}\n{PROMPT}")
        self.output.flush()

class Sender(Nips):
    def __init__(
            self,
            relay:Relay,
            identity:Identity,
            peer:str,
            shared_key:bytes,
            input_stream:TextIO=None,
            output:TextIO=None,
        ):
        super(Sender, self).__init__()
        self.relay = relay
        self.identity = identity
        self.peer = peer
        self.shared_key = shared_key
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output = output if output is not None else sys.stdout

    def buildEvent(self, text:str) -> Event:
        event = Event(
            kind=ENCRYPTED_DIRECT_MESSAGE,
            tags=[["p", self.peer]],
            content=self.encryptContent(text, self.shared_key),
            created_at=int(time.time()),
        )
        event.finalizeEvent(self.identity.seckey)
        return event

    async def sendMessage(self, text:str) -> Event:
        event = self.buildEvent(text)
        await self.relay.publish(event)
        return event

    def readLines(self, loop:asyncio.AbstractEventLoop, lines:asyncio.Queue) -> None:
        # blocking reads stay on this thread so the event loop keeps receiving
        try:
            try:
                for line in iter(self.input_stream.readline, ""):
                    loop.call_soon_threadsafe(lines.put_nowait, line)
            except (OSError, ValueError) as e:
                logger.error("cannot read input: %s", e)
            loop.call_soon_threadsafe(lines.put_nowait, None)
        except RuntimeError:
            logger.debug("event loop closed before input ended")

    async def run(self) -> None:
        lines:asyncio.Queue = asyncio.Queue()
        reader = threading.Thread(
            target=self.readLines,
            args=(asyncio.get_running_loop(), lines),
            name="input-reader",
            daemon=True,
        )
        reader.start()

        self.write(PROMPT)
        while (line := await lines.get()) is not None:
            message = line.rstrip("\r\n")
            if message == "":
                self.write(PROMPT)
                continue
            try:
                await self.sendMessage(message)
            except NostrError as e:
                self.write(f"Error sending message: {e}\n{PROMPT}")
                continue
            self.write(f"\rMessage sent: {message}\n{PROMPT}")
        logger.debug("input ended")

    def write(self, text:str) -> None:
        self.output.write(text)
        self.output.flush()

class DirectChat(Nips):
    def __init__(
            self,
            peer:str=DEFAULT_PEER,
            url:str=DEFAULT_RELAY_URL,
            identity:Identity=None,
            input_stream:TextIO=None,
            output:TextIO=None,
            relay:Relay=None,
            timeout:float=CONNECT_TIMEOUT,
            publish_timeout:float=PUBLISH_TIMEOUT,
        ):
        super(DirectChat, self).__init__()
        # decoded before anything touches the network
        self.peer:str = self.decodePublicKey(peer)
        self.identity:Identity = identity if identity is not None else Identity()
        self.url:str = url
        self.input_stream = input_stream
        self.output = output if output is not None else sys.stdout
        self.relay = relay if relay is not None else Relay(
            url=url,
            timeout=timeout,
            publish_timeout=publish_timeout,
        )
        self.stop:asyncio.Event = None

    async def __aenter__(self):
        await self.relay.connect()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.relay.close()
        return False

    async def run(self) -> None:
        shared_key = self.identity.sharedSecret(self.peer)
        self.stop = asyncio.Event()

        receiver = Receiver(self.relay, self.identity, self.peer, shared_key, self.output, self.stop)
        sender = Sender(self.relay, self.identity, self.peer, shared_key, self.input_stream, self.output)

        task = asyncio.create_task(receiver.run(), name="receiver")
        try:
            await sender.run()
        finally:
            self.stop.set()
            try:
                await task
            except RelayConnectionError as e:
                logger.error("receiver ended: %s", e)
