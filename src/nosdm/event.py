import hashlib
import re
import json
import time

from .exceptions import EventError
from .kinds import Kinds
from .nips import Nips

pubkey_match = re.compile(r'^[a-f0-9]{64}$')
id_match = re.compile(r'^[a-f0-9]{64}$')
sig_match = re.compile(r'^[a-f0-9]{128}$')

class Event(Nips, Kinds):
    def __init__(
            self,
            kind:int=1,
            tags:list[list[str]]=None,
            content:str="",
            created_at:int=None,
            pubkey:str="",
            id:str="",
            sig:str="",
        ):
        super(Event, self).__init__()

        self.kind:int = kind
        self.tags:list[list[str]] = tags if tags is not None else []
        self.content:str = content
        self.created_at:int = created_at if created_at is not None else int(time.time())
        self.pubkey:str = pubkey
        self.id:str = id
        self.sig:str = sig

        self.verifiedSymbol:bool = False

    def __repr__(self) -> str:
        return f"Event(id={self.id[:8]!r}, kind={self.kind}, pubkey={self.pubkey[:8]!r})"

    @classmethod
    def fromDict(cls, data:dict) -> "Event":
        if not isinstance(data, dict):
            raise EventError("event must be a JSON object")
        try:
            event = cls(
                kind=data["kind"],
                tags=data["tags"],
                content=data["content"],
                created_at=data["created_at"],
                pubkey=data["pubkey"],
                id=data["id"],
                sig=data["sig"],
            )
        except KeyError as e:
            raise EventError(f"event is missing {e.args[0]!r}") from e
        if not event.validateEvent():
            raise EventError("event has wrong or missing properties")
        if not isinstance(event.id, str) or not isinstance(event.sig, str) \
                or not id_match.match(event.id) or not sig_match.match(event.sig):
            raise EventError("event id or signature is malformed")
        return event

    def validateEvent(self) -> bool:
        if type(self.kind) is not int: return False
        if type(self.content) is not str: return False
        if type(self.created_at) is not int: return False
        if type(self.pubkey) is not str: return False
        if not pubkey_match.match(self.pubkey): return False
        if not isinstance(self.tags, list):
            return False
        for sublist in self.tags:
            if not isinstance(sublist, list):
                return False
            for item in sublist:
                if not isinstance(item, str):
                    return False
        return True

    def serializeEvent(self) -> str:
        if not self.validateEvent(): raise EventError("can't serialize event with wrong or missing properties")
        return json.dumps(
            [0,
             self.pubkey,
             self.created_at,
             self.kind,
             self.tags,
             self.content
            ],
            ensure_ascii=False,
            separators=(',', ':')
        )

    def getEventHash(self) -> str:
        return hashlib.sha256(self.serializeEvent().encode('utf-8')).hexdigest()

    def finalizeEvent(self, seckey:bytes) -> dict:
        self.pubkey = self.getXOnlyPublicKey(seckey)
        self.id = self.getEventHash()
        self.sig = self.signSchnorr(bytes.fromhex(self.id), seckey).hex()
        self.verifiedSymbol = True
        return self.signedEvent()

    def verifyEvent(self) -> bool:
        if self.verifiedSymbol: return True
        try:
            hash = self.getEventHash()
        except EventError:
            return False
        if hash != self.id:
            return False
        try:
            self.verifiedSymbol = self.verifySchnorr(
                bytes.fromhex(hash),
                bytes.fromhex(self.pubkey),
                bytes.fromhex(self.sig)
            )
        except ValueError:
            self.verifiedSymbol = False
        return self.verifiedSymbol

    def getTagValues(self, name:str) -> list[str]:
        return [tag[1] for tag in self.tags if len(tag) >= 2 and tag[0] == name]

    def unsignedEvent(self) -> dict:
        return {
            "kind":self.kind,
            "tags":self.tags,
            "content":self.content,
            "created_at":self.created_at,
            "pubkey":self.pubkey,
        }

    def signedEvent(self) -> dict:
        event = self.unsignedEvent()
        event.update(id=self.id, sig=self.sig)
        return event
