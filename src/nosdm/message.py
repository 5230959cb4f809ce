import json

from .exceptions import MessageError
from .filter import Filter

class Message:
    def __init__(self):
        super(Message, self).__init__()

    def eventMessage(self, event:dict) -> str:
        return json.dumps(["EVENT", event], ensure_ascii=False, separators=(',', ':'))

    def reqMessage(self, id:str, filters:list[Filter]) -> str:
        return json.dumps(["REQ", id, *[f.toDict() for f in filters]], separators=(',', ':'))

    def closeMessage(self, id:str) -> str:
        return json.dumps(["CLOSE", id])

    def parseMessage(self, raw:str) -> list:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MessageError(f"relay sent invalid JSON: {e}") from e
        if not isinstance(message, list) or len(message) == 0 or not isinstance(message[0], str):
            raise MessageError(f"relay sent an unexpected frame: {raw[:80]!r}")
        return message
