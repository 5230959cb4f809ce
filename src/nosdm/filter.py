import json

from .event import Event

class Filter:
    def __init__(
            self,
            ids:list[str]=None,
            kinds:list[int]=None,
            authors:list[str]=None,
            tags:dict[str, list[str]]=None,
            since:int=None,
            until:int=None,
            limit:int=None,
        ):
        self.nostr_filter:dict = {}
        if isinstance(ids, list) and all(isinstance(item, str) for item in ids):
            self.nostr_filter.update(ids=list(ids))
        if isinstance(kinds, list) and all(isinstance(item, int) for item in kinds):
            self.nostr_filter.update(kinds=list(kinds))
        if isinstance(authors, list) and all(isinstance(item, str) for item in authors):
            self.nostr_filter.update(authors=list(authors))
        for name, values in (tags or {}).items():
            if isinstance(values, list) and all(isinstance(item, str) for item in values):
                self.nostr_filter[f"#{name}"] = list(values)
        if isinstance(since, int):
            self.nostr_filter.update(since=since)
        if isinstance(until, int):
            self.nostr_filter.update(until=until)
        if isinstance(limit, int):
            self.nostr_filter.update(limit=limit)

    def __repr__(self) -> str:
        return f"Filter({self.strFilter()})"

    def matchFilter(self, event:Event) -> bool:
        if "ids" in self.nostr_filter and event.id not in self.nostr_filter["ids"]:
            return False

        if "kinds" in self.nostr_filter and event.kind not in self.nostr_filter["kinds"]:
            return False

        if "authors" in self.nostr_filter and event.pubkey not in self.nostr_filter["authors"]:
            return False

        for key, values in self.nostr_filter.items():
            if key[0] != '#': continue
            if not any(v in values for v in event.getTagValues(key[1:])):
                return False

        if "since" in self.nostr_filter and event.created_at < self.nostr_filter["since"]:
            return False

        if "until" in self.nostr_filter and event.created_at > self.nostr_filter["until"]:
            return False

        return True

    def toDict(self) -> dict:
        return dict(self.nostr_filter)

    def strFilter(self) -> str:
        return json.dumps(self.nostr_filter)
