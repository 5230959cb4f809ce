class NostrError(ValueError):
    pass

class KeyDecodeError(NostrError):
    pass

class EventError(NostrError):
    pass

class MessageError(NostrError):
    pass

class DecryptError(NostrError):
    pass

class RelayConnectionError(NostrError):
    pass

class PublishError(NostrError):
    pass
