__version__ = "0.1.0"

from typing import Tuple
from .chat import (
    DirectChat,
    Receiver,
    Sender,
)
from .event import Event
from .filter import Filter
from .identity import Identity, decodePeer
from .relay import Relay, Subscription
__all__: Tuple[str, ...] = (
    "DirectChat",
    "Event",
    "Filter",
    "Identity",
    "Receiver",
    "Relay",
    "Sender",
    "Subscription",
    "decodePeer",
)

def __dir__() -> Tuple[str, ...]:
    return __all__ + ("__doc__",)
