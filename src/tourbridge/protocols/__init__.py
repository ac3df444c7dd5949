"""Event types and observer protocols for the bridge."""

from .events import ConnectionEvent, ConnectionInfo, ControlEvent
from .observers import BridgeObserver, EventSink

__all__ = [
    "BridgeObserver",
    # Events
    "ConnectionEvent",
    "ConnectionInfo",
    "ControlEvent",
    # Observers
    "EventSink",
]
