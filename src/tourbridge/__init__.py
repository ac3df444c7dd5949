"""TourBox Bridge: receive TourBox Elite console input over TCP."""

__version__ = "0.1.0"

from .bridge import TourBoxBridge
from .models import BridgeConfig
from .protocol import CONTROL_TABLE, ControlDecoder, ControlTable
from .protocols import BridgeObserver, ConnectionEvent, ConnectionInfo, ControlEvent, EventSink
from .server import ServerRegistry

__all__ = [
    "BridgeConfig",
    "BridgeObserver",
    "CONTROL_TABLE",
    "ConnectionEvent",
    "ConnectionInfo",
    "ControlDecoder",
    "ControlEvent",
    "ControlTable",
    "EventSink",
    "ServerRegistry",
    "TourBoxBridge",
]
