"""Events delivered by the bridge.

These are plain dataclasses rather than Pydantic models because one is
created per decoded run of bytes on the session threads, and they are
never serialized.

- Connection events: a console connected or disconnected
- Control events: a named control fired, with its run-length count
"""

from dataclasses import dataclass
from enum import Enum


class ConnectionEvent(Enum):
    """Console connection lifecycle."""

    CONNECT = "connect"          # Console connection accepted
    DISCONNECT = "disconnect"    # Console connection ended (peer close, read error or stop)


@dataclass(frozen=True, slots=True)
class ConnectionInfo:
    """Peer address captured when a connection is accepted."""

    ip: str
    port: int
    server_id: int = 0

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True, slots=True)
class ControlEvent:
    """
    One run-length group resolved to a control.

    ``count`` is the number of identical consecutive bytes in the group:
    rotation ticks for knob/dial/scroll, repeat ticks for a held button.
    """

    name: str
    count: int
    code: int
    server_id: int = 0
