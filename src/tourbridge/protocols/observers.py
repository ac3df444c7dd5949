"""Observer protocol definitions for bridge events.

- EventSink: receives connection and control events from the server threads
- BridgeObserver: receives the same events from the bridge's dispatcher thread
"""

from typing import Protocol, runtime_checkable

from .events import ConnectionEvent, ConnectionInfo, ControlEvent


@runtime_checkable
class EventSink(Protocol):
    """
    Destination for everything a server produces.

    A listener calls ``on_connection_event`` from its accept thread and
    each session calls both methods from its own thread, so implementations
    must be thread-safe. Events from one connection arrive in the order the
    bytes were read; events from different connections may interleave.
    """

    def on_connection_event(self, event: ConnectionEvent, info: ConnectionInfo) -> None:
        """
        Handle a console connecting or disconnecting.

        Args:
            event: CONNECT or DISCONNECT
            info: Peer address captured at accept time
        """
        ...

    def on_control_event(self, event: ControlEvent) -> None:
        """
        Handle a decoded control.

        Args:
            event: Control name, run-length count and originating code
        """
        ...


@runtime_checkable
class BridgeObserver(Protocol):
    """
    Observer registered on a TourBoxBridge.

    Threading:
        Called from the bridge's dispatcher thread, one event at a time.
        A slow observer delays every later event but never blocks socket
        reads.

    Error Handling:
        Exceptions raised by observers are caught and logged. They do not
        affect other observers or later events.
    """

    def on_connection_event(self, event: ConnectionEvent, info: ConnectionInfo) -> None:
        ...

    def on_control_event(self, event: ControlEvent) -> None:
        ...
