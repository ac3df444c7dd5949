"""High-level TourBox bridge.

TourBoxBridge ties the pieces together for applications:

::

    Console ──TCP──► Listener/Session ──► EventDispatcher ──► TourBoxBridge
                     (server threads)      (queue + thread)     ├─ observers
                                                                ├─ named callbacks
                                                                └─ raw callbacks

Server threads never call application code directly: every event goes
through the dispatcher, so callbacks and observers always run on the
dispatcher thread, one at a time, in arrival order.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, Optional

from tourbridge.dispatch import EventDispatcher, ObserverManager
from tourbridge.exceptions import ErrorContext
from tourbridge.models.config import BridgeConfig
from tourbridge.protocol.controls import CONTROL_TABLE, ControlTable
from tourbridge.protocols.events import ConnectionEvent, ConnectionInfo, ControlEvent
from tourbridge.protocols.observers import BridgeObserver
from tourbridge.server import ServerRegistry

logger = logging.getLogger(__name__)

ANY_EVENT = "*"


class TourBoxBridge:
    """
    Receives TourBox console input and delivers it to application code.

    Example:
        ```python
        with TourBoxBridge() as bridge:
            bridge.on("Knob CW", lambda count: print(f"knob +{count}"))
            bridge.on("connect", lambda info: print(f"console at {info}"))
            bridge.start_server()
            ...
        ```

    Named callbacks:
        - ``"connect"`` / ``"disconnect"``: called with the ConnectionInfo
        - a control name (e.g. ``"C1 Press"``): called with the run count
        - ``"*"``: called with ``(event_name, payload)`` for every event
    """

    def __init__(self, config: Optional[BridgeConfig] = None, table: ControlTable = CONTROL_TABLE):
        """
        Initialize bridge. No sockets are opened until start_server().

        Args:
            config: Defaults for start_server() and socket settings
            table: Control table used for decoding and name lookups
        """
        self.config = config or BridgeConfig()
        self._table = table
        self._registry = ServerRegistry(table)
        self._dispatcher = EventDispatcher(
            self, raw_sink=self._deliver_raw, join_timeout=self.config.join_timeout
        )

        self._observers = ObserverManager[BridgeObserver](observer_type_name="bridge")
        self._raw_callbacks = ObserverManager[Callable[[bytes], None]](observer_type_name="raw callback")
        self._callbacks: dict[str, ObserverManager[Callable[..., Any]]] = {}
        self._callbacks_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()

    # ================================================================
    # SERVERS
    # ================================================================

    def start_server(self, port: Optional[int] = None, bind_address: Optional[str] = None) -> int:
        """
        Start listening for a console.

        Args:
            port: Port to bind (config default if None, 0 picks a free port)
            bind_address: IPv4 address to bind (config default if None)

        Returns:
            Server id

        Raises:
            BindError: If the address could not be bound
        """
        port = self.config.port if port is None else port
        bind_address = self.config.bind_address if bind_address is None else bind_address

        with self._lifecycle_lock:
            if not self._dispatcher.is_running:
                self._dispatcher.start()

            try:
                with ErrorContext(f"start server on {bind_address}:{port}", logger):
                    return self._registry.create(
                        port=port,
                        bind_address=bind_address,
                        event_sink=self._dispatcher,
                        raw_sink=self._dispatcher.on_raw_data,
                        config=self.config,
                    )
            except Exception:
                if len(self._registry) == 0:
                    self._dispatcher.stop()
                raise

    def stop_server(self, server_id: Optional[int] = None) -> bool:
        """
        Stop one server, or every server when server_id is None.

        Events produced while stopping (such as disconnects) are still
        delivered before the dispatcher shuts down.

        Returns:
            True if at least one server was stopped
        """
        with self._lifecycle_lock:
            if server_id is None:
                stopped = self._registry.stop_all() > 0
            else:
                stopped = self._registry.stop(server_id)

            if len(self._registry) == 0:
                self._dispatcher.stop()
        return stopped

    def server_port(self, server_id: int) -> Optional[int]:
        """Bound port of a running server, or None for an unknown id."""
        listener = self._registry.get(server_id)
        return listener.port if listener is not None else None

    @property
    def server_ids(self) -> list[int]:
        return self._registry.server_ids

    @property
    def is_running(self) -> bool:
        """True while at least one server is listening."""
        return len(self._registry) > 0

    def is_held(self, name: str, server_id: Optional[int] = None) -> bool:
        """
        Check whether a button is held down.

        Args:
            name: Control name; "C1" is accepted for "C1 Press"
            server_id: Limit the query to one server; None checks all
        """
        return self._registry.is_held(name, server_id)

    def available_controls(self) -> list[str]:
        """All control names, in control table order."""
        return self._table.names

    def close(self) -> None:
        """Stop all servers and the dispatcher."""
        self.stop_server()
        self._dispatcher.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ================================================================
    # SUBSCRIPTIONS
    # ================================================================

    def on(self, event_name: str, callback: Callable[..., Any]) -> "TourBoxBridge":
        """
        Register a named callback.

        Raises:
            TypeError: If callback is not callable
            ValueError: If event_name is not a control name, "connect",
                "disconnect" or "*"
        """
        if not callable(callback):
            raise TypeError(f"Callback for '{event_name}' must be callable, got {type(callback).__name__}")
        if not self._is_known_event(event_name):
            raise ValueError(
                f"Unknown event '{event_name}'. Use 'connect', 'disconnect', '*' or one of: "
                f"{', '.join(self._table.names)}"
            )

        with self._callbacks_lock:
            manager = self._callbacks.get(event_name)
            if manager is None:
                manager = ObserverManager[Callable[..., Any]](observer_type_name=f"'{event_name}' callback")
                self._callbacks[event_name] = manager
        manager.register(callback)
        return self

    def off(self, event_name: str, callback: Callable[..., Any]) -> "TourBoxBridge":
        """Remove a named callback registered with on()."""
        with self._callbacks_lock:
            manager = self._callbacks.get(event_name)
        if manager is not None:
            manager.unregister(callback)
        return self

    def raw(self, callback: Callable[[bytes], None]) -> "TourBoxBridge":
        """
        Register a callback for every raw chunk received from any console.

        Raises:
            TypeError: If callback is not callable
        """
        if not callable(callback):
            raise TypeError(f"Raw callback must be callable, got {type(callback).__name__}")
        self._raw_callbacks.register(callback)
        return self

    def register_observer(self, observer: BridgeObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: BridgeObserver) -> None:
        self._observers.unregister(observer)

    def _is_known_event(self, event_name: str) -> bool:
        if event_name == ANY_EVENT:
            return True
        if event_name in (ConnectionEvent.CONNECT.value, ConnectionEvent.DISCONNECT.value):
            return True
        return self._table.get_by_name(event_name) is not None

    # ================================================================
    # EventSink (dispatcher thread)
    # ================================================================

    def on_connection_event(self, event: ConnectionEvent, info: ConnectionInfo) -> None:
        self._observers.notify("on_connection_event", event, info)
        self._emit(event.value, info)

    def on_control_event(self, event: ControlEvent) -> None:
        self._observers.notify("on_control_event", event)
        self._emit(event.name, event.count)

    def _emit(self, event_name: str, payload: Any) -> None:
        with self._callbacks_lock:
            named = self._callbacks.get(event_name)
            catch_all = self._callbacks.get(ANY_EVENT)

        if named is not None:
            named.call_all(payload)
        if catch_all is not None:
            catch_all.call_all(event_name, payload)

    def _deliver_raw(self, data: bytes) -> None:
        self._raw_callbacks.call_all(data)
