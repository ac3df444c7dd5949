"""Registry of running bridge servers."""

import logging
import threading
from collections.abc import Callable
from typing import Optional

from tourbridge.models.config import DEFAULT_BIND_ADDRESS, DEFAULT_PORT, BridgeConfig
from tourbridge.protocol.controls import CONTROL_TABLE, ControlTable
from tourbridge.protocols.observers import EventSink

from .listener import Listener

logger = logging.getLogger(__name__)


class ServerRegistry:
    """
    Creates, tracks and stops listeners by integer id.

    Ids start at 1, increase monotonically and are never reused within one
    registry. A server is registered only after it has bound successfully.
    """

    def __init__(self, table: ControlTable = CONTROL_TABLE):
        self._table = table
        self._servers: dict[int, Listener] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(
        self,
        port: int = DEFAULT_PORT,
        bind_address: str = DEFAULT_BIND_ADDRESS,
        event_sink: Optional[EventSink] = None,
        raw_sink: Optional[Callable[[bytes], None]] = None,
        config: Optional[BridgeConfig] = None,
    ) -> int:
        """
        Start a listener and register it.

        Args:
            port: Port to bind (0 picks a free port)
            bind_address: IPv4 address to bind
            event_sink: Receives connection and control events
            raw_sink: Optional receiver of raw chunks
            config: Socket and timeout settings

        Returns:
            The new server's id

        Raises:
            BindError: If the listener could not bind; nothing is registered
        """
        if event_sink is None:
            raise TypeError("event_sink is required")

        with self._lock:
            server_id = self._next_id
            self._next_id += 1

        listener = Listener(
            server_id,
            port,
            bind_address,
            event_sink,
            raw_sink=raw_sink,
            config=config,
            table=self._table,
        )
        listener.start()

        with self._lock:
            self._servers[server_id] = listener
        return server_id

    def stop(self, server_id: int) -> bool:
        """
        Stop and unregister one server.

        Returns:
            False if no server has that id
        """
        with self._lock:
            listener = self._servers.pop(server_id, None)
        if listener is None:
            logger.debug(f"No server with id {server_id}")
            return False
        listener.stop()
        return True

    def stop_all(self) -> int:
        """
        Stop every registered server.

        Returns:
            Number of servers stopped
        """
        with self._lock:
            listeners = list(self._servers.values())
            self._servers.clear()
        for listener in listeners:
            listener.stop()
        return len(listeners)

    def is_held(self, name: str, server_id: Optional[int] = None) -> bool:
        """
        Check whether a named button is held.

        Args:
            name: Control name, or its short form without " Press"
            server_id: Limit the query to one server; None checks all

        Returns:
            True if the button is held on the selected server(s)
        """
        if server_id is not None:
            listener = self.get(server_id)
            return listener.is_held(name) if listener is not None else False

        with self._lock:
            listeners = list(self._servers.values())
        return any(listener.is_held(name) for listener in listeners)

    def get(self, server_id: int) -> Optional[Listener]:
        with self._lock:
            return self._servers.get(server_id)

    @property
    def server_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._servers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._servers)

    def __contains__(self, server_id: object) -> bool:
        with self._lock:
            return server_id in self._servers
