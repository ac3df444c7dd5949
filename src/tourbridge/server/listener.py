"""TCP listener for one bridge server."""

import logging
import socket
import threading
from collections.abc import Callable
from typing import Optional

from tourbridge.core.button_state import ButtonStateStore
from tourbridge.exceptions import AcceptError, wrap_bind_error
from tourbridge.models.config import BridgeConfig
from tourbridge.protocol.controls import CONTROL_TABLE, ControlTable
from tourbridge.protocol.decoder import ControlDecoder
from tourbridge.protocols.events import ConnectionEvent, ConnectionInfo
from tourbridge.protocols.observers import EventSink

from .session import Session

logger = logging.getLogger(__name__)


class Listener:
    """
    Accepts console connections on one address and port.

    Owns the listening socket, the accept thread, the live sessions and the
    ButtonStateStore those sessions share.
    """

    def __init__(
        self,
        server_id: int,
        port: int,
        bind_address: str,
        sink: EventSink,
        raw_sink: Optional[Callable[[bytes], None]] = None,
        config: Optional[BridgeConfig] = None,
        table: ControlTable = CONTROL_TABLE,
    ):
        """
        Initialize listener.

        Args:
            server_id: Registry id, stamped on every event
            port: Port to bind (0 picks a free port)
            bind_address: IPv4 address to bind
            sink: Receives connection and control events
            raw_sink: Optional receiver of raw chunks
            config: Socket and timeout settings (defaults if None)
            table: Control table for decoding
        """
        self.server_id = server_id
        self.bind_address = bind_address
        self._requested_port = port
        self._sink = sink
        self._raw_sink = raw_sink
        self._config = config or BridgeConfig()
        self._table = table

        self.store = ButtonStateStore(table)

        self._sock: Optional[socket.socket] = None
        self._bound_port: Optional[int] = None
        self._running = False
        self._accept_thread: Optional[threading.Thread] = None
        self._sessions: set[Session] = set()
        self._sessions_lock = threading.Lock()

    # ================================================================
    # LIFECYCLE
    # ================================================================

    def start(self) -> None:
        """
        Bind, listen and start the accept thread.

        Raises:
            BindError: If the socket could not be bound or put into listen mode
        """
        if self._running:
            logger.warning(f"Server {self.server_id} is already running")
            return

        host, port = self.bind_address, self._requested_port
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(self._config.backlog)
            sock.settimeout(self._config.accept_timeout)
        except (OSError, ValueError, TypeError, OverflowError) as e:
            sock.close()
            raise wrap_bind_error(e, host, port) from e

        self._sock = sock
        self._bound_port = sock.getsockname()[1]
        self._running = True
        self._accept_thread = threading.Thread(
            target=self._accept_loop,
            name=f"tourbridge-accept-{self.server_id}",
            daemon=True,
        )
        self._accept_thread.start()
        logger.info(f"Server {self.server_id} listening on {host}:{self._bound_port}")

    def stop(self) -> None:
        """
        Stop accepting, end every live session and clear held state.

        Safe to call more than once and from any thread.
        """
        if not self._running:
            return
        self._running = False

        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Listening sockets are not connected on most platforms
                pass
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Error closing listening socket: {e}")

        # Join accept first so no session is added after the snapshot below
        join_timeout = self._config.join_timeout
        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join(timeout=join_timeout)
            if self._accept_thread.is_alive():
                logger.warning(f"Server {self.server_id} accept thread did not exit in time")

        with self._sessions_lock:
            sessions = list(self._sessions)
        for session in sessions:
            session.stop()

        for session in sessions:
            if not session.join(timeout=join_timeout):
                logger.warning(f"Session {session.info} did not exit in time")

        self.store.clear()
        logger.info(f"Server {self.server_id} stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def port(self) -> Optional[int]:
        """Bound port; differs from the requested port when 0 was requested."""
        return self._bound_port if self._bound_port is not None else self._requested_port

    @property
    def session_count(self) -> int:
        with self._sessions_lock:
            return len(self._sessions)

    def is_held(self, name: str) -> bool:
        """Check whether a named button is held on this server."""
        code = self._table.resolve_name(name)
        if code is None:
            return False
        return self.store.is_held(code)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # ================================================================
    # ACCEPT LOOP
    # ================================================================

    def _accept_loop(self) -> None:
        logger.debug(f"Server {self.server_id} accept loop started")
        while self._running:
            try:
                client, address = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                error = AcceptError(self.server_id, str(e))
                logger.warning(error.log_line)
                continue

            self._handle_client(client, address)

        logger.debug(f"Server {self.server_id} accept loop exited")

    def _handle_client(self, client: socket.socket, address: tuple) -> None:
        info = ConnectionInfo(ip=address[0], port=address[1], server_id=self.server_id)

        if not self._running:
            client.close()
            return

        session = Session(
            client,
            info,
            ControlDecoder(self.store, self._table, self.server_id),
            self._sink,
            raw_sink=self._raw_sink,
            recv_size=self._config.recv_size,
            read_timeout=self._config.read_timeout,
            on_finished=self._remove_session,
        )
        with self._sessions_lock:
            self._sessions.add(session)

        logger.info(f"Console connected from {info}")
        try:
            self._sink.on_connection_event(ConnectionEvent.CONNECT, info)
        except Exception as e:
            logger.error(f"Error delivering connect for {info}: {e}", exc_info=True)

        session.start()

    def _remove_session(self, session: Session) -> None:
        with self._sessions_lock:
            self._sessions.discard(session)
