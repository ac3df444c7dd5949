"""One accepted console connection."""

import logging
import socket
import threading
from collections.abc import Callable
from typing import Optional

from tourbridge.exceptions import PeerClosedError, ReadError
from tourbridge.protocol.decoder import ControlDecoder, to_hex
from tourbridge.protocols.events import ConnectionEvent, ConnectionInfo
from tourbridge.protocols.observers import EventSink

logger = logging.getLogger(__name__)


class Session:
    """
    Reads one console connection until it ends.

    The owning listener emits CONNECT before starting the session thread;
    the session emits exactly one DISCONNECT when its read loop ends, for
    whatever reason, and then closes the socket.
    """

    def __init__(
        self,
        sock: socket.socket,
        info: ConnectionInfo,
        decoder: ControlDecoder,
        sink: EventSink,
        raw_sink: Optional[Callable[[bytes], None]] = None,
        recv_size: int = 1024,
        read_timeout: Optional[float] = None,
        on_finished: Optional[Callable[["Session"], None]] = None,
    ):
        """
        Initialize session.

        Args:
            sock: Accepted client socket
            info: Peer address captured at accept time
            decoder: Decoder bound to the server's button state store
            sink: Receives DISCONNECT and control events
            raw_sink: Optional receiver of each chunk, before decoding
            recv_size: Maximum bytes per read
            read_timeout: Per-read deadline; None blocks
            on_finished: Called with this session once it has closed
        """
        self._sock = sock
        self.info = info
        self._decoder = decoder
        self._sink = sink
        self._raw_sink = raw_sink
        self._recv_size = recv_size
        self._on_finished = on_finished
        self._stop_requested = threading.Event()
        self._running = False
        self._thread: Optional[threading.Thread] = None

        self._sock.settimeout(read_timeout)

    # ================================================================
    # LIFECYCLE
    # ================================================================

    def start(self) -> None:
        """Run the read loop on its own daemon thread."""
        self._thread = threading.Thread(
            target=self.run, name=f"tourbridge-session-{self.info}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """
        Ask the read loop to end.

        Shutting the socket down makes a blocked recv() return, so the
        loop exits promptly even while the console is idle.
        """
        self._stop_requested.set()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already closed by the peer or by run()
            pass

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the read loop to finish.

        Returns:
            True if the thread has exited
        """
        if self._thread is None or self._thread is threading.current_thread():
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    @property
    def is_running(self) -> bool:
        return self._running

    # ================================================================
    # READ LOOP
    # ================================================================

    def run(self) -> None:
        """Blocking read loop. Returns once the connection has ended."""
        self._running = True
        logger.debug(f"Session {self.info} started")
        try:
            while not self._stop_requested.is_set():
                try:
                    data = self._read()
                except socket.timeout:
                    continue
                self._forward(data)

        except PeerClosedError as e:
            if not self._stop_requested.is_set():
                logger.info(e.user_message)

        except ReadError as e:
            if not self._stop_requested.is_set():
                logger.warning(e.log_line)
            else:
                logger.debug(f"Session {self.info} read interrupted by stop")

        finally:
            self._running = False
            self._close()

    def _read(self) -> bytes:
        try:
            data = self._sock.recv(self._recv_size)
        except socket.timeout:
            raise
        except OSError as e:
            raise ReadError(str(self.info), str(e)) from e

        if not data:
            raise PeerClosedError(str(self.info))
        return data

    def _forward(self, data: bytes) -> None:
        """Hand one chunk to the raw sink, then its decoded events to the sink."""
        logger.debug(f"Received {to_hex(data)} from {self.info}")

        if self._raw_sink is not None:
            try:
                self._raw_sink(data)
            except Exception as e:
                logger.error(f"Error in raw data sink: {e}", exc_info=True)

        # The decoder updates held state as it goes, so it must run to the end
        for event in self._decoder.decode(data):
            try:
                self._sink.on_control_event(event)
            except Exception as e:
                logger.error(f"Error delivering {event.name} from {self.info}: {e}", exc_info=True)

    def _close(self) -> None:
        try:
            self._sink.on_connection_event(ConnectionEvent.DISCONNECT, self.info)
        except Exception as e:
            logger.error(f"Error delivering disconnect for {self.info}: {e}", exc_info=True)

        try:
            self._sock.close()
        except OSError as e:
            logger.debug(f"Error closing socket for {self.info}: {e}")

        logger.debug(f"Session {self.info} ended")

        if self._on_finished is not None:
            self._on_finished(self)
