"""Queue-backed event delivery on a single dispatcher thread."""

import logging
import threading
from collections.abc import Callable
from queue import Queue
from typing import Any

from tourbridge.protocols.events import ConnectionEvent, ConnectionInfo, ControlEvent
from tourbridge.protocols.observers import EventSink

logger = logging.getLogger(__name__)

_STOP = object()


class EventDispatcher:
    """
    Decouples server threads from the event consumer.

    Implements the EventSink protocol (plus ``on_raw_data``) by putting
    each call on a FIFO queue. One dispatcher thread drains the queue and
    replays the calls on the target sink, so the consumer sees every event
    on the same thread and in the order it was produced. Per-connection
    ordering is preserved because each session enqueues from one thread.

    Producers never block: the queue is unbounded.
    """

    def __init__(
        self,
        sink: EventSink,
        raw_sink: Callable[[bytes], None] | None = None,
        join_timeout: float = 2.0,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            sink: Target for connection and control events
            raw_sink: Optional target for raw byte chunks
            join_timeout: How long stop() waits for the thread (seconds)
        """
        self._sink = sink
        self._raw_sink = raw_sink
        self._join_timeout = join_timeout
        self._queue: Queue[Any] = Queue()
        self._thread: threading.Thread | None = None
        self._running = False
        self._state_lock = threading.Lock()

    # ================================================================
    # LIFECYCLE
    # ================================================================

    def start(self) -> None:
        """Start the dispatcher thread."""
        with self._state_lock:
            if self._running:
                logger.warning("EventDispatcher is already running")
                return
            self._running = True
            # A thread left over from a timed-out stop keeps its own queue, and
            # the new thread waits for it so only one thread ever delivers
            self._queue = Queue()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._queue, self._thread),
                name="tourbridge-dispatcher",
                daemon=True,
            )
            self._thread.start()
        logger.debug("EventDispatcher started")

    def stop(self) -> None:
        """
        Stop the dispatcher thread.

        Events already queued are delivered before the thread exits;
        events submitted afterwards are dropped.
        """
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            thread = self._thread
            self._queue.put(_STOP)

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._join_timeout)
            if thread.is_alive():
                logger.warning("EventDispatcher thread did not exit in time")
        logger.debug("EventDispatcher stopped")

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._running

    @property
    def pending(self) -> int:
        """Approximate number of queued, undelivered items."""
        return self._queue.qsize()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # ================================================================
    # EventSink (producer side, any thread)
    # ================================================================

    def on_connection_event(self, event: ConnectionEvent, info: ConnectionInfo) -> None:
        self._submit("on_connection_event", event, info)

    def on_control_event(self, event: ControlEvent) -> None:
        self._submit("on_control_event", event)

    def on_raw_data(self, data: bytes) -> None:
        self._submit("on_raw_data", bytes(data))

    def _submit(self, method: str, *args: Any) -> None:
        with self._state_lock:
            if not self._running:
                logger.debug(f"Dispatcher stopped, dropping {method}{args}")
                return
            self._queue.put((method, args))

    # ================================================================
    # CONSUMER SIDE (dispatcher thread)
    # ================================================================

    def _run(self, queue: Queue[Any], previous: threading.Thread | None) -> None:
        if previous is not None and previous.is_alive():
            previous.join()

        while True:
            item = queue.get()
            if item is _STOP:
                break

            method, args = item
            try:
                if method == "on_raw_data":
                    if self._raw_sink is not None:
                        self._raw_sink(*args)
                else:
                    getattr(self._sink, method)(*args)
            except Exception as e:
                logger.error(f"Error delivering {method}: {e}", exc_info=True)
