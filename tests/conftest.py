"""Pytest fixtures for tests."""

import socket
import threading
import time

import pytest

from tourbridge.core import ButtonStateStore
from tourbridge.models import BridgeConfig
from tourbridge.protocols import ConnectionEvent, ConnectionInfo, ControlEvent

WAIT_TIMEOUT = 3.0


def wait_until(predicate, timeout: float = WAIT_TIMEOUT, interval: float = 0.01) -> bool:
    """Poll predicate until it returns True or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class RecordingSink:
    """Thread-safe EventSink that records everything it receives."""

    def __init__(self):
        self._lock = threading.Lock()
        self.connections: list[tuple[ConnectionEvent, ConnectionInfo]] = []
        self.controls: list[ControlEvent] = []
        self.raw: list[bytes] = []
        # Combined log in arrival order: ("raw", bytes) / ("connect", info) / ("control", event)
        self.log: list[tuple[str, object]] = []

    def on_connection_event(self, event: ConnectionEvent, info: ConnectionInfo) -> None:
        with self._lock:
            self.connections.append((event, info))
            self.log.append((event.value, info))

    def on_control_event(self, event: ControlEvent) -> None:
        with self._lock:
            self.controls.append(event)
            self.log.append(("control", event))

    def on_raw_data(self, data: bytes) -> None:
        with self._lock:
            self.raw.append(data)
            self.log.append(("raw", data))

    def control_pairs(self) -> list[tuple[str, int]]:
        with self._lock:
            return [(event.name, event.count) for event in self.controls]

    def count(self, event: ConnectionEvent) -> int:
        with self._lock:
            return sum(1 for recorded, _ in self.connections if recorded is event)


@pytest.fixture
def sink():
    """Recording event sink."""
    return RecordingSink()


@pytest.fixture
def store():
    """Empty button state store."""
    return ButtonStateStore()


@pytest.fixture
def fast_config():
    """Config with short timeouts, bound to an ephemeral loopback port."""
    return BridgeConfig(port=0, accept_timeout=0.05, join_timeout=2.0)


@pytest.fixture
def connect():
    """Open loopback client connections; all are closed at teardown."""
    clients: list[socket.socket] = []

    def _connect(port: int) -> socket.socket:
        client = socket.create_connection(("127.0.0.1", port), timeout=WAIT_TIMEOUT)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        try:
            client.close()
        except OSError:
            pass
