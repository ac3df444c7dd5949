"""Tests for ObserverManager."""

import unittest
from unittest.mock import Mock

from tourbridge.dispatch import ObserverManager
from tourbridge.protocols import BridgeObserver, ConnectionEvent, ConnectionInfo


class TestObserverManager(unittest.TestCase):
    """Registration and error-isolated notification."""

    def setUp(self):
        self.manager = ObserverManager[BridgeObserver](observer_type_name="bridge")
        self.info = ConnectionInfo(ip="127.0.0.1", port=5000)

    def test_register_is_idempotent(self):
        observer = Mock(spec=BridgeObserver)
        self.manager.register(observer)
        self.manager.register(observer)
        assert len(self.manager) == 1
        assert observer in self.manager

    def test_unregister(self):
        observer = Mock(spec=BridgeObserver)
        self.manager.register(observer)
        self.manager.unregister(observer)
        assert len(self.manager) == 0
        assert not self.manager

    def test_unregister_unknown_does_not_raise(self):
        self.manager.unregister(Mock(spec=BridgeObserver))

    def test_notify(self):
        observer = Mock(spec=BridgeObserver)
        self.manager.register(observer)

        self.manager.notify("on_connection_event", ConnectionEvent.CONNECT, self.info)

        observer.on_connection_event.assert_called_once_with(ConnectionEvent.CONNECT, self.info)

    def test_failing_observer_does_not_block_others(self):
        failing = Mock(spec=BridgeObserver)
        failing.on_connection_event.side_effect = RuntimeError("boom")
        healthy = Mock(spec=BridgeObserver)
        self.manager.register(failing)
        self.manager.register(healthy)

        self.manager.notify("on_connection_event", ConnectionEvent.DISCONNECT, self.info)

        healthy.on_connection_event.assert_called_once_with(ConnectionEvent.DISCONNECT, self.info)

    def test_missing_method_is_logged(self):
        self.manager.register(object())
        self.manager.notify("on_control_event", None)

    def test_call_all(self):
        callbacks = ObserverManager(observer_type_name="callback")
        first, second = Mock(), Mock(side_effect=ValueError("bad"))
        third = Mock()
        for callback in (first, second, third):
            callbacks.register(callback)

        callbacks.call_all("Knob CW", 3)

        first.assert_called_once_with("Knob CW", 3)
        third.assert_called_once_with("Knob CW", 3)

    def test_unregister_during_notify(self):
        """Observers may unregister themselves from inside a callback."""
        observer = Mock(spec=BridgeObserver)
        observer.on_connection_event.side_effect = lambda *args: self.manager.unregister(observer)
        self.manager.register(observer)

        self.manager.notify("on_connection_event", ConnectionEvent.CONNECT, self.info)

        assert observer not in self.manager

    def test_clear(self):
        self.manager.register(Mock(spec=BridgeObserver))
        self.manager.register(Mock(spec=BridgeObserver))
        self.manager.clear()
        assert len(self.manager) == 0
