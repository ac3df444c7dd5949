"""Tests for EventDispatcher."""

import threading
from unittest.mock import Mock

import pytest

from conftest import RecordingSink, wait_until
from tourbridge.dispatch import EventDispatcher
from tourbridge.protocols import ConnectionEvent, ConnectionInfo, ControlEvent, EventSink

INFO = ConnectionInfo(ip="127.0.0.1", port=5000)


@pytest.mark.unit
class TestEventDispatcher:
    """Queue-backed delivery on one thread."""

    def test_delivers_in_order(self):
        sink = RecordingSink()
        dispatcher = EventDispatcher(sink, raw_sink=sink.on_raw_data)
        dispatcher.start()

        dispatcher.on_connection_event(ConnectionEvent.CONNECT, INFO)
        dispatcher.on_raw_data(b"\xc4")
        dispatcher.on_control_event(ControlEvent("Knob CW", 1, 196))
        dispatcher.on_connection_event(ConnectionEvent.DISCONNECT, INFO)
        dispatcher.stop()

        assert [kind for kind, _ in sink.log] == ["connect", "raw", "control", "disconnect"]

    def test_single_delivery_thread(self):
        threads = set()
        sink = Mock(spec=EventSink)
        sink.on_control_event.side_effect = lambda event: threads.add(threading.current_thread().name)

        dispatcher = EventDispatcher(sink)
        dispatcher.start()

        producers = [
            threading.Thread(
                target=lambda: [dispatcher.on_control_event(ControlEvent("Knob CW", 1, 196)) for _ in range(20)]
            )
            for _ in range(4)
        ]
        for producer in producers:
            producer.start()
        for producer in producers:
            producer.join()

        dispatcher.stop()
        assert sink.on_control_event.call_count == 80
        assert threads == {"tourbridge-dispatcher"}

    def test_stop_drains_queue(self):
        sink = RecordingSink()
        dispatcher = EventDispatcher(sink)
        dispatcher.start()
        for _ in range(50):
            dispatcher.on_control_event(ControlEvent("Dial CW", 1, 207))
        dispatcher.stop()

        assert len(sink.controls) == 50

    def test_events_dropped_when_not_running(self):
        sink = RecordingSink()
        dispatcher = EventDispatcher(sink)

        dispatcher.on_control_event(ControlEvent("Dial CW", 1, 207))
        assert dispatcher.pending == 0

        dispatcher.start()
        dispatcher.stop()
        assert sink.controls == []

    def test_sink_error_does_not_stop_delivery(self):
        sink = Mock(spec=EventSink)
        sink.on_control_event.side_effect = [RuntimeError("boom"), None]

        dispatcher = EventDispatcher(sink)
        dispatcher.start()
        dispatcher.on_control_event(ControlEvent("Knob CW", 1, 196))
        dispatcher.on_control_event(ControlEvent("Knob CCW", 1, 132))
        dispatcher.stop()

        assert sink.on_control_event.call_count == 2

    def test_raw_without_raw_sink(self):
        sink = RecordingSink()
        dispatcher = EventDispatcher(sink)
        dispatcher.start()
        dispatcher.on_raw_data(b"\x22")
        dispatcher.on_control_event(ControlEvent("C1 Press", 1, 34))
        dispatcher.stop()

        assert sink.raw == []
        assert len(sink.controls) == 1

    def test_start_twice_and_restart(self):
        sink = RecordingSink()
        dispatcher = EventDispatcher(sink)
        dispatcher.start()
        dispatcher.start()
        assert dispatcher.is_running
        dispatcher.stop()
        assert not dispatcher.is_running

        dispatcher.start()
        dispatcher.on_control_event(ControlEvent("C1 Press", 1, 34))
        assert wait_until(lambda: len(sink.controls) == 1)
        dispatcher.stop()

    def test_restart_after_stop_times_out(self):
        """A restart waits for the old thread's slow callback instead of racing it."""
        release = threading.Event()
        delivered = []
        threads = set()

        class SlowSink(RecordingSink):
            def on_control_event(self, event):
                threads.add(threading.current_thread().ident)
                if event.name == "C1 Press":
                    release.wait(timeout=5.0)
                delivered.append(event.name)

        dispatcher = EventDispatcher(SlowSink(), join_timeout=0.1)
        dispatcher.start()
        dispatcher.on_control_event(ControlEvent("C1 Press", 1, 34))
        dispatcher.on_control_event(ControlEvent("C2 Press", 1, 35))
        assert wait_until(lambda: len(threads) == 1)

        dispatcher.stop()
        assert not dispatcher.is_running

        dispatcher.start()
        dispatcher.on_control_event(ControlEvent("C1 Release", 1, 162))
        assert not wait_until(lambda: "C1 Release" in delivered, timeout=0.2)

        release.set()
        assert wait_until(lambda: len(delivered) == 3)
        dispatcher.stop()

        assert delivered == ["C1 Press", "C2 Press", "C1 Release"]
        assert len(threads) == 2

    def test_stop_from_sink_callback(self):
        """A consumer may stop the dispatcher from inside a callback."""
        dispatcher = None

        class StoppingSink(RecordingSink):
            def on_control_event(self, event):
                super().on_control_event(event)
                dispatcher.stop()

        sink = StoppingSink()
        dispatcher = EventDispatcher(sink)
        dispatcher.start()
        dispatcher.on_control_event(ControlEvent("C1 Press", 1, 34))

        assert wait_until(lambda: not dispatcher.is_running)
        assert len(sink.controls) == 1

    def test_context_manager(self):
        sink = RecordingSink()
        with EventDispatcher(sink) as dispatcher:
            assert dispatcher.is_running
            dispatcher.on_connection_event(ConnectionEvent.CONNECT, INFO)
        assert not dispatcher.is_running
        assert sink.connections == [(ConnectionEvent.CONNECT, INFO)]
