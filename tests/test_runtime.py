"""Tests for locationfix.runtime module."""

import threading
import time

from conftest import FakeAuthorization, FakeClock, FakeGeocoder, RecordingStream, make_sample
from locationfix import LocationFixCoordinator
from locationfix.config import FixConfig
from locationfix.models import (
    Phase,
    Resolved,
    SampleReceived,
    StartRequested,
    StopReason,
)
from locationfix.runtime import FixRuntime, ThreadingTimer


def _runtime(timer, geocoder=None, config=None, clock=None) -> FixRuntime:
    coordinator = LocationFixCoordinator(
        authorization=FakeAuthorization(),
        stream=RecordingStream(),
        geocoder=geocoder or FakeGeocoder(),
        timer=timer,
        config=config,
        clock=clock or FakeClock(),
    )
    return FixRuntime(coordinator)


class TestThreadingTimer:
    def test_fires(self):
        fired = threading.Event()
        timer = ThreadingTimer()
        timer.arm(0.01, fired.set)
        assert fired.wait(2.0)

    def test_disarm_prevents_fire(self):
        fired = threading.Event()
        timer = ThreadingTimer()
        timer.arm(0.2, fired.set)
        assert timer.armed is True
        timer.disarm()
        assert timer.armed is False
        assert not fired.wait(0.4)

    def test_disarm_is_idempotent(self):
        timer = ThreadingTimer()
        timer.disarm()
        timer.disarm()
        assert timer.armed is False

    def test_rearm_replaces_previous(self):
        calls = []
        timer = ThreadingTimer()
        timer.arm(0.2, lambda: calls.append("first"))
        timer.arm(0.01, lambda: calls.append("second"))
        time.sleep(0.4)
        assert calls == ["second"]


class TestFixRuntime:
    def test_events_wait_for_pump(self):
        runtime = _runtime(ThreadingTimer())
        runtime.post(StartRequested())
        assert runtime.coordinator.state.phase is Phase.IDLE

        assert runtime.process_pending() == 1
        assert runtime.coordinator.state.phase is Phase.SAMPLING
        assert runtime.view.button_label == "Stop"
        # stop again so the 60s timer thread is cancelled
        runtime.coordinator.handle(StartRequested())

    def test_callbacks_routed_through_queue(self):
        geocoder = FakeGeocoder()
        timer = ThreadingTimer()
        runtime = _runtime(timer, geocoder=geocoder)
        runtime.post(StartRequested())
        runtime.post(SampleReceived(make_sample(5.0)))
        runtime.process_pending()

        geocoder.complete(Resolved(("1 Infinite Loop",)))
        assert runtime.coordinator.state.geocode_in_flight is True
        assert runtime.process_pending() == 1
        assert runtime.view.address_text == "1 Infinite Loop"
        assert timer.armed is False

    def test_timeout_from_timer_thread(self):
        runtime = _runtime(ThreadingTimer(), config=FixConfig(timeout_seconds=0.05))
        runtime.post(StartRequested())
        view = runtime.run(lambda v: v.message == "Error Getting Location", timeout=5.0)

        assert view.message == "Error Getting Location"
        assert runtime.coordinator.state.stop_reason is StopReason.TIMED_OUT

    def test_run_gives_up_after_timeout(self):
        runtime = _runtime(ThreadingTimer())
        started = time.monotonic()
        view = runtime.run(lambda v: v.can_tag, timeout=0.2, poll_interval=0.05)
        assert view.can_tag is False
        assert time.monotonic() - started < 2.0
