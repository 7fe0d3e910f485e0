"""Shared test fixtures — recording collaborators and a controllable clock."""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from locationfix.config import FixConfig
from locationfix.models import AuthorizationState, Resolved, Sample

NOW = 1_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthorization:
    def __init__(self, status: AuthorizationState = AuthorizationState.AUTHORIZED):
        self.status = status
        self.requests = 0

    def current_authorization(self) -> AuthorizationState:
        return self.status

    def request_authorization(self) -> None:
        self.requests += 1


class RecordingStream:
    def __init__(self) -> None:
        self.start_calls: list[float] = []
        self.stop_calls = 0

    @property
    def streaming(self) -> bool:
        return len(self.start_calls) > self.stop_calls

    def start_streaming(self, desired_accuracy: float) -> None:
        self.start_calls.append(desired_accuracy)

    def stop_streaming(self) -> None:
        self.stop_calls += 1


class FakeGeocoder:
    """Keeps every lookup so tests can complete them in any order."""

    def __init__(self) -> None:
        self.lookups: list[tuple[Sample, Callable]] = []

    @property
    def samples(self) -> list[Sample]:
        return [sample for sample, _ in self.lookups]

    def lookup(self, sample, on_complete) -> None:
        self.lookups.append((sample, on_complete))

    def complete(self, outcome=None, index: int = -1) -> None:
        _, on_complete = self.lookups[index]
        on_complete(outcome if outcome is not None else Resolved(("1 Infinite Loop",)))


class FakeTimer:
    def __init__(self) -> None:
        self.arm_calls: list[float] = []
        self.disarm_calls = 0
        self._on_fire: Optional[Callable[[], None]] = None

    @property
    def armed(self) -> bool:
        return self._on_fire is not None

    def arm(self, duration_seconds, on_fire) -> None:
        self.arm_calls.append(duration_seconds)
        self._on_fire = on_fire

    def disarm(self) -> None:
        self.disarm_calls += 1
        self._on_fire = None

    def fire(self) -> None:
        assert self._on_fire is not None, "timer is not armed"
        on_fire, self._on_fire = self._on_fire, None
        on_fire()


class FakeNotices:
    def __init__(self) -> None:
        self.reasons: list = []

    def services_disabled(self, reason) -> None:
        self.reasons.append(reason)


def make_sample(
    accuracy: float,
    *,
    lat: float = 51.5034,
    lon: float = -0.1276,
    timestamp: float = NOW,
) -> Sample:
    return Sample(
        timestamp=timestamp,
        latitude=lat,
        longitude=lon,
        horizontal_accuracy=accuracy,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def auth() -> FakeAuthorization:
    return FakeAuthorization()


@pytest.fixture()
def stream() -> RecordingStream:
    return RecordingStream()


@pytest.fixture()
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture()
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture()
def notices() -> FakeNotices:
    return FakeNotices()


@pytest.fixture()
def make_coordinator(clock, auth, stream, geocoder, timer, notices):
    """Factory building a coordinator over the shared fakes."""
    from locationfix import LocationFixCoordinator

    def _make(config: Optional[FixConfig] = None):
        return LocationFixCoordinator(
            authorization=auth,
            stream=stream,
            geocoder=geocoder,
            timer=timer,
            notices=notices,
            config=config,
            clock=clock,
        )

    return _make


@pytest.fixture()
def coordinator(make_coordinator):
    return make_coordinator()


@pytest.fixture()
def sampling(coordinator):
    """A coordinator that has already started a sampling session."""
    from locationfix.models import StartRequested

    coordinator.handle(StartRequested())
    return coordinator
