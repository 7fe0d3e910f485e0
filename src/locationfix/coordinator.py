"""LocationFixCoordinator — the state machine behind a location fix session."""

from __future__ import annotations

import dataclasses
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from locationfix import debouncer, selector
from locationfix.config import FixConfig
from locationfix.debouncer import GeocodeAction
from locationfix.exceptions import (
    AuthorizationDenied,
    AuthorizationRestricted,
    GeocodeFailure,
    LocationFixError,
    SamplingError,
    SamplingErrorKind,
    TimeoutExceeded,
)
from locationfix.geodesy import distance_between
from locationfix.models import (
    AuthorizationChanged,
    AuthorizationState,
    Event,
    Failed,
    GeocodeCompleted,
    GeocodeOutcome,
    Pending,
    Phase,
    Sample,
    SampleReceived,
    SampleStreamFailed,
    StartRequested,
    StopReason,
    TimeoutFired,
    ViewState,
)
from locationfix.projection import project

logger = logging.getLogger(__name__)


# ── Collaborator interfaces ───────────────────────────────────


class AuthorizationProvider(Protocol):
    def current_authorization(self) -> AuthorizationState: ...

    def request_authorization(self) -> None:
        """Prompt the user; the answer arrives as AuthorizationChanged."""
        ...


class SampleStream(Protocol):
    """Delivers SampleReceived / SampleStreamFailed events while running."""

    def start_streaming(self, desired_accuracy: float) -> None: ...

    def stop_streaming(self) -> None: ...


class GeocodeProvider(Protocol):
    def lookup(
        self, sample: Sample, on_complete: Callable[[GeocodeOutcome], None]
    ) -> None:
        """Start a reverse geocode; call *on_complete* exactly once."""
        ...


class Timer(Protocol):
    def arm(self, duration_seconds: float, on_fire: Callable[[], None]) -> None: ...

    def disarm(self) -> None: ...


class NoticeSink(Protocol):
    def services_disabled(self, reason: LocationFixError) -> None: ...


# ── State ─────────────────────────────────────────────────────


@dataclass
class CoordinatorState:
    """Every mutable field of a session. Owned by the coordinator."""

    authorization: AuthorizationState = AuthorizationState.UNDETERMINED
    phase: Phase = Phase.IDLE
    stop_reason: Optional[StopReason] = None
    best_sample: Optional[Sample] = None
    last_sample_error: Optional[SamplingError] = None
    geocode_outcome: GeocodeOutcome = field(default_factory=Pending)
    geocode_in_flight: bool = False
    last_geocode_error: Optional[GeocodeFailure] = None
    timeout_armed: bool = False
    session: int = 0

    @property
    def is_sampling(self) -> bool:
        return self.phase is Phase.SAMPLING


class LocationFixCoordinator:
    """
    Turn a noisy sample stream into one best fix plus its address.

    All collaborators are injected. Their callbacks must route results
    back through ``dispatch`` (by default ``handle``); events raised while
    a handler runs are queued and processed after it returns, so handlers
    never nest.
    """

    def __init__(
        self,
        *,
        authorization: AuthorizationProvider,
        stream: SampleStream,
        geocoder: GeocodeProvider,
        timer: Timer,
        notices: Optional[NoticeSink] = None,
        config: Optional[FixConfig] = None,
        clock: Callable[[], float] = time.time,
        dispatch: Optional[Callable[[Event], object]] = None,
    ):
        self._authorization = authorization
        self._stream = stream
        self._geocoder = geocoder
        self._timer = timer
        self._notices = notices
        self._config = config or FixConfig()
        self._clock = clock
        self.dispatch: Callable[[Event], object] = dispatch or self.handle

        self._state = CoordinatorState(
            authorization=authorization.current_authorization()
        )
        self._pending: deque = deque()
        self._handling = False
        self._handlers = {
            StartRequested: self._on_start_requested,
            SampleReceived: self._on_sample_received,
            SampleStreamFailed: self._on_stream_failed,
            TimeoutFired: self._on_timeout,
            GeocodeCompleted: self._on_geocode_completed,
            AuthorizationChanged: self._on_authorization_changed,
        }

    # ── Public API ────────────────────────────────────────────────

    @property
    def config(self) -> FixConfig:
        return self._config

    @property
    def state(self) -> CoordinatorState:
        """A copy of the current state."""
        return dataclasses.replace(self._state)

    def handle(self, event: Event) -> ViewState:
        """Process *event* and return the resulting view state."""
        if type(event) not in self._handlers:
            raise TypeError(f"Unsupported event: {event!r}")

        self._pending.append(event)
        if not self._handling:
            self._handling = True
            try:
                while self._pending:
                    queued = self._pending.popleft()
                    self._handlers[type(queued)](queued)
            except Exception:
                self._pending.clear()
                raise
            finally:
                self._handling = False
        return self.current_view_state()

    def current_view_state(self) -> ViewState:
        return project(self._state)

    # ── Event handlers ────────────────────────────────────────────

    def _on_start_requested(self, event: StartRequested) -> None:
        state = self._state
        state.authorization = self._authorization.current_authorization()

        if state.authorization is AuthorizationState.UNDETERMINED:
            logger.info("Location authorization undetermined; requesting")
            self._authorization.request_authorization()
            return
        if state.authorization is AuthorizationState.DENIED:
            self._notify_disabled(AuthorizationDenied())
            return
        if state.authorization is AuthorizationState.RESTRICTED:
            self._notify_disabled(AuthorizationRestricted())
            return

        if state.is_sampling:
            self._stop(StopReason.USER_REQUESTED)
        else:
            self._start_sampling()

    def _on_sample_received(self, event: SampleReceived) -> None:
        state = self._state
        if not state.is_sampling:
            logger.debug("Sample ignored outside a sampling session")
            return

        cfg = self._config
        sample = event.sample
        previous = state.best_sample
        decision = selector.evaluate(
            previous,
            sample,
            cfg.desired_accuracy,
            now=self._clock(),
            max_age=cfg.max_sample_age,
        )
        distance = distance_between(previous, sample)

        if not decision.replaces:
            logger.debug("Sample ignored (%s)", decision.reason.value)
            # Repeated readings that never improve also count as stagnation.
            if decision.reason is selector.IgnoreReason.NOT_MORE_ACCURATE and (
                debouncer.is_stagnant(
                    previous,
                    sample,
                    distance,
                    min_distance=cfg.stagnation_distance,
                    interval=cfg.stagnation_interval,
                )
            ):
                self._stop(StopReason.STAGNATED)
            return

        # Debounce against the state that still holds the previous fix.
        action = debouncer.decide(
            state,
            sample,
            distance,
            decision.converged,
            min_distance=cfg.stagnation_distance,
            interval=cfg.stagnation_interval,
        )
        state.last_sample_error = None
        state.best_sample = sample
        logger.debug(
            "Accepted sample %.6f,%.6f ±%.1fm",
            sample.latitude,
            sample.longitude,
            sample.horizontal_accuracy,
        )

        if decision.converged:
            self._stop(StopReason.CONVERGED)

        if action is GeocodeAction.LAUNCH:
            self._launch_geocode(sample)
        elif action is GeocodeAction.FORCE_RELAUNCH:
            state.geocode_in_flight = False
            self._launch_geocode(sample)
        elif action is GeocodeAction.STOP_STAGNATED:
            if state.is_sampling:
                self._stop(StopReason.STAGNATED)
        else:
            logger.debug("Geocode suppressed; lookup already in flight")

    def _on_stream_failed(self, event: SampleStreamFailed) -> None:
        state = self._state
        if not state.is_sampling:
            return
        error = event.error
        if error.kind is SamplingErrorKind.LOCATION_UNKNOWN:
            logger.debug("Transient sampling glitch: %s", error)
            return

        logger.warning("Location sampling failed: %s", error)
        state.last_sample_error = error
        self._stop(StopReason.FATAL_ERROR)

    def _on_timeout(self, event: TimeoutFired) -> None:
        state = self._state
        if not state.is_sampling:
            return
        if event.session is not None and event.session != state.session:
            logger.debug("Timer from session %d ignored", event.session)
            return
        if state.best_sample is not None:
            return

        state.last_sample_error = TimeoutExceeded(self._config.timeout_seconds)
        self._stop(StopReason.TIMED_OUT)

    def _on_geocode_completed(self, event: GeocodeCompleted) -> None:
        state = self._state
        if event.session is not None and event.session != state.session:
            logger.debug("Late geocode result from session %d ignored", event.session)
            return
        outcome = event.outcome
        state.geocode_in_flight = False
        state.geocode_outcome = outcome
        if isinstance(outcome, Failed):
            logger.warning("Reverse geocode failed: %s", outcome.error)
            state.last_geocode_error = outcome.error
        else:
            state.last_geocode_error = None

    def _on_authorization_changed(self, event: AuthorizationChanged) -> None:
        self._state.authorization = self._authorization.current_authorization()
        logger.info(
            "Location authorization is now %s", self._state.authorization.value
        )

    # ── Private helpers ───────────────────────────────────────────

    def _start_sampling(self) -> None:
        state = self._state
        state.session += 1
        state.best_sample = None
        state.last_sample_error = None
        state.geocode_outcome = Pending()
        state.geocode_in_flight = False
        state.last_geocode_error = None
        state.stop_reason = None
        state.phase = Phase.SAMPLING

        cfg = self._config
        session = state.session
        self._stream.start_streaming(cfg.desired_accuracy)
        self._timer.arm(
            cfg.timeout_seconds,
            lambda: self.dispatch(TimeoutFired(session=session)),
        )
        state.timeout_armed = True
        logger.info(
            "Sampling session %d started (target %.1fm, timeout %.0fs)",
            session,
            cfg.desired_accuracy,
            cfg.timeout_seconds,
        )

    def _stop(self, reason: StopReason) -> None:
        """Leave SAMPLING; stream stop and timer disarm happen together."""
        state = self._state
        state.phase = Phase.STOPPED
        state.stop_reason = reason
        self._stream.stop_streaming()
        self._timer.disarm()
        state.timeout_armed = False
        logger.info("Sampling session %d stopped: %s", state.session, reason.value)

    def _launch_geocode(self, sample: Sample) -> None:
        session = self._state.session

        def on_complete(outcome: GeocodeOutcome) -> None:
            self.dispatch(GeocodeCompleted(outcome, session=session))

        self._state.geocode_in_flight = True
        try:
            self._geocoder.lookup(sample, on_complete)
        except GeocodeFailure as exc:
            self.dispatch(GeocodeCompleted(Failed(exc), session=session))
        except Exception as exc:
            failure = GeocodeFailure("provider", str(exc))
            self.dispatch(GeocodeCompleted(Failed(failure), session=session))

    def _notify_disabled(self, reason: LocationFixError) -> None:
        logger.info("Location services disabled: %s", reason)
        if self._notices is not None:
            self._notices.services_disabled(reason)
