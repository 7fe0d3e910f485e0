"""
Location Fix Replay — CLI
=========================
Replays a recorded JSON trace through a LocationFixCoordinator using a
virtual clock, then prints the final view state.

Usage:
    locationfix trace.json
    locationfix trace.json --desired-accuracy 25 --timeout 30 --verbose

Trace format: either a list of events or an object with ``events`` and
an optional ``authorization`` ("authorized" by default). Each event has
an ``at`` time in seconds and a ``type``:

    start                          press the get-location / stop button
    sample     lat, lon, accuracy  reading; optional ``age`` in seconds
    error      kind                stream failure (location_unknown, denied, ...)
    geocode    lines | placemark | error
                                   completes the oldest outstanding lookup
    authorize  status              platform reports a new authorization status
    tick                           just advance the clock (lets timers fire)

Defaults for thresholds come from LOCATIONFIX_* environment variables.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from collections import deque
from pathlib import Path
from typing import Callable, Optional

from locationfix.address import format_placemark
from locationfix.config import FixConfig
from locationfix.coordinator import LocationFixCoordinator
from locationfix.exceptions import (
    ConfigInvalid,
    GeocodeFailure,
    LocationFixError,
    SamplingErrorKind,
    sampling_error,
)
from locationfix.models import (
    AuthorizationChanged,
    AuthorizationState,
    Failed,
    GeocodeOutcome,
    Placemark,
    Resolved,
    Sample,
    SampleReceived,
    SampleStreamFailed,
    StartRequested,
)

logger = logging.getLogger(__name__)


class TraceError(ValueError):
    """A trace file or one of its records cannot be replayed."""


# ── Virtual collaborators ─────────────────────────────────────


class VirtualClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TraceAuthorization:
    def __init__(self, status: AuthorizationState):
        self.status = status
        self.requests = 0

    def current_authorization(self) -> AuthorizationState:
        return self.status

    def request_authorization(self) -> None:
        self.requests += 1


class TraceStream:
    def __init__(self) -> None:
        self.streaming = False

    def start_streaming(self, desired_accuracy: float) -> None:
        self.streaming = True

    def stop_streaming(self) -> None:
        self.streaming = False


class TraceGeocoder:
    """Holds lookups until the trace completes them, oldest first."""

    def __init__(self) -> None:
        self.outstanding: deque = deque()
        self.lookups = 0

    def lookup(
        self, sample: Sample, on_complete: Callable[[GeocodeOutcome], None]
    ) -> None:
        self.lookups += 1
        self.outstanding.append(on_complete)

    def complete(self, outcome: GeocodeOutcome) -> None:
        if not self.outstanding:
            raise TraceError("geocode result without an outstanding lookup")
        self.outstanding.popleft()(outcome)


class TraceTimer:
    def __init__(self, clock: VirtualClock):
        self._clock = clock
        self._deadline: Optional[float] = None
        self._on_fire: Optional[Callable[[], None]] = None

    def arm(self, duration_seconds: float, on_fire: Callable[[], None]) -> None:
        self._deadline = self._clock.now + duration_seconds
        self._on_fire = on_fire

    def disarm(self) -> None:
        self._deadline = None
        self._on_fire = None

    def advance(self) -> None:
        """Fire once if the clock has reached the deadline."""
        if self._deadline is None or self._clock.now < self._deadline:
            return
        on_fire = self._on_fire
        self.disarm()
        on_fire()


# ── Replay ────────────────────────────────────────────────────


def load_trace(path: Path) -> tuple[AuthorizationState, list]:
    """Read *path*; raises OSError or TraceError."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TraceError(f"{path}: not valid JSON ({exc.msg})") from None

    status = "authorized"
    events = payload
    if isinstance(payload, dict):
        status = payload.get("authorization", status)
        events = payload.get("events")
    if not isinstance(events, list):
        raise TraceError(f"{path}: expected a list of events")
    try:
        authorization = AuthorizationState(status)
    except ValueError:
        raise TraceError(f"unknown authorization status: {status!r}") from None
    return authorization, events


def _address_lines(record: dict) -> tuple[str, ...]:
    """Lines from a ``placemark`` object, or the literal ``lines`` list."""
    if "placemark" in record:
        return format_placemark(Placemark(**record["placemark"]))
    return tuple(str(line) for line in record.get("lines", []))


def _to_event(
    record: dict,
    clock: VirtualClock,
    geocoder: TraceGeocoder,
    auth: TraceAuthorization,
):
    """Translate one trace record; returns None when nothing is dispatched."""
    kind = record.get("type")
    if kind == "start":
        return StartRequested()
    if kind == "sample":
        return SampleReceived(
            Sample(
                timestamp=clock.now - float(record.get("age", 0.0)),
                latitude=float(record["lat"]),
                longitude=float(record["lon"]),
                horizontal_accuracy=float(record["accuracy"]),
            )
        )
    if kind == "error":
        try:
            error_kind = SamplingErrorKind(record.get("kind", "other"))
        except ValueError:
            raise TraceError(f"unknown error kind: {record.get('kind')!r}") from None
        return SampleStreamFailed(sampling_error(error_kind, record.get("detail", "")))
    if kind == "geocode":
        if "error" in record:
            outcome: GeocodeOutcome = Failed(GeocodeFailure(str(record["error"])))
        else:
            outcome = Resolved(_address_lines(record))
        geocoder.complete(outcome)
        return None
    if kind == "authorize":
        try:
            auth.status = AuthorizationState(record.get("status"))
        except ValueError:
            raise TraceError(f"unknown authorization status: {record.get('status')!r}") from None
        return AuthorizationChanged()
    if kind == "tick":
        return None
    raise TraceError(f"unknown event type: {kind!r}")


def replay(
    events: list,
    config: FixConfig,
    authorization: AuthorizationState = AuthorizationState.AUTHORIZED,
) -> LocationFixCoordinator:
    """Run *events* through a fresh coordinator and return it."""
    logger.debug("Replaying %d trace events", len(events))
    clock = VirtualClock()
    auth = TraceAuthorization(authorization)
    geocoder = TraceGeocoder()
    timer = TraceTimer(clock)
    coordinator = LocationFixCoordinator(
        authorization=auth,
        stream=TraceStream(),
        geocoder=geocoder,
        timer=timer,
        config=config,
        clock=clock,
    )

    for index, record in enumerate(events):
        if not isinstance(record, dict):
            raise TraceError(f"event #{index}: expected an object")
        try:
            at = float(record.get("at", clock.now))
        except (TypeError, ValueError):
            raise TraceError(f"event #{index}: bad 'at' value") from None
        if at < clock.now:
            raise TraceError(f"event #{index}: time goes backwards")
        clock.now = at
        timer.advance()
        try:
            event = _to_event(record, clock, geocoder, auth)
        except (KeyError, TypeError, ValueError) as exc:
            if isinstance(exc, TraceError):
                raise TraceError(f"event #{index}: {exc}") from None
            raise TraceError(f"event #{index}: malformed {record.get('type')!r} record") from None
        if event is not None:
            coordinator.handle(event)
    return coordinator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locationfix",
        description="Replay a recorded location trace through the fix coordinator.",
    )
    parser.add_argument("trace", type=Path, help="JSON trace file")
    parser.add_argument("--desired-accuracy", type=float, help="target accuracy in metres")
    parser.add_argument("--timeout", type=float, help="session timeout in seconds")
    parser.add_argument("--json", action="store_true", help="print JSON instead of a table")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[list] = None) -> None:
    """Entry point for the ``locationfix`` console script."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = FixConfig.from_env()
        overrides = {}
        if args.desired_accuracy is not None:
            overrides["desired_accuracy"] = args.desired_accuracy
        if args.timeout is not None:
            overrides["timeout_seconds"] = args.timeout
        config = dataclasses.replace(config, **overrides)
    except ConfigInvalid as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        authorization, events = load_trace(args.trace)
    except (OSError, TraceError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        coordinator = replay(events, config, authorization)
    except (TraceError, LocationFixError) as exc:
        print(f"Invalid trace: {exc}", file=sys.stderr)
        sys.exit(1)

    state = coordinator.state
    result = coordinator.current_view_state().to_dict()
    result["phase"] = state.phase.value
    result["stop_reason"] = state.stop_reason.value if state.stop_reason else None

    if args.json:
        print(json.dumps(result, indent=2))
        return
    for key, val in result.items():
        shown = str(val).replace("\n", " / ")
        print(f"{key:>12}: {shown}")


if __name__ == "__main__":
    main()
