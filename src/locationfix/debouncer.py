"""Reverse-geocode debouncing for a stream of accepted samples."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from locationfix.models import Sample

if TYPE_CHECKING:
    from locationfix.coordinator import CoordinatorState

DEFAULT_STAGNATION_DISTANCE = 1.0
DEFAULT_STAGNATION_INTERVAL = 10.0


class GeocodeAction(Enum):
    LAUNCH = "launch"
    SUPPRESS = "suppress"
    FORCE_RELAUNCH = "force_relaunch"
    STOP_STAGNATED = "stop_stagnated"


def is_stagnant(
    previous: Optional[Sample],
    new_sample: Sample,
    distance: float,
    *,
    min_distance: float = DEFAULT_STAGNATION_DISTANCE,
    interval: float = DEFAULT_STAGNATION_INTERVAL,
) -> bool:
    """True when the reading has not moved for longer than *interval*."""
    if previous is None or distance >= min_distance:
        return False
    return new_sample.timestamp - previous.timestamp > interval


def decide(
    state: CoordinatorState,
    new_sample: Sample,
    distance_from_previous: float,
    converged: bool,
    *,
    min_distance: float = DEFAULT_STAGNATION_DISTANCE,
    interval: float = DEFAULT_STAGNATION_INTERVAL,
) -> GeocodeAction:
    """
    Choose what to do about a lookup for *new_sample*.

    *state* must still hold the previous best sample. A converged sample
    that moved away from the previous fix may relaunch even though a
    lookup is in flight; with zero movement the in-flight result already
    describes the same spot and the launch is suppressed.
    """
    if not state.geocode_in_flight:
        return GeocodeAction.LAUNCH
    if is_stagnant(
        state.best_sample,
        new_sample,
        distance_from_previous,
        min_distance=min_distance,
        interval=interval,
    ):
        return GeocodeAction.STOP_STAGNATED
    if converged and distance_from_previous > 0:
        return GeocodeAction.FORCE_RELAUNCH
    return GeocodeAction.SUPPRESS
