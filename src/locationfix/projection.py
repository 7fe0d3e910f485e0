"""Snapshot projection of coordinator state into display text."""

from __future__ import annotations

from typing import TYPE_CHECKING

from locationfix.exceptions import SamplingErrorKind
from locationfix.models import AuthorizationState, Failed, Resolved, ViewState

if TYPE_CHECKING:
    from locationfix.coordinator import CoordinatorState

# ── Display strings ───────────────────────────────────────────
MSG_SERVICES_DISABLED = "Location Services Disabled"
MSG_ERROR = "Error Getting Location"
MSG_SEARCHING = "Searching..."
MSG_IDLE = "Tap 'Get My Location' to Start"

ADDR_SEARCHING = "Searching for Address..."
ADDR_ERROR = "Error Finding Address"
ADDR_NOT_FOUND = "No Address Found"

LABEL_STOP = "Stop"
LABEL_START = "Get My Location"

_DISABLED = (AuthorizationState.DENIED, AuthorizationState.RESTRICTED)


def _coordinate(value: float) -> str:
    return f"{value:.8f}"


def _address_text(state: CoordinatorState) -> str:
    outcome = state.geocode_outcome
    if isinstance(outcome, Resolved) and outcome.address_lines:
        return "\n".join(outcome.address_lines)
    if state.geocode_in_flight:
        return ADDR_SEARCHING
    if isinstance(outcome, Failed) or state.last_geocode_error is not None:
        return ADDR_ERROR
    return ADDR_NOT_FOUND


def _status_message(state: CoordinatorState) -> str:
    error = state.last_sample_error
    if error is not None:
        if error.kind is SamplingErrorKind.DENIED:
            return MSG_SERVICES_DISABLED
        return MSG_ERROR
    if state.authorization in _DISABLED:
        return MSG_SERVICES_DISABLED
    if state.is_sampling:
        return MSG_SEARCHING
    return MSG_IDLE


def project(state: CoordinatorState) -> ViewState:
    """Build the ViewState for *state*. Pure; reads nothing else."""
    button = LABEL_STOP if state.is_sampling else LABEL_START
    best = state.best_sample

    if best is None:
        return ViewState(message=_status_message(state), button_label=button)

    return ViewState(
        latitude_text=_coordinate(best.latitude),
        longitude_text=_coordinate(best.longitude),
        address_text=_address_text(state),
        message="",
        button_label=button,
        can_tag=True,
    )
