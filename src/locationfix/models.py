"""Typed value models and events for locationfix."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from locationfix.exceptions import GeocodeFailure, SamplingError


class AuthorizationState(Enum):
    UNDETERMINED = "undetermined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED = "authorized"


class Phase(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"
    STOPPED = "stopped"


class StopReason(Enum):
    USER_REQUESTED = "user_requested"
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"
    FATAL_ERROR = "fatal_error"
    STAGNATED = "stagnated"


@dataclass(frozen=True)
class Sample:
    """One location reading as delivered by the stream provider."""

    timestamp: float             # seconds, same clock as the coordinator
    latitude: float              # WGS84 degrees
    longitude: float             # WGS84 degrees
    horizontal_accuracy: float   # metres; negative means invalid

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        return {
            "timestamp": self.timestamp,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "horizontal_accuracy": self.horizontal_accuracy,
        }


@dataclass(frozen=True)
class Placemark:
    """Structured address parts returned by a reverse geocoder."""

    sub_thoroughfare: Optional[str] = None   # house number
    thoroughfare: Optional[str] = None       # street
    locality: Optional[str] = None
    administrative_area: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


# ── Geocode outcomes ──────────────────────────────────────────


@dataclass(frozen=True)
class Pending:
    """No lookup result yet."""


@dataclass(frozen=True)
class Resolved:
    """A lookup succeeded; empty lines mean no address was found."""

    address_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class Failed:
    error: GeocodeFailure


GeocodeOutcome = Union[Pending, Resolved, Failed]


# ── Events ────────────────────────────────────────────────────


@dataclass(frozen=True)
class StartRequested:
    """The user pressed the get-location / stop toggle."""


@dataclass(frozen=True)
class SampleReceived:
    sample: Sample


@dataclass(frozen=True)
class SampleStreamFailed:
    error: SamplingError


@dataclass(frozen=True)
class TimeoutFired:
    """The session timer expired.

    *session* identifies the sampling session that armed the timer; a
    fire carrying an older session number is ignored.
    """

    session: Optional[int] = None


@dataclass(frozen=True)
class GeocodeCompleted:
    """A lookup finished.

    *session* identifies the sampling session that launched the lookup; a
    result carrying an older session number leaves the current outcome alone.
    """

    outcome: GeocodeOutcome
    session: Optional[int] = None


@dataclass(frozen=True)
class AuthorizationChanged:
    """The platform reports that the authorization status changed."""


Event = Union[
    StartRequested,
    SampleReceived,
    SampleStreamFailed,
    TimeoutFired,
    GeocodeCompleted,
    AuthorizationChanged,
]


@dataclass(frozen=True)
class ViewState:
    """Render-ready snapshot of the coordinator."""

    latitude_text: str = ""
    longitude_text: str = ""
    address_text: str = ""
    message: str = ""
    button_label: str = ""
    can_tag: bool = False

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        return {
            "latitude": self.latitude_text,
            "longitude": self.longitude_text,
            "address": self.address_text,
            "message": self.message,
            "button": self.button_label,
            "can_tag": self.can_tag,
        }
