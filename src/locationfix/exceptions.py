"""Custom exception hierarchy for locationfix.

Sampling and geocoding errors are normally *captured* into coordinator
state rather than raised; the classes still derive from Exception so that
collaborators can raise them inside their own code and hand them over.
"""

from __future__ import annotations

from enum import Enum


class SamplingErrorKind(Enum):
    """Provider classification of a location stream failure."""

    LOCATION_UNKNOWN = "location_unknown"
    DENIED = "denied"
    NETWORK = "network"
    OTHER = "other"


class LocationFixError(Exception):
    """Base exception for all locationfix errors."""


class SamplingError(LocationFixError):
    """The location stream reported a failure."""

    def __init__(self, kind: SamplingErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"Location sampling failed ({kind.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class TransientSamplingGlitch(SamplingError):
    """Location is currently unknown; the stream keeps running."""

    def __init__(self, detail: str = ""):
        super().__init__(SamplingErrorKind.LOCATION_UNKNOWN, detail)


class FatalSamplingError(SamplingError):
    """An unrecoverable stream failure that ends the session."""


class TimeoutExceeded(FatalSamplingError):
    """No usable sample arrived before the session timer fired."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(
            SamplingErrorKind.OTHER, f"no location fix within {seconds:g}s"
        )


class AuthorizationDenied(LocationFixError):
    """The user refused location access."""

    def __init__(self) -> None:
        super().__init__("Location access denied")


class AuthorizationRestricted(LocationFixError):
    """Location access is blocked by device policy."""

    def __init__(self) -> None:
        super().__init__("Location access restricted")


class GeocodeFailure(LocationFixError):
    """A reverse-geocode lookup failed."""

    def __init__(self, kind: str = "unknown", detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"Reverse geocode failed ({kind})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigInvalid(LocationFixError):
    """A configuration value could not be used."""

    def __init__(self, name: str, value: object):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r}")


def sampling_error(kind: SamplingErrorKind, detail: str = "") -> SamplingError:
    """Build the right SamplingError subclass for *kind*."""
    if kind is SamplingErrorKind.LOCATION_UNKNOWN:
        return TransientSamplingGlitch(detail)
    return FatalSamplingError(kind, detail)
