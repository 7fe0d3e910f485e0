"""locationfix — Pick one best location fix from a noisy stream and resolve its address."""

from locationfix.config import FixConfig
from locationfix.coordinator import CoordinatorState, LocationFixCoordinator
from locationfix.exceptions import (
    AuthorizationDenied,
    AuthorizationRestricted,
    ConfigInvalid,
    FatalSamplingError,
    GeocodeFailure,
    LocationFixError,
    SamplingError,
    SamplingErrorKind,
    TimeoutExceeded,
    TransientSamplingGlitch,
)
from locationfix.models import (
    AuthorizationChanged,
    AuthorizationState,
    Failed,
    GeocodeCompleted,
    Pending,
    Phase,
    Placemark,
    Resolved,
    Sample,
    SampleReceived,
    SampleStreamFailed,
    StartRequested,
    StopReason,
    TimeoutFired,
    ViewState,
)

__all__ = [
    "LocationFixCoordinator",
    "CoordinatorState",
    "FixConfig",
    "Sample",
    "Placemark",
    "ViewState",
    "AuthorizationState",
    "Phase",
    "StopReason",
    "Pending",
    "Resolved",
    "Failed",
    "StartRequested",
    "SampleReceived",
    "SampleStreamFailed",
    "TimeoutFired",
    "GeocodeCompleted",
    "AuthorizationChanged",
    "LocationFixError",
    "SamplingError",
    "SamplingErrorKind",
    "TransientSamplingGlitch",
    "FatalSamplingError",
    "TimeoutExceeded",
    "AuthorizationDenied",
    "AuthorizationRestricted",
    "GeocodeFailure",
    "ConfigInvalid",
]
