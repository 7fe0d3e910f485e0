"""Tunable thresholds for a location fix session."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from locationfix.exceptions import ConfigInvalid

# ── Environment variable names ────────────────────────────────
ENV_DESIRED_ACCURACY = "LOCATIONFIX_DESIRED_ACCURACY"
ENV_TIMEOUT = "LOCATIONFIX_TIMEOUT"
ENV_MAX_SAMPLE_AGE = "LOCATIONFIX_MAX_SAMPLE_AGE"


@dataclass(frozen=True)
class FixConfig:
    """Thresholds used by the selector, debouncer and coordinator."""

    desired_accuracy: float = 10.0      # metres; a sample this good ends sampling
    timeout_seconds: float = 60.0       # give up if nothing usable arrives
    max_sample_age: float = 5.0         # older readings are cache leftovers
    stagnation_distance: float = 1.0    # metres
    stagnation_interval: float = 10.0   # seconds

    def __post_init__(self) -> None:
        for name in (
            "desired_accuracy",
            "timeout_seconds",
            "max_sample_age",
            "stagnation_distance",
            "stagnation_interval",
        ):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigInvalid(name, value)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> FixConfig:
        """
        Build a config from LOCATIONFIX_* environment variables.

        Unset variables keep their defaults.
        Raises ConfigInvalid for values that are not positive numbers.
        """
        env = os.environ if environ is None else environ
        overrides: dict = {}
        for var, name in (
            (ENV_DESIRED_ACCURACY, "desired_accuracy"),
            (ENV_TIMEOUT, "timeout_seconds"),
            (ENV_MAX_SAMPLE_AGE, "max_sample_age"),
        ):
            raw = env.get(var)
            if raw is None or not raw.strip():
                continue
            overrides[name] = _parse_positive(var, raw)
        return cls(**overrides)


def _parse_positive(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigInvalid(name, raw) from None
    if value <= 0:
        raise ConfigInvalid(name, raw)
    return value
