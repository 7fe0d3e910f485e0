"""Fix selection: decide whether a new sample supersedes the current best."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from locationfix.models import Sample

DEFAULT_MAX_AGE = 5.0


class Action(Enum):
    IGNORE = "ignore"
    REPLACE = "replace"


class IgnoreReason(Enum):
    STALE = "stale"
    INVALID = "invalid"
    NOT_MORE_ACCURATE = "not_more_accurate"


@dataclass(frozen=True)
class Decision:
    action: Action
    converged: bool = False
    reason: Optional[IgnoreReason] = None

    @property
    def replaces(self) -> bool:
        return self.action is Action.REPLACE


def _ignore(reason: IgnoreReason) -> Decision:
    return Decision(Action.IGNORE, reason=reason)


def evaluate(
    current: Optional[Sample],
    incoming: Sample,
    desired_accuracy: float,
    *,
    now: float,
    max_age: float = DEFAULT_MAX_AGE,
) -> Decision:
    """
    Compare *incoming* against the *current* best sample.

    Readings older than *max_age* seconds before *now* are cached
    leftovers and a negative accuracy marks an invalid reading; both are
    ignored. Otherwise the incoming sample replaces the current one when
    there is none or it is strictly more accurate, and the replacement
    has converged once its accuracy is within *desired_accuracy*.
    """
    if incoming.timestamp < now - max_age:
        return _ignore(IgnoreReason.STALE)
    if incoming.horizontal_accuracy < 0:
        return _ignore(IgnoreReason.INVALID)

    if current is None or current.horizontal_accuracy > incoming.horizontal_accuracy:
        return Decision(
            Action.REPLACE,
            converged=incoming.horizontal_accuracy <= desired_accuracy,
        )
    return _ignore(IgnoreReason.NOT_MORE_ACCURATE)
