"""Great-circle distance between samples."""

from __future__ import annotations

import math

from locationfix.models import Sample

EARTH_RADIUS_M = 6_371_000.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in metres between two WGS84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, a)))


def distance_between(previous: Sample | None, current: Sample) -> float:
    """
    Metres between *previous* and *current*.

    With no previous sample the distance is unbounded (``math.inf``), so
    any movement test treats the first fix as a move.
    """
    if previous is None:
        return math.inf
    return haversine(
        previous.latitude, previous.longitude,
        current.latitude, current.longitude,
    )
