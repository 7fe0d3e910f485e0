"""Placemark formatting into display address lines."""

from __future__ import annotations

from typing import Optional

from locationfix.models import Placemark


def normalise(raw: Optional[str]) -> str:
    """Strip and collapse whitespace; None becomes an empty string."""
    if not raw:
        return ""
    return " ".join(raw.split())


def _join(*parts: Optional[str]) -> str:
    return " ".join(p for p in (normalise(part) for part in parts) if p)


def format_placemark(placemark: Optional[Placemark]) -> tuple[str, ...]:
    """
    Render *placemark* as at most two address lines.

    Line one is the house number and street, line two the locality,
    administrative area and postal code. Empty lines are dropped, so a
    placemark without any usable parts yields an empty tuple.
    """
    if placemark is None:
        return ()
    lines = (
        _join(placemark.sub_thoroughfare, placemark.thoroughfare),
        _join(
            placemark.locality,
            placemark.administrative_area,
            placemark.postal_code,
        ),
    )
    return tuple(line for line in lines if line)
