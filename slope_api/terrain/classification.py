"""Slope severity bands.

Bands are half-open on the upper bound: a value exactly on a boundary belongs to
the steeper band (3.0° is "gentle", 30.0° is "very steep").
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SlopeClassification:
    level: int
    name: str
    label: str
    color: str
    min_degrees: float
    max_degrees: float | None  # exclusive; None for the last band


SLOPE_CLASSES: tuple[SlopeClassification, ...] = (
    SlopeClassification(1, "flat", "Flat", "green", 0.0, 3.0),
    SlopeClassification(2, "gentle", "Gentle", "yellow", 3.0, 8.0),
    SlopeClassification(3, "moderate", "Moderate", "orange", 8.0, 15.0),
    SlopeClassification(4, "steep", "Steep", "red", 15.0, 30.0),
    SlopeClassification(5, "very steep", "Very steep", "darkred", 30.0, None),
)

STEEP_CLASS_NAMES = frozenset({"steep", "very steep"})


def classify_slope(degrees: float) -> SlopeClassification:
    """Map a slope angle in degrees to its severity band."""
    if math.isnan(degrees):
        raise ValueError("cannot classify a NaN slope")
    for band in SLOPE_CLASSES[:-1]:
        if degrees < band.max_degrees:
            return band
    return SLOPE_CLASSES[-1]
