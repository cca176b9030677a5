"""Aggregate statistics over a grid of cell slopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from slope_api.core.grid import matrix_to_array
from slope_api.terrain.classification import SLOPE_CLASSES, STEEP_CLASS_NAMES
from slope_api.terrain.features_math import CellSlope

# Values outside this range are DEM no-data sentinels, not terrain.
PLAUSIBLE_ELEVATION_RANGE = (-500.0, 4000.0)


@dataclass(frozen=True, slots=True)
class DistributionBucket:
    name: str
    label: str
    color: str
    count: int
    percent: float


@dataclass(frozen=True, slots=True)
class SlopeStats:
    mean_degrees: float = 0.0
    min_degrees: float = 0.0
    max_degrees: float = 0.0
    std_degrees: float = 0.0
    min_elevation: float = 0.0
    max_elevation: float = 0.0
    avg_elevation: float = 0.0
    elevation_range: float = 0.0
    cell_count: int = 0
    distribution: list[DistributionBucket] = field(default_factory=list)
    flat_percent: float = 0.0
    steep_percent: float = 0.0


def compute_stats(slopes: Sequence[CellSlope], z: Sequence[Sequence[float | None]]) -> SlopeStats:
    """Summarize slope cells and the elevation matrix they came from.

    Slope moments use the population standard deviation. The distribution lists
    every band in order; percentages are over `len(slopes)` and sum to 100.
    With no slope cells every field is zero and the distribution is empty.
    """
    if not slopes:
        return SlopeStats()

    degs = np.array([s.degrees for s in slopes], dtype=float)

    elev = matrix_to_array(z).ravel()
    lo, hi = PLAUSIBLE_ELEVATION_RANGE
    elev = elev[np.isfinite(elev) & (elev >= lo) & (elev <= hi)]
    if elev.size:
        min_elev, max_elev, avg_elev = float(elev.min()), float(elev.max()), float(elev.mean())
    else:
        min_elev = max_elev = avg_elev = 0.0

    total = len(slopes)
    counts = {band.name: 0 for band in SLOPE_CLASSES}
    for s in slopes:
        counts[s.classification.name] += 1

    distribution = [
        DistributionBucket(
            name=band.name,
            label=band.label,
            color=band.color,
            count=counts[band.name],
            percent=100.0 * counts[band.name] / total,
        )
        for band in SLOPE_CLASSES
    ]

    return SlopeStats(
        mean_degrees=float(degs.mean()),
        min_degrees=float(degs.min()),
        max_degrees=float(degs.max()),
        std_degrees=float(degs.std()),
        min_elevation=min_elev,
        max_elevation=max_elev,
        avg_elevation=avg_elev,
        elevation_range=max_elev - min_elev,
        cell_count=total,
        distribution=distribution,
        flat_percent=100.0 * counts["flat"] / total,
        steep_percent=100.0 * sum(counts[n] for n in STEEP_CLASS_NAMES) / total,
    )


def build_slope_matrix(slopes: Sequence[CellSlope], rows: int, cols: int) -> list[list[float | None]]:
    """Dense rows x cols matrix of slope degrees, None where no slope was computed."""
    matrix: list[list[float | None]] = [[None] * cols for _ in range(rows)]
    for s in slopes:
        matrix[s.row][s.col] = s.degrees
    return matrix
