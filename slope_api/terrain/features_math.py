"""Five-point slope/aspect derivation.

Conventions
- **Slope**: degrees, range [0, 90]; percent is `100 * tan(slope)`.
- **Aspect**: degrees, range [0, 360), clockwise from North (0=N, 90=E).
- **Aspect direction**: **downslope** (direction of steepest descent).
- Flat samples (zero gradient) have no aspect: `aspect_degrees` is None.

Gradients are centered finite differences over a cross of samples:
`dz/dy = (north - south) / (2 * d)` and `dz/dx = (east - west) / (2 * d)`. The center
elevation is reported but does not enter the gradient.

For matrices (`compute_grid_slopes`) row index increases southward, so the
"north" neighbour of `(r, c)` is `(r - 1, c)`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from slope_api.core.grid import CROSS_LABELS, matrix_to_array
from slope_api.errors import InvalidSampleSet
from slope_api.terrain.classification import SlopeClassification, classify_slope

COMPASS_DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")
FLAT_SLOPE_DEG = 1e-9


@dataclass(frozen=True, slots=True)
class ElevationSample:
    lat: float
    lon: float
    elevation: float  # meters; NaN means no data
    label: str | None = None


@dataclass(frozen=True, slots=True)
class SlopeAspect:
    slope_degrees: float
    slope_percent: float
    aspect_degrees: float | None
    aspect_direction: str | None


@dataclass(frozen=True, slots=True)
class CellSlope:
    row: int
    col: int
    degrees: float
    percent: float
    aspect_degrees: float | None
    aspect_direction: str | None
    classification: SlopeClassification


def aspect_to_direction(degrees: float) -> str:
    """Map a compass bearing to an 8-point label using 45° sectors centered on each."""
    index = int(math.floor(degrees / 45.0 + 0.5)) % 8
    return COMPASS_DIRECTIONS[index]


def _slope_aspect(dz_dy_north: float, dz_dx_east: float) -> SlopeAspect:
    gradient = math.hypot(dz_dx_east, dz_dy_north)
    slope_rad = math.atan(gradient)
    slope_deg = math.degrees(slope_rad)

    if slope_deg <= FLAT_SLOPE_DEG:
        return SlopeAspect(slope_degrees=0.0, slope_percent=0.0, aspect_degrees=None, aspect_direction=None)

    # Azimuth of -∇z, clockwise from north.
    aspect_deg = math.degrees(math.atan2(-dz_dx_east, -dz_dy_north)) % 360.0
    return SlopeAspect(
        slope_degrees=slope_deg,
        slope_percent=100.0 * math.tan(slope_rad),
        aspect_degrees=aspect_deg,
        aspect_direction=aspect_to_direction(aspect_deg),
    )


def calculate_slope(samples: Sequence[ElevationSample], offset_meters: float = 10.0) -> SlopeAspect:
    """Compute slope and downslope aspect from a labeled five-point cross.

    Parameters
    - **samples**: exactly one sample each labeled center/north/south/east/west.
    - **offset_meters**: distance from the center to each directional sample.

    Raises `InvalidSampleSet` if a label is missing or duplicated, or a directional
    sample has a non-finite elevation. Missing data is never treated as flat.
    """
    if not (math.isfinite(offset_meters) and offset_meters > 0):
        raise InvalidSampleSet("offset_meters must be a positive finite number")

    by_label: dict[str, ElevationSample] = {}
    for sample in samples:
        if sample.label not in CROSS_LABELS:
            raise InvalidSampleSet(f"Unexpected sample label: {sample.label!r}")
        if sample.label in by_label:
            raise InvalidSampleSet(f"Duplicate sample label: {sample.label!r}")
        by_label[sample.label] = sample

    missing = [label for label in CROSS_LABELS if label not in by_label]
    if missing:
        raise InvalidSampleSet("Missing samples for slope calculation", details={"missing": missing})

    bad = [label for label in CROSS_LABELS[1:] if not math.isfinite(by_label[label].elevation)]
    if bad:
        raise InvalidSampleSet("Directional samples have no elevation", details={"labels": bad})

    span = 2.0 * offset_meters
    dz_dy_north = (by_label["north"].elevation - by_label["south"].elevation) / span
    dz_dx_east = (by_label["east"].elevation - by_label["west"].elevation) / span
    return _slope_aspect(dz_dy_north, dz_dx_east)


def compute_grid_slopes(z: Sequence[Sequence[float | None]], cell_size_m: float) -> list[CellSlope]:
    """Apply the five-point method to every interior cell of an elevation matrix.

    A cell yields a record only if it and its four neighbours all hold values;
    border cells never do. Records are in row-major order.
    """
    cell = float(cell_size_m)
    if not np.isfinite(cell) or cell <= 0:
        raise ValueError("cell_size_m must be a positive finite number")

    arr = matrix_to_array(z)
    if arr.ndim != 2 or arr.shape[0] < 3 or arr.shape[1] < 3:
        return []

    center = arr[1:-1, 1:-1]
    north = arr[:-2, 1:-1]
    south = arr[2:, 1:-1]
    east = arr[1:-1, 2:]
    west = arr[1:-1, :-2]
    valid = np.isfinite(center) & np.isfinite(north) & np.isfinite(south) & np.isfinite(east) & np.isfinite(west)

    dz_dy_north = (north - south) / (2.0 * cell)
    dz_dx_east = (east - west) / (2.0 * cell)

    slopes: list[CellSlope] = []
    for i, j in zip(*np.nonzero(valid)):
        sa = _slope_aspect(float(dz_dy_north[i, j]), float(dz_dx_east[i, j]))
        slopes.append(
            CellSlope(
                row=int(i) + 1,
                col=int(j) + 1,
                degrees=sa.slope_degrees,
                percent=sa.slope_percent,
                aspect_degrees=sa.aspect_degrees,
                aspect_direction=sa.aspect_direction,
                classification=classify_slope(sa.slope_degrees),
            )
        )
    return slopes
