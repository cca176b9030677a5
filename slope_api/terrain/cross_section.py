"""Elevation profile along a polyline drawn over a sampled grid."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from slope_api.core.grid import EARTH_RADIUS_M, meters_to_degrees

DEFAULT_NUM_SAMPLES = 50


@dataclass(frozen=True, slots=True)
class CrossSectionPoint:
    distance: float  # meters from the start of the line
    elevation: float
    lat: float
    lon: float


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _interpolate(line: Sequence[Sequence[float]], cumulative: list[float], target: float) -> tuple[float, float]:
    for i in range(1, len(line)):
        if target <= cumulative[i]:
            seg = cumulative[i] - cumulative[i - 1]
            t = (target - cumulative[i - 1]) / seg if seg > 0 else 0.0
            lon = line[i - 1][0] + t * (line[i][0] - line[i - 1][0])
            lat = line[i - 1][1] + t * (line[i][1] - line[i - 1][1])
            return lat, lon
    return line[-1][1], line[-1][0]


def extract_cross_section(
    z: Sequence[Sequence[float | None]],
    origin_lat: float,
    origin_lon: float,
    cell_size_m: float,
    line: Sequence[Sequence[float]],
    num_samples: int = DEFAULT_NUM_SAMPLES,
) -> list[CrossSectionPoint]:
    """Sample `line` (`[lon, lat]` vertices) at equal distances and read the nearest cell.

    `origin_lat`/`origin_lon` are the north-west corner of the grid (cell (0, 0)).
    Samples landing outside the matrix or on an empty cell are omitted.
    """
    if len(line) < 2 or num_samples < 2:
        return []

    # Cell size in degrees at the origin latitude, not the bbox center.
    d_lat, d_lon = meters_to_degrees(cell_size_m, origin_lat)

    cumulative = [0.0]
    for i in range(1, len(line)):
        cumulative.append(cumulative[-1] + haversine_distance(line[i - 1][1], line[i - 1][0], line[i][1], line[i][0]))
    total = cumulative[-1]
    step = total / (num_samples - 1)

    n_rows = len(z)
    n_cols = len(z[0]) if z else 0
    profile: list[CrossSectionPoint] = []
    for k in range(num_samples):
        dist = k * step
        lat, lon = _interpolate(line, cumulative, dist)
        row = round((origin_lat - lat) / d_lat)
        col = round((lon - origin_lon) / d_lon)
        if not (0 <= row < n_rows and 0 <= col < n_cols):
            continue
        value = z[row][col]
        if value is None or not math.isfinite(value):
            continue
        profile.append(CrossSectionPoint(distance=dist, elevation=float(value), lat=lat, lon=lon))
    return profile
