"""Request-level slope analyses: single point and polygon grid."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

from slope_api.core.grid import (
    DEFAULT_MAX_GRID_CANDIDATES,
    ElevationMatrix,
    build_elevation_matrix,
    generate_grid,
    offset_coordinates,
)
from slope_api.elevation.batch import DEFAULT_CONCURRENCY, FetchFn, fetch_elevation_batch
from slope_api.errors import GridTooLarge, InvalidCoordinate, InvalidGeometry
from slope_api.logging_utils import log_event
from slope_api.terrain.classification import SlopeClassification, classify_slope
from slope_api.terrain.cross_section import CrossSectionPoint, extract_cross_section
from slope_api.terrain.features_math import CellSlope, ElevationSample, calculate_slope, compute_grid_slopes
from slope_api.terrain.stats import SlopeStats, build_slope_matrix, compute_stats

LOGGER = logging.getLogger(__name__)

# Coverage of the elevation service (Japan).
VALID_LAT_RANGE = (20.0, 46.0)
VALID_LON_RANGE = (122.0, 154.0)
DEFAULT_OFFSET_METERS = 10.0
DEFAULT_MAX_GRID_POINTS = 500


@dataclass(frozen=True, slots=True)
class SlopeResult:
    center_elevation: float
    points: list[ElevationSample]
    slope_degrees: float
    slope_percent: float
    aspect_degrees: float | None
    aspect_direction: str | None
    classification: SlopeClassification


@dataclass(frozen=True, slots=True)
class GridInfo:
    rows: int
    cols: int
    interval: float
    total_points: int
    origin_lat: float
    origin_lon: float


@dataclass(frozen=True, slots=True)
class GridAnalysis:
    grid_info: GridInfo
    elevation_matrix: ElevationMatrix
    slope_matrix: list[list[float | None]]
    slopes: list[CellSlope]
    stats: SlopeStats
    cross_section: list[CrossSectionPoint] | None = None


def validate_coordinate(lat: float, lon: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinate("lat and lon must be finite numbers", details={"lat": lat, "lon": lon})
    if not (VALID_LAT_RANGE[0] <= lat <= VALID_LAT_RANGE[1]) or not (
        VALID_LON_RANGE[0] <= lon <= VALID_LON_RANGE[1]
    ):
        raise InvalidCoordinate(
            f"Coordinate must lie within lat {VALID_LAT_RANGE[0]:g}-{VALID_LAT_RANGE[1]:g}, "
            f"lon {VALID_LON_RANGE[0]:g}-{VALID_LON_RANGE[1]:g}",
            details={"lat": lat, "lon": lon},
        )


def analyze_point(
    lat: float,
    lon: float,
    fetch: FetchFn,
    *,
    offset_meters: float = DEFAULT_OFFSET_METERS,
) -> SlopeResult:
    """Slope, aspect and classification at one coordinate.

    The five cross samples are fetched in parallel; any lookup error
    (`NoElevationData`, `UpstreamUnavailable`) fails the whole request.
    """
    validate_coordinate(lat, lon)
    cross = offset_coordinates(lat, lon, offset_meters)

    with ThreadPoolExecutor(max_workers=len(cross), thread_name_prefix="slope-point") as pool:
        elevations = list(pool.map(lambda item: fetch(item[1].lat, item[1].lon), cross))

    samples = [
        ElevationSample(lat=coord.lat, lon=coord.lon, elevation=float(elevation), label=label)
        for (label, coord), elevation in zip(cross, elevations)
    ]
    sa = calculate_slope(samples, offset_meters)
    classification = classify_slope(sa.slope_degrees)

    log_event(
        LOGGER,
        "slope.point",
        "Computed point slope",
        lat=lat,
        lon=lon,
        slope_deg=round(sa.slope_degrees, 2),
        band=classification.name,
    )
    return SlopeResult(
        center_elevation=samples[0].elevation,
        points=samples,
        slope_degrees=sa.slope_degrees,
        slope_percent=sa.slope_percent,
        aspect_degrees=sa.aspect_degrees,
        aspect_direction=sa.aspect_direction,
        classification=classification,
    )


def analyze_polygon(
    polygon: Sequence[Sequence[float]],
    interval: float,
    fetch: FetchFn,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    max_points: int = DEFAULT_MAX_GRID_POINTS,
    max_candidates: int = DEFAULT_MAX_GRID_CANDIDATES,
    cross_section_line: Sequence[Sequence[float]] | None = None,
) -> GridAnalysis:
    """Sample a polygon, fetch elevations, and compute the slope field and statistics.

    Structural problems (geometry, interval, grid size) raise before any lookup;
    per-point lookup failures only leave holes in the matrices. `max_candidates`
    bounds the bbox grid tested for containment, `max_points` the nodes fetched.
    """
    grid = generate_grid(polygon, interval, max_candidates=max_candidates)
    n_points = len(grid.points)
    if n_points == 0:
        raise InvalidGeometry(
            "No grid points fall inside the polygon; enlarge the polygon or reduce the interval",
            details={"rows": grid.rows, "cols": grid.cols},
        )
    if n_points > max_points:
        raise GridTooLarge(
            f"Polygon yields {n_points} grid points (limit {max_points}); increase the interval",
            details={"total_points": n_points, "max_points": max_points},
        )

    log_event(
        LOGGER,
        "grid.generate",
        "Generated sampling grid",
        rows=grid.rows,
        cols=grid.cols,
        points=n_points,
        interval=interval,
    )

    elevations = fetch_elevation_batch(grid.points, fetch, concurrency=concurrency)
    matrix = build_elevation_matrix(elevations, grid.rows, grid.cols)
    slopes = compute_grid_slopes(matrix.z, interval)
    stats = compute_stats(slopes, matrix.z)

    cross_section = None
    if cross_section_line is not None and len(cross_section_line) >= 2:
        cross_section = extract_cross_section(
            matrix.z,
            grid.origin_lat,
            grid.origin_lon,
            interval,
            cross_section_line,
        )

    log_event(
        LOGGER,
        "slope.grid",
        "Computed grid slopes",
        cells=len(slopes),
        mean_deg=round(stats.mean_degrees, 2),
        max_deg=round(stats.max_degrees, 2),
    )
    return GridAnalysis(
        grid_info=GridInfo(
            rows=grid.rows,
            cols=grid.cols,
            interval=float(interval),
            total_points=n_points,
            origin_lat=grid.origin_lat,
            origin_lon=grid.origin_lon,
        ),
        elevation_matrix=matrix,
        slope_matrix=build_slope_matrix(slopes, grid.rows, grid.cols),
        slopes=slopes,
        stats=stats,
        cross_section=cross_section,
    )
