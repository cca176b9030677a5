"""Polygon sampling grid and elevation matrix helpers.

Conventions (sampling order)
- **CRS**: EPSG:4326 (WGS84), decimal degrees.
- **Polygon input**: a GeoJSON-style exterior ring of `[lon, lat]` pairs, closed
  (first vertex repeated as the last one), at least 4 pairs.
- **Indexing**: `(row, col)`; row 0 is the **northern** edge of the polygon bbox and
  row increases southward, col 0 is the **western** edge and col increases eastward.
  This is the opposite row direction from a south-up analysis grid; consumers index
  the elevation matrix by it, so it must not be flipped.
- **Origin fields**: `origin_lat`/`origin_lon` are the north-west corner of the bbox,
  i.e. the coordinate of cell `(0, 0)`.

Meter spacing is converted to degrees with an equirectangular approximation using a
single conversion factor taken at the bbox center latitude. That is only accurate
for small areas (tens to hundreds of meters), which is what the grid limits allow.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import shapely
from shapely.geometry import Polygon
from shapely.validation import explain_validity

from slope_api.errors import GridTooLarge, InvalidCoordinate, InvalidGeometry, InvalidInterval

EARTH_RADIUS_M = 6_371_000.0
MIN_GRID_INTERVAL_M = 1.0
MAX_GRID_INTERVAL_M = 50.0
MIN_RING_VERTICES = 4
# Upper bound on rows x cols candidate nodes tested for containment.
DEFAULT_MAX_GRID_CANDIDATES = 100_000

CROSS_LABELS = ("center", "north", "south", "east", "west")


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 point in decimal degrees."""

    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class GridPoint:
    lat: float
    lon: float
    row: int
    col: int


@dataclass(frozen=True, slots=True)
class GridElevation:
    lat: float
    lon: float
    row: int
    col: int
    elevation: float  # NaN when the lookup failed

    @classmethod
    def from_point(cls, point: GridPoint, elevation: float) -> "GridElevation":
        return cls(lat=point.lat, lon=point.lon, row=point.row, col=point.col, elevation=elevation)

    @property
    def has_elevation(self) -> bool:
        return math.isfinite(self.elevation)


@dataclass(frozen=True, slots=True)
class SamplingGrid:
    """Interior sample points of a polygon plus the dense grid they index into."""

    points: list[GridPoint]
    rows: int
    cols: int
    origin_lat: float  # northern edge
    origin_lon: float  # western edge
    lat_step: float  # degrees between rows
    lon_step: float  # degrees between columns

    @property
    def candidate_count(self) -> int:
        return self.rows * self.cols

    def coordinate_at(self, row: int, col: int) -> Coordinate:
        """Coordinate of a grid node, whether or not it lies inside the polygon."""
        return Coordinate(
            lat=self.origin_lat - row * self.lat_step,
            lon=self.origin_lon + col * self.lon_step,
        )


@dataclass(frozen=True, slots=True)
class ElevationMatrix:
    """Dense rows x cols elevation matrix for plotting and grid statistics.

    `z` holds None both for cells outside the polygon and for cells whose lookup
    failed. `status` tells the two apart: "ok", "no_data" or "outside".
    """

    z: list[list[float | None]]
    x: list[int]
    y: list[int]
    status: list[list[str]]


def meters_to_degrees(meters: float, at_lat: float) -> tuple[float, float]:
    """Return `(d_lat, d_lon)` spanning `meters` north-south / east-west at `at_lat`."""
    d_lat = math.degrees(meters / EARTH_RADIUS_M)
    cos_lat = math.cos(math.radians(at_lat))
    if cos_lat <= 1e-12:
        raise InvalidCoordinate(f"Cannot convert meters to longitude degrees at latitude {at_lat}")
    d_lon = math.degrees(meters / (EARTH_RADIUS_M * cos_lat))
    return d_lat, d_lon


def offset_coordinates(lat: float, lon: float, offset_meters: float = 10.0) -> list[tuple[str, Coordinate]]:
    """Return the labeled five-point cross around `(lat, lon)`.

    Order is center, north, south, east, west. The longitude offset is scaled by
    the cosine of the center latitude.
    """
    if not (math.isfinite(offset_meters) and offset_meters > 0):
        raise InvalidInterval("offset_meters must be a positive finite number", details={"offset_meters": offset_meters})
    d_lat, d_lon = meters_to_degrees(offset_meters, lat)
    return [
        ("center", Coordinate(lat, lon)),
        ("north", Coordinate(lat + d_lat, lon)),
        ("south", Coordinate(lat - d_lat, lon)),
        ("east", Coordinate(lat, lon + d_lon)),
        ("west", Coordinate(lat, lon - d_lon)),
    ]


def validate_interval(interval_m: float) -> float:
    interval = float(interval_m)
    if not math.isfinite(interval) or not (MIN_GRID_INTERVAL_M <= interval <= MAX_GRID_INTERVAL_M):
        raise InvalidInterval(
            f"interval must be between {MIN_GRID_INTERVAL_M:g} and {MAX_GRID_INTERVAL_M:g} meters",
            details={"interval": interval_m},
        )
    return interval


def polygon_from_ring(ring: Sequence[Sequence[float]]) -> Polygon:
    """Build and validate a shapely Polygon from a `[lon, lat]` ring."""
    if ring is None or len(ring) < MIN_RING_VERTICES:
        raise InvalidGeometry(
            f"polygon must have at least {MIN_RING_VERTICES} [lon, lat] pairs",
            details={"vertex_count": 0 if ring is None else len(ring)},
        )

    coords: list[tuple[float, float]] = []
    for idx, pair in enumerate(ring):
        if len(pair) != 2:
            raise InvalidGeometry(f"polygon vertex {idx} is not a [lon, lat] pair")
        lon, lat = float(pair[0]), float(pair[1])
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise InvalidGeometry(f"polygon vertex {idx} is not finite")
        coords.append((lon, lat))

    if coords[0] != coords[-1]:
        raise InvalidGeometry("polygon ring must be closed (first and last vertex equal)")

    poly = Polygon(coords)
    if poly.is_empty or poly.area <= 0:
        raise InvalidGeometry("polygon has no area")
    if not poly.is_valid:
        raise InvalidGeometry("polygon is not valid", details={"reason": explain_validity(poly)})
    return poly


def generate_grid(
    ring: Sequence[Sequence[float]],
    interval_m: float,
    *,
    max_candidates: int = DEFAULT_MAX_GRID_CANDIDATES,
) -> SamplingGrid:
    """Sample the interior of a polygon at a fixed metric interval.

    Candidate nodes cover the polygon bbox (`rows = ceil(height / d_lat) + 1`, same for
    cols); only nodes covered by the polygon (boundary included) are returned.
    Raises `GridTooLarge` before allocating when `rows * cols` exceeds `max_candidates`.
    """
    interval = validate_interval(interval_m)
    poly = polygon_from_ring(ring)

    min_lon, min_lat, max_lon, max_lat = poly.bounds
    center_lat = (min_lat + max_lat) / 2.0
    d_lat, d_lon = meters_to_degrees(interval, center_lat)

    rows = int(math.ceil((max_lat - min_lat) / d_lat)) + 1
    cols = int(math.ceil((max_lon - min_lon) / d_lon)) + 1
    if rows * cols > max_candidates:
        raise GridTooLarge(
            f"Polygon bounding box spans {rows * cols} grid nodes (limit {max_candidates}); increase the interval",
            details={"rows": rows, "cols": cols, "max_candidates": max_candidates},
        )

    row_idx, col_idx = np.meshgrid(np.arange(rows), np.arange(cols), indexing="ij")
    lats = max_lat - row_idx * d_lat
    lons = min_lon + col_idx * d_lon

    inside = shapely.covers(poly, shapely.points(lons.ravel(), lats.ravel())).reshape(rows, cols)

    points = [
        GridPoint(lat=float(lats[r, c]), lon=float(lons[r, c]), row=int(r), col=int(c))
        for r, c in zip(*np.nonzero(inside))
    ]
    return SamplingGrid(
        points=points,
        rows=rows,
        cols=cols,
        origin_lat=max_lat,
        origin_lon=min_lon,
        lat_step=d_lat,
        lon_step=d_lon,
    )


def build_elevation_matrix(elevations: Iterable[GridElevation], rows: int, cols: int) -> ElevationMatrix:
    """Reshape sparse grid elevations into a dense matrix (None where absent)."""
    z: list[list[float | None]] = [[None] * cols for _ in range(rows)]
    status: list[list[str]] = [["outside"] * cols for _ in range(rows)]

    for pt in elevations:
        if pt.has_elevation:
            z[pt.row][pt.col] = float(pt.elevation)
            status[pt.row][pt.col] = "ok"
        else:
            status[pt.row][pt.col] = "no_data"

    return ElevationMatrix(z=z, x=list(range(cols)), y=list(range(rows)), status=status)


def matrix_to_array(z: Sequence[Sequence[float | None]]) -> np.ndarray:
    """Convert a None-holed matrix to a float array with NaN holes."""
    return np.array([[np.nan if v is None else float(v) for v in row] for row in z], dtype=float).reshape(
        len(z), len(z[0]) if z else 0
    )
