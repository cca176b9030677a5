"""FastAPI routes for point and polygon slope analysis."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from slope_api.config import settings
from slope_api.elevation import ElevationCache, ElevationClient
from slope_api.terrain import analyze_point, analyze_polygon

slope_router = APIRouter(tags=["slope"])


@lru_cache(maxsize=1)
def get_elevation_client() -> ElevationClient:
    """Process-wide elevation client; its cache is shared by every request."""
    cache = ElevationCache(
        ttl_seconds=settings.elevation_cache_ttl_seconds,
        max_entries=settings.elevation_cache_max_entries,
    )
    return ElevationClient(
        cache,
        base_url=settings.elevation_api_url,
        timeout_seconds=settings.elevation_request_timeout_seconds,
    )


def close_elevation_client() -> None:
    """Close the shared client if one was built; the next request builds a fresh one."""
    if get_elevation_client.cache_info().currsize:
        get_elevation_client().close()
        get_elevation_client.cache_clear()


class SlopeRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    lat: float
    lon: float


class SlopeGridRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    polygon: list[list[float]] = Field(..., description="Closed exterior ring of [lon, lat] pairs")
    interval: float = Field(5.0, description="Grid spacing in meters (1-50)")
    cross_section_line: Optional[list[list[float]]] = Field(
        None, description="Optional polyline of [lon, lat] pairs for an elevation profile"
    )


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ClassificationOut(_FromAttributes):
    level: int
    name: str
    label: str
    color: str


class ElevationPointOut(_FromAttributes):
    lat: float
    lon: float
    elevation: float
    label: Optional[str] = None


class SlopeResponse(_FromAttributes):
    center_elevation: float
    points: list[ElevationPointOut]
    slope_degrees: float
    slope_percent: float
    aspect_degrees: Optional[float]
    aspect_direction: Optional[str]
    classification: ClassificationOut


class GridInfoOut(_FromAttributes):
    rows: int
    cols: int
    interval: float
    total_points: int
    origin_lat: float
    origin_lon: float


class ElevationMatrixOut(_FromAttributes):
    z: list[list[Optional[float]]]
    x: list[int]
    y: list[int]
    status: list[list[str]]


class CellSlopeOut(_FromAttributes):
    row: int
    col: int
    degrees: float
    percent: float
    aspect_degrees: Optional[float]
    aspect_direction: Optional[str]
    classification: ClassificationOut


class DistributionBucketOut(_FromAttributes):
    name: str
    label: str
    color: str
    count: int
    percent: float


class SlopeStatsOut(_FromAttributes):
    mean_degrees: float
    min_degrees: float
    max_degrees: float
    std_degrees: float
    min_elevation: float
    max_elevation: float
    avg_elevation: float
    elevation_range: float
    cell_count: int
    distribution: list[DistributionBucketOut]
    flat_percent: float
    steep_percent: float


class CrossSectionPointOut(_FromAttributes):
    distance: float
    elevation: float
    lat: float
    lon: float


class SlopeGridResponse(_FromAttributes):
    grid_info: GridInfoOut
    elevation_matrix: ElevationMatrixOut
    slope_matrix: list[list[Optional[float]]]
    slopes: list[CellSlopeOut]
    stats: SlopeStatsOut
    cross_section: Optional[list[CrossSectionPointOut]] = None


@slope_router.post("/slope", response_model=SlopeResponse)
def post_slope(request: SlopeRequest, client: ElevationClient = Depends(get_elevation_client)):
    """Slope angle, percent, downslope aspect and class at a single coordinate.

    Elevations are sampled at the point and 10 m (configurable) to the north,
    south, east and west. Coordinates must lie in lat 20-46, lon 122-154.
    """
    result = analyze_point(
        request.lat,
        request.lon,
        client.fetch_elevation,
        offset_meters=settings.slope_offset_meters,
    )
    return SlopeResponse.model_validate(result)


@slope_router.post("/slope-grid", response_model=SlopeGridResponse)
def post_slope_grid(request: SlopeGridRequest, client: ElevationClient = Depends(get_elevation_client)):
    """Sample a polygon on a metric grid and return elevation/slope matrices and statistics.

    Points whose elevation lookup fails become holes (`null`) in the matrices
    rather than failing the request.
    """
    analysis = analyze_polygon(
        request.polygon,
        request.interval,
        client.fetch_elevation,
        concurrency=settings.elevation_batch_concurrency,
        max_points=settings.max_grid_points,
        max_candidates=settings.max_grid_candidates,
        cross_section_line=request.cross_section_line,
    )
    return SlopeGridResponse.model_validate(analysis)
