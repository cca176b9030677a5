"""Domain errors and standardized error responses."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    loc: Optional[list[str | int]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error response model."""
    code: str
    message: str
    details: Optional[Any] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": "invalid_interval",
                "message": "interval must be between 1 and 50 meters",
                "details": {"interval": 120.0},
            }
        }
    }


class TerrainAnalysisError(Exception):
    """Base class for errors raised by the elevation/slope engine."""

    code = "terrain_analysis_error"
    status_code = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class ElevationSourceError(TerrainAnalysisError):
    """A single elevation lookup failed; fatal for that point only."""


class NoElevationData(ElevationSourceError):
    """The elevation service has no usable value for the point (e.g. open sea)."""

    code = "no_elevation_data"
    status_code = 422


class UpstreamUnavailable(ElevationSourceError):
    """Network failure, timeout or non-success status from the elevation service."""

    code = "upstream_unavailable"
    status_code = 502


class InvalidGeometry(TerrainAnalysisError):
    code = "invalid_geometry"
    status_code = 400


class InvalidSampleSet(TerrainAnalysisError):
    code = "invalid_sample_set"
    status_code = 422


class InvalidInterval(TerrainAnalysisError):
    code = "invalid_interval"
    status_code = 400


class GridTooLarge(InvalidInterval):
    code = "grid_too_large"


class InvalidCoordinate(TerrainAnalysisError):
    code = "invalid_coordinate"
    status_code = 400
