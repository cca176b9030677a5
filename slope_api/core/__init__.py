"""Core shared helpers for polygon sampling grids and coordinates."""

from .grid import (
    EARTH_RADIUS_M,
    Coordinate,
    ElevationMatrix,
    GridElevation,
    GridPoint,
    SamplingGrid,
    build_elevation_matrix,
    generate_grid,
    meters_to_degrees,
    offset_coordinates,
)

__all__ = [
    "EARTH_RADIUS_M",
    "Coordinate",
    "ElevationMatrix",
    "GridElevation",
    "GridPoint",
    "SamplingGrid",
    "build_elevation_matrix",
    "generate_grid",
    "meters_to_degrees",
    "offset_coordinates",
]
