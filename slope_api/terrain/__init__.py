"""Terrain analysis: slope/aspect math, classification and grid statistics."""

from .classification import SLOPE_CLASSES, SlopeClassification, classify_slope
from .features_math import CellSlope, ElevationSample, calculate_slope, compute_grid_slopes
from .service import GridAnalysis, SlopeResult, analyze_point, analyze_polygon
from .stats import SlopeStats, compute_stats

__all__ = [
    "SLOPE_CLASSES",
    "SlopeClassification",
    "classify_slope",
    "CellSlope",
    "ElevationSample",
    "calculate_slope",
    "compute_grid_slopes",
    "GridAnalysis",
    "SlopeResult",
    "analyze_point",
    "analyze_polygon",
    "SlopeStats",
    "compute_stats",
]
