"""Elevation lookups: shared cache, source client and batch fetcher."""

from .batch import fetch_elevation_batch
from .cache import ElevationCache, cache_key
from .client import ElevationClient

__all__ = [
    "ElevationCache",
    "ElevationClient",
    "cache_key",
    "fetch_elevation_batch",
]
