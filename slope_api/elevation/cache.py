"""Process-wide elevation cache with TTL expiry and a size cap.

Eviction is by insertion order, not by access: once the cache grows past
`max_entries` the key inserted longest ago is dropped, even if it is
read often. Overwriting a cached key refreshes its value and timestamp but keeps
its original place in the eviction order.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from slope_api.logging_utils import log_event

LOGGER = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_MAX_ENTRIES = 50_000
KEY_DECIMALS = 8  # ~1.1 mm


@dataclass(frozen=True, slots=True)
class CacheEntry:
    elevation: float
    inserted_at: float


def cache_key(lat: float, lon: float) -> str:
    """Quantize a coordinate so equal values with float noise share a key."""
    return f"{lat:.{KEY_DECIMALS}f},{lon:.{KEY_DECIMALS}f}"


class ElevationCache:
    """Thread-safe `{coordinate: elevation}` store shared by concurrent batches."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}  # insertion ordered
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, lat: float, lon: float) -> float | None:
        """Return the cached elevation, or None if missing or older than the TTL."""
        key = cache_key(lat, lon)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at > self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.elevation

    def put(self, lat: float, lon: float, elevation: float) -> None:
        key = cache_key(lat, lon)
        evicted: str | None = None
        with self._lock:
            self._entries[key] = CacheEntry(elevation=float(elevation), inserted_at=self._clock())
            if len(self._entries) > self.max_entries:
                evicted = next(iter(self._entries))
                del self._entries[evicted]

        if evicted is not None:
            log_event(LOGGER, "elevation.cache", "Evicted oldest entry", level="debug", key=evicted)
