"""Pytest configuration for slope_api tests.

This configuration file:
1. Adds the workspace root to sys.path so `slope_api` imports without an install
2. Registers custom pytest marks to eliminate warnings
3. Provides shared fakes (clock, scripted elevation source) for engine tests
"""
import math
import sys
import threading
from pathlib import Path

import pytest

workspace_root = Path(__file__).parent.parent.parent
if str(workspace_root) not in sys.path:
    sys.path.insert(0, str(workspace_root))


def pytest_configure(config):
    """Register custom pytest marks."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test (runs full pipeline, may be slower)",
    )


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedElevationSource:
    """Thread-safe `(lat, lon) -> elevation` stand-in for the elevation client.

    `surface(lat, lon)` returns the elevation, or raises to simulate an upstream
    failure. Every call is recorded.
    """

    def __init__(self, surface) -> None:
        self.surface = surface
        self.calls: list[tuple[float, float]] = []
        self._lock = threading.Lock()

    def __call__(self, lat: float, lon: float) -> float:
        with self._lock:
            self.calls.append((lat, lon))
        return self.surface(lat, lon)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def flat_source():
    return ScriptedElevationSource(lambda lat, lon: 100.0)


def square_ring(lat: float, lon: float, size_m: float) -> list[list[float]]:
    """Closed [lon, lat] ring of a size_m x size_m square with its SW corner at (lat, lon)."""
    d_lat = math.degrees(size_m / 6_371_000.0)
    d_lon = math.degrees(size_m / (6_371_000.0 * math.cos(math.radians(lat + d_lat / 2))))
    return [
        [lon, lat],
        [lon + d_lon, lat],
        [lon + d_lon, lat + d_lat],
        [lon, lat + d_lat],
        [lon, lat],
    ]
