"""Single-point elevation lookups against the GSI elevation service."""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from slope_api.config import GSI_ELEVATION_URL
from slope_api.elevation.cache import ElevationCache
from slope_api.errors import NoElevationData, UpstreamUnavailable
from slope_api.logging_utils import log_event

LOGGER = logging.getLogger(__name__)
DEFAULT_TIMEOUT_SECONDS = 10.0


def build_query_params(lat: float, lon: float) -> dict[str, str]:
    """Query parameters for one lookup (the service takes lon before lat)."""
    return {"lon": repr(float(lon)), "lat": repr(float(lat)), "outtype": "JSON"}


def parse_elevation(payload: Any, lat: float, lon: float) -> float:
    """Extract a finite elevation from a decoded response body.

    The service answers points without coverage (typically open sea) with a
    placeholder such as `"-----"` instead of a number.
    """
    raw = payload.get("elevation") if isinstance(payload, dict) else None
    try:
        elevation = float(raw)
    except (TypeError, ValueError):
        raise NoElevationData(
            f"No elevation data at ({lat:.6f}, {lon:.6f})",
            details={"lat": lat, "lon": lon, "elevation": raw},
        ) from None
    if not math.isfinite(elevation):
        raise NoElevationData(
            f"No elevation data at ({lat:.6f}, {lon:.6f})",
            details={"lat": lat, "lon": lon, "elevation": raw},
        )
    return elevation


class ElevationClient:
    """Resolve point elevations, consulting the shared cache before the network.

    The underlying `httpx.Client` is safe to share between worker threads.
    """

    def __init__(
        self,
        cache: ElevationCache,
        *,
        base_url: str = GSI_ELEVATION_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.cache = cache
        self.base_url = base_url
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def __enter__(self) -> "ElevationClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def fetch_elevation(self, lat: float, lon: float) -> float:
        """Return the elevation in meters at `(lat, lon)`.

        Raises `UpstreamUnavailable` on transport errors, timeouts and non-2xx
        responses, and `NoElevationData` when the body has no finite elevation.
        """
        cached = self.cache.get(lat, lon)
        if cached is not None:
            return cached

        try:
            response = self._http.get(self.base_url, params=build_query_params(lat, lon))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            log_event(
                LOGGER,
                "elevation.fetch",
                "Elevation request failed",
                level="warning",
                lat=lat,
                lon=lon,
                error=str(exc),
            )
            raise UpstreamUnavailable(
                f"Elevation service request failed: {exc}",
                details={"lat": lat, "lon": lon},
            ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        elevation = parse_elevation(payload, lat, lon)

        self.cache.put(lat, lon, elevation)
        return elevation
