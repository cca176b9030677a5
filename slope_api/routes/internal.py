from fastapi import APIRouter, Depends

from slope_api.config import settings
from slope_api.elevation import ElevationClient
from slope_api.routes.slope import get_elevation_client

internal_router = APIRouter(tags=["internal"])


@internal_router.get("/health")
def healthcheck(client: ElevationClient = Depends(get_elevation_client)) -> dict:
    """Readiness probe; also reports how many elevations the shared cache holds."""
    return {"status": "ok", "elevation_cache_entries": len(client.cache)}


@internal_router.get("/version")
async def version() -> dict:
    """Return the app version, deployment metadata and the elevation source in use."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "git_commit": settings.git_commit,
        "environment": settings.environment,
        "elevation_source": settings.elevation_api_url,
    }
