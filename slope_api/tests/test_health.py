from types import SimpleNamespace

from fastapi.testclient import TestClient

from slope_api.config import GSI_ELEVATION_URL, AppSettings
from slope_api.elevation import ElevationCache
from slope_api.main import app
from slope_api.routes.slope import get_elevation_client


client = TestClient(app)


def test_health_endpoint_reports_cache_size() -> None:
    """Ensure the internal /health endpoint stays wired up."""
    cache = ElevationCache()
    cache.put(35.0, 139.0, 12.5)
    app.dependency_overrides[get_elevation_client] = lambda: SimpleNamespace(cache=cache)
    try:
        response = client.get("/health")
    finally:
        app.dependency_overrides.pop(get_elevation_client, None)

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "elevation_cache_entries": 1}


def test_version_endpoint_reports_app_metadata() -> None:
    response = client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Slope Survey API"
    assert set(data) == {"name", "version", "git_commit", "environment", "elevation_source"}


def test_settings_default_to_gsi_elevation_source(monkeypatch) -> None:
    monkeypatch.delenv("ELEVATION_API_URL", raising=False)
    assert AppSettings().elevation_api_url == GSI_ELEVATION_URL


def test_unknown_route_uses_error_envelope() -> None:
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json()["code"] == "http_404"


def test_shutdown_closes_shared_elevation_client() -> None:
    shared = get_elevation_client()
    assert not shared._http.is_closed

    with TestClient(app) as lifespan_client:
        assert lifespan_client.get("/version").status_code == 200

    assert shared._http.is_closed
    assert get_elevation_client.cache_info().currsize == 0
    assert get_elevation_client() is not shared
