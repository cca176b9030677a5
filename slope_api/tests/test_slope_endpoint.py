from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from slope_api.errors import NoElevationData, UpstreamUnavailable
from slope_api.main import app
from slope_api.routes.slope import get_elevation_client

from conftest import ScriptedElevationSource, square_ring

pytestmark = pytest.mark.integration

client = TestClient(app)


@pytest.fixture
def use_surface():
    """Route elevation lookups to a scripted surface for the duration of a test."""

    def _install(surface):
        source = ScriptedElevationSource(surface)
        app.dependency_overrides[get_elevation_client] = lambda: SimpleNamespace(fetch_elevation=source)
        return source

    yield _install
    app.dependency_overrides.pop(get_elevation_client, None)


def test_post_slope_returns_slope_result(use_surface):
    use_surface(lambda lat, lon: 120.0 + (lat - 35.0) * 1e4)

    response = client.post("/slope", json={"lat": 35.0, "lon": 139.0})

    assert response.status_code == 200
    data = response.json()
    assert data["center_elevation"] == pytest.approx(120.0)
    assert len(data["points"]) == 5
    assert data["slope_degrees"] > 0
    assert data["aspect_direction"] == "S"
    assert data["classification"]["name"] in {"flat", "gentle", "moderate", "steep", "very steep"}
    assert set(data["classification"]) == {"level", "name", "label", "color"}


def test_post_slope_flat_has_null_aspect(use_surface):
    use_surface(lambda lat, lon: 10.0)
    data = client.post("/slope", json={"lat": 35.0, "lon": 139.0}).json()
    assert data["slope_degrees"] == 0.0
    assert data["aspect_degrees"] is None
    assert data["classification"]["name"] == "flat"


def test_post_slope_outside_japan_is_400(use_surface):
    source = use_surface(lambda lat, lon: 10.0)
    response = client.post("/slope", json={"lat": 51.5, "lon": -0.1})
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_coordinate"
    assert source.calls == []


def test_post_slope_upstream_down_is_502(use_surface):
    def surface(lat, lon):
        raise UpstreamUnavailable("Elevation service request failed: 503")

    use_surface(surface)
    response = client.post("/slope", json={"lat": 35.0, "lon": 139.0})
    assert response.status_code == 502
    body = response.json()
    assert body["code"] == "upstream_unavailable"
    assert "503" in body["message"]


def test_post_slope_over_sea_is_422(use_surface):
    def surface(lat, lon):
        raise NoElevationData("No elevation data")

    use_surface(surface)
    response = client.post("/slope", json={"lat": 34.0, "lon": 141.0})
    assert response.status_code == 422
    assert response.json()["code"] == "no_elevation_data"


def test_post_slope_requires_numeric_coordinates(use_surface):
    use_surface(lambda lat, lon: 10.0)
    response = client.post("/slope", json={"lat": "north", "lon": 139.0})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"][0]["loc"][-1] == "lat"


def test_post_slope_grid_flat_square(use_surface):
    use_surface(lambda lat, lon: 42.0)
    ring = square_ring(35.0, 139.0, 20.0)

    response = client.post("/slope-grid", json={"polygon": ring, "interval": 10})

    assert response.status_code == 200
    data = response.json()
    info = data["grid_info"]
    assert info["total_points"] == 9
    assert len(data["elevation_matrix"]["z"]) == info["rows"]
    assert len(data["elevation_matrix"]["z"][0]) == info["cols"]
    assert data["elevation_matrix"]["x"] == list(range(info["cols"]))
    assert data["stats"]["max_degrees"] == 0.0
    assert data["stats"]["flat_percent"] == pytest.approx(100.0)
    assert data["cross_section"] is None


def test_post_slope_grid_keeps_partial_results(use_surface):
    def surface(lat, lon):
        if lon < 139.0 + 1e-5:
            raise UpstreamUnavailable("timeout")
        return 42.0

    use_surface(surface)
    ring = square_ring(35.0, 139.0, 40.0)
    response = client.post("/slope-grid", json={"polygon": ring, "interval": 10})

    assert response.status_code == 200
    status = response.json()["elevation_matrix"]["status"]
    z = response.json()["elevation_matrix"]["z"]
    assert all(row[0] == "no_data" for row in status if row[0] != "outside")
    assert all(row[0] is None for row in z)
    assert any(v is not None for row in z for v in row)


def test_post_slope_grid_with_cross_section(use_surface):
    use_surface(lambda lat, lon: 42.0)
    ring = square_ring(35.0, 139.0, 40.0)
    response = client.post(
        "/slope-grid",
        json={"polygon": ring, "interval": 10, "cross_section_line": [ring[0], ring[2]]},
    )
    assert response.status_code == 200
    profile = response.json()["cross_section"]
    assert profile and all(p["elevation"] == 42.0 for p in profile)


@pytest.mark.parametrize(
    ("payload", "code"),
    [
        ({"polygon": [[139.0, 35.0], [139.001, 35.0], [139.0, 35.0]], "interval": 5}, "invalid_geometry"),
        ({"polygon": square_ring(35.0, 139.0, 40.0), "interval": 100}, "invalid_interval"),
        ({"polygon": square_ring(35.0, 139.0, 40.0), "interval": 0.5}, "invalid_interval"),
        ({"polygon": square_ring(35.0, 139.0, 500.0), "interval": 5}, "grid_too_large"),
        (
            {"polygon": [[139.0, 35.0], [140.0, 35.0], [140.0, 36.0], [139.0, 36.0], [139.0, 35.0]], "interval": 1},
            "grid_too_large",
        ),
    ],
)
def test_post_slope_grid_structural_errors_are_400(use_surface, payload, code):
    source = use_surface(lambda lat, lon: 42.0)
    response = client.post("/slope-grid", json=payload)
    assert response.status_code == 400
    assert response.json()["code"] == code
    assert source.calls == []


def test_post_slope_grid_missing_polygon_is_validation_error(use_surface):
    use_surface(lambda lat, lon: 42.0)
    response = client.post("/slope-grid", json={"interval": 5})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
