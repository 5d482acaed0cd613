"""Tests for the Flask API."""

import pytest

from station_heatmap.app import create_app
from station_heatmap.models import Grid
from station_heatmap.stations import StationFeedError

SF_BBOX = "-122.45,37.75,-122.41,37.79"


@pytest.fixture
def client(sf_stations):
    app = create_app(lambda: sf_stations)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def empty_client():
    return create_app(lambda: []).test_client()


class TestIndex:
    def test_root_and_cors(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.get_json()["ok"] is True
        assert resp.headers["Access-Control-Allow-Origin"] == "*"


class TestGridEndpoint:
    def test_grid_json(self, client):
        body = client.get(f"/grid?bbox={SF_BBOX}&zoom=10").get_json()
        assert body["cell_size_km"] == 1.0
        assert body["cols"] >= 1 and body["rows"] >= 1
        assert len(body["cells"]) == body["cols"] * body["rows"]
        for cell in body["cells"]:
            assert set(cell) == {"temperature", "humidity", "wind_speed_mph", "alpha"}
            assert 55.0 - 1e-9 <= cell["temperature"] <= 65.0 + 1e-9

    def test_below_min_zoom(self, client):
        body = client.get(f"/grid?bbox={SF_BBOX}&zoom=5").get_json()
        assert body == {"grid": None, "reason": "below_min_zoom"}

    def test_no_stations(self, empty_client):
        body = empty_client.get(f"/grid?bbox={SF_BBOX}&zoom=12").get_json()
        assert body["reason"] == "no_stations"

    def test_over_budget(self, client):
        body = client.get("/grid?bbox=-130,25,-100,50&zoom=9").get_json()
        assert body["reason"] == "over_budget"

    @pytest.mark.parametrize("qs", [
        "bbox=1,2,3&zoom=10",
        "bbox=a,b,c,d&zoom=10",
        "bbox=-122.41,37.75,-122.45,37.79&zoom=10",
        f"bbox={SF_BBOX}",
        f"bbox={SF_BBOX}&zoom=close",
        "bbox=-inf,37.75,-122.41,37.79&zoom=12",
        "bbox=-122.45,nan,-122.41,37.79&zoom=12",
        "bbox=-200,37.75,-122.41,37.79&zoom=12",
        "bbox=-122.45,37.75,-122.41,95&zoom=12",
        f"bbox={SF_BBOX}&zoom=inf",
    ])
    def test_bad_params(self, client, qs):
        resp = client.get(f"/grid?{qs}")
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_cell_size_belongs_to_returned_grid(self, client, monkeypatch):
        """Another request moving the shared view mid-response must not relabel this grid."""
        view = client.application.config["HEATMAP_VIEW"]
        original = Grid.to_dict

        def to_dict_with_interleaved_update(grid):
            view.cell_size_km = 0.5
            return original(grid)

        monkeypatch.setattr(Grid, "to_dict", to_dict_with_interleaved_update)
        body = client.get(f"/grid?bbox={SF_BBOX}&zoom=10").get_json()
        assert body["cell_size_km"] == 1.0

    def test_feed_failure(self):
        def broken():
            raise StationFeedError("station feed returned HTTP 503")

        resp = create_app(broken).test_client().get(f"/grid?bbox={SF_BBOX}&zoom=10")
        assert resp.status_code == 502
        assert resp.get_json() == {"error": "Failed to fetch station data"}


class TestGridPng:
    def test_png(self, client):
        resp = client.get(f"/grid.png?bbox={SF_BBOX}&zoom=12&metric=humidity&scale=2")
        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "image/png"
        assert resp.data.startswith(b"\x89PNG")

    def test_no_grid_is_204(self, client):
        resp = client.get(f"/grid.png?bbox={SF_BBOX}&zoom=5")
        assert resp.status_code == 204

    @pytest.mark.parametrize("scale", ["nan", "inf", "-inf", "0", "17"])
    def test_bad_scale(self, client, scale):
        resp = client.get(f"/grid.png?bbox={SF_BBOX}&zoom=12&scale={scale}")
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_non_finite_bbox(self, client):
        resp = client.get("/grid.png?bbox=-inf,37.75,-122.41,37.79&zoom=12")
        assert resp.status_code == 400

    def test_unknown_metric(self, client):
        resp = client.get(f"/grid.png?bbox={SF_BBOX}&zoom=12&metric=pressure")
        assert resp.status_code == 400


class TestPointAndLegend:
    def test_point(self, client):
        body = client.get("/point?lat=37.78&lon=-122.42").get_json()
        assert body["reading"]["temperature"] == 65.0
        assert body["reading"]["alpha"] == 1.0
        assert body["nearest"]["id"] == "B"
        assert body["nearest"]["distance_km"] == 0.0

    def test_point_no_stations(self, empty_client):
        body = empty_client.get("/point?lat=37.78&lon=-122.42").get_json()
        assert body["reading"] is None

    def test_point_requires_coords(self, client):
        assert client.get("/point?lat=37.78").status_code == 400

    def test_point_rejects_non_finite(self, client):
        assert client.get("/point?lat=nan&lon=-122.42").status_code == 400

    def test_legend(self, client):
        body = client.get("/legend?metric=temperature").get_json()
        assert body["unit"] == "°F"
        assert body["ticks"] == [35, 47, 55, 63, 75]
        assert body["stops"][0] == {"value": 35.0, "color": "#00cfff"}
