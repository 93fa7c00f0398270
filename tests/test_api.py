"""
Tests for FastAPI backend.

Run with: pytest tests/test_api.py -v
"""

import pytest
import sys
import os

# Add paths for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'web', 'backend'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


@pytest.fixture(scope="module")
def client():
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


class TestAPIModels:
    """Test Pydantic models for API."""

    def test_scenario_request_defaults(self):
        from main import ScenarioRequest

        request = ScenarioRequest()
        assert request.it_load_MW == 200.0
        assert request.recovery_pct == 5.0
        assert request.selected_offtake == "dac"
        assert request.pricing.dac_market_price_per_t == 600.0

    def test_scenario_request_bounds(self):
        from pydantic import ValidationError
        from main import ScenarioRequest

        with pytest.raises(ValidationError):
            ScenarioRequest(recovery_pct=150)

        with pytest.raises(ValidationError):
            ScenarioRequest(cooling_cop=0)

    def test_to_inputs(self):
        from main import ScenarioRequest
        from whr import MarketPricing, OfftakeKind

        inputs = ScenarioRequest(selected_offtake="greenhouses", ownership_model="c").to_inputs()
        assert inputs.selected_offtake is OfftakeKind.GREENHOUSES
        assert inputs.ownership_model.value == "C"
        assert isinstance(inputs.pricing, MarketPricing)


class TestAPIEndpoints:
    """Test API endpoints through the ASGI test client."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "/api/compute" in response.text

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        for key in ["timestamp", "version", "reference_version"]:
            assert key in data

    def test_compute_defaults(self, client):
        response = client.post("/api/compute", json={})
        assert response.status_code == 200

        data = response.json()
        assert data["thermal"]["recoverable_heat_MW"] == 10.0
        assert data["metadata"]["location"] == "Frankfurt"
        assert data["ownership"]["selected"] == "A"
        assert set(data["ownership"]["models"]) == {"A", "B", "C"}

    def test_compute_dac_scenario(self, client):
        response = client.post("/api/compute", json={
            "it_load_MW": 50,
            "recovery_pct": 10,
            "hours_per_year": 8760,
            "dc_return_temp_C": 65,
        })
        assert response.status_code == 200
        assert response.json()["offtake_outputs"]["dac_tco2"] == pytest.approx(22750.0)

    def test_compute_unknown_offtake(self, client):
        response = client.post("/api/compute", json={"selected_offtake": "bitcoin"})
        assert response.status_code == 422
        assert "Unknown offtake" in response.json()["detail"]

    def test_compute_out_of_range(self, client):
        response = client.post("/api/compute", json={"recovery_pct": 150})
        assert response.status_code == 422

    def test_list_offtakes(self, client):
        data = client.get("/api/offtakes").json()

        assert len(data["offtakes"]) == 7
        dac = next(o for o in data["offtakes"] if o["id"] == "dac")
        assert dac["ramp"] == {"t0_C": 30.0, "t1_C": 65.0, "v0": 0.5, "v1": 1.0}

    def test_list_locations(self, client):
        data = client.get("/api/locations").json()

        ids = [loc["id"] for loc in data["locations"]]
        assert "Frankfurt" in ids
        assert "Phoenix" in ids

    def test_list_facilities(self, client):
        data = client.get("/api/facilities").json()

        dry = {f["id"]: f["dry_cooled"] for f in data["facilities"]}
        assert dry["air_cooled_enterprise"] is True
        assert dry["evaporative_hyperscale"] is False

    def test_co2(self, client):
        data = client.get("/api/co2", params={"recoverable_heat_MW": 2}).json()

        dac = next(r for r in data["rows"] if r["kind"] == "dac")
        assert dac["max_kt_per_year"] == pytest.approx(9.1)

    def test_ramp_curve(self, client):
        response = client.get("/api/ramp/dac", params={"t_min": 30, "t_max": 65, "n_points": 3})
        assert response.status_code == 200

        data = response.json()
        assert data["temperatures_C"] == [30.0, 47.5, 65.0]
        assert data["factors"] == pytest.approx([0.5, 0.75, 1.0])

    def test_ramp_unknown_offtake(self, client):
        response = client.get("/api/ramp/bitcoin")
        assert response.status_code == 404

    def test_ramp_bad_range(self, client):
        response = client.get("/api/ramp/dac", params={"t_min": 60, "t_max": 40})
        assert response.status_code == 400

    def test_ramp_range_out_of_bounds(self, client):
        for params in ({"t_max": "inf"}, {"t_max": 1e6}, {"t_min": "-inf"}):
            response = client.get("/api/ramp/dac", params=params)
            assert response.status_code == 422

    def test_ramp_range_at_bounds(self, client):
        response = client.get("/api/ramp/dac", params={"t_min": -50, "t_max": 200, "n_points": 2})
        assert response.status_code == 200
        assert response.json()["factors"] == pytest.approx([0.5, 1.0])
