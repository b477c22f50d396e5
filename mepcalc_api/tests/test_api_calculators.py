"""
Tests for cable, electrical and export routes.
"""

import pytest


class TestCableRoutes:
    """Test cable sizing and option discovery."""

    def test_size(self, client):
        """Reference 100 A circuit selects 16 mm²."""
        resp = client.post("/api/cable/size", json={"design_current": 100, "length": 50})
        assert resp.status_code == 200
        data = resp.json()
        assert data["selected_size"] == 16
        assert data["min_ccc"] == pytest.approx(100)
        assert data["status"] == "Acceptable"

    def test_invalid_configuration_names_dimension(self, client):
        """Resolver errors come back as 400 with the failing dimension."""
        resp = client.post("/api/cable/size", json={
            "design_current": 100, "length": 50, "armoured": True, "method": "A",
        })
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["dimension"] == "method"
        assert "armoured" in detail["message"]

    def test_no_size_large_enough(self, client):
        """Lookup misses carry the attempted path."""
        resp = client.post("/api/cable/size", json={"design_current": 5000, "length": 10})
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["dimension"] == "size"
        assert detail["path"][-1] == "3_4"

    def test_options(self, client):
        """Armoured multicore offers C and E and explains the rest."""
        resp = client.post("/api/cable/options", json={"armoured": True})
        data = resp.json()
        assert data["methods"] == ["C", "E"]
        assert "A" in data["rejected_methods"]
        assert data["conductors"] == [2, 3, 4]
        assert data["layouts"] == []

    def test_options_layouts(self, client):
        """Layouts are listed once method and conductors are known."""
        resp = client.post("/api/cable/options", json={
            "arrangement": "single", "method": "F_touching", "conductors": 3,
        })
        assert resp.json()["layouts"] == ["flat", "trefoil"]


class TestElectricalRoutes:
    """Test the electrical calculators over HTTP."""

    def test_power_factor(self, client):
        """100 kW from 0.8 to 0.95 needs a 50 kVAr bank."""
        resp = client.post("/api/electrical/power-factor", json={
            "power_kw": 100, "initial_pf": 0.8, "target_pf": 0.95,
        })
        assert resp.status_code == 200
        assert resp.json()["standard_capacitor_kvar"] == 50

    def test_power_factor_engine_error(self, client):
        """Harmonics that push the target above unity are a 400."""
        resp = client.post("/api/electrical/power-factor", json={
            "power_kw": 100, "initial_pf": 0.8, "target_pf": 0.95, "thd_percent": 50,
        })
        assert resp.status_code == 400
        assert "above unity" in resp.json()["detail"]

    def test_circuit_protection(self, client):
        """Default feeder is adequately protected."""
        resp = client.post("/api/electrical/circuit-protection", json={
            "fault_level": 5000, "device_rating": 400, "device_type": "mccb",
            "cable_csa": 120, "cable_length": 80, "disconnection_time": 0.4,
        })
        data = resp.json()
        assert data["protection_adequate"] is True
        assert data["thermally_protected"] is True

    def test_unknown_device(self, client):
        """Unknown device types are rejected by the engine."""
        resp = client.post("/api/electrical/circuit-protection", json={
            "fault_level": 5000, "device_rating": 400, "device_type": "rcbo",
            "cable_csa": 120, "cable_length": 80,
        })
        assert resp.status_code == 400

    def test_fuse_never_operates(self, client):
        """Infinite operating time is sent as null."""
        resp = client.post("/api/electrical/fuse-time", json={"rated_current": 100, "actual_current": 105})
        data = resp.json()
        assert data["operating_time"] is None
        assert data["operates"] is False
        assert data["fuse_type_name"] == "General Purpose (gG)"

    def test_lighting_control(self, client):
        """300 m² at 3.9 W/m² needs 8 control points."""
        resp = client.post("/api/electrical/lighting-control", json={"area": 300, "lpd": 3.9})
        assert resp.json()["control_points"] == 8

    def test_lpd(self, client):
        """Per-space LPD is keyed by space id."""
        resp = client.post("/api/electrical/lpd", json={
            "spaces": [{"id": "s1", "name": "Office", "type": "office_large", "area": 100,
                        "luminaires": [{"luminaire_id": "p", "quantity": 10}]}],
            "luminaires": [{"id": "p", "name": "Panel", "wattage": 60}],
        })
        data = resp.json()
        assert data["spaces"]["s1"]["lpd"] == pytest.approx(6.0)
        assert data["overall_compliant"] is True

    def test_space_types(self, client):
        """Space type catalogue is listed."""
        data = client.get("/api/electrical/lpd/space-types").json()
        assert data["total"] == len(data["space_types"])
        assert any(t["key"] == "corridor" for t in data["space_types"])

    def test_load_balance(self, client):
        """400/425/370 A is 6.70 % unbalanced."""
        resp = client.post("/api/electrical/load-balance", json={
            "phase_a": 400, "phase_b": 425, "phase_c": 370,
        })
        data = resp.json()
        assert data["unbalance_percent"] == pytest.approx(6.70, abs=0.01)
        assert data["compliant"] is True

    def test_load_balance_no_load(self, client):
        """All-zero currents are a 400."""
        resp = client.post("/api/electrical/load-balance", json={"phase_a": 0, "phase_b": 0, "phase_c": 0})
        assert resp.status_code == 400

    def test_save_flag(self, client, history_store):
        """Saved electrical calculations land in history under Electrical."""
        resp = client.post("/api/electrical/load-balance", json={
            "phase_a": 10, "phase_b": 10, "phase_c": 10, "save": True,
        })
        entry = history_store.get(resp.json()["history_id"])
        assert entry["discipline"] == "Electrical"
        assert entry["calculator_name"] == "Load Balancing"
        assert entry["notes"] == "Calculation performed using Load Balancing"


class TestExportRoute:
    """Test POST /api/export/{format}."""

    BODY = {
        "title": "Load Balancing",
        "discipline": "Electrical",
        "inputs": {"phase_a": 400},
        "results": {"unbalance_percent": 6.7},
    }

    @pytest.mark.parametrize("fmt,media", [
        ("csv", "text/csv"),
        ("json", "application/json"),
        ("txt", "text/plain"),
    ])
    def test_formats(self, client, fmt, media):
        """Each format has its media type and a download filename."""
        resp = client.post(f"/api/export/{fmt}", json=self.BODY)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith(media)
        assert f'Load_Balancing_Calculation_Results.{fmt}' in resp.headers["content-disposition"]

    def test_unknown_format(self, client):
        """Only csv, json and txt are offered."""
        assert client.post("/api/export/pdf", json=self.BODY).status_code == 422


class TestHealth:
    """Test GET /api/health."""

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"
