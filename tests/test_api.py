"""
API tests against a fresh session and a temp preferences file.
"""
import pytest
from fastapi.testclient import TestClient

from kitchen_quote.api.main import app
from kitchen_quote.api.state import get_session, get_preferences_store
from kitchen_quote.services.preferences import PreferencesStore


@pytest.fixture(scope="function")
def client(session, tmp_path):
    store = PreferencesStore(tmp_path / "prefs.json")
    store.load()
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_preferences_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_stateless_compute(client, session):
    response = client.post("/compute", json={
        "params": {"workers": 2, "hours": 4, "days": 1},
        "options": {"enable_rounding": False},
    })
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["labor_cost"] == pytest.approx(136)
    assert result["rounding_adjustment"] == 0
    # The live session is untouched
    assert session.options.enable_rounding is True


def test_stateless_compute_reports_warnings(client):
    response = client.post("/compute", json={"params": {"workers": 0}})
    assert response.status_code == 200
    assert response.json()["result"]["labor_cost"] > 0
    assert response.json()["warnings"]


def test_stateless_compute_unknown_field(client):
    response = client.post("/compute", json={"params": {"helpers": 3}})
    assert response.status_code == 400


def test_set_field_and_undo(client):
    response = client.post("/session/field", json={"name": "days", "value": 30})
    body = response.json()
    assert body["params"]["days"] == 30
    assert body["result"]["markup_percentage"] == 35
    assert body["can_undo"] is True

    body = client.post("/session/undo").json()
    assert body["params"]["days"] == 1
    assert body["can_redo"] is True

    body = client.post("/session/redo").json()
    assert body["params"]["days"] == 30


def test_set_field_warnings_are_returned(client):
    body = client.post("/session/field", json={"name": "workers", "value": 0}).json()
    assert body["params"]["workers"] == 1
    assert body["warnings"]


def test_set_unknown_field(client):
    response = client.post("/session/field", json={"name": "helpers", "value": 1})
    assert response.status_code == 400


def test_update_config(client):
    body = client.put("/session/config", json={"regular_pay_rate": 20}).json()
    assert body["config"]["regular_pay_rate"] == 20
    assert body["config"]["supervisor_pay_rate"] == 18


def test_commission_split_endpoints(client):
    body = client.post("/session/commission-splits", json={"name": "Referral", "percentage": 5}).json()
    assert len(body["options"]["commission_splits"]) == 3

    body = client.put("/session/commission-splits/2", json={"percentage": 7.5}).json()
    assert body["options"]["commission_splits"][2]["percentage"] == 7.5

    body = client.delete("/session/commission-splits/2").json()
    assert len(body["options"]["commission_splits"]) == 2

    assert client.delete("/session/commission-splits/9").status_code == 404


def test_reset(client):
    client.post("/session/field", json={"name": "days", "value": 5})
    body = client.post("/session/reset").json()
    assert body["params"]["days"] == 1
    assert body["history_size"] == 1


def test_summary_and_exports(client):
    summary = client.get("/session/summary").json()
    assert summary["grand_total"] == 1050

    text = client.get("/session/summary.txt")
    assert "KITCHEN CLEANING QUOTE" in text.text

    csv = client.get("/session/export.csv")
    assert csv.status_code == 200
    assert csv.headers["content-type"].startswith("text/csv")
    assert "Grand Total" in csv.text


def test_preferences(client):
    assert client.get("/preferences").json() == {"preferences": {"dark_mode": False}}

    body = client.put("/preferences", json={"dark_mode": True}).json()
    assert body["preferences"]["dark_mode"] is True
    assert client.get("/preferences").json()["preferences"]["dark_mode"] is True


def test_stateless_compute_hood_only_job(client):
    response = client.post("/compute", json={"params": {"workers": 0, "large_hoods": 1}})
    body = response.json()

    assert response.status_code == 200
    assert body["result"]["regular_labor_cost"] == 0
    assert body["warnings"] == []


def test_summary_routes_without_result(client, session):
    session.result = None
    assert client.get("/session/summary").status_code == 409
    assert client.get("/session/summary.txt").status_code == 409
    assert client.get("/session/export.csv").status_code == 409
