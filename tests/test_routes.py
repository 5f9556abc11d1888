from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from firetrack import create_app
from firetrack.config import TestingConfig
from firetrack.engine import AppData, Asset, Site, mark_complete
from firetrack.extensions import db
from firetrack.models import AuditEntry, Technician
from firetrack.store import SqlAlchemyStore

ACTOR = {"X-Actor": "Dan Morse"}


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    ctx = app.app_context()
    ctx.push()
    SqlAlchemyStore().save(
        AppData(
            sites=[
                Site(
                    id="s1",
                    name="Maple Diner",
                    address="12 Maple St, Burlington, VT",
                    service_months=[1, 2, 3],
                    extinguisher_tech="Dan Morse",
                ),
                Site(id="s2", name="Green Mountain Lodge", address="455 Route 100, Stowe, VT"),
            ],
            assets=[
                Asset(id="a1", site_id="s1", type="ABC", brand="Amerex", size="5lb", last_service_date="2018"),
                Asset(id="a2", site_id="s1", type="Exit Light", battery_replacement_due=True),
            ],
        )
    )
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


def test_mutations_require_actor_header(client):
    response = client.post("/sites/s1/complete", json={"type": "Extinguisher", "year": 2024, "month": 3})
    assert response.status_code == 401
    assert "X-Actor" in response.get_json()["error"]


def test_actor_header_registers_technician(client):
    response = client.get("/auth/whoami", headers={"X-Actor": "dan"})
    assert response.status_code == 200
    assert response.get_json() == {"name": "dan", "roster_match": "Dan Morse"}
    assert Technician.query.filter_by(name="dan").count() == 1


def test_complete_carries_over_for_assignee_and_undo_restores(client):
    response = client.post(
        "/sites/s1/complete",
        json={"type": "Extinguisher", "year": 2024, "month": 3, "completed_at": "2024-03-20T10:00:00"},
        headers=ACTOR,
    )
    assert response.status_code == 200
    assert [item["month"] for item in response.get_json()["created"]] == [3, 1, 2]
    assert AuditEntry.query.filter_by(action="Cleared").count() == 3

    detail = client.get("/sites/s1").get_json()
    assert sorted(item["month"] for item in detail["completed_services"]) == [1, 2, 3]

    response = client.post("/sites/s1/undo", json={"type": "Extinguisher", "year": 2024, "month": 2}, headers=ACTOR)
    assert response.get_json() == {"removed": True}
    detail = client.get("/sites/s1").get_json()
    assert sorted(item["month"] for item in detail["completed_services"]) == [1, 3]


def test_repeat_completion_creates_nothing(client):
    body = {"type": "Extinguisher", "year": 2024, "month": 1, "completed_at": "2024-01-10T10:00:00"}
    client.post("/sites/s1/complete", json=body, headers={"X-Actor": "Mike"})
    response = client.post("/sites/s1/complete", json=body, headers={"X-Actor": "Mike"})
    assert response.get_json() == {"created": []}


def test_invalid_requests_return_400_and_unknown_site_404(client):
    response = client.post("/sites/s1/complete", json={"type": "Extinguisher", "year": 2024, "month": 13}, headers=ACTOR)
    assert response.status_code == 400
    response = client.post("/sites/s1/complete", json={"type": "Sprinkler", "year": 2024, "month": 3}, headers=ACTOR)
    assert response.status_code == 400
    response = client.post("/sites/s1/complete", json={"type": "Extinguisher"}, headers=ACTOR)
    assert response.status_code == 400
    assert client.get("/sites/nope").status_code == 404


def test_system_technician_assignment_seeds_pair(client):
    response = client.post("/sites/s2/technicians", json={"discipline": "System", "name": "Sarah Kelley"}, headers=ACTOR)
    data = response.get_json()
    assert data["technician"] == "Sarah Kelley"
    assert len(data["months"]) == 2
    assert data["months"][1] - data["months"][0] == 6

    response = client.post("/sites/s2/months", json={"discipline": "System", "month": data["months"][0]}, headers=ACTOR)
    assert response.get_json()["months"] == [data["months"][1]]


def test_appointment_is_stamped_with_actor(client):
    response = client.post("/sites/s1/appointment", json={"month": 3, "day": 14, "time": "09:30"}, headers=ACTOR)
    assert response.get_json()["scheduled"] is True
    site = client.get("/sites/s1").get_json()
    assert site["appointment"] == {"month": 3, "day": 14, "time": "09:30"}
    assert site["scheduled_by"] == "Dan Morse"


def test_tracker_lists_backlog_for_viewed_month(client):
    response = client.get("/sites/tracker?year=2024&month=3&tech=Dan%20Morse")
    items = response.get_json()["items"]
    assert [(item["site_id"], item["month"], item["kind"]) for item in items] == [("s1", 3, "Extinguisher")]


def test_clearing_auto_line_keeps_total(client):
    before = client.get("/out-service/s1?year=2024").get_json()
    assert [group["total_quantity"] for group in before["extinguishers"]] == [1]
    assert before["extinguishers"][0]["origins"] == ["auto"]

    response = client.post("/out-service/s1/clear?year=2024", json={"key": "auto-Amerex-5lb-ABC-2018"}, headers=ACTOR)
    assert response.status_code == 201
    assert response.get_json()["year"] == "2024"

    after = client.get("/out-service/s1?year=2024").get_json()
    assert [group["total_quantity"] for group in after["extinguishers"]] == [1]
    assert after["extinguishers"][0]["origins"] == ["manual"]

    response = client.post("/out-service/s1/clear?year=2024", json={"key": "auto-Amerex-5lb-ABC-2018"}, headers=ACTOR)
    assert response.status_code == 404


def test_manual_entry_endpoints(client):
    response = client.post("/out-service/s2/entries", json={"quantity": 2, "type": "CO2", "year": "2018"}, headers=ACTOR)
    assert response.status_code == 201
    entry_id = response.get_json()["id"]

    response = client.patch(f"/out-service/s2/entries/{entry_id}", json={"quantity": 5}, headers=ACTOR)
    assert response.get_json()["quantity"] == 5

    response = client.post(f"/out-service/s2/entries/{entry_id}/clear?year=2024", headers=ACTOR)
    assert response.get_json()["year"] == "2024"

    assert client.delete(f"/out-service/s2/entries/{entry_id}", headers=ACTOR).status_code == 200
    assert client.delete(f"/out-service/s2/entries/{entry_id}", headers=ACTOR).status_code == 404

    response = client.post("/out-service/s2/entries?kind=tank", json={}, headers=ACTOR)
    assert response.get_json()["type"] == "Wet Chemical"
    view = client.get("/out-service/s2?year=2024").get_json()
    assert [group["type"] for group in view["tanks"]] == ["Wet Chemical"]
    assert view["extinguishers"] == []


def test_reports_use_reference_year(client, app):
    app.config["FIRETRACK_REFERENCE_YEAR"] = "2024"
    data = client.get("/reports/forecast?mode=due_year").get_json()
    assert data["forecast_year"] == 2024
    assert [(row["id"], row["status"]["state"]) for row in data["rows"]] == [("a1", "Target")]

    batteries = client.get("/reports/batteries?site=s1").get_json()
    assert [asset["id"] for asset in batteries] == ["a2"]


def test_asset_service_is_separate_from_clear(client):
    client.post("/out-service/s1/clear?year=2024", json={"key": "auto-Amerex-5lb-ABC-2018"}, headers=ACTOR)
    assert client.get("/out-service/s1?year=2025").get_json()["extinguishers"][0]["origins"] == ["auto", "manual"]

    response = client.post("/sites/s1/assets/a1/service", json={"year": 2024}, headers=ACTOR)
    assert response.get_json()["last_service_date"] == "2024"
    view = client.get("/out-service/s1?year=2025").get_json()
    assert view["extinguishers"][0]["origins"] == ["manual"]
    assert client.post("/sites/s1/assets/nope/service", json={}, headers=ACTOR).status_code == 404


def test_repeat_completion_by_assignee_writes_nothing(client):
    store = SqlAlchemyStore()
    site = store.load_site("s1")
    mark_complete(site, "Extinguisher", 2024, 3, "Mike", completed_at="2024-03-18T10:00:00")
    store.save_site(site)

    body = {"type": "Extinguisher", "year": 2024, "month": 3, "completed_at": "2024-03-20T10:00:00"}
    response = client.post("/sites/s1/complete", json=body, headers=ACTOR)
    assert response.get_json() == {"created": []}
    assert AuditEntry.query.count() == 0

    detail = client.get("/sites/s1").get_json()
    assert [(item["month"], item["completed_by"]) for item in detail["completed_services"]] == [(3, "Mike")]
