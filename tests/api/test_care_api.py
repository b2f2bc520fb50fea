"""Tests for the patient, todo and notification endpoints.

Runs against an in-memory DuckDB adapter with a fixed clock. Request and
response bodies use camelCase keys.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from nursecare.adapters.storage import DuckDBAdapter
from nursecare.api.dependencies import get_clock, get_storage_adapter
from nursecare.api.main import app
from nursecare.domain.enums import NotificationType
from nursecare.domain.models import Notification

NOW = datetime(2024, 3, 1, 10, 0)


def iso(value: datetime) -> str:
    return value.isoformat()


@pytest.fixture
def storage():
    adapter = DuckDBAdapter()
    adapter.initialize_schema()
    yield adapter
    adapter.close()


@pytest.fixture
def client(storage):
    """Create a test client backed by the in-memory adapter."""
    app.dependency_overrides[get_storage_adapter] = lambda: storage
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def patient(client):
    response = client.post("/patients", json={
        "firstName": "Christina",
        "lastName": "Schröder",
        "dateOfBirth": "1942-09-14",
        "weight": 61.5,
        "gender": "female",
        "diagnoses": [
            {"text": "Chronische Herzinsuffizienz", "isMain": True},
            {"text": "Hypertonie", "isMain": True},
        ],
        "allergies": ["Latex"],
        "roomNumber": "203",
    })
    assert response.status_code == 201
    return response.json()


def create_todo(client, patient_id, due_date, **fields):
    payload = {
        "title": "Tracheostoma pflegen",
        "category": "Beatmung",
        "dueDate": iso(due_date),
        "patientId": patient_id,
    }
    payload.update(fields)
    response = client.post("/todos", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestPatientEndpoints:
    """Test the /patients endpoints."""

    def test_create_normalizes_main_diagnosis(self, patient):
        assert [d["isMain"] for d in patient["diagnoses"]] == [True, False]
        assert patient["firstName"] == "Christina"
        assert "age" in patient
        assert patient["createdAt"] is not None

    def test_get_includes_todos(self, client, patient):
        create_todo(client, patient["id"], NOW)

        response = client.get(f"/patients/{patient['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["roomNumber"] == "203"
        assert [t["title"] for t in data["todos"]] == ["Tracheostoma pflegen"]

    def test_get_missing_returns_404(self, client):
        response = client.get("/patients/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"

    def test_list_and_search(self, client, patient):
        assert len(client.get("/patients").json()) == 1
        assert len(client.get("/patients", params={"search": "herz"}).json()) == 1
        assert client.get("/patients", params={"search": "diabetes"}).json() == []

    def test_update_partial(self, client, patient):
        response = client.put(f"/patients/{patient['id']}", json={
            "notes": "Sturzgefahr",
            "diagnoses": [{"text": "COPD"}, {"text": "Hypertonie"}],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["notes"] == "Sturzgefahr"
        assert data["lastName"] == "Schröder"
        assert [(d["text"], d["isMain"]) for d in data["diagnoses"]] == [("COPD", True), ("Hypertonie", False)]

    def test_delete_cascades(self, client, patient):
        todo = create_todo(client, patient["id"], NOW)

        response = client.delete(f"/patients/{patient['id']}")

        assert response.status_code == 204
        assert client.get(f"/patients/{patient['id']}").status_code == 404
        assert client.get(f"/todos/{todo['id']}").status_code == 404

    def test_statistics(self, client, patient):
        for hours in (1, 2):
            create_todo(client, patient["id"], NOW + timedelta(hours=hours))

        response = client.get("/patients/statistics")

        assert response.status_code == 200
        assert response.json() == [{
            "id": patient["id"],
            "name": "Christina Schröder",
            "visitCount": 2,
            "diagnoses": ["Chronische Herzinsuffizienz", "Hypertonie"],
        }]

    def test_invalid_body_is_rejected(self, client):
        response = client.post("/patients", json={"firstName": "Nur Vorname"})
        assert response.status_code == 422


class TestTodoEndpoints:
    """Test the /todos endpoints."""

    def test_create_for_unknown_patient_returns_404(self, client):
        response = client.post("/todos", json={
            "title": "x", "category": "Bewegung", "dueDate": iso(NOW), "patientId": "missing",
        })
        assert response.status_code == 404

    def test_filters(self, client, patient):
        create_todo(client, patient["id"], NOW, title="a", assignedToId="u1")
        create_todo(client, patient["id"], NOW, title="b", category="Ernährung", completed=True)

        def titles(**params):
            return [t["title"] for t in client.get("/todos", params=params).json()]

        assert sorted(titles()) == ["a", "b"]
        assert titles(assignedToId="u1") == ["a"]
        assert titles(category="Ernährung") == ["b"]
        assert titles(completed="false") == ["a"]
        assert titles(patientId=patient["id"], completed="true") == ["b"]
        assert titles(search="B") == ["b"]

    def test_completion_transition(self, client, patient):
        todo = create_todo(client, patient["id"], NOW + timedelta(hours=1))
        assert todo["completedAt"] is None

        response = client.put(f"/todos/{todo['id']}", json={"completed": True})

        assert response.status_code == 200
        assert response.json()["completed"] is True
        assert response.json()["completedAt"] == iso(NOW)

    def test_create_with_existing_id_is_rejected(self, client, patient):
        todo = create_todo(client, patient["id"], NOW, title="Verband wechseln")
        client.put(f"/todos/{todo['id']}", json={"completed": True})

        response = client.post("/todos", json={
            "id": todo["id"],
            "title": "Blutdruck messen",
            "category": "Beatmung",
            "dueDate": iso(NOW),
            "patientId": patient["id"],
            "completed": True,
            "completedAt": "2000-01-01T00:00:00",
            "createdAt": "1999-01-01T00:00:00",
        })

        assert response.status_code == 400
        assert response.json()["field"] == "id"
        stored = client.get(f"/todos/{todo['id']}").json()
        assert stored["title"] == "Verband wechseln"
        assert stored["completedAt"] == iso(NOW)
        assert stored["createdAt"] == todo["createdAt"]

    def test_create_ignores_supplied_created_at(self, client, patient):
        todo = create_todo(client, patient["id"], NOW, createdAt="1999-01-01T00:00:00")

        assert not todo["createdAt"].startswith("1999")

    def test_dashboard_buckets(self, client, patient):
        create_todo(client, patient["id"], NOW - timedelta(days=1), title="yesterday")
        create_todo(client, patient["id"], NOW - timedelta(hours=1), title="an hour ago")
        create_todo(client, patient["id"], NOW + timedelta(hours=23), title="in 23h")
        create_todo(client, patient["id"], NOW + timedelta(hours=25), title="in 25h")
        create_todo(client, patient["id"], NOW + timedelta(hours=1), title="notified", notificationSent=True)

        def titles(path, **params):
            response = client.get(path, params=params)
            assert response.status_code == 200
            return [t["title"] for t in response.json()]

        assert titles("/todos/overdue") == ["yesterday", "an hour ago"]
        assert titles("/todos/today") == ["an hour ago", "notified"]
        assert titles("/todos/upcoming", hours=24) == ["in 23h"]
        assert titles("/todos/upcoming", hours=48) == ["in 23h", "in 25h"]

    def test_upcoming_defaults_to_configured_window(self, client, patient):
        create_todo(client, patient["id"], NOW + timedelta(hours=2))
        assert len(client.get("/todos/upcoming").json()) == 1

    @pytest.mark.parametrize("hours", ["0", "-5"])
    def test_upcoming_rejects_non_positive_window(self, client, hours):
        response = client.get("/todos/upcoming", params={"hours": hours})

        assert response.status_code == 400
        assert response.json()["field"] == "hours"

    @pytest.mark.parametrize("hours", ["inf", "nan", "1e8", "1e12"])
    def test_upcoming_rejects_unbounded_window(self, client, patient, hours):
        create_todo(client, patient["id"], NOW + timedelta(hours=2))

        response = client.get("/todos/upcoming", params={"hours": hours})

        assert response.status_code == 400
        assert response.json()["field"] == "hours"

    def test_delete(self, client, patient):
        todo = create_todo(client, patient["id"], NOW)

        assert client.delete(f"/todos/{todo['id']}").status_code == 204
        assert client.delete(f"/todos/{todo['id']}").status_code == 404


class TestNotificationEndpoints:
    """Test the /notifications endpoints."""

    @pytest.fixture
    def notifications(self, storage):
        base = datetime(2024, 3, 1, 8, 0)
        saved = []
        for minutes, user in [(0, "anna.schmidt"), (5, "anna.schmidt"), (10, "petra.weber")]:
            saved.append(storage.save_notification(Notification(
                type=NotificationType.TODO_REMINDER,
                message=f"+{minutes}min",
                user_id=user,
                created_at=base + timedelta(minutes=minutes),
            )).value)
        return saved

    def test_list_for_header_user(self, client, notifications):
        response = client.get("/notifications", headers={"X-User-Id": "anna.schmidt"})

        assert response.status_code == 200
        assert [n["message"] for n in response.json()] == ["+5min", "+0min"]

    def test_missing_user_header_is_rejected(self, client):
        assert client.get("/notifications").status_code == 422

    def test_mark_read(self, client, notifications):
        response = client.put(f"/notifications/{notifications[0].id}/read")

        assert response.status_code == 200
        assert response.json()["read"] is True
        assert response.json()["readAt"] == iso(NOW)

        unread = client.get(
            "/notifications", params={"unreadOnly": "true"}, headers={"X-User-Id": "anna.schmidt"}
        ).json()
        assert [n["message"] for n in unread] == ["+5min"]

    def test_mark_all_read(self, client, notifications):
        response = client.put("/notifications/read-all", headers={"X-User-Id": "anna.schmidt"})

        assert response.status_code == 200
        assert response.json() == {"updated": 2}
        unread = client.get(
            "/notifications", params={"unreadOnly": "true"}, headers={"X-User-Id": "petra.weber"}
        ).json()
        assert len(unread) == 1

    def test_delete(self, client, notifications):
        assert client.delete(f"/notifications/{notifications[2].id}").status_code == 204
        assert client.put(f"/notifications/{notifications[2].id}/read").status_code == 404
