"""Tests for TodoService with a fixed clock."""

from datetime import date, datetime, timedelta

import pytest

from nursecare.adapters.storage import DuckDBAdapter
from nursecare.domain.enums import Gender, TodoCategory
from nursecare.domain.models import Patient, Todo, TodoUpdate
from nursecare.domain.ports import NotFoundError, TodoFilter, ValidationError
from nursecare.services import PatientService, TodoService

NOW = datetime(2024, 3, 1, 10, 0)


class FakeClock:
    """Clock that returns a settable instant."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def storage():
    adapter = DuckDBAdapter()
    adapter.initialize_schema()
    yield adapter
    adapter.close()


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def service(storage, clock):
    return TodoService(storage, clock=clock)


@pytest.fixture
def patient(storage):
    return PatientService(storage).create(Patient(
        first_name="Birgit",
        last_name="Hoffmann",
        date_of_birth=date(1945, 1, 30),
        weight=66.0,
        gender=Gender.FEMALE,
    ))


def new_todo(patient_id, due_date, **kwargs):
    return Todo(
        title=kwargs.pop("title", "Sauerstoffsättigung messen"),
        category=kwargs.pop("category", TodoCategory.BEATMUNG),
        due_date=due_date,
        patient_id=patient_id,
        **kwargs
    )


class TestTodoServiceCrud:
    """Test suite for TodoService CRUD."""

    def test_create_requires_existing_patient(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.create(new_todo("missing", NOW))
        assert exc_info.value.entity == "patient"

    def test_create_completed_todo_is_stamped(self, service, patient):
        created = service.create(new_todo(patient.id, NOW, completed=True))

        assert created.completed_at == NOW

    def test_create_rejects_existing_id(self, service, patient, storage):
        original = service.create(new_todo(patient.id, NOW, title="Verband wechseln"))
        service.update(original.id, TodoUpdate(completed=True))

        with pytest.raises(ValidationError) as exc_info:
            service.create(new_todo(
                patient.id,
                NOW,
                id=original.id,
                title="Blutdruck messen",
                completed=True,
                completed_at=datetime(2000, 1, 1),
            ))

        assert exc_info.value.field == "id"
        stored = storage.get_todo(original.id).value
        assert stored.title == "Verband wechseln"
        assert stored.completed_at == NOW

    def test_create_ignores_supplied_audit_timestamps(self, service, patient):
        created = service.create(new_todo(
            patient.id,
            NOW,
            created_at=datetime(1999, 1, 1),
            updated_at=datetime(1999, 1, 1),
        ))

        assert created.created_at > datetime(1999, 1, 1)
        assert created.updated_at > datetime(1999, 1, 1)

    def test_create_open_todo_drops_completed_at(self, service, patient):
        created = service.create(new_todo(patient.id, NOW, completed_at=datetime(2000, 1, 1)))

        assert created.completed is False
        assert created.completed_at is None

    def test_get_missing_raises(self, service):
        with pytest.raises(NotFoundError):
            service.get("missing")

    def test_completion_stamps_completed_at_once(self, service, patient, clock):
        todo = service.create(new_todo(patient.id, NOW + timedelta(hours=1)))

        clock.now = NOW + timedelta(minutes=30)
        completed = service.update(todo.id, TodoUpdate(completed=True))
        assert completed.completed_at == NOW + timedelta(minutes=30)

        clock.now = NOW + timedelta(hours=2)
        again = service.update(todo.id, TodoUpdate(completed=True, title="Sättigung gemessen"))
        assert again.completed_at == NOW + timedelta(minutes=30)
        assert service.get(todo.id).completed_at == NOW + timedelta(minutes=30)

    def test_revert_keeps_completed_at(self, service, patient):
        todo = service.create(new_todo(patient.id, NOW))
        service.update(todo.id, TodoUpdate(completed=True))

        reverted = service.update(todo.id, TodoUpdate(completed=False))

        assert reverted.completed is False
        assert reverted.completed_at == NOW

    def test_update_to_unknown_patient_raises(self, service, patient):
        todo = service.create(new_todo(patient.id, NOW))

        with pytest.raises(NotFoundError):
            service.update(todo.id, TodoUpdate(patient_id="missing"))

    def test_find_all_with_filters_and_search(self, service, patient):
        service.create(new_todo(patient.id, NOW, title="Sekret absaugen", assigned_to_id="u1"))
        service.create(new_todo(patient.id, NOW, title="Lagerung wechseln", category=TodoCategory.BEWEGUNG))

        assert [t.title for t in service.find_all(TodoFilter(assigned_to_id="u1"))] == ["Sekret absaugen"]
        assert [t.title for t in service.find_all(search="lagerung")] == ["Lagerung wechseln"]
        assert len(service.find_all()) == 2

    def test_delete(self, service, patient):
        todo = service.create(new_todo(patient.id, NOW))

        service.delete(todo.id)

        with pytest.raises(NotFoundError):
            service.delete(todo.id)


class TestTodoServiceBuckets:
    """Test suite for the dashboard queries."""

    @pytest.fixture
    def todos(self, service, patient):
        specs = {
            "yesterday": NOW - timedelta(days=1),
            "an hour ago": NOW - timedelta(hours=1),
            "in 3h": NOW + timedelta(hours=3),
            "in 23h": NOW + timedelta(hours=23),
            "in 25h": NOW + timedelta(hours=25),
        }
        created = {title: service.create(new_todo(patient.id, due, title=title)) for title, due in specs.items()}
        service.create(new_todo(patient.id, NOW - timedelta(hours=2), title="done", completed=True))
        service.create(new_todo(patient.id, NOW + timedelta(hours=1), title="notified", notification_sent=True))
        return created

    def test_overdue(self, service, todos):
        assert [t.title for t in service.overdue()] == ["yesterday", "an hour ago"]

    def test_today(self, service, todos):
        assert [t.title for t in service.today()] == ["an hour ago", "notified", "in 3h"]

    def test_upcoming(self, service, todos):
        assert [t.title for t in service.upcoming(24)] == ["in 3h", "in 23h"]

    def test_upcoming_with_explicit_now(self, service, todos):
        later = NOW + timedelta(hours=4)
        assert [t.title for t in service.upcoming(24, now=later)] == ["in 23h", "in 25h"]

    def test_upcoming_rejects_non_positive_window(self, service):
        with pytest.raises(ValidationError):
            service.upcoming(0)

    def test_classify(self, service, todos):
        buckets = service.classify(24)

        assert [t.title for t in buckets.overdue] == ["yesterday", "an hour ago"]
        assert "an hour ago" in [t.title for t in buckets.due_today]
        assert [t.title for t in buckets.upcoming] == ["in 3h", "in 23h"]

    def test_mark_notification_sent(self, service, todos):
        todo = todos["in 3h"]

        service.mark_notification_sent(todo.id)

        assert service.get(todo.id).notification_sent is True
        assert [t.title for t in service.upcoming(24)] == ["in 23h"]
