"""Tests for NotificationService and reminder dispatch."""

from datetime import date, datetime, timedelta

import pytest

from nursecare.adapters.storage import DuckDBAdapter
from nursecare.domain.enums import Gender, NotificationType, TodoCategory
from nursecare.domain.models import Patient, Todo
from nursecare.domain.ports import NotFoundError, Result, StorageError, ValidationError
from nursecare.services import NotificationService, PatientService, TodoService

NOW = datetime(2024, 3, 1, 10, 0)


@pytest.fixture
def storage():
    adapter = DuckDBAdapter()
    adapter.initialize_schema()
    yield adapter
    adapter.close()


@pytest.fixture
def service(storage):
    return NotificationService(storage, clock=lambda: NOW)


@pytest.fixture
def patient(storage):
    return PatientService(storage).create(Patient(
        first_name="Andreas",
        last_name="Neumann",
        date_of_birth=date(1950, 8, 8),
        weight=90.2,
        gender=Gender.MALE,
    ))


def add_todo(storage, patient_id, due_date, **kwargs):
    return TodoService(storage, clock=lambda: NOW).create(Todo(
        title=kwargs.pop("title", "Blasenkatheter wechseln"),
        category=TodoCategory.AUSSCHEIDUNG,
        due_date=due_date,
        patient_id=patient_id,
        **kwargs
    ))


class TestNotificationService:
    """Test suite for per-user notifications."""

    def test_create_and_list(self, service):
        service.create("anna.schmidt", NotificationType.TODO_OVERDUE, "Overdue")
        service.create("petra.weber", NotificationType.TODO_REMINDER, "Reminder")

        notifications = service.list_for_user("anna.schmidt")

        assert [n.message for n in notifications] == ["Overdue"]
        assert notifications[0].read is False

    def test_mark_as_read_stamps_read_at(self, service):
        created = service.create("u1", NotificationType.TODO_REMINDER, "Reminder")

        read = service.mark_as_read(created.id)

        assert read.read is True
        assert read.read_at == NOW
        assert service.list_for_user("u1", unread_only=True) == []

    def test_mark_as_read_missing_raises(self, service):
        with pytest.raises(NotFoundError):
            service.mark_as_read("missing")

    def test_mark_all_as_read(self, service):
        for message in ("a", "b"):
            service.create("u1", NotificationType.TODO_REMINDER, message)
        service.create("u2", NotificationType.TODO_REMINDER, "other user")

        assert service.mark_all_as_read("u1") == 2
        assert service.list_for_user("u1", unread_only=True) == []
        assert len(service.list_for_user("u2", unread_only=True)) == 1
        assert service.mark_all_as_read("u1") == 0

    def test_delete(self, service):
        created = service.create("u1", NotificationType.TODO_REMINDER, "Reminder")

        service.delete(created.id)

        with pytest.raises(NotFoundError):
            service.delete(created.id)


class TestDispatchReminders:
    """Test suite for the one-shot reminder pass."""

    def test_reminds_assignees_of_upcoming_todos(self, service, storage, patient):
        soon = add_todo(storage, patient.id, NOW + timedelta(hours=2), assigned_to_id="anna.schmidt")
        add_todo(storage, patient.id, NOW + timedelta(hours=30), assigned_to_id="anna.schmidt")
        add_todo(storage, patient.id, NOW - timedelta(hours=2), assigned_to_id="anna.schmidt")

        created = service.dispatch_reminders(24)

        assert len(created) == 1
        assert created[0].user_id == "anna.schmidt"
        assert created[0].todo_id == soon.id
        assert created[0].type == NotificationType.TODO_REMINDER
        assert "Blasenkatheter wechseln" in created[0].message
        assert storage.get_todo(soon.id).value.notification_sent is True

    def test_second_pass_creates_nothing(self, service, storage, patient):
        add_todo(storage, patient.id, NOW + timedelta(hours=2), assigned_to_id="u1")

        assert len(service.dispatch_reminders(24)) == 1
        assert service.dispatch_reminders(24) == []
        assert len(service.list_for_user("u1")) == 1

    def test_unassigned_todos_are_skipped(self, service, storage, patient):
        todo = add_todo(storage, patient.id, NOW + timedelta(hours=2))

        assert service.dispatch_reminders(24) == []
        assert storage.get_todo(todo.id).value.notification_sent is False

    def test_completed_todos_are_skipped(self, service, storage, patient):
        add_todo(storage, patient.id, NOW + timedelta(hours=2), assigned_to_id="u1", completed=True)

        assert service.dispatch_reminders(24) == []

    def test_invalid_window_raises(self, service):
        with pytest.raises(ValidationError):
            service.dispatch_reminders(-3)

    def test_failed_flag_write_sends_no_reminder(self, service, storage, patient, monkeypatch):
        todo = add_todo(storage, patient.id, NOW + timedelta(hours=2), assigned_to_id="u1")
        monkeypatch.setattr(
            storage, "save_todo", lambda _todo: Result.failure_result("disk full", error_type="StorageError")
        )

        with pytest.raises(StorageError):
            service.dispatch_reminders(24)

        assert service.list_for_user("u1") == []
        assert storage.get_todo(todo.id).value.notification_sent is False

    def test_failed_notification_write_restores_flag(self, service, storage, patient, monkeypatch):
        todo = add_todo(storage, patient.id, NOW + timedelta(hours=2), assigned_to_id="u1")
        monkeypatch.setattr(
            storage,
            "save_notification",
            lambda _notification: Result.failure_result("disk full", error_type="StorageError")
        )

        with pytest.raises(StorageError):
            service.dispatch_reminders(24)

        assert storage.get_todo(todo.id).value.notification_sent is False
        monkeypatch.undo()
        assert len(service.dispatch_reminders(24)) == 1
