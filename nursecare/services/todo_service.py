"""Todo service.

CRUD for care tasks plus the dashboard queries (overdue, today, upcoming).
Open todos are fetched from storage and bucketed in memory by the todo
classifier, so the classification rules live in exactly one place.
"""

import logging
from datetime import datetime
from typing import Optional

from nursecare.domain.models import Todo, TodoUpdate
from nursecare.domain.ports import NotFoundError, StoragePort, TodoFilter
from nursecare.domain.services import (
    DEFAULT_UPCOMING_HOURS,
    TodoBuckets,
    classify_todos,
    mark_completed,
    merge_todo,
    overdue_todos,
    search_todos,
    todays_todos,
    upcoming_todos,
    validate_hours,
)
from nursecare.services.common import Clock, ensure_new, unwrap

logger = logging.getLogger(__name__)


class TodoService:
    """Service for care tasks."""

    def __init__(self, storage: StoragePort, clock: Clock = datetime.now):
        """Initialize TodoService.

        Parameters:
            storage: Storage adapter instance
            clock: Source of the current local time
        """
        self.storage = storage
        self.clock = clock

    def create(self, todo: Todo) -> Todo:
        """Persist a new todo for an existing patient.

        Audit timestamps are left to storage. An open todo never carries
        completed_at; a todo created as completed keeps a supplied
        completed_at and is otherwise stamped with the current time.

        Raises:
            NotFoundError: If the referenced patient does not exist
            ValidationError: If a todo with the same id already exists
        """
        patient = unwrap(self.storage.get_patient(todo.patient_id), "get_patient")
        if patient is None:
            raise NotFoundError("Patient not found", entity="patient", entity_id=todo.patient_id)
        ensure_new(self.storage.get_todo(todo.id), "todo", todo.id)

        todo = todo.model_copy(update={"created_at": None, "updated_at": None})
        if not todo.completed:
            todo = todo.model_copy(update={"completed_at": None})
        elif todo.completed_at is None:
            todo = mark_completed(todo.model_copy(update={"completed": False}), self.clock())
        saved = unwrap(self.storage.save_todo(todo), "save_todo")
        logger.info(f"Created todo {saved.id} for patient {saved.patient_id}")
        return saved

    def find_all(self, filters: Optional[TodoFilter] = None, search: Optional[str] = None) -> list[Todo]:
        """Todos ordered by due date. A search query replaces the filters."""
        if search:
            return search_todos(unwrap(self.storage.list_todos(), "list_todos"), search)
        return unwrap(self.storage.list_todos(filters), "list_todos")

    def get(self, todo_id: str) -> Todo:
        """Fetch a todo.

        Raises:
            NotFoundError: If the todo does not exist
        """
        todo = unwrap(self.storage.get_todo(todo_id), "get_todo")
        if todo is None:
            raise NotFoundError("Todo not found", entity="todo", entity_id=todo_id)
        return todo

    def update(self, todo_id: str, update: TodoUpdate) -> Todo:
        """Merge the set fields of update; completing stamps completed_at."""
        existing = self.get(todo_id)
        merged = merge_todo(existing, update, self.clock())
        if merged.patient_id != existing.patient_id:
            if unwrap(self.storage.get_patient(merged.patient_id), "get_patient") is None:
                raise NotFoundError("Patient not found", entity="patient", entity_id=merged.patient_id)
        saved = unwrap(self.storage.save_todo(merged), "save_todo")
        if saved.completed and not existing.completed:
            logger.info(f"Todo {todo_id} completed at {saved.completed_at}")
        return saved

    def delete(self, todo_id: str) -> None:
        deleted = unwrap(self.storage.delete_todo(todo_id), "delete_todo")
        if not deleted:
            raise NotFoundError("Todo not found", entity="todo", entity_id=todo_id)

    def _open_todos(self) -> list[Todo]:
        return unwrap(self.storage.list_todos(TodoFilter(completed=False)), "list_todos")

    def overdue(self, now: Optional[datetime] = None) -> list[Todo]:
        return overdue_todos(self._open_todos(), now or self.clock())

    def today(self, now: Optional[datetime] = None) -> list[Todo]:
        return todays_todos(self._open_todos(), now or self.clock())

    def upcoming(self, hours: float = DEFAULT_UPCOMING_HOURS, now: Optional[datetime] = None) -> list[Todo]:
        validate_hours(hours)
        return upcoming_todos(self._open_todos(), now or self.clock(), hours)

    def classify(self, hours: float = DEFAULT_UPCOMING_HOURS, now: Optional[datetime] = None) -> TodoBuckets:
        return classify_todos(now or self.clock(), self._open_todos(), hours)

    def mark_notification_sent(self, todo_id: str) -> Todo:
        todo = self.get(todo_id)
        if todo.notification_sent:
            return todo
        return unwrap(
            self.storage.save_todo(todo.model_copy(update={"notification_sent": True})),
            "save_todo"
        )
