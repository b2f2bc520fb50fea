"""Temporal classification of care tasks.

Buckets open todos into overdue, due-today and upcoming-within-window sets
for the dashboard and the reminder dispatcher, and owns the explicit merge
steps for todo and patient updates (including the completion transition).

All functions are pure: the caller supplies ``now`` and the records.
Day boundaries use the local calendar day of ``now``.
"""

import logging
import math
from datetime import datetime, time, timedelta
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from nursecare.domain.models import Patient, PatientUpdate, Todo, TodoUpdate, to_local_naive
from nursecare.domain.ports import ValidationError
from nursecare.domain.services.diagnoses import normalize_diagnoses

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_HOURS = 24

# One hundred years
MAX_UPCOMING_HOURS = 24 * 365 * 100


class TodoBuckets(BaseModel):
    """Classification result. Buckets may overlap (overdue and due today)."""

    overdue: list[Todo] = Field(default_factory=list)
    due_today: list[Todo] = Field(default_factory=list)
    upcoming: list[Todo] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


def parse_timestamp(value: Union[str, datetime, None], field: str = "timestamp") -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into local naive time.

    Accepts a trailing ``Z`` for UTC.

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    if value is None or isinstance(value, datetime):
        return to_local_naive(value)
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid {field} format: {value}", field=field)
    return to_local_naive(parsed)


def validate_hours(hours: float) -> float:
    """Check an upcoming window size.

    Raises:
        ValidationError: If hours is not a finite positive number of at
            most MAX_UPCOMING_HOURS
    """
    if (
        isinstance(hours, bool)
        or not isinstance(hours, (int, float))
        or not math.isfinite(hours)
        or hours <= 0
    ):
        raise ValidationError(
            f"Hour window must be a positive number, got {hours!r}",
            field="hours"
        )
    if hours > MAX_UPCOMING_HOURS:
        raise ValidationError(
            f"Hour window must not exceed {MAX_UPCOMING_HOURS} hours, got {hours!r}",
            field="hours"
        )
    return hours


def window_end(now: datetime, hours: float) -> datetime:
    """Upper bound of the upcoming window starting at now.

    Raises:
        ValidationError: If hours is invalid or the bound is past datetime.max
    """
    validate_hours(hours)
    try:
        return to_local_naive(now) + timedelta(hours=hours)
    except OverflowError:
        raise ValidationError(
            f"Hour window of {hours!r} reaches past the supported date range",
            field="hours"
        )


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """First and last millisecond of the local calendar day containing now."""
    now = to_local_naive(now)
    start = datetime.combine(now.date(), time.min)
    end = datetime.combine(now.date(), time(23, 59, 59, 999000))
    return start, end


def is_overdue(todo: Todo, now: datetime) -> bool:
    return not todo.completed and todo.due_date < to_local_naive(now)


def is_due_today(todo: Todo, now: datetime) -> bool:
    start, end = day_bounds(now)
    return not todo.completed and start <= todo.due_date <= end


def is_upcoming(todo: Todo, now: datetime, hours: float = DEFAULT_UPCOMING_HOURS) -> bool:
    """Open, not yet notified, and due within (now, now + hours]."""
    end = window_end(now, hours)
    return (
        not todo.completed
        and not todo.notification_sent
        and to_local_naive(now) < todo.due_date <= end
    )


def _by_due_date(todos: Iterable[Todo]) -> list[Todo]:
    return sorted(todos, key=lambda t: t.due_date)


def overdue_todos(todos: Iterable[Todo], now: datetime) -> list[Todo]:
    return _by_due_date(t for t in todos if is_overdue(t, now))


def todays_todos(todos: Iterable[Todo], now: datetime) -> list[Todo]:
    return _by_due_date(t for t in todos if is_due_today(t, now))


def upcoming_todos(todos: Iterable[Todo], now: datetime, hours: float = DEFAULT_UPCOMING_HOURS) -> list[Todo]:
    window_end(now, hours)
    return _by_due_date(t for t in todos if is_upcoming(t, now, hours))


def classify_todos(
    now: datetime,
    todos: Iterable[Todo],
    hours: float = DEFAULT_UPCOMING_HOURS
) -> TodoBuckets:
    """Bucket todos relative to now.

    Parameters:
        now: Evaluation instant
        todos: Todos to classify (any completion state)
        hours: Upcoming window size in hours (must be positive)

    Returns:
        TodoBuckets: overdue, due_today and upcoming, each ordered by due date

    Raises:
        ValidationError: If hours is not positive
    """
    validate_hours(hours)
    items = list(todos)
    return TodoBuckets(
        overdue=overdue_todos(items, now),
        due_today=todays_todos(items, now),
        upcoming=upcoming_todos(items, now, hours),
    )


# ============================================================================
# Explicit merges
# ============================================================================

def mark_completed(todo: Todo, now: datetime) -> Todo:
    """Complete a todo, stamping completed_at on the transition only."""
    if todo.completed:
        return todo
    return todo.model_copy(update={"completed": True, "completed_at": to_local_naive(now)})


def merge_todo(existing: Todo, update: TodoUpdate, now: datetime) -> Todo:
    """Apply the explicitly set fields of update to existing.

    When completed goes from false to true, completed_at is stamped with now.
    Reverting completed to false leaves completed_at untouched.

    Returns:
        Todo: New record, existing is not modified
    """
    overrides = update.model_dump(exclude_unset=True)
    becomes_completed = overrides.pop("completed", None)

    merged = Todo.model_validate({**existing.model_dump(), **overrides})

    if becomes_completed is True:
        merged = mark_completed(merged, now)
    elif becomes_completed is False:
        merged = merged.model_copy(update={"completed": False})
    return merged


def merge_patient(existing: Patient, update: PatientUpdate) -> Patient:
    """Apply the explicitly set fields of update to existing.

    Diagnoses carried by the update are normalized before they are merged.
    """
    overrides = update.model_dump(exclude_unset=True)
    if "diagnoses" in overrides:
        if overrides["diagnoses"] is None:
            overrides["diagnoses"] = []
        else:
            overrides["diagnoses"] = [
                d.model_dump() for d in normalize_diagnoses(update.diagnoses)
            ]
    if overrides.get("allergies", []) is None:
        overrides["allergies"] = []

    data = existing.model_dump(exclude={"age"})
    data.update(overrides)
    return Patient.model_validate(data)
