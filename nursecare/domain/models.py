"""Domain Record Definitions.

This module defines the canonical records of the care ledger: patients with
their diagnoses and allergies, care tasks (todos) and notifications.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable (frozen) and validated at construction
    - Attributes are snake_case, the JSON wire format uses camelCase aliases
    - Timestamps are local wall-clock time; aware inputs are converted
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from nursecare.domain.enums import Gender, NotificationType, TodoCategory, TodoPriority


def new_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid.uuid4())


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware timestamp to naive local wall-clock time.

    Naive timestamps are assumed to already be local and pass through.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole years between date_of_birth and today."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def round_weight(value: Optional[float]) -> Optional[float]:
    """Round a weight to the two decimal places storage keeps.

    Raises:
        ValueError: If rounding lifts the weight to 1000 kg or more
    """
    if value is None:
        return None
    rounded = round(value, 2)
    if rounded >= 1000:
        raise ValueError(f"Weight must be below 1000 kg, got {value}")
    return rounded


class DomainModel(BaseModel):
    """Shared configuration for all records."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Diagnosis(DomainModel):
    """A single diagnosis in a patient's ordered diagnosis list.

    Parameters:
        text: Diagnosis text (non-empty)
        is_main: Whether this is the main diagnosis. Only the diagnosis
            normalizer decides the final value before persistence.
    """

    text: str = Field(..., min_length=1, description="Diagnosis text")
    is_main: bool = Field(False, description="Main diagnosis flag")


class Patient(DomainModel):
    """Patient record.

    Parameters:
        id: Opaque identifier
        first_name: Given name
        last_name: Family name
        date_of_birth: Date of birth (not in the future)
        weight: Body weight in kilograms, two decimal places
        gender: Administrative gender
        diagnoses: Ordered diagnosis list, order breaks main-flag ties
        allergies: Free-text allergies
        room_number: Room the patient is placed in
        notes: Free-text nursing notes
        created_at: Stamped by the storage adapter on first write
        updated_at: Stamped by the storage adapter on every write
    """

    id: str = Field(default_factory=new_id, description="Patient identifier")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: date
    weight: float = Field(..., gt=0, lt=1000, description="Weight in kg")
    gender: Gender
    diagnoses: list[Diagnosis] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    room_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        return round_weight(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        """Reject dates of birth in the future."""
        if v > date.today():
            raise ValueError(f"Date of birth cannot be in the future: {v.isoformat()}")
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)

    @computed_field
    @property
    def age(self) -> int:
        """Age in whole years as of today. Derived, never stored."""
        return self.age_on(date.today())

    def age_on(self, today: date) -> int:
        """Age in whole years as of the given day."""
        return calculate_age(self.date_of_birth, today)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Todo(DomainModel):
    """Time-boxed care task for a patient.

    Parameters:
        id: Opaque identifier
        title: Short task title (non-empty)
        description: Optional longer description
        category: Care category
        priority: Task priority (defaults to medium)
        due_date: When the task is due (local time)
        completed: Completion flag
        completed_at: Stamped once on the false -> true transition
        notification_sent: Caller-managed reminder flag
        patient_id: Owning patient
        assigned_to_id: Nurse the task is assigned to, if any
    """

    id: str = Field(default_factory=new_id, description="Todo identifier")
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: TodoCategory
    priority: TodoPriority = TodoPriority.MEDIUM
    due_date: datetime
    completed: bool = False
    completed_at: Optional[datetime] = None
    notification_sent: bool = False
    patient_id: str = Field(..., min_length=1)
    assigned_to_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("due_date", "completed_at", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class Notification(DomainModel):
    """Notification shown to a nurse (reminders, overdue warnings)."""

    id: str = Field(default_factory=new_id, description="Notification identifier")
    type: NotificationType
    message: str = Field(..., min_length=1)
    read: bool = False
    read_at: Optional[datetime] = None
    user_id: str = Field(..., min_length=1)
    todo_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("read_at", "created_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


# ============================================================================
# Partial updates
# ============================================================================

class PatientUpdate(DomainModel):
    """Field overrides for a patient update. Unset fields are left alone."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    date_of_birth: Optional[date] = None
    weight: Optional[float] = Field(None, gt=0, lt=1000)
    gender: Optional[Gender] = None
    diagnoses: Optional[list[Diagnosis]] = None
    allergies: Optional[list[str]] = None
    room_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, v: Optional[float]) -> Optional[float]:
        return round_weight(v)


class TodoUpdate(DomainModel):
    """Field overrides for a todo update. Unset fields are left alone."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[TodoCategory] = None
    priority: Optional[TodoPriority] = None
    due_date: Optional[datetime] = None
    completed: Optional[bool] = None
    notification_sent: Optional[bool] = None
    patient_id: Optional[str] = Field(None, min_length=1)
    assigned_to_id: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


# ============================================================================
# Read models
# ============================================================================

class VisitStatistic(DomainModel):
    """Per-patient visit count (number of care tasks, any state)."""

    id: str
    name: str
    visit_count: int
    diagnoses: list[str] = Field(default_factory=list)


class PatientDetail(Patient):
    """Patient together with its care tasks."""

    todos: list[Todo] = Field(default_factory=list)
