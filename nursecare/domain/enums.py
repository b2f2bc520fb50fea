"""Closed enumerations for the NurseCare domain.

Every value set here is fixed: categories, priorities and genders are
matched exhaustively by the services and stored by their string value.
"""

from enum import Enum


class Gender(str, Enum):
    """Administrative gender of a patient."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class TodoCategory(str, Enum):
    """Care domain a task belongs to."""
    BEATMUNG = "Beatmung"
    ERNAEHRUNG = "Ernährung"
    BEWEGUNG = "Bewegung"
    AUSSCHEIDUNG = "Ausscheidung"


class TodoPriority(str, Enum):
    """Urgency of a care task."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationType(str, Enum):
    """Kind of notification shown to a nurse."""
    TODO_REMINDER = "todo_reminder"
    TODO_OVERDUE = "todo_overdue"
