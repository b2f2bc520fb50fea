"""Domain layer for NurseCare.

This module contains the core business rules and record schemas.
All domain models are pure Python with no external dependencies beyond Pydantic.
"""

from .models import (
    Diagnosis,
    Notification,
    Patient,
    PatientDetail,
    PatientUpdate,
    Todo,
    TodoUpdate,
    VisitStatistic,
)

__all__ = [
    "Diagnosis",
    "Notification",
    "Patient",
    "PatientDetail",
    "PatientUpdate",
    "Todo",
    "TodoUpdate",
    "VisitStatistic",
]
