"""Free-text search and visit statistics.

Matching is a case-insensitive substring test, not tokenized or fuzzy.
"""

from collections import Counter
from typing import Iterable, Optional

from nursecare.domain.models import Patient, Todo, VisitStatistic


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def todo_matches(todo: Todo, query: str) -> bool:
    """True if query occurs in the title or description."""
    return _contains(todo.title, query) or _contains(todo.description, query)


def patient_matches(patient: Patient, query: str) -> bool:
    """True if query occurs in the first name, last name or any diagnosis."""
    return (
        _contains(patient.first_name, query)
        or _contains(patient.last_name, query)
        or any(_contains(d.text, query) for d in patient.diagnoses)
    )


def search_todos(todos: Iterable[Todo], query: str) -> list[Todo]:
    return [t for t in todos if todo_matches(t, query)]


def search_patients(patients: Iterable[Patient], query: str) -> list[Patient]:
    return [p for p in patients if patient_matches(p, query)]


def visit_statistics(patients: Iterable[Patient], todos: Iterable[Todo]) -> list[VisitStatistic]:
    """Count care tasks per patient, most visited first.

    Every todo counts regardless of completion state. Ties keep the input
    order of patients.
    """
    counts = Counter(t.patient_id for t in todos)
    statistics = [
        VisitStatistic(
            id=patient.id,
            name=patient.full_name,
            visit_count=counts.get(patient.id, 0),
            diagnoses=[d.text for d in patient.diagnoses],
        )
        for patient in patients
    ]
    return sorted(statistics, key=lambda s: s.visit_count, reverse=True)
