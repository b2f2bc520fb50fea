"""Tests for free-text search and visit statistics."""

from datetime import date, datetime

from nursecare.domain.enums import Gender, TodoCategory
from nursecare.domain.models import Diagnosis, Patient, Todo
from nursecare.domain.services.search import (
    patient_matches,
    search_patients,
    search_todos,
    todo_matches,
    visit_statistics,
)


def make_patient(patient_id, first_name="Maria", last_name="Schulz", diagnoses=("Hypertonie",)):
    return Patient(
        id=patient_id,
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date(1948, 2, 3),
        weight=64.0,
        gender=Gender.FEMALE,
        diagnoses=[Diagnosis(text=text, is_main=i == 0) for i, text in enumerate(diagnoses)],
    )


def make_todo(patient_id, title="Trinkprotokoll führen", description=None, completed=False):
    return Todo(
        title=title,
        description=description,
        category=TodoCategory.ERNAEHRUNG,
        due_date=datetime(2024, 3, 1, 12, 0),
        completed=completed,
        patient_id=patient_id,
    )


class TestTodoSearch:
    """Test suite for todo matching."""

    def test_matches_title_case_insensitively(self):
        assert todo_matches(make_todo("p1"), "TRINK")

    def test_matches_description(self):
        todo = make_todo("p1", description="Mindestens 1,5 Liter")
        assert todo_matches(todo, "liter")

    def test_missing_description_does_not_match(self):
        assert not todo_matches(make_todo("p1"), "liter")

    def test_search_todos_filters(self):
        todos = [make_todo("p1"), make_todo("p1", title="Sekret absaugen")]

        assert [t.title for t in search_todos(todos, "sekret")] == ["Sekret absaugen"]


class TestPatientSearch:
    """Test suite for patient matching."""

    def test_matches_names(self):
        patient = make_patient("p1")

        assert patient_matches(patient, "mar")
        assert patient_matches(patient, "SCHULZ")

    def test_matches_any_diagnosis(self):
        patient = make_patient("p1", diagnoses=("Hypertonie", "Diabetes mellitus Typ 2"))
        assert patient_matches(patient, "diabetes")

    def test_no_match(self):
        assert search_patients([make_patient("p1")], "COPD") == []


class TestVisitStatistics:
    """Test suite for visit_statistics."""

    def test_ordered_by_visit_count_descending(self):
        a = make_patient("A", first_name="Hans", last_name="Meyer")
        b = make_patient("B", first_name="Petra", last_name="Koch")
        todos = [make_todo("A") for _ in range(3)] + [make_todo("B") for _ in range(5)]

        stats = visit_statistics([a, b], todos)

        assert [s.id for s in stats] == ["B", "A"]
        assert [s.visit_count for s in stats] == [5, 3]
        assert stats[0].name == "Petra Koch"
        assert stats[0].diagnoses == ["Hypertonie"]

    def test_completed_todos_count(self):
        stats = visit_statistics([make_patient("A")], [make_todo("A", completed=True)])
        assert stats[0].visit_count == 1

    def test_patient_without_todos_has_zero_visits(self):
        stats = visit_statistics([make_patient("A")], [])
        assert stats[0].visit_count == 0

    def test_ties_keep_patient_order(self):
        patients = [make_patient("A"), make_patient("B"), make_patient("C")]
        todos = [make_todo("B"), make_todo("C"), make_todo("A")]

        assert [s.id for s in visit_statistics(patients, todos)] == ["A", "B", "C"]
