"""Domain Services.

Pure business rules with no infrastructure dependencies: the main-diagnosis
invariant, todo classification and merges, search and visit statistics.
"""

from nursecare.domain.services.diagnoses import (
    AllergyEditor,
    DiagnosisEditor,
    main_diagnosis,
    normalize_diagnoses,
)
from nursecare.domain.services.search import (
    patient_matches,
    search_patients,
    search_todos,
    todo_matches,
    visit_statistics,
)
from nursecare.domain.services.todo_classifier import (
    DEFAULT_UPCOMING_HOURS,
    MAX_UPCOMING_HOURS,
    TodoBuckets,
    classify_todos,
    day_bounds,
    is_due_today,
    is_overdue,
    is_upcoming,
    mark_completed,
    merge_patient,
    merge_todo,
    overdue_todos,
    parse_timestamp,
    todays_todos,
    upcoming_todos,
    validate_hours,
    window_end,
)

__all__ = [
    'AllergyEditor',
    'DiagnosisEditor',
    'main_diagnosis',
    'normalize_diagnoses',
    'patient_matches',
    'search_patients',
    'search_todos',
    'todo_matches',
    'visit_statistics',
    'DEFAULT_UPCOMING_HOURS',
    'MAX_UPCOMING_HOURS',
    'TodoBuckets',
    'classify_todos',
    'day_bounds',
    'is_due_today',
    'is_overdue',
    'is_upcoming',
    'mark_completed',
    'merge_patient',
    'merge_todo',
    'overdue_todos',
    'parse_timestamp',
    'todays_todos',
    'upcoming_todos',
    'validate_hours',
    'window_end',
]
