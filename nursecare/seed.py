"""Demo data generator.

Generates German-language demo patients and care tasks for a fresh
installation or a local dashboard. A given seed and reference time always
yields the same names, diagnoses and due dates. Record ids are fresh on
every run.

Usage:
    nursecare seed --patients 20 --todos 50 --seed 42
"""

import logging
import random
from datetime import date, datetime, time, timedelta
from typing import Optional

from nursecare.domain.enums import Gender, TodoCategory, TodoPriority
from nursecare.domain.models import Diagnosis, Patient, Todo
from nursecare.domain.ports import StoragePort
from nursecare.services import PatientService, TodoService
from nursecare.services.common import unwrap

logger = logging.getLogger(__name__)

FIRST_NAMES = {
    Gender.MALE: ['Hans', 'Peter', 'Klaus', 'Wolfgang', 'Michael', 'Thomas', 'Andreas', 'Stefan', 'Martin', 'Jürgen'],
    Gender.FEMALE: ['Maria', 'Anna', 'Petra', 'Sabine', 'Monika', 'Susanne', 'Andrea', 'Birgit', 'Christina', 'Nicole'],
}

LAST_NAMES = [
    'Müller', 'Schmidt', 'Schneider', 'Fischer', 'Weber', 'Meyer', 'Wagner', 'Becker', 'Schulz', 'Hoffmann',
    'Schäfer', 'Koch', 'Bauer', 'Richter', 'Klein', 'Wolf', 'Schröder', 'Neumann', 'Schwarz', 'Zimmermann',
]

DIAGNOSES = [
    'Diabetes mellitus Typ 2',
    'Hypertonie',
    'Chronische Herzinsuffizienz',
    'COPD',
    'Demenzerkrankung',
    'Schlaganfall',
    'Parkinson-Krankheit',
    'Osteoporose',
    'Rheumatoide Arthritis',
    'Chronische Niereninsuffizienz',
    'Herzrhythmusstörungen',
    'Asthma bronchiale',
    'Depression',
    'Osteoarthritis',
    'Periphere arterielle Verschlusskrankheit',
]

ALLERGIES = [
    'Penicillin', 'Latex', 'Iod', 'Nüsse', 'Milch', 'Eier',
    'Soja', 'Fisch', 'Schalentiere', 'Aspirin', 'Codein', 'Morphin',
]

TODO_TITLES = {
    TodoCategory.BEATMUNG: [
        'Beatmungsgerät überprüfen',
        'Sauerstoffsättigung messen',
        'Tracheostoma pflegen',
        'Beatmungsparameter anpassen',
        'Sekret absaugen',
    ],
    TodoCategory.ERNAEHRUNG: [
        'Sondenernährung verabreichen',
        'Trinkprotokoll führen',
        'Gewicht kontrollieren',
        'Nahrungsaufnahme dokumentieren',
        'Flüssigkeitsbilanz prüfen',
    ],
    TodoCategory.BEWEGUNG: [
        'Mobilisation durchführen',
        'Lagerung wechseln',
        'Physiotherapie begleiten',
        'Bewegungsübungen anleiten',
        'Dekubitusprophylaxe',
    ],
    TodoCategory.AUSSCHEIDUNG: [
        'Blasenkatheter wechseln',
        'Stuhlgang dokumentieren',
        'Harnkatheter pflegen',
        'Inkontinenzversorgung',
        'Darmspülung durchführen',
    ],
}

# Nurse identifiers used as todo assignees and notification recipients
NURSE_IDS = [
    'anna.schmidt',
    'michael.mueller',
    'petra.weber',
    'thomas.fischer',
    'sabine.koch',
]

ROOM_NUMBERS = [f"{floor}0{room}" for floor in (1, 2, 3) for room in range(1, 6)]


def generate_patients(rng: random.Random, count: int, today: date) -> list[Patient]:
    """Generate patients aged 50 to 95 with one to three diagnoses.

    Genders rotate male, female, other; "other" patients draw from the
    male name list.
    """
    genders = [Gender.MALE, Gender.FEMALE, Gender.OTHER]
    patients = []
    for i in range(count):
        gender = genders[i % 3]
        first_name = rng.choice(FIRST_NAMES.get(gender, FIRST_NAMES[Gender.MALE]))
        last_name = rng.choice(LAST_NAMES)

        date_of_birth = date(
            today.year - 50 - rng.randrange(45),
            rng.randint(1, 12),
            rng.randint(1, 28),
        )
        weight = round(50 + rng.random() * 70, 2)

        diagnoses = [
            Diagnosis(text=text, is_main=index == 0)
            for index, text in enumerate(rng.sample(DIAGNOSES, rng.randint(1, 3)))
        ]
        allergies = rng.sample(ALLERGIES, rng.randrange(4))

        notes = None
        if rng.random() > 0.7:
            notes = f"Patient benötigt besondere Aufmerksamkeit. Letzte Kontrolle: {today:%d.%m.%Y}"

        patients.append(Patient(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            weight=weight,
            gender=gender,
            diagnoses=diagnoses,
            allergies=allergies,
            room_number=rng.choice(ROOM_NUMBERS),
            notes=notes,
        ))
    return patients


def _due_date(rng: random.Random, now: datetime) -> datetime:
    """Roughly 30% overdue, 30% today, 40% within the next week."""
    today = now.date()
    at = time(8 + rng.randrange(12), rng.randrange(60))
    kind = rng.random()

    if kind < 0.3:
        return datetime.combine(today - timedelta(days=rng.randint(1, 5)), at)
    if kind < 0.6:
        due = datetime.combine(today, at)
        if due < now:
            # Slightly overdue
            due = now.replace(second=0, microsecond=0) - timedelta(hours=1)
        return due
    return datetime.combine(today + timedelta(days=rng.randint(1, 7)), at)


def generate_todos(
    rng: random.Random,
    count: int,
    patients: list[Patient],
    now: datetime
) -> list[Todo]:
    """Generate todos spread over the given patients and the demo nurses."""
    if not patients:
        return []

    categories = list(TodoCategory)
    priorities = list(TodoPriority)
    todos = []
    for _ in range(count):
        patient = rng.choice(patients)
        category = rng.choice(categories)
        title = rng.choice(TODO_TITLES[category])

        description = None
        if rng.random() > 0.5:
            description = f"Wichtige Hinweise für {title.lower()}. Bitte sorgfältig durchführen."

        due_date = _due_date(rng, now)
        completed = rng.random() > 0.7
        completed_at = due_date + timedelta(seconds=rng.random() * 3600) if completed else None

        todos.append(Todo(
            title=title,
            description=description,
            category=category,
            priority=rng.choice(priorities),
            due_date=due_date,
            completed=completed,
            completed_at=completed_at,
            patient_id=patient.id,
            assigned_to_id=rng.choice(NURSE_IDS),
        ))
    return todos


def seed_storage(
    storage: StoragePort,
    patient_count: int = 20,
    todo_count: int = 50,
    seed: Optional[int] = None,
    now: Optional[datetime] = None,
    clear: bool = False
) -> tuple[list[Patient], list[Todo]]:
    """Write demo patients and todos through the application services.

    Parameters:
        storage: Storage adapter instance (schema already initialized)
        patient_count: Number of patients to create
        todo_count: Number of todos to create
        seed: Random seed for reproducible data
        now: Reference time for due dates (defaults to the current time)
        clear: Delete all existing patients (and their todos) first

    Returns:
        tuple: Created patients and todos
    """
    now = now or datetime.now()
    rng = random.Random(seed)
    patient_service = PatientService(storage)
    todo_service = TodoService(storage, clock=lambda: now)

    if clear:
        existing = unwrap(storage.list_patients(), "list_patients")
        for patient in existing:
            patient_service.delete(patient.id)
        logger.info(f"Cleared {len(existing)} existing patient(s)")

    patients = [
        patient_service.create(patient)
        for patient in generate_patients(rng, patient_count, now.date())
    ]
    todos = [
        todo_service.create(todo)
        for todo in generate_todos(rng, todo_count, patients, now)
    ]

    logger.info(f"Seeded {len(patients)} patient(s) and {len(todos)} todo(s)")
    return patients, todos
