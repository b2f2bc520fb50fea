"""Patient service.

Creates, reads, searches, updates and deletes patients. Every write runs
the diagnosis list through the main-diagnosis normalizer before it reaches
storage.
"""

import logging
from typing import Optional

from nursecare.domain.models import Patient, PatientDetail, PatientUpdate, VisitStatistic
from nursecare.domain.ports import NotFoundError, StoragePort, TodoFilter
from nursecare.domain.services import merge_patient, normalize_diagnoses, search_patients, visit_statistics
from nursecare.services.common import ensure_new, unwrap

logger = logging.getLogger(__name__)


class PatientService:
    """Service for patient records."""

    def __init__(self, storage: StoragePort):
        """Initialize PatientService.

        Parameters:
            storage: Storage adapter instance
        """
        self.storage = storage

    def create(self, patient: Patient) -> Patient:
        """Normalize diagnoses and persist a new patient.

        Raises:
            ValidationError: If a patient with the same id already exists
        """
        ensure_new(self.storage.get_patient(patient.id), "patient", patient.id)
        patient = patient.model_copy(update={
            "diagnoses": normalize_diagnoses(patient.diagnoses),
            "created_at": None,
            "updated_at": None,
        })
        saved = unwrap(self.storage.save_patient(patient), "save_patient")
        logger.info(f"Created patient {saved.id}")
        return saved

    def find_all(self, search: Optional[str] = None) -> list[Patient]:
        """All patients ordered by name, optionally filtered by free text."""
        patients = unwrap(self.storage.list_patients(), "list_patients")
        if search:
            return search_patients(patients, search)
        return patients

    def get(self, patient_id: str) -> Patient:
        """Fetch a patient.

        Raises:
            NotFoundError: If the patient does not exist
        """
        patient = unwrap(self.storage.get_patient(patient_id), "get_patient")
        if patient is None:
            raise NotFoundError("Patient not found", entity="patient", entity_id=patient_id)
        return patient

    def get_detail(self, patient_id: str) -> PatientDetail:
        """Fetch a patient together with its todos."""
        patient = self.get(patient_id)
        todos = unwrap(self.storage.list_todos(TodoFilter(patient_id=patient_id)), "list_todos")
        return PatientDetail(**patient.model_dump(exclude={"age"}), todos=todos)

    def update(self, patient_id: str, update: PatientUpdate) -> Patient:
        """Merge the set fields of update into the stored patient."""
        existing = self.get(patient_id)
        merged = merge_patient(existing, update)
        saved = unwrap(self.storage.save_patient(merged), "save_patient")
        logger.info(f"Updated patient {patient_id}")
        return saved

    def delete(self, patient_id: str) -> None:
        """Delete a patient with its todos.

        Raises:
            NotFoundError: If the patient does not exist
        """
        deleted = unwrap(self.storage.delete_patient(patient_id), "delete_patient")
        if not deleted:
            raise NotFoundError("Patient not found", entity="patient", entity_id=patient_id)
        logger.info(f"Deleted patient {patient_id}")

    def statistics(self) -> list[VisitStatistic]:
        """Visit counts per patient, most visited first."""
        patients = unwrap(self.storage.list_patients(), "list_patients")
        todos = unwrap(self.storage.list_todos(), "list_todos")
        return visit_statistics(patients, todos)
