"""Patient endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response, status

from nursecare.api.dependencies import PatientServiceDep
from nursecare.domain.models import Patient, PatientDetail, PatientUpdate, VisitStatistic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])


@router.post("", response_model=Patient, status_code=status.HTTP_201_CREATED)
async def create_patient(patient: Patient, service: PatientServiceDep) -> Patient:
    """Create a patient. The main diagnosis is normalized before saving."""
    return service.create(patient)


@router.get("", response_model=list[Patient])
async def list_patients(
    service: PatientServiceDep,
    search: Optional[str] = Query(None, description="Free-text search over names and diagnoses"),
) -> list[Patient]:
    """List patients ordered by name."""
    return service.find_all(search=search)


@router.get("/statistics", response_model=list[VisitStatistic])
async def get_statistics(service: PatientServiceDep) -> list[VisitStatistic]:
    """Visit counts per patient, most visited first."""
    return service.statistics()


@router.get("/{patient_id}", response_model=PatientDetail)
async def get_patient(patient_id: str, service: PatientServiceDep) -> PatientDetail:
    """Get a patient with its todos."""
    return service.get_detail(patient_id)


@router.put("/{patient_id}", response_model=Patient)
async def update_patient(patient_id: str, update: PatientUpdate, service: PatientServiceDep) -> Patient:
    """Update the fields present in the request body."""
    return service.update(patient_id, update)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(patient_id: str, service: PatientServiceDep) -> Response:
    """Delete a patient together with its todos."""
    service.delete(patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
