from typing import List
from fastapi import APIRouter, Depends, status
from hospital_billing.dependencies import get_storage
from hospital_billing.exceptions import NotFoundError
from hospital_billing.schemas import MessageResponse, PatientCreate, PatientOut, PatientUpdate
from hospital_billing.services.audit import log_action
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("", response_model=List[PatientOut])
async def list_patients(storage: DatabaseStorage = Depends(get_storage)):
    return storage.list_patients()


@router.get("/{patient_id}", response_model=PatientOut)
async def get_patient(patient_id: str, storage: DatabaseStorage = Depends(get_storage)):
    patient = storage.get_patient(patient_id)
    if not patient:
        raise NotFoundError("Patient not found")
    return patient


@router.post("", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
async def create_patient(payload: PatientCreate, storage: DatabaseStorage = Depends(get_storage)):
    patient = storage.create_patient(payload.model_dump(mode="json"))
    log_action(storage.db, "create", "patient", patient.id, patient.name)
    return patient


@router.put("/{patient_id}", response_model=PatientOut)
async def update_patient(
    patient_id: str,
    payload: PatientUpdate,
    storage: DatabaseStorage = Depends(get_storage),
):
    """Partial update: only the fields present in the body are changed."""
    fields = payload.model_dump(mode="json", exclude_unset=True)
    patient = storage.update_patient(patient_id, fields)
    if not patient:
        raise NotFoundError("Patient not found")
    log_action(storage.db, "update", "patient", patient.id, ", ".join(sorted(fields)))
    return patient


@router.delete("/{patient_id}", response_model=MessageResponse)
async def delete_patient(patient_id: str, storage: DatabaseStorage = Depends(get_storage)):
    if not storage.delete_patient(patient_id):
        raise NotFoundError("Patient not found")
    log_action(storage.db, "delete", "patient", patient_id)
    return MessageResponse(message="Patient deleted successfully")
