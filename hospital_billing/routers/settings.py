from typing import Optional
from fastapi import APIRouter, Depends
from hospital_billing.dependencies import get_storage
from hospital_billing.schemas import HospitalSettingsOut, HospitalSettingsUpdate
from hospital_billing.services.audit import log_action
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=Optional[HospitalSettingsOut])
async def get_settings(storage: DatabaseStorage = Depends(get_storage)):
    """The hospital settings, or null before they are first saved."""
    return storage.get_settings()


@router.put("", response_model=HospitalSettingsOut)
async def save_settings(payload: HospitalSettingsUpdate, storage: DatabaseStorage = Depends(get_storage)):
    hospital = storage.upsert_settings(payload.model_dump(mode="json"))
    log_action(storage.db, "update", "settings", hospital.id, f"tax_rate={hospital.tax_rate}")
    return hospital
