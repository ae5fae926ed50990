from typing import List
from fastapi import APIRouter, Depends, status
from hospital_billing.dependencies import get_storage
from hospital_billing.exceptions import NotFoundError
from hospital_billing.schemas import MessageResponse, ServiceCreate, ServiceOut, ServiceUpdate
from hospital_billing.services.audit import log_action
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/services", tags=["Services"])


@router.get("", response_model=List[ServiceOut])
async def list_services(storage: DatabaseStorage = Depends(get_storage)):
    return storage.list_services()


@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: str, storage: DatabaseStorage = Depends(get_storage)):
    service = storage.get_service(service_id)
    if not service:
        raise NotFoundError("Service not found")
    return service


@router.post("", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
async def create_service(payload: ServiceCreate, storage: DatabaseStorage = Depends(get_storage)):
    service = storage.create_service(payload.model_dump())
    log_action(storage.db, "create", "service", service.id, f"{service.name} @ {service.price}")
    return service


@router.put("/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: str,
    payload: ServiceUpdate,
    storage: DatabaseStorage = Depends(get_storage),
):
    fields = payload.model_dump(exclude_unset=True)
    service = storage.update_service(service_id, fields)
    if not service:
        raise NotFoundError("Service not found")
    log_action(storage.db, "update", "service", service.id, ", ".join(sorted(fields)))
    return service


@router.delete("/{service_id}", response_model=MessageResponse)
async def delete_service(service_id: str, storage: DatabaseStorage = Depends(get_storage)):
    """Hard delete. Existing invoice lines keep their name and price snapshot."""
    if not storage.delete_service(service_id):
        raise NotFoundError("Service not found")
    log_action(storage.db, "delete", "service", service_id)
    return MessageResponse(message="Service deleted successfully")
