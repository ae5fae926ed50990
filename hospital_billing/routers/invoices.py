from typing import List
from fastapi import APIRouter, Depends, status
from hospital_billing.config import Settings
from hospital_billing.dependencies import get_app_settings, get_storage
from hospital_billing.exceptions import NotFoundError
from hospital_billing.schemas import (
    InvoiceCreate,
    InvoiceStatusUpdate,
    InvoiceWithDetails,
    MessageResponse,
)
from hospital_billing.services.audit import log_action
from hospital_billing.services.invoicing import compose_invoice
from hospital_billing.services.storage import DatabaseStorage

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])


@router.get("", response_model=List[InvoiceWithDetails])
async def list_invoices(storage: DatabaseStorage = Depends(get_storage)):
    return storage.list_invoices_with_details()


@router.get("/{invoice_id}", response_model=InvoiceWithDetails)
async def get_invoice(invoice_id: str, storage: DatabaseStorage = Depends(get_storage)):
    invoice = storage.get_invoice_with_details(invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


@router.post("", response_model=InvoiceWithDetails, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    payload: InvoiceCreate,
    storage: DatabaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    """Compose an invoice from a patient and selected services; totals are computed here."""
    invoice = compose_invoice(storage, payload, settings)
    log_action(storage.db, "create", "invoice", invoice.id, f"{invoice.invoice_number} total={invoice.total}")
    return storage.get_invoice_with_details(invoice.id)


def _update_status(invoice_id: str, payload: InvoiceStatusUpdate, storage: DatabaseStorage) -> MessageResponse:
    if not storage.update_invoice_status(invoice_id, payload.status):
        raise NotFoundError("Invoice not found")
    log_action(storage.db, "status", "invoice", invoice_id, payload.status)
    return MessageResponse(message="Invoice status updated successfully")


@router.put("/{invoice_id}/status", response_model=MessageResponse)
async def update_invoice_status(
    invoice_id: str,
    payload: InvoiceStatusUpdate,
    storage: DatabaseStorage = Depends(get_storage),
):
    return _update_status(invoice_id, payload, storage)


@router.patch("/{invoice_id}", response_model=MessageResponse)
async def patch_invoice(
    invoice_id: str,
    payload: InvoiceStatusUpdate,
    storage: DatabaseStorage = Depends(get_storage),
):
    return _update_status(invoice_id, payload, storage)


@router.delete("/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(invoice_id: str, storage: DatabaseStorage = Depends(get_storage)):
    """Delete the invoice together with all of its line items."""
    if not storage.delete_invoice(invoice_id):
        raise NotFoundError("Invoice not found")
    log_action(storage.db, "delete", "invoice", invoice_id)
    return MessageResponse(message="Invoice deleted successfully")
