"""
Invoice composition: patient + selected services -> persisted invoice.

All derived amounts (line totals, subtotal, tax, total) and the service
names are written once at creation. Later edits to a service's price or the
hospital tax rate never touch existing invoices.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from hospital_billing.config import Settings
from hospital_billing.exceptions import NotFoundError, ValidationError
from hospital_billing.logger import logger
from hospital_billing.models import Invoice
from hospital_billing.money import Number, format_money, quantize
from hospital_billing.schemas import InvoiceCreate
from hospital_billing.services.storage import DatabaseStorage


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


def line_total(quantity: int, unit_price: Number) -> Decimal:
    return quantize(Decimal(quantity) * quantize(unit_price))


def calculate_totals(lines: Iterable[Tuple[int, Number]], tax_rate: Number) -> InvoiceTotals:
    """
    Sum (quantity, unit_price) lines and apply a percentage tax.

    Prices and the rate are rounded to cents first, so every stored amount
    can be recomputed from the other stored amounts.
    """
    rate = quantize(tax_rate)
    subtotal = sum((line_total(q, p) for q, p in lines), Decimal("0.00"))
    tax_amount = quantize(subtotal * rate / Decimal(100))
    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def format_invoice_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:05d}"


def next_invoice_number(storage: DatabaseStorage, prefix: str, today: date) -> str:
    year_prefix = f"{prefix}-{today.year}-"
    sequence = storage.next_invoice_sequence(year_prefix)
    return format_invoice_number(prefix, today.year, sequence)


def resolve_tax_rate(storage: DatabaseStorage, override: Optional[Number], settings: Settings) -> Decimal:
    """Request override, else the hospital settings row, else the configured default."""
    if override is not None:
        return quantize(override)
    hospital = storage.get_settings()
    if hospital and hospital.tax_rate not in (None, ""):
        return quantize(hospital.tax_rate)
    return quantize(settings.DEFAULT_TAX_RATE)


def compose_invoice(
    storage: DatabaseStorage,
    payload: InvoiceCreate,
    settings: Settings,
    today: Optional[date] = None,
) -> Invoice:
    """Validate references, compute the snapshot and persist invoice + items."""
    if not payload.patient_id or not payload.items:
        raise ValidationError("An invoice needs a patient and at least one service")

    patient = storage.get_patient(payload.patient_id)
    if not patient:
        raise NotFoundError(f"Patient {payload.patient_id} not found")

    items: List[dict] = []
    lines: List[Tuple[int, Decimal]] = []
    for requested in payload.items:
        service = storage.get_service(requested.service_id)
        if not service:
            raise NotFoundError(f"Service {requested.service_id} not found")
        if not service.is_active:
            raise ValidationError(f"Service '{service.name}' is inactive and cannot be billed")

        unit_price = quantize(requested.unit_price if requested.unit_price is not None else service.price)
        lines.append((requested.quantity, unit_price))
        items.append({
            "service_id": service.id,
            "service_name": service.name,
            "quantity": requested.quantity,
            "unit_price": format_money(unit_price),
            "total": format_money(line_total(requested.quantity, unit_price)),
        })

    totals = calculate_totals(lines, resolve_tax_rate(storage, payload.tax_rate, settings))

    today = today or date.today()
    invoice_date = payload.invoice_date or today
    due_date = payload.due_date or invoice_date + timedelta(days=settings.INVOICE_DUE_DAYS)
    invoice_number = payload.invoice_number or next_invoice_number(
        storage, settings.INVOICE_PREFIX, invoice_date
    )

    invoice = storage.create_invoice_with_items(
        {
            "invoice_number": invoice_number,
            "patient_id": patient.id,
            "invoice_date": invoice_date.isoformat(),
            "due_date": due_date.isoformat(),
            "subtotal": format_money(totals.subtotal),
            "tax_rate": format_money(totals.tax_rate),
            "tax_amount": format_money(totals.tax_amount),
            "total": format_money(totals.total),
            "status": payload.status,
        },
        items,
    )
    logger.info(f"🧾 Invoice {invoice.invoice_number} created | items={len(items)} | total={invoice.total}")
    return invoice
