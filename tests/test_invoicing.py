from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from hospital_billing.exceptions import NotFoundError, ValidationError
from hospital_billing.schemas import InvoiceCreate
from hospital_billing.services.invoicing import (
    calculate_totals,
    compose_invoice,
    format_invoice_number,
    line_total,
    next_invoice_number,
)


def _invoice_fields(number: str, patient_id: str, total: str = "100.00") -> dict:
    return {
        "invoice_number": number,
        "patient_id": patient_id,
        "invoice_date": "2026-10-01",
        "due_date": "2026-10-31",
        "subtotal": total,
        "tax_rate": "0.00",
        "tax_amount": "0.00",
        "total": total,
    }


def test_totals_match_seeded_invoice_figures():
    totals = calculate_totals([(1, "150.00"), (1, "85.00")], "8.5")

    assert totals.subtotal == Decimal("235.00")
    assert totals.tax_amount == Decimal("19.98")
    assert totals.total == Decimal("254.98")


@pytest.mark.parametrize(
    "lines, rate",
    [
        ([(2, "150.00"), (1, "85.00")], "18"),
        ([(3, "19.99"), (7, "0.05"), (1, "1200")], "12.5"),
        ([(1, "0.01")], "0"),
        ([(10, "99.95"), (4, "250.50")], "100"),
    ],
)
def test_total_is_subtotal_plus_tax(lines, rate):
    totals = calculate_totals(lines, rate)

    expected_subtotal = sum(Decimal(q) * Decimal(p) for q, p in lines).quantize(Decimal("0.01"))
    expected_tax = (expected_subtotal * Decimal(rate) / 100).quantize(Decimal("0.01"))
    assert totals.subtotal == expected_subtotal
    assert totals.tax_amount == expected_tax
    assert totals.total == expected_subtotal + expected_tax


def test_line_total_uses_the_rounded_unit_price():
    assert line_total(3, "33.333") == Decimal("99.99")
    assert line_total(2, 0.1) == Decimal("0.20")


def test_invoice_number_format():
    assert format_invoice_number("INV", 2026, 7) == "INV-2026-00007"


def test_next_invoice_number_follows_highest_issued(storage, patient):
    today = date(2026, 10, 19)
    assert next_invoice_number(storage, "INV", today) == "INV-2026-00001"

    storage.create_invoice_with_items(_invoice_fields("INV-2026-00001", patient.id), [])
    storage.create_invoice_with_items(_invoice_fields("INV-2026-00005", patient.id), [])
    storage.create_invoice_with_items(_invoice_fields("INV-2025-00042", patient.id), [])

    assert next_invoice_number(storage, "INV", today) == "INV-2026-00006"


def test_compose_snapshots_service_and_totals(storage, app_settings, patient, consultation, blood_test):
    storage.upsert_settings({"name": "City General Hospital", "tax_rate": "18.00"})
    payload = InvoiceCreate(
        patient_id=patient.id,
        items=[
            {"service_id": consultation.id, "quantity": 2},
            {"service_id": blood_test.id, "quantity": 1, "unit_price": "80.00"},
        ],
    )

    invoice = compose_invoice(storage, payload, app_settings, today=date(2026, 10, 19))

    assert invoice.invoice_number == "INV-2026-00001"
    assert invoice.invoice_date == "2026-10-19"
    assert invoice.due_date == "2026-11-18"
    assert invoice.subtotal == "380.00"
    assert invoice.tax_rate == "18.00"
    assert invoice.tax_amount == "68.40"
    assert invoice.total == "448.40"
    assert invoice.status == "pending"
    assert invoice.patient.id == patient.id
    assert [(i.service_name, i.quantity, i.unit_price, i.total) for i in invoice.items] == [
        ("General Consultation", 2, "150.00", "300.00"),
        ("Blood Test", 1, "80.00", "80.00"),
    ]


def test_compose_is_not_affected_by_later_changes(storage, app_settings, patient, consultation):
    payload = InvoiceCreate(patient_id=patient.id, items=[{"service_id": consultation.id, "quantity": 1}])
    invoice = compose_invoice(storage, payload, app_settings)

    storage.update_service(consultation.id, {"name": "Consultation (Senior)", "price": "300.00"})
    storage.upsert_settings({"name": "City General Hospital", "tax_rate": "25.00"})

    reread = storage.get_invoice_with_details(invoice.id)
    assert reread.items[0].service_name == "General Consultation"
    assert reread.items[0].unit_price == "150.00"
    assert reread.total == "150.00"


def test_request_tax_rate_overrides_settings(storage, app_settings, patient, consultation):
    storage.upsert_settings({"name": "City General Hospital", "tax_rate": "18.00"})
    payload = InvoiceCreate(
        patient_id=patient.id,
        tax_rate="5",
        items=[{"service_id": consultation.id, "quantity": 1}],
    )

    invoice = compose_invoice(storage, payload, app_settings)

    assert invoice.tax_rate == "5.00"
    assert invoice.tax_amount == "7.50"
    assert invoice.total == "157.50"


def test_default_tax_rate_used_without_settings(storage, app_settings, patient, consultation):
    settings = app_settings.model_copy(update={"DEFAULT_TAX_RATE": "10"})
    payload = InvoiceCreate(patient_id=patient.id, items=[{"service_id": consultation.id, "quantity": 1}])

    invoice = compose_invoice(storage, payload, settings)

    assert invoice.tax_amount == "15.00"


def test_unknown_patient_is_rejected(storage, app_settings, consultation):
    payload = InvoiceCreate(patient_id="missing", items=[{"service_id": consultation.id, "quantity": 1}])

    with pytest.raises(NotFoundError):
        compose_invoice(storage, payload, app_settings)
    assert storage.list_invoices_with_details() == []


def test_unknown_service_is_rejected(storage, app_settings, patient):
    payload = InvoiceCreate(patient_id=patient.id, items=[{"service_id": "missing", "quantity": 1}])

    with pytest.raises(NotFoundError):
        compose_invoice(storage, payload, app_settings)


def test_inactive_service_cannot_be_billed(storage, app_settings, patient, consultation):
    storage.update_service(consultation.id, {"is_active": False})
    payload = InvoiceCreate(patient_id=patient.id, items=[{"service_id": consultation.id, "quantity": 1}])

    with pytest.raises(ValidationError):
        compose_invoice(storage, payload, app_settings)


def test_stored_amounts_agree_with_each_other(storage, app_settings, patient, consultation):
    payload = InvoiceCreate(
        patient_id=patient.id,
        tax_rate="12.345",
        items=[{"service_id": consultation.id, "quantity": 3, "unit_price": "333.333"}],
    )

    invoice = compose_invoice(storage, payload, app_settings)

    item = invoice.items[0]
    assert (item.unit_price, item.total) == ("333.33", "999.99")
    assert Decimal(item.total) == item.quantity * Decimal(item.unit_price)
    assert invoice.subtotal == "999.99"
    assert invoice.tax_rate == "12.35"
    expected_tax = (Decimal(invoice.subtotal) * Decimal(invoice.tax_rate) / 100).quantize(Decimal("0.01"))
    assert Decimal(invoice.tax_amount) == expected_tax
    assert Decimal(invoice.total) == Decimal(invoice.subtotal) + expected_tax
