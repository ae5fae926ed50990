from __future__ import annotations

import logging
import sys

from hospital_billing.logger import RedactingFormatter, mask_pii


def _record(msg, args=(), exc_info=None):
    return logging.LogRecord("hospital_billing", logging.ERROR, __file__, 1, msg, args, exc_info)


def test_mask_pii_redacts_contact_details():
    text = "Created patient sarah.johnson@email.com / +91-9876543210 / 9876543211"

    masked = mask_pii(text)

    assert "sarah.johnson@email.com" not in masked
    assert "9876543210" not in masked
    assert "9876543211" not in masked
    assert masked.count("[PHONE_REDACTED]") == 2
    assert "[EMAIL_REDACTED]" in masked


def test_mask_pii_leaves_amounts_and_invoice_numbers():
    text = "Invoice INV-2026-00001 total=277.30"
    assert mask_pii(text) == text


def test_mask_pii_hides_password_values():
    assert mask_pii("login password=admin123 ok") == "login password=[REDACTED] ok"
    assert "admin123" not in mask_pii("{'username': 'admin', 'password': 'admin123'}")


def test_formatter_masks_args():
    formatter = RedactingFormatter("%(message)s")
    record = _record("login %s from %s", ("admin", "+1-555-0123"))

    assert formatter.format(record) == "login admin from [PHONE_REDACTED]"


def test_formatter_masks_exception_text():
    formatter = RedactingFormatter("%(message)s")
    try:
        raise RuntimeError("UNIQUE constraint failed, parameters: ('sarah.johnson@email.com',)")
    except RuntimeError:
        record = _record("❌ Failed to create patient", exc_info=sys.exc_info())

    line = formatter.format(record)

    assert "sarah.johnson@email.com" not in line
    assert "[EMAIL_REDACTED]" in line
