"""
Application logging with contact-detail redaction.

Billing logs carry patient emails and phone numbers in two places: the
messages we write, and SQLAlchemy error text, which echoes bound
parameters. Redaction therefore runs on the fully formatted record,
traceback included, rather than on ``record.msg`` alone.
"""
import logging
import re
import sys
from typing import Union


# ── Redaction rules ─────────────────────────────────────

REDACTIONS = [
    # password=secret / 'password': 'secret'
    (re.compile(r"""(?i)(['"]?password['"]?\s*[:=]\s*)(['"]?)[^\s,'"})]+\2"""), r"\1[REDACTED]"),
    (re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"), "[EMAIL_REDACTED]"),
    # +91-9876543210, +1-555-0123
    (re.compile(r"\+\d{1,3}[-\s]?\d[\d\s-]{5,}\d"), "[PHONE_REDACTED]"),
    (re.compile(r"\b\d{10}\b"), "[PHONE_REDACTED]"),
]


def mask_pii(text: str) -> str:
    for pattern, replacement in REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFormatter(logging.Formatter):
    """Formats as usual, then redacts the whole line (exception text too)."""

    def format(self, record: logging.LogRecord) -> str:
        return mask_pii(super().format(record))


def setup_logger(name: str = "hospital_billing", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Return the application logger, creating its stdout handler once.
    Later calls only change the level (``create_app`` applies LOG_LEVEL).
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(RedactingFormatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    ))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


logger = setup_logger()
