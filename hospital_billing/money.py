"""Decimal helpers for amounts stored as two-place strings."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

TWO_PLACES = Decimal("0.01")

# Largest single price accepted from clients; keeps every derived amount
# well inside a NUMERIC(12, 2) column.
MAX_PRICE = Decimal("99999999.99")
MAX_QUANTITY = 10000

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Parse a money-like value. Floats go through ``str`` so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a valid number")
    if not result.is_finite():
        raise ValueError(f"'{value}' is not a valid number")
    return result


def quantize(value: Number) -> Decimal:
    try:
        return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"'{value}' is too large to be an amount")


def format_money(value: Number) -> str:
    """``150`` -> ``"150.00"``"""
    return format(quantize(value), "f")
