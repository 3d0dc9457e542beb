"""
Values -- Decimal money helpers shared by the reporting core.

Responsibility:
    Parsing loosely typed amounts into ``Decimal``, half-up rounding to the
    smallest currency unit, discount-derived prices, and the display
    formatting used on printed statements (Indian digit grouping, dd/mm/yyyy
    dates).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary arithmetic uses ``Decimal`` (never float).
    - Rounding, where unavoidable, is ROUND_HALF_UP to 0.01.
    - Aggregation never calls ``round_money``; it only sums.

Failure modes:
    - ValueError when an amount cannot be interpreted as a decimal number.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Largest amount a Numeric(14, 2) ledger column holds
MAX_AMOUNT = Decimal("999999999999.99")

_INDIAN_GROUPS = re.compile(r"(\d)(?=(\d\d)+$)")


def parse_amount(value: Decimal | str | int | float) -> Decimal:
    """
    Convert a stored amount into a Decimal.

    Floats are converted through ``str`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def has_money_precision(amount: Decimal) -> bool:
    """
    True if the amount has at most two decimal places.

    Reads the digit tuple instead of quantizing, so amounts wider than the
    decimal context precision are answered rather than raising.
    """
    _, digits, exponent = amount.as_tuple()
    while exponent < -2 and digits and digits[-1] == 0:
        digits = digits[:-1]
        exponent += 1
    return exponent >= -2


def round_money(amount: Decimal) -> Decimal:
    """Round half up to the nearest paisa/cent."""
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def discounted_price(mrp: Decimal, discount_percent: Decimal) -> Decimal:
    """
    Price after a percentage discount, rounded half up.

    Raises:
        ValueError: If the discount is outside 0-100 or the MRP is negative.
    """
    if mrp < ZERO:
        raise ValueError("mrp cannot be negative")
    if discount_percent < ZERO or discount_percent > HUNDRED:
        raise ValueError("discount_percent must be between 0 and 100")
    return round_money(mrp - (mrp * discount_percent / HUNDRED))


def format_inr(amount: Decimal, symbol: str = "₹") -> str:
    """
    Format an amount with Indian digit grouping and two decimals.

    ``Decimal("1234567.5")`` -> ``"₹12,34,567.50"``; negatives carry a
    leading minus sign before the symbol.
    """
    rounded = round_money(amount)
    sign = "-" if rounded < ZERO else ""
    whole, _, fraction = f"{abs(rounded):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        whole = _INDIAN_GROUPS.sub(r"\1,", head) + "," + tail
    return f"{sign}{symbol}{whole}.{fraction}"


def format_date(value: date) -> str:
    """Statement date format (dd/mm/yyyy)."""
    return value.strftime("%d/%m/%Y")
