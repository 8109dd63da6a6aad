from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from fuel_procurement.core.errors import ValidationError

# scales of the Numeric columns the amounts are stored in
QUANTITY_PLACES = 3
MONEY_PLACES = 2
QUANTITY_DIGITS = 18
MONEY_DIGITS = 18
BUDGET_DIGITS = 28


def require_amount(name: str, value: Any, *, places: int, digits: int) -> Decimal:
    """
    Returns `value` as a positive Decimal that its column stores exactly.

    Amounts with more decimal places than the column keeps are rejected
    rather than rounded, so a total computed here always equals the
    product of the stored factors.
    """
    if value is None:
        raise ValidationError(f"{name} is required.")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{name} must be a number.")

    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{name} must be greater than zero.")
    if amount.adjusted() >= digits - places:
        raise ValidationError(f"{name} is too large.")
    if amount.as_tuple().exponent < -places and amount != amount.quantize(Decimal(1).scaleb(-places)):
        raise ValidationError(f"{name} allows at most {places} decimal places.")
    return amount


def compute_total(price_per_unit: Decimal, quantity: Decimal) -> Decimal:
    return Decimal(price_per_unit) * Decimal(quantity)
