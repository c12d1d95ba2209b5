"""Pricing rules for a single payment item.

This module is the only place ``total_price`` and ``actual_total_price``
are computed. Values sent by clients for those fields are ignored.

Rounding:
- products are computed at full precision
- persisted money is rounded half-up to cents
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from command_x.calculators.types import PricedTotals

MONEY_PRECISION = Decimal("0.01")
PERCENT_PRECISION = Decimal("0.01")

# Column scales for stored prices and quantities
COLUMN_PRECISION = 14
PRICE_SCALE = 2
QUANTITY_SCALE = 4

MIN_DESCRIPTION_LENGTH = 3
DEFAULT_CATEGORY = "GENERAL"


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part / whole * 100`` to 2 places, or 0 when ``whole`` is 0."""
    if not whole:
        return Decimal("0.00")
    return (part / whole * 100).quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP)


def line_total(unit_price: Decimal, quantity: Decimal) -> Decimal:
    """Price of ``quantity`` units at ``unit_price``, in cents."""
    return round_to_cents(unit_price * quantity)


def compute_totals(
    unit_price: Decimal,
    original_quantity: Decimal,
    actual_quantity: Decimal | None = None,
) -> PricedTotals:
    """Compute the derived price fields.

    ``actual_quantity`` falls back to ``original_quantity`` when absent.
    """
    effective_actual = original_quantity if actual_quantity is None else actual_quantity
    return PricedTotals(
        total_price=line_total(unit_price, original_quantity),
        actual_quantity=effective_actual,
        actual_total_price=line_total(unit_price, effective_actual),
    )


def check_scale(
    name: str,
    value: Decimal,
    scale: int,
    precision: int = COLUMN_PRECISION,
) -> str | None:
    """Error message if ``value`` would not be stored exactly, else None.

    The column keeps ``scale`` places and ``precision`` digits in total.
    """
    limit = Decimal(10) ** (precision - scale)
    if abs(value) >= limit:
        return f"{name} must be less than {limit}"
    if value != value.quantize(Decimal(1).scaleb(-scale)):
        return f"{name} must have at most {scale} decimal places"
    return None


def normalize_category(category: str | None) -> str:
    """Upper-case a category label, defaulting to GENERAL."""
    if category is None or not category.strip():
        return DEFAULT_CATEGORY
    return category.strip().upper()


def validate_item_fields(
    description: str | None,
    unit_of_measure: str | None,
    unit_price: Decimal | None,
    original_quantity: Decimal | None,
    actual_quantity: Decimal | None = None,
) -> list[str]:
    """Validate the priced fields of a payment item.

    Returns list of error messages (empty if valid).
    """
    errors: list[str] = []

    if description is None or len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        errors.append(
            f"description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        )
    if unit_of_measure is None or not unit_of_measure.strip():
        errors.append("unit_of_measure is required")
    if unit_price is None or unit_price <= 0:
        errors.append("unit_price must be greater than 0")
    if original_quantity is None or original_quantity <= 0:
        errors.append("original_quantity must be greater than 0")
    if actual_quantity is not None and actual_quantity <= 0:
        errors.append("actual_quantity must be greater than 0")

    return errors
