"""Pricing and rollup calculations."""

from command_x.calculators.pricing import compute_totals, round_to_cents, validate_item_fields
from command_x.calculators.rollup import (
    payment_status,
    retainage_status,
    rollup_work_orders,
    summarize_budget,
    summarize_portfolio,
)
from command_x.calculators.types import (
    BudgetSummary,
    FinancialSummary,
    PaymentStatus,
    RetainageStatus,
    WorkOrderRollup,
)

__all__ = [
    "BudgetSummary",
    "FinancialSummary",
    "PaymentStatus",
    "RetainageStatus",
    "WorkOrderRollup",
    "compute_totals",
    "payment_status",
    "retainage_status",
    "rollup_work_orders",
    "round_to_cents",
    "summarize_budget",
    "summarize_portfolio",
    "validate_item_fields",
]
