"""Type definitions for pricing and rollup calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class PaymentStatus(str, Enum):
    """Payment state of a work order, derived from billed and paid amounts."""

    NOT_BILLED = "Not Billed"
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


class RetainageStatus(str, Enum):
    """Release state of the retainage held on a work order."""

    NOT_APPLICABLE = "Not Applicable"
    NO_RETAINAGE = "No Retainage"
    HOLDING = "Holding"
    READY_FOR_RELEASE = "Ready for Release"


@dataclass(frozen=True)
class PricedTotals:
    """Derived price fields for one payment item."""

    total_price: Decimal
    actual_quantity: Decimal
    actual_total_price: Decimal


@dataclass(frozen=True)
class ItemAmount:
    """The slice of a payment item that the rollups need."""

    total_price: Decimal
    work_order_id: int | None = None


@dataclass(frozen=True)
class WorkOrderFigures:
    """Billing figures of one work order, as read from the store."""

    work_order_id: int
    description: str = ""
    status: str | None = None
    amount_billed: Decimal | None = None
    amount_paid: Decimal | None = None
    retainage_percentage: Decimal | None = None
    completion_date: date | None = None


@dataclass
class WorkOrderLine:
    """Per-work-order row of the accounting rollup."""

    work_order_id: int
    description: str
    status: str | None
    amount_billed: Decimal
    amount_paid: Decimal
    outstanding: Decimal
    retainage_percentage: Decimal
    retainage_amount: Decimal
    payment_status: PaymentStatus
    retainage_status: RetainageStatus
    item_count: int = 0
    item_total: Decimal = Decimal("0.00")


@dataclass
class WorkOrderRollup:
    """Totals across a set of work orders."""

    total_billed: Decimal = Decimal("0.00")
    total_paid: Decimal = Decimal("0.00")
    outstanding: Decimal = Decimal("0.00")
    total_retainage: Decimal = Decimal("0.00")
    lines: list[WorkOrderLine] = field(default_factory=list)


@dataclass(frozen=True)
class BudgetSummary:
    """Assigned versus unassigned budget for one project."""

    project_id: int
    total_budget: Decimal
    assigned_amount: Decimal
    unassigned_amount: Decimal
    assigned_percentage: Decimal
    work_orders_count: int
    payment_items_count: int
    unassigned_items_count: int


@dataclass(frozen=True)
class FinancialSummary:
    """Portfolio-wide accounting summary."""

    total_budget: Decimal
    total_actual_cost: Decimal
    budget_utilization: Decimal
    total_invoiced: Decimal
    total_paid: Decimal
    outstanding_payments: Decimal
    total_retainage: Decimal
