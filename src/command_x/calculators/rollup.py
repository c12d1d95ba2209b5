"""Budget and accounting rollups.

Every function here works on plain figures read fresh from the store; no
aggregate state is kept between calls. Missing amounts count as zero.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from command_x.calculators.pricing import percentage, round_to_cents
from command_x.calculators.types import (
    BudgetSummary,
    FinancialSummary,
    ItemAmount,
    PaymentStatus,
    RetainageStatus,
    WorkOrderFigures,
    WorkOrderLine,
    WorkOrderRollup,
)

ZERO = Decimal("0")
DEFAULT_RETAINAGE_RELEASE_MONTHS = 3


def _amount(value: Decimal | None) -> Decimal:
    return ZERO if value is None else value


def payment_status(billed: Decimal | None, paid: Decimal | None) -> PaymentStatus:
    """Classify a work order by its billed and paid amounts.

    The checks run in this order, so (0, 0) is "Not Billed".
    """
    billed = _amount(billed)
    paid = _amount(paid)
    if billed == 0:
        return PaymentStatus.NOT_BILLED
    if paid == 0:
        return PaymentStatus.UNPAID
    if paid < billed:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.PAID


def retainage_amount(billed: Decimal | None, retainage_percentage: Decimal | None) -> Decimal:
    """Unrounded retainage held on a billed amount."""
    return _amount(billed) * _amount(retainage_percentage) / 100


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping to the end of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def retainage_status(
    figures: WorkOrderFigures,
    as_of: date,
    release_months: int = DEFAULT_RETAINAGE_RELEASE_MONTHS,
) -> RetainageStatus:
    """Release state of a work order's retainage on ``as_of``.

    Retainage becomes releasable ``release_months`` after completion.
    """
    if figures.completion_date is None:
        return RetainageStatus.NOT_APPLICABLE
    if retainage_amount(figures.amount_billed, figures.retainage_percentage) <= 0:
        return RetainageStatus.NO_RETAINAGE
    if as_of > add_months(figures.completion_date, release_months):
        return RetainageStatus.READY_FOR_RELEASE
    return RetainageStatus.HOLDING


def summarize_budget(
    project_id: int,
    budget: Decimal | None,
    items: Iterable[ItemAmount],
    work_orders_count: int,
) -> BudgetSummary:
    """Split a project's payment items into assigned and unassigned budget."""
    assigned = ZERO
    unassigned = ZERO
    item_count = 0
    unassigned_count = 0

    for item in items:
        item_count += 1
        if item.work_order_id is None:
            unassigned += item.total_price
            unassigned_count += 1
        else:
            assigned += item.total_price

    total_budget = round_to_cents(_amount(budget))
    assigned = round_to_cents(assigned)
    unassigned = round_to_cents(unassigned)

    return BudgetSummary(
        project_id=project_id,
        total_budget=total_budget,
        assigned_amount=assigned,
        unassigned_amount=unassigned,
        assigned_percentage=percentage(assigned, total_budget),
        work_orders_count=work_orders_count,
        payment_items_count=item_count,
        unassigned_items_count=unassigned_count,
    )


def rollup_work_orders(
    work_orders: Iterable[WorkOrderFigures],
    items: Iterable[ItemAmount] = (),
    as_of: date | None = None,
    release_months: int = DEFAULT_RETAINAGE_RELEASE_MONTHS,
) -> WorkOrderRollup:
    """Total billed, paid, outstanding and retainage across work orders.

    ``items`` is optional and only feeds the per-line item counts.
    """
    as_of = as_of or date.today()

    item_counts: dict[int, int] = {}
    item_totals: dict[int, Decimal] = {}
    for item in items:
        if item.work_order_id is None:
            continue
        item_counts[item.work_order_id] = item_counts.get(item.work_order_id, 0) + 1
        item_totals[item.work_order_id] = (
            item_totals.get(item.work_order_id, ZERO) + item.total_price
        )

    rollup = WorkOrderRollup()
    total_billed = ZERO
    total_paid = ZERO
    total_retainage = ZERO

    for wo in work_orders:
        billed = _amount(wo.amount_billed)
        paid = _amount(wo.amount_paid)
        retained = retainage_amount(billed, wo.retainage_percentage)

        total_billed += billed
        total_paid += paid
        total_retainage += retained

        rollup.lines.append(
            WorkOrderLine(
                work_order_id=wo.work_order_id,
                description=wo.description,
                status=wo.status,
                amount_billed=round_to_cents(billed),
                amount_paid=round_to_cents(paid),
                outstanding=round_to_cents(billed - paid),
                retainage_percentage=_amount(wo.retainage_percentage),
                retainage_amount=round_to_cents(retained),
                payment_status=payment_status(billed, paid),
                retainage_status=retainage_status(wo, as_of, release_months),
                item_count=item_counts.get(wo.work_order_id, 0),
                item_total=round_to_cents(item_totals.get(wo.work_order_id, ZERO)),
            )
        )

    rollup.total_billed = round_to_cents(total_billed)
    rollup.total_paid = round_to_cents(total_paid)
    rollup.outstanding = round_to_cents(total_billed - total_paid)
    rollup.total_retainage = round_to_cents(total_retainage)
    return rollup


def summarize_portfolio(
    budgets: Iterable[tuple[Decimal | None, Decimal | None]],
    work_orders: Iterable[WorkOrderFigures],
) -> FinancialSummary:
    """Accounting summary across all projects.

    ``budgets`` yields ``(budget, actual_cost)`` per project.
    """
    total_budget = ZERO
    total_actual = ZERO
    for budget, actual_cost in budgets:
        total_budget += _amount(budget)
        total_actual += _amount(actual_cost)

    rollup = rollup_work_orders(work_orders)

    return FinancialSummary(
        total_budget=round_to_cents(total_budget),
        total_actual_cost=round_to_cents(total_actual),
        budget_utilization=percentage(total_actual, total_budget),
        total_invoiced=rollup.total_billed,
        total_paid=rollup.total_paid,
        outstanding_payments=rollup.outstanding,
        total_retainage=rollup.total_retainage,
    )
