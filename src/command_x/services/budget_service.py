"""Budget and accounting rollups read fresh from the store."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from command_x.calculators.rollup import (
    DEFAULT_RETAINAGE_RELEASE_MONTHS,
    rollup_work_orders,
    summarize_budget,
    summarize_portfolio,
)
from command_x.calculators.types import (
    BudgetSummary,
    FinancialSummary,
    ItemAmount,
    WorkOrderFigures,
    WorkOrderLine,
    WorkOrderRollup,
)
from command_x.models import PaymentItem, Project, WorkOrder
from command_x.services.errors import NotFoundError


def work_order_figures(work_order: WorkOrder) -> WorkOrderFigures:
    """Project a work order row onto the figures the rollups consume."""
    return WorkOrderFigures(
        work_order_id=work_order.work_order_id,
        description=work_order.description,
        status=work_order.status,
        amount_billed=work_order.amount_billed,
        amount_paid=work_order.amount_paid,
        retainage_percentage=work_order.retainage_percentage,
        completion_date=work_order.completion_date,
    )


class BudgetService:
    """Service for project budget summaries and accounting rollups.

    Nothing is cached: each call scans the current rows. Concurrent writes
    during a scan can show up partially, so results are advisory.
    """

    def __init__(
        self,
        session: AsyncSession,
        retainage_release_months: int = DEFAULT_RETAINAGE_RELEASE_MONTHS,
    ):
        self.session = session
        self.retainage_release_months = retainage_release_months

    async def get_project_budget_summary(self, project_id: int) -> BudgetSummary:
        """Assigned versus unassigned budget for a project."""
        project = await self._get_project(project_id)
        items = await self._item_amounts(project_id)
        work_orders = await self._work_orders(project_id)

        return summarize_budget(
            project_id=project.project_id,
            budget=project.budget,
            items=items,
            work_orders_count=len(work_orders),
        )

    async def get_project_financials(
        self,
        project_id: int,
        as_of: date | None = None,
    ) -> WorkOrderRollup:
        """Billed, paid, outstanding and retainage across a project's work orders."""
        await self._get_project(project_id)
        items = await self._item_amounts(project_id)
        work_orders = await self._work_orders(project_id)

        return rollup_work_orders(
            [work_order_figures(wo) for wo in work_orders],
            items=items,
            as_of=as_of,
            release_months=self.retainage_release_months,
        )

    async def get_work_order_rollup(
        self,
        project_id: int | None = None,
        as_of: date | None = None,
    ) -> WorkOrderRollup:
        """Rollup over all work orders, optionally for one project."""
        work_orders = await self._work_orders(project_id)
        items = await self._item_amounts(project_id)
        return rollup_work_orders(
            [work_order_figures(wo) for wo in work_orders],
            items=items,
            as_of=as_of,
            release_months=self.retainage_release_months,
        )

    async def get_work_order_line(
        self,
        work_order_id: int,
        as_of: date | None = None,
    ) -> WorkOrderLine:
        """Payment and retainage figures for a single work order."""
        work_order = await self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise NotFoundError("Work order", work_order_id)

        items = await self._item_amounts(work_order_id=work_order_id)
        rollup = rollup_work_orders(
            [work_order_figures(work_order)],
            items=items,
            as_of=as_of,
            release_months=self.retainage_release_months,
        )
        return rollup.lines[0]

    async def get_financial_summary(self) -> FinancialSummary:
        """Portfolio summary across every project."""
        result = await self.session.execute(select(Project.budget, Project.actual_cost))
        budgets = [(row.budget, row.actual_cost) for row in result]
        work_orders = await self._work_orders()
        return summarize_portfolio(budgets, [work_order_figures(wo) for wo in work_orders])

    async def _get_project(self, project_id: int) -> Project:
        project = await self.session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def _item_amounts(
        self,
        project_id: int | None = None,
        work_order_id: int | None = None,
    ) -> list[ItemAmount]:
        query = select(PaymentItem.total_price, PaymentItem.work_order_id)
        if project_id is not None:
            query = query.where(PaymentItem.project_id == project_id)
        if work_order_id is not None:
            query = query.where(PaymentItem.work_order_id == work_order_id)
        result = await self.session.execute(query)
        return [
            ItemAmount(total_price=row.total_price, work_order_id=row.work_order_id)
            for row in result
        ]

    async def _work_orders(self, project_id: int | None = None) -> list[WorkOrder]:
        query = select(WorkOrder).order_by(WorkOrder.work_order_id)
        if project_id is not None:
            query = query.where(WorkOrder.project_id == project_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
