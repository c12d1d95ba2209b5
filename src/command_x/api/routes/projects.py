"""Project budget API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path

from command_x.api.dependencies import Budgets
from command_x.api.schemas import BudgetSummaryResponse, ErrorResponse, WorkOrderRollupResponse

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get(
    "/{project_id}/budget-summary",
    response_model=BudgetSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_budget_summary(
    budgets: Budgets,
    project_id: Annotated[int, Path()],
) -> BudgetSummaryResponse:
    """Assigned versus unassigned budget for a project."""
    summary = await budgets.get_project_budget_summary(project_id)
    return BudgetSummaryResponse.model_validate(summary)


@router.get(
    "/{project_id}/financials",
    response_model=WorkOrderRollupResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_project_financials(
    budgets: Budgets,
    project_id: Annotated[int, Path()],
) -> WorkOrderRollupResponse:
    """Billed, paid, outstanding and retainage across a project's work orders."""
    rollup = await budgets.get_project_financials(project_id)
    return WorkOrderRollupResponse.model_validate(rollup)
