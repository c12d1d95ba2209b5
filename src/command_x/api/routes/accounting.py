"""Accounting API endpoints."""

from fastapi import APIRouter

from command_x.api.dependencies import Budgets
from command_x.api.schemas import FinancialSummaryResponse

router = APIRouter(prefix="/accounting", tags=["accounting"])


@router.get("/summary", response_model=FinancialSummaryResponse)
async def get_financial_summary(budgets: Budgets) -> FinancialSummaryResponse:
    """Portfolio summary across all projects."""
    summary = await budgets.get_financial_summary()
    return FinancialSummaryResponse.model_validate(summary)
