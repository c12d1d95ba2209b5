"""Work order API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status
from fastapi.responses import JSONResponse

from command_x.api.dependencies import Actor, Budgets, DbSession
from command_x.api.schemas import (
    AssignItemsRequest,
    AssignmentResponse,
    ErrorResponse,
    WorkOrderLineResponse,
    WorkOrderRollupResponse,
)
from command_x.services.assignment_service import AssignmentService

router = APIRouter(prefix="/work-orders", tags=["work-orders"])


# ============================================================================
# Work Order reads
# ============================================================================


@router.get(
    "",
    response_model=WorkOrderRollupResponse,
)
async def list_work_orders(
    budgets: Budgets,
    project_id: int | None = None,
) -> WorkOrderRollupResponse:
    """List work orders with payment and retainage status, plus totals."""
    rollup = await budgets.get_work_order_rollup(project_id)
    return WorkOrderRollupResponse.model_validate(rollup)


@router.get(
    "/{work_order_id}",
    response_model=WorkOrderLineResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_work_order(
    budgets: Budgets,
    work_order_id: Annotated[int, Path()],
) -> WorkOrderLineResponse:
    """Get one work order with its payment and retainage status."""
    line = await budgets.get_work_order_line(work_order_id)
    return WorkOrderLineResponse.model_validate(line)


# ============================================================================
# Assignment
# ============================================================================


@router.post(
    "/{work_order_id}/assign-items",
    response_model=AssignmentResponse,
    responses={
        207: {"model": AssignmentResponse},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def assign_items(
    db: DbSession,
    actor: Actor,
    work_order_id: Annotated[int, Path()],
    payload: AssignItemsRequest,
) -> AssignmentResponse | JSONResponse:
    """Assign payment items to a work order.

    Returns 207 when some items could not be assigned; the failures are
    listed in the body and the other items stay assigned.
    """
    service = AssignmentService(db)
    result = await service.assign_items_to_work_order(work_order_id, payload.item_ids, actor)
    response = AssignmentResponse.model_validate(result)
    if result.failures:
        return JSONResponse(
            status_code=status.HTTP_207_MULTI_STATUS,
            content=response.model_dump(mode="json"),
        )
    return response
