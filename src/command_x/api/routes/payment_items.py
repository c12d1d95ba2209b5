"""Payment item API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status

from command_x.api.dependencies import Actor, DbSession
from command_x.api.schemas import (
    ApprovalRequest,
    ErrorResponse,
    PaymentItemCreate,
    PaymentItemListResponse,
    PaymentItemResponse,
    PaymentItemUpdate,
)
from command_x.services.approval_service import ApprovalService
from command_x.services.payment_item_service import PaymentItemFilter, PaymentItemService

router = APIRouter(prefix="/payment-items", tags=["payment-items"])


# ============================================================================
# Payment Item CRUD
# ============================================================================


@router.post(
    "",
    response_model=PaymentItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_payment_item(
    db: DbSession,
    actor: Actor,
    payload: PaymentItemCreate,
) -> PaymentItemResponse:
    """Create a payment item. Totals are derived, status starts pending."""
    service = PaymentItemService(db)
    item = await service.create(payload.model_dump(exclude_unset=True), actor)
    return PaymentItemResponse.model_validate(item)


@router.get(
    "",
    response_model=PaymentItemListResponse,
)
async def list_payment_items(
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    project_id: int | None = None,
    work_order_id: int | None = None,
    location_id: int | None = None,
    category: str | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    unassigned: bool = False,
) -> PaymentItemListResponse:
    """List payment items with optional filters."""
    service = PaymentItemService(db)
    filters = PaymentItemFilter(
        project_id=project_id,
        work_order_id=work_order_id,
        location_id=location_id,
        category=category,
        status=status_filter,
        unassigned=unassigned,
    )
    items, total = await service.list_items(filters, page=page, page_size=page_size)

    return PaymentItemListResponse(
        items=[PaymentItemResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{item_id}",
    response_model=PaymentItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payment_item(
    db: DbSession,
    item_id: Annotated[int, Path()],
) -> PaymentItemResponse:
    """Get a specific payment item by ID."""
    item = await PaymentItemService(db).get(item_id)
    return PaymentItemResponse.model_validate(item)


@router.put(
    "/{item_id}",
    response_model=PaymentItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment_item(
    db: DbSession,
    actor: Actor,
    item_id: Annotated[int, Path()],
    payload: PaymentItemUpdate,
) -> PaymentItemResponse:
    """Apply a partial edit. Totals are re-derived from the merged fields."""
    service = PaymentItemService(db)
    item = await service.update(item_id, payload.model_dump(exclude_unset=True), actor)
    return PaymentItemResponse.model_validate(item)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_payment_item(
    db: DbSession,
    actor: Actor,
    item_id: Annotated[int, Path()],
) -> Response:
    """Delete a payment item."""
    await PaymentItemService(db).delete(item_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Approvals
# ============================================================================


@router.post(
    "/{item_id}/approvals",
    response_model=PaymentItemResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def record_approval(
    db: DbSession,
    actor: Actor,
    item_id: Annotated[int, Path()],
    payload: ApprovalRequest,
) -> PaymentItemResponse:
    """Record the caller's decision on their approval track."""
    service = ApprovalService(db)
    item = await service.record_approval(
        item_id,
        payload.decision,
        actor,
        comments=payload.comments,
        track=payload.track,
    )
    return PaymentItemResponse.model_validate(item)
