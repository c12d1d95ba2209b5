"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from command_x.calculators.types import PaymentStatus, RetainageStatus


# ============================================================================
# Payment Item schemas
# ============================================================================


class PaymentItemCreate(BaseModel):
    """Schema for creating a payment item.

    Field rules (lengths, positivity) are checked by the service so that all
    problems come back together in one 400 response. ``total_price`` and
    ``actual_total_price`` are accepted but ignored; they are always derived.
    """

    model_config = ConfigDict(extra="forbid")

    project_id: int | None = None
    work_order_id: int | None = None
    location_id: int | None = None
    description: str | None = None
    item_code: str | None = None
    category: str | None = None
    unit_of_measure: str | None = None
    notes: str | None = None
    unit_price: Decimal | None = None
    original_quantity: Decimal | None = None
    actual_quantity: Decimal | None = None
    status: str | None = None
    total_price: Decimal | None = None
    actual_total_price: Decimal | None = None


class PaymentItemUpdate(BaseModel):
    """Schema for a partial payment item edit.

    Only fields present in the request body are applied. Sending
    ``actual_quantity: null`` resets it to the original quantity.
    """

    model_config = ConfigDict(extra="forbid")

    work_order_id: int | None = None
    location_id: int | None = None
    description: str | None = None
    item_code: str | None = None
    category: str | None = None
    unit_of_measure: str | None = None
    notes: str | None = None
    unit_price: Decimal | None = None
    original_quantity: Decimal | None = None
    actual_quantity: Decimal | None = None
    status: str | None = None
    total_price: Decimal | None = None
    actual_total_price: Decimal | None = None


class PaymentItemResponse(BaseModel):
    """Schema for payment item response."""

    model_config = ConfigDict(from_attributes=True)

    item_id: int
    project_id: int
    work_order_id: int | None = None
    location_id: int | None = None
    description: str
    item_code: str | None = None
    category: str
    unit_of_measure: str
    notes: str | None = None
    unit_price: Decimal
    original_quantity: Decimal
    actual_quantity: Decimal | None = None
    total_price: Decimal
    actual_total_price: Decimal | None = None
    status: str
    qc_approval_status: str
    qc_approval_comments: str | None = None
    qc_approval_date: datetime | None = None
    supervisor_approval_status: str
    supervisor_approval_comments: str | None = None
    supervisor_approval_date: datetime | None = None
    accountant_approval_status: str
    accountant_approval_comments: str | None = None
    accountant_approval_date: datetime | None = None
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime
    updated_at: datetime


class PaymentItemListResponse(BaseModel):
    """Schema for listing payment items."""

    items: list[PaymentItemResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Approval schemas
# ============================================================================


class ApprovalRequest(BaseModel):
    """Schema for recording an approval decision.

    The track is taken from the caller's role. ``track`` may be sent to make
    the intent explicit; it must then match the role.
    """

    decision: str
    comments: str | None = None
    track: str | None = None


# ============================================================================
# Work Order schemas
# ============================================================================


class WorkOrderLineResponse(BaseModel):
    """Schema for a work order with its payment and retainage status."""

    model_config = ConfigDict(from_attributes=True)

    work_order_id: int
    description: str
    status: str | None = None
    amount_billed: Decimal
    amount_paid: Decimal
    outstanding: Decimal
    retainage_percentage: Decimal
    retainage_amount: Decimal
    payment_status: PaymentStatus
    retainage_status: RetainageStatus
    item_count: int
    item_total: Decimal


class WorkOrderRollupResponse(BaseModel):
    """Schema for totals across a set of work orders."""

    model_config = ConfigDict(from_attributes=True)

    total_billed: Decimal
    total_paid: Decimal
    outstanding: Decimal
    total_retainage: Decimal
    lines: list[WorkOrderLineResponse]


class AssignItemsRequest(BaseModel):
    """Schema for bulk-assigning payment items to a work order."""

    model_config = ConfigDict(populate_by_name=True)

    item_ids: list[int] = Field(alias="itemIds")


class AssignmentFailureResponse(BaseModel):
    """Schema for one item that could not be assigned."""

    model_config = ConfigDict(from_attributes=True)

    item_id: int
    error: str


class AssignmentResponse(BaseModel):
    """Schema for a bulk assignment outcome."""

    model_config = ConfigDict(from_attributes=True)

    work_order_id: int
    work_order_description: str
    requested_count: int
    assigned_count: int
    assigned_item_ids: list[int]
    failures: list[AssignmentFailureResponse]
    is_partial: bool
    total_amount: Decimal


# ============================================================================
# Budget and Accounting schemas
# ============================================================================


class BudgetSummaryResponse(BaseModel):
    """Schema for a project's assigned versus unassigned budget."""

    model_config = ConfigDict(from_attributes=True)

    project_id: int
    total_budget: Decimal
    assigned_amount: Decimal
    unassigned_amount: Decimal
    assigned_percentage: Decimal
    work_orders_count: int
    payment_items_count: int
    unassigned_items_count: int


class FinancialSummaryResponse(BaseModel):
    """Schema for the portfolio accounting summary."""

    model_config = ConfigDict(from_attributes=True)

    total_budget: Decimal
    total_actual_cost: Decimal
    budget_utilization: Decimal
    total_invoiced: Decimal
    total_paid: Decimal
    outstanding_payments: Decimal
    total_retainage: Decimal


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None
    errors: list[str] | None = None
