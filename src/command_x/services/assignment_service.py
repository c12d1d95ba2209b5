"""Work order assignment service - bulk-assign payment items to a work order."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from command_x.calculators.pricing import round_to_cents
from command_x.models import PaymentItem, WorkOrder
from command_x.services.actor import ActorContext
from command_x.services.approval_engine import ApprovalEngine, PaymentItemStatus
from command_x.services.audit import record_audit
from command_x.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class AssignmentFailure:
    """One item that could not be assigned, with the cause."""

    item_id: int
    error: str


@dataclass
class AssignmentResult:
    """Outcome of a bulk assignment, item by item."""

    work_order_id: int
    work_order_description: str
    requested_count: int
    assigned_item_ids: list[int] = field(default_factory=list)
    failures: list[AssignmentFailure] = field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")

    @property
    def assigned_count(self) -> int:
        return len(self.assigned_item_ids)

    @property
    def is_partial(self) -> bool:
        """True when some items were assigned and some were not."""
        return bool(self.assigned_item_ids) and bool(self.failures)

    @property
    def succeeded(self) -> bool:
        return not self.failures


class AssignmentService:
    """Service for assigning payment items to a work order.

    Each item is written and committed on its own. A failing item does not
    roll back the ones before it; it is reported in the result instead.
    There is no cross-item transaction, so concurrent assignment of the
    same item is last-write-wins.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def assign_items_to_work_order(
        self,
        work_order_id: int | None,
        item_ids: Sequence[int],
        actor: ActorContext,
    ) -> AssignmentResult:
        """Assign items to a work order and mark them in progress.

        Items whose approval tracks have all approved, or rejected, keep that
        status.
        """
        operation = "Assign payment items"
        errors: list[str] = []
        if work_order_id is None:
            errors.append("a work order must be selected")
        if not item_ids:
            errors.append("at least one payment item must be selected")
        if errors:
            raise ValidationError(operation, errors)

        work_order = await self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise NotFoundError("Work order", work_order_id)

        # Keep first occurrence order, drop repeats
        unique_ids = list(dict.fromkeys(item_ids))

        result = AssignmentResult(
            work_order_id=work_order.work_order_id,
            work_order_description=work_order.description,
            requested_count=len(unique_ids),
        )
        target_project_id = work_order.project_id
        total = Decimal("0")

        for item_id in unique_ids:
            error = await self._assign_one(item_id, work_order_id, target_project_id, actor)
            if error is not None:
                logger.warning(
                    "Could not assign payment item %s to work order %s: %s",
                    item_id,
                    work_order_id,
                    error,
                )
                result.failures.append(AssignmentFailure(item_id=item_id, error=error))
                continue

            item = await self.session.get(PaymentItem, item_id)
            if item is not None:
                total += item.total_price
            result.assigned_item_ids.append(item_id)

        result.total_amount = round_to_cents(total)

        logger.info(
            "Assigned %d of %d payment items to work order %s (total %s)",
            result.assigned_count,
            result.requested_count,
            work_order_id,
            result.total_amount,
        )
        return result

    async def _assign_one(
        self,
        item_id: int,
        work_order_id: int,
        project_id: int,
        actor: ActorContext,
    ) -> str | None:
        """Assign a single item. Returns an error message, or None on success."""
        try:
            item = await self.session.get(PaymentItem, item_id)
            if item is None:
                return f"payment item {item_id} not found"
            if item.project_id != project_id:
                return (
                    f"payment item {item_id} belongs to project {item.project_id}, "
                    f"work order {work_order_id} to project {project_id}"
                )

            previous_work_order_id = item.work_order_id
            item.work_order_id = work_order_id
            previous_status = item.status
            # Assignment starts the work; a status owned by the approval tracks stays
            item.status = ApprovalEngine.derive_status(
                PaymentItemStatus.IN_PROGRESS.value,
                ApprovalEngine.track_statuses(item),
                has_work_order=True,
            )
            item.updated_by = actor.user_id

            record_audit(
                self.session,
                entity_type="payment_item",
                entity_id=item_id,
                action="assigned",
                actor=actor,
                details={
                    "work_order_id": work_order_id,
                    "previous_work_order_id": previous_work_order_id,
                    "status_before": previous_status,
                    "status_after": item.status,
                },
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            return f"update failed: {e}"
        return None
