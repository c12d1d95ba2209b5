"""Payment item service - create, edit and remove priced lines of work."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from command_x.calculators.pricing import (
    PRICE_SCALE,
    QUANTITY_SCALE,
    check_scale,
    compute_totals,
    normalize_category,
    validate_item_fields,
)
from command_x.calculators.types import PricedTotals
from command_x.models import PaymentItem, Project, WorkOrder
from command_x.services.actor import ActorContext
from command_x.services.approval_engine import ApprovalEngine, ApprovalTrack, PaymentItemStatus
from command_x.services.audit import record_audit
from command_x.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "work_order_id",
        "location_id",
        "description",
        "item_code",
        "category",
        "unit_of_measure",
        "notes",
        "unit_price",
        "original_quantity",
        "actual_quantity",
        "status",
    }
)
CREATE_FIELDS = EDITABLE_FIELDS | {"project_id"}

# Accepted from clients but always recomputed
DERIVED_FIELDS = frozenset({"total_price", "actual_total_price"})

APPROVAL_FIELDS = frozenset(
    name for track in ApprovalTrack for name in ApprovalEngine.field_names(track)
)

DECIMAL_FIELDS = ("unit_price", "original_quantity", "actual_quantity")
DECIMAL_SCALES = {
    "unit_price": PRICE_SCALE,
    "original_quantity": QUANTITY_SCALE,
    "actual_quantity": QUANTITY_SCALE,
}


@dataclass(frozen=True)
class PaymentItemFilter:
    """Filters for listing payment items."""

    project_id: int | None = None
    work_order_id: int | None = None
    location_id: int | None = None
    category: str | None = None
    status: str | None = None
    unassigned: bool = False


class PaymentItemService:
    """Service for payment item persistence.

    Operations:
    - create: validate, derive totals, insert as pending
    - update: merge a partial edit, re-derive totals
    - delete: remove the row (audit afterwards is best-effort)
    - get / list: reads, list is filtered and paginated

    Totals are always recomputed here from the stored and supplied
    factors; approval fields only change through ApprovalService.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, item_id: int) -> PaymentItem:
        """Load a payment item, raising NotFoundError if missing."""
        item = await self.session.get(PaymentItem, item_id)
        if item is None:
            raise NotFoundError("Payment item", item_id)
        return item

    async def list_items(
        self,
        filters: PaymentItemFilter | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[PaymentItem], int]:
        """List payment items, newest first. Returns (items, total)."""
        filters = filters or PaymentItemFilter()
        query = select(PaymentItem)

        if filters.project_id is not None:
            query = query.where(PaymentItem.project_id == filters.project_id)
        if filters.work_order_id is not None:
            query = query.where(PaymentItem.work_order_id == filters.work_order_id)
        if filters.location_id is not None:
            query = query.where(PaymentItem.location_id == filters.location_id)
        if filters.category:
            query = query.where(PaymentItem.category == normalize_category(filters.category))
        if filters.status:
            query = query.where(PaymentItem.status == filters.status)
        if filters.unassigned:
            query = query.where(PaymentItem.work_order_id.is_(None))

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(PaymentItem.created_at.desc(), PaymentItem.item_id.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def create(self, data: Mapping[str, Any], actor: ActorContext) -> PaymentItem:
        """Create a payment item from client input."""
        operation = "Create payment item"
        fields = self._clean_input(data, CREATE_FIELDS, operation)

        errors = validate_item_fields(
            fields.get("description"),
            fields.get("unit_of_measure"),
            fields.get("unit_price"),
            fields.get("original_quantity"),
            fields.get("actual_quantity"),
        )

        project_id = fields.get("project_id")
        if project_id is None:
            errors.append("project_id is required")
        elif await self.session.get(Project, project_id) is None:
            raise NotFoundError("Project", project_id)

        if fields.get("work_order_id") is not None and project_id is not None:
            errors.extend(await self._check_work_order(fields["work_order_id"], project_id))

        status = fields.get("status") or PaymentItemStatus.PENDING.value
        errors.extend(
            ApprovalEngine.validate_direct_status(
                status, {track: "pending" for track in ApprovalTrack}
            )
        )

        if errors:
            raise ValidationError(operation, errors)

        totals = compute_totals(
            fields["unit_price"],
            fields["original_quantity"],
            fields.get("actual_quantity"),
        )
        self._check_totals(totals, operation)

        item = PaymentItem(
            project_id=project_id,
            work_order_id=fields.get("work_order_id"),
            location_id=fields.get("location_id"),
            description=fields["description"].strip(),
            item_code=fields.get("item_code"),
            category=normalize_category(fields.get("category")),
            unit_of_measure=fields["unit_of_measure"].strip(),
            notes=fields.get("notes"),
            unit_price=fields["unit_price"],
            original_quantity=fields["original_quantity"],
            actual_quantity=totals.actual_quantity,
            total_price=totals.total_price,
            actual_total_price=totals.actual_total_price,
            status=status,
            created_by=actor.user_id,
            updated_by=actor.user_id,
        )
        self.session.add(item)
        await self.session.flush()

        record_audit(
            self.session,
            entity_type="payment_item",
            entity_id=item.item_id,
            action="created",
            actor=actor,
            details={"project_id": project_id, "total_price": str(totals.total_price)},
        )
        await self.session.commit()
        await self.session.refresh(item)

        logger.info(
            "Created payment item %s in project %s (total %s)",
            item.item_id,
            project_id,
            item.total_price,
        )
        return item

    async def update(
        self,
        item_id: int,
        changes: Mapping[str, Any],
        actor: ActorContext,
    ) -> PaymentItem:
        """Apply a partial edit to a payment item.

        ``actual_quantity`` set to None resets it to ``original_quantity``;
        leaving it out keeps the stored value.
        """
        operation = f"Update payment item {item_id}"
        item = await self.get(item_id)
        fields = self._clean_input(changes, EDITABLE_FIELDS, operation)

        description = fields.get("description", item.description)
        unit_of_measure = fields.get("unit_of_measure", item.unit_of_measure)
        unit_price = fields.get("unit_price", item.unit_price)
        original_quantity = fields.get("original_quantity", item.original_quantity)
        actual_quantity = fields.get("actual_quantity", item.actual_quantity)

        errors = validate_item_fields(
            description, unit_of_measure, unit_price, original_quantity, actual_quantity
        )

        if fields.get("work_order_id") is not None:
            errors.extend(await self._check_work_order(fields["work_order_id"], item.project_id))

        if "status" in fields and fields["status"] != item.status:
            if fields["status"] is None:
                errors.append("status cannot be null")
            else:
                errors.extend(
                    ApprovalEngine.validate_direct_status(
                        fields["status"], ApprovalEngine.track_statuses(item)
                    )
                )

        if errors:
            raise ValidationError(operation, errors)

        totals = compute_totals(unit_price, original_quantity, actual_quantity)
        self._check_totals(totals, operation)

        for name, value in fields.items():
            if name in DECIMAL_FIELDS:
                continue
            if name == "category":
                value = normalize_category(value)
            elif name in ("description", "unit_of_measure"):
                value = value.strip()
            setattr(item, name, value)

        item.unit_price = unit_price
        item.original_quantity = original_quantity
        item.actual_quantity = totals.actual_quantity
        item.total_price = totals.total_price
        item.actual_total_price = totals.actual_total_price
        item.updated_by = actor.user_id

        record_audit(
            self.session,
            entity_type="payment_item",
            entity_id=item.item_id,
            action="updated",
            actor=actor,
            details={"fields": sorted(fields), "total_price": str(totals.total_price)},
        )
        await self.session.commit()
        await self.session.refresh(item)

        logger.info("Updated payment item %s (%s)", item_id, ", ".join(sorted(fields)) or "no fields")
        return item

    async def delete(self, item_id: int, actor: ActorContext) -> None:
        """Delete a payment item.

        The audit record is written after the delete has committed. If that
        write fails it is logged and not raised, because the delete itself
        already happened.
        """
        item = await self.get(item_id)
        project_id = item.project_id
        await self.session.delete(item)
        await self.session.commit()
        logger.info("Deleted payment item %s from project %s", item_id, project_id)

        try:
            record_audit(
                self.session,
                entity_type="payment_item",
                entity_id=item_id,
                action="deleted",
                actor=actor,
                details={"project_id": project_id},
            )
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Audit write after deleting payment item %s failed", item_id)

    async def _check_work_order(self, work_order_id: int, project_id: int) -> list[str]:
        """Errors for assigning an item of ``project_id`` to a work order."""
        work_order = await self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            return [f"work order {work_order_id} does not exist"]
        if work_order.project_id != project_id:
            return [f"work order {work_order_id} belongs to a different project"]
        return []

    @staticmethod
    def _check_totals(totals: PricedTotals, operation: str) -> None:
        """Refuse totals too large for the money columns."""
        errors = [
            error
            for error in (
                check_scale("total_price", totals.total_price, PRICE_SCALE),
                check_scale("actual_total_price", totals.actual_total_price, PRICE_SCALE),
            )
            if error
        ]
        if errors:
            raise ValidationError(operation, errors)

    @staticmethod
    def _clean_input(
        data: Mapping[str, Any],
        allowed: frozenset[str],
        operation: str,
    ) -> dict[str, Any]:
        """Drop derived fields, reject unknown ones and coerce decimals."""
        errors: list[str] = []
        fields: dict[str, Any] = {}

        for name, value in data.items():
            if name in DERIVED_FIELDS:
                continue
            if name in APPROVAL_FIELDS:
                errors.append(f"{name} can only change through an approval decision")
                continue
            if name not in allowed:
                errors.append(f"{name} cannot be set")
                continue
            if name in DECIMAL_FIELDS and value is not None and not isinstance(value, Decimal):
                try:
                    value = Decimal(str(value))
                except InvalidOperation:
                    errors.append(f"{name} must be a number")
                    continue
            if name in DECIMAL_FIELDS and value is not None and not value.is_finite():
                errors.append(f"{name} must be a finite number")
                continue
            if name in DECIMAL_FIELDS and value is not None:
                scale_error = check_scale(name, value, DECIMAL_SCALES[name])
                if scale_error:
                    errors.append(scale_error)
                    continue
            fields[name] = value

        if errors:
            raise ValidationError(operation, errors)
        return fields
