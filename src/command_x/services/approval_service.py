"""Approval service - record QC, supervisor and accountant decisions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from command_x.models import PaymentItem
from command_x.services.actor import ActorContext
from command_x.services.approval_engine import ApprovalEngine, ApprovalTrack
from command_x.services.audit import record_audit
from command_x.services.errors import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


class ApprovalService:
    """Service for recording approval decisions on payment items.

    A caller's role maps to at most one track. Recording a decision
    overwrites that track's status, comments and date, then re-derives the
    item's overall status from all three tracks.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record_approval(
        self,
        item_id: int,
        decision: str,
        actor: ActorContext,
        comments: str | None = None,
        track: ApprovalTrack | str | None = None,
    ) -> PaymentItem:
        """Record ``decision`` on the caller's track and re-derive status.

        Raises PermissionDeniedError if the caller's role has no track or
        asks for a track other than its own. Nothing is written in that case.
        """
        allowed_track = ApprovalEngine.track_for_role(actor.role)
        if allowed_track is None:
            raise PermissionDeniedError(actor.role)

        if track is not None:
            try:
                requested = ApprovalTrack(getattr(track, "value", track))
            except ValueError:
                raise ValidationError(
                    "Record approval",
                    f"track must be one of {', '.join(t.value for t in ApprovalTrack)}",
                )
            if requested != allowed_track:
                raise PermissionDeniedError(
                    actor.role,
                    f"role decides the {allowed_track.value} track, not {requested.value}",
                )

        decision = getattr(decision, "value", decision)
        if not ApprovalEngine.is_decision(decision):
            raise ValidationError("Record approval", "decision must be 'approved' or 'rejected'")

        item = await self.session.get(PaymentItem, item_id)
        if item is None:
            raise NotFoundError("Payment item", item_id)

        status_field, comments_field, date_field = ApprovalEngine.field_names(allowed_track)
        previous_track_status = getattr(item, status_field)
        previous_status = item.status

        setattr(item, status_field, decision)
        setattr(item, comments_field, comments)
        setattr(item, date_field, datetime.now(timezone.utc))

        item.status = ApprovalEngine.derive_status(
            item.status,
            ApprovalEngine.track_statuses(item),
            has_work_order=item.work_order_id is not None,
        )
        item.updated_by = actor.user_id

        record_audit(
            self.session,
            entity_type="payment_item",
            entity_id=item.item_id,
            action=f"approval:{allowed_track.value}:{decision}",
            actor=actor,
            details={
                "track": allowed_track.value,
                "track_status_before": previous_track_status,
                "track_status_after": decision,
                "status_before": previous_status,
                "status_after": item.status,
            },
        )
        await self.session.commit()
        await self.session.refresh(item)

        logger.info(
            "Recorded %s decision %s on payment item %s (status %s -> %s)",
            allowed_track.value,
            decision,
            item_id,
            previous_status,
            item.status,
        )
        return item
