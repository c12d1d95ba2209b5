"""Payment item approval tracks and overall status derivation."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from command_x.models import PaymentItem


class PaymentItemStatus(str, Enum):
    """Overall payment item status values."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalTrack(str, Enum):
    """Independent approval tracks on every payment item."""

    QC = "qc"
    SUPERVISOR = "supervisor"
    ACCOUNTANT = "accountant"


class ApprovalStatus(str, Enum):
    """State of a single approval track."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalEngine:
    """Maps roles onto tracks and derives overall status from the tracks.

    Derivation, re-run after every track change:
    - any track rejected → rejected
    - all tracks approved → approved
    - otherwise an approval-owned status (approved/rejected) reverts to
      in_progress when the item has a work order, pending when it does not
    - otherwise the status is left alone
    """

    ROLE_TRACKS: dict[str, ApprovalTrack] = {
        "qc_manager": ApprovalTrack.QC,
        "supervisor": ApprovalTrack.SUPERVISOR,
        "project_manager": ApprovalTrack.SUPERVISOR,
        "accountant": ApprovalTrack.ACCOUNTANT,
        "finance_manager": ApprovalTrack.ACCOUNTANT,
    }

    DECISIONS = {ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value}

    # Statuses only the approval tracks may produce
    APPROVAL_OWNED = {
        PaymentItemStatus.APPROVED.value,
        PaymentItemStatus.REJECTED.value,
    }

    @classmethod
    def track_for_role(cls, role: str | None) -> ApprovalTrack | None:
        """Return the track a role may decide, or None."""
        if not role:
            return None
        return cls.ROLE_TRACKS.get(role.strip().lower())

    @classmethod
    def is_decision(cls, value: str) -> bool:
        """Check if a value is a recordable decision."""
        return getattr(value, "value", value) in cls.DECISIONS

    @staticmethod
    def field_names(track: ApprovalTrack | str) -> tuple[str, str, str]:
        """Column names for a track's status, comments and date."""
        name = ApprovalTrack(track).value
        return (
            f"{name}_approval_status",
            f"{name}_approval_comments",
            f"{name}_approval_date",
        )

    @classmethod
    def track_statuses(cls, item: PaymentItem) -> dict[ApprovalTrack, str]:
        """Current status of every track on an item."""
        return {
            track: getattr(item, cls.field_names(track)[0])
            for track in ApprovalTrack
        }

    @classmethod
    def derive_status(
        cls,
        current_status: str,
        track_statuses: dict[ApprovalTrack, str],
        has_work_order: bool,
    ) -> str:
        """Derive the overall status from the three track statuses."""
        values = [track_statuses.get(track, ApprovalStatus.PENDING) for track in ApprovalTrack]

        if any(v == ApprovalStatus.REJECTED for v in values):
            return PaymentItemStatus.REJECTED.value
        if all(v == ApprovalStatus.APPROVED for v in values):
            return PaymentItemStatus.APPROVED.value
        if current_status in cls.APPROVAL_OWNED:
            if has_work_order:
                return PaymentItemStatus.IN_PROGRESS.value
            return PaymentItemStatus.PENDING.value
        return current_status

    @classmethod
    def validate_direct_status(
        cls,
        to_status: str,
        track_statuses: dict[ApprovalTrack, str],
    ) -> list[str]:
        """Validate a status set by a direct edit rather than by a decision.

        Returns list of error messages (empty if valid).
        """
        errors: list[str] = []
        valid = {s.value for s in PaymentItemStatus}
        if to_status not in valid:
            errors.append(f"status must be one of {', '.join(sorted(valid))}")
            return errors

        values = [track_statuses.get(track, ApprovalStatus.PENDING) for track in ApprovalTrack]
        any_rejected = any(v == ApprovalStatus.REJECTED for v in values)
        all_approved = all(v == ApprovalStatus.APPROVED for v in values)

        # While the tracks decide the status, only their verdict is accepted
        if any_rejected and to_status != PaymentItemStatus.REJECTED:
            errors.append("status must stay 'rejected' while an approval track is rejected")
        elif all_approved and to_status != PaymentItemStatus.APPROVED:
            errors.append("status must stay 'approved' while all approval tracks are approved")
        elif to_status == PaymentItemStatus.APPROVED and not all_approved:
            errors.append("status can only be 'approved' once all approval tracks are approved")
        elif to_status == PaymentItemStatus.REJECTED and not any_rejected:
            errors.append("status can only be 'rejected' through an approval decision")

        return errors
