"""Payment item services."""

from command_x.services.actor import ActorContext
from command_x.services.approval_engine import (
    ApprovalEngine,
    ApprovalStatus,
    ApprovalTrack,
    PaymentItemStatus,
)
from command_x.services.approval_service import ApprovalService
from command_x.services.assignment_service import AssignmentResult, AssignmentService
from command_x.services.budget_service import BudgetService
from command_x.services.errors import (
    CommandXError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from command_x.services.payment_item_service import PaymentItemFilter, PaymentItemService

__all__ = [
    "ActorContext",
    "ApprovalEngine",
    "ApprovalService",
    "ApprovalStatus",
    "ApprovalTrack",
    "AssignmentResult",
    "AssignmentService",
    "BudgetService",
    "CommandXError",
    "NotFoundError",
    "PaymentItemFilter",
    "PaymentItemService",
    "PaymentItemStatus",
    "PermissionDeniedError",
    "ValidationError",
]
