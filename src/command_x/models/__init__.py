"""ORM models."""

from command_x.models.audit import AuditEvent
from command_x.models.base import Base, TimestampMixin
from command_x.models.payment_item import PaymentItem
from command_x.models.project import Project, WorkOrder

__all__ = [
    "AuditEvent",
    "Base",
    "PaymentItem",
    "Project",
    "TimestampMixin",
    "WorkOrder",
]
