"""Audit event recording."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from command_x.models import AuditEvent
from command_x.services.actor import ActorContext


def record_audit(
    session: AsyncSession,
    entity_type: str,
    entity_id: int,
    action: str,
    actor: ActorContext,
    details: dict[str, Any] | None = None,
) -> AuditEvent:
    """Add an audit event to the session; the caller commits it."""
    event = AuditEvent(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_user_id=actor.user_id,
        actor_role=actor.role,
        details=details,
    )
    session.add(event)
    return event
