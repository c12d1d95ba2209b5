"""Identity of the caller performing a mutation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    """Caller identity, resolved upstream and passed into every mutation."""

    user_id: int | None = None
    role: str | None = None


SYSTEM_ACTOR = ActorContext(user_id=None, role="system")
