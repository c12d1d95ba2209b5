"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from command_x.config import get_settings
from command_x.database import init_db
from command_x.services.actor import ActorContext
from command_x.services.budget_service import BudgetService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, session_factory = await init_db()
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> ActorContext:
    """Build the caller identity from the X-User-ID and X-User-Role headers."""
    user_id: int | None = None
    if x_user_id:
        try:
            user_id = int(x_user_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid X-User-ID format",
            )
    role = x_user_role.strip().lower() if x_user_role else None
    return ActorContext(user_id=user_id, role=role or None)


async def get_budget_service(db: Annotated[AsyncSession, Depends(get_db_session)]) -> BudgetService:
    """Budget service configured with the retainage release window."""
    return BudgetService(db, retainage_release_months=get_settings().retainage_release_months)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Actor = Annotated[ActorContext, Depends(get_actor)]
Budgets = Annotated[BudgetService, Depends(get_budget_service)]
