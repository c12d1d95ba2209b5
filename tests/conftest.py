"""Pytest fixtures for Command X payment item tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from command_x.database import make_session_factory
from command_x.models import Base, Project, WorkOrder
from command_x.services.actor import ActorContext

# In-memory SQLite shared across connections of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def project(session: AsyncSession) -> Project:
    """Project with a 10,000 budget."""
    project = Project(project_name="Riverside Residence", budget=Decimal("10000.00"))
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return project


@pytest.fixture
async def other_project(session: AsyncSession) -> Project:
    project = Project(project_name="Hillside Office", budget=Decimal("5000.00"))
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return project


@pytest.fixture
async def work_order(session: AsyncSession, project: Project) -> WorkOrder:
    """Work order billed 1,000 and fully paid, 10% retainage."""
    work_order = WorkOrder(
        project_id=project.project_id,
        description="Kitchen Renovation",
        status="Completed",
        amount_billed=Decimal("1000.00"),
        amount_paid=Decimal("1000.00"),
        retainage_percentage=Decimal("10"),
        completion_date=date(2025, 3, 1),
    )
    session.add(work_order)
    await session.commit()
    await session.refresh(work_order)
    return work_order


@pytest.fixture
async def other_work_order(session: AsyncSession, other_project: Project) -> WorkOrder:
    """Work order on a different project."""
    work_order = WorkOrder(
        project_id=other_project.project_id,
        description="Lobby Flooring",
    )
    session.add(work_order)
    await session.commit()
    await session.refresh(work_order)
    return work_order


@pytest.fixture
def creator() -> ActorContext:
    return ActorContext(user_id=1, role="project_manager")


@pytest.fixture
def qc_manager() -> ActorContext:
    return ActorContext(user_id=2, role="qc_manager")


@pytest.fixture
def supervisor() -> ActorContext:
    return ActorContext(user_id=3, role="supervisor")


@pytest.fixture
def accountant() -> ActorContext:
    return ActorContext(user_id=4, role="accountant")


@pytest.fixture
def item_data():
    """Build a valid create payload for a payment item."""

    def build(project_id: int, **overrides) -> dict:
        data = {
            "project_id": project_id,
            "description": "Kitchen Cabinets Installation",
            "item_code": "KC-001",
            "unit_of_measure": "linear ft",
            "unit_price": Decimal("25"),
            "original_quantity": Decimal("4"),
        }
        data.update(overrides)
        return data

    return build
