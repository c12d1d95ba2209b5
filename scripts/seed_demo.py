"""Load a demo project into the database.

Usage:
    python -m scripts.seed_demo [--database-url URL]

Creates the tables if needed, then adds one project with two work orders
and a handful of payment items. Items go through the services, so totals
and statuses are derived exactly as they are for API callers.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date
from decimal import Decimal

from command_x.config import settings
from command_x.database import get_engine, make_session_factory
from command_x.logging_config import configure_logging
from command_x.models import Base, Project, WorkOrder
from command_x.services.actor import SYSTEM_ACTOR
from command_x.services.assignment_service import AssignmentService
from command_x.services.payment_item_service import PaymentItemService

logger = logging.getLogger("scripts.seed_demo")

DEMO_ITEMS = [
    # (work order index or None, description, code, unit, price, qty, actual qty)
    (0, "Kitchen Cabinets Installation", "KC-001", "linear ft", "250", "20", "22"),
    (0, "Countertop Installation", "CT-001", "sq ft", "75", "30", None),
    (1, "Hardwood Flooring", "HF-001", "sq ft", "12", "300", None),
    (1, "Carpet Installation", "CI-001", "sq ft", "8", "200", "210"),
    (None, "Interior Painting", "IP-001", "sq ft", "3.50", "1200", None),
    (None, "Light Fixture Installation", "LF-001", "each", "85", "14", None),
]


async def seed_demo(database_url: str) -> None:
    """Create tables and load the demo rows."""
    engine = get_engine(database_url)
    session_factory = make_session_factory(engine)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with session_factory() as session:
            project = Project(
                project_name="Riverside Residence Renovation",
                budget=Decimal("50000.00"),
                actual_cost=Decimal("18450.00"),
            )
            session.add(project)
            await session.flush()

            work_orders = [
                WorkOrder(
                    project_id=project.project_id,
                    description="Kitchen Renovation",
                    status="Completed",
                    amount_billed=Decimal("7250.00"),
                    amount_paid=Decimal("7250.00"),
                    retainage_percentage=Decimal("10"),
                    completion_date=date(2025, 3, 1),
                ),
                WorkOrder(
                    project_id=project.project_id,
                    description="Flooring Installation",
                    status="In Progress",
                    amount_billed=Decimal("5200.00"),
                    amount_paid=Decimal("2600.00"),
                    retainage_percentage=Decimal("5"),
                ),
            ]
            session.add_all(work_orders)
            await session.commit()
            for work_order in work_orders:
                await session.refresh(work_order)
            await session.refresh(project)

            items = PaymentItemService(session)
            assignments = AssignmentService(session)
            by_work_order: dict[int, list[int]] = {}

            for wo_index, description, code, unit, price, qty, actual in DEMO_ITEMS:
                data = {
                    "project_id": project.project_id,
                    "description": description,
                    "item_code": code,
                    "unit_of_measure": unit,
                    "unit_price": price,
                    "original_quantity": qty,
                }
                if actual is not None:
                    data["actual_quantity"] = actual
                item = await items.create(data, SYSTEM_ACTOR)
                if wo_index is not None:
                    wo_id = work_orders[wo_index].work_order_id
                    by_work_order.setdefault(wo_id, []).append(item.item_id)

            for wo_id, item_ids in by_work_order.items():
                await assignments.assign_items_to_work_order(wo_id, item_ids, SYSTEM_ACTOR)

        logger.info(
            "Seeded project %s with %d work orders and %d payment items",
            project.project_id,
            len(work_orders),
            len(DEMO_ITEMS),
        )
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load a demo project into the database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=settings.database_url,
        help="Database URL (default: from settings)",
    )

    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed_demo(args.database_url))


if __name__ == "__main__":
    main()
