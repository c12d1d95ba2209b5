"""API routes."""

from command_x.api.routes.accounting import router as accounting_router
from command_x.api.routes.health import router as health_router
from command_x.api.routes.payment_items import router as payment_items_router
from command_x.api.routes.projects import router as projects_router
from command_x.api.routes.work_orders import router as work_orders_router

__all__ = [
    "accounting_router",
    "health_router",
    "payment_items_router",
    "projects_router",
    "work_orders_router",
]
