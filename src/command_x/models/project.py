"""Project and work order models.

Both tables are owned by the project-management and work-order services;
this service reads them and only writes ``work_order_id``/``status`` back
onto payment items.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from command_x.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from command_x.models.payment_item import PaymentItem


class Project(Base, TimestampMixin):
    """Construction project with its budget."""

    __tablename__ = "project"

    project_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_name: Mapped[str] = mapped_column(String, nullable=False)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    actual_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    # Relationships
    work_orders: Mapped[list[WorkOrder]] = relationship(back_populates="project")


class WorkOrder(Base, TimestampMixin):
    """Work order billed against a project."""

    __tablename__ = "work_order"

    work_order_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("project.project_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Pending")
    amount_billed: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    amount_paid: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    retainage_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "retainage_percentage IS NULL OR "
            "(retainage_percentage >= 0 AND retainage_percentage <= 100)",
            name="work_order_retainage_check",
        ),
    )

    # Relationships
    project: Mapped[Project] = relationship(back_populates="work_orders")
    payment_items: Mapped[list[PaymentItem]] = relationship(back_populates="work_order")
