"""Payment item model with its three approval tracks."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from command_x.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from command_x.models.project import WorkOrder


class PaymentItem(Base, TimestampMixin):
    """A priced line of work belonging to a project.

    ``total_price`` and ``actual_total_price`` are derived columns. They are
    written only by the pricing rules, never copied from client input.
    """

    __tablename__ = "payment_item"

    item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("project.project_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    work_order_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("work_order.work_order_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    location_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    item_code: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False, default="GENERAL")
    unit_of_measure: Mapped[str] = mapped_column(String, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    original_quantity: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    actual_quantity: Mapped[Decimal | None] = mapped_column(Numeric(14, 4), nullable=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    actual_total_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    qc_approval_status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    qc_approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    qc_approval_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    supervisor_approval_status: Mapped[str] = mapped_column(
        String, nullable=False, default="pending"
    )
    supervisor_approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    supervisor_approval_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    accountant_approval_status: Mapped[str] = mapped_column(
        String, nullable=False, default="pending"
    )
    accountant_approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    accountant_approval_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'approved', 'rejected')",
            name="payment_item_status_check",
        ),
        CheckConstraint(
            "qc_approval_status IN ('pending', 'approved', 'rejected')",
            name="payment_item_qc_approval_check",
        ),
        CheckConstraint(
            "supervisor_approval_status IN ('pending', 'approved', 'rejected')",
            name="payment_item_supervisor_approval_check",
        ),
        CheckConstraint(
            "accountant_approval_status IN ('pending', 'approved', 'rejected')",
            name="payment_item_accountant_approval_check",
        ),
        CheckConstraint("unit_price > 0", name="payment_item_unit_price_check"),
        CheckConstraint("original_quantity > 0", name="payment_item_quantity_check"),
    )

    # Relationships
    work_order: Mapped[WorkOrder | None] = relationship(back_populates="payment_items")
