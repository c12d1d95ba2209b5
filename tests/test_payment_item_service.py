"""Tests for payment item persistence rules."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from command_x.models import AuditEvent, PaymentItem
from command_x.services.approval_service import ApprovalService
from command_x.services.errors import NotFoundError, ValidationError
from command_x.services.payment_item_service import PaymentItemFilter, PaymentItemService


async def audit_actions(session, item_id):
    result = await session.execute(
        select(AuditEvent.action)
        .where(AuditEvent.entity_id == item_id)
        .order_by(AuditEvent.audit_event_id)
    )
    return list(result.scalars().all())


class TestCreate:
    """Test payment item creation."""

    async def test_create_derives_totals(self, session, project, creator, item_data):
        service = PaymentItemService(session)
        item = await service.create(item_data(project.project_id), creator)

        assert item.item_id is not None
        assert item.total_price == Decimal("100.00")
        assert item.actual_quantity == Decimal("4")
        assert item.actual_total_price == Decimal("100.00")
        assert item.status == "pending"
        assert item.category == "GENERAL"
        assert item.created_by == creator.user_id

    async def test_create_starts_with_all_tracks_pending(self, session, project, creator, item_data):
        item = await PaymentItemService(session).create(item_data(project.project_id), creator)

        assert item.qc_approval_status == "pending"
        assert item.supervisor_approval_status == "pending"
        assert item.accountant_approval_status == "pending"
        assert item.qc_approval_date is None

    async def test_client_totals_are_ignored(self, session, project, creator, item_data):
        data = item_data(project.project_id, total_price="999999", actual_total_price="1")
        item = await PaymentItemService(session).create(data, creator)

        assert item.total_price == Decimal("100.00")
        assert item.actual_total_price == Decimal("100.00")

    async def test_create_with_actual_quantity(self, session, project, creator, item_data):
        data = item_data(
            project.project_id,
            unit_price="250",
            original_quantity="20",
            actual_quantity="22",
        )
        item = await PaymentItemService(session).create(data, creator)

        assert item.total_price == Decimal("5000.00")
        assert item.actual_total_price == Decimal("5500.00")

    async def test_create_records_audit_event(self, session, project, creator, item_data):
        item = await PaymentItemService(session).create(item_data(project.project_id), creator)

        event = await session.scalar(
            select(AuditEvent).where(AuditEvent.entity_id == item.item_id)
        )
        assert event.action == "created"
        assert event.entity_type == "payment_item"
        assert event.actor_user_id == creator.user_id
        assert event.actor_role == creator.role

    async def test_invalid_fields_are_all_reported(self, session, project, creator, item_data):
        data = item_data(
            project.project_id,
            description="ab",
            unit_of_measure="",
            unit_price="0",
            original_quantity="-2",
        )
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(data, creator)

        assert len(exc_info.value.errors) == 4
        assert "Create payment item failed" in str(exc_info.value)
        assert await session.scalar(select(PaymentItem)) is None

    async def test_non_numeric_price(self, session, project, creator, item_data):
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(
                item_data(project.project_id, unit_price="abc"), creator
            )
        assert exc_info.value.errors == ["unit_price must be a number"]

    async def test_missing_project(self, session, creator, item_data):
        with pytest.raises(NotFoundError):
            await PaymentItemService(session).create(item_data(4040), creator)

    async def test_work_order_from_other_project(
        self, session, project, other_work_order, creator, item_data
    ):
        data = item_data(project.project_id, work_order_id=other_work_order.work_order_id)
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(data, creator)
        assert "belongs to a different project" in exc_info.value.errors[0]

    async def test_approval_fields_rejected(self, session, project, creator, item_data):
        data = item_data(project.project_id, qc_approval_status="approved")
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(data, creator)
        assert exc_info.value.errors == [
            "qc_approval_status can only change through an approval decision"
        ]

    async def test_stored_row_matches_totals(
        self, session, session_factory, project, creator, item_data
    ):
        data = item_data(
            project.project_id,
            unit_price="0.12",
            original_quantity="8",
            actual_quantity="1.0005",
        )
        item = await PaymentItemService(session).create(data, creator)

        async with session_factory() as fresh:
            stored = await fresh.get(PaymentItem, item.item_id)
            assert stored.total_price == Decimal("0.96")
            assert stored.actual_quantity == Decimal("1.0005")
            assert stored.actual_total_price == Decimal("0.12")

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("unit_price", "0.125", "unit_price must have at most 2 decimal places"),
            ("original_quantity", "1.00005", "original_quantity must have at most 4 decimal places"),
            ("actual_quantity", "2.00001", "actual_quantity must have at most 4 decimal places"),
            ("unit_price", "1000000000000", "unit_price must be less than 1000000000000"),
        ],
    )
    async def test_values_beyond_column_scale_refused(
        self, session, project, creator, item_data, field, value, message
    ):
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(
                item_data(project.project_id, **{field: value}), creator
            )
        assert exc_info.value.errors == [message]
        assert await session.scalar(select(PaymentItem)) is None

    async def test_total_too_large_refused(self, session, project, creator, item_data):
        data = item_data(project.project_id, unit_price="999999999", original_quantity="99999")
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).create(data, creator)
        assert exc_info.value.errors[0].startswith("total_price must be less than")

    async def test_cannot_create_approved(self, session, project, creator, item_data):
        with pytest.raises(ValidationError):
            await PaymentItemService(session).create(
                item_data(project.project_id, status="approved"), creator
            )


class TestUpdate:
    """Test partial edits."""

    @pytest.fixture
    async def item(self, session, project, creator, item_data):
        return await PaymentItemService(session).create(item_data(project.project_id), creator)

    async def test_price_change_recomputes_totals(self, session, item, creator):
        updated = await PaymentItemService(session).update(
            item.item_id, {"unit_price": Decimal("30")}, creator
        )
        assert updated.total_price == Decimal("120.00")
        assert updated.actual_total_price == Decimal("120.00")

    async def test_quantity_change_keeps_stored_actual(self, session, item, creator):
        service = PaymentItemService(session)
        await service.update(item.item_id, {"actual_quantity": Decimal("5")}, creator)
        updated = await service.update(item.item_id, {"original_quantity": Decimal("6")}, creator)

        assert updated.total_price == Decimal("150.00")
        assert updated.actual_quantity == Decimal("5")
        assert updated.actual_total_price == Decimal("125.00")

    async def test_null_actual_quantity_resets_to_original(self, session, item, creator):
        service = PaymentItemService(session)
        await service.update(item.item_id, {"actual_quantity": Decimal("5")}, creator)
        updated = await service.update(item.item_id, {"actual_quantity": None}, creator)

        assert updated.actual_quantity == Decimal("4")
        assert updated.actual_total_price == Decimal("100.00")

    async def test_descriptive_fields(self, session, item, creator):
        updated = await PaymentItemService(session).update(
            item.item_id,
            {"description": "  Upper cabinets  ", "category": "millwork", "notes": "rush"},
            creator,
        )
        assert updated.description == "Upper cabinets"
        assert updated.category == "MILLWORK"
        assert updated.notes == "rush"

    async def test_invalid_edit_leaves_item_unchanged(self, session, item, creator):
        service = PaymentItemService(session)
        with pytest.raises(ValidationError):
            await service.update(item.item_id, {"unit_price": Decimal("-1")}, creator)

        await session.refresh(item)
        assert item.unit_price == Decimal("25")
        assert item.total_price == Decimal("100.00")

    async def test_project_cannot_change(self, session, item, other_project, creator):
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).update(
                item.item_id, {"project_id": other_project.project_id}, creator
            )
        assert exc_info.value.errors == ["project_id cannot be set"]

    async def test_direct_approval_is_refused(self, session, item, creator):
        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).update(item.item_id, {"status": "approved"}, creator)
        assert "all approval tracks are approved" in exc_info.value.errors[0]

    async def test_workflow_status_allowed(self, session, item, creator):
        updated = await PaymentItemService(session).update(
            item.item_id, {"status": "completed"}, creator
        )
        assert updated.status == "completed"

    async def test_approved_item_cannot_be_moved_back(
        self, session, item, creator, qc_manager, supervisor, accountant
    ):
        approvals = ApprovalService(session)
        for actor in (qc_manager, supervisor, accountant):
            await approvals.record_approval(item.item_id, "approved", actor)

        with pytest.raises(ValidationError) as exc_info:
            await PaymentItemService(session).update(item.item_id, {"status": "pending"}, creator)
        assert exc_info.value.errors == [
            "status must stay 'approved' while all approval tracks are approved"
        ]

        await session.refresh(item)
        assert item.status == "approved"

    async def test_rejected_item_cannot_be_completed(self, session, item, creator, qc_manager):
        await ApprovalService(session).record_approval(item.item_id, "rejected", qc_manager)

        with pytest.raises(ValidationError):
            await PaymentItemService(session).update(
                item.item_id, {"status": "completed"}, creator
            )

        await session.refresh(item)
        assert item.status == "rejected"

    async def test_missing_item(self, session, creator):
        with pytest.raises(NotFoundError):
            await PaymentItemService(session).update(999, {"notes": "x"}, creator)

    async def test_update_is_audited(self, session, item, creator):
        await PaymentItemService(session).update(item.item_id, {"notes": "x"}, creator)
        assert await audit_actions(session, item.item_id) == ["created", "updated"]


class TestDeleteAndRead:
    """Test delete, get and list."""

    async def test_delete(self, session, project, creator, item_data):
        service = PaymentItemService(session)
        item = await service.create(item_data(project.project_id), creator)

        await service.delete(item.item_id, creator)

        with pytest.raises(NotFoundError):
            await service.get(item.item_id)
        assert await audit_actions(session, item.item_id) == ["created", "deleted"]

    async def test_delete_missing(self, session, creator):
        with pytest.raises(NotFoundError):
            await PaymentItemService(session).delete(123, creator)

    async def test_list_filters(self, session, project, work_order, creator, item_data):
        service = PaymentItemService(session)
        await service.create(
            item_data(project.project_id, work_order_id=work_order.work_order_id), creator
        )
        await service.create(item_data(project.project_id, category="electrical"), creator)
        await service.create(item_data(project.project_id, category="Electrical"), creator)

        items, total = await service.list_items(PaymentItemFilter(unassigned=True))
        assert total == 2
        assert all(i.work_order_id is None for i in items)

        _, total = await service.list_items(PaymentItemFilter(category="ELECTRICAL"))
        assert total == 2

        _, total = await service.list_items(
            PaymentItemFilter(work_order_id=work_order.work_order_id)
        )
        assert total == 1

    async def test_list_pagination(self, session, project, creator, item_data):
        service = PaymentItemService(session)
        for _ in range(5):
            await service.create(item_data(project.project_id), creator)

        items, total = await service.list_items(page=2, page_size=2)
        assert total == 5
        assert len(items) == 2
