"""Tests for approval track derivation."""

import pytest

from command_x.services.approval_engine import (
    ApprovalEngine,
    ApprovalTrack,
    PaymentItemStatus,
)


def tracks(qc="pending", supervisor="pending", accountant="pending"):
    return {
        ApprovalTrack.QC: qc,
        ApprovalTrack.SUPERVISOR: supervisor,
        ApprovalTrack.ACCOUNTANT: accountant,
    }


class TestRoleMapping:
    """Test role to track mapping."""

    @pytest.mark.parametrize(
        "role,track",
        [
            ("qc_manager", ApprovalTrack.QC),
            ("supervisor", ApprovalTrack.SUPERVISOR),
            ("project_manager", ApprovalTrack.SUPERVISOR),
            ("accountant", ApprovalTrack.ACCOUNTANT),
            ("finance_manager", ApprovalTrack.ACCOUNTANT),
        ],
    )
    def test_mapped_roles(self, role, track):
        assert ApprovalEngine.track_for_role(role) == track

    def test_role_lookup_ignores_case(self):
        assert ApprovalEngine.track_for_role(" QC_Manager ") == ApprovalTrack.QC

    @pytest.mark.parametrize("role", [None, "", "admin", "field_worker"])
    def test_unmapped_roles(self, role):
        assert ApprovalEngine.track_for_role(role) is None


class TestDeriveStatus:
    """Test overall status derivation."""

    def test_all_approved(self):
        status = ApprovalEngine.derive_status(
            "in_progress", tracks("approved", "approved", "approved"), has_work_order=True
        )
        assert status == "approved"

    def test_two_of_three_approved_is_not_approved(self):
        status = ApprovalEngine.derive_status(
            "pending", tracks("approved", "approved", "pending"), has_work_order=False
        )
        assert status == "pending"

    def test_any_rejection_wins(self):
        status = ApprovalEngine.derive_status(
            "in_progress", tracks("approved", "rejected", "approved"), has_work_order=True
        )
        assert status == "rejected"

    def test_leaving_rejected_reverts_to_pending_without_work_order(self):
        status = ApprovalEngine.derive_status(
            "rejected", tracks("approved", "pending", "pending"), has_work_order=False
        )
        assert status == "pending"

    def test_leaving_approved_reverts_to_in_progress_with_work_order(self):
        status = ApprovalEngine.derive_status(
            "approved", tracks("approved", "approved", "pending"), has_work_order=True
        )
        assert status == "in_progress"

    @pytest.mark.parametrize("current", ["pending", "in_progress", "completed"])
    def test_workflow_statuses_untouched_by_partial_approval(self, current):
        status = ApprovalEngine.derive_status(
            current, tracks(qc="approved"), has_work_order=True
        )
        assert status == current

    def test_returns_plain_strings(self):
        status = ApprovalEngine.derive_status(
            "pending", tracks("rejected"), has_work_order=False
        )
        assert status == PaymentItemStatus.REJECTED.value
        assert type(status) is str


class TestDecisions:
    def test_is_decision(self):
        assert ApprovalEngine.is_decision("approved") is True
        assert ApprovalEngine.is_decision("rejected") is True
        assert ApprovalEngine.is_decision("pending") is False
        assert ApprovalEngine.is_decision("maybe") is False

    def test_field_names(self):
        assert ApprovalEngine.field_names(ApprovalTrack.SUPERVISOR) == (
            "supervisor_approval_status",
            "supervisor_approval_comments",
            "supervisor_approval_date",
        )


class TestValidateDirectStatus:
    """Test status changes made outside an approval decision."""

    def test_workflow_status_allowed(self):
        assert ApprovalEngine.validate_direct_status("completed", tracks()) == []

    def test_unknown_status(self):
        errors = ApprovalEngine.validate_direct_status("done", tracks())
        assert len(errors) == 1
        assert errors[0].startswith("status must be one of")

    def test_approved_requires_all_tracks(self):
        errors = ApprovalEngine.validate_direct_status(
            "approved", tracks("approved", "approved", "pending")
        )
        assert errors == [
            "status can only be 'approved' once all approval tracks are approved"
        ]

    def test_approved_allowed_when_tracks_agree(self):
        errors = ApprovalEngine.validate_direct_status(
            "approved", tracks("approved", "approved", "approved")
        )
        assert errors == []

    def test_rejected_requires_a_rejection(self):
        errors = ApprovalEngine.validate_direct_status("rejected", tracks())
        assert errors == ["status can only be 'rejected' through an approval decision"]

    @pytest.mark.parametrize("target", ["pending", "in_progress", "completed", "rejected"])
    def test_fully_approved_item_stays_approved(self, target):
        errors = ApprovalEngine.validate_direct_status(
            target, tracks("approved", "approved", "approved")
        )
        assert errors == [
            "status must stay 'approved' while all approval tracks are approved"
        ]

    @pytest.mark.parametrize("target", ["pending", "in_progress", "completed", "approved"])
    def test_rejected_item_stays_rejected(self, target):
        errors = ApprovalEngine.validate_direct_status(
            target, tracks("approved", "rejected", "pending")
        )
        assert errors == [
            "status must stay 'rejected' while an approval track is rejected"
        ]

    def test_rejected_allowed_while_a_track_is_rejected(self):
        errors = ApprovalEngine.validate_direct_status("rejected", tracks(qc="rejected"))
        assert errors == []
