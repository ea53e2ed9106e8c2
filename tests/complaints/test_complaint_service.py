from __future__ import annotations

import pytest

from src.pension_system.pension_system.core.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    MessageType,
    Role,
)
from src.pension_system.pension_system.core.exceptions import NotFoundError, ValidationError


def _submit(container, holder, **kwargs):
    data = dict(
        complainant_id=holder.user_id,
        subject="Slow processing",
        description="My application has been pending for a long time.",
        category=ComplaintCategory.APPLICATION_DELAY,
    )
    data.update(kwargs)
    return container.complaint_service.submit(**data)


def test_submit_defaults_to_medium_priority(container, holder):
    complaint = _submit(container, holder)

    assert complaint.status == ComplaintStatus.SUBMITTED
    assert complaint.priority == ComplaintPriority.MEDIUM
    assert complaint.target_manager_id is None


def test_target_manager_matched_case_insensitively(container, holder, manager):
    complaint = _submit(container, holder, target_manager_name="karim")

    assert complaint.target_manager_id == manager.user_id


def test_unknown_target_manager_dropped(container, holder, manager):
    complaint = _submit(container, holder, target_manager_name="Nobody")

    assert complaint.target_manager_id is None


def test_related_application_kept_only_for_owner(container, users_repo, holder, details_factory):
    other = users_repo.add(name="Salma Begum", email="salma@example.com", password="secret1", role=Role.PENSION_HOLDER)
    own = container.application_service.submit(pension_holder_id=holder.user_id, details=details_factory())
    foreign = container.application_service.submit(
        pension_holder_id=other.user_id,
        details=details_factory(employee_id="EMP-002"),
    )

    assert _submit(container, holder, related_application_id=own.application_id).related_application_id == own.application_id
    assert _submit(container, holder, related_application_id=foreign.application_id).related_application_id is None


def test_subject_length_validated(container, holder):
    with pytest.raises(ValidationError):
        _submit(container, holder, subject="Hi")


def test_three_red_flags_disable_manager(container, users_repo, holder, manager, admin):
    svc = container.complaint_service

    for i in range(3):
        complaint = _submit(container, holder, target_manager_name="Karim", subject=f"Misconduct #{i + 1}")
        resolved = svc.resolve(
            admin_id=admin.user_id,
            complaint_id=complaint.complaint_id,
            resolution="Investigated and confirmed the issue.",
            issue_red_flag=True,
            red_flag_reason="Rude behaviour",
        )
        assert resolved.red_flag_issued is True
        assert resolved.status == ComplaintStatus.RESOLVED

        flagged = users_repo.get_by_id(manager.user_id)
        assert flagged.red_flags == i + 1
        assert flagged.is_active is (i < 2)


def test_red_flag_ignored_without_target_manager(container, users_repo, holder, manager, admin):
    complaint = _submit(container, holder)

    resolved = container.complaint_service.resolve(
        admin_id=admin.user_id,
        complaint_id=complaint.complaint_id,
        resolution="Handled with the applicant directly.",
        issue_red_flag=True,
        red_flag_reason="n/a",
    )

    assert resolved.red_flag_issued is False
    assert resolved.red_flag_reason is None
    assert users_repo.get_by_id(manager.user_id).red_flags == 0


def test_resolve_requires_ten_characters(container, holder, admin):
    complaint = _submit(container, holder)

    with pytest.raises(ValidationError):
        container.complaint_service.resolve(admin_id=admin.user_id, complaint_id=complaint.complaint_id, resolution="done")


def test_closed_complaint_cannot_be_resolved_again(container, holder, admin):
    svc = container.complaint_service
    complaint = _submit(container, holder)
    svc.dismiss(admin_id=admin.user_id, complaint_id=complaint.complaint_id, reason="Duplicate of an earlier complaint")

    with pytest.raises(ValidationError):
        svc.resolve(admin_id=admin.user_id, complaint_id=complaint.complaint_id, resolution="Resolved after all.")
    with pytest.raises(ValidationError):
        svc.escalate(admin_id=admin.user_id, complaint_id=complaint.complaint_id, level=1)


def test_dismiss_records_reason(container, holder, admin):
    dismissed = container.complaint_service.dismiss(
        admin_id=admin.user_id,
        complaint_id=_submit(container, holder).complaint_id,
        reason="Not within our jurisdiction",
    )

    assert dismissed.status == ComplaintStatus.DISMISSED
    assert dismissed.resolution == "Not within our jurisdiction"
    assert dismissed.resolved_by == admin.user_id


def test_escalation_level_clamped_to_three(container, holder, admin):
    escalated = container.complaint_service.escalate(
        admin_id=admin.user_id,
        complaint_id=_submit(container, holder).complaint_id,
        level=7,
    )

    assert escalated.status == ComplaintStatus.ESCALATED
    assert escalated.escalation_level == 3
    assert escalated.escalated_by == admin.user_id


def test_escalated_complaint_can_still_be_resolved(container, holder, admin):
    svc = container.complaint_service
    complaint = _submit(container, holder)
    svc.escalate(admin_id=admin.user_id, complaint_id=complaint.complaint_id, level=2)

    resolved = svc.resolve(admin_id=admin.user_id, complaint_id=complaint.complaint_id, resolution="Settled at level two.")
    assert resolved.status == ComplaintStatus.RESOLVED


def test_investigation_only_from_submitted(container, holder, admin):
    svc = container.complaint_service
    complaint = _submit(container, holder)

    started = svc.start_investigation(admin_id=admin.user_id, complaint_id=complaint.complaint_id, notes="Calling office")
    assert started.status == ComplaintStatus.UNDER_INVESTIGATION
    assert started.investigated_by == admin.user_id

    with pytest.raises(ValidationError):
        svc.start_investigation(admin_id=admin.user_id, complaint_id=complaint.complaint_id)


def test_communications_flow_both_ways(container, holder, admin):
    svc = container.complaint_service
    complaint = _submit(container, holder)
    svc.start_investigation(admin_id=admin.user_id, complaint_id=complaint.complaint_id)

    svc.reply(admin_id=admin.user_id, complaint_id=complaint.complaint_id, message="We are looking into it")
    updated = svc.send_inquiry(complainant_id=holder.user_id, complaint_id=complaint.complaint_id, message="Any news?")

    first, second = updated.communications
    assert (first.sender_id, first.recipient_id, first.message_type) == (admin.user_id, holder.user_id, MessageType.RESPONSE)
    assert (second.sender_id, second.recipient_id, second.message_type) == (holder.user_id, admin.user_id, MessageType.INQUIRY)


def test_inquiry_on_someone_elses_complaint_is_not_found(container, holder, manager):
    complaint = _submit(container, holder)

    with pytest.raises(NotFoundError):
        container.complaint_service.send_inquiry(
            complainant_id=manager.user_id,
            complaint_id=complaint.complaint_id,
            message="hello",
        )


def test_rating_only_after_closing(container, holder, admin):
    svc = container.complaint_service
    complaint = _submit(container, holder)

    with pytest.raises(ValidationError):
        svc.rate_satisfaction(complainant_id=holder.user_id, complaint_id=complaint.complaint_id, rating=4)

    svc.resolve(admin_id=admin.user_id, complaint_id=complaint.complaint_id, resolution="Processed the application.")
    with pytest.raises(ValidationError):
        svc.rate_satisfaction(complainant_id=holder.user_id, complaint_id=complaint.complaint_id, rating=6)

    rated = svc.rate_satisfaction(
        complainant_id=holder.user_id,
        complaint_id=complaint.complaint_id,
        rating=5,
        feedback="Quick help",
    )
    assert rated.satisfaction_rating == 5
    assert rated.satisfaction_feedback == "Quick help"


def test_admin_listing_has_display_names(container, holder, manager, admin):
    svc = container.complaint_service
    first = _submit(container, holder, target_manager_name="Karim")
    _submit(container, holder)
    svc.resolve(admin_id=admin.user_id, complaint_id=first.complaint_id, resolution="Talked to the manager.")

    rows = svc.list_all()
    newest, oldest = rows
    assert newest.complainant_name == "Rahim Uddin"
    assert newest.target_manager_name == "N/A"
    assert newest.resolved_by_name == "N/A"
    assert oldest.target_manager_name == "Karim Manager"
    assert oldest.resolved_by_name == "System Admin"


def test_recent_returns_five_newest(container, holder):
    for i in range(7):
        _submit(container, holder, subject=f"Complaint number {i}")

    recent = container.complaint_service.recent()
    assert len(recent) == 5
    assert recent[0].complaint.subject == "Complaint number 6"


def test_resolve_after_concurrent_close_does_not_flag_twice(
    monkeypatch, container, complaints_repo, users_repo, holder, manager, admin
):
    svc = container.complaint_service
    complaint = _submit(container, holder, target_manager_name="Karim")
    svc.resolve(
        admin_id=admin.user_id,
        complaint_id=complaint.complaint_id,
        resolution="Investigated and confirmed the issue.",
        issue_red_flag=True,
    )

    # a second admin still holds the open snapshot read before the first close
    monkeypatch.setattr(complaints_repo, "get_by_id", lambda complaint_id: complaint)
    with pytest.raises(ValidationError):
        svc.resolve(
            admin_id=admin.user_id,
            complaint_id=complaint.complaint_id,
            resolution="Investigated and confirmed the issue.",
            issue_red_flag=True,
        )
    with pytest.raises(ValidationError):
        svc.dismiss(admin_id=admin.user_id, complaint_id=complaint.complaint_id, reason="Duplicate of an earlier complaint")

    assert users_repo.get_by_id(manager.user_id).red_flags == 1
