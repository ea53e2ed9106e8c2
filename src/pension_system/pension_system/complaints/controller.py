from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import build_guards, current_user
from ..common.validators import FieldValidator
from ..core.enums import ComplaintCategory, ComplaintPriority, MessageType, Role
from ..container import Container
from .serializers import complaint_row_to_dict, complaint_to_dict


def register(app: Flask, container: Container) -> None:
    _, roles_required = build_guards(container.auth_service)
    service = container.complaint_service

    # -------- Pension holder --------
    @app.route("/api/pension-holder/complaints", methods=["POST"], endpoint="holder_submit_complaint")
    @roles_required(Role.PENSION_HOLDER)
    def holder_submit_complaint():
        v = FieldValidator(request.get_json(silent=True))
        subject = v.text("subject", "Subject must be between 5 and 200 characters", min_len=5, max_len=200)
        description = v.text(
            "description", "Description must be between 10 and 2000 characters", min_len=10, max_len=2000
        )
        category = v.choice("category", ComplaintCategory, "Invalid category")
        priority = v.choice("priority", ComplaintPriority, "Invalid priority", default=ComplaintPriority.MEDIUM)
        related = v.number("relatedApplication", "Invalid application reference", min_value=1, required=False)
        target_manager = v.text("targetManager", "Invalid manager name", required=False)
        v.raise_if_errors()

        complaint = service.submit(
            complainant_id=current_user().user_id,
            subject=subject,
            description=description,
            category=category,
            priority=priority,
            related_application_id=int(related) if related is not None else None,
            target_manager_name=target_manager,
        )
        return jsonify(message="Complaint submitted successfully", complaint=complaint_to_dict(complaint)), 201

    @app.route("/api/pension-holder/complaints", methods=["GET"], endpoint="holder_list_complaints")
    @roles_required(Role.PENSION_HOLDER)
    def holder_list_complaints():
        complaints = service.list_mine(complainant_id=current_user().user_id)
        return jsonify([complaint_to_dict(c) for c in complaints])

    @app.route(
        "/api/pension-holder/complaints/<int:complaint_id>/communications",
        methods=["POST"],
        endpoint="holder_complaint_message",
    )
    @roles_required(Role.PENSION_HOLDER)
    def holder_complaint_message(complaint_id: int):
        v = FieldValidator(request.get_json(silent=True))
        message = v.text("message", "Message is required")
        v.raise_if_errors()

        complaint = service.send_inquiry(
            complainant_id=current_user().user_id,
            complaint_id=complaint_id,
            message=message,
        )
        return jsonify(message="Message sent", complaint=complaint_to_dict(complaint))

    @app.route(
        "/api/pension-holder/complaints/<int:complaint_id>/rating",
        methods=["PUT"],
        endpoint="holder_rate_complaint",
    )
    @roles_required(Role.PENSION_HOLDER)
    def holder_rate_complaint(complaint_id: int):
        v = FieldValidator(request.get_json(silent=True))
        rating = v.integer("rating", "Rating must be between 1 and 5", min_value=1, max_value=5)
        feedback = v.text("feedback", "Feedback is invalid", required=False)
        v.raise_if_errors()

        complaint = service.rate_satisfaction(
            complainant_id=current_user().user_id,
            complaint_id=complaint_id,
            rating=rating,
            feedback=feedback,
        )
        return jsonify(message="Thank you for your feedback", complaint=complaint_to_dict(complaint))

    # -------- Admin --------
    @app.route("/api/admin/complaints", methods=["GET"], endpoint="admin_list_complaints")
    @roles_required(Role.ADMIN)
    def admin_list_complaints():
        return jsonify([complaint_row_to_dict(r) for r in service.list_all()])

    @app.route("/api/admin/recent-complaints", methods=["GET"], endpoint="admin_recent_complaints")
    @roles_required(Role.ADMIN)
    def admin_recent_complaints():
        return jsonify([complaint_row_to_dict(r) for r in service.recent()])

    @app.route(
        "/api/admin/complaints/<int:complaint_id>/investigate",
        methods=["PUT"],
        endpoint="admin_investigate_complaint",
    )
    @roles_required(Role.ADMIN)
    def admin_investigate_complaint(complaint_id: int):
        data = request.get_json(silent=True) or {}
        complaint = service.start_investigation(
            admin_id=current_user().user_id,
            complaint_id=complaint_id,
            notes=str(data.get("notes") or ""),
        )
        return jsonify(message="Investigation started", complaint=complaint_to_dict(complaint))

    @app.route(
        "/api/admin/complaints/<int:complaint_id>/resolve",
        methods=["PUT"],
        endpoint="admin_resolve_complaint",
    )
    @roles_required(Role.ADMIN)
    def admin_resolve_complaint(complaint_id: int):
        v = FieldValidator(request.get_json(silent=True))
        resolution = v.text("resolution", "Resolution must be at least 10 characters", min_len=10)
        issue_red_flag = v.boolean("issueRedFlag")
        red_flag_reason = v.text("redFlagReason", "Red flag reason is invalid", required=False)
        v.raise_if_errors()

        complaint = service.resolve(
            admin_id=current_user().user_id,
            complaint_id=complaint_id,
            resolution=resolution,
            issue_red_flag=issue_red_flag,
            red_flag_reason=red_flag_reason,
        )
        return jsonify(message="Complaint resolved successfully", complaint=complaint_to_dict(complaint))

    @app.route(
        "/api/admin/complaints/<int:complaint_id>/dismiss",
        methods=["PUT"],
        endpoint="admin_dismiss_complaint",
    )
    @roles_required(Role.ADMIN)
    def admin_dismiss_complaint(complaint_id: int):
        data = request.get_json(silent=True) or {}
        field = "resolution" if "resolution" in data else "reason"
        v = FieldValidator(data)
        reason = v.text(field, "Dismissal reason must be at least 10 characters", min_len=10)
        v.raise_if_errors()

        complaint = service.dismiss(admin_id=current_user().user_id, complaint_id=complaint_id, reason=reason)
        return jsonify(message="Complaint dismissed successfully", complaint=complaint_to_dict(complaint))

    @app.route(
        "/api/admin/complaints/<int:complaint_id>/escalate",
        methods=["PUT"],
        endpoint="admin_escalate_complaint",
    )
    @roles_required(Role.ADMIN)
    def admin_escalate_complaint(complaint_id: int):
        v = FieldValidator(request.get_json(silent=True))
        level = v.integer("level", "Escalation level must be a positive whole number", min_value=1)
        v.raise_if_errors()

        complaint = service.escalate(admin_id=current_user().user_id, complaint_id=complaint_id, level=level)
        return jsonify(message="Complaint escalated", complaint=complaint_to_dict(complaint))

    @app.route(
        "/api/admin/complaints/<int:complaint_id>/communications",
        methods=["POST"],
        endpoint="admin_complaint_message",
    )
    @roles_required(Role.ADMIN)
    def admin_complaint_message(complaint_id: int):
        v = FieldValidator(request.get_json(silent=True))
        message = v.text("message", "Message is required")
        message_type = v.choice("messageType", MessageType, "Invalid message type", default=MessageType.RESPONSE)
        v.raise_if_errors()

        complaint = service.reply(
            admin_id=current_user().user_id,
            complaint_id=complaint_id,
            message=message,
            message_type=message_type,
        )
        return jsonify(message="Message sent", complaint=complaint_to_dict(complaint))
