from __future__ import annotations

from ..common.datetime_utils import iso
from .model import Complaint
from .service import ComplaintRow


def complaint_to_dict(c: Complaint) -> dict:
    return {
        "_id": c.complaint_id,
        "complainant": c.complainant_id,
        "relatedApplication": c.related_application_id,
        "targetManager": c.target_manager_id,
        "subject": c.subject,
        "description": c.description,
        "category": c.category.value,
        "priority": c.priority.value,
        "status": c.status.value,
        "investigatedBy": c.investigated_by,
        "investigationNotes": c.investigation_notes,
        "investigationStarted": iso(c.investigation_started),
        "investigationCompleted": iso(c.investigation_completed),
        "resolution": c.resolution,
        "resolvedBy": c.resolved_by,
        "resolvedAt": iso(c.resolved_at),
        "redFlagIssued": c.red_flag_issued,
        "redFlagReason": c.red_flag_reason,
        "redFlagIssuedAt": iso(c.red_flag_issued_at),
        "communications": [
            {
                "message": m.message,
                "sender": m.sender_id,
                "recipient": m.recipient_id,
                "messageType": m.message_type.value,
                "sentAt": iso(m.sent_at),
            }
            for m in c.communications
        ],
        "escalationLevel": c.escalation_level,
        "escalatedAt": iso(c.escalated_at),
        "escalatedBy": c.escalated_by,
        "satisfactionRating": c.satisfaction_rating,
        "satisfactionFeedback": c.satisfaction_feedback,
        "createdAt": iso(c.created_at),
        "updatedAt": iso(c.updated_at),
    }


def complaint_row_to_dict(row: ComplaintRow) -> dict:
    data = complaint_to_dict(row.complaint)
    data["complainantName"] = row.complainant_name
    data["targetManagerName"] = row.target_manager_name
    data["resolvedByName"] = row.resolved_by_name
    return data
