from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import iso
from .model import PensionApplication


def application_to_dict(
    app: PensionApplication,
    *,
    pension_holder_name: Optional[str] = None,
    now=None,
) -> dict:
    details = app.details
    data = {
        "_id": app.application_id,
        "pensionHolder": app.pension_holder_id,
        "personalInfo": details.personal_info.to_dict(),
        "serviceInfo": details.service_info.to_dict(),
        "bankInfo": details.bank_info.to_dict(),
        "nomineeInfo": details.nominee_info.to_dict(),
        "specialCircumstances": details.special_circumstances,
        "status": app.status.value,
        "priority": app.priority.value,
        "reviewedBy": app.reviewed_by,
        "reviewedAt": iso(app.reviewed_at),
        "reviewComments": app.review_comments,
        "approvedBy": app.approved_by,
        "approvedAt": iso(app.approved_at),
        "feedback": [
            {
                "message": f.message,
                "field": f.field,
                "createdBy": f.created_by,
                "createdAt": iso(f.created_at),
            }
            for f in app.feedback
        ],
        "pensionDetails": None,
        "daysSinceSubmission": app.days_since_submission(now),
        "isOverdue": app.is_overdue(now),
        "createdAt": iso(app.created_at),
        "updatedAt": iso(app.updated_at),
    }
    if app.pension_details:
        data["pensionDetails"] = {
            "monthlyPension": app.pension_details.monthly_pension,
            "gratuity": app.pension_details.gratuity,
            "providentFund": app.pension_details.provident_fund,
            "calculatedAt": iso(app.pension_details.calculated_at),
        }
    if pension_holder_name is not None:
        data["pensionHolderName"] = pension_holder_name
    return data
