from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access control."""

    PENSION_HOLDER = "pension-holder"
    MANAGER = "manager"
    ADMIN = "admin"


class ApplicationStatus(str, Enum):
    """Pension application review workflow."""

    PENDING = "pending"
    UNDER_REVIEW = "under-review"
    FEEDBACK = "feedback"
    APPROVED = "approved"
    REJECTED = "rejected"


OPEN_APPLICATION_STATUSES = (
    ApplicationStatus.PENDING,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.FEEDBACK,
)

DECIDABLE_APPLICATION_STATUSES = (
    ApplicationStatus.PENDING,
    ApplicationStatus.UNDER_REVIEW,
)


class PensionType(str, Enum):
    RETIREMENT = "retirement"
    DISABILITY = "disability"
    SURVIVOR = "survivor"


class NomineeRelation(str, Enum):
    SPOUSE = "spouse"
    SON = "son"
    DAUGHTER = "daughter"
    FATHER = "father"
    MOTHER = "mother"
    BROTHER = "brother"
    SISTER = "sister"
    OTHER = "other"


class ApplicationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplaintStatus(str, Enum):
    """Complaint handling workflow."""

    SUBMITTED = "submitted"
    UNDER_INVESTIGATION = "under-investigation"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"
    ESCALATED = "escalated"

    @property
    def is_closed(self) -> bool:
        return self in (ComplaintStatus.RESOLVED, ComplaintStatus.DISMISSED)


CLOSABLE_COMPLAINT_STATUSES = (
    ComplaintStatus.SUBMITTED,
    ComplaintStatus.UNDER_INVESTIGATION,
    ComplaintStatus.ESCALATED,
)


class ComplaintCategory(str, Enum):
    APPLICATION_DELAY = "application-delay"
    INCORRECT_PROCESSING = "incorrect-processing"
    MANAGER_MISCONDUCT = "manager-misconduct"
    SYSTEM_ISSUE = "system-issue"
    DOCUMENTATION_PROBLEM = "documentation-problem"
    PAYMENT_ISSUE = "payment-issue"
    OTHER = "other"


class ComplaintPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MessageType(str, Enum):
    INQUIRY = "inquiry"
    RESPONSE = "response"
    UPDATE = "update"
    RESOLUTION = "resolution"
