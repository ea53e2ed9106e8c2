from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus, MessageType


@dataclass(frozen=True)
class Communication:
    message: str
    sender_id: int
    recipient_id: Optional[int] = None
    message_type: MessageType = MessageType.RESPONSE
    sent_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewComplaint:
    complainant_id: int
    subject: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority = ComplaintPriority.MEDIUM
    related_application_id: Optional[int] = None
    target_manager_id: Optional[int] = None


@dataclass(frozen=True)
class Complaint:
    complaint_id: int
    complainant_id: int
    subject: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus
    created_at: datetime
    related_application_id: Optional[int] = None
    target_manager_id: Optional[int] = None
    investigated_by: Optional[int] = None
    investigation_notes: Optional[str] = None
    investigation_started: Optional[datetime] = None
    investigation_completed: Optional[datetime] = None
    resolution: Optional[str] = None
    resolved_by: Optional[int] = None
    resolved_at: Optional[datetime] = None
    red_flag_issued: bool = False
    red_flag_reason: Optional[str] = None
    red_flag_issued_at: Optional[datetime] = None
    escalation_level: int = 0
    escalated_at: Optional[datetime] = None
    escalated_by: Optional[int] = None
    satisfaction_rating: Optional[int] = None
    satisfaction_feedback: Optional[str] = None
    communications: tuple[Communication, ...] = ()
    updated_at: Optional[datetime] = None
