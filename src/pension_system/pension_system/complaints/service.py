from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..applications.repository import ApplicationRepository
from ..common.datetime_utils import now_local
from ..core.constants import MAX_ESCALATION_LEVEL, RECENT_COMPLAINTS_LIMIT, RED_FLAG_DISABLE_THRESHOLD
from ..core.enums import (
    CLOSABLE_COMPLAINT_STATUSES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    MessageType,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Communication, Complaint, NewComplaint
from .repository import ComplaintRepository

logger = logging.getLogger(__name__)

_ESCALATABLE = (ComplaintStatus.SUBMITTED, ComplaintStatus.UNDER_INVESTIGATION)


@dataclass(frozen=True)
class ComplaintRow:
    """A complaint plus the display names admins see in listings."""

    complaint: Complaint
    complainant_name: str
    target_manager_name: str
    resolved_by_name: str


class ComplaintService:
    """Use cases around complaints (holder and admin side)."""

    def __init__(
        self,
        complaints: ComplaintRepository,
        users: UserRepository,
        applications: ApplicationRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._complaints = complaints
        self._users = users
        self._applications = applications
        self._clock = clock

    def get(self, complaint_id: int) -> Complaint:
        complaint = self._complaints.get_by_id(int(complaint_id))
        if not complaint:
            raise NotFoundError("Complaint not found")
        return complaint

    # -------- Pension holder --------
    def submit(
        self,
        *,
        complainant_id: int,
        subject: str,
        description: str,
        category: ComplaintCategory,
        priority: ComplaintPriority = ComplaintPriority.MEDIUM,
        related_application_id: Optional[int] = None,
        target_manager_name: Optional[str] = None,
    ) -> Complaint:
        subject = (subject or "").strip()
        description = (description or "").strip()
        if not 5 <= len(subject) <= 200:
            raise ValidationError("Subject must be between 5 and 200 characters")
        if not 10 <= len(description) <= 2000:
            raise ValidationError("Description must be between 10 and 2000 characters")

        # references the caller cannot vouch for are dropped, not rejected
        if related_application_id is not None:
            app = self._applications.get_by_id(int(related_application_id))
            if not app or app.pension_holder_id != int(complainant_id):
                related_application_id = None

        target_manager_id = None
        name = (target_manager_name or "").strip()
        if name:
            manager = self._users.find_manager_by_name(name)
            target_manager_id = manager.user_id if manager else None

        complaint_id = self._complaints.create(
            NewComplaint(
                complainant_id=int(complainant_id),
                subject=subject,
                description=description,
                category=category,
                priority=priority or ComplaintPriority.MEDIUM,
                related_application_id=int(related_application_id) if related_application_id is not None else None,
                target_manager_id=target_manager_id,
            )
        )
        logger.info("Complaint id=%s submitted by holder id=%s", complaint_id, complainant_id)
        return self.get(complaint_id)

    def list_mine(self, *, complainant_id: int) -> Sequence[Complaint]:
        return self._complaints.list_by_complainant(int(complainant_id))

    def _owned(self, complainant_id: int, complaint_id: int) -> Complaint:
        complaint = self._complaints.get_by_id(int(complaint_id))
        if not complaint or complaint.complainant_id != int(complainant_id):
            raise NotFoundError("Complaint not found")
        return complaint

    def send_inquiry(self, *, complainant_id: int, complaint_id: int, message: str) -> Complaint:
        """Holder follow-up message, addressed to whoever handles the complaint."""
        complaint = self._owned(complainant_id, complaint_id)
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        handler = complaint.investigated_by or complaint.escalated_by or complaint.resolved_by
        self._complaints.add_communication(
            complaint.complaint_id,
            Communication(
                message=message,
                sender_id=int(complainant_id),
                recipient_id=handler,
                message_type=MessageType.INQUIRY,
                sent_at=self._clock(),
            ),
        )
        return self.get(complaint.complaint_id)

    def rate_satisfaction(
        self,
        *,
        complainant_id: int,
        complaint_id: int,
        rating: int,
        feedback: Optional[str] = None,
    ) -> Complaint:
        complaint = self._owned(complainant_id, complaint_id)
        if not complaint.status.is_closed:
            raise ValidationError("Only resolved or dismissed complaints can be rated")
        if not 1 <= int(rating) <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        self._complaints.rate(complaint.complaint_id, rating=int(rating), feedback=(feedback or "").strip() or None)
        return self.get(complaint.complaint_id)

    # -------- Admin --------
    def _with_names(self, complaints: Sequence[Complaint]) -> list[ComplaintRow]:
        ids: set[int] = set()
        for c in complaints:
            ids.add(c.complainant_id)
            if c.target_manager_id:
                ids.add(c.target_manager_id)
            if c.resolved_by:
                ids.add(c.resolved_by)
        names = self._users.names_by_id(ids)

        return [
            ComplaintRow(
                complaint=c,
                complainant_name=names.get(c.complainant_id, "N/A"),
                target_manager_name=names.get(c.target_manager_id, "N/A") if c.target_manager_id else "N/A",
                resolved_by_name=names.get(c.resolved_by, "N/A") if c.resolved_by else "N/A",
            )
            for c in complaints
        ]

    def list_all(self) -> list[ComplaintRow]:
        return self._with_names(self._complaints.list_all())

    def recent(self) -> list[ComplaintRow]:
        return self._with_names(self._complaints.list_all(limit=RECENT_COMPLAINTS_LIMIT))

    def start_investigation(self, *, admin_id: int, complaint_id: int, notes: Optional[str] = None) -> Complaint:
        complaint = self.get(complaint_id)
        if complaint.status != ComplaintStatus.SUBMITTED:
            raise ValidationError("Only submitted complaints can be taken under investigation")

        self._complaints.start_investigation(
            complaint.complaint_id,
            investigated_by=int(admin_id),
            at=self._clock(),
            notes=(notes or "").strip() or None,
        )
        return self.get(complaint.complaint_id)

    def resolve(
        self,
        *,
        admin_id: int,
        complaint_id: int,
        resolution: str,
        issue_red_flag: bool = False,
        red_flag_reason: Optional[str] = None,
    ) -> Complaint:
        """Close the complaint as resolved, optionally flagging the targeted manager.

        A red flag needs a target manager; without one the request to flag is
        ignored. Reaching the flag threshold disables the manager's account.
        """
        resolution = (resolution or "").strip()
        if len(resolution) < 10:
            raise ValidationError("Resolution must be at least 10 characters")

        complaint = self.get(complaint_id)
        if complaint.status not in CLOSABLE_COMPLAINT_STATUSES:
            raise ValidationError(f"Complaint is already {complaint.status.value}")

        flag = bool(issue_red_flag and complaint.target_manager_id)
        reason = None
        if flag:
            reason = (red_flag_reason or "").strip() or resolution

        closed = self._complaints.close(
            complaint.complaint_id,
            status=ComplaintStatus.RESOLVED,
            resolution=resolution,
            resolved_by=int(admin_id),
            at=self._clock(),
            red_flag_reason=reason,
        )
        if not closed:
            raise ValidationError("Complaint was closed by another request")

        if flag:
            self._flag_manager(complaint.target_manager_id)

        return self.get(complaint.complaint_id)

    def _flag_manager(self, manager_id: int) -> None:
        total = self._users.increment_red_flags(manager_id)
        if total is None:
            logger.warning("Red flag target id=%s no longer exists", manager_id)
            return

        logger.info("Manager id=%s now has %s red flag(s)", manager_id, total)
        if total >= RED_FLAG_DISABLE_THRESHOLD:
            self._users.set_active(manager_id, is_active=False)
            logger.warning("Manager id=%s disabled after %s red flags", manager_id, total)

    def dismiss(self, *, admin_id: int, complaint_id: int, reason: str) -> Complaint:
        reason = (reason or "").strip()
        if len(reason) < 10:
            raise ValidationError("Dismissal reason must be at least 10 characters")

        complaint = self.get(complaint_id)
        if complaint.status not in CLOSABLE_COMPLAINT_STATUSES:
            raise ValidationError(f"Complaint is already {complaint.status.value}")

        closed = self._complaints.close(
            complaint.complaint_id,
            status=ComplaintStatus.DISMISSED,
            resolution=reason,
            resolved_by=int(admin_id),
            at=self._clock(),
        )
        if not closed:
            raise ValidationError("Complaint was closed by another request")
        return self.get(complaint.complaint_id)

    def escalate(self, *, admin_id: int, complaint_id: int, level: int) -> Complaint:
        if int(level) < 1:
            raise ValidationError("Escalation level must be at least 1")

        complaint = self.get(complaint_id)
        if complaint.status not in _ESCALATABLE:
            raise ValidationError(f"Complaint cannot be escalated while {complaint.status.value}")

        self._complaints.escalate(
            complaint.complaint_id,
            level=min(int(level), MAX_ESCALATION_LEVEL),
            escalated_by=int(admin_id),
            at=self._clock(),
        )
        return self.get(complaint.complaint_id)

    def reply(
        self,
        *,
        admin_id: int,
        complaint_id: int,
        message: str,
        message_type: MessageType = MessageType.RESPONSE,
    ) -> Complaint:
        complaint = self.get(complaint_id)
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        self._complaints.add_communication(
            complaint.complaint_id,
            Communication(
                message=message,
                sender_id=int(admin_id),
                recipient_id=complaint.complainant_id,
                message_type=message_type,
                sent_at=self._clock(),
            ),
        )
        return self.get(complaint.complaint_id)

    def stats(self) -> dict[ComplaintStatus, int]:
        return self._complaints.count_by_status()

    def red_flags_issued(self) -> int:
        return self._complaints.count_red_flags()
