from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ComplaintStatus
from .model import Communication, Complaint, NewComplaint


class ComplaintRepository(Protocol):
    """Repository interface for complaints and their message log."""

    def create(self, complaint: NewComplaint) -> int:
        raise NotImplementedError

    def get_by_id(self, complaint_id: int) -> Optional[Complaint]:
        raise NotImplementedError

    def list_by_complainant(self, complainant_id: int) -> Sequence[Complaint]:
        """Newest first."""

        raise NotImplementedError

    def list_all(self, *, limit: Optional[int] = None) -> Sequence[Complaint]:
        """Newest first."""

        raise NotImplementedError

    def start_investigation(self, complaint_id: int, *, investigated_by: int, at: datetime, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def close(
        self,
        complaint_id: int,
        *,
        status: ComplaintStatus,
        resolution: str,
        resolved_by: int,
        at: datetime,
        red_flag_reason: Optional[str] = None,
    ) -> bool:
        """Resolve or dismiss a complaint that is still open.

        Returns False when the complaint is missing or already closed. A
        non-empty ``red_flag_reason`` marks the red flag as issued.
        """

        raise NotImplementedError

    def escalate(self, complaint_id: int, *, level: int, escalated_by: int, at: datetime) -> bool:
        raise NotImplementedError

    def add_communication(self, complaint_id: int, communication: Communication) -> None:
        raise NotImplementedError

    def rate(self, complaint_id: int, *, rating: int, feedback: Optional[str]) -> bool:
        raise NotImplementedError

    def count_by_status(self) -> dict[ComplaintStatus, int]:
        raise NotImplementedError

    def count_red_flags(self) -> int:
        raise NotImplementedError
