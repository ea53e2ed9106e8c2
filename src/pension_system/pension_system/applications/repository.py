from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ApplicationStatus
from .model import ApplicationDetails, FeedbackEntry, PensionApplication, PensionDetails


class ApplicationRepository(Protocol):
    """Repository interface for pension applications."""

    def create(self, *, pension_holder_id: int, details: ApplicationDetails) -> int:
        raise NotImplementedError

    def get_by_id(self, application_id: int) -> Optional[PensionApplication]:
        raise NotImplementedError

    def list_by_holder(self, pension_holder_id: int) -> Sequence[PensionApplication]:
        """Newest first."""

        raise NotImplementedError

    def has_open_application(self, pension_holder_id: int) -> bool:
        """True when the holder has a pending, under-review or feedback application."""

        raise NotImplementedError

    def list_by_statuses(self, statuses: Iterable[ApplicationStatus]) -> Sequence[PensionApplication]:
        """Oldest first."""

        raise NotImplementedError

    def replace_details(self, application_id: int, *, details: ApplicationDetails, status: ApplicationStatus) -> bool:
        raise NotImplementedError

    def mark_reviewed(
        self,
        application_id: int,
        *,
        status: ApplicationStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def mark_approved(
        self,
        application_id: int,
        *,
        approved_by: int,
        approved_at: datetime,
        comments: Optional[str],
        pension_details: PensionDetails,
    ) -> bool:
        raise NotImplementedError

    def add_feedback(self, application_id: int, entry: FeedbackEntry) -> None:
        raise NotImplementedError

    def count_by_status(self) -> dict[ApplicationStatus, int]:
        raise NotImplementedError

    def count_pending_older_than(self, cutoff: datetime) -> int:
        raise NotImplementedError
