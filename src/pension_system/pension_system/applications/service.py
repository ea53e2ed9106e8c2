from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import calculate_service_years, now_local
from ..core.constants import MIN_SERVICE_YEARS, OVERDUE_DAYS
from ..core.enums import (
    DECIDABLE_APPLICATION_STATUSES,
    OPEN_APPLICATION_STATUSES,
    ApplicationStatus,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..pension.calculator.base import PensionCalculator
from ..users.repository import UserRepository
from .model import ApplicationDetails, FeedbackEntry, PensionApplication
from .repository import ApplicationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewRow:
    """An application plus the holder's display name (manager listing)."""

    application: PensionApplication
    pension_holder_name: str


class ApplicationService:
    """Use cases around pension applications (holder and manager side)."""

    def __init__(
        self,
        applications: ApplicationRepository,
        users: UserRepository,
        calculator: PensionCalculator,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._applications = applications
        self._users = users
        self._calculator = calculator
        self._clock = clock

    # -------- Pension holder --------
    def _prepare(self, details: ApplicationDetails) -> ApplicationDetails:
        personal = details.personal_info
        service = details.service_info

        if len((personal.full_name or "").strip()) < 2:
            raise ValidationError("Full name is required")
        if len((personal.nid or "").strip()) < 10:
            raise ValidationError("Valid NID is required")
        if not (service.employee_id or "").strip():
            raise ValidationError("Employee ID is required")
        salary = service.last_basic_salary
        if salary is None or not math.isfinite(salary) or salary < 0:
            raise ValidationError("Valid salary is required")

        service_years = service.service_years
        if service_years is None:
            if not service.joining_date:
                raise ValidationError("Joining date or service years is required")
            service_years = calculate_service_years(
                service.joining_date,
                service.retirement_date,
                today=self._clock().date(),
            )

        if not math.isfinite(service_years) or service_years < MIN_SERVICE_YEARS:
            raise ValidationError(f"Minimum {MIN_SERVICE_YEARS} years of service required for pension")

        return replace(details, service_info=replace(service, service_years=service_years))

    def submit(self, *, pension_holder_id: int, details: ApplicationDetails) -> PensionApplication:
        if self._applications.has_open_application(int(pension_holder_id)):
            raise ValidationError("You already have a pending application. Please wait for it to be processed.")

        details = self._prepare(details)
        application_id = self._applications.create(pension_holder_id=int(pension_holder_id), details=details)
        logger.info("Application id=%s submitted by holder id=%s", application_id, pension_holder_id)
        return self.get(application_id)

    def list_mine(self, *, pension_holder_id: int) -> Sequence[PensionApplication]:
        return self._applications.list_by_holder(int(pension_holder_id))

    def resubmit(self, *, pension_holder_id: int, application_id: int, details: ApplicationDetails) -> PensionApplication:
        """Replace the submitted data of an application sent back for feedback."""
        app = self.get(application_id)
        if app.pension_holder_id != int(pension_holder_id):
            raise NotFoundError("Application not found")
        if app.status != ApplicationStatus.FEEDBACK:
            raise ValidationError("Only applications awaiting feedback can be updated")

        details = self._prepare(details)
        self._applications.replace_details(app.application_id, details=details, status=ApplicationStatus.PENDING)
        logger.info("Application id=%s resubmitted", app.application_id)
        return self.get(app.application_id)

    def approved_for_holder(self, *, pension_holder_id: int, application_id: int) -> PensionApplication:
        app = self._applications.get_by_id(int(application_id))
        if (
            not app
            or app.pension_holder_id != int(pension_holder_id)
            or app.status != ApplicationStatus.APPROVED
        ):
            raise NotFoundError("Approved application not found")
        return app

    # -------- Manager --------
    def get(self, application_id: int) -> PensionApplication:
        app = self._applications.get_by_id(int(application_id))
        if not app:
            raise NotFoundError("Application not found")
        return app

    def list_for_review(self) -> Sequence[ReviewRow]:
        apps = self._applications.list_by_statuses(OPEN_APPLICATION_STATUSES)
        names = self._users.names_by_id(a.pension_holder_id for a in apps)
        return [ReviewRow(application=a, pension_holder_name=names.get(a.pension_holder_id, "N/A")) for a in apps]

    def holder_name(self, app: PensionApplication) -> str:
        return self._users.names_by_id([app.pension_holder_id]).get(app.pension_holder_id, "N/A")

    def _decidable(self, application_id: int, action: str) -> PensionApplication:
        app = self.get(application_id)
        if app.status not in DECIDABLE_APPLICATION_STATUSES:
            raise ValidationError(f"Application cannot be {action} in its current status ({app.status.value})")
        return app

    def start_review(self, *, manager_id: int, application_id: int) -> PensionApplication:
        app = self.get(application_id)
        if app.status != ApplicationStatus.PENDING:
            raise ValidationError("Only pending applications can be taken under review")

        self._applications.mark_reviewed(
            app.application_id,
            status=ApplicationStatus.UNDER_REVIEW,
            reviewed_by=int(manager_id),
            reviewed_at=self._clock(),
        )
        return self.get(app.application_id)

    def approve(self, *, manager_id: int, application_id: int, comments: Optional[str] = None) -> PensionApplication:
        app = self._decidable(application_id, "approved")
        now = self._clock()
        service = app.details.service_info

        pension_details = self._calculator.calculate(
            last_basic_salary=service.last_basic_salary,
            service_years=service.service_years or 0,
            at=now,
        )
        self._applications.mark_approved(
            app.application_id,
            approved_by=int(manager_id),
            approved_at=now,
            comments=(comments or "").strip() or "Application approved",
            pension_details=pension_details,
        )
        logger.info(
            "Application id=%s approved by manager id=%s (monthly pension %s)",
            app.application_id,
            manager_id,
            pension_details.monthly_pension,
        )
        return self.get(app.application_id)

    def reject(self, *, manager_id: int, application_id: int, comments: str) -> PensionApplication:
        comments = (comments or "").strip()
        if len(comments) < 10:
            raise ValidationError("Rejection reason must be at least 10 characters")

        app = self._decidable(application_id, "rejected")
        self._applications.mark_reviewed(
            app.application_id,
            status=ApplicationStatus.REJECTED,
            reviewed_by=int(manager_id),
            reviewed_at=self._clock(),
            comments=comments,
        )
        logger.info("Application id=%s rejected by manager id=%s", app.application_id, manager_id)
        return self.get(app.application_id)

    def request_feedback(
        self,
        *,
        manager_id: int,
        application_id: int,
        comments: str,
        field: Optional[str] = None,
    ) -> PensionApplication:
        comments = (comments or "").strip()
        if len(comments) < 5:
            raise ValidationError("Feedback must be at least 5 characters")

        app = self._decidable(application_id, "sent back for feedback")
        now = self._clock()
        self._applications.add_feedback(
            app.application_id,
            FeedbackEntry(message=comments, field=(field or "").strip() or None, created_by=int(manager_id), created_at=now),
        )
        self._applications.mark_reviewed(
            app.application_id,
            status=ApplicationStatus.FEEDBACK,
            reviewed_by=int(manager_id),
            reviewed_at=now,
            comments=comments,
        )
        return self.get(app.application_id)

    def stats(self) -> dict:
        counts = self._applications.count_by_status()
        cutoff = self._clock() - timedelta(days=OVERDUE_DAYS)
        return {
            "total": sum(counts.values()),
            "pending": counts.get(ApplicationStatus.PENDING, 0),
            "under-review": counts.get(ApplicationStatus.UNDER_REVIEW, 0),
            "feedback": counts.get(ApplicationStatus.FEEDBACK, 0),
            "approved": counts.get(ApplicationStatus.APPROVED, 0),
            "rejected": counts.get(ApplicationStatus.REJECTED, 0),
            "overdue": self._applications.count_pending_older_than(cutoff),
        }
