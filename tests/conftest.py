from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.pension_system.pension_system.applications.model import (
    ApplicationDetails,
    FeedbackEntry,
    PensionApplication,
    PersonalInfo,
    ServiceInfo,
)
from src.pension_system.pension_system.complaints.model import Communication, Complaint, NewComplaint
from src.pension_system.pension_system.container import wire_container
from src.pension_system.pension_system.core.enums import (
    CLOSABLE_COMPLAINT_STATUSES,
    OPEN_APPLICATION_STATUSES,
    ApplicationStatus,
    ComplaintStatus,
    Role,
)
from src.pension_system.pension_system.users.model import User


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryUsers:
    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._users: dict[int, User] = {}
        self._next_id = 1

    def add(self, *, name: str, email: str, password: str, role: Role, **extra) -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            **{k: v for k, v in extra.items() if k not in {"is_active", "red_flags"}},
        )
        user = replace(
            self._users[user_id],
            is_active=extra.get("is_active", True),
            red_flags=extra.get("red_flags", 0),
        )
        self._users[user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self._users.values():
            if u.email == email.lower():
                return u
        return None

    def find_duplicate(self, *, email, nid=None, employee_id=None) -> Optional[User]:
        for u in self._users.values():
            if u.email == email.lower() or (nid and u.nid == nid) or (employee_id and u.employee_id == employee_id):
                return u
        return None

    def create_user(self, *, name, email, password_hash, role, nid=None, phone=None, employee_id=None,
                    department=None, designation=None, joining_date=None, is_verified=True) -> int:
        user_id = self._next_id
        self._next_id += 1
        self._users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            role=role,
            nid=nid,
            phone=phone,
            employee_id=employee_id,
            department=department,
            designation=designation,
            joining_date=joining_date,
            is_verified=is_verified,
            # distinct timestamps keep "newest first" deterministic
            created_at=self._clock() + timedelta(seconds=user_id),
        )
        return user_id

    def update_fields(self, user_id, **fields) -> bool:
        self._users[user_id] = replace(self._users[user_id], **fields)
        return True

    def record_failed_login(self, user_id, *, attempts, lock_until) -> bool:
        self._users[user_id] = replace(self._users[user_id], login_attempts=attempts, lock_until=lock_until)
        return True

    def record_successful_login(self, user_id, *, at) -> bool:
        self._users[user_id] = replace(self._users[user_id], login_attempts=0, lock_until=None, last_login=at)
        return True

    def set_active(self, user_id, *, is_active) -> bool:
        self._users[user_id] = replace(self._users[user_id], is_active=is_active)
        return True

    def increment_red_flags(self, user_id) -> Optional[int]:
        user = self._users.get(user_id)
        if not user:
            return None
        self._users[user_id] = replace(user, red_flags=user.red_flags + 1)
        return user.red_flags + 1

    def delete_by_id(self, user_id) -> bool:
        return self._users.pop(user_id, None) is not None

    def list_by_roles(self, roles):
        roles = tuple(roles)
        items = [u for u in self._users.values() if u.role in roles]
        return sorted(items, key=lambda u: u.created_at, reverse=True)

    def find_manager_by_name(self, name_fragment):
        for u in sorted(self._users.values(), key=lambda u: u.user_id):
            if u.role == Role.MANAGER and name_fragment.lower() in u.name.lower():
                return u
        return None

    def list_flagged_managers(self, *, min_flags):
        items = [u for u in self._users.values() if u.role == Role.MANAGER and u.red_flags >= min_flags]
        return sorted(items, key=lambda u: u.red_flags, reverse=True)

    def role_counts(self):
        rows: dict[str, dict] = {}
        for u in self._users.values():
            row = rows.setdefault(u.role.value, {"role": u.role.value, "count": 0, "active": 0})
            row["count"] += 1
            row["active"] += int(u.is_active)
        return list(rows.values())

    def names_by_id(self, user_ids):
        return {int(i): self._users[int(i)].name for i in user_ids if i is not None and int(i) in self._users}


class InMemoryApplications:
    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._apps: dict[int, PensionApplication] = {}
        self._next_id = 1

    def create(self, *, pension_holder_id, details) -> int:
        app_id = self._next_id
        self._next_id += 1
        self._apps[app_id] = PensionApplication(
            application_id=app_id,
            pension_holder_id=pension_holder_id,
            details=details,
            status=ApplicationStatus.PENDING,
            created_at=self._clock(),
        )
        return app_id

    def get_by_id(self, application_id):
        return self._apps.get(int(application_id))

    def list_by_holder(self, pension_holder_id):
        items = [a for a in self._apps.values() if a.pension_holder_id == pension_holder_id]
        return sorted(items, key=lambda a: (a.created_at, a.application_id), reverse=True)

    def has_open_application(self, pension_holder_id) -> bool:
        return any(
            a.pension_holder_id == pension_holder_id and a.status in OPEN_APPLICATION_STATUSES
            for a in self._apps.values()
        )

    def list_by_statuses(self, statuses):
        statuses = tuple(statuses)
        items = [a for a in self._apps.values() if a.status in statuses]
        return sorted(items, key=lambda a: (a.created_at, a.application_id))

    def replace_details(self, application_id, *, details, status) -> bool:
        self._apps[application_id] = replace(self._apps[application_id], details=details, status=status)
        return True

    def mark_reviewed(self, application_id, *, status, reviewed_by, reviewed_at, comments=None) -> bool:
        app = self._apps[application_id]
        self._apps[application_id] = replace(
            app,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            review_comments=comments if comments is not None else app.review_comments,
        )
        return True

    def mark_approved(self, application_id, *, approved_by, approved_at, comments, pension_details) -> bool:
        self._apps[application_id] = replace(
            self._apps[application_id],
            status=ApplicationStatus.APPROVED,
            reviewed_by=approved_by,
            reviewed_at=approved_at,
            review_comments=comments,
            approved_by=approved_by,
            approved_at=approved_at,
            pension_details=pension_details,
        )
        return True

    def add_feedback(self, application_id, entry: FeedbackEntry) -> None:
        app = self._apps[application_id]
        self._apps[application_id] = replace(app, feedback=app.feedback + (entry,))

    def count_by_status(self):
        counts: dict[ApplicationStatus, int] = {}
        for a in self._apps.values():
            counts[a.status] = counts.get(a.status, 0) + 1
        return counts

    def count_pending_older_than(self, cutoff) -> int:
        return sum(1 for a in self._apps.values() if a.status == ApplicationStatus.PENDING and a.created_at < cutoff)


class InMemoryComplaints:
    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._items: dict[int, Complaint] = {}
        self._next_id = 1

    def create(self, complaint: NewComplaint) -> int:
        cid = self._next_id
        self._next_id += 1
        self._items[cid] = Complaint(
            complaint_id=cid,
            complainant_id=complaint.complainant_id,
            related_application_id=complaint.related_application_id,
            target_manager_id=complaint.target_manager_id,
            subject=complaint.subject,
            description=complaint.description,
            category=complaint.category,
            priority=complaint.priority,
            status=ComplaintStatus.SUBMITTED,
            created_at=self._clock() + timedelta(seconds=cid),
        )
        return cid

    def get_by_id(self, complaint_id):
        return self._items.get(int(complaint_id))

    def list_by_complainant(self, complainant_id):
        items = [c for c in self._items.values() if c.complainant_id == complainant_id]
        return sorted(items, key=lambda c: c.created_at, reverse=True)

    def list_all(self, *, limit=None):
        items = sorted(self._items.values(), key=lambda c: c.created_at, reverse=True)
        return items[:limit] if limit is not None else items

    def start_investigation(self, complaint_id, *, investigated_by, at, notes) -> bool:
        self._items[complaint_id] = replace(
            self._items[complaint_id],
            status=ComplaintStatus.UNDER_INVESTIGATION,
            investigated_by=investigated_by,
            investigation_started=at,
            investigation_notes=notes,
        )
        return True

    def close(self, complaint_id, *, status, resolution, resolved_by, at, red_flag_reason=None) -> bool:
        current = self._items.get(complaint_id)
        if current is None or current.status not in CLOSABLE_COMPLAINT_STATUSES:
            return False
        self._items[complaint_id] = replace(
            self._items[complaint_id],
            status=status,
            resolution=resolution,
            resolved_by=resolved_by,
            resolved_at=at,
            investigation_completed=at,
            red_flag_issued=bool(red_flag_reason),
            red_flag_reason=red_flag_reason,
            red_flag_issued_at=at if red_flag_reason else None,
        )
        return True

    def escalate(self, complaint_id, *, level, escalated_by, at) -> bool:
        self._items[complaint_id] = replace(
            self._items[complaint_id],
            status=ComplaintStatus.ESCALATED,
            escalation_level=level,
            escalated_by=escalated_by,
            escalated_at=at,
        )
        return True

    def add_communication(self, complaint_id, communication: Communication) -> None:
        c = self._items[complaint_id]
        self._items[complaint_id] = replace(c, communications=c.communications + (communication,))

    def rate(self, complaint_id, *, rating, feedback) -> bool:
        self._items[complaint_id] = replace(
            self._items[complaint_id], satisfaction_rating=rating, satisfaction_feedback=feedback
        )
        return True

    def count_by_status(self):
        counts: dict[ComplaintStatus, int] = {}
        for c in self._items.values():
            counts[c.status] = counts.get(c.status, 0) + 1
        return counts

    def count_red_flags(self) -> int:
        return sum(1 for c in self._items.values() if c.red_flag_issued)


def make_details(*, full_name="Rahim Uddin", nid="1234567890", employee_id="EMP-001",
                 salary=50000.0, service_years=25.0, joining_date=None, retirement_date=None) -> ApplicationDetails:
    return ApplicationDetails(
        personal_info=PersonalInfo(full_name=full_name, nid=nid, phone="01711111111"),
        service_info=ServiceInfo(
            employee_id=employee_id,
            last_basic_salary=salary,
            service_years=service_years,
            department="Finance",
            designation="Officer",
            joining_date=joining_date,
            retirement_date=retirement_date,
        ),
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def users_repo(clock) -> InMemoryUsers:
    return InMemoryUsers(clock)


@pytest.fixture
def applications_repo(clock) -> InMemoryApplications:
    return InMemoryApplications(clock)


@pytest.fixture
def complaints_repo(clock) -> InMemoryComplaints:
    return InMemoryComplaints(clock)


@pytest.fixture
def container(users_repo, applications_repo, complaints_repo, clock):
    return wire_container(
        users_repo=users_repo,
        applications_repo=applications_repo,
        complaints_repo=complaints_repo,
        jwt_secret="test-jwt-secret",
        clock=clock,
    )


@pytest.fixture
def holder(users_repo) -> User:
    return users_repo.add(
        name="Rahim Uddin",
        email="rahim@example.com",
        password="secret1",
        role=Role.PENSION_HOLDER,
        nid="1234567890",
        employee_id="EMP-001",
    )


@pytest.fixture
def manager(users_repo) -> User:
    return users_repo.add(name="Karim Manager", email="karim@pension.gov", password="manager123", role=Role.MANAGER)


@pytest.fixture
def admin(users_repo) -> User:
    return users_repo.add(name="System Admin", email="admin@pension.gov", password="admin123", role=Role.ADMIN)


@pytest.fixture
def details_factory():
    return make_details
