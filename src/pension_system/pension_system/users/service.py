from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import normalize_email, require_min_length, require_non_empty
from ..core.constants import LOCK_HOURS, MAX_LOGIN_ATTEMPTS
from ..core.enums import Role
from ..core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

STAFF_ROLES = (Role.MANAGER, Role.ADMIN)


@dataclass(frozen=True)
class AuthResult:
    """Bearer token plus the user it was issued for."""

    token: str
    user: User


class AuthService:
    """Use cases: register pension holders, log in, resolve bearer tokens."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._tokens = tokens
        self._clock = clock

    def register_pension_holder(
        self,
        *,
        name: str,
        email: str,
        password: str,
        nid: str,
        phone: str,
        employee_id: str,
        department: str,
        designation: str,
        joining_date: date,
    ) -> AuthResult:
        name = require_min_length(name, "Name", 2)
        email = normalize_email(email)
        require_min_length(password, "Password", 6)
        nid = require_non_empty(nid, "NID")
        employee_id = require_non_empty(employee_id, "Employee ID")

        if self._users.find_duplicate(email=email, nid=nid, employee_id=employee_id):
            raise ValidationError("User already exists with this email, NID, or Employee ID")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.PENSION_HOLDER,
            nid=nid,
            phone=(phone or "").strip() or None,
            employee_id=employee_id,
            department=require_non_empty(department, "Department"),
            designation=require_non_empty(designation, "Designation"),
            joining_date=joining_date,
            is_verified=True,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Registration failed")

        logger.info("Registered pension holder id=%s", user_id)
        return AuthResult(token=self._tokens.issue(user.user_id), user=user)

    def login(self, *, email: str, password: str, roles: Iterable[Role]) -> AuthResult:
        """Check credentials for one of ``roles``, applying the lockout policy.

        Five consecutive failures lock the account for two hours. A locked
        account is refused before the password is even checked.
        """
        user = self._users.get_by_email(normalize_email(email))
        if not user or user.role not in tuple(roles):
            raise AuthenticationError("Invalid credentials")

        now = self._clock()
        if user.is_locked(now):
            raise AccountLockedError("Account is temporarily locked due to too many failed login attempts")
        if not user.is_active:
            raise AccountLockedError("Account has been disabled")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            self._register_failure(user, now)
            raise AuthenticationError("Invalid credentials")

        self._users.record_successful_login(user.user_id, at=now)
        return AuthResult(token=self._tokens.issue(user.user_id), user=user)

    def _register_failure(self, user: User, now: datetime) -> None:
        if user.lock_until and user.lock_until <= now:
            # lock expired: start counting again
            self._users.record_failed_login(user.user_id, attempts=1, lock_until=None)
            return

        attempts = user.login_attempts + 1
        lock_until = None
        if attempts >= MAX_LOGIN_ATTEMPTS:
            lock_until = now + timedelta(hours=LOCK_HOURS)
            logger.warning("Locking account id=%s after %s failed logins", user.user_id, attempts)
        self._users.record_failed_login(user.user_id, attempts=attempts, lock_until=lock_until)

    def resolve_token(self, token: Optional[str]) -> User:
        """Map a bearer token to an active user."""
        if not token:
            raise AuthenticationError("Access denied. No token provided.")

        user_id = self._tokens.decode(token)
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Invalid token. User not found.")
        if not user.is_active:
            raise AuthorizationError("Account has been disabled.")
        return user


class UserService:
    """Use case: manage staff accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_staff(self) -> Sequence[User]:
        return self._users.list_by_roles(STAFF_ROLES)

    def create_staff(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        department: Optional[str] = None,
        designation: Optional[str] = None,
    ) -> User:
        name = require_min_length(name, "Name", 2)
        email = normalize_email(email)
        require_min_length(password, "Password", 6)
        if role not in STAFF_ROLES:
            raise ValidationError("Role must be manager or admin")

        if self._users.get_by_email(email):
            raise ValidationError("User already exists with this email")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=(department or "").strip() or None,
            designation=(designation or "").strip() or None,
            is_verified=True,
        )
        logger.info("Created %s account id=%s", role.value, user_id)
        return self.get(user_id)

    def update_staff(
        self,
        *,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        designation: Optional[str] = None,
    ) -> User:
        user = self.get(user_id)

        fields: dict = {}
        if name is not None:
            fields["name"] = require_min_length(name, "Name", 2)
        if email is not None:
            email = normalize_email(email)
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ValidationError("User already exists with this email")
            fields["email"] = email
        if password:
            require_min_length(password, "Password", 6)
            fields["password_hash"] = generate_password_hash(password)
        if role is not None:
            if role not in STAFF_ROLES:
                raise ValidationError("Role must be manager or admin")
            fields["role"] = role
        if department is not None:
            fields["department"] = department.strip() or None
        if designation is not None:
            fields["designation"] = designation.strip() or None

        self._users.update_fields(user.user_id, **fields)
        return self.get(user.user_id)

    def set_active(self, *, user_id: int, is_active: bool) -> User:
        user = self.get(user_id)
        self._users.set_active(user.user_id, is_active=bool(is_active))
        logger.info("User id=%s is_active=%s", user.user_id, bool(is_active))
        return self.get(user.user_id)

    def delete_user(self, *, user_id: int) -> None:
        user = self.get(user_id)
        if user.role == Role.ADMIN:
            raise AuthorizationError("Cannot delete admin users")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Failed to delete user")
