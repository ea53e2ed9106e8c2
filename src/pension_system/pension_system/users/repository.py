from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def find_duplicate(self, *, email: str, nid: Optional[str] = None, employee_id: Optional[str] = None) -> Optional[User]:
        """First user sharing the email, NID or employee ID."""

        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        nid: Optional[str] = None,
        phone: Optional[str] = None,
        employee_id: Optional[str] = None,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        joining_date: Optional[date] = None,
        is_verified: bool = True,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, user_id: int, **fields) -> bool:
        """Update a subset of: name, email, password_hash, role, department, designation."""

        raise NotImplementedError

    def record_failed_login(self, user_id: int, *, attempts: int, lock_until: Optional[datetime]) -> bool:
        raise NotImplementedError

    def record_successful_login(self, user_id: int, *, at: datetime) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def increment_red_flags(self, user_id: int) -> Optional[int]:
        """Add one red flag; returns the new total (None if the user is missing)."""

        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[User]:
        """Newest first."""

        raise NotImplementedError

    def find_manager_by_name(self, name_fragment: str) -> Optional[User]:
        """Case-insensitive substring match on manager names."""

        raise NotImplementedError

    def list_flagged_managers(self, *, min_flags: int) -> Sequence[User]:
        raise NotImplementedError

    def role_counts(self) -> Sequence[dict]:
        """Rows of ``{"role", "count", "active"}``."""

        raise NotImplementedError

    def names_by_id(self, user_ids: Iterable[int]) -> dict[int, str]:
        raise NotImplementedError
