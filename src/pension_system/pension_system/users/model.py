from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; persistence lives in the repository layer.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    nid: Optional[str] = None
    phone: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    is_active: bool = True
    is_verified: bool = False
    red_flags: int = 0
    last_login: Optional[datetime] = None
    login_attempts: int = 0
    lock_until: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_locked(self, now: datetime) -> bool:
        return bool(self.lock_until and self.lock_until > now)
