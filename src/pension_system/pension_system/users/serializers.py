from __future__ import annotations

from ..common.datetime_utils import iso
from .model import User


def public_user(user: User) -> dict:
    """JSON view of a user; never includes the password hash."""
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "nid": user.nid,
        "phone": user.phone,
        "employeeId": user.employee_id,
        "department": user.department,
        "designation": user.designation,
        "joiningDate": iso(user.joining_date),
        "isActive": user.is_active,
        "isVerified": user.is_verified,
        "redFlags": user.red_flags,
        "lastLogin": iso(user.last_login),
        "createdAt": iso(user.created_at),
    }


def login_user(user: User) -> dict:
    """Short user view returned with a fresh token."""
    data = {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
    }
    if user.employee_id:
        data["employeeId"] = user.employee_id
    if user.department:
        data["department"] = user.department
    if user.joining_date:
        data["joiningDate"] = iso(user.joining_date)
    return data


def flagged_manager(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "department": user.department,
        "redFlags": user.red_flags,
        "isActive": user.is_active,
    }
