from __future__ import annotations

from typing import Sequence

from ..complaints.repository import ComplaintRepository
from ..core.constants import FLAGGED_MANAGER_MIN_FLAGS
from ..core.enums import ComplaintStatus, Role
from ..users.model import User
from ..users.repository import UserRepository


class DashboardService:
    """Aggregated numbers for the admin dashboard."""

    def __init__(self, users: UserRepository, complaints: ComplaintRepository):
        self._users = users
        self._complaints = complaints

    def admin_stats(self) -> dict:
        stats = {
            "totalUsers": 0,
            "activeManagers": 0,
            "disabledManagers": 0,
            "totalComplaints": 0,
            "pendingComplaints": 0,
            "resolvedComplaints": 0,
            "redFlagsIssued": 0,
        }

        for row in self._users.role_counts():
            stats["totalUsers"] += row["count"]
            if row["role"] == Role.MANAGER.value:
                stats["activeManagers"] = row["active"]
                stats["disabledManagers"] = row["count"] - row["active"]

        for status, count in self._complaints.count_by_status().items():
            stats["totalComplaints"] += count
            if status in (ComplaintStatus.SUBMITTED, ComplaintStatus.UNDER_INVESTIGATION):
                stats["pendingComplaints"] += count
            elif status == ComplaintStatus.RESOLVED:
                stats["resolvedComplaints"] += count

        stats["redFlagsIssued"] = self._complaints.count_red_flags()
        return stats

    def flagged_managers(self) -> Sequence[User]:
        return self._users.list_flagged_managers(min_flags=FLAGGED_MANAGER_MIN_FLAGS)
