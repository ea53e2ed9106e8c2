from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ApplicationPriority, ApplicationStatus, OPEN_APPLICATION_STATUSES
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, load_json
from .model import (
    ApplicationDetails,
    BankInfo,
    FeedbackEntry,
    NomineeInfo,
    PensionApplication,
    PensionDetails,
    PersonalInfo,
    ServiceInfo,
)
from .repository import ApplicationRepository

_COLUMNS = """
    id, pension_holder_id, personal_info, service_info, bank_info, nominee_info,
    special_circumstances, status, priority, reviewed_by, reviewed_at, review_comments,
    approved_by, approved_at, monthly_pension, gratuity, provident_fund, calculated_at,
    created_at, updated_at
"""


def _row_to_application(row: dict, feedback: Sequence[FeedbackEntry] = ()) -> PensionApplication:
    pension_details = None
    if row.get("calculated_at") is not None:
        pension_details = PensionDetails(
            monthly_pension=int(row["monthly_pension"]),
            gratuity=int(row["gratuity"]),
            provident_fund=int(row["provident_fund"]),
            calculated_at=row["calculated_at"],
        )

    return PensionApplication(
        application_id=int(row["id"]),
        pension_holder_id=int(row["pension_holder_id"]),
        details=ApplicationDetails(
            personal_info=PersonalInfo.from_dict(load_json(row["personal_info"])),
            service_info=ServiceInfo.from_dict(load_json(row["service_info"])),
            bank_info=BankInfo.from_dict(load_json(row.get("bank_info"))),
            nominee_info=NomineeInfo.from_dict(load_json(row.get("nominee_info"))),
            special_circumstances=row.get("special_circumstances"),
        ),
        status=ApplicationStatus(row["status"]),
        priority=ApplicationPriority(row.get("priority") or ApplicationPriority.MEDIUM.value),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
        reviewed_by=row.get("reviewed_by"),
        reviewed_at=row.get("reviewed_at"),
        review_comments=row.get("review_comments"),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        pension_details=pension_details,
        feedback=tuple(feedback),
    )


class MySQLApplicationRepository(ApplicationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_feedback(self, cur, application_ids: list[int]) -> dict[int, list[FeedbackEntry]]:
        if not application_ids:
            return {}
        placeholders, params = in_clause(application_ids)
        cur.execute(
            f"""
            SELECT application_id, message, field, created_by, created_at
            FROM application_feedback
            WHERE application_id IN ({placeholders})
            ORDER BY created_at, id
            """,
            tuple(params),
        )
        grouped: dict[int, list[FeedbackEntry]] = {}
        for r in fetchall(cur):
            grouped.setdefault(int(r["application_id"]), []).append(
                FeedbackEntry(
                    message=r["message"],
                    field=r.get("field"),
                    created_by=int(r["created_by"]),
                    created_at=r.get("created_at"),
                )
            )
        return grouped

    def _hydrate(self, cur, rows: list[dict]) -> list[PensionApplication]:
        feedback = self._load_feedback(cur, [int(r["id"]) for r in rows])
        return [_row_to_application(r, feedback.get(int(r["id"]), ())) for r in rows]

    def create(self, *, pension_holder_id: int, details: ApplicationDetails) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pension_applications(
                    pension_holder_id, personal_info, service_info, bank_info, nominee_info,
                    special_circumstances, status, priority
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(pension_holder_id),
                    dump_json(details.personal_info.to_dict()),
                    dump_json(details.service_info.to_dict()),
                    dump_json(details.bank_info.to_dict()),
                    dump_json(details.nominee_info.to_dict()),
                    details.special_circumstances,
                    ApplicationStatus.PENDING.value,
                    ApplicationPriority.MEDIUM.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, application_id: int) -> Optional[PensionApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM pension_applications WHERE id=%s", (int(application_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def list_by_holder(self, pension_holder_id: int) -> Sequence[PensionApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM pension_applications
                WHERE pension_holder_id=%s
                ORDER BY created_at DESC, id DESC
                """,
                (int(pension_holder_id),),
            )
            return self._hydrate(cur, fetchall(cur))

    def has_open_application(self, pension_holder_id: int) -> bool:
        placeholders, params = in_clause(s.value for s in OPEN_APPLICATION_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS found FROM pension_applications
                WHERE pension_holder_id=%s AND status IN ({placeholders})
                LIMIT 1
                """,
                tuple([int(pension_holder_id)] + params),
            )
            return fetchone(cur) is not None

    def list_by_statuses(self, statuses: Iterable[ApplicationStatus]) -> Sequence[PensionApplication]:
        placeholders, params = in_clause(s.value for s in statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM pension_applications
                WHERE status IN ({placeholders})
                ORDER BY created_at ASC, id ASC
                """,
                tuple(params),
            )
            return self._hydrate(cur, fetchall(cur))

    def replace_details(self, application_id: int, *, details: ApplicationDetails, status: ApplicationStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pension_applications
                SET personal_info=%s, service_info=%s, bank_info=%s, nominee_info=%s,
                    special_circumstances=%s, status=%s
                WHERE id=%s
                """,
                (
                    dump_json(details.personal_info.to_dict()),
                    dump_json(details.service_info.to_dict()),
                    dump_json(details.bank_info.to_dict()),
                    dump_json(details.nominee_info.to_dict()),
                    details.special_circumstances,
                    status.value,
                    int(application_id),
                ),
            )
            return cur.rowcount > 0

    def mark_reviewed(
        self,
        application_id: int,
        *,
        status: ApplicationStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pension_applications
                SET status=%s, reviewed_by=%s, reviewed_at=%s,
                    review_comments=COALESCE(%s, review_comments)
                WHERE id=%s
                """,
                (status.value, int(reviewed_by), reviewed_at, comments, int(application_id)),
            )
            return cur.rowcount > 0

    def mark_approved(
        self,
        application_id: int,
        *,
        approved_by: int,
        approved_at: datetime,
        comments: Optional[str],
        pension_details: PensionDetails,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pension_applications
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_comments=%s,
                    approved_by=%s, approved_at=%s,
                    monthly_pension=%s, gratuity=%s, provident_fund=%s, calculated_at=%s
                WHERE id=%s
                """,
                (
                    ApplicationStatus.APPROVED.value,
                    int(approved_by),
                    approved_at,
                    comments,
                    int(approved_by),
                    approved_at,
                    pension_details.monthly_pension,
                    pension_details.gratuity,
                    pension_details.provident_fund,
                    pension_details.calculated_at,
                    int(application_id),
                ),
            )
            return cur.rowcount > 0

    def add_feedback(self, application_id: int, entry: FeedbackEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO application_feedback(application_id, message, field, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(application_id), entry.message, entry.field, int(entry.created_by), entry.created_at),
            )

    def count_by_status(self) -> dict[ApplicationStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM pension_applications GROUP BY status")
            return {ApplicationStatus(r["status"]): int(r["count"]) for r in fetchall(cur)}

    def count_pending_older_than(self, cutoff: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS count FROM pension_applications WHERE status=%s AND created_at < %s",
                (ApplicationStatus.PENDING.value, cutoff),
            )
            row = fetchone(cur)
            return int(row["count"]) if row else 0
