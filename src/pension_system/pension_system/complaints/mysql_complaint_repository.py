from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import (
    CLOSABLE_COMPLAINT_STATUSES,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    MessageType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Communication, Complaint, NewComplaint
from .repository import ComplaintRepository

_COLUMNS = """
    id, complainant_id, related_application_id, target_manager_id, subject, description,
    category, priority, status, investigated_by, investigation_notes, investigation_started,
    investigation_completed, resolution, resolved_by, resolved_at, red_flag_issued,
    red_flag_reason, red_flag_issued_at, escalation_level, escalated_at, escalated_by,
    satisfaction_rating, satisfaction_feedback, created_at, updated_at
"""


def _row_to_complaint(r: dict, communications: Sequence[Communication] = ()) -> Complaint:
    return Complaint(
        complaint_id=int(r["id"]),
        complainant_id=int(r["complainant_id"]),
        related_application_id=r.get("related_application_id"),
        target_manager_id=r.get("target_manager_id"),
        subject=r["subject"],
        description=r["description"],
        category=ComplaintCategory(r["category"]),
        priority=ComplaintPriority(r["priority"]),
        status=ComplaintStatus(r["status"]),
        investigated_by=r.get("investigated_by"),
        investigation_notes=r.get("investigation_notes"),
        investigation_started=r.get("investigation_started"),
        investigation_completed=r.get("investigation_completed"),
        resolution=r.get("resolution"),
        resolved_by=r.get("resolved_by"),
        resolved_at=r.get("resolved_at"),
        red_flag_issued=bool(r.get("red_flag_issued")),
        red_flag_reason=r.get("red_flag_reason"),
        red_flag_issued_at=r.get("red_flag_issued_at"),
        escalation_level=int(r.get("escalation_level") or 0),
        escalated_at=r.get("escalated_at"),
        escalated_by=r.get("escalated_by"),
        satisfaction_rating=r.get("satisfaction_rating"),
        satisfaction_feedback=r.get("satisfaction_feedback"),
        communications=tuple(communications),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


class MySQLComplaintRepository(ComplaintRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, rows: list[dict]) -> list[Complaint]:
        ids = [int(r["id"]) for r in rows]
        grouped: dict[int, list[Communication]] = {}
        if ids:
            placeholders, params = in_clause(ids)
            cur.execute(
                f"""
                SELECT complaint_id, message, sender_id, recipient_id, message_type, sent_at
                FROM complaint_communications
                WHERE complaint_id IN ({placeholders})
                ORDER BY sent_at, id
                """,
                tuple(params),
            )
            for c in fetchall(cur):
                grouped.setdefault(int(c["complaint_id"]), []).append(
                    Communication(
                        message=c["message"],
                        sender_id=int(c["sender_id"]),
                        recipient_id=c.get("recipient_id"),
                        message_type=MessageType(c["message_type"]),
                        sent_at=c.get("sent_at"),
                    )
                )
        return [_row_to_complaint(r, grouped.get(int(r["id"]), ())) for r in rows]

    def create(self, complaint: NewComplaint) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO complaints(
                    complainant_id, related_application_id, target_manager_id,
                    subject, description, category, priority, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(complaint.complainant_id),
                    complaint.related_application_id,
                    complaint.target_manager_id,
                    complaint.subject,
                    complaint.description,
                    complaint.category.value,
                    complaint.priority.value,
                    ComplaintStatus.SUBMITTED.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, complaint_id: int) -> Optional[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM complaints WHERE id=%s", (int(complaint_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def list_by_complainant(self, complainant_id: int) -> Sequence[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM complaints WHERE complainant_id=%s ORDER BY created_at DESC, id DESC",
                (int(complainant_id),),
            )
            return self._hydrate(cur, fetchall(cur))

    def list_all(self, *, limit: Optional[int] = None) -> Sequence[Complaint]:
        sql = f"SELECT {_COLUMNS} FROM complaints ORDER BY created_at DESC, id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return self._hydrate(cur, fetchall(cur))

    def start_investigation(self, complaint_id: int, *, investigated_by: int, at: datetime, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE complaints
                SET status=%s, investigated_by=%s, investigation_started=%s, investigation_notes=%s
                WHERE id=%s
                """,
                (ComplaintStatus.UNDER_INVESTIGATION.value, int(investigated_by), at, notes, int(complaint_id)),
            )
            return cur.rowcount > 0

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
        placeholders, open_statuses = in_clause(s.value for s in CLOSABLE_COMPLAINT_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE complaints
                SET status=%s, resolution=%s, resolved_by=%s, resolved_at=%s,
                    investigation_completed=%s,
                    red_flag_issued=%s, red_flag_reason=%s, red_flag_issued_at=%s
                WHERE id=%s AND status IN ({placeholders})
                """,
                (
                    status.value,
                    resolution,
                    int(resolved_by),
                    at,
                    at,
                    int(bool(red_flag_reason)),
                    red_flag_reason,
                    at if red_flag_reason else None,
                    int(complaint_id),
                    *open_statuses,
                ),
            )
            return cur.rowcount > 0

    def escalate(self, complaint_id: int, *, level: int, escalated_by: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE complaints
                SET status=%s, escalation_level=%s, escalated_by=%s, escalated_at=%s
                WHERE id=%s
                """,
                (ComplaintStatus.ESCALATED.value, int(level), int(escalated_by), at, int(complaint_id)),
            )
            return cur.rowcount > 0

    def add_communication(self, complaint_id: int, communication: Communication) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO complaint_communications(complaint_id, message, sender_id, recipient_id, message_type, sent_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(complaint_id),
                    communication.message,
                    int(communication.sender_id),
                    communication.recipient_id,
                    communication.message_type.value,
                    communication.sent_at,
                ),
            )

    def rate(self, complaint_id: int, *, rating: int, feedback: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE complaints SET satisfaction_rating=%s, satisfaction_feedback=%s WHERE id=%s",
                (int(rating), feedback, int(complaint_id)),
            )
            return cur.rowcount > 0

    def count_by_status(self) -> dict[ComplaintStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM complaints GROUP BY status")
            return {ComplaintStatus(r["status"]): int(r["count"]) for r in fetchall(cur)}

    def count_red_flags(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS count FROM complaints WHERE red_flag_issued=1")
            row = fetchone(cur)
            return int(row["count"]) if row else 0
