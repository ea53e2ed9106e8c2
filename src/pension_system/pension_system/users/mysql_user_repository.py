from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, like_contains
from .model import User
from .repository import UserRepository

_COLUMNS = """
    id, name, email, password_hash, role, nid, phone, employee_id, department, designation,
    joining_date, is_active, is_verified, red_flags, last_login, login_attempts, lock_until, created_at
"""

_UPDATABLE = {"name", "email", "password_hash", "role", "department", "designation"}


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        nid=row.get("nid"),
        phone=row.get("phone"),
        employee_id=row.get("employee_id"),
        department=row.get("department"),
        designation=row.get("designation"),
        joining_date=row.get("joining_date"),
        is_active=bool(row.get("is_active", True)),
        is_verified=bool(row.get("is_verified", False)),
        red_flags=int(row.get("red_flags") or 0),
        last_login=row.get("last_login"),
        login_attempts=int(row.get("login_attempts") or 0),
        lock_until=row.get("lock_until"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def find_duplicate(self, *, email: str, nid: Optional[str] = None, employee_id: Optional[str] = None) -> Optional[User]:
        clauses = ["email=%s"]
        params: list[object] = [email.lower()]
        if nid:
            clauses.append("nid=%s")
            params.append(nid)
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {' OR '.join(clauses)} LIMIT 1", tuple(params))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    name, email, password_hash, role, nid, phone, employee_id,
                    department, designation, joining_date, is_active, is_verified
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    name,
                    email.lower(),
                    password_hash,
                    role.value,
                    nid,
                    phone,
                    employee_id,
                    department,
                    designation,
                    joining_date,
                    int(bool(is_verified)),
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, user_id: int, **fields) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")
        if not fields:
            return True

        assignments = []
        params: list[object] = []
        for column, value in fields.items():
            assignments.append(f"{column}=%s")
            params.append(value.value if isinstance(value, Role) else value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id=%s",
                tuple(params + [int(user_id)]),
            )
            return cur.rowcount >= 0

    def record_failed_login(self, user_id: int, *, attempts: int, lock_until: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET login_attempts=%s, lock_until=%s WHERE id=%s",
                (int(attempts), lock_until, int(user_id)),
            )
            return cur.rowcount > 0

    def record_successful_login(self, user_id: int, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET login_attempts=0, lock_until=NULL, last_login=%s WHERE id=%s",
                (at, int(user_id)),
            )
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE id=%s", (int(bool(is_active)), int(user_id)))
            return cur.rowcount >= 0

    def increment_red_flags(self, user_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET red_flags = red_flags + 1 WHERE id=%s", (int(user_id),))
            if cur.rowcount == 0:
                return None
            cur.execute("SELECT red_flags FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return int(row["red_flags"]) if row else None

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[User]:
        placeholders, params = in_clause(r.value for r in roles)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role IN ({placeholders}) ORDER BY created_at DESC, id DESC",
                tuple(params),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def find_manager_by_name(self, name_fragment: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s AND LOWER(name) LIKE %s ESCAPE '!' ORDER BY id LIMIT 1",
                (Role.MANAGER.value, like_contains(name_fragment.lower())),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_flagged_managers(self, *, min_flags: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s AND red_flags >= %s ORDER BY red_flags DESC",
                (Role.MANAGER.value, int(min_flags)),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def role_counts(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT role, COUNT(*) AS count, SUM(CASE WHEN is_active=1 THEN 1 ELSE 0 END) AS active
                FROM users
                GROUP BY role
                """
            )
            return [
                {"role": r["role"], "count": int(r["count"]), "active": int(r["active"] or 0)}
                for r in fetchall(cur)
            ]

    def names_by_id(self, user_ids: Iterable[int]) -> dict[int, str]:
        ids = sorted({int(i) for i in user_ids if i is not None})
        if not ids:
            return {}
        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, name FROM users WHERE id IN ({placeholders})", tuple(params))
            return {int(r["id"]): r["name"] for r in fetchall(cur)}
