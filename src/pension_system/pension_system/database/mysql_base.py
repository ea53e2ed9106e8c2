from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_json(value: Optional[dict]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def load_json(value: Any) -> dict:
    """Decode a JSON column.

    mysql-connector returns JSON columns as str, bytes or (with some server
    versions) already-decoded dicts.
    """

    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)


def in_clause(values) -> tuple[str, list]:
    """Placeholders and params for an SQL ``IN (...)`` filter."""
    items = list(values)
    return ",".join(["%s"] * len(items)), items


def like_contains(fragment: str, *, escape: str = "!") -> str:
    """``LIKE`` pattern matching ``fragment`` anywhere, wildcards taken literally.

    Pair with ``ESCAPE '!'`` in the query.
    """
    for ch in (escape, "%", "_"):
        fragment = fragment.replace(ch, escape + ch)
    return f"%{fragment}%"
