from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse an ISO-8601 date or datetime string into a date."""
    value = value.strip()
    if len(value) == 10:
        return datetime.strptime(value, "%Y-%m-%d").date()
    return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def calculate_service_years(joining_date: date, end_date: Optional[date] = None, *, today: Optional[date] = None) -> float:
    """Years of service, truncated to two decimals (365-day years).

    ``end_date`` is the retirement date; without it service runs until today.
    """
    end = end_date or today or now_local().date()
    years = (end - joining_date).days / 365
    return math.floor(years * 100) / 100


def days_since(moment: datetime, *, now: Optional[datetime] = None) -> int:
    now = now or now_local()
    return math.ceil(abs((now - moment).total_seconds()) / 86400)


def iso(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()
