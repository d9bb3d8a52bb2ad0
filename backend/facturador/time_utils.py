from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_iso() -> str:
    return utcnow().date().isoformat()


def epoch_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse the date part of an ISO-8601 string.

    - None / "" -> None
    - "YYYY-MM-DD" and full datetimes ("...T10:00:00Z") are both accepted
    - Anything else raises ValueError
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None

    if "T" in s:
        s = s.split("T", 1)[0]

    return date.fromisoformat(s)


def add_days_iso(value: str, days: int) -> str:
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError("date is required")
    return (parsed + timedelta(days=days)).isoformat()


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
