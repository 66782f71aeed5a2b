"""
Time helpers.

RV Planner stores `createdAt` / `exportDate` as timezone-aware ISO timestamps so JSON
documents written on different machines compare and sort consistently.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, tz_name: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `tz_name` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(tz_name))
    return dt


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of `dt` in `tz_name` (naive values are taken as UTC)."""
    return ensure_tz(dt, "UTC").astimezone(ZoneInfo(tz_name)).date()
