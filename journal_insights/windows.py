from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, TypeVar

T = TypeVar("T")


def within(records: Iterable[T], start: datetime, end: datetime, key: str = "created_at") -> list[T]:
    """Records whose ``key`` timestamp lies in ``[start, end]``, order preserved."""
    return [r for r in records if start <= getattr(r, key) <= end]


def window_for_days(days: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    end = now or datetime.now(timezone.utc)
    return end - timedelta(days=days), end


def _months_back(dt: datetime, months: int) -> datetime:
    month_index = dt.month - 1 - months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def window_for_period(period: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    end = now or datetime.now(timezone.utc)
    if period == "weekly":
        return end - timedelta(days=7), end
    return _months_back(end, 1), end


# Calendar keys are UTC dates so the previous-day lookup does not depend on
# the server's locale.

def day_key(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).date().isoformat()


def previous_day_key(dt: datetime) -> str:
    return (dt.astimezone(timezone.utc).date() - timedelta(days=1)).isoformat()


def week_start(dt: datetime) -> date:
    d = dt.astimezone(timezone.utc).date()
    # weekday(): Monday=0 .. Sunday=6; weeks start on Sunday
    return d - timedelta(days=(d.weekday() + 1) % 7)


def week_key(dt: datetime) -> str:
    return week_start(dt).isoformat()


def display_date(value: datetime | date | str) -> str:
    """US-style ``M/D/YYYY`` used in recap prose."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return f"{value.month}/{value.day}/{value.year}"


def month_label(dt: datetime) -> str:
    return dt.strftime("%B %Y")
