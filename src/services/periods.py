"""
Date range helpers for payroll periods.

Calendar events are naive local datetimes (CALENDAR_TIMEZONE), so every
period bound is brought to the same form before comparing.
"""

import calendar
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from core.config import CALENDAR_TIMEZONE

DEFAULT_PERIOD_WEEKS = 2


def to_local_naive(value: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(tz or ZoneInfo(CALENDAR_TIMEZONE)).replace(tzinfo=None)


def day_start(d: date) -> datetime:
    return datetime.combine(d, time(0, 0, 0))


def day_end(d: date) -> datetime:
    return datetime.combine(d, time(23, 59, 59))


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """First second to last second of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return day_start(date(year, month, 1)), day_end(date(year, month, last_day))


def previous_month(d: date) -> tuple[int, int]:
    if d.month == 1:
        return d.year - 1, 12
    return d.year, d.month - 1


def default_period(today: date | None = None) -> dict:
    """Last two weeks up to the end of today."""
    today = today or date.today()
    return {
        "name": "Last Two Weeks",
        "start_date": day_start(today - timedelta(weeks=DEFAULT_PERIOD_WEEKS)),
        "end_date": day_end(today),
    }


def common_periods(today: date | None = None) -> list[dict]:
    """
    Periods offered to the user: current month, previous month,
    last 30 days and current week (Monday to Sunday).
    """
    today = today or date.today()
    current_start, current_end = month_range(today.year, today.month)
    prev_start, prev_end = month_range(*previous_month(today))
    monday = today - timedelta(days=today.weekday())

    return [
        {"name": "Current Month", "start_date": current_start, "end_date": current_end},
        {"name": "Previous Month", "start_date": prev_start, "end_date": prev_end},
        {
            "name": "Last 30 Days",
            "start_date": day_start(today - timedelta(days=30)),
            "end_date": day_end(today),
        },
        {
            "name": "Current Week",
            "start_date": day_start(monday),
            "end_date": day_end(monday + timedelta(days=6)),
        },
    ]
