from __future__ import annotations

import logging
from calendar import monthrange
from datetime import date, datetime, time, timedelta, timezone
from math import floor

from staffboard.models import DateRangePreset

logger = logging.getLogger("staffboard.timeutils")

MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def business_timezone(offset_minutes: int) -> timezone:
    return timezone(timedelta(minutes=offset_minutes))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return _as_utc(value)


def to_local_civil_date(instant: datetime, offset_minutes: int) -> date:
    """Bucket an instant into the business day of a fixed UTC offset.

    Naive datetimes are taken as UTC, so the host timezone never leaks in.
    """
    return (_as_utc(instant) + timedelta(minutes=offset_minutes)).date()


def local_today(now: datetime, offset_minutes: int) -> date:
    return to_local_civil_date(now, offset_minutes)


def combine_local(day: date, time_of_day: time, offset_minutes: int) -> datetime:
    return datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=business_timezone(offset_minutes))


def duration_ms(start: datetime, end: datetime) -> float:
    return (_as_utc(end) - _as_utc(start)).total_seconds() * 1000


def duration_hours(start: datetime, end: datetime) -> float:
    elapsed_ms = duration_ms(start, end)
    if elapsed_ms < 0:
        logger.warning(
            "negative_duration_clamped",
            extra={"start": start.isoformat(), "end": end.isoformat(), "elapsed_ms": elapsed_ms},
        )
        return 0.0
    return elapsed_ms / MS_PER_HOUR


def format_hours_minutes(hours: float) -> tuple[int, int]:
    safe_hours = max(0.0, hours)
    whole = int(floor(safe_hours))
    minutes = round_half_up((safe_hours - whole) * 60)
    if minutes == 60:
        return whole + 1, 0
    return whole, minutes


def format_duration(hours: float) -> str:
    whole, minutes = format_hours_minutes(hours)
    return f"{whole}h {minutes}m"


def format_clock(instant: datetime | None, offset_minutes: int) -> str:
    if instant is None:
        return ""
    return _as_utc(instant).astimezone(business_timezone(offset_minutes)).strftime("%H:%M")


def parse_civil_time(raw: str | time | None) -> time | None:
    if raw is None:
        return None
    if isinstance(raw, time):
        return raw.replace(tzinfo=None)
    value = raw.strip()
    if not value:
        return None
    parts = value.split(":")
    if len(parts) not in {2, 3} or not all(part.isdigit() for part in parts):
        return None
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def format_civil_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def iter_dates(start_date: date, end_date: date):
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def expected_working_days(start_date: date, end_date: date) -> int:
    # Monday..Friday only; weekends never count.
    return sum(1 for day in iter_dates(start_date, end_date) if day.weekday() < 5)


def week_bounds(day: date) -> tuple[date, date]:
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    last_day = monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def resolve_date_range(
    preset: DateRangePreset | str,
    *,
    today: date,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[date, date]:
    preset = DateRangePreset(preset)
    if preset == DateRangePreset.DAY:
        return today, today
    if preset == DateRangePreset.WEEK:
        return week_bounds(today)
    if preset == DateRangePreset.MONTH:
        return month_bounds(today)

    if start_date is None or end_date is None:
        raise ValueError("start_date and end_date are required for a custom range.")
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date.")
    return start_date, end_date
