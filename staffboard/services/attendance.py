from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from staffboard.models import DailyAttendance
from staffboard.schemas import (
    AttendanceUpdateRequest,
    BreakRead,
    BreaksUpdateRequest,
    DailyAttendanceRead,
)
from staffboard.services.aggregation import break_duration_hours, filter_surfaced, normalize_day
from staffboard.services.timeutils import format_duration, to_utc
from staffboard.services.validation import parse_attendance_rows

logger = logging.getLogger("staffboard.attendance")


def _isoformat_utc(value: datetime | None) -> str | None:
    utc_value = to_utc(value)
    if utc_value is None:
        return None
    return utc_value.isoformat().replace("+00:00", "Z")


def to_daily_attendance_read(record: DailyAttendance, *, now: datetime) -> DailyAttendanceRead:
    normalized = normalize_day(record, now)
    return DailyAttendanceRead(
        attendance_id=record.attendance_id,
        employee=record.employee_ref,
        date=record.date,
        clock_in=record.clock_in,
        clock_out=record.clock_out,
        status=record.status.value if record.status is not None else None,
        display_status=normalized.display_status,
        worked_hours=normalized.worked_hours,
        break_hours=normalized.break_hours,
        total_hours=normalized.total_hours,
        worked_display=format_duration(normalized.worked_hours),
        break_display=format_duration(normalized.break_hours),
        breaks=[
            BreakRead(
                break_type=item.type,
                start=item.start,
                end=item.end,
                duration_minutes=break_duration_hours(item, now) * 60,
                is_open=item.is_open,
            )
            for item in record.breaks
        ],
    )


def build_daily_attendance_view(
    rows: Any,
    *,
    day: date,
    now: datetime,
    offset_minutes: int,
) -> list[DailyAttendanceRead]:
    records = parse_attendance_rows(rows, fallback_date=day, offset_minutes=offset_minutes)
    surfaced = filter_surfaced(records)
    logger.info(
        "daily_attendance_view",
        extra={"date": day.isoformat(), "received": len(records), "surfaced": len(surfaced)},
    )
    return [to_daily_attendance_read(record, now=now) for record in surfaced]


def build_attendance_update_payload(payload: AttendanceUpdateRequest) -> dict[str, Any]:
    # Administrative edits always mark the row present on the backend.
    return {
        "clock_in": _isoformat_utc(payload.clock_in),
        "clock_out": _isoformat_utc(payload.clock_out),
        "status": "present",
    }


def build_breaks_update_payload(payload: BreaksUpdateRequest) -> list[dict[str, Any]]:
    return [
        {
            "break_type": item.break_type.value,
            "start": _isoformat_utc(item.start),
            "end": _isoformat_utc(item.end),
        }
        for item in payload.breaks
    ]

