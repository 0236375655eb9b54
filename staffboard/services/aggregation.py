from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time

from staffboard.models import (
    AttendanceStatus,
    BreakInterval,
    BreakSummary,
    BreakType,
    BreakTypeSummary,
    DailyAttendance,
    DerivedDailyReport,
    DisplayStatus,
    Employee,
    Lateness,
    NormalizedDay,
    PeriodSummary,
)
from staffboard.services.timeutils import (
    MS_PER_MINUTE,
    combine_local,
    duration_hours,
    duration_ms,
    expected_working_days,
    round_half_up,
)

logger = logging.getLogger("staffboard.aggregation")

SURFACED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.ON_BREAK})


def break_duration_hours(interval: BreakInterval, now: datetime) -> float:
    # Open breaks accrue against `now`; a start after `now` clamps to zero.
    end = interval.end if interval.end is not None else now
    return duration_hours(interval.start, end)


def aggregate_break_hours(breaks: Iterable[BreakInterval], now: datetime) -> float:
    return sum((break_duration_hours(item, now) for item in breaks), 0.0)


def summarize_breaks(breaks: Iterable[BreakInterval], now: datetime) -> BreakSummary:
    counts: dict[BreakType, int] = {}
    minutes: dict[BreakType, float] = {}
    for item in breaks:
        counts[item.type] = counts.get(item.type, 0) + 1
        minutes[item.type] = minutes.get(item.type, 0.0) + break_duration_hours(item, now) * 60
    return {
        break_type: BreakTypeSummary(count=counts[break_type], total_minutes=minutes[break_type])
        for break_type in counts
    }


def is_surfaced(record: DailyAttendance) -> bool:
    return record.clock_in is not None or record.status in SURFACED_STATUSES


def filter_surfaced(records: Iterable[DailyAttendance]) -> list[DailyAttendance]:
    return [record for record in records if is_surfaced(record)]


def normalize_day(record: DailyAttendance, now: datetime) -> NormalizedDay:
    break_hours = aggregate_break_hours(record.breaks, now)

    if record.clock_in is None:
        if record.clock_out is not None:
            logger.warning(
                "clock_out_without_clock_in",
                extra={"attendance_id": record.attendance_id, "employee_ref": record.employee_ref},
            )
        return NormalizedDay(
            worked_hours=0.0,
            break_hours=break_hours,
            total_hours=break_hours,
            display_status=DisplayStatus.ABSENT,
        )

    if record.clock_out is None:
        session_end = now
        display_status = DisplayStatus.ON_BREAK if record.has_open_break else DisplayStatus.ACTIVE
    else:
        session_end = record.clock_out
        display_status = DisplayStatus.COMPLETED

    worked_hours = duration_hours(record.clock_in, session_end) - break_hours
    if worked_hours < 0:
        logger.warning(
            "break_exceeds_session",
            extra={
                "attendance_id": record.attendance_id,
                "employee_ref": record.employee_ref,
                "break_hours": break_hours,
            },
        )
        worked_hours = 0.0

    return NormalizedDay(
        worked_hours=worked_hours,
        break_hours=break_hours,
        total_hours=worked_hours + break_hours,
        display_status=display_status,
    )


def evaluate_lateness(
    *,
    clock_in: datetime | None,
    start_time: time | None,
    local_date: date,
    offset_minutes: int,
) -> Lateness | None:
    """Minutes past the configured start time, or None when undefined.

    Undefined covers a missing clock-in and an employee without a start
    time; such days are left out of lateness statistics.
    """
    if clock_in is None or start_time is None:
        return None
    expected_start = combine_local(local_date, start_time, offset_minutes)
    late_minutes = max(0, round_half_up(duration_ms(expected_start, clock_in) / MS_PER_MINUTE))
    return Lateness(late_minutes=late_minutes, is_late=late_minutes > 0)


def build_daily_report(
    record: DailyAttendance,
    employee: Employee,
    *,
    now: datetime,
    offset_minutes: int,
) -> DerivedDailyReport:
    normalized = normalize_day(record, now)
    lateness = evaluate_lateness(
        clock_in=record.clock_in,
        start_time=employee.start_time,
        local_date=record.date,
        offset_minutes=offset_minutes,
    )
    hourly_wage = max(0.0, float(employee.hourly_wage))
    return DerivedDailyReport(
        date=record.date,
        clock_in=record.clock_in,
        clock_out=record.clock_out,
        worked_hours=normalized.worked_hours,
        break_hours=normalized.break_hours,
        total_hours=normalized.total_hours,
        late_minutes=lateness.late_minutes if lateness else 0,
        is_late=lateness.is_late if lateness else False,
        hourly_wage=hourly_wage,
        total_wage=normalized.worked_hours * hourly_wage,
        display_status=normalized.display_status,
        lateness_known=lateness is not None,
        breaks=summarize_breaks(record.breaks, now),
    )


def summarize_period(
    days: Sequence[DerivedDailyReport],
    *,
    start_date: date,
    end_date: date,
    hourly_wage: float | None = None,
) -> PeriodSummary:
    if not days:
        return PeriodSummary()

    total_worked_hours = sum((day.worked_hours for day in days), 0.0)
    total_break_hours = sum((day.break_hours for day in days), 0.0)
    if hourly_wage is None:
        total_wage = sum((day.total_wage for day in days), 0.0)
    else:
        rate = max(0.0, float(hourly_wage))
        total_wage = sum((day.worked_hours * rate for day in days), 0.0)
    late_days = sum(1 for day in days if day.lateness_known and day.is_late)

    expected_days = expected_working_days(start_date, end_date)
    attendance_rate = (len(days) / expected_days) * 100 if expected_days > 0 else 0.0

    return PeriodSummary(
        total_days=len(days),
        total_worked_hours=total_worked_hours,
        total_break_hours=total_break_hours,
        total_wage=total_wage,
        average_hours_per_day=total_worked_hours / len(days),
        late_days=late_days,
        attendance_rate=attendance_rate,
    )
