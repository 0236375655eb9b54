from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from staffboard.errors import ApiError
from staffboard.models import DateRangePreset, DerivedDailyReport, Employee, PeriodSummary
from staffboard.schemas import (
    BreakSummaryRead,
    EmployeeRead,
    EmployeeReportResponse,
    PeriodSummaryRead,
    ReportDayRead,
)
from staffboard.services.aggregation import build_daily_report, filter_surfaced, summarize_period
from staffboard.services.timeutils import format_civil_time, local_today, resolve_date_range
from staffboard.services.validation import parse_attendance_rows, parse_employee_rows

logger = logging.getLogger("staffboard.reports")


@dataclass(frozen=True)
class EmployeeReport:
    employee: Employee
    date_range: DateRangePreset
    start_date: date
    end_date: date
    days: list[DerivedDailyReport]
    summary: PeriodSummary


def resolve_report_range(
    preset: DateRangePreset,
    *,
    now: datetime,
    offset_minutes: int,
    start_date: date | None,
    end_date: date | None,
) -> tuple[date, date]:
    try:
        return resolve_date_range(
            preset,
            today=local_today(now, offset_minutes),
            start_date=start_date,
            end_date=end_date,
        )
    except ValueError as exc:
        raise ApiError(status_code=422, code="VALIDATION_ERROR", message=str(exc)) from exc


def find_employee(payload: Any, employee_id: int) -> Employee:
    for employee in parse_employee_rows(payload):
        if employee.id == employee_id:
            return employee
    raise ApiError(status_code=404, code="EMPLOYEE_NOT_FOUND", message="Employee not found.")


def build_employee_report(
    *,
    employee: Employee,
    rows: Any,
    date_range: DateRangePreset,
    start_date: date,
    end_date: date,
    now: datetime,
    offset_minutes: int,
) -> EmployeeReport:
    records = parse_attendance_rows(rows, fallback_date=start_date, offset_minutes=offset_minutes)
    in_range = [record for record in filter_surfaced(records) if start_date <= record.date <= end_date]
    if len(in_range) != len(records):
        logger.info(
            "report_rows_skipped",
            extra={"employee_id": employee.id, "received": len(records), "kept": len(in_range)},
        )
    in_range.sort(key=lambda record: (record.date, record.clock_in is None, record.clock_in))

    days = [
        build_daily_report(record, employee, now=now, offset_minutes=offset_minutes)
        for record in in_range
    ]
    summary = summarize_period(
        days,
        start_date=start_date,
        end_date=end_date,
    )
    return EmployeeReport(
        employee=employee,
        date_range=date_range,
        start_date=start_date,
        end_date=end_date,
        days=days,
        summary=summary,
    )


def to_employee_read(employee: Employee) -> EmployeeRead:
    return EmployeeRead(
        id=employee.id,
        name=employee.name,
        qr_id=employee.qr_id,
        hourly_wage=employee.hourly_wage,
        role=employee.role.value,
        start_time=format_civil_time(employee.start_time) if employee.start_time else None,
        created_at=employee.created_at,
    )


def to_report_day_read(day: DerivedDailyReport) -> ReportDayRead:
    return ReportDayRead(
        date=day.date,
        clock_in=day.clock_in,
        clock_out=day.clock_out,
        total_worked_hours=day.worked_hours,
        total_break_hours=day.break_hours,
        total_hours=day.total_hours,
        hourly_wage=day.hourly_wage,
        total_wage=day.total_wage,
        late_minutes=day.late_minutes,
        is_late=day.is_late,
        lateness_known=day.lateness_known,
        display_status=day.display_status,
        breaks=[
            BreakSummaryRead(
                break_type=break_type,
                count=summary.count,
                duration_minutes=summary.total_minutes,
            )
            for break_type, summary in day.breaks.items()
        ],
    )


def to_report_response(report: EmployeeReport) -> EmployeeReportResponse:
    summary = report.summary
    return EmployeeReportResponse(
        employee=to_employee_read(report.employee),
        date_range=report.date_range,
        start_date=report.start_date,
        end_date=report.end_date,
        days=[to_report_day_read(day) for day in report.days],
        summary=PeriodSummaryRead(
            total_days=summary.total_days,
            total_worked_hours=summary.total_worked_hours,
            total_break_hours=summary.total_break_hours,
            total_wage=summary.total_wage,
            average_hours_per_day=summary.average_hours_per_day,
            late_days=summary.late_days,
            attendance_rate=summary.attendance_rate,
        ),
    )
