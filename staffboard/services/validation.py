from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from staffboard.models import (
    AttendanceStatus,
    BreakInterval,
    BreakType,
    DailyAttendance,
    Employee,
    EmployeeRole,
)
from staffboard.services.timeutils import parse_civil_time, to_local_civil_date, to_utc

logger = logging.getLogger("staffboard.backend")


@dataclass(frozen=True)
class RecordRejected:
    """A backend row that could not be turned into a domain record."""

    reason: str
    errors: list[str] = field(default_factory=list)
    payload: Any = None


class RawBreak(BaseModel):
    model_config = ConfigDict(extra="ignore")

    break_type: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    duration_minutes: float | None = None
    count: int | None = None


class RawAttendance(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    attendance_id: str | None = None
    employee: str | None = None
    employee_id: int | None = None
    day: date | None = Field(default=None, alias="date")
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    status: str | None = None
    breaks: list[RawBreak] | None = None

    @field_validator("attendance_id", "employee", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("clock_in", "clock_out", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RawEmployee(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    qr_id: str | None = None
    hourly_wage: float | None = None
    role: str | None = None
    start_time: str | None = None
    created_at: datetime | None = None


def _error_messages(exc: ValidationError) -> list[str]:
    messages: list[str] = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return messages


def _parse_status(raw: str | None) -> AttendanceStatus | None:
    normalized = (raw or "").strip().lower()
    for member in AttendanceStatus:
        if member.value == normalized:
            return member
    return None


def _to_break_intervals(raw: RawBreak, *, anchor: datetime | None) -> list[BreakInterval]:
    break_type = BreakType.parse(raw.break_type)
    start = to_utc(raw.start)
    if start is not None:
        return [BreakInterval(type=break_type, start=start, end=to_utc(raw.end))]

    # Report rows carry per-type summaries ({duration_minutes, count}); lay them
    # out back to back from the clock-in, splitting the total evenly.
    if raw.duration_minutes is None or anchor is None:
        return []
    count = max(1, raw.count or 1)
    step = timedelta(minutes=max(0.0, raw.duration_minutes) / count)
    return [
        BreakInterval(type=break_type, start=anchor + step * index, end=anchor + step * (index + 1))
        for index in range(count)
    ]


def to_daily_attendance(raw: RawAttendance, *, fallback_date: date, offset_minutes: int) -> DailyAttendance:
    clock_in = to_utc(raw.clock_in)
    clock_out = to_utc(raw.clock_out)

    if raw.day is not None:
        day = raw.day
    elif clock_in is not None:
        day = to_local_civil_date(clock_in, offset_minutes)
    else:
        day = fallback_date

    breaks: list[BreakInterval] = []
    for raw_break in raw.breaks or []:
        intervals = _to_break_intervals(raw_break, anchor=clock_in)
        if not intervals:
            logger.warning(
                "break_without_start_dropped",
                extra={"attendance_id": raw.attendance_id, "break_type": raw_break.break_type},
            )
            continue
        breaks.extend(intervals)

    employee_ref = raw.employee or (str(raw.employee_id) if raw.employee_id is not None else "")
    return DailyAttendance(
        employee_ref=employee_ref,
        date=day,
        clock_in=clock_in,
        clock_out=clock_out,
        breaks=tuple(breaks),
        status=_parse_status(raw.status),
        attendance_id=raw.attendance_id,
    )


def parse_attendance(
    payload: Any,
    *,
    fallback_date: date,
    offset_minutes: int,
) -> DailyAttendance | RecordRejected:
    if not isinstance(payload, dict):
        return RecordRejected(reason="NOT_AN_OBJECT", payload=payload)
    try:
        raw = RawAttendance.model_validate(payload)
    except ValidationError as exc:
        return RecordRejected(reason="INVALID_ATTENDANCE", errors=_error_messages(exc), payload=payload)
    return to_daily_attendance(raw, fallback_date=fallback_date, offset_minutes=offset_minutes)


def parse_attendance_rows(
    rows: Any,
    *,
    fallback_date: date,
    offset_minutes: int,
) -> list[DailyAttendance]:
    if not isinstance(rows, list):
        logger.warning("attendance_payload_not_a_list", extra={"payload_type": type(rows).__name__})
        return []

    records: list[DailyAttendance] = []
    for row in rows:
        result = parse_attendance(row, fallback_date=fallback_date, offset_minutes=offset_minutes)
        if isinstance(result, RecordRejected):
            logger.warning(
                "attendance_row_rejected",
                extra={"reason": result.reason, "errors": result.errors},
            )
            continue
        records.append(result)
    return records


def parse_employee(payload: Any) -> Employee | RecordRejected:
    if not isinstance(payload, dict):
        return RecordRejected(reason="NOT_AN_OBJECT", payload=payload)
    try:
        raw = RawEmployee.model_validate(payload)
    except ValidationError as exc:
        return RecordRejected(reason="INVALID_EMPLOYEE", errors=_error_messages(exc), payload=payload)

    role = EmployeeRole.ADMIN if (raw.role or "").strip().lower() == "admin" else EmployeeRole.EMPLOYEE
    start_time = parse_civil_time(raw.start_time)
    if start_time is None:
        logger.info("employee_start_time_missing", extra={"employee_id": raw.id})
    return Employee(
        id=raw.id,
        name=raw.name,
        hourly_wage=raw.hourly_wage or 0.0,
        start_time=start_time,
        qr_id=raw.qr_id or "",
        role=role,
        created_at=to_utc(raw.created_at),
    )


def parse_employee_rows(payload: Any) -> list[Employee]:
    if isinstance(payload, dict):
        rows = payload.get("employees")
    else:
        rows = payload
    if not isinstance(rows, list):
        logger.warning("employee_payload_invalid", extra={"payload_type": type(payload).__name__})
        return []

    employees: list[Employee] = []
    for row in rows:
        result = parse_employee(row)
        if isinstance(result, RecordRejected):
            logger.warning(
                "employee_row_rejected",
                extra={"reason": result.reason, "errors": result.errors},
            )
            continue
        employees.append(result)
    return employees
