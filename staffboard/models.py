from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time


class BreakType(str, enum.Enum):
    EATING = "eating"
    RESTROOM = "restroom"
    PRAYING = "praying"
    COFFEE = "coffee"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> "BreakType":
        normalized = (raw or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.OTHER


class AttendanceStatus(str, enum.Enum):
    ACTIVE = "active"
    PRESENT = "present"
    ON_BREAK = "on_break"
    COMPLETED = "completed"


class DisplayStatus(str, enum.Enum):
    ABSENT = "absent"
    ACTIVE = "active"
    ON_BREAK = "on_break"
    COMPLETED = "completed"


class EmployeeRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class DateRangePreset(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


@dataclass(frozen=True)
class BreakInterval:
    type: BreakType
    start: datetime
    end: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.end is None


@dataclass(frozen=True)
class DailyAttendance:
    employee_ref: str
    date: date
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    breaks: tuple[BreakInterval, ...] = ()
    status: AttendanceStatus | None = None
    attendance_id: str | None = None

    @property
    def has_open_break(self) -> bool:
        return any(item.is_open for item in self.breaks)


@dataclass(frozen=True)
class Employee:
    id: int
    name: str
    hourly_wage: float
    start_time: time | None = None
    qr_id: str = ""
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    created_at: datetime | None = None


@dataclass(frozen=True)
class BreakTypeSummary:
    count: int
    total_minutes: float


BreakSummary = dict[BreakType, BreakTypeSummary]


@dataclass(frozen=True)
class NormalizedDay:
    worked_hours: float
    break_hours: float
    total_hours: float
    display_status: DisplayStatus


@dataclass(frozen=True)
class Lateness:
    late_minutes: int
    is_late: bool


@dataclass(frozen=True)
class DerivedDailyReport:
    date: date
    clock_in: datetime | None
    clock_out: datetime | None
    worked_hours: float
    break_hours: float
    total_hours: float
    late_minutes: int
    is_late: bool
    hourly_wage: float
    total_wage: float
    display_status: DisplayStatus = DisplayStatus.COMPLETED
    lateness_known: bool = True
    breaks: BreakSummary = field(default_factory=dict)


@dataclass(frozen=True)
class PeriodSummary:
    total_days: int = 0
    total_worked_hours: float = 0.0
    total_break_hours: float = 0.0
    total_wage: float = 0.0
    average_hours_per_day: float = 0.0
    late_days: int = 0
    attendance_rate: float = 0.0
