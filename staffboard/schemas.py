from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from staffboard.models import BreakType, DateRangePreset, DisplayStatus
from staffboard.services.timeutils import format_civil_time, parse_civil_time
from staffboard.settings import get_settings


class EmployeeRead(BaseModel):
    id: int
    name: str
    qr_id: str
    hourly_wage: float
    role: Literal["admin", "employee"]
    start_time: str | None = None
    created_at: datetime | None = None


class EmployeeWrite(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    qr_id: str = Field(min_length=1, max_length=255)
    hourly_wage: float = Field(ge=0)
    role: Literal["admin", "employee"] = "employee"
    start_time: str = Field(default_factory=lambda: get_settings().default_start_time)

    @field_validator("name", "qr_id")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Value must not be blank.")
        return normalized

    @field_validator("start_time")
    @classmethod
    def _validate_start_time(cls, value: str) -> str:
        parsed = parse_civil_time(value)
        if parsed is None:
            raise ValueError("start_time must be HH:MM.")
        return format_civil_time(parsed)


class EmployeeDeleteResponse(BaseModel):
    ok: bool
    id: int


class AttendanceUpdateRequest(BaseModel):
    clock_in: datetime | None = None
    clock_out: datetime | None = None

    @model_validator(mode="after")
    def _validate_order(self) -> "AttendanceUpdateRequest":
        if self.clock_out is not None and self.clock_in is None:
            raise ValueError("clock_out requires clock_in.")
        if self.clock_in is not None and self.clock_out is not None and self.clock_out < self.clock_in:
            raise ValueError("clock_out must not be before clock_in.")
        return self


class BreakWrite(BaseModel):
    break_type: BreakType
    start: datetime
    end: datetime | None = None

    @model_validator(mode="after")
    def _validate_interval(self) -> "BreakWrite":
        if self.end is not None and self.end < self.start:
            raise ValueError("Break end must not be before its start.")
        return self


class BreaksUpdateRequest(BaseModel):
    breaks: list[BreakWrite] = Field(default_factory=list)


class AttendanceUpdateResponse(BaseModel):
    ok: bool
    attendance_id: str


class BreakRead(BaseModel):
    break_type: BreakType
    start: datetime
    end: datetime | None = None
    duration_minutes: float
    is_open: bool


class DailyAttendanceRead(BaseModel):
    attendance_id: str | None = None
    employee: str
    date: date
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    status: str | None = None
    display_status: DisplayStatus
    worked_hours: float
    break_hours: float
    total_hours: float
    worked_display: str
    break_display: str
    breaks: list[BreakRead] = Field(default_factory=list)


class BreakSummaryRead(BaseModel):
    break_type: BreakType
    count: int
    duration_minutes: float


class ReportDayRead(BaseModel):
    date: date
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    total_worked_hours: float
    total_break_hours: float
    total_hours: float
    hourly_wage: float
    total_wage: float
    late_minutes: int
    is_late: bool
    lateness_known: bool
    display_status: DisplayStatus
    breaks: list[BreakSummaryRead] = Field(default_factory=list)


class PeriodSummaryRead(BaseModel):
    total_days: int
    total_worked_hours: float
    total_break_hours: float
    total_wage: float
    average_hours_per_day: float
    late_days: int
    attendance_rate: float


class EmployeeReportResponse(BaseModel):
    employee: EmployeeRead
    date_range: DateRangePreset
    start_date: date
    end_date: date
    days: list[ReportDayRead]
    summary: PeriodSummaryRead


class HealthResponse(BaseModel):
    status: str
    app_name: str
    backend_api_url: str
    business_utc_offset_minutes: int
