from datetime import date, datetime, time, timedelta, timezone
import unittest

from staffboard.models import AttendanceStatus, BreakType, DailyAttendance, EmployeeRole
from staffboard.services.validation import (
    RecordRejected,
    parse_attendance,
    parse_attendance_rows,
    parse_employee,
    parse_employee_rows,
)

FALLBACK_DAY = date(2026, 2, 2)


def _daily_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "attendance_id": 12,
        "employee": "Jin",
        "clock_in": "2026-02-02T00:05:00Z",
        "clock_out": None,
        "status": "on_break",
        "break_time": 0.25,
        "total_hours": 3.1,
        "breaks": [
            {
                "break_type": "eating",
                "start": "2026-02-02T03:00:00Z",
                "end": "2026-02-02T03:15:00Z",
                "duration_minutes": 15,
            },
            {"break_type": "break", "start": "2026-02-02T04:00:00Z", "end": None},
        ],
    }
    row.update(overrides)
    return row


class AttendanceValidationTests(unittest.TestCase):
    def test_daily_row_becomes_domain_record(self) -> None:
        result = parse_attendance(_daily_row(), fallback_date=date(2026, 1, 1), offset_minutes=540)

        self.assertIsInstance(result, DailyAttendance)
        self.assertEqual(result.attendance_id, "12")
        self.assertEqual(result.employee_ref, "Jin")
        self.assertEqual(result.date, date(2026, 2, 2))
        self.assertEqual(result.clock_in, datetime(2026, 2, 2, 0, 5, tzinfo=timezone.utc))
        self.assertIsNone(result.clock_out)
        self.assertEqual(result.status, AttendanceStatus.ON_BREAK)
        self.assertEqual([item.type for item in result.breaks], [BreakType.EATING, BreakType.OTHER])
        self.assertTrue(result.has_open_break)

    def test_invalid_timestamp_is_rejected_not_raised(self) -> None:
        result = parse_attendance(
            _daily_row(clock_in="not-a-date"),
            fallback_date=FALLBACK_DAY,
            offset_minutes=540,
        )

        self.assertIsInstance(result, RecordRejected)
        self.assertEqual(result.reason, "INVALID_ATTENDANCE")
        self.assertTrue(any("clock_in" in message for message in result.errors))

    def test_non_object_payload_is_rejected(self) -> None:
        result = parse_attendance(["x"], fallback_date=FALLBACK_DAY, offset_minutes=540)

        self.assertIsInstance(result, RecordRejected)
        self.assertEqual(result.reason, "NOT_AN_OBJECT")

    def test_missing_clock_in_uses_fallback_date(self) -> None:
        result = parse_attendance(
            {"attendance_id": "a-1", "employee": "Bo", "clock_in": "", "status": "present", "breaks": None},
            fallback_date=FALLBACK_DAY,
            offset_minutes=540,
        )

        self.assertEqual(result.date, FALLBACK_DAY)
        self.assertIsNone(result.clock_in)
        self.assertEqual(result.status, AttendanceStatus.PRESENT)
        self.assertEqual(result.breaks, ())

    def test_explicit_report_date_wins(self) -> None:
        result = parse_attendance(
            {"date": "2026-02-03", "clock_in": "2026-02-02T16:00:00Z"},
            fallback_date=FALLBACK_DAY,
            offset_minutes=0,
        )

        self.assertEqual(result.date, date(2026, 2, 3))

    def test_naive_timestamps_are_utc(self) -> None:
        result = parse_attendance(
            {"employee": "Bo", "clock_in": "2026-02-02T00:00:00"},
            fallback_date=FALLBACK_DAY,
            offset_minutes=540,
        )

        self.assertEqual(result.clock_in, datetime(2026, 2, 2, tzinfo=timezone.utc))

    def test_duration_only_break_is_anchored_at_clock_in(self) -> None:
        result = parse_attendance(
            {
                "date": "2026-02-02",
                "clock_in": "2026-02-02T00:00:00Z",
                "clock_out": "2026-02-02T08:00:00Z",
                "breaks": [{"break_type": "coffee", "duration_minutes": 20, "count": 2}],
            },
            fallback_date=FALLBACK_DAY,
            offset_minutes=540,
        )

        self.assertEqual(len(result.breaks), 2)
        first, second = result.breaks
        self.assertEqual(first.type, BreakType.COFFEE)
        self.assertEqual(first.start, datetime(2026, 2, 2, tzinfo=timezone.utc))
        self.assertEqual(first.end, second.start)
        self.assertEqual(second.end - first.start, timedelta(minutes=20))

    def test_break_summary_without_count_is_one_interval(self) -> None:
        result = parse_attendance(
            {
                "date": "2026-02-02",
                "clock_in": "2026-02-02T00:00:00Z",
                "breaks": [{"break_type": "eating", "duration_minutes": 45}],
            },
            fallback_date=FALLBACK_DAY,
            offset_minutes=540,
        )

        self.assertEqual(len(result.breaks), 1)
        self.assertEqual(result.breaks[0].end - result.breaks[0].start, timedelta(minutes=45))

    def test_break_without_start_or_duration_is_dropped(self) -> None:
        with self.assertLogs("staffboard.backend", level="WARNING"):
            result = parse_attendance(
                {"employee": "Bo", "clock_in": None, "breaks": [{"break_type": "coffee"}]},
                fallback_date=FALLBACK_DAY,
                offset_minutes=540,
            )

        self.assertEqual(result.breaks, ())

    def test_rows_skip_rejected_entries(self) -> None:
        rows = [_daily_row(), _daily_row(clock_out="garbage"), 42]

        with self.assertLogs("staffboard.backend", level="WARNING"):
            records = parse_attendance_rows(rows, fallback_date=FALLBACK_DAY, offset_minutes=540)

        self.assertEqual(len(records), 1)

    def test_non_list_rows_yield_nothing(self) -> None:
        with self.assertLogs("staffboard.backend", level="WARNING"):
            records = parse_attendance_rows({"error": "x"}, fallback_date=FALLBACK_DAY, offset_minutes=540)

        self.assertEqual(records, [])


class EmployeeValidationTests(unittest.TestCase):
    def test_employee_with_start_time(self) -> None:
        result = parse_employee(
            {
                "id": "3",
                "name": "Jin",
                "qr_id": "EMP-3",
                "hourly_wage": "10030",
                "role": "admin",
                "start_time": "09:30",
                "created_at": "2026-01-10T00:00:00Z",
                "otp": "123456",
            }
        )

        self.assertEqual(result.id, 3)
        self.assertEqual(result.hourly_wage, 10030.0)
        self.assertEqual(result.start_time, time(9, 30))
        self.assertEqual(result.role, EmployeeRole.ADMIN)

    def test_missing_start_time_is_allowed(self) -> None:
        result = parse_employee({"id": 4, "name": "Bo", "hourly_wage": None, "qr_id": None})

        self.assertIsNone(result.start_time)
        self.assertEqual(result.hourly_wage, 0.0)
        self.assertEqual(result.qr_id, "")
        self.assertEqual(result.role, EmployeeRole.EMPLOYEE)

    def test_employee_without_id_is_rejected(self) -> None:
        result = parse_employee({"name": "Nobody"})

        self.assertIsInstance(result, RecordRejected)
        self.assertEqual(result.reason, "INVALID_EMPLOYEE")

    def test_wrapped_employee_list(self) -> None:
        payload = {
            "employees": [
                {"id": 1, "name": "Jin", "hourly_wage": 10000, "start_time": "09:00"},
                {"name": "broken"},
            ]
        }

        with self.assertLogs("staffboard.backend", level="WARNING"):
            employees = parse_employee_rows(payload)

        self.assertEqual([employee.id for employee in employees], [1])


if __name__ == "__main__":
    unittest.main()
