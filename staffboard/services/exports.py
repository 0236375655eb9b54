from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from io import BytesIO, StringIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from staffboard.models import BreakSummary, DerivedDailyReport, Employee, PeriodSummary
from staffboard.services.timeutils import format_clock, format_duration, round_half_up

logger = logging.getLogger("staffboard.exports")

CSV_HEADERS = [
    "Date",
    "Clock In",
    "Clock Out",
    "Worked Hours",
    "Break Hours",
    "Total Hours",
    "Wage Rate",
    "Total Wage",
    "Late Minutes",
    "Breaks",
]

XLSX_HEADERS = [
    "Date",
    "Clock In",
    "Clock Out",
    "Worked",
    "Break",
    "Total",
    "Wage Rate",
    "Total Wage",
    "Late Minutes",
    "Status",
    "Breaks",
]

HEADER_FILL = PatternFill(fill_type="solid", fgColor="0B4F73")
META_LABEL_FILL = PatternFill(fill_type="solid", fgColor="EAF4F9")
META_VALUE_FILL = PatternFill(fill_type="solid", fgColor="F8FCFF")
ZEBRA_FILL = PatternFill(fill_type="solid", fgColor="F7FBFE")
ALERT_FILL = PatternFill(fill_type="solid", fgColor="FDE2E4")
SUMMARY_FILL = PatternFill(fill_type="solid", fgColor="E9F1F7")

HEADER_FONT = Font(bold=True, color="FFFFFF")
BOLD_FONT = Font(bold=True, color="0F172A")
TITLE_FONT = Font(bold=True, color="0B4F73", size=14)
MUTED_FONT = Font(color="334155")

THIN_SIDE = Side(style="thin", color="D5E2EC")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)


@dataclass(frozen=True)
class ParsedReportRow:
    date: date
    clock_in: str
    clock_out: str
    worked_hours: float
    break_hours: float
    total_hours: float
    wage_rate: float
    total_wage: float
    late_minutes: int
    breaks: list[tuple[str, int]]


def report_filename(employee_id: int, start_date: date, end_date: date, extension: str) -> str:
    return f"employee-report-{employee_id}-{start_date.isoformat()}-{end_date.isoformat()}.{extension}"


def format_breaks_cell(breaks: BreakSummary) -> str:
    return ";".join(
        f"{break_type.value}:{round_half_up(summary.total_minutes)}m" for break_type, summary in breaks.items()
    )


def _csv_row(day: DerivedDailyReport, offset_minutes: int) -> list[str]:
    return [
        day.date.isoformat(),
        format_clock(day.clock_in, offset_minutes),
        format_clock(day.clock_out, offset_minutes),
        f"{day.worked_hours:.2f}",
        f"{day.break_hours:.2f}",
        f"{day.total_hours:.2f}",
        f"{day.hourly_wage:.2f}",
        f"{day.total_wage:.2f}",
        str(day.late_minutes),
        format_breaks_cell(day.breaks),
    ]


def build_report_csv(days: Sequence[DerivedDailyReport], *, offset_minutes: int) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for day in days:
        writer.writerow(_csv_row(day, offset_minutes))
    # Rows are newline-joined with no trailing terminator.
    return buffer.getvalue().rstrip("\n")


def _parse_breaks_cell(value: str) -> list[tuple[str, int]]:
    items: list[tuple[str, int]] = []
    for chunk in value.split(";"):
        chunk = chunk.strip()
        if not chunk or ":" not in chunk:
            continue
        break_type, raw_minutes = chunk.split(":", 1)
        raw_minutes = raw_minutes.strip().removesuffix("m")
        if not raw_minutes.isdigit():
            continue
        items.append((break_type.strip(), int(raw_minutes)))
    return items


def parse_report_csv(text: str) -> list[ParsedReportRow]:
    reader = csv.DictReader(StringIO(text))
    if reader.fieldnames != CSV_HEADERS:
        raise ValueError(f"Unexpected report header: {reader.fieldnames}")

    rows: list[ParsedReportRow] = []
    for raw in reader:
        rows.append(
            ParsedReportRow(
                date=date.fromisoformat(raw["Date"]),
                clock_in=raw["Clock In"],
                clock_out=raw["Clock Out"],
                worked_hours=float(raw["Worked Hours"]),
                break_hours=float(raw["Break Hours"]),
                total_hours=float(raw["Total Hours"]),
                wage_rate=float(raw["Wage Rate"]),
                total_wage=float(raw["Total Wage"]),
                late_minutes=int(raw["Late Minutes"]),
                breaks=_parse_breaks_cell(raw["Breaks"] or ""),
            )
        )
    return rows


def _style_header(ws: Worksheet, row: int) -> None:
    for cell in ws[row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        max_len = 0
        col_letter = get_column_letter(column_cells[0].column)
        for cell in column_cells:
            if cell.coordinate in ws.merged_cells:
                continue
            value = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(value))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 45)


def _merge_title(ws: Worksheet, row: int, text: str) -> None:
    max_col = max(ws.max_column, len(XLSX_HEADERS))
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=max_col)
    cell = ws.cell(row=row, column=1, value=text)
    cell.font = TITLE_FONT
    cell.alignment = Alignment(horizontal="left", vertical="center")


def _style_label_value_rows(
    ws: Worksheet,
    *,
    start_row: int,
    end_row: int,
    label_fill: PatternFill = META_LABEL_FILL,
    value_fill: PatternFill = META_VALUE_FILL,
) -> None:
    for row_idx in range(start_row, end_row + 1):
        label_cell = ws.cell(row=row_idx, column=1)
        value_cell = ws.cell(row=row_idx, column=2)
        label_cell.font = BOLD_FONT
        label_cell.fill = label_fill
        label_cell.alignment = Alignment(horizontal="left", vertical="center")
        label_cell.border = THIN_BORDER

        value_cell.font = MUTED_FONT
        value_cell.fill = value_fill
        value_cell.alignment = Alignment(horizontal="left", vertical="center")
        value_cell.border = THIN_BORDER


def _style_day_rows(ws: Worksheet, *, header_row: int, data_start_row: int, data_end_row: int) -> None:
    ws.freeze_panes = f"A{header_row + 1}"
    if data_end_row < data_start_row:
        return

    ws.auto_filter.ref = f"A{header_row}:{get_column_letter(len(XLSX_HEADERS))}{data_end_row}"
    late_col = XLSX_HEADERS.index("Late Minutes") + 1

    for row_idx in range(data_start_row, data_end_row + 1):
        for col_idx in range(1, len(XLSX_HEADERS) + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.border = THIN_BORDER
            if row_idx % 2 == 0:
                cell.fill = ZEBRA_FILL
            if isinstance(cell.value, (int, float)):
                cell.alignment = Alignment(horizontal="center", vertical="center")
            else:
                cell.alignment = Alignment(horizontal="left", vertical="center")

        late_cell = ws.cell(row=row_idx, column=late_col)
        if late_cell.value not in {None, 0}:
            late_cell.fill = ALERT_FILL
            late_cell.font = Font(bold=True, color="9F1239")


def build_report_xlsx_bytes(
    *,
    employee: Employee,
    start_date: date,
    end_date: date,
    days: Sequence[DerivedDailyReport],
    summary: PeriodSummary,
    offset_minutes: int,
) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Report"

    _merge_title(ws, 1, f"Employee Report - {employee.name}")

    metadata_rows = [
        ("Employee", employee.name),
        ("Employee ID", employee.id),
        ("QR ID", employee.qr_id or "-"),
        ("Period", f"{start_date.isoformat()} - {end_date.isoformat()}"),
        ("Hourly Wage", round(employee.hourly_wage, 2)),
    ]
    for label, value in metadata_rows:
        ws.append([label, value])
    _style_label_value_rows(ws, start_row=2, end_row=1 + len(metadata_rows))

    ws.append([])
    ws.append(XLSX_HEADERS)
    header_row = ws.max_row
    _style_header(ws, header_row)

    for day in days:
        ws.append(
            [
                day.date.isoformat(),
                format_clock(day.clock_in, offset_minutes) or "-",
                format_clock(day.clock_out, offset_minutes) or "-",
                format_duration(day.worked_hours),
                format_duration(day.break_hours),
                format_duration(day.total_hours),
                round(day.hourly_wage, 2),
                round(day.total_wage, 2),
                day.late_minutes,
                day.display_status.value,
                format_breaks_cell(day.breaks) or "-",
            ]
        )
    data_end_row = header_row + len(days)
    _style_day_rows(ws, header_row=header_row, data_start_row=header_row + 1, data_end_row=data_end_row)

    ws.append([])
    summary_rows = [
        ("Total Days", summary.total_days),
        ("Total Worked Hours", round(summary.total_worked_hours, 2)),
        ("Total Break Hours", round(summary.total_break_hours, 2)),
        ("Total Wage", round(summary.total_wage, 2)),
        ("Average Hours / Day", round(summary.average_hours_per_day, 2)),
        ("Late Days", summary.late_days),
        ("Attendance Rate (%)", round(summary.attendance_rate, 1)),
    ]
    for label, value in summary_rows:
        ws.append([label, value])
    summary_start = ws.max_row - len(summary_rows) + 1
    _style_label_value_rows(
        ws,
        start_row=summary_start,
        end_row=ws.max_row,
        label_fill=SUMMARY_FILL,
    )

    _auto_width(ws)

    output = BytesIO()
    wb.save(output)
    logger.info(
        "report_xlsx_built",
        extra={"employee_id": employee.id, "days": len(days), "start_date": start_date, "end_date": end_date},
    )
    return output.getvalue()
