from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request, Response

from staffboard.models import DateRangePreset
from staffboard.schemas import EmployeeReportResponse
from staffboard.security import require_token
from staffboard.services.backend_client import BackendClient, get_backend_client
from staffboard.services.exports import build_report_csv, build_report_xlsx_bytes, report_filename
from staffboard.services.reports import (
    EmployeeReport,
    build_employee_report,
    find_employee,
    resolve_report_range,
    to_report_response,
)
from staffboard.services.timeutils import utcnow
from staffboard.settings import get_business_offset_minutes

router = APIRouter(tags=["reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _load_report(
    *,
    request: Request,
    client: BackendClient,
    token: str,
    employee_id: int,
    date_range: DateRangePreset,
    start_date: date | None,
    end_date: date | None,
    now: datetime,
) -> EmployeeReport:
    request.state.employee_id = employee_id
    offset_minutes = get_business_offset_minutes()
    range_start, range_end = resolve_report_range(
        date_range,
        now=now,
        offset_minutes=offset_minutes,
        start_date=start_date,
        end_date=end_date,
    )
    employee = find_employee(client.list_employees(token=token), employee_id)
    rows = client.get_employee_report(
        token=token,
        employee_id=employee_id,
        start_date=range_start,
        end_date=range_end,
    )
    return build_employee_report(
        employee=employee,
        rows=rows,
        date_range=date_range,
        start_date=range_start,
        end_date=range_end,
        now=now,
        offset_minutes=offset_minutes,
    )


@router.get("/api/reports", response_model=EmployeeReportResponse)
def get_employee_report(
    request: Request,
    employee_id: int = Query(ge=1),
    date_range: DateRangePreset = Query(default=DateRangePreset.WEEK, alias="range"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
    now: datetime = Depends(utcnow),
) -> EmployeeReportResponse:
    report = _load_report(
        request=request,
        client=client,
        token=token,
        employee_id=employee_id,
        date_range=date_range,
        start_date=start_date,
        end_date=end_date,
        now=now,
    )
    return to_report_response(report)


@router.get("/api/reports/export.csv")
def export_employee_report_csv(
    request: Request,
    employee_id: int = Query(ge=1),
    date_range: DateRangePreset = Query(default=DateRangePreset.WEEK, alias="range"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
    now: datetime = Depends(utcnow),
) -> Response:
    report = _load_report(
        request=request,
        client=client,
        token=token,
        employee_id=employee_id,
        date_range=date_range,
        start_date=start_date,
        end_date=end_date,
        now=now,
    )
    content = build_report_csv(report.days, offset_minutes=get_business_offset_minutes())
    filename = report_filename(employee_id, report.start_date, report.end_date, "csv")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/api/reports/export.xlsx")
def export_employee_report_xlsx(
    request: Request,
    employee_id: int = Query(ge=1),
    date_range: DateRangePreset = Query(default=DateRangePreset.WEEK, alias="range"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
    now: datetime = Depends(utcnow),
) -> Response:
    report = _load_report(
        request=request,
        client=client,
        token=token,
        employee_id=employee_id,
        date_range=date_range,
        start_date=start_date,
        end_date=end_date,
        now=now,
    )
    content = build_report_xlsx_bytes(
        employee=report.employee,
        start_date=report.start_date,
        end_date=report.end_date,
        days=report.days,
        summary=report.summary,
        offset_minutes=get_business_offset_minutes(),
    )
    filename = report_filename(employee_id, report.start_date, report.end_date, "xlsx")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
