from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request

from staffboard.schemas import (
    AttendanceUpdateRequest,
    AttendanceUpdateResponse,
    BreaksUpdateRequest,
    DailyAttendanceRead,
)
from staffboard.security import require_token
from staffboard.services.attendance import (
    build_attendance_update_payload,
    build_breaks_update_payload,
    build_daily_attendance_view,
)
from staffboard.services.backend_client import BackendClient, get_backend_client
from staffboard.services.timeutils import local_today, utcnow
from staffboard.settings import get_business_offset_minutes

router = APIRouter(tags=["attendance"])


@router.get("/api/attendance/daily", response_model=list[DailyAttendanceRead])
def list_daily_attendance(
    day: date | None = Query(default=None, alias="date"),
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
    now: datetime = Depends(utcnow),
) -> list[DailyAttendanceRead]:
    offset_minutes = get_business_offset_minutes()
    target_day = day or local_today(now, offset_minutes)
    rows = client.get_daily_attendance(token=token, day=target_day)
    return build_daily_attendance_view(rows, day=target_day, now=now, offset_minutes=offset_minutes)


@router.put("/api/attendance/{attendance_id}", response_model=AttendanceUpdateResponse)
def update_attendance(
    attendance_id: str,
    payload: AttendanceUpdateRequest,
    request: Request,
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> AttendanceUpdateResponse:
    request.state.attendance_id = attendance_id
    client.update_attendance(
        token=token,
        attendance_id=attendance_id,
        payload=build_attendance_update_payload(payload),
    )
    return AttendanceUpdateResponse(ok=True, attendance_id=attendance_id)


@router.put("/api/attendance/{attendance_id}/breaks", response_model=AttendanceUpdateResponse)
def update_attendance_breaks(
    attendance_id: str,
    payload: BreaksUpdateRequest,
    request: Request,
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> AttendanceUpdateResponse:
    request.state.attendance_id = attendance_id
    client.update_attendance_breaks(
        token=token,
        attendance_id=attendance_id,
        breaks=build_breaks_update_payload(payload),
    )
    return AttendanceUpdateResponse(ok=True, attendance_id=attendance_id)
