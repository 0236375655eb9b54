from typing import Any

from fastapi import APIRouter, Depends, Request

from staffboard.errors import ApiError
from staffboard.schemas import EmployeeDeleteResponse, EmployeeRead, EmployeeWrite
from staffboard.security import require_token
from staffboard.services.backend_client import BackendClient, get_backend_client
from staffboard.services.reports import to_employee_read
from staffboard.services.validation import RecordRejected, parse_employee, parse_employee_rows

router = APIRouter(tags=["employees"])


def _employee_from_response(payload: Any) -> EmployeeRead:
    # Some backend versions wrap the saved row in {"employee": {...}}.
    if isinstance(payload, dict) and isinstance(payload.get("employee"), dict):
        payload = payload["employee"]
    result = parse_employee(payload)
    if isinstance(result, RecordRejected):
        raise ApiError(
            status_code=502,
            code="BACKEND_BAD_PAYLOAD",
            message="Backend returned an invalid employee record.",
        )
    return to_employee_read(result)


@router.get("/api/employees", response_model=list[EmployeeRead])
def list_employees(
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> list[EmployeeRead]:
    payload = client.list_employees(token=token)
    return [to_employee_read(employee) for employee in parse_employee_rows(payload)]


@router.post("/api/employees", response_model=EmployeeRead, status_code=201)
def create_employee(
    payload: EmployeeWrite,
    request: Request,
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> EmployeeRead:
    created = client.create_employee(token=token, payload=payload.model_dump())
    employee = _employee_from_response(created)
    request.state.employee_id = employee.id
    return employee


@router.put("/api/employees/{employee_id}", response_model=EmployeeRead)
def update_employee(
    employee_id: int,
    payload: EmployeeWrite,
    request: Request,
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> EmployeeRead:
    request.state.employee_id = employee_id
    updated = client.update_employee(token=token, employee_id=employee_id, payload=payload.model_dump())
    if updated is None:
        return EmployeeRead(id=employee_id, **payload.model_dump())
    return _employee_from_response(updated)


@router.delete("/api/employees/{employee_id}", response_model=EmployeeDeleteResponse)
def delete_employee(
    employee_id: int,
    request: Request,
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
) -> EmployeeDeleteResponse:
    request.state.employee_id = employee_id
    client.delete_employee(token=token, employee_id=employee_id)
    return EmployeeDeleteResponse(ok=True, id=employee_id)
