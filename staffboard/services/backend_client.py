from __future__ import annotations

import logging
import time
from collections.abc import Generator
from datetime import date
from typing import Any

import httpx

from staffboard.errors import BackendError
from staffboard.settings import get_backend_api_url, get_settings

logger = logging.getLogger("staffboard.backend")


def _upstream_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] if text else f"Backend responded with HTTP {response.status_code}."

    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return f"Backend responded with HTTP {response.status_code}."


class BackendClient:
    """Thin wrapper over the restaurant REST API.

    Every call forwards the caller's bearer token; the remote API owns
    token verification and all persistent state. Responses are returned as
    parsed JSON and never post-processed here.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        timeout = httpx.Timeout(timeout=float(timeout_seconds), connect=5.0)
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        start = time.perf_counter()
        try:
            response = self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as exc:
            logger.warning("backend_timeout", extra={"method": method, "path": path})
            raise BackendError.unavailable("Backend request timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "backend_unreachable",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            raise BackendError.unavailable("Backend is unreachable.") from exc

        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "backend_request",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "latency_ms": latency_ms,
            },
        )

        if response.status_code >= 400:
            raise BackendError.from_upstream_status(response.status_code, _upstream_message(response))

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("backend_bad_payload", extra={"method": method, "path": path})
            raise BackendError.bad_payload("Backend returned invalid JSON.") from exc

    def list_employees(self, *, token: str) -> Any:
        return self._request("GET", "/api/employees", token=token)

    def create_employee(self, *, token: str, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/employees", token=token, json=payload)

    def update_employee(self, *, token: str, employee_id: int, payload: dict[str, Any]) -> Any:
        return self._request("PUT", f"/api/employees/{employee_id}", token=token, json=payload)

    def delete_employee(self, *, token: str, employee_id: int) -> Any:
        return self._request("DELETE", f"/api/employees/{employee_id}", token=token)

    def get_daily_attendance(self, *, token: str, day: date) -> Any:
        return self._request(
            "GET",
            "/api/attendance/daily",
            token=token,
            params={"date": day.isoformat()},
        )

    def update_attendance(self, *, token: str, attendance_id: str, payload: dict[str, Any]) -> Any:
        return self._request("PUT", f"/api/attendance/{attendance_id}", token=token, json=payload)

    def update_attendance_breaks(
        self,
        *,
        token: str,
        attendance_id: str,
        breaks: list[dict[str, Any]],
    ) -> Any:
        return self._request(
            "PUT",
            f"/api/attendance/{attendance_id}/breaks",
            token=token,
            json={"breaks": breaks},
        )

    def get_employee_report(
        self,
        *,
        token: str,
        employee_id: int,
        start_date: date,
        end_date: date,
    ) -> Any:
        return self._request(
            "GET",
            "/api/employee/reports",
            token=token,
            params={
                "employee_id": str(employee_id),
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        )


def get_backend_client() -> Generator[BackendClient, None, None]:
    client = BackendClient(
        base_url=get_backend_api_url(),
        timeout_seconds=get_settings().backend_timeout_seconds,
    )
    try:
        yield client
    finally:
        client.close()
