from __future__ import annotations

import unittest
from typing import Any

from fastapi.testclient import TestClient

from staffboard.errors import BackendError
from staffboard.main import app
from staffboard.services.backend_client import get_backend_client

AUTH = {"Authorization": "Bearer admin-token"}


class _FakeEmployeesBackend:
    def __init__(self, update_response: Any = None):
        self.update_response = update_response
        self.writes: list[tuple[str, Any]] = []

    def list_employees(self, *, token: str) -> Any:
        return [
            {"id": 1, "name": "Jin", "qr_id": "EMP-1", "hourly_wage": 10000, "role": "admin", "start_time": "09:00"},
            {"id": "broken"},
        ]

    def create_employee(self, *, token: str, payload: dict[str, Any]) -> Any:
        self.writes.append(("create", payload))
        return {"employee": dict(payload, id=5)}

    def update_employee(self, *, token: str, employee_id: int, payload: dict[str, Any]) -> Any:
        self.writes.append(("update", payload))
        return self.update_response

    def delete_employee(self, *, token: str, employee_id: int) -> Any:
        if employee_id == 404:
            raise BackendError(404, "NOT_FOUND", "Employee not found.", upstream_status=404)
        self.writes.append(("delete", employee_id))
        return None


class EmployeeEndpointTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        self.backend = _FakeEmployeesBackend()
        app.dependency_overrides[get_backend_client] = lambda: self.backend

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_list_skips_invalid_rows(self) -> None:
        with self.assertLogs("staffboard.backend", level="WARNING"):
            response = self.client.get("/api/employees", headers=AUTH)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]["name"], "Jin")
        self.assertEqual(body[0]["role"], "admin")
        self.assertEqual(body[0]["start_time"], "09:00")

    def test_create_normalizes_payload(self) -> None:
        response = self.client.post(
            "/api/employees",
            json={"name": "  Bo ", "qr_id": "EMP-5", "hourly_wage": 9860, "start_time": "8:30"},
            headers=AUTH,
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["id"], 5)
        kind, payload = self.backend.writes[0]
        self.assertEqual(kind, "create")
        self.assertEqual(payload["name"], "Bo")
        self.assertEqual(payload["start_time"], "08:30")
        self.assertEqual(payload["role"], "employee")

    def test_create_defaults_start_time(self) -> None:
        response = self.client.post(
            "/api/employees",
            json={"name": "Min", "qr_id": "EMP-6", "hourly_wage": 9860},
            headers=AUTH,
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.backend.writes[0][1]["start_time"], "09:00")

    def test_create_rejects_negative_wage(self) -> None:
        response = self.client.post(
            "/api/employees",
            json={"name": "Min", "qr_id": "EMP-6", "hourly_wage": -1},
            headers=AUTH,
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.backend.writes, [])

    def test_update_echoes_payload_when_backend_returns_nothing(self) -> None:
        response = self.client.put(
            "/api/employees/3",
            json={"name": "Jin", "qr_id": "EMP-3", "hourly_wage": 10500, "start_time": "10:00"},
            headers=AUTH,
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["id"], 3)
        self.assertEqual(body["hourly_wage"], 10500)
        self.assertEqual(body["start_time"], "10:00")

    def test_update_with_invalid_backend_record(self) -> None:
        self.backend.update_response = {"employee": {"name": "no id"}}

        response = self.client.put(
            "/api/employees/3",
            json={"name": "Jin", "qr_id": "EMP-3", "hourly_wage": 10500},
            headers=AUTH,
        )

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["error"]["code"], "BACKEND_BAD_PAYLOAD")

    def test_delete(self) -> None:
        response = self.client.delete("/api/employees/3", headers=AUTH)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True, "id": 3})

    def test_delete_missing_employee(self) -> None:
        response = self.client.delete("/api/employees/404", headers=AUTH)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")


class HealthEndpointTests(unittest.TestCase):
    def test_health(self) -> None:
        response = TestClient(app).get("/health")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["business_utc_offset_minutes"], 540)

    def test_unknown_route_uses_error_envelope(self) -> None:
        response = TestClient(app).get("/api/nope", headers={"X-Request-Id": "req-1"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], {"code": "NOT_FOUND", "message": "Not Found", "request_id": "req-1"})
        self.assertEqual(response.headers["X-Request-Id"], "req-1")


if __name__ == "__main__":
    unittest.main()
