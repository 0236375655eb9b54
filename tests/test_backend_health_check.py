from __future__ import annotations

import importlib.util
import unittest
from pathlib import Path
from typing import Any

from staffboard.errors import BackendError

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "backend_health_check.py"


def _load_script():  # type: ignore[no-untyped-def]
    spec = importlib.util.spec_from_file_location("backend_health_check", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


class _FakeClient:
    def __init__(self, payload: Any = None, error: BackendError | None = None):
        self.payload = payload
        self.error = error
        self.tokens: list[str] = []

    def list_employees(self, *, token: str) -> Any:
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return self.payload


class BackendHealthCheckTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.script = _load_script()

    def _statuses(self, report: dict) -> dict[str, str]:
        return {check["name"]: check["status"] for check in report["checks"]}

    def test_healthy_backend(self) -> None:
        client = _FakeClient(payload={"employees": [{"id": 1, "name": "Jin"}]})

        report = self.script.run(client, token="t")

        self.assertTrue(report["ok"])
        self.assertEqual(self._statuses(report), {"reachable": "ok", "employees_payload_valid": "ok"})
        self.assertEqual(client.tokens, ["t"])

    def test_unauthorized_backend_is_still_reachable(self) -> None:
        error = BackendError(401, "INVALID_TOKEN", "Unauthorized", upstream_status=401)

        report = self.script.run(_FakeClient(error=error), token="")

        self.assertTrue(report["ok"])
        self.assertEqual(self._statuses(report)["employees_payload_valid"], "warn")

    def test_unreachable_backend(self) -> None:
        error = BackendError(502, "BACKEND_UNAVAILABLE", "Backend API is unreachable.")

        report = self.script.run(_FakeClient(error=error), token="t")

        self.assertFalse(report["ok"])
        self.assertEqual(self._statuses(report)["reachable"], "fail")

    def test_malformed_employee_rows(self) -> None:
        with self.assertLogs("staffboard.backend", level="WARNING"):
            report = self.script.run(_FakeClient(payload=[{"id": 1, "name": "Jin"}, {"name": "x"}]), token="t")

        self.assertFalse(report["ok"])
        check = report["checks"][1]
        self.assertEqual(check["details"], {"rows": 2, "valid_rows": 1})


if __name__ == "__main__":
    unittest.main()
