#!/usr/bin/env python
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone

from staffboard.errors import BackendError
from staffboard.services.backend_client import BackendClient
from staffboard.services.validation import parse_employee_rows
from staffboard.settings import get_backend_api_url, get_settings


def run(client: BackendClient | None = None, *, token: str | None = None) -> dict:
    settings = get_settings()
    token = token if token is not None else os.environ.get("STAFFBOARD_TOKEN", "")
    report: dict = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "backend_api_url": get_backend_api_url(),
        "checks": [],
    }

    def add(name: str, status: str, details: dict) -> None:
        report["checks"].append(
            {
                "name": name,
                "status": status,
                "details": details,
            }
        )

    owns_client = client is None
    if client is None:
        client = BackendClient(
            base_url=get_backend_api_url(),
            timeout_seconds=settings.backend_timeout_seconds,
        )

    try:
        payload = client.list_employees(token=token)
    except BackendError as exc:
        # A 401/403 still proves the API is up.
        reachable = exc.upstream_status is not None
        add("reachable", "ok" if reachable else "fail", {"code": exc.code, "message": exc.message})
        add("employees_payload_valid", "warn" if reachable else "fail", {"reason": "request_failed"})
    else:
        add("reachable", "ok", {})
        raw_rows = payload.get("employees") if isinstance(payload, dict) else payload
        raw_count = len(raw_rows) if isinstance(raw_rows, list) else 0
        parsed_count = len(parse_employee_rows(payload))
        add(
            "employees_payload_valid",
            "ok" if isinstance(raw_rows, list) and parsed_count == raw_count else "fail",
            {"rows": raw_count, "valid_rows": parsed_count},
        )
    finally:
        if owns_client:
            client.close()

    report["ok"] = all(check["status"] != "fail" for check in report["checks"])
    return report


def main() -> int:
    report = run()
    print(json.dumps(report, indent=2, ensure_ascii=True))
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
