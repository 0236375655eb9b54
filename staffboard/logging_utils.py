from __future__ import annotations

import dataclasses
import enum
import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

# Attributes every LogRecord carries; anything else on a record came from `extra`.
_STANDARD_RECORD_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    `ts` is UTC; `ts_local` is the same instant in the restaurant's business
    offset so log lines can be matched against the dashboard's civil dates.
    """

    def __init__(self, *, service: str = "staffboard", business_offset_minutes: int = 0) -> None:
        super().__init__()
        self.service = service
        self.business_tz = timezone(timedelta(minutes=business_offset_minutes))

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.isoformat(),
            "ts_local": created.astimezone(self.business_tz).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_FIELDS or key.startswith("_") or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default, ensure_ascii=True)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_json_logging(
    level: str | int = logging.INFO,
    *,
    service: str = "staffboard",
    business_offset_minutes: int = 0,
) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service=service, business_offset_minutes=business_offset_minutes))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_level(level))
