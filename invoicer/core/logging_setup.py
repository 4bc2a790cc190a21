from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict

from invoicer.core.config import LOG_LEVEL
from invoicer.core.request_context import current_request_context

# emitted only when a record carries them as ``extra``
_REQUEST_FIELDS = ("endpoint", "method", "status_code")

_SENSITIVE_PATTERNS = [
    re.compile(r"(authorization\s*[:=]\s*bearer\s+)([^\s\"]+)", re.IGNORECASE),
    re.compile(r"((?:challenge_)?token\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(password(?:_hash)?\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(secret\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"((?:2fa\s+)?code(?:\s+is)?\s*[:=]?\s*)(\d{6})\b", re.IGNORECASE),
]


def mask_sensitive(value: str) -> str:
    for pattern in _SENSITIVE_PATTERNS:
        value = pattern.sub(r"\1***", value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ids come from ``extra`` first, then the request context."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        context = current_request_context()

        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "request_id": getattr(record, "request_id", None) or context.request_id,
            "user_id": getattr(record, "user_id", None) or context.user_id,
            "message": mask_sensitive(self.formatMessage(record)),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        payload.update(
            (name, getattr(record, name))
            for name in _REQUEST_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(LOG_LEVEL)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(LOG_LEVEL)
