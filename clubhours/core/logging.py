# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging: one JSON object per line on stdout.

Context passed through ``extra=`` (request_id, member_id, operation) is
lifted into top-level keys. Bearer tokens and password fields are masked
before a record is written.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from clubhours.core.config import settings

CONTEXT_FIELDS = ("request_id", "member_id", "operation")

_SECRETS = re.compile(
    r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+|(\"?password\"?\s*[:=]\s*\"?)[^\s\",}]+"
)


def redact(text: str) -> str:
    return _SECRETS.sub(lambda m: (m.group(1) or m.group(2)) + "***", text)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info and record.exc_info[1]:
            entry["error"] = redact(str(record.exc_info[1]))
            entry["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(entry, ensure_ascii=False, default=str)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger writing JSON lines; the handler is attached once per name."""
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if not logger.handlers:
        logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
