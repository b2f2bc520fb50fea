"""Logging setup for the API process.

Records are written to stdout, either as one JSON object per line
(``NC_JSON_LOGS=true``) or as plain text for local work.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
TEXT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Attributes the logging middleware attaches to request log records
REQUEST_CONTEXT_FIELDS = ("request_id", "method", "endpoint", "client_ip", "user_id")

# Loggers that stay at WARNING whatever NC_LOG_LEVEL says
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "fastapi")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    The timestamp is the record's creation time in UTC. Request context
    and any ``extra_fields`` dict (patient, todo or notification ids) are
    merged into the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for field in REQUEST_CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(use_json: bool = False, log_level: str = "INFO") -> None:
    """Replace the root handlers with a single stdout handler.

    Parameters:
        use_json: Emit JSON lines instead of plain text
        log_level: Level name; unknown names fall back to INFO
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if use_json:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
