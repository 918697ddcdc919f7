"""Structured Logging — one JSON line per record, tagged with the service name.

Invariants:
    - Every line carries timestamp, level, logger, service and message
    - Only the gateway's known extras (error_code, table, rate_key, ...) are surfaced
    - setup_logging is idempotent: repeated app construction never duplicates handlers
    - httpx request lines stay at WARNING; data-store failures are logged by the client
"""

import json
import logging
from datetime import datetime, timezone

HANDLER_NAME = "rainbowkidz"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_EXTRA_KEYS = (
    "error_code", "path", "method", "status_code", "table", "operation",
    "guest_id", "rate_key", "model", "input_tokens", "output_tokens",
)
_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    def __init__(self, service: str = "rainbowkidz-api"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "message": record.getMessage(),
        }
        line.update(
            (key, record.__dict__[key]) for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json", service: str = "rainbowkidz-api"):
    """Install the gateway's root handler, replacing one from an earlier app."""
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter(service) if fmt == "json" else logging.Formatter(TEXT_FORMAT)
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
