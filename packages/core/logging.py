"""
Structured logging for the ledger.

Application logs are JSON lines with sensitive patient fields redacted.
They are an operational aid only: the audit trail in
:mod:`packages.ledger.audit` is the replayable record of state changes.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

LOGGER_ROOT = "ledger"

# Never written to application logs.
SENSITIVE_FIELDS = {
    "name",
    "content",
    "allergy",
    "allergies",
    "emergency_contact",
    "contact",
    "blood_type",
    "birth_year",
    "license_number",
}

_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
    "message",
}


def sanitize_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _sanitize_value(key, value) for key, value in data.items()}


def _sanitize_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_FIELDS:
        return "[REDACTED]"
    if isinstance(value, dict):
        return sanitize_dict(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value("", item) for item in value]
    return value


class SanitizedJSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key.startswith("_") or key in payload:
                continue
            payload[key] = _sanitize_value(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is when the record is emitted."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, _value) -> None:
        pass


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """Attach a single stderr handler to the ledger logger tree."""
    logger = logging.getLogger(LOGGER_ROOT)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = _StderrHandler()
    if fmt == "json":
        handler.setFormatter(SanitizedJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    if name == LOGGER_ROOT or name.startswith(f"{LOGGER_ROOT}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


_logger = get_logger("events")


def log_domain_event(event_name: str, result: str = "success", **fields: Any) -> None:
    """Log one ledger operation outcome with sanitized structured fields."""
    data = {"event": event_name, "result": result}
    for key, value in sanitize_dict(fields).items():
        if value is None:
            continue
        # LogRecord refuses extras that shadow its own attributes.
        data[f"field_{key}" if key in _STANDARD_ATTRS else key] = value
    if result in ("failure", "error"):
        _logger.error("Domain event: %s", event_name, extra=data)
    elif result in ("denied", "blocked"):
        _logger.warning("Domain event: %s", event_name, extra=data)
    else:
        _logger.info("Domain event: %s", event_name, extra=data)


__all__ = [
    "SENSITIVE_FIELDS",
    "SanitizedJSONFormatter",
    "configure_logging",
    "get_logger",
    "log_domain_event",
    "sanitize_dict",
]
