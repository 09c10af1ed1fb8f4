"""Logging utilities with sanitization, correlation ID, and structured logging support.

This module provides:
- Log sanitization to mask passwords, tokens and pairing codes
- Correlation ID support for tracking requests through the system
- SanitizingFormatter for complete output sanitization including exceptions
- JSONFormatter for structured JSON logging (log aggregators)
"""

from __future__ import annotations

import contextvars
import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

# Context variable for storing correlation IDs
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Shared patterns for sensitive data detection
SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Pairing URLs carry a one-time login token
    (re.compile(r"tg://login\?token=[A-Za-z0-9_\-=%]+"), "tg://login?token=***"),
    # Bot/session tokens (digits:alphanumeric)
    (re.compile(r"\d{8,}:[A-Za-z0-9_\-]{30,}"), "***TOKEN***"),
    # API tokens and hashes
    (
        re.compile(r"(api[_-]?(?:key|hash)|token)['\"]?\s*[:=]\s*['\"]?([A-Za-z0-9_\-]{20,})"),
        r"\1=***TOKEN***",
    ),
    # Passwords in form bodies, JSON and key=value pairs
    (
        re.compile(
            r"(password|currentPassword|passwd|pwd)(['\"]?\s*[:=]\s*['\"]?)([^\s&'\",}]{1,})",
            re.IGNORECASE,
        ),
        r"\1\2***PASSWORD***",
    ),
    # Phone numbers (international format)
    (re.compile(r"\+[1-9]\d{10,14}"), "***PHONE***"),
    # Authorization headers
    (re.compile(r"(Authorization|Bearer)\s*:\s*([A-Za-z0-9_\-\.=]+)"), r"\1: ***AUTH***"),
]


def sanitize_text(text: str) -> str:
    """Apply all sanitization patterns to text."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class LogSanitizer(logging.Filter):
    """Filter that masks sensitive data in log record messages and args.

    Exception tracebacks are sanitized later by SanitizingFormatter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = sanitize_text(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._sanitize_value(arg) for arg in record.args)

        return True

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_text(value)
        elif isinstance(value, dict):
            return {k: self._sanitize_value(v) for k, v in value.items()}
        elif isinstance(value, list | tuple):
            return type(value)(self._sanitize_value(item) for item in value)
        return value


class SanitizingFormatter(logging.Formatter):
    """Formatter that sanitizes the final formatted output, tracebacks included."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_text(super().format(record))


class CorrelationIDFilter(logging.Filter):
    """Filter that adds the current correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        cid = correlation_id.get()
        record.correlation_id = cid if cid else "-"
        return True


def get_correlation_id() -> str | None:
    return correlation_id.get()


def set_correlation_id(cid: str) -> None:
    correlation_id.set(cid)


def clear_correlation_id() -> None:
    correlation_id.set(None)


# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = frozenset(
    {
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
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "correlation_id",
        "message",
    }
)


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log line.

    Each entry includes timestamp, level, logger, message, correlation_id,
    exception text when present, and any ``extra`` fields.
    """

    def __init__(self, sanitize: bool = True) -> None:
        super().__init__()
        self.sanitize = sanitize

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "correlation_id"):
            log_entry["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)

        if self.sanitize:
            log_entry = {
                key: sanitize_text(value) if isinstance(value, str) else value
                for key, value in log_entry.items()
            }

        return json.dumps(log_entry, ensure_ascii=False, default=str)
