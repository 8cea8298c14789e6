"""
Structured logging configuration for binancekit.

Log records produced by the client may carry URLs, headers and query strings
of signed requests, so every formatter here:
- drops credential fields (api key, secret, signature, listen key)
- reduces URLs to their path, which strips signed query strings
- keeps one JSON object per line

Usage:
    from binancekit.logging_config import setup_logging

    setup_logging()  # Call once at startup
    logger = logging.getLogger(__name__)
    logger.info("message", extra={"key": "value"})
"""

from __future__ import annotations

import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

import orjson

# Matches http(s) and ws(s) URLs, with or without a query string
_URL_PATTERN = re.compile(r"((?:https?|wss?)://[^\s\"'<>]+)")
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(api[_-]?key|apikey|x-mbx-apikey)[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[API_KEY]"),
    (re.compile(r"\b(secret[_-]?key|secret)[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[SECRET]"),
    (re.compile(r"\bsignature=[0-9a-f]+", re.I), "[SIGNATURE]"),
    (re.compile(r"\blisten[_-]?key[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[LISTEN_KEY]"),
    (re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b"), "[IP]"),
]

# Fields that must never appear in logs (matched case-insensitively, also as substrings)
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "api_key",
        "apikey",
        "secret",
        "secret_key",
        "signature",
        "listen_key",
        "listenkey",
        "password",
        "token",
        "authorization",
        "credential",
        "x-mbx-apikey",
    }
)

# Fields replaced by a placeholder (or, for "url", by its path)
HIGH_CARDINALITY_FIELDS: dict[str, str] = {
    "url": "endpoint",
    "query": "[QUERY]",
    "body": "[BODY]",
    "payload": "[PAYLOAD]",
    "raw": "[RAW]",
    "params": "[PARAMS]",
}

# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS: frozenset[str] = frozenset(
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
        "message",
        "taskName",
    }
)

_MAX_DEPTH = 3
_MAX_LIST_ITEMS = 10


def _normalize_url(url: str) -> str:
    return urlsplit(url).path or "/"


def _sanitize_url_in_text(match: re.Match[str]) -> str:
    path = _normalize_url(match.group(1))
    return path if path != "/" else "[URL]"


def _sanitize_text(text: str) -> str:
    """Strip query strings from URLs and mask credentials in free-form text."""
    if not text:
        return text
    result = _URL_PATTERN.sub(_sanitize_url_in_text, text)
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def _is_blocked(key: str) -> bool:
    key_lower = key.lower()
    return any(blocked in key_lower for blocked in BLOCKED_FIELDS)


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Drop blocked fields and normalize the rest; nested dicts up to depth 3."""
    if _depth > _MAX_DEPTH:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in record.items():
        if _is_blocked(key):
            continue

        key_lower = key.lower()
        if key_lower in HIGH_CARDINALITY_FIELDS:
            if key_lower == "url" and isinstance(value, str):
                filtered["endpoint"] = _normalize_url(value)
            else:
                filtered[key] = HIGH_CARDINALITY_FIELDS[key_lower]
            continue

        if isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= _MAX_LIST_ITEMS:
                filtered[key] = list(value)
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Output format:
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        extra = _extra_fields(record)
        if extra:
            log_dict.update(_filter_log_record(extra))

        return orjson.dumps(log_dict, default=str).decode("utf-8")


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development and tests."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"

        extra = _extra_fields(record)
        if extra:
            filtered = _filter_log_record(extra)
            if filtered:
                extra_str = " ".join(f"{k}={v}" for k, v in filtered.items())
                base = f"{base} | {extra_str}"

        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure the root logger once at application startup.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # aiohttp logs full request URLs at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
