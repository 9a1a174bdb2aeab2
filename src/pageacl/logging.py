"""Logging utilities for the access-control engine.

This module provides:
- Logging configuration from AccessControlConfig
- Safe previews of specifier lists and other values
- Structured (JSON or plain text) formatting
- Automatic page_id / user propagation through a logger adapter
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import AccessControlConfig, LogLevel

_CONTEXT_FIELDS = ("page_id", "user")

_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", *_CONTEXT_FIELDS,
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AccessLogFormatter(logging.Formatter):
    """Formatter that carries page_id/user context, as JSON or plain text."""

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {}
        if self.include_context:
            for key in _CONTEXT_FIELDS:
                value = getattr(record, key, None)
                if value is not None:
                    context[key] = value
            log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        parts.extend(f"{key}={value}" for key, value in context.items())
        parts.append(f": {log_data['message']}")
        text = " ".join(parts)
        if "exception" in log_data:
            text = f"{text}\n{log_data['exception']}"
        return text


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds page_id and user to every record.

    Usage:
        logger = get_access_logger(__name__, page_id=42)
        logger.info("Restriction loaded", user="Alice")
    """

    def __init__(
        self,
        logger: logging.Logger,
        page_id: Optional[int] = None,
        user: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.page_id = page_id
        self.user = user

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        page_id = kwargs.pop("page_id", self.page_id)
        user = kwargs.pop("user", self.user)

        extra = dict(kwargs.get("extra") or {})
        if page_id is not None:
            extra["page_id"] = page_id
        if user is not None:
            extra["user"] = user
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AccessControlConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger from AccessControlConfig.

    Args:
        config: Configuration instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessLogFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
        )
    )
    root_logger.addHandler(console_handler)


def get_access_logger(
    name: str,
    page_id: Optional[int] = None,
    user: Optional[str] = None,
) -> AccessLoggerAdapter:
    """Get a logger adapter bound to a page and/or user.

    Example:
        logger = get_access_logger(__name__, page_id=page.page_id)
        logger.warning("Restriction write failed")
    """
    return AccessLoggerAdapter(logging.getLogger(name), page_id=page_id, user=user)


__all__ = [
    "safe_preview",
    "AccessLogFormatter",
    "AccessLoggerAdapter",
    "setup_logging",
    "get_access_logger",
]
