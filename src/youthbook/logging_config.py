from __future__ import annotations

import json
import logging
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from logging.config import dictConfig
from typing import Any

from youthbook.settings import Settings, get_settings

_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_request_id_context: ContextVar[str | None] = ContextVar("youthbook_request_id", default=None)


def normalize_log_level(raw_level: str) -> str:
    level = raw_level.strip().upper()
    if level in _VALID_LOG_LEVELS:
        return level
    return "INFO"


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def get_request_id() -> str | None:
    return _request_id_context.get()


def set_request_id(request_id: str) -> Token[str | None]:
    return _request_id_context.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_context.reset(token)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        request_id = get_request_id()
        record.request_id = request_id if request_id else "-"
        return True


def _format_log_value(value: object) -> str:
    text = value if isinstance(value, str) else str(value)
    # Cursors and notes are caller-supplied; keep one event per line.
    return text.encode("unicode_escape").decode("ascii")


def format_log_fields(**fields: object) -> str:
    parts: list[str] = []
    for key in sorted(fields):
        value = fields[key]
        if value is None:
            continue
        parts.append(f"{key}={_format_log_value(value)}")
    return " ".join(parts)


def log_with_fields(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    exc_info: Any | None = None,
    **fields: object,
) -> None:
    field_text = format_log_fields(**fields)
    if field_text:
        logger.log(level, "%s %s", message, field_text, exc_info=exc_info)
        return
    logger.log(level, "%s", message, exc_info=exc_info)


def configure_logging(settings: Settings | None = None) -> None:
    selected_settings = settings if settings is not None else get_settings()
    level = normalize_log_level(selected_settings.log_level)
    formatter_name = "json" if selected_settings.log_json else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "request_context": {
                    "()": "youthbook.logging_config.RequestContextFilter",
                }
            },
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] [req=%(request_id)s] %(message)s",
                },
                "json": {
                    "()": "youthbook.logging_config.JsonLogFormatter",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "filters": ["request_context"],
                    "formatter": formatter_name,
                }
            },
            "root": {"handlers": ["default"], "level": level},
            "loggers": {
                "uvicorn": {"level": level},
                "uvicorn.error": {"level": level},
                "uvicorn.access": {"level": level},
                # Stale-write conflicts are operationally interesting even when
                # the app runs at ERROR.
                "youthbook.persistence": {"level": _at_most_warning(level)},
            },
        }
    )


def _at_most_warning(level: str) -> str:
    if level in {"ERROR", "CRITICAL"}:
        return "WARNING"
    return level
