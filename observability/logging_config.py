"""Structured logging configuration.

Library modules log through :func:`get_logger`; structured fields are passed
with ``extra={...}`` and rendered as top-level JSON keys.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

LOG_LEVEL_ENV_VAR = "FACT_ENGINE_LOG_LEVEL"


class StructuredFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "extra_fields", None)
        if fields:
            payload.update(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class StructuredLogger(logging.LoggerAdapter):
    """Adapter that merges default fields with per-call ``extra`` fields."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        fields = dict(self.extra or {})
        fields.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"extra_fields": fields}
        return msg, kwargs


_configured = False


def _level_from_env(default: int) -> int:
    name = os.getenv(LOG_LEVEL_ENV_VAR, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO, structured: bool = True) -> None:
    """Attach a stderr handler to the ``fact_engine`` logger hierarchy once."""
    global _configured
    if _configured:
        return

    root = logging.getLogger("fact_engine")
    root.setLevel(_level_from_env(level))

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str, **extra: Any) -> StructuredLogger:
    """Return a structured logger named ``fact_engine.<name>``."""
    configure_logging()
    return StructuredLogger(logging.getLogger(f"fact_engine.{name}"), extra)
