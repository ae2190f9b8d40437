"""Logging setup for the ``retrycase`` logger namespace.

Library modules log through stdlib loggers (``retrycase.retry``,
``retrycase.config``) and never configure handlers themselves. Applications
that want retry diagnostics call ``configure_logging`` once at startup:

    >>> configure_logging()                        # level/format from RETRYCASE_LOG_*
    >>> configure_logging(level="INFO", format="json")
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import orjson

from retrycase.foundation.config import get_settings

ROOT_LOGGER = "retrycase"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode()


_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - shadows builtin but matches stdlib
    *,
    output: TextIO | None = None,
) -> logging.Handler:
    """Attach a single stream handler to the ``retrycase`` logger.

    Unset arguments come from LoggingSettings. Calling again replaces the
    handler installed by the previous call.
    """
    settings = get_settings().logging
    level = (level or settings.level).upper()
    match format or settings.format:
        case "text": formatter: logging.Formatter = logging.Formatter(_TEXT_FORMAT)
        case "json": formatter = JsonFormatter()
        case other: raise ValueError(f"Unknown format: {other}. Use 'text' or 'json'")

    root = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in root.handlers if getattr(h, "_retrycase", False)]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    handler._retrycase = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.WARNING))
    return handler
