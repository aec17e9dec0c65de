from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT_ENV = "SHEETDASH_LOG_FORMAT"

# Loggers that would otherwise echo request URLs (the sheets API key travels as ?key=)
QUIET_LOGGERS = ("httpx", "httpcore")


def _format_mode(force_format: Optional[str]) -> str:
    if force_format is not None:
        return force_format.lower()
    return os.getenv(LOG_FORMAT_ENV, "json").lower()


def configure_logging(
        level: int = logging.INFO,
        force_format: Optional[str] = None,
) -> None:
    """
    Point the root logger at stderr for the dashboard process.

    "json" (default) emits one JSON object per record, with any `extra=` context
    (job ids, row counts, template names) as top-level keys. "plain" is for local runs.
    force_format wins over SHEETDASH_LOG_FORMAT.
    """
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if _format_mode(force_format) == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    else:
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
