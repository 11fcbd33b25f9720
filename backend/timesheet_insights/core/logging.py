"""Logging setup shared by the API, the CLI and the engine."""

from __future__ import annotations

import logging
import sys

from timesheet_insights.core.config import settings

_configured = False


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure root logging once; later calls are ignored."""
    global _configured
    if _configured:
        return
    level_name = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=fmt or settings.log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
