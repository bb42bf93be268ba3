# app/logging_setup.py - Process-wide logging configuration

from __future__ import annotations

import logging
import sys
from typing import Any

_INITIALIZED: bool = False


class SafeExtraFormatter(logging.Formatter):
    """Formatter that tolerates missing extra fields by injecting defaults."""

    DEFAULTS: dict[str, Any] = {
        "slug": "-",
        "stage": "-",
        "count": "-",
        "domains": "-",
        "error": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: str = "info") -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(
            SafeExtraFormatter(
                fmt=(
                    "%(asctime)s %(levelname)s %(name)s %(message)s "
                    "slug=%(slug)s stage=%(stage)s count=%(count)s domains=%(domains)s error=%(error)s"
                )
            )
        )
        root_logger.addHandler(handler)

    _INITIALIZED = True
