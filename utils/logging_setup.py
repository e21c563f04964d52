from __future__ import annotations

import logging
import sys
from typing import Any

from config.settings import get_settings


_INITIALIZED: bool = False

# SDK/HTTP loggers that echo every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai", "google_genai")


class SafeExtraFormatter(logging.Formatter):
    """Appends key=value pairs for the known extras, defaulting missing ones to '-'."""

    DEFAULTS: dict[str, Any] = {
        "step": "-",
        "status": "-",
        "duration_ms": "-",
        "provider": "-",
        "error": "-",
        "session": "-",
    }

    def __init__(self) -> None:
        pairs = " ".join(f"{key}=%({key})s" for key in self.DEFAULTS)
        super().__init__(fmt=f"%(asctime)s %(levelname)s %(name)s %(message)s {pairs}")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: str | None = None) -> None:
    """Configure the root logger once per process; later calls are no-ops."""
    global _INITIALIZED
    if _INITIALIZED:
        return

    log_level = getattr(logging, (level or get_settings().log_level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Keep handlers installed by the host (pytest, uvicorn with a log config)
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(SafeExtraFormatter())
        root_logger.addHandler(handler)

    if log_level > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    _INITIALIZED = True
