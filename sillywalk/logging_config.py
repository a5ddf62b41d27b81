"""Logging setup and helpers shared by the API and the services.

Two named channels sit next to the usual module loggers:
``SECURITY`` records detected attacks (with the matched category) and
``AUDIT`` records who asked for what.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

security_logger = logging.getLogger("SECURITY")
audit_logger = logging.getLogger("AUDIT")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_LINE_BREAKS = re.compile(r"[\r\n\t]")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""
    root = logging.getLogger()
    if not any(getattr(h, "_sillywalk", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sillywalk = True
        root.addHandler(handler)
    root.setLevel(level.upper())


def sanitize_for_logging(value: Optional[str], max_length: int = 50) -> str:
    """Neutralise user input before it is written to a log line."""
    if value is None:
        return "null"
    cleaned = _LINE_BREAKS.sub("_", value)
    cleaned = _CONTROL.sub("?", cleaned)
    return cleaned[:max_length]
