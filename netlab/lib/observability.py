"""Logging and timing helpers for NetLab.

Configures the root logger for either the CLI (console output) or the
full-screen TUI, where console output would corrupt the display and log
records are routed to a file or to the Textual devtools console instead.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "PhaseTimer",
    "JSONFormatter",
    "setup_logging",
]


@dataclass
class PhaseTimer:
    """Timer tracking a named phase, such as one lab workflow run."""

    name: str
    start_time: float = field(default_factory=time.monotonic)
    end_time: Optional[float] = None

    def stop(self) -> float:
        """Stop the timer and return the duration (seconds)."""
        if self.end_time is None:
            self.end_time = time.monotonic()
        return self.duration

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        end = self.end_time if self.end_time is not None else time.monotonic()
        return end - self.start_time

    @property
    def running(self) -> bool:
        """Whether the timer is still running."""
        return self.end_time is None


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as JSON."""

    def __init__(
        self,
        include_fields: Optional[List[str]] = None,
        exclude_fields: Optional[List[str]] = None,
    ):
        super().__init__()
        self.include_fields = include_fields or []
        self.exclude_fields = exclude_fields or []

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for field_name in self.include_fields:
            if hasattr(record, field_name):
                payload[field_name] = getattr(record, field_name)

        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in logging.LogRecord("", 0, "", 0, "", (), None).__dict__
            and k not in ("message", "asctime")
            and k not in self.exclude_fields
        }
        if extra_attrs:
            payload["extra"] = extra_attrs

        return json.dumps(payload, default=str)


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    console: bool = True,
) -> None:
    """Configure the root logger with optional JSON formatting.

    Args:
        verbose: Enable debug-level logging
        json_format: Use JSON output format
        log_file: Optional file path to write logs to
        console: Write to stderr. The TUI passes False; without a log file
            records then go to the Textual devtools console.
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = JSONFormatter() if json_format else logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not console and not log_file:
        from textual.logging import TextualHandler

        textual_handler = TextualHandler()
        textual_handler.setLevel(level)
        textual_handler.setFormatter(formatter)
        root_logger.addHandler(textual_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
