# src/accesslog/core/logging/formatters.py
"""
ANSI coloring and diagnostic log formatters.

  - Colorer: wraps the ${status} value in an ANSI color code chosen by status
    class. Coloring is decided once per sink: only terminals get escape codes,
    files and pipes get the bare number so JSON lines stay parseable.

  - JsonFormatter / ColorFormatter: formatters for the library's own
    diagnostic records (the `accesslog` logger), registered by builder.py.
    Access lines never pass through them.
"""

import json
import logging
import os
from logging import LogRecord
from typing import Any

COLOR_CODES = {
    "GREEN": "\033[32m",
    "CYAN": "\033[36m",
    "YELLOW": "\033[33m",
    "RED": "\033[31m",
    "RESET": "\033[0m",
}


def supports_color(sink: Any) -> bool:
    """
    Return True when `sink` is an interactive terminal and NO_COLOR is unset.
    """
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sink, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        # closed or detached stream
        return False


class Colorer:
    """
    Status-code colorer.

    enabled=False turns every method into a plain str() so callers never
    branch on sink capabilities themselves.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    @classmethod
    def for_sink(cls, sink: Any) -> "Colorer":
        return cls(enabled=supports_color(sink))

    def paint(self, value: Any, color: str) -> str:
        if not self.enabled:
            return str(value)
        return f"{COLOR_CODES[color]}{value}{COLOR_CODES['RESET']}"

    def status(self, code: int) -> str:
        if code >= 500:
            return self.paint(code, "RED")
        if code >= 400:
            return self.paint(code, "YELLOW")
        if code >= 300:
            return self.paint(code, "CYAN")
        return self.paint(code, "GREEN")


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter for diagnostic records.

    Extras passed with `extra={...}` are included; values that are not JSON
    serializable are stringified so formatting never raises.
    """

    def __init__(self, *, service: str = "accesslog", datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in log_record or key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development formatter: TIMESTAMP | LEVEL | LOGGER | MESSAGE, level colored.
    """

    LEVEL_COLORS = {
        "DEBUG": "CYAN",
        "INFO": "GREEN",
        "WARNING": "YELLOW",
        "ERROR": "RED",
        "CRITICAL": "RED",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colorer = Colorer(enabled=True)

    def format(self, record: LogRecord) -> str:
        level = self.colorer.paint(f"{record.levelname:<8}", self.LEVEL_COLORS.get(record.levelname, "RESET"))
        base = (
            f"{self.formatTime(record, self.datefmt)} | {level} | "
            f"{record.name:<20} | {record.getMessage()}"
        )
        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)
        return base


# LogRecord attributes that are never treated as extras.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}
