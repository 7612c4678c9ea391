"""
Logging builder for the library's own diagnostics.

Access lines go straight to their sink and never through `logging`. What
goes through `logging` is what the library has to say about itself: dropped
lines, sink failures, exceptions passing through the middleware. Those
records are emitted on the `accesslog` logger hierarchy, and this module
configures that hierarchy from Settings via `logging.config.dictConfig`:

 - formatters: "json" (JsonFormatter) and "standard" (ColorFormatter when
   LOG_FORMAT == "text", the plain logging.Formatter otherwise)
 - filters: "redact" (RedactFilter)
 - handlers: one console handler on stderr
 - loggers: "accesslog" only; the root logger and other libraries' loggers
   are left untouched.
"""

from __future__ import annotations

import logging
import logging.config

from accesslog.config.settings import Settings

from .filters import RedactFilter
from .formatters import ColorFormatter, JsonFormatter

LOGGER_NAME = "accesslog"


def get_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stderr",
        "formatter": "json" if settings.LOG_FORMAT == "json" else "standard",
        "level": settings.LOG_LEVEL,
        "filters": ["redact"],
    }


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping for the `accesslog` logger from `settings`.
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "service": LOGGER_NAME,
        },
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {"redact": {"()": RedactFilter}},
        "handlers": {"console": get_console_handler(settings)},
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["console"],
                "level": settings.LOG_LEVEL,
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> logging.Logger:
    """Apply the diagnostics logging config and return the `accesslog` logger."""
    logging.config.dictConfig(make_dict_config(settings))
    return logging.getLogger(LOGGER_NAME)
