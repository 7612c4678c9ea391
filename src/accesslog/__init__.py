"""Placeholder-based HTTP access logging for Starlette / FastAPI applications."""

from accesslog.config.settings import DEFAULT_FORMAT, LoggerConfig, Settings, get_settings
from accesslog.core.logging import (
    AccessLogMiddleware,
    RenderContext,
    RenderPipeline,
    compile_template,
    redact,
    set_app_id,
    set_request_error,
    setup_logging,
)

__all__ = [
    "DEFAULT_FORMAT",
    "AccessLogMiddleware",
    "LoggerConfig",
    "RenderContext",
    "RenderPipeline",
    "Settings",
    "compile_template",
    "get_settings",
    "redact",
    "set_app_id",
    "set_request_error",
    "setup_logging",
]
