# src/accesslog/api/error_handlers.py
"""
FastAPI exception handlers that attach handled exceptions to the access line.

Exceptions handled inside the application (HTTPException, validation errors)
never reach the access-log middleware as exceptions; the client just gets a
4xx response. These handlers record the exception with `set_request_error()`
first, so the access line carries level "error" and the ${error} payload,
then answer exactly as FastAPI's default handlers would.

How to use:
    app = FastAPI()
    app.add_middleware(AccessLogMiddleware, config=config)
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler as default_http_exception_handler,
    request_validation_exception_handler as default_validation_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from accesslog.core.logging.middleware import set_request_error
from accesslog.exceptions.base import AccessLogError

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    set_request_error(request, exc.detail)
    return await default_http_exception_handler(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # errors() is JSON-friendly; the exception object itself is not
    set_request_error(request, exc.errors())
    return await default_validation_handler(request, exc)


async def access_log_error_handler(request: Request, exc: AccessLogError) -> JSONResponse:
    """
    AccessLogError only escapes when application code calls strict helpers
    such as SinkWriter.write_or_raise() itself.
    """
    logger.warning("AccessLogError for %s %s: %s", request.method, request.url.path, exc)
    set_request_error(request, exc)
    return JSONResponse(status_code=500, content=exc.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AccessLogError, access_log_error_handler)
