# src/accesslog/core/logging/middleware.py
"""
Access-log middleware for Starlette / FastAPI.

Purpose
-------
Writes one access line per HTTP request, rendered from the configured format
string, to the configured sink.

How it works
------------
1. The request body is read completely and replayed to the application, so
   handlers can still read it and ${body} / ${bytes_in} can be rendered.
2. The start time is taken and `send` is wrapped in a CaptureSend that
   mirrors status, headers and body bytes.
3. The application runs to completion.
4. The error and application id set by the handler (see `set_request_error`
   and `set_app_id`) are copied into the RenderContext.
5. RenderPipeline.emit() skips the request or renders and writes the line.

If the application raises, the line is still written with status 500 and the
exception as ${error}, then the exception is re-raised unchanged. Failures of
the logging itself never reach the request.

This is a pure ASGI middleware rather than a BaseHTTPMiddleware subclass:
the response body has to be observed as it is sent, and the request body has
to be replayed to the application.

Integration
-----------
    app.add_middleware(AccessLogMiddleware, config=LoggerConfig(output=sys.stdout))
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from accesslog.config.settings import LoggerConfig

from .capture import CaptureSend
from .context import RenderContext
from .pipeline import RenderPipeline

logger = logging.getLogger(__name__)

CONTEXT_ERROR = "context_error"
CONTEXT_APP_ID = "context_app_id"


def set_request_error(request: Request, error: Any) -> None:
    """Attach an error to the request; its access line gets level "error"."""
    setattr(request.state, CONTEXT_ERROR, error)


def set_app_id(request: Request, app_id: str | None) -> None:
    """Attach the application id rendered by ${app_id}."""
    setattr(request.state, CONTEXT_APP_ID, app_id)


async def read_body(receive: Receive) -> bytes:
    """Drain the request body from `receive`."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def replay_body(body: bytes, receive: Receive) -> Receive:
    """Return a `receive` that yields `body` once, then defers to the original."""
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class AccessLogMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        config: LoggerConfig | None = None,
        pipeline: RenderPipeline | None = None,
    ) -> None:
        self.app = app
        self.pipeline = pipeline or RenderPipeline(config or LoggerConfig())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        body = await read_body(receive)
        capture = CaptureSend(send, limit=self.pipeline.config.capture_limit)
        ctx = RenderContext.from_scope(scope, body, capture.buffer)
        state = scope.setdefault("state", {})

        try:
            await self.app(scope, replay_body(body, receive), capture)
        except Exception as exc:
            self._collect(ctx, state, capture)
            if ctx.error is None:
                ctx.error = exc
            ctx.finish(status=capture.status if capture.started else 500)
            self._emit(ctx)
            raise

        self._collect(ctx, state, capture)
        ctx.finish(status=capture.status if capture.started else 200)
        self._emit(ctx)

    @staticmethod
    def _collect(ctx: RenderContext, state: dict, capture: CaptureSend) -> None:
        ctx.error = state.get(CONTEXT_ERROR)
        app_id = state.get(CONTEXT_APP_ID)
        ctx.app_id = None if app_id is None else str(app_id)
        ctx.response_headers = Headers(raw=capture.headers)

    def _emit(self, ctx: RenderContext) -> None:
        try:
            self.pipeline.emit(ctx)
        except Exception:
            logger.exception("Access log pipeline failed for %s %s", ctx.method, ctx.path)
