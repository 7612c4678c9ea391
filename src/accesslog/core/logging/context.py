# src/accesslog/core/logging/context.py
"""
Per-request render context.

A RenderContext is built when a request enters the middleware and dropped
when its access line has been written. It is never shared between requests.

The error and application id are plain typed fields. Code handling the
request sets them through `set_request_error()` / `set_app_id()` (see
middleware.py), and the middleware copies them here once the handler is done.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from starlette.datastructures import Headers, QueryParams
from starlette.requests import cookie_parser
from starlette.types import Scope

from .capture import CaptureBuffer
from .timing import monotonic_ns

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class RenderContext:
    method: str = ""
    path: str = ""
    raw_uri: str = ""
    query: str = ""
    headers: Headers = field(default_factory=Headers)
    client_host: str = ""
    protocol: str = ""
    body: bytes = b""
    capture: CaptureBuffer = field(default_factory=CaptureBuffer)
    status: int = 200
    response_headers: Headers = field(default_factory=Headers)
    error: Any | None = None
    app_id: str | None = None
    start_ns: int = field(default_factory=monotonic_ns)
    stop_ns: int | None = None

    @classmethod
    def from_scope(cls, scope: Scope, body: bytes = b"", capture: CaptureBuffer | None = None) -> RenderContext:
        """
        Build a context from an ASGI HTTP scope and the request body snapshot.
        """
        query = scope.get("query_string", b"").decode("latin-1")
        raw_path = scope.get("raw_path")
        path = scope.get("path", "")
        raw_uri = raw_path.decode("latin-1") if raw_path else path
        if query:
            raw_uri = f"{raw_uri}?{query}"
        client = scope.get("client")
        return cls(
            method=scope.get("method", ""),
            path=path,
            raw_uri=raw_uri,
            query=query,
            headers=Headers(scope=scope),
            client_host=client[0] if client else "",
            protocol=f"HTTP/{scope.get('http_version', '1.1')}",
            body=body,
            capture=capture if capture is not None else CaptureBuffer(),
        )

    def finish(self, status: int | None = None) -> None:
        """Freeze the stop time; latency tags measure start -> finish."""
        if status is not None:
            self.status = status
        if self.stop_ns is None:
            self.stop_ns = monotonic_ns()

    @property
    def level(self) -> str:
        return "error" if self.error is not None else "info"

    @property
    def latency_ns(self) -> int:
        stop = self.stop_ns if self.stop_ns is not None else monotonic_ns()
        return max(0, stop - self.start_ns)

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def referer(self) -> str:
        return self.headers.get("referer", "")

    @property
    def remote_ip(self) -> str:
        """
        Client address as seen through proxies: first X-Forwarded-For entry,
        then X-Real-Ip, then the socket peer.
        """
        forwarded = self.headers.get("x-forwarded-for", "")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        real_ip = self.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip
        return self.client_host

    @property
    def request_id(self) -> str:
        return self.headers.get("x-request-id") or self.response_headers.get("x-request-id", "")

    @cached_property
    def query_params(self) -> QueryParams:
        return QueryParams(self.query)

    @cached_property
    def form(self) -> QueryParams:
        content_type = self.headers.get("content-type", "")
        if content_type.split(";")[0].strip().lower() != FORM_CONTENT_TYPE:
            return QueryParams("")
        return QueryParams(self.body.decode("utf-8", errors="replace"))

    @cached_property
    def cookies(self) -> dict[str, str]:
        return cookie_parser(self.headers.get("cookie", ""))

    def form_value(self, name: str) -> str:
        """Form body value first, query string second; empty when absent."""
        value = self.form.get(name)
        if value is None:
            value = self.query_params.get(name, "")
        return value
