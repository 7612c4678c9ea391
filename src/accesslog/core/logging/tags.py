# src/accesslog/core/logging/tags.py
"""
Tag resolver: maps a tag name to its bytes for one request.

Dispatch order:
  1. exact tag name (time_unix, status, body, ...);
  2. parameterized prefix (header:, query:, form:, cookie:), the remainder
     being the parameter name;
  3. anything else renders as b"" so a typo in a format string degrades the
     line instead of breaking the pipeline.

Resolver methods return str or bytes; `resolve()` normalizes to bytes.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable

from .context import RenderContext
from .filters import redact
from .formatters import Colorer
from .timing import format_custom, format_duration, format_rfc3339, format_rfc3339_nano

TagFunc = Callable[["TagResolver", RenderContext], "str | bytes"]

_EXACT: dict[str, TagFunc] = {}
_PREFIXED: dict[str, TagFunc] = {}


def tag(name: str):
    """Register a resolver method for the exact tag `name`."""

    def decorator(func: TagFunc) -> TagFunc:
        _EXACT[name] = func
        return func

    return decorator


def prefixed(prefix: str):
    """Register a resolver method for tags starting with `prefix`."""

    def decorator(func):
        _PREFIXED[prefix] = func
        return func

    return decorator


def serialize_error(error: Any) -> str:
    """
    JSON for the ${error} tag: null when absent, the payload of errors that
    expose `to_payload()`, the message string of other exceptions.
    """
    if error is None:
        return "null"
    to_payload = getattr(error, "to_payload", None)
    if callable(to_payload):
        return json.dumps(to_payload(), ensure_ascii=False, default=str)
    if isinstance(error, BaseException):
        return json.dumps(str(error), ensure_ascii=False)
    return json.dumps(error, ensure_ascii=False, default=str)


class TagResolver:
    """
    Resolves tags against a RenderContext.

    Construction:
      - custom_time_format: strftime layout for ${time_custom}.
      - colorer: decides whether ${status} carries ANSI color codes.
      - clock: wall clock in nanoseconds, injectable for tests.
    """

    def __init__(
        self,
        custom_time_format: str,
        colorer: Colorer | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.custom_time_format = custom_time_format
        self.colorer = colorer or Colorer(enabled=False)
        self.clock = clock

    def resolve(self, name: str, ctx: RenderContext) -> bytes:
        func = _EXACT.get(name)
        if func is not None:
            return _to_bytes(func(self, ctx))
        prefix, sep, param = name.partition(":")
        if sep:
            func = _PREFIXED.get(prefix + sep)
            if func is not None:
                return _to_bytes(func(self, ctx, param))
        return b""

    # --- time ---

    @tag("time_unix")
    def time_unix(self, ctx: RenderContext) -> str:
        return str(self.clock() // 1_000_000_000)

    @tag("time_unix_nano")
    def time_unix_nano(self, ctx: RenderContext) -> str:
        return str(self.clock())

    @tag("time_rfc3339")
    def time_rfc3339(self, ctx: RenderContext) -> str:
        return format_rfc3339(self.clock())

    @tag("time_rfc3339_nano")
    def time_rfc3339_nano(self, ctx: RenderContext) -> str:
        return format_rfc3339_nano(self.clock())

    @tag("time_custom")
    def time_custom(self, ctx: RenderContext) -> str:
        return format_custom(self.clock(), self.custom_time_format)

    # --- request ---

    @tag("id")
    def request_id(self, ctx: RenderContext) -> str:
        return ctx.request_id

    @tag("remote_ip")
    def remote_ip(self, ctx: RenderContext) -> str:
        return ctx.remote_ip

    @tag("host")
    def host(self, ctx: RenderContext) -> str:
        return ctx.host

    @tag("uri")
    def uri(self, ctx: RenderContext) -> str:
        return ctx.raw_uri

    @tag("method")
    def method(self, ctx: RenderContext) -> str:
        return ctx.method

    @tag("path")
    def path(self, ctx: RenderContext) -> str:
        return ctx.path or "/"

    @tag("query")
    def query(self, ctx: RenderContext) -> str:
        return ctx.query

    @tag("protocol")
    def protocol(self, ctx: RenderContext) -> str:
        return ctx.protocol

    @tag("referer")
    def referer(self, ctx: RenderContext) -> str:
        return ctx.referer

    @tag("user_agent")
    def user_agent(self, ctx: RenderContext) -> str:
        return ctx.user_agent

    @tag("bytes_in")
    def bytes_in(self, ctx: RenderContext) -> str:
        return str(len(ctx.body))

    @tag("body")
    def body(self, ctx: RenderContext) -> str:
        return redact(ctx.body.decode("utf-8", errors="replace"))

    # --- response ---

    @tag("status")
    def status(self, ctx: RenderContext) -> str:
        return self.colorer.status(ctx.status)

    @tag("bytes_out")
    def bytes_out(self, ctx: RenderContext) -> str:
        return str(ctx.capture.total)

    @tag("response")
    def response(self, ctx: RenderContext) -> str:
        return redact(ctx.capture.getvalue().decode("utf-8", errors="replace"))

    @tag("level")
    def level(self, ctx: RenderContext) -> str:
        return ctx.level

    @tag("error")
    def error(self, ctx: RenderContext) -> str:
        return serialize_error(ctx.error)

    @tag("app_id")
    def app_id(self, ctx: RenderContext) -> str:
        return ctx.app_id or ""

    @tag("latency")
    def latency(self, ctx: RenderContext) -> str:
        return str(ctx.latency_ns)

    @tag("latency_human")
    def latency_human(self, ctx: RenderContext) -> str:
        return format_duration(ctx.latency_ns)

    # --- parameterized ---

    @prefixed("header:")
    def header(self, ctx: RenderContext, name: str) -> str:
        return ctx.headers.get(name, "")

    @prefixed("query:")
    def query_param(self, ctx: RenderContext, name: str) -> str:
        return ctx.query_params.get(name, "")

    @prefixed("form:")
    def form_value(self, ctx: RenderContext, name: str) -> str:
        return ctx.form_value(name)

    @prefixed("cookie:")
    def cookie(self, ctx: RenderContext, name: str) -> str:
        return ctx.cookies.get(name, "")


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


SUPPORTED_TAGS = frozenset(_EXACT)
SUPPORTED_PREFIXES = frozenset(_PREFIXED)
