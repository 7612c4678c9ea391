# src/accesslog/core/logging/pipeline.py
"""
Render pipeline: compile once, render and write once per request.

Per request:

    START -> CAPTURE_INSTALLED -> HANDLER_RUN -> RENDERED -> FLUSHED
                                             \\-> SKIPPED  (path in skip set)

The first three states are driven by the middleware (middleware.py), which
owns the ASGI plumbing. This module handles the last part: given a finished
RenderContext, either skip it or render the compiled template into a pooled
buffer and hand the bytes to the sink in a single write.

Failure policy:
  - a tag that raises aborts the line (nothing is written) and the failure is
    reported on the diagnostic logger at DEBUG level;
  - sink failures are dropped by SinkWriter;
  - nothing raised here ever reaches the request.
"""

from __future__ import annotations

import logging
from enum import Enum

from accesslog.config.settings import LoggerConfig
from accesslog.exceptions.base import AccessLogError, RenderError

from .context import RenderContext
from .formatters import Colorer
from .pool import BufferPool
from .sink import SinkWriter
from .tags import TagResolver
from .template import Template, compile_template

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    START = "start"
    CAPTURE_INSTALLED = "capture_installed"
    HANDLER_RUN = "handler_run"
    RENDERED = "rendered"
    FLUSHED = "flushed"
    SKIPPED = "skipped"
    DROPPED = "dropped"


class RenderPipeline:
    """
    Shared, thread-safe renderer for one LoggerConfig.

    The template is compiled here, once. The buffer pool and the sink lock are
    the only mutable shared state.
    """

    def __init__(self, config: LoggerConfig, pool: BufferPool | None = None) -> None:
        self.config = config
        self.template: Template = compile_template(config.format)
        self.sink = SinkWriter(config.output)
        self.resolver = TagResolver(
            custom_time_format=config.custom_time_format,
            colorer=Colorer.for_sink(config.output),
        )
        self.pool = pool or BufferPool()

    def should_skip(self, ctx: RenderContext) -> bool:
        return ctx.path in self.config.skip

    def render_into(self, buf: bytearray, ctx: RenderContext) -> None:
        """
        Walk the template appending into `buf`.

        Raises:
            RenderError: when a tag resolver fails.
        """

        def resolve(name: str) -> bytes:
            try:
                return self.resolver.resolve(name, ctx)
            except Exception as exc:
                raise RenderError(name, repr(exc)) from exc

        self.template.execute(buf.extend, resolve)

    def render(self, ctx: RenderContext) -> bytes:
        """Render one line for `ctx` without writing it."""
        with self.pool.acquire() as buf:
            self.render_into(buf, ctx)
            return bytes(buf)

    def emit(self, ctx: RenderContext) -> RenderState:
        """
        Render `ctx` and write the line to the sink.

        Returns the terminal state reached: SKIPPED, FLUSHED, or DROPPED when
        rendering or writing failed.
        """
        if self.should_skip(ctx):
            return RenderState.SKIPPED

        ctx.finish()
        with self.pool.acquire() as buf:
            try:
                self.render_into(buf, ctx)
            except AccessLogError as exc:
                logger.debug("Access log line aborted for %s %s: %s", ctx.method, ctx.path, exc)
                return RenderState.DROPPED
            written = self.sink.write(bytes(buf))

        return RenderState.FLUSHED if written else RenderState.DROPPED
