# src/accesslog/core/logging/
# ├─ __init__.py            # public API
# ├─ template.py            # compile_template(): format string -> Template
# ├─ context.py             # RenderContext (one per request)
# ├─ tags.py                # TagResolver: tag name -> bytes
# ├─ timing.py              # clocks, latency_human and RFC 3339 rendering
# ├─ capture.py             # ResponseCapture / CaptureSend (response mirroring)
# ├─ filters.py             # redact(), RedactFilter
# ├─ formatters.py          # Colorer (status colors), diagnostic formatters
# ├─ pool.py                # BufferPool
# ├─ sink.py                # SinkWriter (line-atomic writes)
# ├─ pipeline.py            # RenderPipeline: skip / render / write
# ├─ middleware.py          # AccessLogMiddleware (ASGI)
# └─ builder.py             # dictConfig for the library's own diagnostics


from .builder import make_dict_config, setup_logging
from .capture import CaptureBuffer, CaptureSend, ResponseCapture
from .context import RenderContext
from .filters import RedactFilter, redact
from .middleware import AccessLogMiddleware, set_app_id, set_request_error
from .pipeline import RenderPipeline, RenderState
from .tags import TagResolver
from .template import Template, compile_template

__all__ = [
    "AccessLogMiddleware",
    "CaptureBuffer",
    "CaptureSend",
    "RedactFilter",
    "RenderContext",
    "RenderPipeline",
    "RenderState",
    "ResponseCapture",
    "TagResolver",
    "Template",
    "compile_template",
    "make_dict_config",
    "redact",
    "set_app_id",
    "set_request_error",
    "setup_logging",
]
