from .base import AccessLogError, RenderError, SinkWriteError

__all__ = ["AccessLogError", "RenderError", "SinkWriteError"]
