"""
Custom exceptions for access-log rendering.

None of these ever reach the request being logged: the render pipeline
catches them, drops the line and reports the drop on the `accesslog`
diagnostic logger.
"""


class AccessLogError(Exception):
    """
    Base exception for access-log errors.

    - message: short human-friendly message
    - details: optional extra context (tag name, sink type, ...), for logs only
    """

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict describing the error.
        `details` is intentionally left out; it may carry internals.
        """
        return {"detail": self.message, "code": type(self).__name__}


class RenderError(AccessLogError):
    """A tag failed to resolve while the template was being walked."""

    def __init__(self, tag: str, reason: str):
        super().__init__(f"Failed to render tag {tag!r}", reason)
        self.tag = tag


class SinkWriteError(AccessLogError):
    """The output sink rejected a rendered line."""

    def __init__(self, sink: object, reason: str):
        super().__init__(f"Failed to write to {type(sink).__name__}", reason)
        self.sink = sink
