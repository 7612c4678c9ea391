# src/accesslog/core/logging/capture.py
"""
Response capture.

Both wrappers mirror outgoing response bytes into a CaptureBuffer owned by a
single request, so the ${response} and ${bytes_out} tags can be rendered after
the handler finished:

  - ResponseCapture decorates a plain writer (anything with `write(bytes)`).
  - CaptureSend decorates an ASGI `send` callable; this is what the middleware
    installs.

The buffer grows for the whole request. Pass `limit` to keep at most that many
bytes; `total` still counts everything that was written.
"""

from starlette.types import Message, Send


class CaptureBuffer:
    """Growable in-memory mirror of a response body."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit
        self.total = 0
        self._data = bytearray()

    def append(self, data: bytes) -> None:
        self.total += len(data)
        if self.limit is None:
            self._data += data
            return
        room = self.limit - len(self._data)
        if room > 0:
            self._data += data[:room]

    @property
    def truncated(self) -> bool:
        return self.total > len(self._data)

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)


class ResponseCapture:
    """
    Writer decorator: every write goes to the capture buffer first, then to the
    wrapped writer. The wrapped writer's return value is returned and its
    exceptions propagate; the in-memory append cannot fail.
    """

    def __init__(self, writer, limit: int | None = None) -> None:
        self.writer = writer
        self.buffer = CaptureBuffer(limit)

    def write(self, data: bytes) -> int:
        self.buffer.append(data)
        return self.writer.write(data)

    def __getattr__(self, name: str):
        # flush(), close(), ... of the wrapped writer stay reachable
        return getattr(self.writer, name)


class CaptureSend:
    """
    ASGI `send` decorator recording the response status, headers and body.

    Messages are forwarded unchanged and in order.
    """

    def __init__(self, send: Send, limit: int | None = None) -> None:
        self._send = send
        self.buffer = CaptureBuffer(limit)
        self.status: int | None = None
        self.headers: list[tuple[bytes, bytes]] = []

    @property
    def started(self) -> bool:
        return self.status is not None

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            body = message.get("body", b"")
            if body:
                self.buffer.append(body)
        await self._send(message)
