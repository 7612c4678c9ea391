"""
Output sink adapter.

SinkWriter turns any writer into a line-atomic byte sink: each rendered line
is written with a single `write()` call under a lock, so lines from
concurrent requests never interleave. Text streams (sys.stdout, StringIO)
receive the line decoded as UTF-8.

Logging is fire-and-forget: `write()` drops failures after reporting them on
the diagnostic logger. `write_or_raise()` is the strict variant.
"""

import io
import logging
import threading
from typing import Any

from accesslog.exceptions.base import SinkWriteError

logger = logging.getLogger(__name__)


class SinkWriter:
    def __init__(self, output: Any) -> None:
        self.output = output
        self._text = isinstance(output, io.TextIOBase)
        self._lock = threading.Lock()

    def write_or_raise(self, data: bytes) -> None:
        payload = data.decode("utf-8", errors="replace") if self._text else data
        with self._lock:
            try:
                self.output.write(payload)
                flush = getattr(self.output, "flush", None)
                if callable(flush):
                    flush()
            except Exception as exc:
                raise SinkWriteError(self.output, str(exc)) from exc

    def write(self, data: bytes) -> bool:
        """Write one rendered line. Returns False when the line was dropped."""
        try:
            self.write_or_raise(data)
        except SinkWriteError as exc:
            logger.debug("Dropped access log line: %s", exc)
            return False
        return True
