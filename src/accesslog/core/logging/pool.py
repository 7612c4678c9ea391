"""
Reusable render buffers.

Buffers live in a thread-safe LIFO queue. `acquire()` hands one out, cleared,
for exclusive use by the caller, and puts it back when the `with` block exits,
whether or not rendering succeeded. When the queue is empty a new buffer is
created; when it is full the returned buffer is simply discarded.
"""

import queue as _queue
from contextlib import contextmanager
from typing import Iterator


class BufferPool:
    def __init__(self, max_idle: int = 64, max_buffer_size: int = 64 * 1024) -> None:
        self._idle: _queue.LifoQueue[bytearray] = _queue.LifoQueue(maxsize=max_idle)
        # oversized buffers (large bodies) are not kept around
        self.max_buffer_size = max_buffer_size

    def get(self) -> bytearray:
        try:
            buf = self._idle.get_nowait()
        except _queue.Empty:
            return bytearray()
        buf.clear()
        return buf

    def put(self, buf: bytearray) -> None:
        if len(buf) > self.max_buffer_size:
            return
        try:
            self._idle.put_nowait(buf)
        except _queue.Full:
            pass

    @contextmanager
    def acquire(self) -> Iterator[bytearray]:
        buf = self.get()
        try:
            yield buf
        finally:
            self.put(buf)

    @property
    def idle(self) -> int:
        return self._idle.qsize()
