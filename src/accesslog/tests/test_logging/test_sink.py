import io
import threading

import pytest

from accesslog.core.logging.sink import SinkWriter
from accesslog.exceptions.base import SinkWriteError


class BrokenSink:
    def write(self, data):
        raise OSError("disk full")


def test_bytes_sink_receives_raw_bytes(byte_sink):
    assert SinkWriter(byte_sink).write(b"line\n") is True
    assert byte_sink.getvalue() == b"line\n"


def test_text_sink_receives_decoded_text(text_sink):
    SinkWriter(text_sink).write("café\n".encode())
    assert text_sink.getvalue() == "café\n"


def test_failed_writes_are_dropped():
    assert SinkWriter(BrokenSink()).write(b"line\n") is False


def test_write_or_raise_wraps_errors():
    with pytest.raises(SinkWriteError) as exc_info:
        SinkWriter(BrokenSink()).write_or_raise(b"line\n")
    assert "disk full" in str(exc_info.value)


def test_closed_stream_is_dropped():
    stream = io.BytesIO()
    stream.close()
    assert SinkWriter(stream).write(b"line\n") is False


def test_each_write_is_one_call():
    calls = []

    class Recorder:
        def write(self, data):
            calls.append(data)

    writer = SinkWriter(Recorder())
    threads = [threading.Thread(target=writer.write, args=(f"line {i}\n".encode(),)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(calls) == sorted(f"line {i}\n".encode() for i in range(20))
