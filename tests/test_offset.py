import io

import pytest

from aiozipstream.offset import OffsetWriter


class AsyncSink:
    def __init__(self, limit=None):
        self.data = bytearray()
        self.limit = limit
        self.calls = []

    async def write(self, chunk):
        chunk = bytes(chunk)
        if self.limit is not None:
            chunk = chunk[: self.limit]
        self.data += chunk
        return len(chunk)

    async def flush(self):
        self.calls.append("flush")

    async def shutdown(self):
        self.calls.append("shutdown")


class StuckSink:
    async def write(self, chunk):
        return 0


@pytest.mark.asyncio
async def test_basic():
    writer = OffsetWriter(io.BytesIO())
    assert writer.offset == 0

    await writer.write_all(b"Foo. Bar. Foo. Bar.")
    assert writer.offset == 19

    await writer.write_all(b"Foo. Foo.")
    assert writer.offset == 28

    await writer.write_all(b"Bar. Bar.")
    assert writer.offset == 37


@pytest.mark.asyncio
async def test_async_inner_receives_data():
    sink = AsyncSink()
    writer = OffsetWriter(sink)
    await writer.write_all(b"abc")
    await writer.write_all(b"defg")
    assert bytes(sink.data) == b"abcdefg"
    assert writer.offset == len(sink.data)
    assert writer.inner is sink


@pytest.mark.asyncio
async def test_partial_writes_are_completed():
    sink = AsyncSink(limit=1)
    writer = OffsetWriter(sink)
    assert await writer.write(b"xyz") == 1
    await writer.write_all(b"hello")
    assert bytes(sink.data) == b"xhello"
    assert writer.offset == 6


@pytest.mark.asyncio
async def test_zero_write_raises():
    writer = OffsetWriter(StuckSink())
    with pytest.raises(OSError):
        await writer.write_all(b"data")
    assert writer.offset == 0


@pytest.mark.asyncio
async def test_flush_and_shutdown_delegate():
    sink = AsyncSink()
    writer = OffsetWriter(sink)
    await writer.flush()
    await writer.shutdown()
    assert sink.calls == ["flush", "shutdown"]


@pytest.mark.asyncio
async def test_shutdown_without_inner_shutdown_keeps_stream_usable():
    buf = io.BytesIO()
    writer = OffsetWriter(buf)
    await writer.write_all(b"kept")
    await writer.shutdown()
    assert buf.getvalue() == b"kept"