import bz2
import io
import lzma
import zlib

import pytest

from aiozipstream.codecs import (
    CompressedReader,
    CompressedWriter,
    Compression,
    DeflateOption,
    compress,
)
from aiozipstream.errors import CompressionNotSupportedError, UpstreamReadError
from aiozipstream.offset import OffsetWriter

COMPRESSED = [
    Compression.DEFLATE,
    Compression.BZ,
    Compression.LZMA,
    Compression.ZSTD,
    Compression.XZ,
]


class AsyncBytesReader:
    def __init__(self, data):
        self._buf = io.BytesIO(data)

    async def read(self, size=-1):
        return self._buf.read(size)


@pytest.mark.asyncio
async def test_stored():
    reader = CompressedReader(io.BytesIO(b"foo bar"), Compression.STORED)
    data = await reader.read()
    assert data.decode() == "foo bar"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", COMPRESSED)
async def test_compressed_foo_bar(method):
    reader = CompressedReader(AsyncBytesReader(compress(method, b"foo bar")), method)
    assert (await reader.read()).decode() == "foo bar"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", COMPRESSED)
async def test_small_reads_reassemble(method):
    payload = bytes(range(256)) * 200
    reader = CompressedReader(AsyncBytesReader(compress(method, payload)), method)
    parts = []
    while True:
        part = await reader.read(1000)
        if not part:
            break
        assert len(part) <= 1000
        parts.append(part)
    assert b"".join(parts) == payload


@pytest.mark.asyncio
@pytest.mark.parametrize("method", [Compression.STORED, *COMPRESSED])
async def test_writer_round_trip(method):
    sink = io.BytesIO()
    writer = CompressedWriter(OffsetWriter(sink), method)
    payload = b"streamed data " * 500
    assert await writer.write(payload[:3000]) == 3000
    await writer.flush()
    await writer.write(payload[3000:])
    await writer.shutdown()
    reader = CompressedReader(AsyncBytesReader(sink.getvalue()), method)
    assert await reader.read() == payload


@pytest.mark.asyncio
async def test_writer_inner_and_closed():
    inner = OffsetWriter(io.BytesIO())
    writer = CompressedWriter(inner, Compression.DEFLATE)
    assert writer.inner is inner
    await writer.write(b"abc")
    await writer.shutdown()
    with pytest.raises(ValueError):
        await writer.write(b"more")


def test_deflate_is_raw_stream():
    data = b"hello hello hello"
    assert zlib.decompress(compress(Compression.DEFLATE, data), -15) == data


def test_lzma_uses_alone_format():
    data = b"lzma payload"
    out = compress(Compression.LZMA, data)
    assert lzma.decompress(out, format=lzma.FORMAT_ALONE) == data


def test_bz_and_xz_match_stdlib():
    data = b"x" * 1000
    assert bz2.decompress(compress(Compression.BZ, data)) == data
    assert lzma.decompress(compress(Compression.XZ, data), format=lzma.FORMAT_XZ) == data


def test_out_of_range_level_is_clamped():
    data = b"clamp me" * 50
    assert zlib.decompress(compress(Compression.DEFLATE, data, 100), -15) == data


def test_stored_compress_is_identity():
    assert compress(Compression.STORED, b"raw") == b"raw"


@pytest.mark.asyncio
async def test_truncated_stream_raises():
    out = compress(Compression.BZ, b"some data" * 100)
    reader = CompressedReader(AsyncBytesReader(out[: len(out) // 2]), Compression.BZ)
    with pytest.raises(UpstreamReadError):
        await reader.read()


@pytest.mark.asyncio
async def test_corrupt_stream_raises():
    reader = CompressedReader(AsyncBytesReader(b"\xff" * 64), Compression.XZ)
    with pytest.raises(UpstreamReadError):
        await reader.read()


@pytest.mark.parametrize(
    "code, method",
    [(0, Compression.STORED), (8, Compression.DEFLATE), (12, Compression.BZ),
     (14, Compression.LZMA), (93, Compression.ZSTD), (95, Compression.XZ)],
)
def test_from_code(code, method):
    assert Compression.from_code(code) is method
    assert int(method) == code


def test_from_code_unsupported():
    with pytest.raises(CompressionNotSupportedError) as info:
        Compression.from_code(1)
    assert info.value.value == 1


def test_deflate_option_levels():
    assert DeflateOption("other", 5).level() == 5
    assert DeflateOption.NORMAL.level() is None
    assert DeflateOption.MAXIMUM.level() is None


def test_deflate_option_validation():
    with pytest.raises(ValueError):
        DeflateOption("other")
    with pytest.raises(ValueError):
        DeflateOption("bogus")