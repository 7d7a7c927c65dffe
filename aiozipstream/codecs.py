"""Compression methods and streaming compressing/decompressing wrappers."""

from __future__ import annotations

import bz2
import enum
import inspect
import lzma
import zlib
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, NamedTuple

import zstandard

from .errors import CompressionNotSupportedError, UpstreamReadError

_CHUNK_SIZE = 8192

_DEFLATE_KINDS = frozenset({"normal", "maximum", "fast", "super", "other"})


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Compression(enum.IntEnum):
    """A compression method, valued by its ZIP method code."""

    STORED = 0
    DEFLATE = 8
    BZ = 12
    LZMA = 14
    ZSTD = 93
    XZ = 95

    @classmethod
    def from_code(cls, value: int) -> Compression:
        """Return the method for a ZIP method code."""
        try:
            return cls(value)
        except ValueError:
            raise CompressionNotSupportedError(value) from None


@dataclass(frozen=True)
class DeflateOption:
    """Deflate compression option; only ``other`` carries an explicit level."""

    kind: str = "normal"
    value: int | None = None

    NORMAL: ClassVar[DeflateOption]
    MAXIMUM: ClassVar[DeflateOption]
    FAST: ClassVar[DeflateOption]
    SUPER: ClassVar[DeflateOption]

    def __post_init__(self) -> None:
        if self.kind not in _DEFLATE_KINDS:
            raise ValueError(f"unknown deflate option: {self.kind!r}")
        if (self.kind == "other") != (self.value is not None):
            raise ValueError("only the 'other' deflate option carries a level")

    def level(self) -> int | None:
        """Return the explicit level, or None for the default level."""
        return self.value if self.kind == "other" else None


DeflateOption.NORMAL = DeflateOption("normal")
DeflateOption.MAXIMUM = DeflateOption("maximum")
DeflateOption.FAST = DeflateOption("fast")
DeflateOption.SUPER = DeflateOption("super")


# (lowest, highest, default) level per method.
_LEVELS = {
    Compression.DEFLATE: (0, 9, 6),
    Compression.BZ: (1, 9, 6),
    Compression.LZMA: (0, 9, 6),
    Compression.XZ: (0, 9, 6),
    Compression.ZSTD: (1, 22, 3),
}


def _effective_level(compression: Compression, level: int | None) -> int:
    low, high, default = _LEVELS[compression]
    if level is None:
        return default
    return min(max(level, low), high)


class _Encoder(NamedTuple):
    compress: Callable[[bytes], bytes]
    flush: Callable[[], bytes]
    finish: Callable[[], bytes]


def _new_encoder(compression: Compression, level: int | None) -> _Encoder:
    lvl = _effective_level(compression, level)
    if compression is Compression.DEFLATE:
        zobj = zlib.compressobj(lvl, zlib.DEFLATED, -zlib.MAX_WBITS)
        return _Encoder(zobj.compress, lambda: zobj.flush(zlib.Z_SYNC_FLUSH), zobj.flush)
    if compression is Compression.BZ:
        bobj = bz2.BZ2Compressor(lvl)
        return _Encoder(bobj.compress, lambda: b"", bobj.flush)
    if compression in (Compression.LZMA, Compression.XZ):
        fmt = lzma.FORMAT_ALONE if compression is Compression.LZMA else lzma.FORMAT_XZ
        lobj = lzma.LZMACompressor(format=fmt, preset=lvl)
        return _Encoder(lobj.compress, lambda: b"", lobj.flush)
    zsobj = zstandard.ZstdCompressor(level=lvl).compressobj()
    return _Encoder(
        zsobj.compress,
        lambda: zsobj.flush(zstandard.COMPRESSOBJ_FLUSH_BLOCK),
        lambda: zsobj.flush(zstandard.COMPRESSOBJ_FLUSH_FINISH),
    )


class _StdlibDecoder:
    def __init__(self, obj: Any) -> None:
        self._obj = obj

    @property
    def eof(self) -> bool:
        return bool(self._obj.eof)

    def decompress(self, data: bytes) -> bytes:
        return self._obj.decompress(data)

    def finish(self) -> bytes:
        if not self._obj.eof:
            raise UpstreamReadError(EOFError("compressed stream ended unexpectedly"))
        return b""


class _ZlibDecoder(_StdlibDecoder):
    def finish(self) -> bytes:
        tail = self._obj.flush()
        super().finish()
        return tail


class _ZstdDecoder:
    eof = False

    def __init__(self) -> None:
        self._obj = zstandard.ZstdDecompressor().decompressobj()

    def decompress(self, data: bytes) -> bytes:
        return self._obj.decompress(data)

    def finish(self) -> bytes:
        return b""


def _new_decoder(compression: Compression) -> Any:
    if compression is Compression.STORED:
        return None
    if compression is Compression.DEFLATE:
        return _ZlibDecoder(zlib.decompressobj(-zlib.MAX_WBITS))
    if compression is Compression.BZ:
        return _StdlibDecoder(bz2.BZ2Decompressor())
    if compression is Compression.LZMA:
        return _StdlibDecoder(lzma.LZMADecompressor(format=lzma.FORMAT_ALONE))
    if compression is Compression.XZ:
        return _StdlibDecoder(lzma.LZMADecompressor(format=lzma.FORMAT_XZ))
    return _ZstdDecoder()


_DECODE_ERRORS = (zlib.error, OSError, lzma.LZMAError, zstandard.ZstdError)


class CompressedReader:
    """Reads decompressed data from a reader of compressed data.

    The wrapped reader needs a ``read(size)`` method, plain or async.
    """

    def __init__(self, reader: Any, compression: Compression) -> None:
        self._reader = reader
        self.compression = Compression(compression)
        self._decoder = _new_decoder(self.compression)
        self._pending = bytearray()
        self._done = False

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` decompressed bytes, or all when negative."""
        if self._decoder is None:
            return bytes(await _resolve(self._reader.read(size)))
        if size == 0:
            return b""
        if size < 0:
            while not self._done:
                await self._fill()
            out = bytes(self._pending)
            self._pending.clear()
            return out
        while not self._pending and not self._done:
            await self._fill()
        out = bytes(self._pending[:size])
        del self._pending[:size]
        return out

    async def _fill(self) -> None:
        chunk = await _resolve(self._reader.read(_CHUNK_SIZE))
        try:
            if chunk:
                self._pending += self._decoder.decompress(bytes(chunk))
                if self._decoder.eof:
                    self._done = True
            else:
                self._pending += self._decoder.finish()
                self._done = True
        except _DECODE_ERRORS as exc:
            raise UpstreamReadError(exc) from exc


class CompressedWriter:
    """Compresses written data into an inner writer.

    The inner writer needs async ``write_all(data)`` and ``flush()`` methods.
    Shutting this writer down finishes the compressed stream but leaves the
    inner writer open.
    """

    def __init__(self, writer: Any, compression: Compression, level: int | None = None) -> None:
        self._writer = writer
        self.compression = Compression(compression)
        self._encoder = (
            None if self.compression is Compression.STORED else _new_encoder(self.compression, level)
        )
        self._closed = False

    @property
    def inner(self) -> Any:
        """The wrapped writer."""
        return self._writer

    async def write(self, data: bytes) -> int:
        """Compress and write ``data``; return the number of input bytes taken."""
        if self._closed:
            raise ValueError("write to a compressed writer that was shut down")
        if not data:
            return 0
        if self._encoder is None:
            await self._writer.write_all(data)
        else:
            out = self._encoder.compress(bytes(data))
            if out:
                await self._writer.write_all(out)
        return len(data)

    async def flush(self) -> None:
        """Push buffered compressed data to the inner writer and flush it."""
        if self._encoder is not None and not self._closed:
            out = self._encoder.flush()
            if out:
                await self._writer.write_all(out)
        await _resolve(self._writer.flush())

    async def shutdown(self) -> None:
        """Finish the compressed stream without shutting the inner writer down."""
        if self._closed:
            return
        self._closed = True
        if self._encoder is not None:
            out = self._encoder.finish()
            if out:
                await self._writer.write_all(out)
        await _resolve(self._writer.flush())


def compress(compression: Compression, data: bytes, level: int | None = None) -> bytes:
    """Compress ``data`` in one go with the given method and level."""
    compression = Compression(compression)
    if compression is Compression.STORED:
        return bytes(data)
    encoder = _new_encoder(compression, level)
    return encoder.compress(bytes(data)) + encoder.finish()