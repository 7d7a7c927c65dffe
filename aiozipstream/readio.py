"""Async reading helpers: bounded reads, CRC32 hashing, and entry readers."""

from __future__ import annotations

import inspect
import os
import zlib
from typing import Any

from .codecs import Compression, CompressedReader
from .entry import ZipEntry
from .errors import CRC32CheckError, UpstreamReadError

_CHUNK_SIZE = 65536


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class AsyncSeekable:
    """Gives a plain binary file object async ``read``, ``seek`` and ``tell``."""

    def __init__(self, raw: Any) -> None:
        self._raw = raw

    @property
    def raw(self) -> Any:
        """The wrapped file object."""
        return self._raw

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when negative."""
        return self._raw.read(size)

    async def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move to ``offset`` relative to ``whence`` and return the new position."""
        return self._raw.seek(offset, whence)

    async def tell(self) -> int:
        """Return the current position."""
        return self._raw.tell()


class LimitedReader:
    """Reads at most ``limit`` bytes from an inner reader, then reports EOF."""

    def __init__(self, reader: Any, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self._reader = reader
        self._remaining = limit

    @property
    def remaining(self) -> int:
        """Bytes that may still be read."""
        return self._remaining

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes within the limit, or up to the limit when negative."""
        if self._remaining == 0 or size == 0:
            return b""
        wanted = self._remaining if size < 0 else min(size, self._remaining)
        data = bytes(await _resolve(self._reader.read(wanted)))
        data = data[:self._remaining]
        self._remaining -= len(data)
        return data


async def read_bytes(reader: Any, length: int) -> bytes:
    """Read up to ``length`` bytes, stopping early only at end of data."""
    limited = LimitedReader(reader, length)
    parts = []
    try:
        while chunk := await limited.read():
            parts.append(chunk)
    except OSError as exc:
        raise UpstreamReadError(exc) from exc
    return b"".join(parts)


async def read_string(reader: Any, length: int) -> str:
    """Read up to ``length`` bytes and decode them as UTF-8."""
    data = await read_bytes(reader, length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UpstreamReadError(exc) from exc


class HashedReader:
    """Computes the CRC32 of every byte read through it."""

    def __init__(self, reader: Any) -> None:
        self._reader = reader
        self._crc = 0

    async def read(self, size: int = -1) -> bytes:
        """Read from the inner reader, folding the data into the hash."""
        data = bytes(await _resolve(self._reader.read(size)))
        self._crc = zlib.crc32(data, self._crc)
        return data

    def swap_and_compute_hash(self) -> int:
        """Return the hash of data read so far and start a fresh one."""
        crc, self._crc = self._crc, 0
        return crc


class ZipEntryReader:
    """Reads and decompresses one entry's data, hashing what comes out."""

    def __init__(self, reader: Any, compression: Compression, size: int) -> None:
        limited = LimitedReader(reader, size)
        self._reader = HashedReader(CompressedReader(limited, Compression(compression)))

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` decompressed bytes; empty bytes mean EOF."""
        try:
            return await self._reader.read(size)
        except OSError as exc:
            raise UpstreamReadError(exc) from exc

    async def read_to_end(self) -> bytes:
        """Read every remaining decompressed byte."""
        parts = []
        while chunk := await self.read(_CHUNK_SIZE):
            parts.append(chunk)
        return b"".join(parts)

    def _verify(self, entry: ZipEntry) -> None:
        if self._reader.swap_and_compute_hash() != entry.crc32:
            raise CRC32CheckError()

    async def read_to_end_checked(self, entry: ZipEntry) -> bytes:
        """Read to EOF and check the data against the entry's CRC32."""
        data = await self.read_to_end()
        self._verify(entry)
        return data

    async def read_to_string_checked(self, entry: ZipEntry) -> str:
        """Read to EOF as UTF-8 text and check it against the entry's CRC32."""
        data = await self.read_to_end()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UpstreamReadError(exc) from exc
        self._verify(entry)
        return text