"""A ZIP reader over bytes held in memory, allowing independent entry readers."""

from __future__ import annotations

import io
import os

from .archive import ZipFile
from .errors import EntryIndexOutOfBoundsError
from .readio import AsyncSeekable, ZipEntryReader
from .reader import compute_data_offset, read_file


class MemZipReader:
    """A ZIP reader over an in-memory archive.

    Every entry reader gets its own cursor over the shared data, so several
    entries may be read at the same time.
    """

    def __init__(self, data: bytes, file: ZipFile) -> None:
        self._data = data
        self._file = file

    @classmethod
    async def open(cls, data: bytes) -> MemZipReader:
        """Read the archive information from ``data`` and return a reader over it."""
        data = bytes(data)
        file = await read_file(AsyncSeekable(io.BytesIO(data)))
        return cls(data, file)

    @property
    def file(self) -> ZipFile:
        """The archive information."""
        return self._file

    @property
    def data(self) -> bytes:
        """The raw bytes the reader was opened with."""
        return self._data

    async def entry(self, index: int) -> ZipEntryReader:
        """Return a fresh reader for the entry at ``index``."""
        if not 0 <= index < min(len(self._file.entries), len(self._file.metas)):
            raise EntryIndexOutOfBoundsError()
        entry = self._file.entries[index]
        meta = self._file.metas[index]
        cursor = AsyncSeekable(io.BytesIO(self._data))
        await cursor.seek(compute_data_offset(entry, meta), os.SEEK_SET)
        return ZipEntryReader(cursor, entry.compression, entry.uncompressed_size)