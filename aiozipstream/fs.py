"""A ZIP reader over a file system path, opening the file anew for each entry."""

from __future__ import annotations

import os
import weakref
from pathlib import Path

from .archive import ZipFile
from .errors import EntryIndexOutOfBoundsError, UpstreamReadError
from .readio import AsyncSeekable, ZipEntryReader
from .reader import compute_data_offset, read_file


class FsZipReader:
    """A ZIP reader over a file system path.

    Every entry reader opens its own handle on the file, so several entries
    may be read at the same time. The handle closes with its entry reader.
    """

    def __init__(self, path: Path, file: ZipFile) -> None:
        self._path = path
        self._file = file

    @classmethod
    async def open(cls, path: str | os.PathLike[str]) -> FsZipReader:
        """Read the archive information at ``path`` and return a reader over it."""
        path = Path(path)
        try:
            with open(path, "rb") as handle:
                file = await read_file(AsyncSeekable(handle))
        except OSError as exc:
            raise UpstreamReadError(exc) from exc
        return cls(path, file)

    @property
    def file(self) -> ZipFile:
        """The archive information."""
        return self._file

    @property
    def path(self) -> Path:
        """The path the reader was opened with."""
        return self._path

    async def entry(self, index: int) -> ZipEntryReader:
        """Return a reader for the entry at ``index`` over a new file handle."""
        if not 0 <= index < min(len(self._file.entries), len(self._file.metas)):
            raise EntryIndexOutOfBoundsError()
        entry = self._file.entries[index]
        meta = self._file.metas[index]
        try:
            handle = open(self._path, "rb")
        except OSError as exc:
            raise UpstreamReadError(exc) from exc
        try:
            handle.seek(compute_data_offset(entry, meta), os.SEEK_SET)
        except OSError as exc:
            handle.close()
            raise UpstreamReadError(exc) from exc
        reader = ZipEntryReader(AsyncSeekable(handle), entry.compression, entry.uncompressed_size)
        weakref.finalize(reader, handle.close)
        return reader