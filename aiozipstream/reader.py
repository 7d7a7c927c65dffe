"""Reading the central directory of a ZIP archive and its entries."""

from __future__ import annotations

import inspect
import os
import sys
from typing import Any

from .archive import ZipFile
from .codecs import Compression
from .entry import AttributeCompatibility, ZipEntry, ZipEntryMeta
from .errors import (
    EntryIndexOutOfBoundsError,
    FeatureNotSupportedError,
    TargetZip64NotSupportedError,
    UpstreamReadError,
)
from .locator import locate_eocdr
from .readio import ZipEntryReader, read_bytes, read_string
from .records import (
    CDH_SIGNATURE,
    LFH_LENGTH,
    SIGNATURE_LENGTH,
    CentralDirectoryRecord,
    EndOfCentralDirectoryHeader,
    zip_to_datetime,
)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _seek(reader: Any, offset: int) -> None:
    try:
        await _resolve(reader.seek(offset, os.SEEK_SET))
    except OSError as exc:
        raise UpstreamReadError(exc) from exc


async def read_file(reader: Any) -> ZipFile:
    """Read the archive information from a seekable reader."""
    eocdr_offset = await locate_eocdr(reader)
    await _seek(reader, eocdr_offset + SIGNATURE_LENGTH)
    eocdr = await EndOfCentralDirectoryHeader.from_reader(reader)
    comment = await read_string(reader, eocdr.file_comm_length)

    if (
        eocdr.disk_num != eocdr.start_cent_dir_disk
        or eocdr.num_of_entries != eocdr.num_of_entries_disk
    ):
        raise FeatureNotSupportedError("Spanned/split files")

    await _seek(reader, eocdr.cent_dir_offset)
    entries, metas = await read_central_directory(reader, eocdr.num_of_entries)
    return ZipFile(entries=entries, metas=metas, zip64=False, comment=comment)


async def read_central_directory(
    reader: Any, num_of_entries: int
) -> tuple[list[ZipEntry], list[ZipEntryMeta]]:
    """Read ``num_of_entries`` central directory records in order."""
    if num_of_entries > sys.maxsize:
        raise TargetZip64NotSupportedError()
    entries: list[ZipEntry] = []
    metas: list[ZipEntryMeta] = []
    for _ in range(num_of_entries):
        entry, meta = await read_cd_record(reader)
        entries.append(entry)
        metas.append(meta)
    return entries, metas


async def read_cd_record(reader: Any) -> tuple[ZipEntry, ZipEntryMeta]:
    """Read one central directory record, signature included."""
    signature = await read_bytes(reader, SIGNATURE_LENGTH)
    if signature != CDH_SIGNATURE.to_bytes(SIGNATURE_LENGTH, "little"):
        raise UpstreamReadError(OSError("invalid central directory header signature"))

    header = await CentralDirectoryRecord.from_reader(reader)
    filename = await read_string(reader, header.file_name_length)
    compression = Compression.from_code(header.compression)
    extra_field = await read_bytes(reader, header.extra_field_length)
    comment = await read_string(reader, header.file_comment_length)

    entry = ZipEntry(
        filename=filename,
        compression=compression,
        compression_level=None,
        crc32=header.crc,
        uncompressed_size=header.uncompressed_size,
        compressed_size=header.compressed_size,
        attribute_compatibility=AttributeCompatibility.UNIX,
        last_modification_date=zip_to_datetime(header.mod_date, header.mod_time),
        internal_file_attribute=header.inter_attr,
        external_file_attribute=header.exter_attr,
        extra_field=extra_field,
        comment=comment,
    )
    meta = ZipEntryMeta(general_purpose_flag=header.flags, file_offset=header.lh_offset)
    return entry, meta


def compute_data_offset(entry: ZipEntry, meta: ZipEntryMeta) -> int:
    """Return where an entry's data starts, just past its local file header."""
    header_length = SIGNATURE_LENGTH + LFH_LENGTH
    trailing_length = len(entry.filename.encode("utf-8")) + len(entry.extra_field)
    return meta.file_offset + header_length + trailing_length


class SeekZipReader:
    """A ZIP reader over a single seekable source.

    Entry readers share the source, so read one entry at a time.
    """

    def __init__(self, reader: Any, file: ZipFile) -> None:
        self._reader = reader
        self._file = file

    @classmethod
    async def open(cls, reader: Any) -> SeekZipReader:
        """Read the archive information from ``reader`` and return a reader over it."""
        return cls(reader, await read_file(reader))

    @property
    def file(self) -> ZipFile:
        """The archive information."""
        return self._file

    async def entry(self, index: int) -> ZipEntryReader:
        """Return a reader for the entry at ``index``."""
        if not 0 <= index < min(len(self._file.entries), len(self._file.metas)):
            raise EntryIndexOutOfBoundsError()
        entry = self._file.entries[index]
        meta = self._file.metas[index]
        await _seek(self._reader, compute_data_offset(entry, meta))
        return ZipEntryReader(self._reader, entry.compression, entry.uncompressed_size)