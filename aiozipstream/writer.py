"""Writing ZIP archives, either from whole data or by streaming entries."""

from __future__ import annotations

import zlib
from dataclasses import dataclass
from typing import Any

from .codecs import Compression, CompressedWriter, compress
from .entry import ZipEntry, ZipEntryBuilder, made_by, needed_to_extract
from .offset import OffsetWriter
from .records import (
    CDH_SIGNATURE,
    DATA_DESCRIPTOR_SIGNATURE,
    EOCDR_SIGNATURE,
    LFH_SIGNATURE,
    CentralDirectoryRecord,
    EndOfCentralDirectoryHeader,
    GeneralPurposeFlag,
    LocalFileHeader,
    datetime_to_zip,
)


def _u16(value: int) -> int:
    return value & 0xFFFF


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _le32(value: int) -> bytes:
    return _u32(value).to_bytes(4, "little")


def _as_entry(entry: ZipEntry | ZipEntryBuilder) -> ZipEntry:
    if isinstance(entry, ZipEntryBuilder):
        return entry.build()
    if isinstance(entry, ZipEntry):
        return entry
    raise TypeError(f"expected a ZipEntry or ZipEntryBuilder, got {type(entry).__name__}")


@dataclass(frozen=True)
class _CentralDirectoryEntry:
    header: CentralDirectoryRecord
    entry: ZipEntry


def _local_header(
    entry: ZipEntry,
    *,
    crc: int,
    compressed_size: int,
    uncompressed_size: int,
    data_descriptor: bool,
) -> LocalFileHeader:
    mod_time, mod_date = datetime_to_zip(entry.last_modification_date)
    return LocalFileHeader(
        version=needed_to_extract(entry),
        flags=GeneralPurposeFlag(
            encrypted=False,
            data_descriptor=data_descriptor,
            filename_unicode=not entry.filename.isascii(),
        ),
        compression=int(entry.compression),
        mod_time=mod_time,
        mod_date=mod_date,
        crc=_u32(crc),
        compressed_size=_u32(compressed_size),
        uncompressed_size=_u32(uncompressed_size),
        file_name_length=_u16(len(entry.filename.encode("utf-8"))),
        extra_field_length=_u16(len(entry.extra_field)),
    )


def _central_record(
    lfh: LocalFileHeader,
    entry: ZipEntry,
    *,
    crc: int,
    compressed_size: int,
    uncompressed_size: int,
    lh_offset: int,
) -> CentralDirectoryRecord:
    return CentralDirectoryRecord(
        v_made_by=made_by(),
        v_needed=lfh.version,
        flags=lfh.flags,
        compression=lfh.compression,
        mod_time=lfh.mod_time,
        mod_date=lfh.mod_date,
        crc=_u32(crc),
        compressed_size=_u32(compressed_size),
        uncompressed_size=_u32(uncompressed_size),
        file_name_length=lfh.file_name_length,
        extra_field_length=lfh.extra_field_length,
        file_comment_length=_u16(len(entry.comment.encode("utf-8"))),
        disk_start=0,
        inter_attr=_u16(entry.internal_file_attribute),
        exter_attr=_u32(entry.external_file_attribute),
        lh_offset=_u32(lh_offset),
    )


class ZipFileWriter:
    """Writes a ZIP archive to a writer with a ``write(data)`` method, plain or async.

    :meth:`close` must be awaited at the end, or the archive is left without
    its central directory.
    """

    def __init__(self, writer: Any) -> None:
        self._writer = OffsetWriter(writer)
        self._cd_entries: list[_CentralDirectoryEntry] = []
        self._comment: str | None = None
        self._active_stream: EntryStreamWriter | None = None
        self._closed = False

    @property
    def inner(self) -> Any:
        """The writer the archive is written to."""
        return self._writer.inner

    def comment(self, comment: str) -> None:
        """Set the archive's trailing comment."""
        self._comment = comment

    def _check_ready(self) -> None:
        if self._closed:
            raise RuntimeError("the ZIP writer has been closed")
        if self._active_stream is not None:
            raise RuntimeError("an entry stream writer is still open")

    async def _write_local_header(self, entry: ZipEntry, lfh: LocalFileHeader) -> None:
        await self._writer.write_all(_le32(LFH_SIGNATURE))
        await self._writer.write_all(lfh.to_bytes())
        await self._writer.write_all(entry.filename.encode("utf-8"))
        await self._writer.write_all(entry.extra_field)

    async def write_entry_whole(self, entry: ZipEntry | ZipEntryBuilder, data: bytes) -> None:
        """Write an entry whose whole data is known up front."""
        self._check_ready()
        entry = _as_entry(entry)
        data = bytes(data)
        if entry.compression is Compression.STORED:
            compressed = data
        else:
            compressed = compress(entry.compression, data, entry.compression_level)

        crc = zlib.crc32(data)
        lfh = _local_header(
            entry,
            crc=crc,
            compressed_size=len(compressed),
            uncompressed_size=len(data),
            data_descriptor=False,
        )
        header = _central_record(
            lfh,
            entry,
            crc=crc,
            compressed_size=len(compressed),
            uncompressed_size=len(data),
            lh_offset=self._writer.offset,
        )
        await self._write_local_header(entry, lfh)
        await self._writer.write_all(compressed)
        self._cd_entries.append(_CentralDirectoryEntry(header=header, entry=entry))

    async def write_entry_stream(self, entry: ZipEntry | ZipEntryBuilder) -> EntryStreamWriter:
        """Start an entry of unknown size, written through the returned stream writer."""
        self._check_ready()
        entry = _as_entry(entry)
        lfh_offset = self._writer.offset
        lfh = _local_header(
            entry, crc=0, compressed_size=0, uncompressed_size=0, data_descriptor=True
        )
        await self._write_local_header(entry, lfh)
        stream = EntryStreamWriter(self, entry, lfh, lfh_offset, self._writer.offset)
        self._active_stream = stream
        return stream

    def _finish_stream(self, stream: EntryStreamWriter, record: _CentralDirectoryEntry) -> None:
        self._cd_entries.append(record)
        if self._active_stream is stream:
            self._active_stream = None

    async def close(self) -> Any:
        """Write the central directory and trailer, and return the inner writer."""
        self._check_ready()
        cd_offset = self._writer.offset

        for record in self._cd_entries:
            await self._writer.write_all(_le32(CDH_SIGNATURE))
            await self._writer.write_all(record.header.to_bytes())
            await self._writer.write_all(record.entry.filename.encode("utf-8"))
            await self._writer.write_all(record.entry.extra_field)
            await self._writer.write_all(record.entry.comment.encode("utf-8"))

        comment = (self._comment or "").encode("utf-8")
        count = _u16(len(self._cd_entries))
        trailer = EndOfCentralDirectoryHeader(
            disk_num=0,
            start_cent_dir_disk=0,
            num_of_entries_disk=count,
            num_of_entries=count,
            size_cent_dir=_u32(self._writer.offset - cd_offset),
            cent_dir_offset=_u32(cd_offset),
            file_comm_length=_u16(len(comment)),
        )
        await self._writer.write_all(_le32(EOCDR_SIGNATURE))
        await self._writer.write_all(trailer.to_bytes())
        if comment:
            await self._writer.write_all(comment)

        self._closed = True
        return self._writer.inner


class EntryStreamWriter:
    """Streams one entry's data into an archive, ended by a data descriptor.

    Obtained from :meth:`ZipFileWriter.write_entry_stream`; :meth:`close`
    must be awaited before the archive is written further. Used as an async
    context manager, it is closed on a clean exit.
    """

    def __init__(
        self,
        owner: ZipFileWriter,
        entry: ZipEntry,
        lfh: LocalFileHeader,
        lfh_offset: int,
        data_offset: int,
    ) -> None:
        self._owner = owner
        self._entry = entry
        self._lfh = lfh
        self._lfh_offset = lfh_offset
        self._data_offset = data_offset
        self._writer = OffsetWriter(CompressedWriter(owner._writer, entry.compression))
        self._crc = 0
        self._closed = False

    @property
    def entry(self) -> ZipEntry:
        """The entry being written."""
        return self._entry

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("the entry stream writer has been closed")

    async def write(self, data: bytes) -> int:
        """Write some of ``data`` and return how many bytes were taken."""
        self._check_open()
        view = memoryview(bytes(data))
        written = await self._writer.write(view)
        self._crc = zlib.crc32(view[:written], self._crc)
        return written

    async def write_all(self, data: bytes) -> None:
        """Write the whole of ``data``."""
        view = memoryview(bytes(data))
        written = 0
        while written < len(view):
            count = await self.write(view[written:])
            if count == 0:
                raise OSError("failed to write whole buffer")
            written += count

    async def flush(self) -> None:
        """Push buffered compressed data through to the archive's writer."""
        self._check_open()
        await self._writer.flush()

    async def close(self) -> None:
        """Finish the data, write the data descriptor and record the entry."""
        self._check_open()
        await self._writer.shutdown()
        self._closed = True

        crc = self._crc
        uncompressed_size = self._writer.offset
        archive = self._owner._writer
        compressed_size = archive.offset - self._data_offset

        await archive.write_all(_le32(DATA_DESCRIPTOR_SIGNATURE))
        await archive.write_all(_le32(crc))
        await archive.write_all(_le32(compressed_size))
        await archive.write_all(_le32(uncompressed_size))

        header = _central_record(
            self._lfh,
            self._entry,
            crc=crc,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            lh_offset=self._lfh_offset,
        )
        self._owner._finish_stream(self, _CentralDirectoryEntry(header=header, entry=self._entry))

    async def __aenter__(self) -> EntryStreamWriter:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None and not self._closed:
            await self.close()