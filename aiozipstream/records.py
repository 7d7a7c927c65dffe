"""Fixed-size ZIP records, their wire layout, and MS-DOS date conversion."""

from __future__ import annotations

import inspect
import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .errors import UpstreamReadError

SIGNATURE_LENGTH = 4
LFH_SIGNATURE = 0x04034B50
LFH_LENGTH = 26
CDH_SIGNATURE = 0x02014B50
CDH_LENGTH = 42
EOCDR_SIGNATURE = 0x06054B50
EOCDR_LENGTH = 18
DATA_DESCRIPTOR_SIGNATURE = 0x08074B50

_LFH = struct.Struct("<HHHHHIIIHH")
_CDH = struct.Struct("<HHHHHHIIIHHHHHII")
_EOCDR = struct.Struct("<HHHHIIH")


async def _read_exact(reader: Any, size: int) -> bytes:
    buf = bytearray()
    try:
        while len(buf) < size:
            result = reader.read(size - len(buf))
            chunk = await result if inspect.isawaitable(result) else result
            if not chunk:
                raise UpstreamReadError(
                    EOFError(f"expected {size} bytes, stream ended after {len(buf)}")
                )
            buf += chunk
    except OSError as exc:
        raise UpstreamReadError(exc) from exc
    return bytes(buf)


def _check_length(data: bytes, length: int, name: str) -> None:
    if len(data) != length:
        raise ValueError(f"{name} needs {length} bytes, got {len(data)}")


@dataclass(frozen=True)
class GeneralPurposeFlag:
    """The general purpose bit flag of a header."""

    encrypted: bool = False
    data_descriptor: bool = False
    filename_unicode: bool = False

    @classmethod
    def from_int(cls, value: int) -> GeneralPurposeFlag:
        return cls(
            encrypted=bool(value & 0x1),
            data_descriptor=bool(value & 0x8),
            filename_unicode=bool(value & 0x800),
        )

    def to_int(self) -> int:
        return (
            (0x1 if self.encrypted else 0)
            | (0x8 if self.data_descriptor else 0)
            | (0x800 if self.filename_unicode else 0)
        )

    def to_bytes(self) -> bytes:
        return struct.pack("<H", self.to_int())


@dataclass
class LocalFileHeader:
    """A local file header, without its signature."""

    version: int
    flags: GeneralPurposeFlag
    compression: int
    mod_time: int
    mod_date: int
    crc: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int

    def to_bytes(self) -> bytes:
        return _LFH.pack(
            self.version, self.flags.to_int(), self.compression, self.mod_time,
            self.mod_date, self.crc, self.compressed_size, self.uncompressed_size,
            self.file_name_length, self.extra_field_length,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> LocalFileHeader:
        _check_length(data, LFH_LENGTH, "local file header")
        fields = list(_LFH.unpack(data))
        fields[1] = GeneralPurposeFlag.from_int(fields[1])
        return cls(*fields)

    @classmethod
    async def from_reader(cls, reader: Any) -> LocalFileHeader:
        return cls.from_bytes(await _read_exact(reader, LFH_LENGTH))


@dataclass
class CentralDirectoryRecord:
    """A central directory file header, without its signature."""

    v_made_by: int
    v_needed: int
    flags: GeneralPurposeFlag
    compression: int
    mod_time: int
    mod_date: int
    crc: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int
    file_comment_length: int
    disk_start: int
    inter_attr: int
    exter_attr: int
    lh_offset: int

    def to_bytes(self) -> bytes:
        return _CDH.pack(
            self.v_made_by, self.v_needed, self.flags.to_int(), self.compression,
            self.mod_time, self.mod_date, self.crc, self.compressed_size,
            self.uncompressed_size, self.file_name_length, self.extra_field_length,
            self.file_comment_length, self.disk_start, self.inter_attr,
            self.exter_attr, self.lh_offset,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> CentralDirectoryRecord:
        _check_length(data, CDH_LENGTH, "central directory record")
        fields = list(_CDH.unpack(data))
        fields[2] = GeneralPurposeFlag.from_int(fields[2])
        return cls(*fields)

    @classmethod
    async def from_reader(cls, reader: Any) -> CentralDirectoryRecord:
        return cls.from_bytes(await _read_exact(reader, CDH_LENGTH))


@dataclass
class EndOfCentralDirectoryHeader:
    """The end of central directory record, without its signature."""

    disk_num: int
    start_cent_dir_disk: int
    num_of_entries_disk: int
    num_of_entries: int
    size_cent_dir: int
    cent_dir_offset: int
    file_comm_length: int

    def to_bytes(self) -> bytes:
        return _EOCDR.pack(
            self.disk_num, self.start_cent_dir_disk, self.num_of_entries_disk,
            self.num_of_entries, self.size_cent_dir, self.cent_dir_offset,
            self.file_comm_length,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> EndOfCentralDirectoryHeader:
        _check_length(data, EOCDR_LENGTH, "end of central directory record")
        return cls(*_EOCDR.unpack(data))

    @classmethod
    async def from_reader(cls, reader: Any) -> EndOfCentralDirectoryHeader:
        return cls.from_bytes(await _read_exact(reader, EOCDR_LENGTH))


def zip_to_datetime(date: int, time: int) -> datetime:
    """Convert MS-DOS date and time fields to a UTC datetime.

    Fields that do not form a valid date give ``datetime.min`` in UTC.
    """
    year = ((date & 0xFE00) >> 9) + 1980
    month = (date & 0x1E0) >> 5
    day = date & 0x1F
    hour = (time & 0xF800) >> 11
    minute = (time & 0x7E0) >> 5
    second = (time & 0x1F) << 1
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)


def datetime_to_zip(dt: datetime) -> tuple[int, int]:
    """Convert a datetime to MS-DOS ``(time, date)`` fields; naive values count as UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    year = ((dt.year - 1980) << 9) & 0xFE00
    month = (dt.month << 5) & 0x1E0
    day = dt.day & 0x1F
    hour = (dt.hour << 11) & 0xF800
    minute = (dt.minute << 5) & 0x7E0
    second = (dt.second >> 1) & 0x1F
    return hour | minute | second, year | month | day