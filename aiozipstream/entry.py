"""ZIP entry metadata, its builder, and version fields derived from it."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from .codecs import Compression, DeflateOption
from .errors import AttributeCompatibilityNotSupportedError
from .records import GeneralPurposeFlag

SPEC_VERSION_MADE_BY = 63


class AttributeCompatibility(enum.IntEnum):
    """A host attribute compatibility, valued by its ZIP host code."""

    UNIX = 3

    @classmethod
    def from_code(cls, value: int) -> AttributeCompatibility:
        """Return the compatibility for a ZIP host code."""
        try:
            return cls(value)
        except ValueError:
            raise AttributeCompatibilityNotSupportedError(value) from None


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ZipEntry:
    """An immutable store of data about a ZIP entry.

    The filename is stored as written in the archive; sanitise it before
    using it as a path when the archive is untrusted.
    """

    filename: str
    compression: Compression
    compression_level: int | None = None
    crc32: int = 0
    uncompressed_size: int = 0
    compressed_size: int = 0
    attribute_compatibility: AttributeCompatibility = AttributeCompatibility.UNIX
    last_modification_date: datetime = field(default_factory=_now)
    internal_file_attribute: int = 0
    external_file_attribute: int = 0
    extra_field: bytes = b""
    comment: str = ""

    def unix_permissions(self) -> int | None:
        """Return the Unix permission bits, or None for non-Unix entries."""
        if self.attribute_compatibility is not AttributeCompatibility.UNIX:
            return None
        return (self.external_file_attribute >> 16) & 0xFFFF

    def is_dir(self) -> bool:
        """Whether the entry represents a directory."""
        return self.filename.endswith("/")


@dataclass(frozen=True)
class ZipEntryMeta:
    """Where an entry's local header sits and how it was flagged."""

    general_purpose_flag: GeneralPurposeFlag
    file_offset: int


class ZipEntryBuilder:
    """Builds a :class:`ZipEntry`; every setter returns the builder."""

    def __init__(self, filename: str, compression: Compression) -> None:
        self._entry = ZipEntry(filename=filename, compression=Compression(compression))

    @classmethod
    def from_entry(cls, entry: ZipEntry) -> ZipEntryBuilder:
        """Start a builder from an existing entry."""
        builder = cls.__new__(cls)
        builder._entry = entry
        return builder

    def _set(self, **changes: object) -> ZipEntryBuilder:
        self._entry = replace(self._entry, **changes)
        return self

    def deflate_option(self, option: DeflateOption) -> ZipEntryBuilder:
        """Set the compression level from a deflate option."""
        return self._set(compression_level=option.level())

    def attribute_compatibility(self, compatibility: AttributeCompatibility) -> ZipEntryBuilder:
        return self._set(attribute_compatibility=AttributeCompatibility(compatibility))

    def last_modification_date(self, date: datetime) -> ZipEntryBuilder:
        return self._set(last_modification_date=date)

    def internal_file_attribute(self, attribute: int) -> ZipEntryBuilder:
        return self._set(internal_file_attribute=attribute)

    def external_file_attribute(self, attribute: int) -> ZipEntryBuilder:
        return self._set(external_file_attribute=attribute)

    def extra_field(self, field: bytes) -> ZipEntryBuilder:
        return self._set(extra_field=bytes(field))

    def comment(self, comment: str) -> ZipEntryBuilder:
        return self._set(comment=comment)

    def unix_permissions(self, mode: int) -> ZipEntryBuilder:
        """Set the Unix mode bits; ignored unless the host is Unix."""
        if self._entry.attribute_compatibility is not AttributeCompatibility.UNIX:
            return self
        attribute = (self._entry.external_file_attribute & 0xFFFF) | ((mode & 0xFFFF) << 16)
        return self._set(external_file_attribute=attribute)

    def build(self) -> ZipEntry:
        """Return the built entry."""
        return self._entry


def needed_to_extract(entry: ZipEntry) -> int:
    """Return the 'version needed to extract' value for an entry."""
    version = {
        Compression.DEFLATE: 20,
        Compression.BZ: 46,
        Compression.LZMA: 63,
    }.get(entry.compression, 10)
    if entry.is_dir():
        version = max(version, 20)
    return version


def made_by() -> int:
    """Return the 'version made by' value (Unix host)."""
    return (3 << 8) | SPEC_VERSION_MADE_BY