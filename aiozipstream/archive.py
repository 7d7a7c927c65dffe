"""Archive-level information and its builder."""

from __future__ import annotations

from dataclasses import dataclass, field

from .entry import ZipEntry, ZipEntryMeta


@dataclass(frozen=True)
class ZipFile:
    """An immutable store of data about a ZIP file."""

    entries: list[ZipEntry] = field(default_factory=list)
    metas: list[ZipEntryMeta] = field(default_factory=list)
    zip64: bool = False
    comment: str = ""


class ZipFileBuilder:
    """Builds a :class:`ZipFile`; every setter returns the builder."""

    def __init__(self) -> None:
        self._comment = ""
        self._zip64 = False

    def comment(self, comment: str) -> ZipFileBuilder:
        """Set the file's trailing comment."""
        self._comment = comment
        return self

    def zip64(self, value: bool) -> ZipFileBuilder:
        """Set whether the file is ZIP64."""
        self._zip64 = bool(value)
        return self

    def build(self) -> ZipFile:
        """Return the built file information."""
        return ZipFile(entries=[], metas=[], zip64=self._zip64, comment=self._comment)