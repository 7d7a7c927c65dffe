"""Extracting every entry of a ZIP archive while guarding against path traversal."""

from __future__ import annotations

import asyncio
import os
import re
import sys
import zlib
from pathlib import Path, PurePath
from typing import Any, BinaryIO

from .entry import ZipEntry
from .errors import CRC32CheckError, ZipError
from .readio import AsyncSeekable, ZipEntryReader
from .reader import SeekZipReader

_COPY_CHUNK = 65536
_MAX_NAME_BYTES = 255
_WINDOWS = os.name == "nt"

_ILLEGAL = re.compile(r'[/?<>\\:*|"]')
_CONTROL = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[. ]+$")


def _sanitize_component(name: str) -> str:
    name = _ILLEGAL.sub("", name)
    name = _CONTROL.sub("", name)
    name = _RESERVED.sub("", name)
    if _WINDOWS:
        name = _WINDOWS_RESERVED.sub("", name)
        name = _WINDOWS_TRAILING.sub("", name)
    encoded = name.encode("utf-8")
    if len(encoded) > _MAX_NAME_BYTES:
        name = encoded[:_MAX_NAME_BYTES].decode("utf-8", errors="ignore")
    return name


def sanitize_file_path(path: str) -> PurePath:
    """Return a relative path without reserved names, redundant separators, '.' or '..'."""
    parts = (_sanitize_component(part) for part in path.replace("\\", "/").split("/"))
    return PurePath(*(part for part in parts if part))


async def _copy_checked(reader: ZipEntryReader, out: BinaryIO, entry: ZipEntry) -> None:
    crc = 0
    while chunk := await reader.read(_COPY_CHUNK):
        out.write(chunk)
        crc = zlib.crc32(chunk, crc)
    if crc != entry.crc32:
        raise CRC32CheckError()


async def _extract_all(source: AsyncSeekable, out_dir: Path) -> None:
    reader = await SeekZipReader.open(source)
    for index, entry in enumerate(reader.file.entries):
        path = out_dir / sanitize_file_path(entry.filename)
        # A trailing '/' marks a directory entry.
        if entry.filename.endswith("/"):
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
            continue
        # Parents may be missing when entries are out of order or have no directory entries.
        path.parent.mkdir(parents=True, exist_ok=True)
        entry_reader = await reader.entry(index)
        with open(path, "xb") as out:
            await _copy_checked(entry_reader, out, entry)


async def unzip_file(archive: Any, out_dir: str | os.PathLike[str]) -> None:
    """Extract every entry of ``archive`` (a path or binary file) into ``out_dir``.

    Existing files are never overwritten; each file's CRC32 is checked.
    """
    out_dir = Path(out_dir)
    if isinstance(archive, (str, os.PathLike)):
        with open(archive, "rb") as handle:
            await _extract_all(AsyncSeekable(handle), out_dir)
    else:
        await _extract_all(AsyncSeekable(archive), out_dir)


def main(argv: list[str] | None = None) -> int:
    """Extract an archive (default ``example.zip``) into a directory (default the cwd)."""
    args = sys.argv[1:] if argv is None else list(argv)
    archive = args[0] if args else "example.zip"
    out_dir = Path(args[1]) if len(args) > 1 else Path.cwd()
    try:
        asyncio.run(unzip_file(archive, out_dir))
    except (OSError, ZipError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())