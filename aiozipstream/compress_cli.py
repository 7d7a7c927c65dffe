"""Command that packs a file or a directory tree into a deflated ZIP archive."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

from .codecs import Compression
from .entry import ZipEntryBuilder
from .errors import ZipError
from .writer import ZipFileWriter

_USAGE = "Usage: cli_compress <input file or directory> <output ZIP file name>"


class _CliError(Exception):
    """A user-facing failure of the command."""


def walk_dir(directory: str | os.PathLike[str]) -> list[Path]:
    """Return every non-directory path under ``directory``, breadth first."""
    pending = [Path(directory)]
    files: list[Path] = []
    while pending:
        current = pending.pop(0)
        with os.scandir(current) as it:
            for item in it:
                path = Path(item.path)
                if path.is_dir():
                    pending.append(path)
                else:
                    files.append(path)
    return files


async def write_entry(filename: str, input_path: Path, writer: ZipFileWriter) -> None:
    """Add the file at ``input_path`` to the archive as ``filename``, deflated."""
    data = Path(input_path).read_bytes()
    await writer.write_entry_whole(ZipEntryBuilder(filename, Compression.DEFLATE), data)


def _check_utf8(text: str, message: str) -> str:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise _CliError(message) from None
    return text


async def handle_singular(input_path: Path, writer: ZipFileWriter) -> None:
    """Add a single file under its own name."""
    filename = Path(input_path).name
    if not filename:
        raise _CliError("Input path terminates in '...'.")
    await write_entry(_check_utf8(filename, "Input path not valid UTF-8."), input_path, writer)


async def handle_directory(input_path: Path, writer: ZipFileWriter) -> None:
    """Add every file under a directory, named relative to it."""
    base = _check_utf8(str(input_path), "Input path not valid UTF-8.")
    for entry_path in walk_dir(input_path):
        entry_str = _check_utf8(str(entry_path), "Directory file path not valid UTF-8.")
        if not entry_str.startswith(base):
            raise _CliError("Directory file path does not start with base input directory path.")
        await write_entry(entry_str[len(base) + 1:], entry_path, writer)


async def run(argv: list[str] | None = None) -> None:
    """Compress the input named in ``argv`` into the output archive named there."""
    args = iter(sys.argv[1:] if argv is None else list(argv))
    input_str = next(args, None)
    if input_str is None:
        raise _CliError("No input file or directory specified.")
    output_str = next(args, None)
    if output_str is None:
        raise _CliError("No output file specified.")
    output_path = Path(output_str)

    try:
        input_path = Path(input_str).resolve(strict=True)
    except (OSError, RuntimeError):
        raise _CliError("Unable to canonicalise input path.") from None

    if output_path.exists():
        raise _CliError("The output file specified already exists.")
    if not input_path.exists():
        raise _CliError("The input file or directory specified doesn't exist.")

    with open(output_path, "wb") as output:
        writer = ZipFileWriter(output)
        if input_path.is_dir():
            await handle_directory(input_path, writer)
        else:
            await handle_singular(input_path, writer)
        await writer.close()
    print(f"Successfully written ZIP file '{output_path}'.")


def main(argv: list[str] | None = None) -> int:
    """Run the command, reporting failures with the usage line; return the exit code."""
    try:
        asyncio.run(run(argv))
    except (_CliError, OSError, ZipError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(_USAGE, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())