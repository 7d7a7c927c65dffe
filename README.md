# aiozipstream

Asynchronous reading and writing of ZIP archives, built around streaming.

- Stored, Deflate, bzip2, LZMA, xz and zstd compression methods
  (`Compression` in `aiozipstream.codecs`).
- Three readers: over any seekable source (`SeekZipReader` in
  `aiozipstream.reader`), over bytes held in memory (`MemZipReader` in
  `aiozipstream.mem`) and over a file system path (`FsZipReader` in
  `aiozipstream.fs`).
- Write whole entries of known data, or stream entries of unknown size
  using data descriptors (`ZipFileWriter` in `aiozipstream.writer`).
- CRC32 checking of entry data as it is read.

## Installation

```
pip install aiozipstream
```

## Writing an archive

Entries are described with `ZipEntryBuilder` from `aiozipstream.entry`,
given a filename and a compression method. Its setters
(`comment`, `extra_field`, `last_modification_date`, `unix_permissions`,
`deflate_option`, ...) return the builder, and `build()` returns the
`ZipEntry`. `Compression.from_code` looks a method up by its ZIP method
code (0 is stored, 8 is deflate) and raises `CompressionNotSupportedError`
for unknown codes.

The writer accepts any object with a `write(data)` method, plain or async,
such as a file opened in binary mode.

```python
from aiozipstream.codecs import Compression, DeflateOption
from aiozipstream.entry import ZipEntryBuilder
from aiozipstream.writer import ZipFileWriter


async def build(sink):
    writer = ZipFileWriter(sink)

    entry = ZipEntryBuilder("foo.txt", Compression.DEFLATE).deflate_option(DeflateOption("other", 9))
    await writer.write_entry_whole(entry, b"Whole data.")

    stream = await writer.write_entry_stream(ZipEntryBuilder("bar.txt", Compression.DEFLATE))
    await stream.write_all(b"Data of unknown size, ")
    await stream.write_all(b"written in pieces.")
    await stream.close()

    writer.comment("An archive comment.")
    await writer.close()
```

An `EntryStreamWriter` can also be used as `async with`, closing itself on
a clean exit. While a stream writer is open, or after the archive writer
is closed, further writes raise `RuntimeError`. `ZipFileWriter.close()`
writes the central directory and returns the underlying writer; without
it the archive is incomplete.

## Reading an archive

```python
from aiozipstream.mem import MemZipReader


async def first_entry(data: bytes) -> bytes:
    reader = await MemZipReader.open(data)
    entry = reader.file.entries[0]
    entry_reader = await reader.entry(0)
    return await entry_reader.read_to_end_checked(entry)
```

`reader.file` is a `ZipFile` holding the entries and the archive comment.
`FsZipReader.open(path)` works the same way over a path on disk and opens
the file afresh for every entry, so entries may be read concurrently;
`SeekZipReader.open(source)` reads from one seekable source, so read one
entry at a time there.

A mismatch between the stored and the computed CRC32 raises
`CRC32CheckError`; an index past the last entry raises
`EntryIndexOutOfBoundsError`. All errors derive from `ZipError` in
`aiozipstream.errors`.

Filenames stored in an archive are untrusted input. Use
`sanitize_file_path` from `aiozipstream.extract` before turning them into
paths, or `unzip_file(archive, out_dir)` to extract a whole archive.

## Command line

Compress a file or a whole directory tree into a new deflated archive
(the output must not already exist):

```
aiozipstream-compress <input file or directory> <output ZIP file name>
```

Extract an archive, sanitising every entry name so that nothing is
written outside the output directory. Both arguments are optional: the
archive defaults to `example.zip` and the output directory to the current
one. Existing files are never overwritten.

```
aiozipstream-extract [archive] [output directory]
```

## Limitations

- ZIP64 archives are neither read nor written; sizes and offsets are
  32-bit.
- Spanned or split archives are rejected with `FeatureNotSupportedError`.
- Encrypted entries are not supported.
- Only the Unix host attribute compatibility is handled.