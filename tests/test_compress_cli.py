import io
import zipfile

import pytest

from aiozipstream.compress_cli import (
    handle_directory,
    handle_singular,
    main,
    run,
    walk_dir,
    write_entry,
)
from aiozipstream.writer import ZipFileWriter

TEXT = b"content to be compressed " * 40


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "tree"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"alpha")
    (root / "sub" / "b.txt").write_bytes(TEXT)
    (root / "sub" / "deeper" / "c.txt").write_bytes(b"gamma")
    return root


def test_walk_dir_lists_all_files(tree):
    found = walk_dir(tree)
    assert sorted(found) == sorted(
        [tree / "a.txt", tree / "sub" / "b.txt", tree / "sub" / "deeper" / "c.txt"]
    )


def test_walk_dir_is_breadth_first(tree):
    found = walk_dir(tree)
    assert found.index(tree / "a.txt") < found.index(tree / "sub" / "b.txt")
    assert found.index(tree / "sub" / "b.txt") < found.index(tree / "sub" / "deeper" / "c.txt")


@pytest.mark.asyncio
async def test_write_entry_deflates(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(TEXT)
    buf = io.BytesIO()
    writer = ZipFileWriter(buf)
    await write_entry("named.txt", src, writer)
    await writer.close()
    with zipfile.ZipFile(io.BytesIO(buf.getvalue())) as zf:
        info = zf.getinfo("named.txt")
        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert zf.read("named.txt") == TEXT


@pytest.mark.asyncio
async def test_handle_singular_uses_file_name(tmp_path):
    src = tmp_path / "single.bin"
    src.write_bytes(b"\x01\x02\x03")
    buf = io.BytesIO()
    writer = ZipFileWriter(buf)
    await handle_singular(src, writer)
    await writer.close()
    with zipfile.ZipFile(io.BytesIO(buf.getvalue())) as zf:
        assert zf.namelist() == ["single.bin"]
        assert zf.read("single.bin") == b"\x01\x02\x03"


@pytest.mark.asyncio
async def test_handle_directory_names_relative(tree):
    buf = io.BytesIO()
    writer = ZipFileWriter(buf)
    await handle_directory(tree, writer)
    await writer.close()
    with zipfile.ZipFile(io.BytesIO(buf.getvalue())) as zf:
        names = {n.replace("\\", "/") for n in zf.namelist()}
        assert names == {"a.txt", "sub/b.txt", "sub/deeper/c.txt"}


@pytest.mark.asyncio
async def test_run_directory(tree, tmp_path, capsys):
    out = tmp_path / "out.zip"
    await run([str(tree), str(out)])
    assert "Successfully written ZIP file" in capsys.readouterr().out
    with zipfile.ZipFile(out) as zf:
        contents = {n.replace("\\", "/"): zf.read(n) for n in zf.namelist()}
    assert contents == {"a.txt": b"alpha", "sub/b.txt": TEXT, "sub/deeper/c.txt": b"gamma"}


def test_main_single_file(tmp_path):
    src = tmp_path / "one.txt"
    src.write_bytes(TEXT)
    out = tmp_path / "one.zip"
    assert main([str(src), str(out)]) == 0
    with zipfile.ZipFile(out) as zf:
        assert zf.read("one.txt") == TEXT


def test_main_without_arguments(capsys):
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "No input file or directory specified." in err
    assert "Usage:" in err


def test_main_without_output(tmp_path, capsys):
    src = tmp_path / "one.txt"
    src.write_bytes(b"x")
    assert main([str(src)]) == 1
    assert "No output file specified." in capsys.readouterr().err


def test_main_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope"), str(tmp_path / "o.zip")]) == 1
    assert "Unable to canonicalise input path." in capsys.readouterr().err
    assert not (tmp_path / "o.zip").exists()


def test_main_existing_output(tmp_path, capsys):
    src = tmp_path / "one.txt"
    src.write_bytes(b"x")
    out = tmp_path / "exists.zip"
    out.write_bytes(b"keep")
    assert main([str(src), str(out)]) == 1
    assert "The output file specified already exists." in capsys.readouterr().err
    assert out.read_bytes() == b"keep"