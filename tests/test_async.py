import zipfile
import pytest
from ziparchive import AioArchiveWriter, ArchiveReader, CompressionLevel
from ziparchive.errors import (ArchiveClosedError, DirectoryNotFoundError,
                               SourceNotFoundError)
pytestmark = pytest.mark.asyncio


def make_files(tmp_path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "_tempik_1.txt").write_bytes(b"foo baz bar")
    (src / "sub" / "_tempik_2.txt").write_bytes(b"baz trololo something")
    return src


async def test_add_files(tmp_path):
    src = make_files(tmp_path)
    archive = str(tmp_path / "a.zip")
    async with AioArchiveWriter(archive) as zw:
        await zw.add_file(str(src / "_tempik_1.txt"), arcname="_tempik_1.txt")
        await zw.add_file(str(src / "sub" / "_tempik_2.txt"),
                          CompressionLevel.STORE, arcname="_tempik_2.txt")
        await zw.add_bytes("generated.txt", b"abc" * 100)
        assert len(zw.entries) == 3
    assert zw.closed
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["_tempik_1.txt", "_tempik_2.txt", "generated.txt"]
        assert zf.read("_tempik_2.txt") == b"baz trololo something"
        assert zf.getinfo("_tempik_2.txt").compress_type == zipfile.ZIP_STORED


async def test_add_directory(tmp_path):
    src = make_files(tmp_path)
    archive = str(tmp_path / "d.zip")
    async with AioArchiveWriter(archive) as zw:
        await zw.add_directory(str(src), CompressionLevel.MAXIMUM, arcname="src")
    with ArchiveReader(archive) as zr:
        assert zr.list_files() == ["src/_tempik_1.txt", "src/sub/_tempik_2.txt"]
        assert zr.read("src/_tempik_1.txt") == b"foo baz bar"


async def test_missing_sources(tmp_path):
    archive = str(tmp_path / "m.zip")
    async with AioArchiveWriter(archive) as zw:
        with pytest.raises(SourceNotFoundError):
            await zw.add_file(str(tmp_path / "nope.txt"))
        with pytest.raises(SourceNotFoundError):
            await zw.add_file(str(tmp_path))
        with pytest.raises(DirectoryNotFoundError):
            await zw.add_directory(str(tmp_path / "nope"))
    with pytest.raises(ArchiveClosedError):
        await zw.add_bytes("late.txt", b"late")
