from __future__ import annotations

from pathlib import Path

import pytest

from pyminini.errors import StorageError, StorageNotFoundError
from pyminini.storage import FileStorage, MemoryStorage


def test_file_storage_roundtrip(tmp_path: Path) -> None:
    storage = FileStorage()
    name = str(tmp_path / "a.ini")
    with storage.open_write(name) as fd:
        fd.write(b"one\ntwo\n")
    with storage.open_read(name) as fd:
        assert fd.read_line(100) == b"one\n"
        mark = fd.tell()
        assert fd.read_line(2) == b"tw"
        fd.seek(mark)
        assert fd.read_line(100) == b"two\n"
        assert fd.read_line(100) == b""


def test_file_storage_rewrite_in_place(tmp_path: Path) -> None:
    path = tmp_path / "a.ini"
    path.write_bytes(b"abc\ndef\n")
    with FileStorage().open_rewrite(str(path)) as fd:
        fd.seek(4)
        fd.write(b"XYZ")
    assert path.read_bytes() == b"abc\nXYZ\n"


def test_file_storage_missing(tmp_path: Path) -> None:
    storage = FileStorage()
    missing = str(tmp_path / "missing.ini")
    with pytest.raises(StorageNotFoundError):
        storage.open_read(missing)
    with pytest.raises(StorageNotFoundError):
        storage.remove(missing)
    with pytest.raises(StorageError):
        storage.open_write(str(tmp_path / "no" / "such" / "dir.ini"))


def test_file_storage_remove_and_rename(tmp_path: Path) -> None:
    storage = FileStorage()
    old, new = tmp_path / "a.in~", tmp_path / "a.ini"
    old.write_bytes(b"x")
    new.write_bytes(b"y")
    storage.remove(str(new))
    storage.rename(str(old), str(new))
    assert new.read_bytes() == b"x"
    assert not old.exists()


def test_close_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "a.ini"
    path.write_bytes(b"")
    fd = FileStorage().open_read(str(path))
    fd.close()
    fd.close()
    assert fd.closed


def test_memory_storage_commits_on_close() -> None:
    storage = MemoryStorage()
    fd = storage.open_write("a")
    fd.write(b"data\n")
    assert storage.files["a"] == b""
    fd.close()
    assert storage.files["a"] == b"data\n"


def test_memory_storage_rename() -> None:
    storage = MemoryStorage({"a": b"1", "b": b"2"})
    with pytest.raises(StorageError):
        storage.rename("a", "b")
    storage.remove("b")
    storage.rename("a", "b")
    assert storage.files == {"b": b"1"}
    with pytest.raises(StorageNotFoundError):
        storage.open_read("a")
