from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from materialize.archive import find_entry_by_name, normalize_entry_name
from materialize.errors import EntrySizeExceeded, PathTraversal


def _zip(path: Path, entries: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, payload in entries.items():
            archive.writestr(name, payload)
    return path


def test_finds_first_entry_by_base_name(tmp_path: Path) -> None:
    archive = _zip(
        tmp_path / "save.zip",
        {
            "world/region/r.0.0.mca": b"region",
            "world/level.dat": b"first",
            "backup/level.dat": b"second",
        },
    )

    assert find_entry_by_name(archive, "level.dat") == b"first"


def test_missing_entry_returns_none(tmp_path: Path) -> None:
    archive = _zip(tmp_path / "plain.zip", {"readme.txt": b"hi"})

    assert find_entry_by_name(archive, "level.dat") is None


def test_directories_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "dirs.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(zipfile.ZipInfo("level.dat/"), b"")
        archive.writestr("save/level.dat", b"payload")

    assert find_entry_by_name(path, "level.dat") == b"payload"


def test_traversal_entry_aborts_read(tmp_path: Path) -> None:
    archive = _zip(
        tmp_path / "evil.zip",
        {"../../etc/passwd": b"root:x:0:0", "world/level.dat": b"ok"},
    )

    with pytest.raises(PathTraversal) as excinfo:
        find_entry_by_name(archive, "level.dat")

    assert excinfo.value.entry_name == "../../etc/passwd"


def test_oversized_unrelated_entry_aborts_read(tmp_path: Path) -> None:
    archive = _zip(
        tmp_path / "big.zip",
        {"world/huge.bin": b"\0" * 4096, "world/level.dat": b"ok"},
    )

    with pytest.raises(EntrySizeExceeded) as excinfo:
        find_entry_by_name(archive, "level.dat", max_entry_size=1024)

    assert excinfo.value.size == 4096
    assert excinfo.value.limit == 1024


@pytest.mark.parametrize(
    "raw",
    ["../secret", "a/../../b", "/etc/passwd", "C:/Windows/system.ini", "..\\..\\x", ".."],
)
def test_unsafe_names_are_rejected(raw: str) -> None:
    with pytest.raises(PathTraversal):
        normalize_entry_name(raw)


def test_backslashes_become_forward_slashes() -> None:
    assert normalize_entry_name("world\\region\\r.0.0.mca") == "world/region/r.0.0.mca"
    assert normalize_entry_name("a/./b/../level.dat") == "a/level.dat"
