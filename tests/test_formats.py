from __future__ import annotations

import zipfile
from pathlib import Path

import nbtlib
import pytest
from nbtlib import Compound, Int, String

from materialize.errors import MetadataFetchFailed, TransportError
from materialize.formats import (
    VersionTable,
    analyze_attachments,
    analyze_litematic,
    analyze_world_save,
    load_version_table,
)
from materialize.models import Attachment, LitematicInfo, MetadataError, WorldSaveInfo
from materialize.references.youtube import fetch_video_info


def _vector(x: int, y: int, z: int) -> Compound:
    return Compound({"x": Int(x), "y": Int(y), "z": Int(z)})


def _write_nbt(path: Path, root: Compound) -> Path:
    nbtlib.File(root).save(path, gzipped=True)
    return path


def _schematic(regions: dict[str, tuple[tuple[int, int, int], tuple[int, int, int]]], data_version: int) -> Compound:
    return Compound(
        {
            "MinecraftDataVersion": Int(data_version),
            "Regions": Compound(
                {
                    name: Compound({"Position": _vector(*position), "Size": _vector(*size)})
                    for name, (position, size) in regions.items()
                }
            ),
        }
    )


def _level_dat(version_name: str | None) -> Compound:
    data = {"LevelName": String("Test World")}
    if version_name is not None:
        data["Version"] = Compound({"Id": Int(3700), "Name": String(version_name)})
    return Compound({"Data": Compound(data)})


@pytest.fixture
def versions() -> VersionTable:
    return VersionTable({3700: "1.20.4", 3465: "1.20.1"})


def test_bundled_table_knows_recent_releases() -> None:
    table = load_version_table()
    assert table.lookup(3700) == "1.20.4"
    assert table.lookup(-1) == "Unknown"
    assert len(table) > 50


def test_litematic_size_and_version(tmp_path: Path, versions: VersionTable) -> None:
    path = _write_nbt(
        tmp_path / "box.litematic",
        _schematic({"main": ((0, 0, 0), (3, 4, 5))}, 3700),
    )

    assert analyze_litematic(path, versions) == LitematicInfo(size="3x4x5", version="1.20.4")


def test_litematic_regions_combine_with_negative_sizes(tmp_path: Path, versions: VersionTable) -> None:
    path = _write_nbt(
        tmp_path / "multi.litematic",
        _schematic(
            {
                "a": ((0, 0, 0), (2, 2, 2)),
                "b": ((9, 0, 0), (-3, 1, -4)),
            },
            1,
        ),
    )

    info = analyze_litematic(path, versions)

    assert info == LitematicInfo(size="10x2x5", version="Unknown")


def test_corrupt_litematic_becomes_error_value(tmp_path: Path, versions: VersionTable) -> None:
    path = tmp_path / "broken.litematic"
    path.write_bytes(b"\x1f\x8bnot really gzip")

    assert analyze_litematic(path, versions) == MetadataError("Error processing litematic file")


def _world_zip(tmp_path: Path, level: Compound | None, name: str = "save.zip") -> Path:
    archive_path = tmp_path / name
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("world/region/r.0.0.mca", b"\0" * 16)
        if level is not None:
            dat = _write_nbt(tmp_path / f"{name}.level.dat", level)
            archive.writestr("world/level.dat", dat.read_bytes())
    return archive_path


def test_world_save_reports_release_name(tmp_path: Path) -> None:
    path = _world_zip(tmp_path, _level_dat("1.20.4"))

    assert analyze_world_save(path) == WorldSaveInfo(version="1.20.4")


def test_world_save_without_version_is_invalid_descriptor(tmp_path: Path) -> None:
    path = _world_zip(tmp_path, _level_dat(None))

    assert analyze_world_save(path) == MetadataError("Invalid descriptor")


def test_zip_without_descriptor_is_left_unset(tmp_path: Path) -> None:
    assert analyze_world_save(_world_zip(tmp_path, None)) is None


def test_not_a_zip_is_invalid_archive(tmp_path: Path) -> None:
    path = tmp_path / "fake.zip"
    path.write_bytes(b"definitely not a zip")

    assert analyze_world_save(path) == MetadataError("Invalid archive")


def test_unsafe_world_save_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "evil.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("../level.dat", b"x")

    result = analyze_world_save(path)

    assert isinstance(result, MetadataError)
    assert result.error.startswith("Unsafe archive:")


class DummyOEmbed:
    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def get_json(self, url, params=None):
        self.calls.append((url, params))
        if self.error is not None:
            raise self.error
        return self.payload


def test_video_info_fills_fallbacks() -> None:
    transport = DummyOEmbed({"title": "Flying machine", "width": 200, "height": "113"})

    info = fetch_video_info(
        "https://youtu.be/dQw4w9WgXcQ", transport, endpoint="https://oembed.test/embed"
    )

    assert info.title == "Flying machine"
    assert info.author_name == "Unknown Author"
    assert info.thumbnail_url == ""
    assert (info.width, info.height) == (200, 113)
    assert transport.calls == [
        (
            "https://oembed.test/embed",
            {"dataType": "json", "url": "https://youtu.be/dQw4w9WgXcQ"},
        )
    ]


def test_video_info_error_payload_raises() -> None:
    with pytest.raises(MetadataFetchFailed):
        fetch_video_info("https://youtu.be/x", DummyOEmbed({"error": "404 Not Found"}))


def test_analyze_dispatches_by_extension(tmp_path: Path, versions: VersionTable) -> None:
    _write_nbt(tmp_path / "1-box.litematic", _schematic({"main": ((0, 0, 0), (1, 1, 1))}, 3465))
    world = _world_zip(tmp_path, _level_dat("1.20.4"), name="2-save.zip")
    assert world.name == "2-save.zip"
    attachments = [
        Attachment(id="1", name="Box.litematic", content_type="discord", url="u1",
                   can_download=True, path="1-box.litematic"),
        Attachment(id="2", name="save.zip", content_type="discord", url="u2",
                   can_download=True, path="2-save.zip"),
        Attachment(id="dQw4w9WgXcQ", name="YouTube Video dQw4w9WgXcQ", content_type="youtube",
                   url="https://youtu.be/dQw4w9WgXcQ"),
        Attachment(id="abc", name="broken.zip", content_type="mediafire", url="u3"),
    ]
    transport = DummyOEmbed(error=TransportError("offline"))

    analyze_attachments(attachments, tmp_path, transport, versions=versions, max_workers=2)

    litematic, world_save, video, mediafire = attachments
    assert litematic.litematic == LitematicInfo(size="1x1x1", version="1.20.1")
    assert litematic.world_save is None
    assert world_save.world_save == WorldSaveInfo(version="1.20.4")
    assert video.youtube is None
    assert len(transport.calls) == 1
    assert mediafire.litematic is None and mediafire.world_save is None
