from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path

import nbtlib

from ..archive import find_entry_by_name
from ..errors import ArchiveError, FormatParseError
from ..models import MetadataError, WorldSaveInfo, WorldSaveMeta
from .nbt import child, parse_nbt

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "level.dat"
INVALID_DESCRIPTOR = "Invalid descriptor"
INVALID_ARCHIVE = "Invalid archive"


def read_descriptor_version(data: bytes) -> str:
    """Walk ``Data.Version.Name`` in a ``level.dat`` payload."""
    root = parse_nbt(data)
    data_tag = child(root, "Data", nbtlib.Compound)
    version_tag = child(data_tag, "Version", nbtlib.Compound)
    name = child(version_tag, "Name", nbtlib.String)
    if not name:
        raise FormatParseError("descriptor has no Data.Version.Name string")
    return str(name)


def analyze_world_save(path: str | Path) -> WorldSaveMeta | None:
    """Return the world's release name, an error value, or ``None``.

    ``None`` means the archive holds no descriptor, which is not an error:
    plenty of zip submissions are not world saves.
    """
    try:
        descriptor = find_entry_by_name(path, DESCRIPTOR_NAME)
    except ArchiveError as exc:
        logger.warning("Refusing world save %s: %s", path, exc)
        return MetadataError(f"Unsafe archive: {exc}")
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError) as exc:
        logger.error("Error reading world save %s: %s", path, exc)
        return MetadataError(INVALID_ARCHIVE)
    if descriptor is None:
        return None
    try:
        return WorldSaveInfo(version=read_descriptor_version(descriptor))
    except FormatParseError as exc:
        logger.error("Error processing world save %s: %s", path, exc)
        return MetadataError(INVALID_DESCRIPTOR)
