from __future__ import annotations

import logging
from pathlib import Path

import nbtlib

from ..errors import FormatParseError
from ..models import LitematicInfo, LitematicMeta, MetadataError
from .nbt import child, parse_nbt
from .versions import VersionTable

logger = logging.getLogger(__name__)

LITEMATIC_ERROR = "Error processing litematic file"
_AXES = ("x", "y", "z")


def _vector(region, key: str) -> tuple[int, int, int]:
    compound = child(region, key, nbtlib.Compound)
    if compound is None:
        raise FormatParseError(f"region is missing {key}")
    values = []
    for axis in _AXES:
        value = child(compound, axis, nbtlib.Int)
        if value is None:
            raise FormatParseError(f"{key} is missing {axis}")
        values.append(int(value))
    return values[0], values[1], values[2]


def _region_corners(region) -> tuple[tuple[int, ...], tuple[int, ...]]:
    position = _vector(region, "Position")
    size = _vector(region, "Size")
    low = []
    high = []
    # a negative size extends the region backwards from its position
    for start, extent in zip(position, size):
        if extent >= 0:
            low.append(start)
            high.append(start + max(extent - 1, 0))
        else:
            low.append(start + extent + 1)
            high.append(start)
    return tuple(low), tuple(high)


def bounding_box_size(root) -> str:
    regions = child(root, "Regions", nbtlib.Compound)
    if not regions:
        raise FormatParseError("schematic has no regions")
    lows = []
    highs = []
    for region in regions.values():
        low, high = _region_corners(region)
        lows.append(low)
        highs.append(high)
    extents = [
        max(high[axis] for high in highs) - min(low[axis] for low in lows) + 1
        for axis in range(3)
    ]
    return "x".join(str(extent) for extent in extents)


def read_litematic(data: bytes, versions: VersionTable) -> LitematicInfo:
    root = parse_nbt(data)
    data_version = child(root, "MinecraftDataVersion", nbtlib.Int)
    version = versions.lookup(int(data_version) if data_version is not None else 0)
    return LitematicInfo(size=bounding_box_size(root), version=version)


def analyze_litematic(path: str | Path, versions: VersionTable) -> LitematicMeta:
    """Summarize a schematic as size and release, or an error value."""
    try:
        return read_litematic(Path(path).read_bytes(), versions)
    except (OSError, FormatParseError) as exc:
        logger.error("Error processing litematic file %s: %s", path, exc)
        return MetadataError(LITEMATIC_ERROR)
