from __future__ import annotations

import gzip
import io
import zlib

import nbtlib

from ..errors import FormatParseError

_GZIP_MAGIC = b"\x1f\x8b"


def parse_nbt(data: bytes) -> nbtlib.Compound:
    """Parse a big-endian NBT document, gunzipping it first when compressed."""
    try:
        raw = gzip.decompress(data) if data[:2] == _GZIP_MAGIC else data
    except (OSError, EOFError, zlib.error) as exc:
        raise FormatParseError(f"corrupt gzip stream: {exc}") from exc
    try:
        root = nbtlib.File.parse(io.BytesIO(raw))
    except Exception as exc:
        raise FormatParseError(f"malformed NBT: {exc}") from exc
    if not isinstance(root, nbtlib.Compound):
        raise FormatParseError("NBT root is not a compound")
    return root


def child(node, key: str, kind: type):
    """Return ``node[key]`` if it exists and is an instance of ``kind``."""
    if not isinstance(node, nbtlib.Compound):
        return None
    value = node.get(key)
    return value if isinstance(value, kind) else None
