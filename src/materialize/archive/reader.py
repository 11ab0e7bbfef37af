from __future__ import annotations

import posixpath
import re
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..errors import EntrySizeExceeded, PathTraversal

MAX_ENTRY_SIZE = 100 * 1024 * 1024
_READ_CHUNK = 64 * 1024
_DRIVE_RE = re.compile(r"^[A-Za-z]:")


@dataclass(frozen=True)
class ArchiveEntry:
    name: str
    size: int
    is_dir: bool
    info: zipfile.ZipInfo

    @property
    def base_name(self) -> str:
        return posixpath.basename(self.name)


def normalize_entry_name(raw: str) -> str:
    """Normalize an entry name to forward slashes, rejecting escapes.

    Raises ``PathTraversal`` for names that resolve above the archive root or
    are absolute.
    """
    forward = raw.replace("\\", "/")
    if forward.startswith("/") or _DRIVE_RE.match(forward):
        raise PathTraversal(raw)
    normalized = posixpath.normpath(forward) if forward else forward
    if normalized == ".." or normalized.startswith("../"):
        raise PathTraversal(raw)
    return normalized


def iter_entries(archive: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
    """Yield the archive's entries lazily, in central-directory order.

    The sequence is single-pass; the first unsafe entry raises and ends it.
    """
    for info in archive.infolist():
        name = normalize_entry_name(info.filename)
        yield ArchiveEntry(
            name=name,
            size=info.file_size,
            is_dir=info.is_dir(),
            info=info,
        )


def _read_bounded(archive: zipfile.ZipFile, entry: ArchiveEntry, limit: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    with archive.open(entry.info) as stream:
        while True:
            chunk = stream.read(_READ_CHUNK)
            if not chunk:
                break
            total += len(chunk)
            if total > limit:
                raise EntrySizeExceeded(entry.info.filename, total, limit)
            chunks.append(chunk)
    return b"".join(chunks)


def find_entry_by_name(
    archive_path: str | Path,
    target_base_name: str,
    *,
    max_entry_size: int = MAX_ENTRY_SIZE,
) -> bytes | None:
    """Return the bytes of the first entry whose base name matches.

    Any traversal attempt or any entry declared larger than
    ``max_entry_size`` aborts the whole read, including entries that do not
    match the target. Returns ``None`` when nothing matches.
    """
    with zipfile.ZipFile(archive_path) as archive:
        for entry in iter_entries(archive):
            if entry.is_dir:
                continue
            if entry.size > max_entry_size:
                raise EntrySizeExceeded(entry.info.filename, entry.size, max_entry_size)
            if entry.base_name != target_base_name:
                continue
            return _read_bounded(archive, entry, max_entry_size)
    return None
