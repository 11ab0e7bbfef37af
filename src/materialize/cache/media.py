from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def write_atomic(path: Path, content: bytes) -> None:
    """Write ``content`` to ``path`` so readers see either all bytes or none."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_raw = tempfile.mkstemp(prefix=".partial-", dir=path.parent)
    tmp = Path(tmp_raw)
    try:
        with os.fdopen(fd, "wb") as fileobj:
            fileobj.write(content)
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def reconcile_directory(directory: Path, expected_keys: set[str]) -> list[Path]:
    """Delete files in ``directory`` whose name is not one of ``expected_keys``."""
    if not directory.is_dir():
        return []
    removed: list[Path] = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or entry.name.lower() in expected_keys:
            continue
        try:
            entry.unlink()
        except OSError as exc:
            logger.error("Failed to remove file %s: %s", entry, exc)
            continue
        removed.append(entry)
    if removed:
        logger.debug("pruned %d stale file(s) from %s", len(removed), directory)
    return removed


def remove_if_empty(directory: Path) -> None:
    try:
        directory.rmdir()
    except OSError:
        pass
