from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path

import yaml

from ..runtime import get_version_table_path

UNKNOWN_VERSION = "Unknown"


class VersionTable:
    def __init__(self, data_versions: dict[int, str]):
        self._by_data_version = dict(data_versions)

    @classmethod
    def from_yaml(cls, text: str) -> VersionTable:
        payload = yaml.safe_load(text) or {}
        raw = payload.get("data_versions") if isinstance(payload, dict) else None
        if not isinstance(raw, dict):
            raise ValueError("version table must define a 'data_versions' mapping")
        return cls({int(key): str(value) for key, value in raw.items()})

    def __len__(self) -> int:
        return len(self._by_data_version)

    def lookup(self, data_version: int) -> str:
        return self._by_data_version.get(int(data_version), UNKNOWN_VERSION)


@lru_cache(maxsize=None)
def _load(path: str | None) -> VersionTable:
    if path:
        return VersionTable.from_yaml(Path(path).read_text(encoding="utf-8"))
    text = resources.files(__package__).joinpath("versions.yaml").read_text(encoding="utf-8")
    return VersionTable.from_yaml(text)


def load_version_table(path: str | None = None) -> VersionTable:
    """Return the data-version table, parsed once per source path."""
    return _load(path or get_version_table_path())
