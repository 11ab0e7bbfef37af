from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

CONTENT_DISCORD = "discord"
CONTENT_MEDIAFIRE = "mediafire"
CONTENT_YOUTUBE = "youtube"
CONTENT_BILIBILI = "bilibili"
CONTENT_UNKNOWN = "unknown"

CONTENT_TYPES = frozenset(
    {
        CONTENT_DISCORD,
        CONTENT_MEDIAFIRE,
        CONTENT_YOUTUBE,
        CONTENT_BILIBILI,
        CONTENT_UNKNOWN,
    }
)


@dataclass(frozen=True)
class LitematicInfo:
    size: str
    version: str


@dataclass(frozen=True)
class WorldSaveInfo:
    version: str


@dataclass(frozen=True)
class VideoInfo:
    title: str
    author_name: str
    author_url: str
    thumbnail_url: str
    thumbnail_width: int
    thumbnail_height: int
    width: int
    height: int


@dataclass(frozen=True)
class MetadataError:
    error: str


LitematicMeta = LitematicInfo | MetadataError
WorldSaveMeta = WorldSaveInfo | MetadataError


def _metadata_dict(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    return asdict(value)


@dataclass
class Attachment:
    """A reference to hosted submission content plus its processing metadata.

    ``path`` is the file key relative to the attachment folder and is only set
    once the bytes exist on disk. At most one of ``litematic``, ``world_save``
    and ``youtube`` is populated.
    """

    id: str
    name: str
    content_type: str
    url: str
    description: str = ""
    can_download: bool = False
    path: str | None = None
    mime_type: str | None = None
    litematic: LitematicMeta | None = None
    world_save: WorldSaveMeta | None = None
    youtube: VideoInfo | None = None

    def __post_init__(self) -> None:
        if self.content_type not in CONTENT_TYPES:
            self.content_type = CONTENT_UNKNOWN

    @property
    def extension(self) -> str:
        _, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "content_type": self.content_type,
            "url": self.url,
            "description": self.description,
            "can_download": self.can_download,
            "path": self.path,
            "mime_type": self.mime_type,
            "litematic": _metadata_dict(self.litematic),
            "world_save": _metadata_dict(self.world_save),
            "youtube": _metadata_dict(self.youtube),
        }


@dataclass
class Image:
    name: str
    url: str
    description: str = ""
    id: str = ""
    path: str | None = None
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            from .references.extract import parse_cdn_attachment

            parsed = parse_cdn_attachment(self.url)
            self.id = parsed[0] if parsed else self.name

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
