from __future__ import annotations

import re
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, unquote_plus, urlparse

from ..models import (
    CONTENT_BILIBILI,
    CONTENT_DISCORD,
    CONTENT_MEDIAFIRE,
    CONTENT_YOUTUBE,
    Attachment,
)
from .youtube import clean_youtube_url, extract_video_id, is_youtube_url

_URL_RE = re.compile(
    r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"[-a-zA-Z0-9()@:%_+.~#?&/=]*"
)

CDN_HOSTS = frozenset({"cdn.discordapp.com", "media.discordapp.net"})
_MEDIAFIRE_HOSTS = frozenset({"mediafire.com", "www.mediafire.com"})
_BILIBILI_HOSTS = frozenset({"bilibili.com", "www.bilibili.com", "m.bilibili.com"})


def find_urls(text: str) -> list[str]:
    return _URL_RE.findall(text or "")


def _path_segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def is_cdn_attachment_url(url: str) -> bool:
    return parse_cdn_attachment(url) is not None


def parse_cdn_attachment(url: str) -> tuple[str, str] | None:
    """Return ``(attachment_id, filename)`` for a Discord CDN attachment URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme != "https" or (parsed.hostname or "") not in CDN_HOSTS:
        return None
    segments = _path_segments(parsed.path)
    if len(segments) < 4 or segments[0] != "attachments":
        return None
    return segments[2], unquote_plus(segments[3])


def _mediafire_record(url: str, suffix: str) -> Attachment | None:
    parsed = urlparse(url)
    if (parsed.hostname or "") not in _MEDIAFIRE_HOSTS:
        return None
    segments = _path_segments(parsed.path)
    if len(segments) < 2 or segments[0] not in {"file", "folder"}:
        return None
    attachment_id = segments[1]
    name = unquote_plus(segments[2]) if len(segments) > 2 else attachment_id
    return Attachment(
        id=attachment_id,
        name=name,
        content_type=CONTENT_MEDIAFIRE,
        url=url,
        description=f"[MediaFire]{suffix}",
        can_download=False,
    )


def _youtube_record(url: str, suffix: str) -> Attachment | None:
    if not is_youtube_url(url):
        return None
    video_id = extract_video_id(url)
    if not video_id:
        return None
    return Attachment(
        id=video_id,
        name=f"YouTube Video {video_id}",
        content_type=CONTENT_YOUTUBE,
        url=clean_youtube_url(url),
        description=f"[YouTube]{suffix}",
        can_download=False,
    )


def _bilibili_record(url: str, suffix: str) -> Attachment | None:
    parsed = urlparse(url)
    if parsed.scheme != "https" or (parsed.hostname or "") not in _BILIBILI_HOSTS:
        return None
    segments = _path_segments(parsed.path)
    video_id = segments[1] if len(segments) > 1 else None
    if not video_id:
        bvid = parse_qs(parsed.query).get("bvid")
        video_id = bvid[0] if bvid else None
    if not video_id:
        return None
    return Attachment(
        id=video_id,
        name=f"Bilibili Video {video_id}",
        content_type=CONTENT_BILIBILI,
        url=url,
        description=f"[Bilibili]{suffix}",
        can_download=False,
    )


def _cdn_record(url: str, suffix: str) -> Attachment | None:
    parsed = parse_cdn_attachment(url)
    if parsed is None:
        return None
    attachment_id, name = parsed
    return Attachment(
        id=attachment_id,
        name=name,
        content_type=CONTENT_DISCORD,
        url=url,
        description=f"[DiscordCDN]{suffix}",
        can_download=True,
    )


_CLASSIFIERS = (_mediafire_record, _youtube_record, _cdn_record, _bilibili_record)


def classify_url(url: str, suffix: str = "") -> Attachment | None:
    for classifier in _CLASSIFIERS:
        try:
            record = classifier(url, suffix)
        except ValueError:
            continue
        if record is not None:
            return record
    return None


def extract_attachments_from_text(
    text: str,
    existing: list[Attachment] | None = None,
    suffix: str = "",
) -> list[Attachment]:
    """Append a record for every recognized link in ``text``.

    ``existing`` is extended in place and returned; a link whose id is already
    present is ignored.
    """
    attachments = existing if existing is not None else []
    seen = {attachment.id for attachment in attachments}
    for url in find_urls(text):
        record = classify_url(url, suffix)
        if record is None or record.id in seen:
            continue
        seen.add(record.id)
        attachments.append(record)
    return attachments


def _author(message: dict[str, Any]) -> dict[str, Any]:
    author = message.get("author")
    return author if isinstance(author, dict) else {}


def _format_timestamp(raw: Any) -> str:
    if not isinstance(raw, str) or not raw:
        return "unknown time"
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def sent_by_label(message: dict[str, Any]) -> str:
    author = _author(message)
    username = author.get("username") or author.get("global_name") or "unknown"
    return f"Sent by {username} at {_format_timestamp(message.get('timestamp'))}"


def extract_attachments_from_message(
    message: dict[str, Any],
    existing: list[Attachment] | None = None,
) -> list[Attachment]:
    attachments = existing if existing is not None else []
    label = sent_by_label(message)

    content = message.get("content")
    if isinstance(content, str) and content:
        extract_attachments_from_text(content, attachments, f" {label}")

    for native in message.get("attachments") or []:
        if not isinstance(native, dict) or not native.get("id"):
            continue
        attachment_id = str(native["id"])
        # native uploads win over links to the same file
        attachments[:] = [a for a in attachments if a.id != attachment_id]
        attachments.append(
            Attachment(
                id=attachment_id,
                name=str(native.get("filename") or attachment_id),
                content_type=CONTENT_DISCORD,
                url=str(native.get("url") or ""),
                description=label,
                can_download=True,
                mime_type=native.get("content_type") or None,
            )
        )
    return attachments
