from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from ..errors import MetadataFetchFailed, TransportError
from ..models import VideoInfo
from ..runtime import get_oembed_endpoint
from ..transport import ByteTransport

logger = logging.getLogger(__name__)

_YOUTUBE_URL_RE = re.compile(
    r"^https?://(?:www\.|m\.)?(?:"
    r"youtube\.com/(?:watch\?.*v=|shorts/|live/)|"
    r"youtu\.be/"
    r")(?P<id>[\w-]{11})"
)
_TRACKING_PARAMS = frozenset({"si", "feature", "pp"})


def is_youtube_url(url: str) -> bool:
    return bool(_YOUTUBE_URL_RE.match(url))


def extract_video_id(url: str) -> str | None:
    match = _YOUTUBE_URL_RE.match(url)
    if match:
        return match.group("id")
    return None


def clean_youtube_url(url: str) -> str:
    parsed = urlparse(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if key not in _TRACKING_PARAMS and not key.startswith("utm_")
    ]
    return urlunparse(parsed._replace(query=urlencode(query)))


def _text(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    return str(value) if value else default


def _number(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    try:
        return int(value) if value else 0
    except (TypeError, ValueError):
        return 0


def fetch_video_info(url: str, transport: ByteTransport, *, endpoint: str | None = None) -> VideoInfo:
    """Look up oEmbed details for a video link.

    Raises ``MetadataFetchFailed`` when the endpoint is unreachable or reports
    an error; missing individual fields fall back to placeholders.
    """
    endpoint = endpoint or get_oembed_endpoint()
    try:
        data = transport.get_json(endpoint, params={"dataType": "json", "url": url})
    except TransportError as exc:
        raise MetadataFetchFailed(f"Failed to fetch video details for {url}: {exc}") from exc
    if not isinstance(data, dict):
        raise MetadataFetchFailed(f"Unexpected oEmbed payload for {url}")
    if data.get("error"):
        raise MetadataFetchFailed(f"oEmbed lookup failed for {url}: {data['error']}")
    return VideoInfo(
        title=_text(data, "title", "Unknown Title"),
        author_name=_text(data, "author_name", "Unknown Author"),
        author_url=_text(data, "author_url", ""),
        thumbnail_url=_text(data, "thumbnail_url", ""),
        thumbnail_width=_number(data, "thumbnail_width"),
        thumbnail_height=_number(data, "thumbnail_height"),
        width=_number(data, "width"),
        height=_number(data, "height"),
    )


def attach_video_info(attachment, transport: ByteTransport, *, endpoint: str | None = None) -> None:
    try:
        attachment.youtube = fetch_video_info(attachment.url, transport, endpoint=endpoint)
    except MetadataFetchFailed as exc:
        logger.error("%s", exc)
