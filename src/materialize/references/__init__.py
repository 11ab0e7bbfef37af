from .discord import DiscordClient, collect_all_attachments, iterate_all_messages
from .extract import (
    classify_url,
    extract_attachments_from_message,
    extract_attachments_from_text,
    find_urls,
    is_cdn_attachment_url,
    parse_cdn_attachment,
)
from .youtube import clean_youtube_url, extract_video_id, fetch_video_info, is_youtube_url

__all__ = [
    "DiscordClient",
    "classify_url",
    "clean_youtube_url",
    "collect_all_attachments",
    "extract_attachments_from_message",
    "extract_attachments_from_text",
    "extract_video_id",
    "fetch_video_info",
    "find_urls",
    "is_cdn_attachment_url",
    "is_youtube_url",
    "iterate_all_messages",
    "parse_cdn_attachment",
]
