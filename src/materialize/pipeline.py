from __future__ import annotations

from pathlib import Path

from .cache.download import materialize_attachments, materialize_images
from .formats.analyze import analyze_attachments
from .formats.versions import VersionTable
from .models import Attachment, Image
from .references.discord import collect_all_attachments


def process_attachments(
    attachments: list[Attachment],
    folder: str | Path,
    transport,
    *,
    remove_old: bool = True,
    versions: VersionTable | None = None,
) -> list[Attachment]:
    """Download what can be downloaded, then attach format metadata."""
    materialize_attachments(attachments, folder, transport, remove_old=remove_old)
    return analyze_attachments(attachments, folder, transport, versions=versions)


def process_images(
    images: list[Image],
    download_folder: str | Path,
    processed_folder: str | Path,
    transport,
) -> list[Image]:
    return materialize_images(images, download_folder, processed_folder, transport)


def collect_and_process(
    channel_id: str,
    folder: str | Path,
    client,
    *,
    system_author_id: str | None = None,
    versions: VersionTable | None = None,
) -> list[Attachment]:
    attachments = collect_all_attachments(
        channel_id, client, system_author_id=system_author_id
    )
    return process_attachments(attachments, folder, client, versions=versions)
