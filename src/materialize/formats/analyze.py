from __future__ import annotations

import logging
from pathlib import Path

from ..concurrency import raise_first_failure, run_indexed_tasks_settled
from ..models import CONTENT_YOUTUBE, Attachment
from ..references.youtube import attach_video_info
from ..runtime import get_analyze_jobs
from .litematic import analyze_litematic
from .versions import VersionTable, load_version_table
from .worldsave import analyze_world_save

logger = logging.getLogger(__name__)

LITEMATIC_EXTENSION = "litematic"
WORLD_SAVE_EXTENSION = "zip"


def analyze_attachment(
    attachment: Attachment,
    folder: Path,
    transport,
    versions: VersionTable,
) -> None:
    if attachment.can_download and attachment.path:
        local_path = folder / attachment.path
        extension = attachment.extension
        if extension == LITEMATIC_EXTENSION:
            attachment.litematic = analyze_litematic(local_path, versions)
        elif extension == WORLD_SAVE_EXTENSION:
            attachment.world_save = analyze_world_save(local_path)
    elif attachment.content_type == CONTENT_YOUTUBE and transport is not None:
        attach_video_info(attachment, transport)


def analyze_attachments(
    attachments: list[Attachment],
    folder: str | Path,
    transport=None,
    *,
    versions: VersionTable | None = None,
    max_workers: int | None = None,
) -> list[Attachment]:
    """Fill in format metadata for every attachment, concurrently.

    Analyzers record content problems as ``MetadataError`` values, so only
    unexpected failures are raised, after the whole batch has finished.
    """
    folder = Path(folder)
    versions = versions or load_version_table()
    outcomes = run_indexed_tasks_settled(
        [
            (i, lambda a=attachment: analyze_attachment(a, folder, transport, versions))
            for i, attachment in enumerate(attachments)
        ],
        max_workers=max_workers or get_analyze_jobs(),
    )
    raise_first_failure(outcomes)
    return attachments
