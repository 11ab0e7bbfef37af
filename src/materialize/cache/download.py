from __future__ import annotations

import logging
from pathlib import Path

from ..concurrency import raise_first_failure, run_indexed_tasks_settled
from ..errors import DownloadFailed, TransportError
from ..models import Attachment, Image
from ..naming import file_key_for
from ..render.images import IMAGE_ERRORS, normalize_image, read_dimensions
from ..runtime import get_download_jobs
from ..transport import DownloadTransport
from .media import ensure_directory, reconcile_directory, remove_if_empty, write_atomic
from .refresh import refresh_urls

logger = logging.getLogger(__name__)

PROCESSED_IMAGE_EXTENSION = "png"


def _fetch(transport: DownloadTransport, url: str, *, name: str, kind: str) -> bytes:
    try:
        return transport.get_bytes(url)
    except TransportError as exc:
        logger.error("download of %s %s failed: %s", kind, name, exc)
        raise DownloadFailed(name, url, kind=kind) from exc


def materialize_attachments(
    attachments: list[Attachment],
    folder: str | Path,
    transport: DownloadTransport,
    *,
    remove_old: bool = True,
    max_workers: int | None = None,
) -> list[Attachment]:
    """Make sure every downloadable attachment exists once under ``folder``.

    Files already present at their key are reused without touching the
    network. Sets ``path`` on each attachment that is on disk afterwards.
    """
    folder = Path(folder)
    downloadable = [a for a in attachments if a.can_download]
    if attachments:
        ensure_directory(folder)
    if remove_old:
        reconcile_directory(folder, {file_key_for(a) for a in downloadable})

    misses: list[Attachment] = []
    for attachment in downloadable:
        key = file_key_for(attachment)
        if (folder / key).is_file():
            attachment.path = key
        else:
            attachment.path = None
            misses.append(attachment)
    if not misses:
        return attachments

    urls = refresh_urls([a.url for a in misses], transport)

    def _download(attachment: Attachment, url: str):
        def _run() -> None:
            key = file_key_for(attachment)
            content = _fetch(transport, url, name=attachment.name, kind="attachment")
            write_atomic(folder / key, content)
            attachment.path = key

        return _run

    outcomes = run_indexed_tasks_settled(
        [(i, _download(a, url)) for i, (a, url) in enumerate(zip(misses, urls))],
        max_workers=max_workers or get_download_jobs(),
    )
    raise_first_failure(outcomes)
    return attachments


def materialize_images(
    images: list[Image],
    download_folder: str | Path,
    processed_folder: str | Path,
    transport: DownloadTransport,
    *,
    max_workers: int | None = None,
) -> list[Image]:
    """Download, trim and shrink images into ``processed_folder`` as PNG.

    ``download_folder`` only holds originals while they are being processed
    and is removed afterwards when empty.
    """
    download_folder = Path(download_folder)
    processed_folder = Path(processed_folder)
    if images:
        ensure_directory(download_folder)
        ensure_directory(processed_folder)
    reconcile_directory(
        processed_folder,
        {file_key_for(image, PROCESSED_IMAGE_EXTENSION) for image in images},
    )

    misses: list[Image] = []
    for image in images:
        key = file_key_for(image, PROCESSED_IMAGE_EXTENSION)
        processed_path = processed_folder / key
        if processed_path.is_file():
            image.path = key
            try:
                image.width, image.height = read_dimensions(processed_path)
            except OSError as exc:
                logger.warning("could not read cached image %s: %s", processed_path, exc)
            continue
        image.path = image.width = image.height = None
        misses.append(image)

    if not misses:
        remove_if_empty(download_folder)
        return images

    urls = refresh_urls([image.url for image in misses], transport)

    def _process(image: Image, url: str):
        def _run() -> None:
            staged = download_folder / file_key_for(image)
            content = _fetch(transport, url, name=image.name, kind="image")
            write_atomic(staged, content)
            key = file_key_for(image, PROCESSED_IMAGE_EXTENSION)
            try:
                image.width, image.height = normalize_image(staged, processed_folder / key)
                image.path = key
            except IMAGE_ERRORS as exc:
                logger.error("Failed to process image %s: %s", image.name, exc)
            finally:
                staged.unlink(missing_ok=True)

        return _run

    outcomes = run_indexed_tasks_settled(
        [(i, _process(image, url)) for i, (image, url) in enumerate(zip(misses, urls))],
        max_workers=max_workers or get_download_jobs(),
    )
    remove_if_empty(download_folder)
    raise_first_failure(outcomes)
    return images
