from pathlib import Path


def file_key(id: str, name: str, *, extension: str | None = None) -> str:
    from .naming import compute_file_key

    return compute_file_key(id, name, extension)


def scan(text: str) -> list:
    from .references import extract_attachments_from_text

    return extract_attachments_from_text(text)


def fetch_attachments(
    attachments: list,
    folder: str | Path,
    *,
    transport=None,
    remove_old: bool = True,
) -> list:
    from .pipeline import process_attachments
    from .references import DiscordClient

    return process_attachments(
        attachments,
        folder,
        transport or DiscordClient(),
        remove_old=remove_old,
    )


def fetch_images(
    images: list,
    processed_folder: str | Path,
    *,
    download_folder: str | Path | None = None,
    transport=None,
) -> list:
    from .pipeline import process_images
    from .references import DiscordClient

    processed = Path(processed_folder)
    staging = Path(download_folder) if download_folder else processed.parent / "downloaded_images"
    return process_images(images, staging, processed, transport or DiscordClient())


def gallery(paths: list[str | Path], *, full: bool = False) -> list[Path]:
    from .render import normalize_gallery_images

    return normalize_gallery_images(list(paths), not full)


__all__ = [
    "file_key",
    "scan",
    "fetch_attachments",
    "fetch_images",
    "gallery",
]
