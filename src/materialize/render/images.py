from __future__ import annotations

from pathlib import Path

from PIL import Image as PILImage

MAX_EDGE = 800

IMAGE_ERRORS = (OSError, ValueError, PILImage.DecompressionBombError)


def trim_transparent_border(image: PILImage.Image) -> PILImage.Image:
    """Crop fully transparent rows and columns from the image edges.

    Opaque images and images that are entirely transparent come back as-is.
    """
    if "A" not in image.getbands():
        return image
    alpha = image.getchannel("A")
    if alpha.getextrema()[0] == 255:
        return image
    bbox = alpha.getbbox()
    if bbox is None:
        return image
    return image.crop(bbox)


def _with_alpha(image: PILImage.Image) -> PILImage.Image:
    if image.mode in {"RGBA", "LA"}:
        return image
    if image.mode == "P" and "transparency" in image.info:
        return image.convert("RGBA")
    if image.mode in {"RGB", "L"}:
        return image
    return image.convert("RGBA")


def normalize_image(source: Path, destination: Path, *, max_edge: int = MAX_EDGE) -> tuple[int, int]:
    """Trim, shrink to fit ``max_edge`` square and save ``source`` as PNG.

    Never enlarges. Returns the written ``(width, height)``.
    """
    with PILImage.open(source) as opened:
        opened.load()
        image = trim_transparent_border(_with_alpha(opened))
        image.thumbnail((max_edge, max_edge), PILImage.Resampling.LANCZOS)
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp = destination.with_name(f".partial-{destination.name}")
        try:
            image.save(tmp, format="PNG")
            tmp.replace(destination)
        finally:
            tmp.unlink(missing_ok=True)
        return image.size


def read_dimensions(path: Path) -> tuple[int, int]:
    with PILImage.open(path) as opened:
        return opened.size
