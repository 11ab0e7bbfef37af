from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image as PILImage

from ..concurrency import run_indexed_tasks_settled
from ..runtime import get_image_jobs
from .images import MAX_EDGE

logger = logging.getLogger(__name__)

BASE_WIDTH = 386 * 2
BASE_HEIGHT = 258 * 2
GUTTER = 15
CAPTION_PADDING = 60
OUTPUT_SUFFIX = ".gallery.png"


@dataclass(frozen=True)
class GalleryBox:
    """Target geometry for one image: content area plus bottom padding."""

    width: int
    height: int
    padding: int = 0

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.width, self.height + self.padding


def _layout_cells(count: int) -> list[GalleryBox]:
    if count <= 1:
        return [GalleryBox(BASE_WIDTH, BASE_HEIGHT - CAPTION_PADDING, CAPTION_PADDING)]
    if count == 2:
        cell = GalleryBox(
            BASE_WIDTH // 2 - GUTTER, BASE_HEIGHT - CAPTION_PADDING, CAPTION_PADDING
        )
        return [cell, cell]
    if count == 3:
        small = GalleryBox(BASE_WIDTH // 3 - GUTTER, BASE_HEIGHT // 2 - GUTTER)
        large = GalleryBox(small.width * 2, BASE_HEIGHT)
        return [large, small, small]
    cell = GalleryBox(BASE_WIDTH // 2 - GUTTER, BASE_HEIGHT // 2 - GUTTER)
    return [cell] * count


def compute_gallery_box(count: int, index: int, gallery: bool) -> GalleryBox:
    """Return the scaled box for image ``index`` of ``count``.

    All cells of a layout share one scale factor, chosen so the largest canvas
    edge in the layout is exactly ``MAX_EDGE``. Outside gallery mode every
    image gets a ``MAX_EDGE`` square.
    """
    if not gallery:
        return GalleryBox(MAX_EDGE, MAX_EDGE)
    if count < 1:
        raise ValueError("count must be at least 1")
    if not 0 <= index < count:
        raise ValueError(f"index {index} out of range for {count} image(s)")

    cells = _layout_cells(count)
    cell = cells[index]
    largest = max(max(c.width, c.height + c.padding) for c in cells)
    return GalleryBox(
        width=cell.width * MAX_EDGE // largest,
        height=cell.height * MAX_EDGE // largest,
        padding=cell.padding * MAX_EDGE // largest,
    )


def normalize_for_gallery(
    path: str | Path,
    count: int,
    index: int,
    gallery: bool,
    *,
    output_path: str | Path | None = None,
) -> Path:
    source = Path(path)
    destination = Path(output_path) if output_path else source.with_name(source.name + OUTPUT_SUFFIX)
    box = compute_gallery_box(count, index, gallery)

    with PILImage.open(source) as opened:
        image = opened.convert("RGBA")
    image.thumbnail((box.width, box.height), PILImage.Resampling.LANCZOS)

    canvas = PILImage.new("RGBA", box.canvas_size, (0, 0, 0, 0))
    offset = ((box.width - image.width) // 2, (box.height - image.height) // 2)
    canvas.paste(image, offset, image)
    canvas.save(destination, format="PNG")
    return destination


def normalize_gallery_images(
    paths: list[str | Path],
    gallery: bool,
    *,
    max_workers: int | None = None,
) -> list[Path]:
    """Render every image for its grid cell; failures are logged and dropped."""
    count = len(paths)
    outcomes = run_indexed_tasks_settled(
        [
            (i, lambda p=path, i=i: normalize_for_gallery(p, count, i, gallery))
            for i, path in enumerate(paths)
        ],
        max_workers=max_workers or get_image_jobs(),
    )
    rendered: list[Path] = []
    for index, outcome in outcomes:
        if outcome.ok:
            rendered.append(outcome.value)
        else:
            logger.error("Error processing image %s for gallery: %s", paths[index], outcome.error)
    return rendered
