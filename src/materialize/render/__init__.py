from .gallery import (
    GalleryBox,
    compute_gallery_box,
    normalize_for_gallery,
    normalize_gallery_images,
)
from .images import normalize_image, read_dimensions, trim_transparent_border

__all__ = [
    "GalleryBox",
    "compute_gallery_box",
    "normalize_for_gallery",
    "normalize_gallery_images",
    "normalize_image",
    "read_dimensions",
    "trim_transparent_border",
]
