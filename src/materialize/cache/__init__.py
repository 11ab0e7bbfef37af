from .download import materialize_attachments, materialize_images
from .media import reconcile_directory, remove_if_empty, write_atomic
from .refresh import needs_refresh, refresh_urls

__all__ = [
    "materialize_attachments",
    "materialize_images",
    "needs_refresh",
    "reconcile_directory",
    "refresh_urls",
    "remove_if_empty",
    "write_atomic",
]
