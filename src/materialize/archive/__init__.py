from .reader import (
    MAX_ENTRY_SIZE,
    ArchiveEntry,
    find_entry_by_name,
    iter_entries,
    normalize_entry_name,
)

__all__ = [
    "MAX_ENTRY_SIZE",
    "ArchiveEntry",
    "find_entry_by_name",
    "iter_entries",
    "normalize_entry_name",
]
