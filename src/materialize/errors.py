from __future__ import annotations

REUPLOAD_HINT = "try reuploading the file directly to the thread"


class MaterializeError(Exception):
    pass


class TransportError(MaterializeError):
    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        self.url = url
        self.status = status
        super().__init__(message)


class RefreshFailed(MaterializeError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            "Failed to refresh attachment URLs, try reuploading the files directly "
            f"to the thread. Error: {reason}"
        )


class DownloadFailed(MaterializeError):
    def __init__(self, record_name: str, url: str, *, kind: str = "attachment"):
        self.record_name = record_name
        self.url = url
        self.kind = kind
        super().__init__(
            f"Failed to download {kind} {record_name} at {url}, {REUPLOAD_HINT}."
        )


class ArchiveError(MaterializeError):
    pass


class PathTraversal(ArchiveError):
    def __init__(self, entry_name: str):
        self.entry_name = entry_name
        super().__init__(f"Path traversal detected: {entry_name}")


class EntrySizeExceeded(ArchiveError):
    def __init__(self, entry_name: str, size: int, limit: int):
        self.entry_name = entry_name
        self.size = size
        self.limit = limit
        super().__init__(f"Entry {entry_name} is {size} bytes (> {limit} limit)")


class FormatParseError(MaterializeError):
    pass


class MetadataFetchFailed(MaterializeError):
    pass
