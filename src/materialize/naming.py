from __future__ import annotations

import hashlib
from urllib.parse import quote

# Characters that survive escaping unchanged; everything else is percent-encoded.
_SAFE_CHARS = "-_.~"
# ids never keep "-", so the first "-" in a key always ends the id
_SAFE_ID_CHARS = "_.~"

MAX_KEY_LENGTH = 200
_DIGEST_LENGTH = 16
_MAX_SUFFIX_LENGTH = 33


def escape_component(value: str, *, safe: str = _SAFE_CHARS) -> str:
    if not value:
        return ""
    escaped = quote(value, safe=safe).lower()
    # keep trailing dots visible on disk
    stripped = escaped.rstrip(".")
    return stripped + "%2e" * (len(escaped) - len(stripped))


def split_extension(name: str) -> tuple[str, str]:
    prefix, dot, ext = name.rpartition(".")
    if not dot or not prefix or not ext:
        return name, ""
    return prefix, ext


def _truncate_escaped(value: str, limit: int) -> str:
    cut = value[:limit]
    partial = cut.rfind("%", max(0, len(cut) - 2))
    if partial != -1:
        cut = cut[:partial]
    return cut


def _identity_digest(id: str, name: str) -> str:
    identity = f"{id}-{name}".lower()
    return hashlib.sha256(identity.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]


def compute_file_key(id: str, name: str, forced_extension: str | None = None) -> str:
    """Return the lowercase, filesystem-safe on-disk name for ``(id, name)``.

    The same key is used to decide whether an artifact already exists and to
    prune files that no longer belong to the current record set. Keys never
    exceed ``MAX_KEY_LENGTH`` ASCII characters: a name that would escape past
    it is cut short and tagged with a digest of the full ``(id, name)``.
    """
    stem, ext = split_extension((name or "").lower())
    if forced_extension:
        ext = forced_extension.lower().lstrip(".")
    prefix = f"{escape_component(str(id).lower(), safe=_SAFE_ID_CHARS)}-{escape_component(stem)}"
    escaped_ext = escape_component(ext)
    suffix = f".{escaped_ext}" if escaped_ext else ""
    if len(prefix) + len(suffix) <= MAX_KEY_LENGTH:
        return prefix + suffix

    if len(suffix) > _MAX_SUFFIX_LENGTH:
        suffix = ""
    head = _truncate_escaped(prefix, MAX_KEY_LENGTH - len(suffix) - _DIGEST_LENGTH - 1)
    return f"{head}-{_identity_digest(id, name)}{suffix}"


def file_key_for(record, forced_extension: str | None = None) -> str:
    return compute_file_key(record.id, record.name, forced_extension)
