from __future__ import annotations

import logging
import time
from urllib.parse import parse_qs, urlparse

from ..errors import RefreshFailed, TransportError
from ..references.extract import is_cdn_attachment_url
from ..transport import RefreshTransport

logger = logging.getLogger(__name__)


def _query_value(params: dict[str, list[str]], key: str) -> str:
    values = params.get(key) or []
    return values[0] if values else ""


def needs_refresh(url: str, *, now: float | None = None) -> bool:
    """Return whether a CDN attachment URL must be re-signed before download.

    ``ex`` is a hex Unix timestamp. Unexpired links still need refreshing when
    they carry neither ``is`` nor ``hm`` together, which marks an older signing
    scheme. Links outside the CDN are never refreshed.
    """
    if not url or not is_cdn_attachment_url(url):
        return False
    params = parse_qs(urlparse(url).query)
    expires_raw = _query_value(params, "ex")
    if not expires_raw:
        return True
    try:
        expires_at = int(expires_raw, 16)
    except ValueError:
        return True
    current = time.time() if now is None else now
    if expires_at <= current:
        return True
    return not (_query_value(params, "is") and _query_value(params, "hm"))


def refresh_urls(
    urls: list[str],
    transport: RefreshTransport,
    *,
    now: float | None = None,
) -> list[str]:
    """Return ``urls`` with every stale CDN link replaced by its renewed form.

    All stale links go out in a single batch. The result lines up 1:1 with the
    input. Links the response does not cover are returned unchanged.
    """
    if not urls:
        return []

    stale: list[str] = []
    for url in urls:
        if url not in stale and needs_refresh(url, now=now):
            stale.append(url)
    if not stale:
        return list(urls)

    logger.debug("refreshing %d expiring attachment URL(s)", len(stale))
    try:
        pairs = transport.refresh_urls(stale)
    except TransportError as exc:
        logger.error("Failed to refresh attachment URLs: %s", exc)
        raise RefreshFailed(str(exc)) from exc
    if not isinstance(pairs, list):
        raise RefreshFailed("Invalid response from attachment refresh API")

    refreshed: dict[str, str] = {}
    stale_set = set(stale)
    for pair in pairs:
        original = pair.get("original") if isinstance(pair, dict) else None
        renewed = pair.get("refreshed") if isinstance(pair, dict) else None
        if not original or not renewed:
            logger.warning("Invalid data received for attachment refresh: %r", pair)
            continue
        if original not in stale_set:
            logger.warning("Original URL %s not found in refresh batch.", original)
            continue
        refreshed[original] = renewed

    for url in stale:
        if url not in refreshed:
            logger.warning("No refreshed URL returned for %s; keeping original.", url)

    return [refreshed.get(url, url) for url in urls]
