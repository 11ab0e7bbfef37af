from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterator
from typing import Any

import requests

from ..errors import TransportError
from ..models import Attachment
from ..runtime import get_api_base, get_api_timeout, get_bot_token, get_system_author_id
from ..transport import HttpTransport, MessageSource
from .extract import extract_attachments_from_message

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
_RATE_LIMIT_STATUS = 429
_MAX_RATE_LIMIT_ATTEMPTS = 5


def _retry_after_seconds(response: object, attempt: int) -> float:
    headers = getattr(response, "headers", None) or {}
    retry_after_raw = headers.get("Retry-After")
    if retry_after_raw:
        try:
            return max(0.0, float(retry_after_raw))
        except ValueError:
            pass
    return min(20.0, 1.0 * (2 ** max(0, attempt - 1))) + random.uniform(0.0, 0.35)


class DiscordClient(HttpTransport):
    """Bot-authenticated Discord REST client.

    Implements the byte, refresh and message-source transports used by the
    pipeline. Rate-limited calls honor ``Retry-After``; every other failure
    surfaces as ``TransportError``.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        api_base: str | None = None,
        api_timeout: float | None = None,
        timeout: float | None = None,
    ):
        super().__init__(timeout=timeout)
        self.token = token or get_bot_token()
        self.api_base = (api_base or get_api_base()).rstrip("/")
        self.api_timeout = get_api_timeout() if api_timeout is None else api_timeout

    def _auth_headers(self) -> dict[str, str]:
        if not self.token:
            raise TransportError("DISCORD_BOT_TOKEN is required for Discord API calls")
        return {
            "Authorization": f"Bot {self.token}",
            "Accept": "application/json",
            "User-Agent": "materialize/discord",
        }

    def _api_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.api_base}{path}"
        headers = self._auth_headers()
        for attempt in range(1, _MAX_RATE_LIMIT_ATTEMPTS + 1):
            try:
                response = requests.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=body,
                    timeout=self.api_timeout,
                )
            except requests.RequestException as exc:
                raise TransportError(f"{method} {path} failed: {exc}", url=url) from exc

            if response.status_code == _RATE_LIMIT_STATUS and attempt < _MAX_RATE_LIMIT_ATTEMPTS:
                wait = _retry_after_seconds(response, attempt)
                logger.info(
                    "Discord API rate limited; retrying in %.1fs (attempt %d/%d)",
                    wait,
                    attempt,
                    _MAX_RATE_LIMIT_ATTEMPTS,
                )
                time.sleep(wait)
                continue

            if not 200 <= response.status_code < 300:
                raise TransportError(
                    f"{method} {path} returned HTTP {response.status_code}",
                    url=url,
                    status=response.status_code,
                )
            try:
                return response.json()
            except ValueError as exc:
                raise TransportError(f"{method} {path} returned invalid JSON", url=url) from exc
        raise TransportError(f"{method} {path} stayed rate limited", url=url, status=429)

    def refresh_urls(self, urls: list[str]) -> list[dict[str, Any]]:
        payload = self._api_request(
            "POST", "/attachments/refresh-urls", body={"attachment_urls": list(urls)}
        )
        refreshed = payload.get("refreshed_urls") if isinstance(payload, dict) else None
        if not isinstance(refreshed, list):
            raise TransportError("Invalid response from attachment refresh API")
        return refreshed

    def fetch_messages(
        self, channel_id: str, *, limit: int = PAGE_SIZE, before: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": min(PAGE_SIZE, max(1, int(limit)))}
        if before:
            params["before"] = before
        payload = self._api_request("GET", f"/channels/{channel_id}/messages", params=params)
        if not isinstance(payload, list):
            return []
        return [message for message in payload if isinstance(message, dict)]


def iterate_all_messages(channel_id: str, source: MessageSource) -> Iterator[dict[str, Any]]:
    """Yield a channel's messages newest-first, one page at a time."""
    before: str | None = None
    while True:
        page = source.fetch_messages(channel_id, limit=PAGE_SIZE, before=before)
        if not page:
            return
        yield from page
        before = str(page[-1].get("id") or "") or None
        if before is None:
            return


def _skip_author(message: dict[str, Any], system_author_id: str | None) -> bool:
    author = message.get("author")
    if not isinstance(author, dict) or not author.get("bot"):
        return False
    return str(author.get("id") or "") != (system_author_id or "")


def collect_all_attachments(
    channel_id: str,
    source: MessageSource,
    *,
    system_author_id: str | None = None,
) -> list[Attachment]:
    if system_author_id is None:
        system_author_id = get_system_author_id()
    attachments: list[Attachment] = []
    for message in iterate_all_messages(channel_id, source):
        if _skip_author(message, system_author_id):
            continue
        extract_attachments_from_message(message, attachments)
    logger.debug("collected %d attachment(s) from channel %s", len(attachments), channel_id)
    return attachments
