from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import requests

from .errors import TransportError
from .runtime import get_http_timeout

_DOWNLOAD_HEADERS = {
    "User-Agent": "materialize/0.0.1",
    "Accept": "*/*",
}


@runtime_checkable
class ByteTransport(Protocol):
    def get_bytes(self, url: str) -> bytes: ...
    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any: ...


@runtime_checkable
class RefreshTransport(Protocol):
    def refresh_urls(self, urls: list[str]) -> list[dict[str, Any]]: ...


@runtime_checkable
class DownloadTransport(ByteTransport, RefreshTransport, Protocol):
    """Byte fetching plus link refresh, as used by the downloader."""


@runtime_checkable
class MessageSource(Protocol):
    def fetch_messages(
        self, channel_id: str, *, limit: int = 100, before: str | None = None
    ) -> list[dict[str, Any]]: ...


class HttpTransport:
    """GET-and-buffer transport over ``requests``.

    Connection errors and non-2xx responses are raised as ``TransportError``.
    """

    def __init__(self, *, timeout: float | None = None, headers: dict[str, str] | None = None):
        self.timeout = get_http_timeout() if timeout is None else timeout
        self.headers = dict(_DOWNLOAD_HEADERS)
        self.headers.update(headers or {})

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        try:
            response = requests.get(
                url, headers=self.headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}", url=url) from exc
        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"GET {url} returned HTTP {response.status_code}",
                url=url,
                status=response.status_code,
            )
        return response

    def get_bytes(self, url: str) -> bytes:
        return self._get(url).content

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = self._get(url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"GET {url} returned invalid JSON", url=url) from exc
