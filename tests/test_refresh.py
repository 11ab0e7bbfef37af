from __future__ import annotations

import logging

import pytest

from materialize.cache.refresh import needs_refresh, refresh_urls
from materialize.errors import RefreshFailed, TransportError

NOW = 1_700_000_000
BASE = "https://cdn.discordapp.com/attachments/1/2/file.zip"


def _hex(ts: int) -> str:
    return format(ts, "x")


def test_signed_unexpired_link_is_fresh() -> None:
    url = f"{BASE}?ex={_hex(NOW + 3600)}&is={_hex(NOW - 60)}&hm=abcdef"
    assert needs_refresh(url, now=NOW) is False


def test_unexpired_link_without_signature_needs_refresh() -> None:
    url = f"{BASE}?ex={_hex(NOW + 3600)}"
    assert needs_refresh(url, now=NOW) is True


@pytest.mark.parametrize(
    "query",
    [
        "",
        f"?ex={_hex(NOW - 1)}&is=1&hm=2",
        "?ex=not-hex&is=1&hm=2",
    ],
)
def test_missing_expired_or_malformed_expiry_needs_refresh(query: str) -> None:
    assert needs_refresh(f"{BASE}{query}", now=NOW) is True


def test_links_outside_the_cdn_never_need_refresh() -> None:
    assert needs_refresh("https://example.com/attachments/1/2/a.zip", now=NOW) is False
    assert needs_refresh("https://www.mediafire.com/file/abc/a.zip/file", now=NOW) is False


class _RefreshTransport:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.batches: list[list[str]] = []

    def refresh_urls(self, urls):
        self.batches.append(list(urls))
        if self.error is not None:
            raise self.error
        if callable(self.response):
            return self.response(urls)
        return self.response


def test_refresh_sends_one_batch_and_keeps_order() -> None:
    fresh = f"{BASE}?ex={_hex(NOW + 3600)}&is=1&hm=2"
    stale_a = "https://cdn.discordapp.com/attachments/1/3/a.png"
    stale_b = "https://cdn.discordapp.com/attachments/1/4/b.png"
    transport = _RefreshTransport(
        lambda urls: [{"original": url, "refreshed": url + "?ex=1&is=2&hm=3"} for url in urls]
    )

    result = refresh_urls([stale_a, fresh, stale_b, stale_a], transport, now=NOW)

    assert transport.batches == [[stale_a, stale_b]]
    assert result == [
        stale_a + "?ex=1&is=2&hm=3",
        fresh,
        stale_b + "?ex=1&is=2&hm=3",
        stale_a + "?ex=1&is=2&hm=3",
    ]


def test_nothing_stale_means_no_request() -> None:
    transport = _RefreshTransport([])
    urls = ["https://example.com/a.png"]

    assert refresh_urls(urls, transport, now=NOW) == urls
    assert transport.batches == []


def test_unexpected_pairs_are_logged_and_skipped(caplog) -> None:
    stale = "https://cdn.discordapp.com/attachments/1/3/a.png"
    transport = _RefreshTransport(
        [
            {"original": stale},
            {"original": "https://cdn.discordapp.com/attachments/9/9/x.png", "refreshed": "x"},
            "garbage",
        ]
    )

    with caplog.at_level(logging.WARNING):
        result = refresh_urls([stale], transport, now=NOW)

    assert result == [stale]
    assert "Invalid data received" in caplog.text
    assert "not found in refresh batch" in caplog.text
    assert "No refreshed URL returned" in caplog.text


def test_transport_failure_raises_refresh_failed() -> None:
    transport = _RefreshTransport(error=TransportError("HTTP 500"))

    with pytest.raises(RefreshFailed) as excinfo:
        refresh_urls(["https://cdn.discordapp.com/attachments/1/3/a.png"], transport, now=NOW)

    assert "try reuploading the files directly to the thread" in str(excinfo.value)
    assert "HTTP 500" in str(excinfo.value)


def test_non_list_response_raises_refresh_failed() -> None:
    transport = _RefreshTransport({"refreshed_urls": "nope"})

    with pytest.raises(RefreshFailed):
        refresh_urls(["https://cdn.discordapp.com/attachments/1/3/a.png"], transport, now=NOW)
