from __future__ import annotations

import os
from functools import lru_cache

_DEFAULT_DOWNLOAD_JOBS = 4
_DEFAULT_ANALYZE_JOBS = 4
_DEFAULT_IMAGE_JOBS = 3
_MAX_JOBS = 64

DEFAULT_API_BASE = "https://discord.com/api/v10"
DEFAULT_OEMBED_ENDPOINT = "https://noembed.com/embed"


@lru_cache(maxsize=1)
def load_dotenv() -> None:
    from dotenv import find_dotenv, load_dotenv as _load

    env_path = find_dotenv(usecwd=True)
    if env_path:
        _load(env_path, override=False)


def _env(name: str) -> str:
    load_dotenv()
    return (os.environ.get(name) or "").strip()


def _read_positive_int_env(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return min(value, _MAX_JOBS)


def _read_positive_float_env(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        return max(1.0, float(raw))
    except ValueError:
        return default


def get_download_jobs() -> int:
    return _read_positive_int_env("MATERIALIZE_DOWNLOAD_JOBS", _DEFAULT_DOWNLOAD_JOBS)


def get_analyze_jobs() -> int:
    return _read_positive_int_env("MATERIALIZE_ANALYZE_JOBS", _DEFAULT_ANALYZE_JOBS)


def get_image_jobs() -> int:
    return _read_positive_int_env("MATERIALIZE_IMAGE_JOBS", _DEFAULT_IMAGE_JOBS)


def get_http_timeout() -> float:
    return _read_positive_float_env("MATERIALIZE_HTTP_TIMEOUT", 60.0)


def get_api_timeout() -> float:
    return _read_positive_float_env("DISCORD_API_TIMEOUT", 30.0)


def get_api_base() -> str:
    return (_env("DISCORD_API_BASE") or DEFAULT_API_BASE).rstrip("/")


def get_bot_token() -> str | None:
    return _env("DISCORD_BOT_TOKEN") or None


def get_system_author_id() -> str | None:
    return _env("MATERIALIZE_SYSTEM_AUTHOR_ID") or None


def get_oembed_endpoint() -> str:
    return _env("MATERIALIZE_OEMBED_ENDPOINT") or DEFAULT_OEMBED_ENDPOINT


def get_version_table_path() -> str | None:
    return _env("MATERIALIZE_VERSION_TABLE") or None
