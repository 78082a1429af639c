"""URL validation helpers."""

from __future__ import annotations

from urllib.parse import urlparse


def is_valid_url(value: str | None) -> bool:
    """Return True for absolute http(s) URLs with a host."""

    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)
