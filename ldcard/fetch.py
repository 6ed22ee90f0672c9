from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

import httpx

from .config import Settings


def is_http_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def fetch_page(url: str, settings: Settings) -> str:
    """Download an HTML page; HTTP errors propagate to the caller."""

    with httpx.Client(timeout=settings.http_timeout, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.text


def load_page(source: str, settings: Settings) -> str:
    """Read page HTML from a URL or a local file path."""

    if is_http_url(source):
        return fetch_page(source, settings)
    return Path(source).read_text(encoding="utf-8")
