# seo_scout/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for SEO Scout.
"""
from __future__ import annotations

from typing import Iterable, List, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """
    Normalize URL for the visited set: lowercase scheme and host, drop the
    default port and the fragment, empty path becomes "/". Query is kept.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port is None or _DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo += f":{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def iter_hrefs(soup: BeautifulSoup) -> Iterable[str]:
    """Yield the raw href of every <a> tag that has a non-empty one."""
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if isinstance(href_val, str) and href_val.strip():
            yield href_val.strip()


def classify_links(
    hrefs: Iterable[str], page_url: str, start_hostname: str
) -> Tuple[List[str], int, int]:
    """
    Resolve *hrefs* against *page_url* and split them by host.

    A link is internal when its hostname equals *start_hostname*. Returns
    ``(urls, internal_count, external_count)`` where *urls* holds the normalized
    http(s) internal URLs, duplicates removed, document order kept. Hrefs that
    cannot be resolved are ignored.
    """
    start_hostname = start_hostname.lower()
    internal: List[str] = []
    seen: set[str] = set()
    internal_count = external_count = 0
    for raw in hrefs:
        try:
            absolute = urljoin(page_url, raw)
            parts = urlsplit(absolute)
            hostname = parts.hostname
            normalized = normalize_url(absolute) if hostname == start_hostname else ""
        except ValueError:
            continue
        if hostname != start_hostname:
            external_count += 1
            continue
        internal_count += 1
        if parts.scheme in _DEFAULT_PORTS and normalized not in seen:
            seen.add(normalized)
            internal.append(normalized)
    return internal, internal_count, external_count
