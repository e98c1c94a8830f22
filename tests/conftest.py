# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Callable

import pytest
from aiohttp import web

from seo_scout.config import CrawlerOptions
from seo_scout.crawler.models import Issue, PageAudit, PageMetadata, Severity
from seo_scout.security.resolver import SafeResolver

GOOD_TITLE = "Handmade Oak Furniture for Modern Homes"  # 39 chars
GOOD_DESCRIPTION = (
    "Browse handmade oak tables, chairs and shelves built to last for generations, "
    "with free delivery and a ten year warranty on every piece."
)  # 136 chars


def page_html(
    *,
    title: str | None = GOOD_TITLE,
    description: str | None = GOOD_DESCRIPTION,
    canonical: str | None = "/",
    h1: int = 1,
    body: str = "",
    robots: str | None = None,
) -> str:
    """Build an HTML document that passes every check unless told otherwise."""
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if canonical is not None:
        head.append(f'<link rel="canonical" href="{canonical}">')
    if robots is not None:
        head.append(f'<meta name="robots" content="{robots}">')
    headings = "".join(f"<h1>Heading {i}</h1>" for i in range(h1))
    return f"<html><head>{''.join(head)}</head><body>{headings}{body}</body></html>"


def links_html(*hrefs: str) -> str:
    return "".join(f'<a href="{href}">{href}</a>' for href in hrefs)


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on 127.0.0.1:*port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def html_response(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


@pytest.fixture()
def loopback_resolver(unused_tcp_port: int) -> SafeResolver:
    """Resolver that lets the crawler reach the local test server."""
    return SafeResolver(
        ports={"http": unused_tcp_port},
        blocked_hosts=(),
        blocked_networks=(),
    )


@pytest.fixture()
def make_options() -> Callable[..., CrawlerOptions]:
    def _make(**overrides) -> CrawlerOptions:
        values = dict(
            max_depth=2,
            max_pages=50,
            concurrency=3,
            per_page_timeout_ms=2000,
            max_html_bytes=1024 * 1024,
            crawl_timeout_s=10.0,
        )
        values.update(overrides)
        return CrawlerOptions(**values)

    return _make


@pytest.fixture()
def sample_pages() -> list[PageAudit]:
    return [
        PageAudit(
            url="https://example.com/",
            status=200,
            score=90,
            issues=(Issue(Severity.ERROR, "Missing Title tag", 10),),
            metadata=PageMetadata(h1_count=1, internal_links=2),
            duration_ms=120,
        ),
        PageAudit(
            url="https://example.com/about",
            status=200,
            score=93,
            issues=(
                Issue(Severity.WARNING, "Missing Canonical tag", 5),
                Issue(Severity.WARNING, "Title length (12) is not optimal (30-70)", 2),
                Issue(Severity.INFO, "Page has noindex directive", 0),
            ),
            metadata=PageMetadata(title="About us", h1_count=1),
            duration_ms=80,
        ),
    ]
