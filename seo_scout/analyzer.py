"""seo_scout.analyzer: heuristic on-page SEO checks.

:func:`analyze` is pure: it takes the HTML that was already fetched plus the
response facts (status, time to first byte, size) and returns the score, the
issues in rule order, the extracted metadata and the internal links to follow.

Point costs
-----------
=================  ===========================  ========  ================
Check              Condition                    Severity  Points
=================  ===========================  ========  ================
HTTP status        status >= 400                error     20
Title              missing                      error     10
Title              length outside [30, 70]      warning   2
Meta description   missing                      error     10
Meta description   length outside [120, 160]    warning   2
Canonical          missing                      warning   5
Robots             contains "noindex"           info      0
H1                 none                         error     10
H1                 more than one                warning   5
Images             missing alt                  warning   min(10, 2 * n)
TTFB               > 1000 ms                    warning   5
HTML size          > 500 KB                     warning   2
=================  ===========================  ========  ================
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from bs4 import BeautifulSoup

from seo_scout.crawler.link_extractor import classify_links, iter_hrefs
from seo_scout.crawler.models import Issue, PageMetadata, Severity

TITLE_RANGE: Tuple[int, int] = (30, 70)
DESCRIPTION_RANGE: Tuple[int, int] = (120, 160)
SLOW_TTFB_MS = 1000
LARGE_HTML_KB = 500

_DESCRIPTION_RE = re.compile(r"^description$", re.I)
_ROBOTS_RE = re.compile(r"^robots$", re.I)


@dataclass(slots=True)
class Analysis:
    score: int
    issues: List[Issue] = field(default_factory=list)
    metadata: PageMetadata = field(default_factory=PageMetadata)
    internal_links: List[str] = field(default_factory=list)


def clamp_score(points: int) -> int:
    return max(0, min(100, 100 - points))


def _meta_content(soup: BeautifulSoup, name: re.Pattern[str]) -> Optional[str]:
    tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = tag.get("content")
    if not isinstance(content, str):
        return None
    return content.strip()


def _canonical(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("link", rel="canonical")
    if tag is None:
        return None
    href = tag.get("href")
    return href if isinstance(href, str) else None


def analyze(
    html: Union[str, bytes],
    page_url: str,
    start_hostname: str,
    *,
    status: int = 200,
    ttfb_ms: int = 0,
    html_bytes: Optional[int] = None,
) -> Analysis:
    """Run every check against *html* and score the page."""
    if html_bytes is None:
        html_bytes = len(html.encode("utf-8")) if isinstance(html, str) else len(html)
    html_size_kb = html_bytes / 1024

    soup = BeautifulSoup(html, "html.parser")
    issues: List[Issue] = []

    if status >= 400:
        issues.append(Issue(Severity.ERROR, f"Page returned HTTP {status}", 20))

    # Meta & title
    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""
    description = _meta_content(soup, _DESCRIPTION_RE)
    canonical = _canonical(soup)
    robots = (_meta_content(soup, _ROBOTS_RE) or "").lower()

    if not title:
        issues.append(Issue(Severity.ERROR, "Missing Title tag", 10))
    elif not TITLE_RANGE[0] <= len(title) <= TITLE_RANGE[1]:
        issues.append(
            Issue(Severity.WARNING, f"Title length ({len(title)}) is not optimal (30-70)", 2)
        )

    if not description:
        issues.append(Issue(Severity.ERROR, "Missing Meta Description", 10))
    elif not DESCRIPTION_RANGE[0] <= len(description) <= DESCRIPTION_RANGE[1]:
        issues.append(
            Issue(
                Severity.WARNING,
                f"Description length ({len(description)}) is not optimal (120-160)",
                2,
            )
        )

    if not canonical:
        issues.append(Issue(Severity.WARNING, "Missing Canonical tag", 5))

    if "noindex" in robots:
        issues.append(Issue(Severity.INFO, "Page has noindex directive", 0))

    # Headings
    h1_count = len(soup.find_all("h1"))
    if h1_count == 0:
        issues.append(Issue(Severity.ERROR, "Missing H1 tag", 10))
    elif h1_count > 1:
        issues.append(Issue(Severity.WARNING, f"Multiple H1 tags found ({h1_count})", 5))

    # Images
    images = soup.find_all("img")
    missing_alt = sum(1 for img in images if not img.get("alt"))
    if missing_alt > 0:
        issues.append(
            Issue(
                Severity.WARNING,
                f"{missing_alt} images missing alt attributes",
                min(10, missing_alt * 2),
            )
        )

    # Performance
    if ttfb_ms > SLOW_TTFB_MS:
        issues.append(Issue(Severity.WARNING, f"Slow TTFB: {ttfb_ms / 1000:.2f}s", 5))
    if html_size_kb > LARGE_HTML_KB:
        issues.append(Issue(Severity.WARNING, f"Large HTML size: {html_size_kb:.1f}KB", 2))

    # Links
    internal, internal_count, external_count = classify_links(
        iter_hrefs(soup), page_url, start_hostname
    )

    metadata = PageMetadata(
        title=title or None,
        description=description or None,
        canonical=canonical or None,
        robots=robots or None,
        h1_count=h1_count,
        images_total=len(images),
        images_missing_alt=missing_alt,
        internal_links=internal_count,
        external_links=external_count,
        html_size_kb=round(html_size_kb, 2),
        ttfb_ms=ttfb_ms,
    )
    return Analysis(
        score=clamp_score(sum(issue.points for issue in issues)),
        issues=issues,
        metadata=metadata,
        internal_links=internal,
    )


__all__ = ["Analysis", "analyze", "clamp_score"]
