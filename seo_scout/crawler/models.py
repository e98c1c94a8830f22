# seo_scout/crawler/models.py
"""
Data models for the SEO Scout crawler.

Every model serialises to the wire format read by the presentation layer
(camelCase keys, issue severity under ``type``).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, Optional, Tuple


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Issue:
    """One failed check and the points it costs."""

    severity: Severity
    message: str
    points: int = 0

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValueError(f"points must be >= 0, got {self.points}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.severity.value, "message": self.message, "points": self.points}


@dataclass(frozen=True, slots=True)
class PageMetadata:
    """Facts extracted from a page whether or not its checks pass."""

    title: Optional[str] = None
    description: Optional[str] = None
    canonical: Optional[str] = None
    robots: Optional[str] = None
    h1_count: int = 0
    images_total: int = 0
    images_missing_alt: int = 0
    internal_links: int = 0
    external_links: int = 0
    html_size_kb: float = 0.0
    ttfb_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "canonical": self.canonical,
            "h1Count": self.h1_count,
            "imagesTotal": self.images_total,
            "imagesMissingAlt": self.images_missing_alt,
            "internalLinks": self.internal_links,
            "externalLinks": self.external_links,
            "htmlSizeKb": self.html_size_kb,
            "ttfbMs": self.ttfb_ms,
        }


@dataclass(frozen=True, slots=True)
class PageAudit:
    """Audit of a single visited URL."""

    url: str
    status: int
    score: int
    issues: Tuple[Issue, ...] = ()
    metadata: PageMetadata = field(default_factory=PageMetadata)
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise ValueError(f"score must be within [0, 100], got {self.score}")

    @classmethod
    def failed(cls, url: str, reason: str, duration_ms: int = 0) -> PageAudit:
        """Record for a page that could not be fetched: score 0, one error, zeroed data."""
        return cls(
            url=url,
            status=0,
            score=0,
            issues=(Issue(Severity.ERROR, f"Failed to fetch page: {reason}", 100),),
            metadata=PageMetadata(),
            duration_ms=duration_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "data": self.metadata.to_dict(),
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True, slots=True)
class CrawlTask:
    """Frontier entry: a URL waiting to be fetched at a given link depth."""

    url: str
    depth: int = 0


@dataclass(slots=True)
class FetchResult:
    """Raw outcome of one HTTP GET."""

    url: str
    status: int
    body: bytes
    ttfb_ms: int
    encoding: Optional[str] = None

    def text(self) -> str:
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # unknown charset label in Content-Type
            return self.body.decode("utf-8", errors="replace")
