# File: seo_scout/aggregator.py
"""seo_scout.aggregator: reduce per-page audits into one site report."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, TypedDict

from seo_scout.crawler.models import Issue, PageAudit, Severity

TOP_ISSUES_LIMIT = 5


class SummaryInfo(TypedDict):
    """Issue counts by severity."""

    errors: int
    warnings: int
    info: int


def health_tier(score: int) -> str:
    """Qualitative bucket shown next to the overall score."""
    if score < 60:
        return "Critical"
    if score < 80:
        return "Needs Optimization"
    return "High Potential"


@dataclass(frozen=True, slots=True)
class AggregateReport:
    """Site-level figures derived from a collection of PageAudit."""

    overall_score: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    pages_audited: int = 0
    total_duration_ms: int = 0
    health_tier: str = "Critical"
    top_issues: tuple[Issue, ...] = field(default_factory=tuple)

    def summary(self) -> SummaryInfo:
        return {"errors": self.error_count, "warnings": self.warning_count, "info": self.info_count}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.overall_score,
            "healthLevel": self.health_tier,
            "pagesAudited": self.pages_audited,
            "durationMs": self.total_duration_ms,
            "summary": self.summary(),
            "preview": {"topIssues": [issue.to_dict() for issue in self.top_issues]},
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _count_by_severity(pages: Sequence[PageAudit]) -> Dict[Severity, int]:
    counts = {severity: 0 for severity in Severity}
    for page in pages:
        for issue in page.issues:
            counts[issue.severity] += 1
    return counts


def _top_issues(pages: Sequence[PageAudit], limit: int = TOP_ISSUES_LIMIT) -> List[Issue]:
    errors = [issue for page in pages for issue in page.issues if issue.severity is Severity.ERROR]
    return errors[:limit]


def aggregate(pages: Sequence[PageAudit]) -> AggregateReport:
    """Build the AggregateReport for *pages*; an empty sequence scores 0."""
    total = sum(page.score for page in pages)
    overall = _round_half_up(total / max(len(pages), 1))
    counts = _count_by_severity(pages)
    return AggregateReport(
        overall_score=overall,
        error_count=counts[Severity.ERROR],
        warning_count=counts[Severity.WARNING],
        info_count=counts[Severity.INFO],
        pages_audited=len(pages),
        total_duration_ms=sum(page.duration_ms for page in pages),
        health_tier=health_tier(overall),
        top_issues=tuple(_top_issues(pages)),
    )


__all__ = ["AggregateReport", "SummaryInfo", "aggregate", "health_tier"]
