# File: tests/test_aggregator.py
import json

import pytest

from seo_scout.aggregator import aggregate, health_tier
from seo_scout.crawler.models import Issue, PageAudit, Severity


def _page(score: int, *issues: Issue, duration_ms: int = 10) -> PageAudit:
    return PageAudit(url=f"https://example.com/{score}", status=200, score=score, issues=issues,
                     duration_ms=duration_ms)


def test_counts_and_average(sample_pages):
    report = aggregate(sample_pages)
    assert report.overall_score == 92  # (90 + 93) / 2 = 91.5
    assert report.summary() == {"errors": 1, "warnings": 2, "info": 1}
    assert report.pages_audited == 2
    assert report.total_duration_ms == 200
    assert report.health_tier == "High Potential"


def test_empty_crawl():
    report = aggregate([])
    assert report.overall_score == 0
    assert report.pages_audited == 0
    assert report.total_duration_ms == 0
    assert report.summary() == {"errors": 0, "warnings": 0, "info": 0}
    assert report.health_tier == "Critical"
    assert report.top_issues == ()


@pytest.mark.parametrize(
    "scores,expected",
    [([80, 81], 81), ([0, 1], 1), ([59, 60, 60], 60), ([100], 100), ([0, 0, 1], 0)],
)
def test_half_up_rounding(scores, expected):
    assert aggregate([_page(s) for s in scores]).overall_score == expected


@pytest.mark.parametrize(
    "score,tier",
    [(0, "Critical"), (59, "Critical"), (60, "Needs Optimization"), (79, "Needs Optimization"),
     (80, "High Potential"), (100, "High Potential")],
)
def test_health_tier_boundaries(score, tier):
    assert health_tier(score) == tier
    assert aggregate([_page(score)]).health_tier == tier


def test_top_issues_are_first_five_errors():
    errors = [Issue(Severity.ERROR, f"error {i}", 1) for i in range(4)]
    pages = [
        _page(90, Issue(Severity.WARNING, "warn", 2), errors[0], errors[1]),
        _page(90, errors[2], Issue(Severity.INFO, "info"), errors[3]),
        PageAudit.failed("https://example.com/broken", "timeout"),
    ]
    report = aggregate(pages)
    assert [i.message for i in report.top_issues] == [
        "error 0",
        "error 1",
        "error 2",
        "error 3",
        "Failed to fetch page: timeout",
    ]

    report = aggregate(pages + [_page(50, Issue(Severity.ERROR, "sixth", 10))])
    assert len(report.top_issues) == 5


def test_failed_pages_pull_the_average_down():
    report = aggregate([_page(100), PageAudit.failed("https://example.com/x", "boom")])
    assert report.overall_score == 50
    assert report.error_count == 1
    assert report.health_tier == "Critical"


def test_wire_format(sample_pages):
    data = json.loads(aggregate(sample_pages).json())
    assert data == {
        "score": 92,
        "healthLevel": "High Potential",
        "pagesAudited": 2,
        "durationMs": 200,
        "summary": {"errors": 1, "warnings": 2, "info": 1},
        "preview": {"topIssues": [{"type": "error", "message": "Missing Title tag", "points": 10}]},
    }
