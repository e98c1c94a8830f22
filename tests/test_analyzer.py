# File: tests/test_analyzer.py
import pytest

from seo_scout.analyzer import analyze, clamp_score
from seo_scout.crawler.models import Severity

from .conftest import GOOD_DESCRIPTION, links_html, page_html

URL = "https://shop.example/catalog/"
HOST = "shop.example"


def _messages(result):
    return [issue.message for issue in result.issues]


def test_clean_page_scores_100():
    result = analyze(page_html(body='<img src="a.png" alt="Oak table">'), URL, HOST)
    assert result.issues == []
    assert result.score == 100
    assert result.metadata.title == "Handmade Oak Furniture for Modern Homes"
    assert result.metadata.description == GOOD_DESCRIPTION
    assert result.metadata.canonical == "/"
    assert result.metadata.h1_count == 1
    assert result.metadata.images_total == 1
    assert result.metadata.images_missing_alt == 0


def test_missing_title_with_one_h1():
    result = analyze(page_html(title=None), URL, HOST)
    assert [(i.severity, i.message, i.points) for i in result.issues] == [
        (Severity.ERROR, "Missing Title tag", 10)
    ]
    assert result.score == 90
    assert result.metadata.title is None


def test_blank_title_counts_as_missing():
    result = analyze(page_html(title="   "), URL, HOST)
    assert _messages(result) == ["Missing Title tag"]


@pytest.mark.parametrize(
    "kwargs,expected",
    [
        ({"title": "Too short"}, ("Title length (9) is not optimal (30-70)", Severity.WARNING, 2)),
        ({"title": "x" * 71}, ("Title length (71) is not optimal (30-70)", Severity.WARNING, 2)),
        ({"description": None}, ("Missing Meta Description", Severity.ERROR, 10)),
        ({"description": "Short."}, ("Description length (6) is not optimal (120-160)", Severity.WARNING, 2)),
        ({"description": "d" * 161}, ("Description length (161) is not optimal (120-160)", Severity.WARNING, 2)),
        ({"canonical": None}, ("Missing Canonical tag", Severity.WARNING, 5)),
        ({"robots": "NOINDEX, follow"}, ("Page has noindex directive", Severity.INFO, 0)),
        ({"h1": 0}, ("Missing H1 tag", Severity.ERROR, 10)),
        ({"h1": 3}, ("Multiple H1 tags found (3)", Severity.WARNING, 5)),
    ],
)
def test_single_rule(kwargs, expected):
    result = analyze(page_html(**kwargs), URL, HOST)
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert (issue.message, issue.severity, issue.points) == expected
    assert result.score == 100 - expected[2]


def test_length_bounds_are_inclusive():
    result = analyze(page_html(title="t" * 30, description="d" * 160), URL, HOST)
    assert result.issues == []
    result = analyze(page_html(title="t" * 70, description="d" * 120), URL, HOST)
    assert result.issues == []


def test_http_error_status_is_first_issue():
    result = analyze(page_html(), URL, HOST, status=500)
    assert result.issues[0].message == "Page returned HTTP 500"
    assert result.issues[0].points == 20
    assert result.score == 80


def test_status_below_400_is_not_penalised():
    assert analyze(page_html(), URL, HOST, status=399).score == 100


@pytest.mark.parametrize("missing,points", [(1, 2), (3, 6), (5, 10), (9, 10)])
def test_missing_alt_points_are_capped(missing, points):
    images = '<img src="x.png">' * missing + '<img src="y.png" alt="ok">'
    result = analyze(page_html(body=images), URL, HOST)
    assert _messages(result) == [f"{missing} images missing alt attributes"]
    assert result.issues[0].points == points
    assert result.metadata.images_total == missing + 1
    assert result.metadata.images_missing_alt == missing


def test_empty_alt_counts_as_missing():
    result = analyze(page_html(body='<img src="x.png" alt="">'), URL, HOST)
    assert result.metadata.images_missing_alt == 1


def test_slow_ttfb():
    result = analyze(page_html(), URL, HOST, ttfb_ms=1500)
    assert _messages(result) == ["Slow TTFB: 1.50s"]
    assert result.score == 95
    assert result.metadata.ttfb_ms == 1500
    assert analyze(page_html(), URL, HOST, ttfb_ms=1000).score == 100


def test_large_html():
    result = analyze(page_html(), URL, HOST, html_bytes=600 * 1024)
    assert _messages(result) == ["Large HTML size: 600.0KB"]
    assert result.issues[0].points == 2
    assert result.metadata.html_size_kb == 600.0


def test_rule_order_and_accumulated_score():
    html = "<html><body><h1>a</h1><h1>b</h1><img src='x'></body></html>"
    result = analyze(html, URL, HOST, status=404, ttfb_ms=2000, html_bytes=501 * 1024)
    assert _messages(result) == [
        "Page returned HTTP 404",
        "Missing Title tag",
        "Missing Meta Description",
        "Missing Canonical tag",
        "Multiple H1 tags found (2)",
        "1 images missing alt attributes",
        "Slow TTFB: 2.00s",
        "Large HTML size: 501.0KB",
    ]
    assert result.score == 100 - (20 + 10 + 10 + 5 + 5 + 2 + 5 + 2)


@pytest.mark.parametrize("points,score", [(0, 100), (35, 65), (100, 0), (250, 0)])
def test_clamp_score(points, score):
    assert clamp_score(points) == score


def test_links_are_classified_by_hostname():
    body = links_html(
        "/about",
        "contact#form",
        "https://shop.example/about",
        "https://SHOP.example/catalog/?page=2",
        "https://cdn.example/lib.js",
        "mailto:sales@shop.example",
        "http://other.example/",
    )
    result = analyze(page_html(body=body), URL, HOST)
    assert result.metadata.internal_links == 4
    assert result.metadata.external_links == 3
    assert result.internal_links == [
        "https://shop.example/about",
        "https://shop.example/catalog/contact",
        "https://shop.example/catalog/?page=2",
    ]


def test_anchor_without_href_is_ignored():
    result = analyze(page_html(body='<a name="top">top</a><a href="">empty</a>'), URL, HOST)
    assert result.metadata.internal_links == 0
    assert result.metadata.external_links == 0


def test_bytes_input_is_parsed():
    html = page_html().encode("utf-8")
    result = analyze(html, URL, HOST)
    assert result.score == 100
    assert result.metadata.html_size_kb == round(len(html) / 1024, 2)
