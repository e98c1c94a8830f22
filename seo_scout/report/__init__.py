"""seo_scout.report: JSON and HTML renderers for finished audits."""

from seo_scout.report.html_report import render_html
from seo_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
