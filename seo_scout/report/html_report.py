"""seo_scout.report.html_report: HTML report rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, PackageLoader, select_autoescape

from seo_scout.engine import AuditResult

TEMPLATE_NAME = "report.html.j2"


def _environment(template_dir: Optional[Union[Path, str]]) -> Environment:
    loader = (
        FileSystemLoader(str(template_dir))
        if template_dir is not None
        else PackageLoader("seo_scout.report", "templates")
    )
    return Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))


def render_html(
    result: AuditResult,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Render the HTML report and save it at *output_path*.

    Args:
        result: finished audit.
        output_path: path of the resulting HTML file.
        template_dir: directory holding ``report.html.j2``; the bundled
            template is used when omitted.

    Returns:
        Path of the saved HTML file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    template = _environment(template_dir).get_template(TEMPLATE_NAME)
    data = result.to_dict()
    context: dict[str, Any] = {
        "site": data["site"],
        "score": data["score"],
        "health_level": data["healthLevel"],
        "summary": data["summary"],
        "pages_audited": data["pagesAudited"],
        "duration_ms": data["durationMs"],
        "top_issues": data["preview"]["topIssues"],
        "pages": data["report"],
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
