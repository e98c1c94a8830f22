# seo_scout/report/json_report.py

"""
JSON report for SEO Scout.

Serialises an AuditResult in the wire format used by the presentation layer.
"""
import json
from pathlib import Path

from seo_scout.engine import AuditResult


def render_json(result: AuditResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Write *result* as JSON to *output_path*.

    :param result: finished audit
    :param output_path: path of the JSON file
    :param pretty: indent with two spaces
    :return: Path of the saved file

    Example:
    ```python
    from seo_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/report.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
