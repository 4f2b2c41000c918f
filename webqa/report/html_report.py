# File: webqa/report/html_report.py
"""webqa.report.html_report: HTML report rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from webqa.aggregator import AnalysisReport

TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: AnalysisReport,
    template_dir: Union[Path, str],
    output_path: Union[Path, str],
) -> Path:
    """Render the HTML report from the template and save it.

    Args:
        report: AnalysisReport of one page.
        template_dir: directory holding ``report.html.j2``.
        output_path: path of the resulting HTML file.

    Returns:
        Path of the saved HTML file.

    Example:
    ```python
    from webqa.report import DEFAULT_TEMPLATE_DIR, render_html
    html_path = render_html(report, DEFAULT_TEMPLATE_DIR, 'reports/report.html')
    ```
    """
    template_dir = Path(template_dir)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "url": report.url,
        "timestamp": report.timestamp,
        "scores": report.scores,
        "feedback": report.feedback,
        "resources": report.resources,
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
