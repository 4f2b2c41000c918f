# File: webqa/report/__init__.py
"""webqa.report: JSON and HTML reports, used by the CLI and tests."""

from __future__ import annotations

from pathlib import Path

from webqa.report.html_report import render_html
from webqa.report.json_report import render_json

#: templates shipped with the package
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

__all__ = ["DEFAULT_TEMPLATE_DIR", "render_html", "render_json"]
