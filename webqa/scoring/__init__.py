"""webqa.scoring: weighted rule checklists for HTML, CSS and JavaScript."""

from webqa.scoring.base import Evaluation, overall_score
from webqa.scoring.css_rules import evaluate_css
from webqa.scoring.html_rules import evaluate_html
from webqa.scoring.js_rules import evaluate_js

__all__ = ["Evaluation", "evaluate_css", "evaluate_html", "evaluate_js", "overall_score"]
