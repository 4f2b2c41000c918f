# File: webqa/scoring/js_rules.py
"""webqa.scoring.js_rules: syntax check plus a few production-hygiene rules."""

from __future__ import annotations

import re
from typing import Optional, Tuple

import pyjsparser

from webqa.logger import get_logger
from webqa.scoring.base import Evaluation

logger = get_logger("scoring.js")

_MAX_LINES = 400

#: (pattern, penalty, feedback)
_RULES: Tuple[Tuple[re.Pattern[str], int, str], ...] = (
    (re.compile(r"\bconsole\."), 5, "Avoid using console logs in production code."),
    (re.compile(r"\beval\s*\("), 5, "Avoid eval(); it is slow and unsafe."),
    (re.compile(r"\bdocument\.write\s*\("), 5, "Avoid document.write(); it blocks rendering."),
)


def syntax_error(js: str) -> Optional[str]:
    """Message of the first syntax error pyjsparser finds, ``None`` for valid ES5."""
    try:
        pyjsparser.parse(js)
    except RecursionError:
        logger.debug("JS nesting too deep for the parser, syntax check skipped")
        return None
    except pyjsparser.JsSyntaxError as exc:
        return str(exc) or type(exc).__name__
    return None


def evaluate_js(js: str, max_parse_bytes: int = 200_000) -> Evaluation:
    """Score script content: -10 for a syntax error, -10 beyond 400 lines,
    -5 for each hygiene rule that matches."""
    result = Evaluation()
    try:
        if len(js) > max_parse_bytes:
            result.feedback.append(
                f"Info: {len(js)} characters of JavaScript, syntax check skipped above {max_parse_bytes}."
            )
        else:
            error = syntax_error(js)
            if error:
                result.penalize(10, f"Error: {error}")

        if len(js.split("\n")) > _MAX_LINES:
            result.penalize(10, "JavaScript file is large; consider modularizing.")

        for pattern, points, message in _RULES:
            if pattern.search(js):
                result.penalize(points, message)
    except Exception as exc:
        logger.error("Error in JavaScript evaluation: %s", exc)
        return Evaluation(score=50, feedback=[f"Error evaluating JavaScript: {exc}"])

    return result.clamp()
