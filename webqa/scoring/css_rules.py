# File: webqa/scoring/css_rules.py
"""webqa.scoring.css_rules: lint-based CSS scoring.

cssutils is the linter: every warning or error it logs while parsing becomes
one lint message. Property validation is off, so modern properties and
functions (``var()``, grid, ...) are not reported.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List

import cssutils

from webqa.logger import get_logger
from webqa.scoring.base import Evaluation

logger = get_logger("scoring.css")

_lint_log = get_logger("csslint")
_lint_log.propagate = False
_lint_log.setLevel(logging.WARNING)
cssutils.log.setLog(_lint_log)

_MAX_LENGTH = 5000

# cssutils logs through one global handler; one lint at a time
_lint_lock = threading.Lock()


@dataclass(frozen=True, slots=True)
class LintMessage:
    severity: int  # 1 warning, 2 error
    message: str

    @property
    def label(self) -> str:
        return "ERROR" if self.severity == 2 else "WARNING"


class _Collector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.messages: List[LintMessage] = []

    def emit(self, record: logging.LogRecord) -> None:
        severity = 2 if record.levelno >= logging.ERROR else 1
        self.messages.append(LintMessage(severity, record.getMessage()))


def lint_css(css: str) -> List[LintMessage]:
    """Parse *css* with cssutils and return what it complained about."""
    collector = _Collector()
    with _lint_lock:
        _lint_log.addHandler(collector)
        try:
            parser = cssutils.CSSParser(raiseExceptions=False, validate=False)
            parser.parseString(css)
        finally:
            _lint_log.removeHandler(collector)
    return collector.messages


def evaluate_css(css: str, max_feedback: int = 25) -> Evaluation:
    """Score stylesheet content: -3 per lint warning, -6 per error, -10 for
    ``!important``, -10 beyond 5000 characters."""
    result = Evaluation()
    try:
        messages = lint_css(css)
    except Exception as exc:
        logger.error("Error in CSS evaluation: %s", exc)
        return Evaluation(score=50, feedback=[f"Error evaluating CSS: {exc}"])

    for index, msg in enumerate(messages):
        result.score -= msg.severity * 3
        if index < max_feedback:
            result.feedback.append(f"{msg.label}: {msg.message}")
    if len(messages) > max_feedback:
        result.feedback.append(f"... and {len(messages) - max_feedback} more CSS lint messages.")

    if "!important" in css:
        result.penalize(10, "Avoid using '!important' in CSS.")
    if len(css) > _MAX_LENGTH:
        result.penalize(10, "CSS file is large; consider modularizing styles.")

    return result.clamp()
