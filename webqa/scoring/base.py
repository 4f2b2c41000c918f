# File: webqa/scoring/base.py
"""webqa.scoring.base: the result type shared by all evaluators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

MAX_SCORE = 100


@dataclass(slots=True)
class Evaluation:
    """Score (0–100) and human-readable feedback for one content type."""

    score: int = MAX_SCORE
    feedback: List[str] = field(default_factory=list)

    def penalize(self, points: int, message: str) -> None:
        self.score -= points
        self.feedback.append(message)

    def clamp(self) -> Evaluation:
        self.score = max(0, min(MAX_SCORE, self.score))
        return self


def overall_score(*scores: int) -> int:
    """Mean of *scores*, halves rounded up."""
    if not scores:
        return 0
    return math.floor(sum(scores) / len(scores) + 0.5)
