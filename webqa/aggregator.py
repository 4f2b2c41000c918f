# File: webqa/aggregator.py
"""webqa.aggregator: per-type accumulation of discovered CSS/JS content."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set, TypedDict

from webqa.config import RESOURCE_KINDS, AnalyzerConfig
from webqa.logger import get_logger

logger = get_logger("aggregator")


class BucketInfo(TypedDict):
    """Serialized bucket, the shape returned to callers of the pipeline."""

    content: str
    fileCount: int
    byteCount: int


@dataclass(slots=True)
class ResourceBucket:
    """Concatenated content of one resource type plus its counters."""

    content: str = ""
    file_count: int = 0
    byte_count: int = 0

    def as_dict(self) -> BucketInfo:
        return {"content": self.content, "fileCount": self.file_count, "byteCount": self.byte_count}


def is_sufficient(bucket: ResourceBucket, config: AnalyzerConfig) -> bool:
    """Enough files *or* enough bytes; either ends discovery for that type."""
    return bucket.file_count >= config.min_file_count or bucket.byte_count >= config.min_byte_count


class Aggregator:
    """Owns both buckets of one analysis run.

    Buckets only grow. A URL is recorded at most once, so a resource reached
    through several discovery phases is counted a single time.
    """

    def __init__(self) -> None:
        self.buckets: Dict[str, ResourceBucket] = {kind: ResourceBucket() for kind in RESOURCE_KINDS}
        self.recorded: Set[str] = set()

    def __getitem__(self, kind: str) -> ResourceBucket:
        return self.buckets[kind]

    def record(self, kind: str, content: str, url: str) -> bool:
        """Append a fetched file. Returns False for a URL that was already recorded."""
        if url in self.recorded:
            return False
        self.recorded.add(url)
        bucket = self.buckets[kind]
        bucket.content += content + "\n"
        bucket.file_count += 1
        bucket.byte_count += len(content)
        logger.debug("Recorded %s %s (%d bytes)", kind, url, len(content))
        return True

    def add_inline(self, kind: str, content: str) -> None:
        """Append content that lives in the page itself; no file is counted."""
        if not content:
            return
        bucket = self.buckets[kind]
        bucket.content += content + "\n"
        bucket.byte_count += len(content)


@dataclass(slots=True)
class DiscoveryResult:
    """Outcome of one discovery run."""

    css: ResourceBucket
    js: ResourceBucket
    attempted: List[str] = field(default_factory=list)
    phases: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_aggregator(
        cls, aggregator: Aggregator, attempted: List[str], phases: Dict[str, List[str]]
    ) -> DiscoveryResult:
        return cls(css=aggregator["css"], js=aggregator["js"], attempted=attempted, phases=phases)

    def to_dict(self) -> Dict[str, BucketInfo]:
        return {"css": self.css.as_dict(), "js": self.js.as_dict()}

    def summary(self) -> Dict[str, Any]:
        """Counters only, for logs and the ``discover`` command."""
        return {
            kind: {"fileCount": info["fileCount"], "byteCount": info["byteCount"], "phases": self.phases.get(kind, [])}
            for kind, info in self.to_dict().items()
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.summary(), ensure_ascii=False, indent=2 if pretty else None)


@dataclass(slots=True)
class AnalysisReport:
    """Scores, feedback and resource counters of one analysed page."""

    url: str
    timestamp: str
    scores: Dict[str, int]
    feedback: Dict[str, List[str]]
    resources: Dict[str, int]

    @classmethod
    def build(
        cls,
        url: str,
        timestamp: str,
        evaluations: Dict[str, Any],
        overall: int,
        discovery: DiscoveryResult,
    ) -> AnalysisReport:
        """*evaluations* maps ``html``/``css``/``javascript`` to objects with ``score`` and ``feedback``."""
        scores = {"overall": overall}
        scores.update({name: ev.score for name, ev in evaluations.items()})
        return cls(
            url=url,
            timestamp=timestamp,
            scores=scores,
            feedback={name: list(ev.feedback) for name, ev in evaluations.items()},
            resources={
                "cssFiles": discovery.css.file_count,
                "jsFiles": discovery.js.file_count,
                "cssBytes": discovery.css.byte_count,
                "jsBytes": discovery.js.byte_count,
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "scores": dict(self.scores),
            "feedback": {k: list(v) for k, v in self.feedback.items()},
            "resources": dict(self.resources),
        }

    def json(self, *, pretty: bool = False) -> str:
        """JSON form of the report, the body returned by ``POST /analyze``."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


__all__ = ["AnalysisReport", "Aggregator", "BucketInfo", "DiscoveryResult", "ResourceBucket", "is_sufficient"]
