# File: webqa/exceptions.py
"""webqa.exceptions: errors that end an analysis.

Per-resource problems never raise; they come back as ``FetchResult(ok=False)``.
"""

from __future__ import annotations

from typing import Optional


class WebQAError(Exception):
    """Base class for all WebQA errors."""


class InvalidURLError(WebQAError):
    """The URL to analyse is not an absolute http(s) URL."""


class PageUnreachableError(WebQAError):
    """The reachability check answered with a client error."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"The provided URL is not reachable (status: {status})")
        self.url = url
        self.status = status


class PageFetchError(WebQAError):
    """The page itself could not be downloaded, so there is nothing to analyse."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"Could not fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


__all__ = ["WebQAError", "InvalidURLError", "PageUnreachableError", "PageFetchError"]
