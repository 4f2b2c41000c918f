# webqa/discovery/fetcher.py
"""
Fetcher module: bounded-timeout retrieval of CSS/JS resources.

Every failure (network, timeout, status, empty body, wrong content type)
ends up as ``FetchResult(ok=False)``; nothing is raised past this module.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Literal, Optional, Set, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout

from webqa.config import AnalyzerConfig
from webqa.discovery.resolver import extension_kind, is_blocked
from webqa.logger import get_logger

logger = get_logger("fetcher")

ExpectedType = Literal["css", "js", "text"]

_ACCEPT = {
    "css": "text/css,*/*;q=0.1",
    "js": "application/javascript,text/javascript,*/*;q=0.1",
    "text": "text/plain,application/xml,text/xml,*/*;q=0.1",
}
_MEDIA_TYPES = {
    "css": ("text/css",),
    "js": ("javascript", "ecmascript", "json"),
}
_FOREIGN_TYPES = ("text/html", "application/xhtml", "image/", "video/", "audio/", "font/")
_HTML_SIGNATURES = ("<!doctype html", "<html")


@dataclass(slots=True)
class FetchResult:
    """Outcome of one fetch attempt."""

    url: str
    ok: bool
    content: str = ""
    reason: str = ""
    status: Optional[int] = None

    @classmethod
    def success(cls, url: str, content: str, status: int) -> FetchResult:
        return cls(url=url, ok=True, content=content, status=status)

    @classmethod
    def failure(cls, url: str, reason: str, status: Optional[int] = None) -> FetchResult:
        return cls(url=url, ok=False, reason=reason, status=status)


class ProcessedURLSet:
    """URLs already attempted in this run, successful or not."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self.attempts: List[str] = []

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def claim(self, url: str) -> bool:
        """Check-and-mark in one step (no await in between). False if already claimed."""
        if url in self._seen:
            return False
        self._seen.add(url)
        self.attempts.append(url)
        return True


def content_type_kind(content_type: str) -> Optional[str]:
    """``"css"``/``"js"`` from a Content-Type header value, else ``None``."""
    ctype = content_type.lower()
    for kind, markers in _MEDIA_TYPES.items():
        if any(marker in ctype for marker in markers):
            return kind
    return None


def is_mismatched(content_type: str, url: str, expected: ExpectedType) -> bool:
    """A body whose declared type clearly belongs to something else.

    ``text/plain`` and ``application/octet-stream`` are never a mismatch, and a
    matching URL extension overrides the header.
    """
    if expected == "text" or not content_type:
        return False
    if extension_kind(url) == expected:
        return False
    declared = content_type_kind(content_type)
    if declared == expected:
        return False
    if declared is not None:
        return True
    ctype = content_type.lower()
    return any(marker in ctype for marker in _FOREIGN_TYPES)


class ResourceFetcher:
    """Fetches resources for one analysis run, at most once per URL."""

    def __init__(self, session: ClientSession, config: AnalyzerConfig) -> None:
        self.session = session
        self.config = config
        self.processed = ProcessedURLSet()
        self.speculative_left = config.max_speculative_requests

    def _take_speculative(self, url: str) -> bool:
        if self.speculative_left <= 0:
            logger.debug("Speculative budget exhausted, skipping %s", url)
            return False
        self.speculative_left -= 1
        return True

    async def fetch(self, url: str, expected: ExpectedType, *, speculative: bool = False) -> FetchResult:
        """GET *url* and return its text when it plausibly is a *expected* resource."""
        if is_blocked(url, self.config):
            return FetchResult.failure(url, "blocked")
        if not self.processed.claim(url):
            return FetchResult.failure(url, "duplicate")
        if speculative and not self._take_speculative(url):
            return FetchResult.failure(url, "speculative budget exhausted")

        headers = {"User-Agent": self.config.user_agent, "Accept": _ACCEPT[expected]}
        timeout = ClientTimeout(total=self.config.resource_timeout)
        try:
            async with self.session.get(url, headers=headers, timeout=timeout) as resp:
                status = resp.status
                if status >= 400:
                    return self._failed(url, f"status {status}", status, speculative)
                ctype = resp.headers.get("Content-Type", "")
                if is_mismatched(ctype, url, expected):
                    return self._failed(url, f"content type {ctype!r}", status, speculative)
                text = await resp.text(errors="replace")
        except asyncio.TimeoutError:
            return self._failed(url, "timeout", None, speculative)
        except (ClientError, LookupError, ValueError) as exc:
            return self._failed(url, f"{type(exc).__name__}: {exc}", None, speculative)

        if not text or not text.strip():
            return self._failed(url, "empty body", status, speculative)
        if expected != "text" and text.lstrip()[:15].lower().startswith(_HTML_SIGNATURES):
            return self._failed(url, "HTML document instead of a resource", status, speculative)

        logger.info("Fetched %s from %s (%d bytes)", expected, url, len(text))
        return FetchResult.success(url, text, status)

    def _failed(self, url: str, reason: str, status: Optional[int], speculative: bool) -> FetchResult:
        log = logger.debug if speculative else logger.warning
        log("Error fetching %s: %s", url, reason)
        return FetchResult.failure(url, reason, status)

    async def probe(
        self, url: str, timeout: Optional[float] = None, *, speculative: bool = False
    ) -> Optional[Tuple[int, str]]:
        """HEAD *url*; ``(status, content_type)`` or ``None`` when the probe failed."""
        if is_blocked(url, self.config):
            return None
        if speculative and not self._take_speculative(url):
            return None
        client_timeout = ClientTimeout(total=timeout or self.config.probe_timeout)
        try:
            async with self.session.head(
                url,
                headers={"User-Agent": self.config.user_agent},
                timeout=client_timeout,
                allow_redirects=True,
            ) as resp:
                return resp.status, resp.headers.get("Content-Type", "")
        except (asyncio.TimeoutError, ClientError, ValueError) as exc:
            logger.debug("Probe failed for %s: %s", url, exc)
            return None

    async def classify(self, url: str) -> Optional[str]:
        """Decide whether an extension-less URL is CSS or JS.

        The Content-Type of a HEAD response decides; the URL extension is the
        fallback. A failed probe classifies as nothing.
        """
        if url in self.processed:
            return None
        answer = await self.probe(url)
        if answer is None:
            return None
        status, ctype = answer
        if status >= 400:
            return None
        return content_type_kind(ctype) or extension_kind(url)


__all__ = [
    "ExpectedType",
    "FetchResult",
    "ProcessedURLSet",
    "ResourceFetcher",
    "content_type_kind",
    "is_mismatched",
]
