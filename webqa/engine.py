# File: webqa/engine.py
"""webqa.engine: orchestration of one page analysis (fetch, discover, score)."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from aiohttp import ClientError, ClientSession, ClientTimeout

from webqa.aggregator import AnalysisReport, DiscoveryResult
from webqa.config import AnalyzerConfig
from webqa.discovery.pipeline import ResourceDiscovery
from webqa.discovery.resolver import rewrite_github_url
from webqa.exceptions import InvalidURLError, PageFetchError, PageUnreachableError
from webqa.logger import logger
from webqa.scoring import Evaluation, evaluate_css, evaluate_html, evaluate_js, overall_score

__all__ = ["Analyzer", "analyze_url", "discover_url", "validate_url"]


def validate_url(url: str) -> str:
    """Return *url* stripped, or raise InvalidURLError unless it is absolute http(s)."""
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidURLError("Invalid URL format") from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError("Invalid URL format")
    return candidate


class Analyzer:
    """Facade for the CLI and the HTTP server: owns the HTTP session."""

    def __init__(self, config: Optional[AnalyzerConfig] = None) -> None:
        self.config = config or AnalyzerConfig()
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> Analyzer:
        self.session = ClientSession(
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def analyze(self, url: str) -> AnalysisReport:
        """Analyse one page. Raises only when the page itself is unusable.

        Parsing and linting run in worker threads so concurrent analyses and
        in-flight fetches keep the event loop.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        url = validate_url(url)
        page_url = rewrite_github_url(url) if self.config.rewrite_github else url
        logger.info("Starting analysis of %s", page_url)

        await self._check_reachable(page_url)
        html = await self._fetch_page(page_url)

        html_result = await asyncio.to_thread(evaluate_html, html)
        logger.info("HTML analysis complete. Score: %d", html_result.score)

        discovery = await ResourceDiscovery(self.session, self.config).run(html, page_url)

        css_content = discovery.css.content
        if css_content.strip():
            css_result = await asyncio.to_thread(evaluate_css, css_content, self.config.max_feedback_items)
        else:
            logger.warning("No CSS content found to analyze")
            css_result = Evaluation(score=0, feedback=["No CSS content found to analyze"])

        js_content = discovery.js.content
        if js_content.strip():
            js_result = await asyncio.to_thread(evaluate_js, js_content, self.config.js_parse_max_bytes)
        else:
            logger.warning("No JavaScript content found to analyze")
            js_result = Evaluation(score=0, feedback=["No JavaScript content found to analyze"])

        report = AnalysisReport.build(
            url=url,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            evaluations={"html": html_result, "css": css_result, "javascript": js_result},
            overall=overall_score(html_result.score, css_result.score, js_result.score),
            discovery=discovery,
        )
        logger.info("Analysis complete for %s (overall %d)", url, report.scores["overall"])
        return report

    async def discover(self, url: str) -> DiscoveryResult:
        """Fetch the page and run resource discovery only, without scoring."""
        if not self.session:
            raise RuntimeError("Session not initialized")
        url = validate_url(url)
        page_url = rewrite_github_url(url) if self.config.rewrite_github else url
        await self._check_reachable(page_url)
        html = await self._fetch_page(page_url)
        return await ResourceDiscovery(self.session, self.config).run(html, page_url)

    async def _check_reachable(self, url: str) -> None:
        """HEAD the page; a 4xx answer ends the analysis, network trouble does not."""
        assert self.session is not None
        try:
            async with self.session.head(
                url, timeout=ClientTimeout(total=self.config.probe_timeout), allow_redirects=True
            ) as resp:
                status = resp.status
        except (ClientError, asyncio.TimeoutError) as exc:
            # some servers refuse HEAD but answer GET
            logger.info("Error checking URL %s: %s", url, exc)
            return
        if 400 <= status < 500 and status != 405:
            raise PageUnreachableError(url, status)

    async def _fetch_page(self, url: str) -> str:
        assert self.session is not None
        logger.info("Fetching HTML content from %s", url)
        try:
            async with self.session.get(url, timeout=ClientTimeout(total=self.config.page_timeout)) as resp:
                if resp.status >= 400:
                    raise PageFetchError(url, f"status {resp.status}", resp.status)
                html = await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise PageFetchError(url, "timeout") from exc
        except (ClientError, LookupError, ValueError) as exc:
            raise PageFetchError(url, str(exc) or type(exc).__name__) from exc
        if not html.strip():
            raise PageFetchError(url, "empty response")
        return html


async def analyze_url(url: str, config: Optional[AnalyzerConfig] = None) -> AnalysisReport:
    """One-shot helper: open an Analyzer, analyse *url*, close it."""
    async with Analyzer(config) as analyzer:
        return await analyzer.analyze(url)


async def discover_url(url: str, config: Optional[AnalyzerConfig] = None) -> DiscoveryResult:
    async with Analyzer(config) as analyzer:
        return await analyzer.discover(url)
