# webqa/discovery/phases.py
"""
The discovery phases, highest confidence first.

Every phase is ``async def phase(ctx, kinds)`` where *kinds* are the resource
types the phase should still work on. Phases never raise for a single bad
reference; they skip it and go on.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import product
from typing import Deque, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlparse, urlunparse

from webqa.aggregator import Aggregator, is_sufficient
from webqa.config import RESOURCE_KINDS, AnalyzerConfig
from webqa.discovery.fetcher import ResourceFetcher
from webqa.discovery.patterns import (
    BROAD_PATTERN,
    BUNDLER_PATTERNS,
    DYNAMIC_PATTERNS,
    ReferencePattern,
    bundler_kind,
    looks_like_path,
    unescape_slashes,
)
from webqa.discovery.resolver import (
    extension_kind,
    is_blocked,
    is_fetchable_reference,
    is_media_reference,
    resolve_url,
)
from webqa.logger import get_logger
from webqa.parser.html_parser import ParsedPage
from webqa.parser.robots_parser import sitemap_directives
from webqa.parser.sitemap_parser import parse_sitemap
from webqa.utils import extract_domain

logger = get_logger("discovery")


@dataclass(slots=True)
class Candidate:
    """A resolved reference surfaced by a phase, not fetched yet."""

    url: str
    kind: Optional[str]
    source: str


@dataclass
class DiscoveryContext:
    """Mutable state of one discovery run, handed to every phase."""

    page_url: str
    html: str
    page: ParsedPage
    config: AnalyzerConfig
    fetcher: ResourceFetcher
    aggregator: Aggregator = field(default_factory=Aggregator)
    phases: Dict[str, List[str]] = field(default_factory=lambda: {kind: [] for kind in RESOURCE_KINDS})

    @property
    def page_host(self) -> str:
        return extract_domain(self.page_url)

    @property
    def scan_text(self) -> str:
        return unescape_slashes(self.html)

    def sufficient(self, kind: str) -> bool:
        return is_sufficient(self.aggregator[kind], self.config)

    def pending(self, kinds: Iterable[str] = RESOURCE_KINDS) -> List[str]:
        return [kind for kind in kinds if not self.sufficient(kind)]

    def resolve(self, reference: str) -> Optional[str]:
        if not is_fetchable_reference(reference):
            return None
        return resolve_url(reference, self.page_url, rewrite_github=self.config.rewrite_github)

    def speculative_allowed(self, url: str) -> bool:
        return not self.config.speculative_same_host or extract_domain(url) == self.page_host

    async def collect(self, url: str, kind: str, *, speculative: bool = False) -> bool:
        """Fetch *url* as *kind* and record it. True when the bucket grew."""
        result = await self.fetcher.fetch(url, kind, speculative=speculative)
        if not result.ok:
            return False
        return self.aggregator.record(kind, result.content, url)

    def candidates(self, patterns: Sequence[ReferencePattern], text: str) -> List[Candidate]:
        """Resolved, de-duplicated matches of *patterns* in first-match order.

        URLs already attempted in this run, blocked URLs and media files are dropped.
        """
        found: Dict[str, Candidate] = {}
        for pattern in patterns:
            for reference in pattern.extract(text):
                url = self.resolve(reference)
                if url is None or url in found or url in self.fetcher.processed:
                    continue
                if is_media_reference(url) or is_blocked(url, self.config):
                    continue
                kind = extension_kind(url)
                if kind is None and pattern.kind and looks_like_path(reference):
                    kind = pattern.kind
                found[url] = Candidate(url=url, kind=kind, source=pattern.name)
        return list(found.values())


# --------------------------------------------------------------------------- #
# Phases 1–3: always run in full                                              #
# --------------------------------------------------------------------------- #


async def explicit_tags(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """``<link rel="stylesheet" href>`` and ``<script src>``, in document order."""
    references = {"css": ctx.page.stylesheet_links, "js": ctx.page.script_sources}
    for kind in kinds:
        logger.info("Found %d linked %s files", len(references[kind]), kind.upper())
        for reference in references[kind]:
            url = ctx.resolve(reference)
            if url is None:
                continue
            await ctx.collect(url, kind)


async def inline_content(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """Text of ``<style>`` blocks and ``<script>`` blocks without ``src``."""
    inline = {"css": ctx.page.inline_css, "js": ctx.page.inline_js}
    for kind in kinds:
        if inline[kind]:
            ctx.aggregator.add_inline(kind, inline[kind])
            logger.info("Added %d bytes of inline %s", len(inline[kind]), kind.upper())


async def style_attributes(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """One synthetic rule per element with a ``style`` attribute."""
    css = ctx.page.attribute_css
    if css:
        ctx.aggregator.add_inline("css", css)
        logger.info("Added %d bytes of attribute CSS", len(css))


# --------------------------------------------------------------------------- #
# Phases 4–8: gated, stop as soon as a type is sufficient                     #
# --------------------------------------------------------------------------- #


async def _collect_typed(ctx: DiscoveryContext, candidates: Iterable[Candidate], kinds: Sequence[str]) -> None:
    for candidate in candidates:
        if candidate.kind not in kinds or ctx.sufficient(candidate.kind):
            continue
        await ctx.collect(candidate.url, candidate.kind)


async def regex_scan(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """Every ``.css``/``.js`` looking token in the raw markup."""
    candidates = ctx.candidates((BROAD_PATTERN,), ctx.scan_text)
    logger.info("Found %d additional files via regex scanning", len(candidates))
    await _collect_typed(ctx, candidates, kinds)


async def dynamic_patterns(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """Loader calls and DOM assignments; untyped matches are verified first."""
    candidates = ctx.candidates(DYNAMIC_PATTERNS, ctx.scan_text)
    logger.info("Found %d dynamically loaded candidates", len(candidates))
    for candidate in candidates:
        if not ctx.pending(kinds):
            return
        if candidate.kind is None:
            candidate.kind = await ctx.fetcher.classify(candidate.url)
            if candidate.kind is None:
                logger.debug("Dropping unclassified %s (%s)", candidate.url, candidate.source)
                continue
        if candidate.kind in kinds and not ctx.sufficient(candidate.kind):
            await ctx.collect(candidate.url, candidate.kind)


async def bundler_paths(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """Build-tool output directories and hashed chunk names."""
    candidates = ctx.candidates(BUNDLER_PATTERNS, ctx.scan_text)
    for candidate in candidates:
        candidate.kind = candidate.kind or bundler_kind(candidate.url)
    logger.info("Found %d bundler output candidates", len(candidates))
    await _collect_typed(ctx, candidates, kinds)


async def common_filenames(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """Probe conventional file names next to the page."""
    config = ctx.config
    for kind in kinds:
        logger.info("No %s files found, trying common filenames...", kind.upper())
        combos = product(
            config.common_prefixes.get(kind, [""]),
            config.guess_names(kind),
            config.common_extensions.get(kind, []),
        )
        for prefix, name, extension in combos:
            if ctx.sufficient(kind) or ctx.fetcher.speculative_left <= 0:
                break
            url = ctx.resolve(f"{prefix}{name}{extension}")
            if url is None or url in ctx.fetcher.processed or not ctx.speculative_allowed(url):
                continue
            answer = await ctx.fetcher.probe(url, config.guess_timeout, speculative=True)
            if answer is None:
                continue
            status, _ = answer
            # 405: HEAD refused, the GET decides
            if status not in (200, 405):
                continue
            if await ctx.collect(url, kind, speculative=True):
                logger.info("Found common %s file: %s", kind.upper(), url)


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return urlunparse((parsed.scheme, parsed.netloc, "", "", "", ""))


async def sitemaps(ctx: DiscoveryContext, kinds: Sequence[str]) -> None:
    """``Sitemap:`` lines of robots.txt, then CSS/JS ``<loc>`` entries."""
    if not ctx.page_host:
        return
    origin = _origin(ctx.page_url)
    robots = await ctx.fetcher.fetch(f"{origin}/robots.txt", "text", speculative=True)
    queue: Deque[str] = deque(sitemap_directives(robots.content) if robots.ok else [])
    if not queue and ctx.config.sitemap_fallback:
        queue.append(f"{origin}/sitemap.xml")

    read = 0
    while queue and read < ctx.config.max_sitemaps and ctx.pending(kinds):
        sitemap_url = queue.popleft()
        if not ctx.speculative_allowed(sitemap_url):
            logger.debug("Skipping off-host sitemap %s", sitemap_url)
            continue
        logger.info("Found sitemap: %s", sitemap_url)
        response = await ctx.fetcher.fetch(sitemap_url, "text", speculative=True)
        read += 1
        if not response.ok:
            continue
        for loc in parse_sitemap(response.content):
            kind = extension_kind(loc)
            if kind is None:
                if urlparse(loc).path.lower().endswith(".xml"):
                    queue.append(loc)
                continue
            if kind not in kinds or ctx.sufficient(kind) or not ctx.speculative_allowed(loc):
                continue
            await ctx.collect(loc, kind, speculative=True)


__all__ = [
    "Candidate",
    "DiscoveryContext",
    "bundler_paths",
    "common_filenames",
    "dynamic_patterns",
    "explicit_tags",
    "inline_content",
    "regex_scan",
    "sitemaps",
    "style_attributes",
]
