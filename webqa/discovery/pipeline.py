# webqa/discovery/pipeline.py
"""
Resource discovery: runs the phases in order behind the sufficiency gate.

Example:
```python
from webqa.discovery import discover_resources

result = await discover_resources(html, "https://site.test/index.html")
print(result.css.file_count, result.js.byte_count)
```
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from aiohttp import ClientSession

from webqa.aggregator import DiscoveryResult
from webqa.config import RESOURCE_KINDS, AnalyzerConfig
from webqa.discovery import phases as ph
from webqa.discovery.fetcher import ResourceFetcher
from webqa.logger import get_logger
from webqa.parser.html_parser import parse_html

logger = get_logger("discovery")

PhaseFn = Callable[[ph.DiscoveryContext, Sequence[str]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class Phase:
    """One step of the chain.

    ``gated`` phases only run for types that are not sufficient yet;
    ``empty_only`` phases additionally require a bucket without any file.
    """

    name: str
    run: PhaseFn
    kinds: Tuple[str, ...] = RESOURCE_KINDS
    gated: bool = True
    empty_only: bool = False

    def active_kinds(self, ctx: ph.DiscoveryContext) -> list[str]:
        if not self.gated:
            return list(self.kinds)
        kinds = ctx.pending(self.kinds)
        if self.empty_only:
            kinds = [kind for kind in kinds if ctx.aggregator[kind].file_count == 0]
        return kinds


DEFAULT_PHASES: Tuple[Phase, ...] = (
    Phase("explicit_tags", ph.explicit_tags, gated=False),
    Phase("inline_content", ph.inline_content, gated=False),
    Phase("style_attributes", ph.style_attributes, kinds=("css",), gated=False),
    Phase("regex_scan", ph.regex_scan),
    Phase("dynamic_patterns", ph.dynamic_patterns),
    Phase("bundler_paths", ph.bundler_paths),
    Phase("common_filenames", ph.common_filenames, empty_only=True),
    Phase("sitemaps", ph.sitemaps),
)


class ResourceDiscovery:
    """Runs the phase chain for one page. A fresh context is built per run."""

    def __init__(
        self,
        session: ClientSession,
        config: AnalyzerConfig,
        phases: Sequence[Phase] = DEFAULT_PHASES,
    ) -> None:
        self.session = session
        self.config = config
        self.phases = tuple(phases)

    async def run(self, html: str, page_url: str) -> DiscoveryResult:
        start = time.monotonic()
        ctx = ph.DiscoveryContext(
            page_url=page_url,
            html=html,
            page=parse_html(html, page_url),
            config=self.config,
            fetcher=ResourceFetcher(self.session, self.config),
        )
        for phase in self.phases:
            kinds = phase.active_kinds(ctx)
            if not kinds:
                logger.debug("Skipping phase %s: nothing left to find", phase.name)
                continue
            for kind in kinds:
                ctx.phases[kind].append(phase.name)
            await phase.run(ctx, kinds)

        result = DiscoveryResult.from_aggregator(ctx.aggregator, ctx.fetcher.processed.attempts, ctx.phases)
        logger.info(
            "Resource discovery complete in %.2f s: %d CSS files (%d bytes), %d JS files (%d bytes)",
            time.monotonic() - start,
            result.css.file_count,
            result.css.byte_count,
            result.js.file_count,
            result.js.byte_count,
        )
        return result


async def discover_resources(
    html: str,
    page_url: str,
    config: Optional[AnalyzerConfig] = None,
    session: Optional[ClientSession] = None,
) -> DiscoveryResult:
    """Locate and fetch the CSS and JS used by *html*, fetched from *page_url*.

    Opens (and closes) its own HTTP session unless *session* is given.
    """
    config = config or AnalyzerConfig()
    if session is not None:
        return await ResourceDiscovery(session, config).run(html, page_url)
    async with ClientSession(headers={"User-Agent": config.user_agent}) as own_session:
        return await ResourceDiscovery(own_session, config).run(html, page_url)


__all__ = ["DEFAULT_PHASES", "Phase", "ResourceDiscovery", "discover_resources"]
