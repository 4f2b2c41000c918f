# File: tests/test_fetcher.py
"""Tests for ResourceFetcher against a live aiohttp server."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import ClientSession, web

from webqa.config import AnalyzerConfig
from webqa.discovery.fetcher import (
    ProcessedURLSet,
    ResourceFetcher,
    content_type_kind,
    is_mismatched,
)

CSS = "body { margin: 0; }"
JS = "function ready() { return 1; }"
SOFT_404 = "<!DOCTYPE html><html><body>Not found</body></html>"


@pytest.fixture()
def site_routes():
    return {
        "/style.css": (CSS, "text/css"),
        "/app.js": (JS, "application/javascript"),
        "/mislabelled.css": (CSS, "text/html"),
        "/theme": (CSS, "text/html"),
        "/soft404.js": (SOFT_404, "text/html"),
        "/empty.css": ("", "text/css"),
        "/gone.css": ("missing", "text/css", 410),
        "/loader": (JS, "application/javascript"),
        "/picture": ("PNG", "image/png"),
    }


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.Response(text=CSS, content_type="text/css")


def test_processed_url_set_claim_once():
    processed = ProcessedURLSet()
    assert processed.claim("https://ex.com/a.css")
    assert not processed.claim("https://ex.com/a.css")
    assert processed.claim("https://ex.com/b.css")
    assert "https://ex.com/a.css" in processed
    assert len(processed) == 2
    assert processed.attempts == ["https://ex.com/a.css", "https://ex.com/b.css"]


@pytest.mark.parametrize(
    "ctype, url, expected, mismatch",
    [
        ("text/css", "https://ex.com/a", "css", False),
        ("text/html", "https://ex.com/a.css", "css", False),
        ("text/html", "https://ex.com/a", "css", True),
        ("application/javascript", "https://ex.com/a", "css", True),
        ("text/plain", "https://ex.com/a", "js", False),
        ("application/octet-stream", "https://ex.com/a", "js", False),
        ("", "https://ex.com/a", "js", False),
        ("image/png", "https://ex.com/a", "js", True),
        ("text/html", "https://ex.com/robots.txt", "text", False),
    ],
)
def test_is_mismatched(ctype, url, expected, mismatch):
    assert is_mismatched(ctype, url, expected) is mismatch


def test_content_type_kind():
    assert content_type_kind("text/css; charset=utf-8") == "css"
    assert content_type_kind("text/javascript") == "js"
    assert content_type_kind("application/x-ecmascript") == "js"
    assert content_type_kind("application/json") == "js"
    assert content_type_kind("text/html") is None


@pytest.mark.asyncio()
async def test_fetch_outcomes(serve, make_app, site_routes):
    hits = []
    app = make_app(site_routes, hits)
    app.router.add_get("/slow.css", _slow)
    base = await serve(app)
    cfg = AnalyzerConfig(resource_timeout=0.3)

    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, cfg)

        ok = await fetcher.fetch(f"{base}/style.css", "css")
        assert ok.ok and ok.content == CSS and ok.status == 200

        assert (await fetcher.fetch(f"{base}/app.js", "js")).ok
        assert (await fetcher.fetch(f"{base}/mislabelled.css", "css")).ok

        mismatch = await fetcher.fetch(f"{base}/theme", "css")
        assert not mismatch.ok and "content type" in mismatch.reason

        soft = await fetcher.fetch(f"{base}/soft404.js", "js")
        assert not soft.ok and "HTML" in soft.reason

        empty = await fetcher.fetch(f"{base}/empty.css", "css")
        assert not empty.ok and empty.reason == "empty body"

        gone = await fetcher.fetch(f"{base}/gone.css", "css")
        assert not gone.ok and gone.status == 410

        missing = await fetcher.fetch(f"{base}/nothing.css", "css")
        assert not missing.ok and missing.status == 404

        slow = await fetcher.fetch(f"{base}/slow.css", "css")
        assert not slow.ok and slow.reason == "timeout"

        refused = await fetcher.fetch("http://localhost:1/broken.css", "css")
        assert not refused.ok and refused.content == ""


@pytest.mark.asyncio()
async def test_fetch_duplicate_makes_no_request(serve, make_app, site_routes):
    hits = []
    base = await serve(make_app(site_routes, hits))
    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, AnalyzerConfig())
        first = await fetcher.fetch(f"{base}/style.css", "css")
        second = await fetcher.fetch(f"{base}/style.css", "css")

    assert first.ok
    assert not second.ok and second.reason == "duplicate"
    assert hits.count(("GET", "/style.css")) == 1


@pytest.mark.asyncio()
async def test_concurrent_fetches_count_once(serve, make_app, site_routes):
    hits = []
    base = await serve(make_app(site_routes, hits))
    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, AnalyzerConfig())
        results = await asyncio.gather(*(fetcher.fetch(f"{base}/app.js", "js") for _ in range(5)))

    assert sum(r.ok for r in results) == 1
    assert hits.count(("GET", "/app.js")) == 1


@pytest.mark.asyncio()
async def test_blocked_url_is_never_requested():
    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, AnalyzerConfig())
        result = await fetcher.fetch("https://www.googletagmanager.com/gtm.js", "js")
        answer = await fetcher.probe("https://www.google-analytics.com/analytics.js")

    assert not result.ok and result.reason == "blocked"
    assert answer is None
    assert fetcher.processed.attempts == []


@pytest.mark.asyncio()
async def test_speculative_budget(serve, make_app, site_routes):
    hits = []
    base = await serve(make_app(site_routes, hits))
    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, AnalyzerConfig(max_speculative_requests=1))
        first = await fetcher.fetch(f"{base}/style.css", "css", speculative=True)
        second = await fetcher.fetch(f"{base}/app.js", "js", speculative=True)
        probe = await fetcher.probe(f"{base}/loader", speculative=True)
        explicit = await fetcher.fetch(f"{base}/loader", "js")

    assert first.ok
    assert second.reason == "speculative budget exhausted"
    assert probe is None
    assert explicit.ok
    assert ("GET", "/app.js") not in hits


@pytest.mark.asyncio()
async def test_probe_and_classify(serve, make_app, site_routes):
    base = await serve(make_app(site_routes))
    async with ClientSession() as session:
        fetcher = ResourceFetcher(session, AnalyzerConfig(probe_timeout=1.0))

        status, ctype = await fetcher.probe(f"{base}/style.css")
        assert status == 200 and ctype.startswith("text/css")

        assert await fetcher.classify(f"{base}/loader") == "js"
        assert await fetcher.classify(f"{base}/theme") is None
        assert await fetcher.classify(f"{base}/picture") is None
        assert await fetcher.classify(f"{base}/does-not-exist") is None
        assert await fetcher.classify("http://localhost:1/broken") is None
