# File: tests/test_engine.py
"""Full analyses (fetch, discover, score) against a local site."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

from webqa.config import AnalyzerConfig
from webqa.engine import Analyzer, analyze_url, discover_url, validate_url
from webqa.exceptions import InvalidURLError, PageFetchError, PageUnreachableError

PAGE = """<!DOCTYPE html>
<html><head><title>Shop</title><meta name="description" content="d">
<link rel="stylesheet" href="css/site.css"></head>
<body><header></header><main><img src="a.png" alt="A"></main><footer></footer>
<script src="js/app.js"></script></body></html>"""

CSS = "body { margin: 0; }"
JS = "function add(a, b) { return a + b; }"


@pytest.fixture()
def config() -> AnalyzerConfig:
    return AnalyzerConfig(probe_timeout=1.0, resource_timeout=2.0, common_names={"css": [], "js": []})


@pytest.fixture()
def site_routes():
    return {
        "/": (PAGE, "text/html"),
        "/css/site.css": (CSS, "text/css"),
        "/js/app.js": (JS, "application/javascript"),
        "/bare": ("<html><body><p>nothing</p></body></html>", "text/html"),
        "/private": ("no", "text/plain", 403),
        "/empty": ("", "text/html"),
    }


@pytest.mark.parametrize("url", ["", "example.com", "ftp://example.com/", "http://", "   "])
def test_validate_url_rejects(url):
    with pytest.raises(InvalidURLError):
        validate_url(url)


def test_validate_url_strips():
    assert validate_url("  https://example.com/a  ") == "https://example.com/a"


@pytest.mark.asyncio()
async def test_analyze_full_report(serve, make_app, site_routes, config):
    base = await serve(make_app(site_routes))

    report = await analyze_url(f"{base}/", config)

    assert report.url == f"{base}/"
    assert report.timestamp.endswith("Z")
    assert report.scores == {"overall": 100, "html": 100, "css": 100, "javascript": 100}
    assert report.resources == {"cssFiles": 1, "jsFiles": 1, "cssBytes": len(CSS), "jsBytes": len(JS)}
    assert report.feedback == {"html": [], "css": [], "javascript": []}


@pytest.mark.asyncio()
async def test_analyze_page_without_resources(serve, make_app, site_routes, config):
    base = await serve(make_app(site_routes))

    report = await analyze_url(f"{base}/bare", config)

    assert report.scores["css"] == 0
    assert report.scores["javascript"] == 0
    assert report.feedback["css"] == ["No CSS content found to analyze"]
    assert report.feedback["javascript"] == ["No JavaScript content found to analyze"]
    assert report.scores["html"] == 50
    assert report.scores["overall"] == 17


@pytest.mark.asyncio()
async def test_analyze_unreachable(serve, make_app, site_routes, config):
    base = await serve(make_app(site_routes))
    with pytest.raises(PageUnreachableError) as info:
        await analyze_url(f"{base}/private", config)
    assert info.value.status == 403
    assert str(info.value) == "The provided URL is not reachable (status: 403)"

    with pytest.raises(PageUnreachableError):
        await analyze_url(f"{base}/nowhere", config)


@pytest.mark.asyncio()
async def test_analyze_head_refused_falls_back_to_get(serve, config):
    async def page(request: web.Request) -> web.Response:
        if request.method == "HEAD":
            raise web.HTTPMethodNotAllowed("HEAD", ["GET"])
        return web.Response(text="<html><title>t</title></html>", content_type="text/html")

    app = web.Application()
    app.router.add_route("*", "/", page)
    base = await serve(app)

    report = await analyze_url(f"{base}/", config)
    assert report.scores["html"] == 60


@pytest.mark.asyncio()
async def test_analyze_page_fetch_errors(serve, make_app, site_routes, config):
    base = await serve(make_app(site_routes))
    with pytest.raises(PageFetchError):
        await analyze_url(f"{base}/empty", config)
    with pytest.raises(PageFetchError):
        await analyze_url("http://localhost:1/", config)


@pytest.mark.asyncio()
async def test_analyzer_requires_context(config):
    with pytest.raises(RuntimeError):
        await Analyzer(config).analyze("https://example.com/")


@pytest.mark.asyncio()
async def test_discover_url(serve, make_app, site_routes, config):
    base = await serve(make_app(site_routes))
    result = await discover_url(f"{base}/", config)
    assert result.css.file_count == 1 and result.js.file_count == 1
    assert result.phases["css"][0] == "explicit_tags"


@pytest.mark.asyncio()
async def test_scoring_keeps_event_loop_responsive(serve, make_app, config):
    big_js = "var data = [" + ", ".join(str(i) for i in range(30000)) + "];"
    page = '<html><head><title>t</title></head><body><script src="big.js"></script></body></html>'
    base = await serve(make_app({"/": (page, "text/html"), "/big.js": (big_js, "application/javascript")}))

    loop = asyncio.get_running_loop()
    gaps = []
    done = asyncio.Event()

    async def ticker():
        last = loop.time()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = loop.time()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    try:
        report = await analyze_url(f"{base}/", config)
    finally:
        done.set()
        await task

    assert report.resources["jsBytes"] == len(big_js)
    assert report.scores["javascript"] == 100
    assert gaps and max(gaps) < 0.5
