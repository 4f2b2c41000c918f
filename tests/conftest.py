# File: tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from webqa.config import AnalyzerConfig

#: path -> (body, content type[, status])
Routes = Dict[str, Tuple]


@pytest.fixture()
def wordlists_files(tmp_path) -> Dict[str, Path]:
    """
    Create temporary wordlist files for tests.
    Returns dict with resource types to file paths.
    """
    css = tmp_path / "css_names.txt"
    js = tmp_path / "js_names.txt"
    css.write_text("theme\n# comment\n\nlayout")
    js.write_text("vendor\nruntime")
    return {"css": css, "js": js}


@pytest.fixture()
def quiet_config() -> AnalyzerConfig:
    """
    Config for pipeline tests: short timeouts, no filename guessing,
    so a test only sees the requests its page provokes.
    """
    return AnalyzerConfig(
        page_timeout=5.0,
        resource_timeout=2.0,
        probe_timeout=1.0,
        guess_timeout=1.0,
        common_names={"css": [], "js": []},
    )


def build_app(routes: Routes, hits: Optional[List[Tuple[str, str]]] = None) -> web.Application:
    """
    Static test site. Every request is appended to *hits* as (method, path);
    paths missing from *routes* answer 404 via the router.
    """
    log = hits if hits is not None else []

    def make_handler(entry: Tuple) -> Callable:
        body, content_type = entry[0], entry[1]
        status = entry[2] if len(entry) > 2 else 200

        async def handler(request: web.Request) -> web.Response:
            log.append((request.method, request.path))
            text = body(request) if callable(body) else body
            return web.Response(text=text, content_type=content_type, status=status)

        return handler

    @web.middleware
    async def record_missing(request: web.Request, handler):
        try:
            return await handler(request)
        except web.HTTPNotFound:
            log.append((request.method, request.path))
            raise

    app = web.Application(middlewares=[record_missing])
    for path, entry in routes.items():
        app.router.add_get(path, make_handler(entry))
    return app


@pytest.fixture()
def make_app() -> Callable[..., web.Application]:
    return build_app


@pytest_asyncio.fixture()
async def serve(unused_tcp_port_factory):
    """Start aiohttp apps on free ports; returns their base URLs. Cleans up afterwards."""
    runners: List[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "localhost", port)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{port}"

    yield _start

    for runner in runners:
        await runner.cleanup()
