# File: webqa/server.py
"""webqa.server: HTTP API, a single ``POST /analyze`` endpoint on aiohttp.web.

Request body ``{"url": "..."}``; the response is the report dictionary or
``{"error": ...}`` with status 400 (bad input, unreachable page) or 500.
Each request gets its own :class:`~webqa.engine.Analyzer`, so concurrent
requests share no discovery state.
"""

from __future__ import annotations

import json
from typing import Optional

from aiohttp import web

from webqa.config import AnalyzerConfig
from webqa.engine import Analyzer
from webqa.exceptions import InvalidURLError, PageUnreachableError
from webqa.logger import get_logger

logger = get_logger("server")

CONFIG_KEY = web.AppKey("config", AnalyzerConfig)


def _error(status: int, message: str, **extra: str) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status)


async def analyze_handler(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = {}
    url = payload.get("url") if isinstance(payload, dict) else None
    if not url or not isinstance(url, str):
        return _error(400, "Please provide a URL to analyze")

    try:
        async with Analyzer(request.app[CONFIG_KEY]) as analyzer:
            report = await analyzer.analyze(url)
    except InvalidURLError:
        return _error(400, "Invalid URL format")
    except PageUnreachableError as exc:
        return _error(400, str(exc))
    except Exception as exc:
        logger.exception("Analysis of %s failed", url)
        return _error(500, "Failed to analyze the website", details=str(exc))

    return web.json_response(report.to_dict())


def create_app(config: Optional[AnalyzerConfig] = None) -> web.Application:
    app = web.Application()
    app[CONFIG_KEY] = config or AnalyzerConfig()
    app.router.add_post("/analyze", analyze_handler)
    return app


def run_server(config: Optional[AnalyzerConfig] = None, host: str = "0.0.0.0", port: int = 5000) -> None:
    """Blocking: serve the API until interrupted."""
    logger.info("Server running on %s:%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)


__all__ = ["CONFIG_KEY", "analyze_handler", "create_app", "run_server"]
