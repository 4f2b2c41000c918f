# webqa/discovery/resolver.py
"""
Turning resource references found in a page into absolute, fetchable URLs.
"""
from __future__ import annotations

import posixpath
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from webqa.config import AnalyzerConfig
from webqa.logger import get_logger
from webqa.utils import extract_domain, host_matches

logger = get_logger("resolver")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_GITHUB_BLOB_RE = re.compile(
    r"^https?://(?:www\.)?github\.com/(?P<user>[^/]+)/(?P<repo>[^/]+)/blob/(?P<branch>[^/]+)/(?P<path>.+)$"
)
_RAW_HOST = "raw.githubusercontent.com"

_SKIPPED_PREFIXES = ("data:", "blob:", "javascript:", "mailto:", "tel:", "about:", "#")
_PLACEHOLDERS = ("${", "{{", "<%")

_MEDIA_SUFFIXES = (
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".ico", ".bmp",
    ".mp4", ".webm", ".ogg", ".mov", ".avi", ".mp3", ".wav",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
)


def rewrite_github_url(url: str) -> str:
    """Map a GitHub ``blob`` page to its raw-content URL; anything else passes through."""
    match = _GITHUB_BLOB_RE.match(url)
    if match:
        raw = "https://{host}/{user}/{repo}/{branch}/{path}".format(host=_RAW_HOST, **match.groupdict())
        logger.debug("GitHub blob %s -> %s", url, raw)
        return raw
    if extract_domain(url) == "gist.github.com":
        logger.info("Gist URLs are not rewritten: %s", url)
    return url


def resolve_url(reference: str, base_url: str, *, rewrite_github: bool = False) -> Optional[str]:
    """Resolve *reference* against *base_url*.

    Absolute http(s) references come back unchanged whatever the base. Other
    references need an absolute http(s) base; ``None`` when it cannot be
    parsed or the reference uses another scheme. Fragments are dropped.
    """
    ref = reference.strip().split("#", 1)[0]
    if not ref:
        return None
    if ref.lower().startswith(("http://", "https://")):
        return rewrite_github_url(ref) if rewrite_github else ref
    if _SCHEME_RE.match(ref):
        logger.debug("Skipping non-http reference %s", ref)
        return None
    try:
        base = urlparse(base_url)
        if base.scheme not in ("http", "https") or not base.netloc:
            raise ValueError(f"not an absolute http(s) URL: {base_url!r}")
        origin = f"{base.scheme}://{base.netloc}"

        if ref.startswith("//"):
            resolved = f"{base.scheme}:{ref}"
        elif ref.startswith("/"):
            resolved = origin + ref
        else:
            directory = posixpath.dirname(base.path or "/")
            if not directory.endswith("/"):
                directory += "/"
            resolved = urljoin(origin + directory, ref)
    except ValueError as exc:
        logger.warning("URL resolution error for %s: %s", reference, exc)
        return None

    return rewrite_github_url(resolved) if rewrite_github else resolved


def is_fetchable_reference(reference: str) -> bool:
    """Reject inline data, script pseudo-URLs, anchors and unexpanded templates."""
    ref = reference.strip()
    if not ref or ref.lower().startswith(_SKIPPED_PREFIXES):
        return False
    return not any(marker in ref for marker in _PLACEHOLDERS)


def _path_of(url: str) -> str:
    try:
        return urlparse(url).path.lower()
    except ValueError:
        return url.split("?", 1)[0].lower()


def extension_kind(url: str) -> Optional[str]:
    """``"css"``/``"js"`` from the path suffix (``.mjs`` counts as js), else ``None``."""
    path = _path_of(url)
    if path.endswith(".css"):
        return "css"
    if path.endswith((".js", ".mjs")):
        return "js"
    return None


def is_media_reference(url: str) -> bool:
    """True for images, video, audio and fonts."""
    return _path_of(url).endswith(_MEDIA_SUFFIXES)


def is_blocked(url: str, config: AnalyzerConfig) -> bool:
    """Third-party/analytics URLs and hosts outside the allowlist are never fetched."""
    lowered = url.lower()
    if any(marker in lowered for marker in config.blocked_markers):
        return True
    if config.allowed_hosts and not host_matches(extract_domain(url), config.allowed_hosts):
        return True
    return False


__all__ = [
    "extension_kind",
    "is_blocked",
    "is_fetchable_reference",
    "is_media_reference",
    "resolve_url",
    "rewrite_github_url",
]
