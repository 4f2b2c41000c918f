# webqa/discovery/patterns.py
"""
Regex tables used by the scanning phases of resource discovery.

Each entry pairs a pattern with the resource type it implies. The type of a
pattern is only a hint: a ``.css``/``.js`` extension on the match always wins,
and matches without either go through type verification unless the pattern
itself is unambiguous (a ``<script>`` element, ``loadCSS()`` and the like).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple
from urllib.parse import urlparse

from webqa.discovery.resolver import extension_kind, is_media_reference


@dataclass(frozen=True, slots=True)
class ReferencePattern:
    """A named regex whose first group is a resource reference."""

    name: str
    regex: re.Pattern[str]
    kind: Optional[str] = None

    def extract(self, text: str) -> Iterator[str]:
        for match in self.regex.finditer(text):
            value = match.group(1)
            if value and value.strip():
                yield value.strip()


# token must not start in the middle of another path-like token
_START = r"(?<![\w\-.~%@+/:])"
_HOST = r"(?:(?:https?:)?//[\w\-.:@%]+)?"
_END = r"(?:\?[^\s\"'`()<>]*)?(?=[\s\"'`()<>,;\\]|$)"

#: any .css/.js path in quotes, parens, attributes or bare text
BROAD_PATTERN = ReferencePattern(
    "broad",
    re.compile(
        _START + r"(" + _HOST + r"/?[\w\-.~%@+/]*?[\w\-~%@+]\.(?:css|js))" + _END,
        re.IGNORECASE,
    ),
)

_QUOTED = r"[\"'`]([^\"'`\s]+)[\"'`]"

DYNAMIC_PATTERNS: Tuple[ReferencePattern, ...] = (
    ReferencePattern(
        "script_element",
        re.compile(r"createElement\(\s*[\"']script[\"']\s*\)[\s\S]{0,300}?\.src\s*=\s*" + _QUOTED),
        "js",
    ),
    ReferencePattern(
        "link_element",
        re.compile(r"createElement\(\s*[\"']link[\"']\s*\)[\s\S]{0,300}?\.href\s*=\s*" + _QUOTED),
        "css",
    ),
    ReferencePattern("src_assignment", re.compile(r"\.src\s*=\s*" + _QUOTED)),
    ReferencePattern("href_assignment", re.compile(r"\.href\s*=\s*" + _QUOTED)),
    ReferencePattern(
        "set_attribute",
        re.compile(r"setAttribute\(\s*[\"'](?:src|href)[\"']\s*,\s*" + _QUOTED),
    ),
    ReferencePattern("dynamic_import", re.compile(r"\bimport\(\s*" + _QUOTED + r"\s*\)"), "js"),
    ReferencePattern("require_call", re.compile(r"\brequire\(\s*\[?\s*" + _QUOTED)),
    ReferencePattern(
        "script_loader",
        re.compile(r"\b(?:loadScript|loadJS|getScript|importScripts)\(\s*" + _QUOTED),
        "js",
    ),
    ReferencePattern(
        "style_loader",
        re.compile(r"\b(?:loadCSS|loadStyle|loadStylesheet)\(\s*" + _QUOTED),
        "css",
    ),
    ReferencePattern("css_import", re.compile(r"@import\s+(?:url\(\s*)?[\"']?([^\"')\s;]+)"), "css"),
    ReferencePattern(
        "es_import",
        re.compile(r"\bimport\s+(?:[\w*{}\s,$]+\s+from\s+)?[\"']([^\"'\s]+)[\"']"),
        "js",
    ),
    ReferencePattern("data_attribute", re.compile(r"\bdata-(?:src|href)\s*=\s*" + _QUOTED)),
)

_BUNDLE_TAIL = r"[\w\-.~/]+"

BUNDLER_PATTERNS: Tuple[ReferencePattern, ...] = (
    ReferencePattern(
        "static_dir",
        re.compile(_START + r"(" + _HOST + r"/?(?:[\w\-.]+/)*?static/(?:js|css)/" + _BUNDLE_TAIL + r")", re.I),
    ),
    ReferencePattern(
        "assets_dir",
        re.compile(
            _START + r"(" + _HOST + r"/?(?:[\w\-.]+/)*?assets/(?:js|css|javascripts|stylesheets)/" + _BUNDLE_TAIL + r")",
            re.I,
        ),
    ),
    ReferencePattern(
        "next_chunks",
        re.compile(_START + r"(" + _HOST + r"/?_next/static/[\w\-.~/\[\]]+?\.(?:js|css))", re.I),
    ),
    ReferencePattern(
        "nuxt_chunks",
        re.compile(_START + r"(" + _HOST + r"/?_nuxt/[\w\-.~/]+?\.(?:js|css))", re.I),
    ),
    ReferencePattern(
        "hashed_chunk",
        re.compile(
            _START + r"(" + _HOST + r"/?(?:[\w\-.]+/)*[\w\-]+[.\-][0-9a-f]{8,32}(?:\.chunk)?\.(?:js|css))", re.I
        ),
    ),
    ReferencePattern(
        "build_dir",
        re.compile(_START + r"(" + _HOST + r"/?(?:[\w\-.]+/)*?(?:dist|build|bundles?)/[\w\-.~/]+?\.(?:js|css))", re.I),
    ),
)

_NON_CODE_SUFFIXES = (".map", ".json", ".txt", ".html", ".htm", ".xml")


def looks_like_path(reference: str) -> bool:
    """Bare module ids such as ``react`` are not URLs; paths contain a dot or slash."""
    return "/" in reference or "." in reference


def bundler_kind(url: str) -> Optional[str]:
    """Type of a build-tool output path, judged by extension or directory name."""
    kind = extension_kind(url)
    if kind:
        return kind
    path = urlparse(url).path.lower()
    if path.endswith(_NON_CODE_SUFFIXES) or is_media_reference(url):
        return None
    if "/css/" in path or "/stylesheets/" in path:
        return "css"
    if "/js/" in path or "/javascripts/" in path or "/chunks/" in path:
        return "js"
    return None


def unescape_slashes(text: str) -> str:
    """``\\/`` as found in JSON and minified JS becomes ``/``."""
    return text.replace("\\/", "/")


__all__: Sequence[str] = (
    "BROAD_PATTERN",
    "BUNDLER_PATTERNS",
    "DYNAMIC_PATTERNS",
    "ReferencePattern",
    "bundler_kind",
    "looks_like_path",
    "unescape_slashes",
)
