# === FILE: webqa/parser/html_parser.py ===
"""HTML parsing utilities for WebQA.

Everything the discovery pipeline reads from the page's markup goes through
:class:`ParsedPage`, a thin wrapper over BeautifulSoup:

* stylesheet links: ``href`` of ``<link rel="stylesheet">`` in document order.
* script sources: ``src`` of ``<script src>`` in document order.
* inline CSS / JS: text of ``<style>`` and non-``src`` ``<script>`` blocks.
* attribute CSS: a synthetic rule per element carrying a ``style`` attribute.

References are returned raw; resolving them is the resolver's job.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("ParsedPage", "parse_html", "synthesize_selector")

# script types that carry data or templates, not code
_NON_JS_SCRIPT_TYPES = ("application/ld+json", "application/json", "text/template", "text/x-template", "importmap")


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value.strip() if isinstance(value, str) else ""


def _is_stylesheet(tag: Tag) -> bool:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return "stylesheet" in [r.lower() for r in rel]


def _is_code_script(tag: Tag) -> bool:
    return _attr(tag, "type").lower() not in _NON_JS_SCRIPT_TYPES


def synthesize_selector(tag: Tag) -> str:
    """``tag#id.class1.class2`` for an element, the way a stylesheet would name it."""
    selector = tag.name
    element_id = _attr(tag, "id")
    if element_id:
        selector += f"#{element_id}"
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if classes:
        selector += "." + ".".join(classes)
    return selector


@dataclass(slots=True)
class ParsedPage:
    """Resource-related view of an HTML document."""

    url: str
    stylesheet_links: List[str] = field(default_factory=list)
    script_sources: List[str] = field(default_factory=list)
    inline_styles: List[str] = field(default_factory=list)
    inline_scripts: List[str] = field(default_factory=list)
    attribute_rules: List[str] = field(default_factory=list)

    @property
    def inline_css(self) -> str:
        return "\n".join(s for s in self.inline_styles if s.strip())

    @property
    def inline_js(self) -> str:
        return "\n".join(s for s in self.inline_scripts if s.strip())

    @property
    def attribute_css(self) -> str:
        return "".join(self.attribute_rules)


def parse_html(html: str, url: str = "") -> ParsedPage:
    """Parse *html* (fetched from *url*) into a :class:`ParsedPage`."""
    soup = BeautifulSoup(html, "html.parser")
    page = ParsedPage(url=url)

    for tag in soup.find_all("link", href=True):
        if isinstance(tag, Tag) and _is_stylesheet(tag):
            href = _attr(tag, "href")
            if href:
                page.stylesheet_links.append(href)

    for tag in soup.find_all("script"):
        if not isinstance(tag, Tag):
            continue
        src = _attr(tag, "src")
        if src:
            page.script_sources.append(src)
        elif _is_code_script(tag):
            page.inline_scripts.append(tag.get_text())

    for tag in soup.find_all("style"):
        if isinstance(tag, Tag):
            page.inline_styles.append(tag.get_text())

    for tag in soup.find_all(style=True):
        if not isinstance(tag, Tag):
            continue
        declarations = _attr(tag, "style")
        if declarations:
            page.attribute_rules.append(f"{synthesize_selector(tag)} {{ {declarations} }}\n")

    return page
