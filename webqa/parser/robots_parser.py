# File: webqa/parser/robots_parser.py
"""webqa.parser.robots_parser: reading ``Sitemap:`` directives from robots.txt."""

from __future__ import annotations

from typing import List, Tuple

from webqa.utils import remove_duplicates


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Strip comments and split lines into (directive, value)."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, val = (part.strip() for part in line.split(":", 1))
        lines.append((key.lower(), val))
    return lines


def sitemap_directives(text: str) -> List[str]:
    """Return sitemap URLs named in robots.txt, in file order, without duplicates.

    ``Sitemap`` is a group-independent directive, so user-agent groups are ignored.
    """
    return remove_duplicates(value for key, value in _prepare_lines(text) if key == "sitemap" and value)
