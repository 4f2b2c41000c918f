# File: webqa/scoring/html_rules.py
"""webqa.scoring.html_rules: structure, SEO and accessibility checks for a page."""

from __future__ import annotations

from typing import Callable, Tuple

from bs4 import BeautifulSoup

from webqa.scoring.base import Evaluation

#: (label used in feedback, finder)
_REQUIRED: Tuple[Tuple[str, Callable[[BeautifulSoup], object]], ...] = (
    ("<header>", lambda soup: soup.find("header")),
    ("<main>", lambda soup: soup.find("main")),
    ("<footer>", lambda soup: soup.find("footer")),
    ("<title>", lambda soup: soup.find("title")),
    ('<meta name="description">', lambda soup: soup.find("meta", attrs={"name": "description"})),
)
_DEPRECATED_TAGS = ("font", "center", "marquee")
_MAX_LINES = 200


def evaluate_html(html: str) -> Evaluation:
    """Score the page markup.

    -10 per missing structural/SEO element, -10 when an image lacks ``alt``,
    -15 for deprecated tags, -5 for a document longer than 200 lines.
    """
    result = Evaluation()
    soup = BeautifulSoup(html, "html.parser")

    for label, find in _REQUIRED:
        if not find(soup):
            result.penalize(10, f"Missing {label} for improved structure or SEO.")

    if any(img.get("alt") is None for img in soup.find_all("img")):
        result.penalize(10, "Images are missing alt attributes for accessibility.")

    if soup.find(list(_DEPRECATED_TAGS)):
        result.penalize(15, "Deprecated tags found (e.g., <font>, <center>); please remove.")

    if len(html.split("\n")) > _MAX_LINES:
        result.penalize(5, "HTML file is large; consider splitting into partials.")

    return result.clamp()
