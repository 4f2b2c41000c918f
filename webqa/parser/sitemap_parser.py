# File: webqa/parser/sitemap_parser.py
"""webqa.parser.sitemap_parser: extracting URLs from sitemap.xml documents."""

from __future__ import annotations

from typing import List

from lxml import etree


def parse_sitemap(xml_content: str) -> List[str]:
    """Parse sitemap XML and return the URLs of its ``<loc>`` tags.

    Works for both ``<urlset>`` and ``<sitemapindex>`` documents; broken XML
    is parsed in recovery mode and yields whatever could be read.

    Example:
    ```python
    from webqa.parser.sitemap_parser import parse_sitemap

    urls = parse_sitemap(text)
    nested = [u for u in urls if u.endswith(".xml")]
    ```
    """
    if not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False)
    try:
        root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
