"""webqa.parser: HTML, robots.txt and sitemap parsing helpers."""
