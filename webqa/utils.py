# File: webqa/utils.py
"""webqa.utils: small helpers for URLs and wordlists."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Union
from urllib.parse import urlparse

from webqa.logger import logger

__all__: Sequence[str] = (
    "extract_domain",
    "host_matches",
    "read_wordlist",
    "remove_duplicates",
)


def extract_domain(url: str) -> str:
    """Return the lower-cased host of *url* (no port), ``""`` when unparsable."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def host_matches(host: str, patterns: Iterable[str]) -> bool:
    """True when *host* equals one of *patterns* or is a subdomain of one."""
    host = host.lower()
    return any(host == p or host.endswith("." + p) for p in patterns)


def read_wordlist(path: Union[str, Path]) -> List[str]:
    """Read a wordlist, return non-empty stripped lines (``#`` starts a comment)."""
    p = Path(path)
    if not p.exists():
        logger.error("Wordlist not found: %s", p)
        raise FileNotFoundError(f"Wordlist file not found: {p}")
    words = [
        line.strip()
        for line in p.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    logger.debug("Loaded %d entries from wordlist %s", len(words), p)
    return words


def remove_duplicates(items: Iterable[str]) -> List[str]:
    """Remove duplicates while keeping the first-seen order."""
    items = list(items)
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
