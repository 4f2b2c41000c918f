# === FILE: webqa/config.py ===
"""
Loading and validation of the WebQA analyzer configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from webqa.utils import read_wordlist

RESOURCE_KINDS = ("css", "js")


def _default_blocked() -> List[str]:
    return [
        "googleapis.com",
        "cdnjs.cloudflare.com",
        "googletagmanager",
        "google-analytics",
        "analytics",
        "tracking",
        "gtm",
        "facebook",
        "twitter",
        "doubleclick",
        "hotjar",
    ]


def _default_names() -> Dict[str, List[str]]:
    return {
        "css": ["style", "styles", "main", "app", "custom"],
        "js": ["script", "scripts", "main", "app", "index", "custom", "bundle"],
    }


def _default_prefixes() -> Dict[str, List[str]]:
    return {
        "css": ["", "css/", "styles/", "assets/css/", "static/css/"],
        "js": ["", "js/", "scripts/", "assets/js/", "static/js/"],
    }


def _default_extensions() -> Dict[str, List[str]]:
    return {"css": [".css"], "js": [".js"]}


class AnalyzerConfig(BaseModel):
    """Configuration of one analyzer instance (shared by all of its runs)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field("Mozilla/5.0 WebQAAnalyzer/1.0", min_length=1, description="User-Agent header.")
    page_timeout: float = Field(15.0, gt=0, description="Timeout of the page request (seconds).")
    resource_timeout: float = Field(8.0, gt=0, description="Timeout of one CSS/JS request (seconds).")
    probe_timeout: float = Field(5.0, gt=0, description="Timeout of HEAD probes (seconds).")
    guess_timeout: float = Field(2.0, gt=0, description="Timeout of filename-guess probes (seconds).")

    min_file_count: int = Field(2, ge=1, description="Files per bucket that end discovery.")
    min_byte_count: int = Field(10_000, ge=1, description="Bytes per bucket that end discovery.")

    blocked_markers: List[str] = Field(default_factory=_default_blocked, description="Third-party URL markers.")
    allowed_hosts: List[str] = Field(default_factory=list, description="Host allowlist, empty means any host.")
    max_speculative_requests: int = Field(80, ge=0, description="Guess/sitemap requests per run.")
    speculative_same_host: bool = Field(True, description="Speculative phases stay on the page host.")

    common_names: Dict[str, List[str]] = Field(default_factory=_default_names)
    common_prefixes: Dict[str, List[str]] = Field(default_factory=_default_prefixes)
    common_extensions: Dict[str, List[str]] = Field(default_factory=_default_extensions)
    wordlists: Dict[str, str] = Field(default_factory=dict, description="Extra base names per resource type.")

    max_sitemaps: int = Field(5, ge=0, description="Sitemaps read per run.")
    sitemap_fallback: bool = Field(True, description="Try /sitemap.xml when robots.txt names none.")
    rewrite_github: bool = Field(True, description="Rewrite GitHub blob URLs to raw content.")

    max_feedback_items: int = Field(25, ge=1, description="Lint messages listed in feedback.")
    js_parse_max_bytes: int = Field(200_000, ge=1, description="Larger JS is not syntax-checked.")

    @field_validator("common_names", "common_prefixes", "common_extensions", "wordlists")
    def _known_kinds(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        unknown = sorted(set(v) - set(RESOURCE_KINDS))
        if unknown:
            raise ValueError(f"unknown resource types: {', '.join(unknown)}")
        return v

    @field_validator("allowed_hosts", "blocked_markers")
    def _lowercase(cls, v: List[str]) -> List[str]:
        return [item.strip().lower() for item in v if item.strip()]

    @model_validator(mode="after")
    def _check_wordlists_exist(self) -> AnalyzerConfig:
        missing = [p for p in self.wordlists.values() if not Path(p).is_file()]
        if missing:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), missing[0])
        return self

    def guess_names(self, kind: str) -> List[str]:
        """Base names for filename guessing, config list first, then the wordlist file."""
        names = list(self.common_names.get(kind, []))
        if kind in self.wordlists:
            names.extend(read_wordlist(self.wordlists[kind]))
        return list(dict.fromkeys(names))


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> AnalyzerConfig:
    """
    Read YAML or JSON and return a validated AnalyzerConfig.
    Raises FileNotFoundError when the file (or one of its wordlists) is missing.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return AnalyzerConfig(**data)


__all__ = ["AnalyzerConfig", "RESOURCE_KINDS", "load_config"]
