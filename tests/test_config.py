# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from webqa.config import AnalyzerConfig, load_config

REPO_DEFAULT = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("min_file_count: 3\nresource_timeout: 4", ".yaml", None),
        ("min_file_count: 3\nresource_timeout: 4", ".yml", None),
        (json.dumps({"min_file_count": 3, "resource_timeout": 4}), ".json", None),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("min_file_count: 0", ".yaml", ValidationError),
        ("key: [unclosed", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{not json", ".json", ValueError),
        ("[1, 2]", ".json", TypeError),
        ("min_file_count = 3", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, AnalyzerConfig)
        assert cfg.min_file_count == 3
        assert cfg.resource_timeout == 4.0
        # untouched fields keep their defaults
        assert cfg.min_byte_count == 10000


def test_empty_yaml_gives_defaults(tmp_path):
    cfg = load_config(write_file(tmp_path, "", ".yaml"))
    assert cfg == AnalyzerConfig()


def test_shipped_default_matches_model_defaults():
    assert load_config(REPO_DEFAULT) == AnalyzerConfig()


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_default_from_cwd(tmp_path, monkeypatch):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_sitemaps: 1\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config(None).max_sitemaps == 1


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_wordlists_file_not_found(tmp_path):
    cfg_path = write_file(tmp_path, "wordlists: {js: missing.txt}", ".yaml")
    with pytest.raises(FileNotFoundError):
        load_config(cfg_path)


def test_unknown_resource_type_rejected():
    with pytest.raises(ValidationError):
        AnalyzerConfig(common_names={"fonts": ["x"]})


def test_config_is_frozen():
    cfg = AnalyzerConfig()
    with pytest.raises(ValidationError):
        cfg.min_file_count = 5


def test_markers_and_hosts_are_normalised():
    cfg = AnalyzerConfig(blocked_markers=[" Tracking ", ""], allowed_hosts=["Example.COM"])
    assert cfg.blocked_markers == ["tracking"]
    assert cfg.allowed_hosts == ["example.com"]


def test_guess_names_merge_wordlist(wordlists_files):
    cfg = AnalyzerConfig(
        common_names={"css": ["style", "theme"], "js": []},
        wordlists={kind: str(path) for kind, path in wordlists_files.items()},
    )
    assert cfg.guess_names("css") == ["style", "theme", "layout"]
    assert cfg.guess_names("js") == ["vendor", "runtime"]
