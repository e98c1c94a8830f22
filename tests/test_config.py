# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from seo_scout.config import DEFAULT_USER_AGENT, AuditConfig, CrawlerOptions, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("crawler:\n  max_pages: 10\nuser_agent: Bot/2.0\n", ".yaml", None),
        (json.dumps({"crawler": {"max_pages": 10}, "user_agent": "Bot/2.0"}), ".json", None),
        ("crawler:\n  max_pages: 0\n", ".yaml", ValidationError),
        ("crawler:\n  depth: 3\n", ".yaml", ValidationError),
        ("- just\n- a list\n", ".yaml", TypeError),
        ("crawler: [unclosed", ".yaml", ValueError),
        ("{not json", ".json", ValueError),
        ("max_pages = 10", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, AuditConfig)
        assert cfg.crawler.max_pages == 10
        assert cfg.crawler.max_depth == 2
        assert cfg.user_agent == "Bot/2.0"


def test_empty_file_gives_defaults(tmp_path):
    cfg = load_config(write_file(tmp_path, "", ".yaml"))
    assert cfg.crawler == CrawlerOptions()


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(None)
    assert cfg.crawler.max_pages == 50
    assert cfg.user_agent == DEFAULT_USER_AGENT


def test_load_config_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("crawler:\n  concurrency: 5\n", encoding="utf-8")
    assert load_config(None).crawler.concurrency == 5


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_crawler_defaults():
    opts = CrawlerOptions()
    assert (opts.max_depth, opts.max_pages, opts.concurrency) == (2, 50, 3)
    assert opts.per_page_timeout_ms == 15000
    assert opts.max_html_bytes == 5 * 1024 * 1024


def test_crawler_options_are_frozen():
    opts = CrawlerOptions()
    with pytest.raises(ValidationError):
        opts.max_pages = 10


def test_environment_defaults(monkeypatch):
    monkeypatch.setenv("MAX_CONCURRENT_AUDITS", "4")
    monkeypatch.setenv("TURNSTILE_SECRET_KEY", "from-env")
    monkeypatch.setenv("SEO_SCOUT_ENV", "Production")
    cfg = AuditConfig()
    assert cfg.max_concurrent_audits == 4
    assert cfg.turnstile_secret == "from-env"
    assert cfg.production is True


def test_environment_fallbacks(monkeypatch):
    monkeypatch.setenv("MAX_CONCURRENT_AUDITS", "many")
    monkeypatch.setenv("TURNSTILE_SECRET_KEY", "")
    monkeypatch.delenv("SEO_SCOUT_ENV", raising=False)
    cfg = AuditConfig()
    assert cfg.max_concurrent_audits == 2
    assert cfg.turnstile_secret is None
    assert cfg.production is False


def test_blank_secret_is_none():
    assert AuditConfig(turnstile_secret="   ").turnstile_secret is None
