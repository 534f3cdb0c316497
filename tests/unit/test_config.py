"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from blogpub.config import load_config


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    """Keep any config.yaml in the working tree out of these tests."""
    monkeypatch.chdir(tmp_path)


def test_load_config_uses_env_db_url(monkeypatch):
    """BLOGPUB_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("BLOGPUB_DB_URL", "sqlite:///env.db")
    settings = load_config()
    assert settings.db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """BLOGPUB_DB_URL takes precedence over config.yaml db_url."""
    (tmp_path / "config.yaml").write_text("db_url: 'sqlite:///project.db'\n")
    monkeypatch.setenv("BLOGPUB_DB_URL", "sqlite:///override.db")
    settings = load_config()
    assert settings.db_url == "sqlite:///override.db"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the BLOGPUB_DB_URL env var."""
    monkeypatch.setenv("BLOGPUB_DB_URL", "sqlite:///env.db")
    settings = load_config(overrides={"db_url": "sqlite:///cli.db"})
    assert settings.db_url == "sqlite:///cli.db"


def test_load_config_none_override_ignored(monkeypatch):
    """None-valued overrides (unset CLI options) leave the default in place."""
    monkeypatch.delenv("BLOGPUB_OUTPUT_DIR", raising=False)
    settings = load_config(overrides={"output_dir": None})
    assert settings.output_dir == "dist"


def test_load_config_defaults(monkeypatch):
    """Defaults mirror the original site: _posts, 20-word summaries, 6 posts per page."""
    for name in ("DB_URL", "POSTS_DIR", "SUMMARY_LENGTH", "PAGINATE"):
        monkeypatch.delenv(f"BLOGPUB_{name}", raising=False)
    settings = load_config()
    assert settings.db_url == "sqlite:///blogpub.db"
    assert settings.posts_dir == "_posts"
    assert settings.summary_length == 20
    assert settings.paginate == 6


def test_load_config_reads_config_yaml(tmp_path, monkeypatch):
    """Values in config.yaml are applied when no env var overrides them."""
    monkeypatch.delenv("BLOGPUB_BASE_URL", raising=False)
    (tmp_path / "config.yaml").write_text("base_url: https://example.org\nteaser_suffix: -teaser.jpg\n")
    settings = load_config()
    assert settings.base_url == "https://example.org"
    assert settings.teaser_suffix == "-teaser.jpg"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    """A config.yaml that is not a mapping is rejected."""
    (tmp_path / "config.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


def test_load_config_env_paginate_coerced(monkeypatch):
    """BLOGPUB_PAGINATE env var is coerced to int."""
    monkeypatch.setenv("BLOGPUB_PAGINATE", "3")
    assert load_config().paginate == 3


def test_load_config_rejects_zero_paginate(monkeypatch):
    """paginate must be at least 1."""
    monkeypatch.setenv("BLOGPUB_PAGINATE", "0")
    with pytest.raises(ValidationError):
        load_config()


def test_load_config_rejects_unknown_log_level(monkeypatch):
    """log_level is restricted to the standard level names."""
    monkeypatch.setenv("BLOGPUB_LOG_LEVEL", "LOUD")
    with pytest.raises(ValidationError):
        load_config()
