"""Tests de la configuration client TOML."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from actionculture.core.config import (
    DEFAULT_BASE_URL,
    ApiConfig,
    load_api_config,
    read_toml,
    save_api_config,
    with_token,
)


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_api_config(tmp_path / "absent.toml") == ApiConfig()
    assert load_api_config(None).base_url == DEFAULT_BASE_URL


def test_load_reads_api_table_and_strips_trailing_slash(tmp_path: Path) -> None:
    path = tmp_path / "actionculture.toml"
    path.write_text(
        '[api]\nbase_url = "https://culture.example.dz/api/"\ntimeout_s = 5\ndefault_page_size = 24\n',
        encoding="utf-8",
    )

    config = load_api_config(path)

    assert config.base_url == "https://culture.example.dz/api"
    assert config.timeout_s == 5
    assert config.default_page_size == 24


def test_unknown_keys_are_ignored_with_warning(tmp_path: Path, caplog) -> None:
    path = tmp_path / "actionculture.toml"
    path.write_text('[api]\nbase_url = "http://x/api"\nretries = 3\n', encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="actionculture.core.config"):
        config = load_api_config(path)

    assert config.base_url == "http://x/api"
    assert any("retries" in rec.message for rec in caplog.records)


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "actionculture.toml"
    path.write_text("[api]\ntimeout_s = 0\n", encoding="utf-8")

    with pytest.raises(ValueError, match="timeout_s"):
        load_api_config(path)
    with pytest.raises(ValueError):
        ApiConfig(base_url="  ")
    with pytest.raises(ValueError):
        ApiConfig(cache_ttl_s=-1)


def test_save_never_writes_token(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "actionculture.toml"
    config = with_token(ApiConfig(base_url="http://serveur/api", cache_ttl_s=0), "secret.jwt.token")

    save_api_config(path, config)

    raw = path.read_text(encoding="utf-8")
    assert "secret" not in raw
    data = read_toml(path)["api"]
    assert data["base_url"] == "http://serveur/api"
    assert data["cache_ttl_s"] == 0
    assert load_api_config(path) == ApiConfig(base_url="http://serveur/api", cache_ttl_s=0)
