"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tedexplorer.core.config import (
    AppConfig,
    ConfigError,
    load_app_config,
    validate_app_config_file,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "app.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_missing(tmp_path):
    config = load_app_config(tmp_path / "absent.yaml")
    assert config == AppConfig()
    assert config.endpoint.url == "https://publications.europa.eu/webapi/rdf/sparql"
    assert config.endpoint.fallback_on_error is False
    assert config.endpoint.max_attempts == 1
    assert config.search.default_page_size == 20
    assert any(c.code == "DE" for c in config.countries)


def test_env_var_selects_file(tmp_path, monkeypatch):
    path = _write(tmp_path, "owner: team-a\n")
    monkeypatch.setenv("TEDEXPLORER_CONFIG", str(path))
    assert load_app_config().owner == "team-a"


def test_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("TED_SPARQL_URL", "https://mirror.example/sparql")
    monkeypatch.delenv("TEDEXPLORER_OWNER", raising=False)
    path = _write(
        tmp_path,
        "owner: ${TEDEXPLORER_OWNER:-local}\n"
        "endpoint:\n"
        "  url: ${TED_SPARQL_URL}\n"
        "  fallback_on_error: true\n"
        "search:\n"
        "  default_page_size: 50\n",
    )
    config = load_app_config(path)
    assert config.owner == "local"
    assert config.endpoint.url == "https://mirror.example/sparql"
    assert config.endpoint.fallback_on_error is True
    assert config.search.default_page_size == 50


def test_expansion_can_be_disabled(tmp_path):
    path = _write(tmp_path, "owner: ${NOBODY:-x}\n")
    assert load_app_config(path, expand_env=False).owner == "${NOBODY:-x}"


def test_invalid_values(tmp_path):
    path = _write(tmp_path, "endpoint:\n  url: ftp://nope\n  timeout_seconds: 0\n")
    with pytest.raises(ConfigError) as exc_info:
        load_app_config(path)
    assert exc_info.value.path == path
    assert "url" in exc_info.value.details


def test_invalid_yaml(tmp_path):
    path = _write(tmp_path, "endpoint: [unclosed\n")
    with pytest.raises(ConfigError):
        load_app_config(path)


def test_top_level_must_be_mapping(tmp_path):
    path = _write(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError):
        load_app_config(path)


def test_validate_file(tmp_path):
    good = _write(tmp_path, "search:\n  default_page_size: 10\n")
    assert validate_app_config_file(good) == []

    bad = tmp_path / "bad.yaml"
    bad.write_text("search:\n  default_page_size: 0\n", encoding="utf-8")
    errors = validate_app_config_file(bad)
    assert len(errors) == 1
    assert errors[0].startswith("search.default_page_size")

    assert validate_app_config_file(tmp_path / "missing.yaml")


def test_shipped_config_is_valid():
    path = Path(__file__).resolve().parent.parent / "configs" / "app.yaml"
    assert validate_app_config_file(path) == []
