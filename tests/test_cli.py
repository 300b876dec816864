"""Tests for the command-line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from tedexplorer import __version__
from tedexplorer.cli.main import app
from tedexplorer.persistence.db import dispose_engine

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TEDEXPLORER_CONFIG", raising=False)
    yield
    dispose_engine()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_query_preview():
    result = runner.invoke(app, ["search", "query", "-k", "hospital", "-c", "de", "-p", "2", "-n", "10"])
    assert result.exit_code == 0
    assert 'LCASE("hospital")' in result.stdout
    assert 'IN ("DE", "DEU"))' in result.stdout
    assert result.stdout.rstrip().endswith("LIMIT 10 OFFSET 10")


def test_count_query_preview():
    result = runner.invoke(app, ["search", "query", "--cpv", "72", "--count"])
    assert result.exit_code == 0
    assert "COUNT(*)" in result.stdout
    assert "SELECT DISTINCT ?notice" in result.stdout


def test_query_preview_date_range():
    result = runner.invoke(app, ["search", "query", "--from", "2024-01-01", "--to", "2024-03-31"])
    assert result.exit_code == 0
    assert 'FILTER(?date >= "2024-01-01"^^xsd:date)' in result.stdout
    assert 'FILTER(?date <= "2024-03-31"^^xsd:date)' in result.stdout


def test_query_preview_rejects_inverted_range():
    result = runner.invoke(app, ["search", "query", "--from", "2024-03-31", "--to", "2024-01-01"])
    assert result.exit_code == 1


def test_invalid_filter_exits():
    result = runner.invoke(app, ["search", "query", "--cpv", "not-a-code"])
    assert result.exit_code == 1


def test_validate_config(tmp_path):
    good = tmp_path / "good.yaml"
    good.write_text("owner: me\n", encoding="utf-8")
    assert runner.invoke(app, ["validate-config", str(good)]).exit_code == 0

    bad = tmp_path / "bad.yaml"
    bad.write_text("owner: ''\n", encoding="utf-8")
    assert runner.invoke(app, ["validate-config", str(bad)]).exit_code == 1


def test_init_writes_config_and_database(tmp_path):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "configs" / "app.yaml").exists()
    assert (tmp_path / "data" / "tedexplorer.db").exists()
