"""Tests for binding-to-result mapping."""

from __future__ import annotations

import pytest

from tedexplorer.core.endpoint.base import QueryExecutionError, QueryPhase
from tedexplorer.core.query.mapping import (
    map_binding,
    map_bindings,
    parse_count,
    trailing_segment,
)
from tests.conftest import notice_binding


def test_full_binding():
    result = map_binding(notice_binding(7, date="2024-03-15T00:00:00Z"), position=1)
    assert result.id == "notice-7"
    assert result.date == "2024-03-15"
    assert result.cpv_code == "90910000"
    assert result.cpv_description == "Cleaning services"
    assert result.country == "DE"
    assert result.country_name == "Germany"
    assert result.type == "notice"
    assert result.uri == "http://data.europa.eu/a4g/resource/notice-7"


def test_empty_binding_defaults():
    result = map_binding({}, position=12)
    assert result.id == "result-12"
    assert result.title == "Untitled Notice"
    assert result.date == "unknown"
    assert result.cpv_code == ""
    assert result.cpv_description == "No description available"
    assert result.country == ""
    assert result.country_name == "Unknown"
    assert result.type == "notice"
    assert result.uri == ""


def test_unknown_type_becomes_notice():
    assert map_binding(notice_binding(1, type="award"), 1).type == "notice"
    assert map_binding(notice_binding(1, type="tender"), 1).type == "tender"
    assert map_binding(notice_binding(1, type="other"), 1).type == "other"


def test_positions_continue_from_offset():
    results = map_bindings([{}, {}], offset=20)
    assert [r.id for r in results] == ["result-21", "result-22"]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("http://example.org/a/b/DE", "DE"),
        ("http://example.org/vocab#ContractNotice", "ContractNotice"),
        ("http://example.org/a/b/", "b"),
        ("72000000", "72000000"),
        (None, ""),
        ("", ""),
    ],
)
def test_trailing_segment(value, expected):
    assert trailing_segment(value) == expected


class TestParseCount:
    def test_value(self):
        assert parse_count([{"total": {"type": "literal", "value": "25"}}]) == 25

    def test_typed_decimal(self):
        assert parse_count([{"total": {"type": "literal", "value": "25.0"}}]) == 25

    def test_empty_is_zero(self):
        assert parse_count([]) == 0
        assert parse_count([{}]) == 0

    def test_non_numeric(self):
        with pytest.raises(QueryExecutionError) as exc_info:
            parse_count([{"total": {"type": "literal", "value": "many"}}], endpoint="x")
        assert exc_info.value.phase is QueryPhase.COUNT
        assert str(exc_info.value).startswith("Count query failed")

    def test_negative(self):
        with pytest.raises(QueryExecutionError):
            parse_count([{"total": {"type": "literal", "value": "-3"}}])
