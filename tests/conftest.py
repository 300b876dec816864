"""Shared fixtures: a scripted SPARQL endpoint and an in-memory database."""

from __future__ import annotations

import re
from typing import Callable

import httpx
import pytest
from sqlalchemy.orm import Session

from tedexplorer.core.endpoint.sparql_client import SparqlEndpoint
from tedexplorer.persistence.db import create_db_engine
from tedexplorer.persistence.models import Base

ENDPOINT_URL = "https://sparql.test/sparql"

_LIMIT_OFFSET = re.compile(r"LIMIT (\d+) OFFSET (\d+)\s*$")


def notice_binding(number: int, **overrides: str) -> dict:
    """A data-query solution for notice ``number``."""
    values = {
        "notice": f"http://data.europa.eu/a4g/resource/notice-{number}",
        "title": f"Hospital cleaning services {number}",
        "date": "2024-03-15",
        "cpvCode": "http://data.europa.eu/cpv/cpv/90910000",
        "cpvDescription": "Cleaning services",
        "country": "http://publications.europa.eu/resource/authority/country/DE",
        "countryName": "Germany",
        "type": "notice",
    }
    values.update(overrides)
    return {name: {"type": "literal", "value": value} for name, value in values.items() if value is not None}


def sparql_json(bindings: list[dict], variables: list[str] | None = None) -> dict:
    return {
        "head": {"vars": variables or sorted({k for b in bindings for k in b})},
        "results": {"bindings": bindings},
    }


class FakeSparql:
    """Answers count and data queries from a fixed number of notices.

    Every received request is kept in ``requests`` and its body in ``queries``.
    Set ``count_status`` or ``data_status`` to make that phase fail.
    """

    def __init__(self, total: int = 0):
        self.total = total
        self.count_status = 200
        self.data_status = 200
        self.requests: list[httpx.Request] = []
        self.queries: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        query = request.content.decode("utf-8")
        self.requests.append(request)
        self.queries.append(query)

        if "COUNT(" in query:
            if self.count_status != 200:
                return httpx.Response(self.count_status)
            binding = {"total": {"type": "literal", "value": str(self.total)}}
            return httpx.Response(200, json=sparql_json([binding], ["total"]))

        if self.data_status != 200:
            return httpx.Response(self.data_status)
        match = _LIMIT_OFFSET.search(query)
        limit, offset = (int(match.group(1)), int(match.group(2))) if match else (self.total, 0)
        numbers = range(offset + 1, min(offset + limit, self.total) + 1)
        return httpx.Response(200, json=sparql_json([notice_binding(n) for n in numbers]))

    @property
    def count_queries(self) -> list[str]:
        return [q for q in self.queries if "COUNT(" in q]

    @property
    def data_queries(self) -> list[str]:
        return [q for q in self.queries if "COUNT(" not in q]


@pytest.fixture
def fake_sparql() -> FakeSparql:
    return FakeSparql()


@pytest.fixture
def make_endpoint() -> Callable[..., SparqlEndpoint]:
    """Build a SparqlEndpoint whose requests go to ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> SparqlEndpoint:
        return SparqlEndpoint(ENDPOINT_URL, transport=httpx.MockTransport(handler), **kwargs)

    return _make


@pytest.fixture
def session():
    """Session bound to a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as db_session:
        yield db_session
    engine.dispose()
