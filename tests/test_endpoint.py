"""Tests for the SPARQL endpoint client."""

from __future__ import annotations

import httpx
import pytest

from tedexplorer.core.endpoint.base import (
    EndpointTimeout,
    QueryExecutionError,
    QueryPhase,
    TransportError,
)
from tests.conftest import ENDPOINT_URL, notice_binding, sparql_json


async def test_posts_query_with_headers(make_endpoint):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=sparql_json([notice_binding(1)]))

    async with make_endpoint(handler, user_agent="TED-Explorer/1.0") as endpoint:
        result = await endpoint.query("SELECT * WHERE { ?s ?p ?o }")

    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT_URL
    assert request.headers["content-type"] == "application/sparql-query"
    assert request.headers["accept"] == "application/sparql-results+json"
    assert request.headers["user-agent"] == "TED-Explorer/1.0"
    assert request.content == b"SELECT * WHERE { ?s ?p ?o }"
    assert len(result.bindings) == 1
    assert result.retry_count == 0


@pytest.mark.parametrize("phase,prefix", [(QueryPhase.COUNT, "Count"), (QueryPhase.DATA, "Data")])
async def test_error_status_names_phase(make_endpoint, phase, prefix):
    endpoint = make_endpoint(lambda request: httpx.Response(500))

    with pytest.raises(QueryExecutionError) as exc_info:
        await endpoint.query("SELECT", phase)
    await endpoint.close()

    error = exc_info.value
    assert error.phase is phase
    assert error.status_code == 500
    assert str(error) == f"{prefix} query failed: 500 Internal Server Error"


async def test_malformed_body(make_endpoint):
    endpoint = make_endpoint(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(QueryExecutionError) as exc_info:
        await endpoint.query("SELECT", QueryPhase.DATA)
    await endpoint.close()

    assert "malformed response" in str(exc_info.value)


async def test_missing_bindings(make_endpoint):
    endpoint = make_endpoint(lambda request: httpx.Response(200, json={"head": {}}))

    with pytest.raises(QueryExecutionError):
        await endpoint.query("SELECT", QueryPhase.COUNT)
    await endpoint.close()


async def test_timeout(make_endpoint):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    endpoint = make_endpoint(handler, timeout=5)
    with pytest.raises(EndpointTimeout) as exc_info:
        await endpoint.query("SELECT", QueryPhase.COUNT)
    await endpoint.close()

    assert exc_info.value.phase is QueryPhase.COUNT
    assert "5s" in str(exc_info.value)


async def test_connection_failure(make_endpoint):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    endpoint = make_endpoint(handler)
    with pytest.raises(TransportError) as exc_info:
        await endpoint.query("SELECT", QueryPhase.DATA)
    await endpoint.close()

    assert not isinstance(exc_info.value, EndpointTimeout)
    assert exc_info.value.endpoint == ENDPOINT_URL


async def test_no_retry_by_default(make_endpoint):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("refused", request=request)

    endpoint = make_endpoint(handler)
    with pytest.raises(TransportError):
        await endpoint.query("SELECT")
    await endpoint.close()

    assert calls == 1


async def test_retries_transport_failures(make_endpoint, monkeypatch):
    from tenacity import wait_none

    from tedexplorer.core.fetch.retries import RetryConfig

    monkeypatch.setattr(RetryConfig, "wait_strategy", lambda self: wait_none())
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=sparql_json([]))

    endpoint = make_endpoint(handler, max_attempts=3)
    result = await endpoint.query("SELECT")
    await endpoint.close()

    assert calls == 3
    assert result.retry_count == 2


async def test_status_errors_not_retried(make_endpoint):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    endpoint = make_endpoint(handler, max_attempts=3)
    with pytest.raises(QueryExecutionError):
        await endpoint.query("SELECT")
    await endpoint.close()

    assert calls == 1
