"""Tests for search execution, fallback and session ordering."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from tedexplorer.core.config.models import SearchConfig
from tedexplorer.core.endpoint.base import (
    Endpoint,
    QueryExecutionError,
    QueryPhase,
    QueryResult,
)
from tedexplorer.core.query.models import SearchFilters
from tedexplorer.core.search.fallback import synthetic_response
from tedexplorer.core.search.service import SearchService, SearchSession
from tests.conftest import notice_binding


@pytest.fixture
def service(fake_sparql, make_endpoint):
    return SearchService(make_endpoint(fake_sparql))


async def test_second_page(service, fake_sparql):
    fake_sparql.total = 25
    filters = SearchFilters(keywords="hospital", country="DE", page=2, page_size=10)

    response = await service.search(filters)
    await service.close()

    assert response.total == 25
    assert response.page == 2
    assert response.page_size == 10
    assert response.total_pages == 3
    assert len(response.results) == 10
    assert response.results[0].id == "notice-11"
    assert not response.is_fallback

    assert len(fake_sparql.queries) == 2
    assert "COUNT(" in fake_sparql.queries[0]
    assert fake_sparql.data_queries[0].endswith("LIMIT 10 OFFSET 10")


async def test_last_page_is_partial(service, fake_sparql):
    fake_sparql.total = 25
    response = await service.search(SearchFilters(page=3, page_size=10))
    await service.close()

    assert len(response.results) == 5
    assert not response.has_next


async def test_default_page_size(fake_sparql, make_endpoint):
    fake_sparql.total = 100
    service = SearchService(make_endpoint(fake_sparql), config=SearchConfig(default_page_size=20))

    response = await service.search(SearchFilters())
    await service.close()

    assert response.page == 1
    assert response.page_size == 20
    assert response.total_pages == 5
    assert fake_sparql.data_queries[0].endswith("LIMIT 20 OFFSET 0")


async def test_zero_count_skips_data_query(service, fake_sparql):
    fake_sparql.total = 0
    response = await service.search(SearchFilters(keywords="nothing"))
    await service.close()

    assert response.total == 0
    assert response.total_pages == 0
    assert response.results == ()
    assert len(fake_sparql.queries) == 1


async def test_count_failure(service, fake_sparql):
    fake_sparql.count_status = 500

    with pytest.raises(QueryExecutionError) as exc_info:
        await service.search(SearchFilters(keywords="hospital"))
    await service.close()

    assert exc_info.value.phase is QueryPhase.COUNT
    assert str(exc_info.value).startswith("Count query failed: 500")
    assert fake_sparql.data_queries == []


async def test_data_failure(service, fake_sparql):
    fake_sparql.total = 5
    fake_sparql.data_status = 502

    with pytest.raises(QueryExecutionError) as exc_info:
        await service.search(SearchFilters())
    await service.close()

    assert exc_info.value.phase is QueryPhase.DATA


class TestFallback:
    async def test_labelled_and_matches_filters(self, fake_sparql, make_endpoint):
        fake_sparql.count_status = 503
        service = SearchService(make_endpoint(fake_sparql), fallback_on_error=True)
        filters = SearchFilters(
            keywords="hospital",
            type="tender",
            country="DE",
            cpv_code="33",
            date_from=date(2024, 1, 1),
            date_to=date(2024, 3, 31),
            page=2,
            page_size=10,
        )

        response = await service.search(filters)
        await service.close()

        assert response.is_fallback
        assert "Count query failed" in response.fallback_reason
        assert response.total == 150
        assert response.total_pages == 15
        assert len(response.results) == 10
        for result in response.results:
            assert "hospital" in result.title.lower()
            assert result.type == "tender"
            assert result.country == "DE"
            assert result.cpv_code.startswith("33")
            assert "2024-01-01" <= result.date <= "2024-03-31"

    async def test_deterministic(self):
        filters = SearchFilters(keywords="bridge", country="FR")
        first = synthetic_response(filters, page=3, page_size=20, total=150, reason="down")
        second = synthetic_response(filters, page=3, page_size=20, total=150, reason="down")
        assert first.results == second.results
        assert first.results[0].id == "mock-41"

    async def test_unknown_country_and_cpv_still_match(self):
        filters = SearchFilters(country="PL", cpv_code="909")
        response = synthetic_response(filters, page=1, page_size=5, total=150, reason="down")
        for result in response.results:
            assert result.country == "PL"
            assert result.cpv_code.startswith("909")

    async def test_last_fallback_page(self):
        response = synthetic_response(SearchFilters(), page=8, page_size=20, total=150, reason="down")
        assert len(response.results) == 10

    async def test_off_by_default(self, fake_sparql, make_endpoint):
        fake_sparql.count_status = 503
        service = SearchService(make_endpoint(fake_sparql))
        with pytest.raises(QueryExecutionError):
            await service.search(SearchFilters())
        await service.close()


class TestCollectAll:
    async def test_fetches_everything(self, service, fake_sparql):
        fake_sparql.total = 25
        response = await service.collect_all(SearchFilters(keywords="hospital", page=2, page_size=10))
        await service.close()

        assert response.total == 25
        assert len(response.results) == 25
        assert fake_sparql.data_queries[-1].endswith("LIMIT 25 OFFSET 0")

    async def test_single_page_needs_no_second_search(self, service, fake_sparql):
        fake_sparql.total = 7
        response = await service.collect_all(SearchFilters())
        await service.close()

        assert len(response.results) == 7
        assert len(fake_sparql.queries) == 2

    async def test_capped(self, fake_sparql, make_endpoint):
        fake_sparql.total = 50
        service = SearchService(
            make_endpoint(fake_sparql),
            config=SearchConfig(default_page_size=10, max_export_rows=30),
        )
        response = await service.collect_all(SearchFilters())
        await service.close()

        assert len(response.results) == 30
        assert fake_sparql.data_queries[-1].endswith("LIMIT 30 OFFSET 0")


# =============================================================================
# Session ordering
# =============================================================================


class GatedEndpoint(Endpoint):
    """In-memory endpoint that holds queries mentioning ``held`` until released."""

    def __init__(self, held: str = "slow", fail_held: bool = False):
        self.held = held
        self.fail_held = fail_held
        self.gate = asyncio.Event()

    @property
    def url(self) -> str:
        return "memory://gated"

    async def query(self, query: str, phase: QueryPhase = QueryPhase.DATA) -> QueryResult:
        if self.held in query:
            await self.gate.wait()
            if self.fail_held:
                raise QueryExecutionError(phase, "500 Internal Server Error", endpoint=self.url)
        if phase is QueryPhase.COUNT:
            return QueryResult(variables=["total"], bindings=[{"total": {"type": "literal", "value": "3"}}])
        marker = "slow" if self.held in query else "fast"
        return QueryResult(
            variables=[],
            bindings=[notice_binding(n, title=f"{marker} {n}") for n in range(1, 4)],
        )


class TestSearchSession:
    async def test_stale_response_discarded(self):
        endpoint = GatedEndpoint()
        session = SearchSession(SearchService(endpoint))

        slow = asyncio.create_task(session.search(SearchFilters(keywords="slow")))
        await asyncio.sleep(0)
        fast = await session.search(SearchFilters(keywords="fast"))

        endpoint.gate.set()
        assert await slow is None

        assert fast is not None
        assert session.current is fast
        assert session.filters.keywords == "fast"
        assert all(r.title.startswith("fast") for r in session.current.results)

    async def test_stale_error_discarded(self):
        endpoint = GatedEndpoint(fail_held=True)
        session = SearchSession(SearchService(endpoint))

        slow = asyncio.create_task(session.search(SearchFilters(keywords="slow")))
        await asyncio.sleep(0)
        fast = await session.search(SearchFilters(keywords="fast"))

        endpoint.gate.set()
        assert await slow is None
        assert session.current is fast

    async def test_current_error_propagates(self):
        endpoint = GatedEndpoint(fail_held=True)
        endpoint.gate.set()
        session = SearchSession(SearchService(endpoint))

        with pytest.raises(QueryExecutionError):
            await session.search(SearchFilters(keywords="slow"))
        assert session.current is None

    async def test_goto_page(self):
        session = SearchSession(SearchService(GatedEndpoint()))

        with pytest.raises(RuntimeError):
            await session.goto_page(2)

        await session.search(SearchFilters(keywords="fast", page_size=1))
        response = await session.goto_page(2)

        assert response.page == 2
        assert response.page_size == 1
        assert session.generation == 2
