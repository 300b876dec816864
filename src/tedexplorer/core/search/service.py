"""
Search execution against a query endpoint.

A search is two sequential requests: a count query, then (when the count
is non-zero) a paged data query. Endpoint failures either propagate or,
with ``fallback_on_error``, are replaced by a labelled synthetic page.
"""

from __future__ import annotations

from typing import Any

import httpx

from tedexplorer.core.config.models import AppConfig, SearchConfig
from tedexplorer.core.endpoint.base import Endpoint, EndpointError, QueryPhase
from tedexplorer.core.endpoint.sparql_client import SparqlEndpoint
from tedexplorer.core.logging import get_contextual_logger, get_logger
from tedexplorer.core.query.builder import build_count_query, build_data_query
from tedexplorer.core.query.mapping import map_bindings, parse_count
from tedexplorer.core.query.models import SearchFilters, SearchResponse, page_window, total_pages

from .fallback import synthetic_response

logger = get_logger("search")


class SearchService:
    """Runs filtered searches with the count+data protocol."""

    def __init__(
        self,
        endpoint: Endpoint,
        config: SearchConfig | None = None,
        fallback_on_error: bool = False,
    ):
        self.endpoint = endpoint
        self.config = config or SearchConfig()
        self.fallback_on_error = fallback_on_error
        self.log = get_contextual_logger("search", endpoint=endpoint.url)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SearchService":
        """Build a service with a SPARQL endpoint described by ``config``."""
        endpoint = SparqlEndpoint.from_config(config.endpoint, transport=transport)
        return cls(
            endpoint,
            config=config.search,
            fallback_on_error=config.endpoint.fallback_on_error,
        )

    def resolve_paging(self, filters: SearchFilters) -> tuple[int, int]:
        """Page and page size, with defaults applied."""
        return filters.page or 1, filters.page_size or self.config.default_page_size

    async def search(self, filters: SearchFilters) -> SearchResponse:
        """Run one search.

        Raises:
            QueryExecutionError: Count or data request failed (fallback off)
            TransportError: Endpoint unreachable or timed out (fallback off)
        """
        page, page_size = self.resolve_paging(filters)
        self.log.info(
            "Searching page %d (size %d) with %s",
            page,
            page_size,
            ", ".join(filters.active_fields()) or "no filters",
            extra={"page": page},
        )

        try:
            return await self._execute(filters, page, page_size)
        except EndpointError as e:
            if not self.fallback_on_error:
                raise
            phase = getattr(e, "phase", None)
            extra: dict[str, Any] = {"page": page}
            if phase is not None:
                extra["phase"] = phase.value
            self.log.warning("Endpoint failed, serving synthetic results: %s", e, extra=extra)
            return synthetic_response(
                filters,
                page=page,
                page_size=page_size,
                total=self.config.fallback_total,
                reason=str(e),
            )

    async def _execute(self, filters: SearchFilters, page: int, page_size: int) -> SearchResponse:
        count_result = await self.endpoint.query(build_count_query(filters), QueryPhase.COUNT)
        total = parse_count(count_result.bindings, endpoint=self.endpoint.url)

        results = []
        if total > 0:
            _, offset = page_window(page, page_size)
            data_result = await self.endpoint.query(
                build_data_query(filters, page, page_size),
                QueryPhase.DATA,
            )
            results = map_bindings(data_result.bindings, offset=offset)

        self.log.info("Found %d result(s), %d on page %d", total, len(results), page, extra={"page": page})

        return SearchResponse(
            results=tuple(results),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        )

    async def collect_all(self, filters: SearchFilters) -> SearchResponse:
        """Fetch every match in one page, capped at ``max_export_rows``."""
        first = await self.search(filters.with_page(1))
        if first.total <= len(first.results):
            return first

        size = min(first.total, self.config.max_export_rows)
        if size < first.total:
            logger.warning(
                "Export capped at %d of %d results",
                size,
                first.total,
            )
        return await self.search(filters.with_page(1, page_size=size))

    async def close(self) -> None:
        await self.endpoint.close()

    async def __aenter__(self) -> "SearchService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class SearchSession:
    """Sequence of searches where only the newest response is kept.

    Each call takes a generation number. A response or error that arrives
    after a newer call started is discarded and ``None`` is returned.
    """

    def __init__(self, service: SearchService):
        self.service = service
        self.current: SearchResponse | None = None
        self.filters: SearchFilters | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def search(self, filters: SearchFilters) -> SearchResponse | None:
        self._generation += 1
        token = self._generation
        log = self.service.log.with_context(session=token)

        try:
            response = await self.service.search(filters)
        except EndpointError as e:
            if token != self._generation:
                log.debug("Discarding failure of superseded search: %s", e)
                return None
            raise

        if token != self._generation:
            log.debug("Discarding response of superseded search (newest is %d)", self._generation)
            return None

        self.current = response
        self.filters = filters
        return response

    async def goto_page(self, page: int) -> SearchResponse | None:
        """Re-run the last search on another page."""
        if self.filters is None:
            raise RuntimeError("No search has completed in this session")
        return await self.search(self.filters.with_page(page))


def get_metadata(config: AppConfig) -> dict[str, list[dict[str, str]]]:
    """CPV codes and countries offered as filter choices."""
    return {
        "cpv_codes": [c.model_dump() for c in config.cpv_codes],
        "countries": [c.model_dump() for c in config.countries],
    }
