"""
SPARQL endpoint client using httpx.

Provides async query execution with:
- POSTed query text (application/sparql-query)
- Bounded request timeout surfaced as EndpointTimeout
- Optional retry of transport failures
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import httpx

from tedexplorer.core.fetch.retries import RetryConfig, retry_async
from tedexplorer.core.logging import get_logger

from .base import (
    Endpoint,
    EndpointTimeout,
    QueryExecutionError,
    QueryPhase,
    QueryResult,
    TransportError,
)

if TYPE_CHECKING:
    from tedexplorer.core.config.models import EndpointConfig

logger = get_logger("endpoint")

SPARQL_QUERY_CONTENT_TYPE = "application/sparql-query"
SPARQL_RESULTS_JSON = "application/sparql-results+json"


class SparqlEndpoint(Endpoint):
    """SPARQL endpoint accessed over HTTP.

    Features:
    - Persistent connection pooling
    - Typed errors naming the failing phase
    - Retry with exponential backoff when max_attempts > 1
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        user_agent: str = "TED-Explorer/1.0",
        max_attempts: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the endpoint client.

        Args:
            url: Endpoint URL
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            max_attempts: Attempts per query on transport failure
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._url = url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.headers = {
            "Content-Type": SPARQL_QUERY_CONTENT_TYPE,
            "Accept": SPARQL_RESULTS_JSON,
            "User-Agent": user_agent,
        }
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: "EndpointConfig", transport: httpx.AsyncBaseTransport | None = None) -> "SparqlEndpoint":
        """Build from an EndpointConfig."""
        return cls(
            url=config.url,
            timeout=config.timeout_seconds,
            user_agent=config.user_agent,
            max_attempts=config.max_attempts,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def _post(self, query: str, phase: QueryPhase) -> QueryResult:
        client = await self._ensure_client()
        start = time.perf_counter()

        try:
            response = await client.post(self._url, content=query.encode("utf-8"))
        except httpx.TimeoutException as e:
            raise EndpointTimeout(
                f"{phase.value.capitalize()} query timed out after {self.timeout:g}s",
                phase=phase,
                endpoint=self._url,
                cause=e,
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"{phase.value.capitalize()} query could not reach endpoint: {e}",
                phase=phase,
                endpoint=self._url,
                cause=e,
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000

        if not response.is_success:
            status_text = f"{response.status_code} {response.reason_phrase}".strip()
            raise QueryExecutionError(
                phase,
                status_text,
                endpoint=self._url,
                status_code=response.status_code,
            )

        try:
            return QueryResult.from_json(response.json(), elapsed_ms=elapsed_ms)
        except ValueError as e:
            raise QueryExecutionError(
                phase,
                f"malformed response ({e})",
                endpoint=self._url,
                status_code=response.status_code,
                cause=e,
            ) from e

    async def query(self, query: str, phase: QueryPhase = QueryPhase.DATA) -> QueryResult:
        """Execute a query and return its bindings.

        Args:
            query: SPARQL query text
            phase: Which search request this is, reported in errors

        Returns:
            QueryResult with parsed bindings

        Raises:
            QueryExecutionError: Non-success status or unreadable body
            EndpointTimeout: Request exceeded the timeout
            TransportError: Connection failure
        """
        attempts = 0

        async def attempt() -> QueryResult:
            nonlocal attempts
            attempts += 1
            return await self._post(query, phase)

        logger.debug("%s query:\n%s", phase.value, query, extra={"phase": phase.value})

        result = await retry_async(
            attempt,
            config=RetryConfig(
                max_attempts=self.max_attempts,
                retry_exceptions=(TransportError,),
            ),
        )
        result.retry_count = attempts - 1

        logger.debug(
            "%s query returned %d binding(s) in %.0fms",
            phase.value,
            len(result.bindings),
            result.elapsed_ms,
            extra={"phase": phase.value},
        )
        return result

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
