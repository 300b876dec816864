"""
Endpoint base classes and data structures.

Defines the query result shape shared by endpoint clients and the
error kinds raised when a query cannot be executed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# A single solution: variable name -> {"type": ..., "value": ...}
Binding = dict[str, dict[str, Any]]


class QueryPhase(str, Enum):
    """Which request of a search failed."""

    COUNT = "count"
    DATA = "data"


@dataclass
class QueryResult:
    """Parsed SPARQL JSON results."""

    variables: list[str]
    bindings: list[Binding]

    # Timing
    elapsed_ms: float = 0.0
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    retry_count: int = 0

    @classmethod
    def from_json(cls, payload: Any, **kwargs: Any) -> "QueryResult":
        """Build from a ``application/sparql-results+json`` document.

        Raises:
            ValueError: If the document lacks a results.bindings list
        """
        if not isinstance(payload, dict):
            raise ValueError("SPARQL response is not a JSON object")
        results = payload.get("results")
        if not isinstance(results, dict) or not isinstance(results.get("bindings"), list):
            raise ValueError("SPARQL response has no results.bindings list")
        head = payload.get("head") or {}
        return cls(
            variables=list(head.get("vars") or []),
            bindings=[b for b in results["bindings"] if isinstance(b, dict)],
            **kwargs,
        )


class Endpoint(ABC):
    """Abstract query endpoint.

    Implementations execute query text and return its bindings.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Endpoint location, used for logging and error context."""

    @abstractmethod
    async def query(self, query: str, phase: QueryPhase = QueryPhase.DATA) -> QueryResult:
        """Execute a query.

        Args:
            query: SPARQL query text
            phase: Which search request this is, reported in errors

        Raises:
            EndpointError: On unrecoverable failure
        """

    async def close(self) -> None:
        """Release transport resources."""

    async def __aenter__(self) -> "Endpoint":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


# =============================================================================
# Errors
# =============================================================================


class EndpointError(Exception):
    """Base exception for endpoint errors."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.cause = cause


class QueryExecutionError(EndpointError):
    """Endpoint answered, but not with a usable result."""

    def __init__(
        self,
        phase: QueryPhase | str,
        status_text: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        self.phase = QueryPhase(phase)
        self.status_text = status_text
        super().__init__(
            f"{self.phase.value.capitalize()} query failed: {status_text}",
            endpoint=endpoint,
            status_code=status_code,
            cause=cause,
        )


class TransportError(EndpointError):
    """Endpoint could not be reached."""

    def __init__(
        self,
        message: str,
        phase: QueryPhase | str | None = None,
        endpoint: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, endpoint=endpoint, cause=cause)
        self.phase = QueryPhase(phase) if phase is not None else None


class EndpointTimeout(TransportError):
    """Request exceeded the configured timeout."""
