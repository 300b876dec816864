"""Query endpoint clients and errors."""

from .base import (
    Binding,
    Endpoint,
    EndpointError,
    EndpointTimeout,
    QueryExecutionError,
    QueryPhase,
    QueryResult,
    TransportError,
)
from .sparql_client import SparqlEndpoint

__all__ = [
    # Base classes
    "Binding",
    "Endpoint",
    "QueryPhase",
    "QueryResult",
    # Errors
    "EndpointError",
    "QueryExecutionError",
    "TransportError",
    "EndpointTimeout",
    # SPARQL over HTTP
    "SparqlEndpoint",
]
