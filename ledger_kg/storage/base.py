"""
Abstract Store Interface

Defines the contract for the triple store the commit pipeline runs against.
The store is reached only through a generic query / update / insert API;
every call is one blocking request/response that the caller awaits before
issuing the next batch.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

# SPARQL JSON result row: variable -> {"value", "type", "datatype"?, "xml:lang"?}
Binding = dict[str, dict[str, Any]]


class StoreResponse(BaseModel):
    """Outcome of a mutation request."""

    ok: bool
    status: int
    body: str | None = None


class StoreClient(ABC):
    """
    Abstract interface for triple stores.

    Scope:
        query() and update() carry their target graphs in the SPARQL text
        (explicit GRAPH clauses). insert() takes the target graph IRI.

    Lifecycle:
        store = GraphDBStore(url, repository)
        await store.initialize()
        # ... operations ...
        await store.close()

    Or using context manager:
        async with LocalStore(path) as store:
            await store.insert(graph_iri, payload)
    """

    async def initialize(self) -> None:
        """Open connections / load state."""

    async def close(self) -> None:
        """Release resources."""

    async def __aenter__(self) -> "StoreClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @abstractmethod
    async def query(self, query: str) -> list[Binding]:
        """Run a SELECT query. Returns result rows; raises StoreError on failure."""
        ...

    @abstractmethod
    async def update(self, update: str) -> StoreResponse:
        """Run a SPARQL UPDATE (used for deletions)."""
        ...

    @abstractmethod
    async def insert(
        self,
        graph_iri: str,
        payload: str,
        content_type: str = "text/turtle",
    ) -> StoreResponse:
        """Bulk-insert a serialized triple batch into a named graph."""
        ...
