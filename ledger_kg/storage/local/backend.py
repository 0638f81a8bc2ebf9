"""
Local Store Backend

Embedded rdflib Dataset for development and tests. Optionally persisted to a
single TriG file; writes to the file are serialized with a file lock.

Literals keep the exact lexical form they were written with ("007" stays
"007", "...Z" stays "...Z"). rdflib normalizes typed literals on parse by
default, which would make every re-commit look like an UPDATE, so parsing
runs with normalization switched off.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import rdflib
from filelock import FileLock
from rdflib import BNode, Dataset, Literal, URIRef
from rdflib.query import Result

from ledger_kg.config import KGConfig
from ledger_kg.errors import StoreError
from ledger_kg.storage.base import Binding, StoreClient, StoreResponse

logger = logging.getLogger(__name__)

_RDF_FORMATS = {
    "text/turtle": "turtle",
    "application/n-triples": "nt",
    "application/trig": "trig",
}

# NORMALIZE_LITERALS is process-global in rdflib
_NORMALIZE_GUARD = threading.Lock()


@contextmanager
def _lexical_literals() -> Iterator[None]:
    """Parse literals without rewriting their lexical form."""
    with _NORMALIZE_GUARD:
        previous = rdflib.NORMALIZE_LITERALS
        rdflib.NORMALIZE_LITERALS = False
        try:
            yield
        finally:
            rdflib.NORMALIZE_LITERALS = previous


def _binding(term: Any) -> dict[str, Any]:
    """rdflib term -> SPARQL JSON result binding."""
    if isinstance(term, URIRef):
        return {"type": "uri", "value": str(term)}
    if isinstance(term, BNode):
        return {"type": "bnode", "value": str(term)}
    if isinstance(term, Literal):
        binding: dict[str, Any] = {"type": "literal", "value": str(term)}
        if term.datatype is not None:
            binding["datatype"] = str(term.datatype)
        if term.language:
            binding["xml:lang"] = term.language
        return binding
    return {"type": "literal", "value": str(term)}


class LocalStore(StoreClient):
    """
    In-process triple store.

    Without a path the data lives only in memory. With a path the dataset is
    loaded on initialize() and written back after every mutation.

    Mutations that rdflib rejects come back as a 400 StoreResponse, the same
    shape a remote store returns for a bad request.
    """

    def __init__(self, path: Path | str | None = None):
        self._path = Path(path) if path is not None else None
        self._lock = (
            FileLock(self._path.with_name(self._path.name + ".lock"), timeout=30)
            if self._path is not None
            else None
        )
        self._dataset = Dataset()
        self._mutex = asyncio.Lock()
        self._initialized = False

    @classmethod
    def from_config(cls, config: KGConfig) -> "LocalStore":
        return cls(config.local_store_path)

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    async def initialize(self) -> None:
        if self._initialized:
            return
        if self._path is not None and self._path.exists():
            await asyncio.to_thread(self._load)
            logger.info(f"Loaded local store from {self._path}")
        self._initialized = True

    def _load(self) -> None:
        assert self._path is not None and self._lock is not None
        with self._lock, _lexical_literals():
            self._dataset.parse(str(self._path), format="trig")

    def _persist(self) -> None:
        if self._path is None or self._lock is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._dataset.serialize(destination=str(self._path), format="trig")

    async def query(self, query: str) -> list[Binding]:
        await self.initialize()

        def _run() -> list[Binding]:
            result: Result = self._dataset.query(query)
            rows = []
            for row in result:
                rows.append(
                    {
                        name: _binding(term)
                        for name, term in row.asdict().items()
                        if term is not None
                    }
                )
            return rows

        async with self._mutex:
            try:
                return await asyncio.to_thread(_run)
            except Exception as e:
                raise StoreError(f"Local query failed: {e}") from e

    async def update(self, update: str) -> StoreResponse:
        await self.initialize()

        def _run() -> None:
            with _lexical_literals():
                self._dataset.update(update)
            self._persist()

        async with self._mutex:
            try:
                await asyncio.to_thread(_run)
            except Exception as e:
                logger.warning(f"Local update rejected: {e}")
                return StoreResponse(ok=False, status=400, body=str(e))
        return StoreResponse(ok=True, status=204)

    async def insert(
        self,
        graph_iri: str,
        payload: str,
        content_type: str = "text/turtle",
    ) -> StoreResponse:
        await self.initialize()
        fmt = _RDF_FORMATS.get(content_type)
        if fmt is None:
            return StoreResponse(
                ok=False, status=415, body=f"Unsupported content type: {content_type}"
            )

        def _run() -> None:
            # Parse into a scratch graph first so a bad payload leaves no partial writes
            with _lexical_literals():
                staged = Dataset(default_union=True)
                staged.parse(data=payload, format=fmt)
            target = self._dataset.graph(URIRef(graph_iri))
            for triple in staged:
                target.add(triple)
            self._persist()

        async with self._mutex:
            try:
                await asyncio.to_thread(_run)
            except Exception as e:
                logger.warning(f"Local insert into {graph_iri} rejected: {e}")
                return StoreResponse(ok=False, status=400, body=str(e))
        return StoreResponse(ok=True, status=204)

    def triple_count(self, graph_iri: str) -> int:
        """Number of triples in a named graph."""
        return len(self._dataset.graph(URIRef(graph_iri)))
