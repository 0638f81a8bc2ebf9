"""GraphDB backend (SPARQL 1.1 protocol over aiohttp)."""

from ledger_kg.storage.graphdb.backend import GraphDBStore

__all__ = ["GraphDBStore"]
