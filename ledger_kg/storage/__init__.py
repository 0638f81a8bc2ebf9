"""
Storage Module

Triple store clients used by the audit and commit pipeline.

Modules:
    base: StoreClient abstract interface and StoreResponse
    sparql: Query and update builders
    graphdb: GraphDB / RDF4J backend over HTTP
    local: Embedded rdflib backend
"""

from ledger_kg.config import KGConfig
from ledger_kg.storage.base import Binding, StoreClient, StoreResponse
from ledger_kg.storage.graphdb import GraphDBStore
from ledger_kg.storage.local import LocalStore


def create_store(config: KGConfig) -> StoreClient:
    """Build the store client selected by config.store_backend."""
    if config.store_backend == "local":
        return LocalStore.from_config(config)
    return GraphDBStore.from_config(config)


__all__ = [
    "Binding",
    "StoreClient",
    "StoreResponse",
    "GraphDBStore",
    "LocalStore",
    "create_store",
]
