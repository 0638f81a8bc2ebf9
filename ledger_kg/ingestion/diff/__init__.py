"""
Diff Engine

Per-entity, per-predicate comparison of stored vs. incoming facts.

Modules:
    engine: compute_diff, entity grouping and candidate-entity extraction

Noise Suppression:
    System-managed predicates (type, source document, row index,
    last-updated-by/at, label) never produce changes.
"""

from ledger_kg.ingestion.diff.engine import (
    compute_diff,
    extract_entity_uris,
    group_triples_by_entity,
)
from ledger_kg.namespaces import SKIP_PREDICATES

__all__ = [
    "compute_diff",
    "extract_entity_uris",
    "group_triples_by_entity",
    "SKIP_PREDICATES",
]
