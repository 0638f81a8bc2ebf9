"""
Ingestion Module

The write path from resolved facts to the triple store.

Modules:
    resolution: Deterministic entity identity
    codec: Fact line parsing and Turtle serialization
    diff: Per-entity/per-predicate diff
    audit: ChangeEvent generation and the audit service
    commit: Commit orchestration
"""

from ledger_kg.ingestion.audit import AuditService, generate_change_events
from ledger_kg.ingestion.commit import CommitOrchestrator, CommitPhase
from ledger_kg.ingestion.diff import compute_diff, extract_entity_uris, group_triples_by_entity
from ledger_kg.ingestion.resolution import IdentityContext, resolve_identity

__all__ = [
    "AuditService",
    "CommitOrchestrator",
    "CommitPhase",
    "IdentityContext",
    "compute_diff",
    "extract_entity_uris",
    "generate_change_events",
    "group_triples_by_entity",
    "resolve_identity",
]
