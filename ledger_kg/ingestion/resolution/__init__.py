"""
Entity Identity Resolution

Deterministic identifiers so that re-ingesting a document never creates
duplicate entities.

Modules:
    identity: Identity resolver, normalization, natural-key helpers and the
        per-document IdentityContext

Key Principle: Same input, same identifier
    resolve_identity() is pure: no randomness, no clock, no I/O.
"""

from ledger_kg.ingestion.resolution.identity import (
    IdentityContext,
    build_entity_uri,
    composite_identity,
    concept_id,
    detect_primary_key_column,
    identity_hash,
    identity_keys_for_type,
    is_same_entity,
    normalize_for_matching,
    normalize_label,
    normalize_type,
    parse_entity_uri,
    resolve_identity,
)

__all__ = [
    "IdentityContext",
    "resolve_identity",
    "identity_hash",
    "composite_identity",
    "concept_id",
    "normalize_label",
    "normalize_type",
    "normalize_for_matching",
    "parse_entity_uri",
    "is_same_entity",
    "identity_keys_for_type",
    "detect_primary_key_column",
    "build_entity_uri",
]
