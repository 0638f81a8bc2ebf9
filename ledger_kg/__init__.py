"""
LedgerKG - Audited Knowledge Graph Commits

Deterministic entity identity, fact diffing and an append-only audit trail
for tenant/workspace scoped RDF triple stores.

Example:
    >>> from ledger_kg import KnowledgeLedger
    >>> async with KnowledgeLedger() as ledger:
    ...     scope = ledger.scope("acme", "finance")
    ...     await ledger.commit(scope, lines, source_document_uri="urn:doc:42")
    ...     history = await ledger.entity_history(scope, entity_uri)

Main Classes:
    KnowledgeLedger: Primary entry point for all operations
    KGConfig: Configuration management
"""

__version__ = "0.1.0"

# Public API - lazy imports so the identity/codec helpers load without the store stack
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "KnowledgeLedger":
        from ledger_kg.api.knowledge_ledger import KnowledgeLedger
        return KnowledgeLedger

    if name == "KGConfig":
        from ledger_kg.config.settings import KGConfig
        return KGConfig

    # Convenience functions
    if name in ("commit", "pre_commit_audit"):
        from ledger_kg.api import convenience
        return getattr(convenience, name)

    if name == "resolve_identity":
        from ledger_kg.ingestion.resolution import resolve_identity
        return resolve_identity

    # Types
    if name in ("Scope", "Triple", "UriRef", "Literal", "Change", "ChangeType", "CommitResult"):
        from ledger_kg import types
        return getattr(types, name)

    raise AttributeError(f"module 'ledger_kg' has no attribute {name!r}")


__all__ = [
    # Main classes
    "KnowledgeLedger",
    "KGConfig",

    # Convenience functions
    "commit",
    "pre_commit_audit",
    "resolve_identity",

    # Types
    "Scope",
    "Triple",
    "UriRef",
    "Literal",
    "Change",
    "ChangeType",
    "CommitResult",

    # Version
    "__version__",
]
