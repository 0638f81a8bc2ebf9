"""
Convenience Functions

One-shot helpers that open a KnowledgeLedger, run one operation and close it.

Example:
    >>> from ledger_kg import commit
    >>> result = await commit(scope, lines, source_document_uri="urn:doc:42")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ledger_kg.api.knowledge_ledger import KnowledgeLedger

if TYPE_CHECKING:
    from ledger_kg.config.settings import KGConfig
    from ledger_kg.storage.base import StoreClient
    from ledger_kg.types import AuditResult, CommitResult, Scope, Triple


async def commit(
    scope: "Scope",
    triples: "Iterable[Triple | str]",
    source_document_uri: str | None = None,
    config: "KGConfig | None" = None,
    store: "StoreClient | None" = None,
) -> "CommitResult":
    """Commit facts with a temporary KnowledgeLedger."""
    async with KnowledgeLedger(config=config, store=store) as ledger:
        return await ledger.commit(scope, triples, source_document_uri)


async def pre_commit_audit(
    scope: "Scope",
    triples: "Iterable[Triple | str]",
    source_document_uri: str | None,
    config: "KGConfig | None" = None,
    store: "StoreClient | None" = None,
) -> "AuditResult":
    """Run the pre-commit audit with a temporary KnowledgeLedger."""
    async with KnowledgeLedger(config=config, store=store) as ledger:
        return await ledger.pre_commit_audit(scope, triples, source_document_uri)
