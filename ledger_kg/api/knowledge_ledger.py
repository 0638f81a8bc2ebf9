"""
KnowledgeLedger - Primary Entry Point

Wraps a triple store with identity resolution, audited commits and
audit-trail queries for any number of tenant/workspace scopes.

Each scope owns two named graphs:
    {graph_base_iri}/tenant/{tenant}/workspace/{workspace}/data
    {graph_base_iri}/tenant/{tenant}/workspace/{workspace}/audit

Example:
    >>> async with KnowledgeLedger() as ledger:
    ...     scope = ledger.scope("acme", "finance")
    ...     result = await ledger.commit(scope, lines, source_document_uri="urn:doc:42")
    ...     page = await ledger.audit_log(scope, change_type="UPDATE")

    # Or with sync API
    >>> ledger = KnowledgeLedger()
    >>> ledger.commit_sync(scope, lines, source_document_uri="urn:doc:42")
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ledger_kg.ingestion.resolution import IdentityContext, resolve_identity
from ledger_kg.types import Scope

if TYPE_CHECKING:
    from ledger_kg.config.settings import KGConfig
    from ledger_kg.ingestion.audit import AuditService
    from ledger_kg.ingestion.commit import CommitOrchestrator
    from ledger_kg.storage.base import StoreClient
    from ledger_kg.types import (
        AuditLogPage,
        AuditResult,
        AuditWriteResult,
        Change,
        ChangeEvent,
        ChangeType,
        CommitResult,
        DiffResult,
        Triple,
    )


class KnowledgeLedger:
    """
    An audited knowledge graph on top of a triple store.

    Args:
        config: Optional configuration. Uses defaults (and environment) if not provided.
        store: Optional store client. Created from config on first use otherwise.
        serialize_commits: Hold an in-process lock per (data graph, source document)
            around each commit. Only protects commits made through this instance.
    """

    def __init__(
        self,
        config: "KGConfig | None" = None,
        store: "StoreClient | None" = None,
        serialize_commits: bool = False,
    ) -> None:
        if config is None:
            from ledger_kg.config import KGConfig
            config = KGConfig()
        self._config = config
        self._store = store
        self._owns_store = store is None
        self._serialize_commits = serialize_commits
        # Entries drop out once no commit holds or waits on the lock
        self._commit_locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

        # Lazy-initialized components
        self._audit: "AuditService | None" = None
        self._orchestrator: "CommitOrchestrator | None" = None
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Create and open the store on first use."""
        if self._initialized:
            return

        if self._store is None:
            from ledger_kg.storage import create_store
            self._store = create_store(self._config)
        await self._store.initialize()

        from ledger_kg.ingestion.audit import AuditService
        from ledger_kg.ingestion.commit import CommitOrchestrator

        self._audit = AuditService(self._store, self._config)
        self._orchestrator = CommitOrchestrator(self._store, self._config, self._audit)
        self._initialized = True

    # === Lifecycle ===

    async def __aenter__(self) -> "KnowledgeLedger":
        await self._ensure_initialized()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the store if this instance created it."""
        if self._store is not None and self._owns_store:
            await self._store.close()
            self._store = None
        self._audit = None
        self._orchestrator = None
        self._initialized = False

    # === Properties ===

    @property
    def config(self) -> "KGConfig":
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def scope(self, tenant_id: str, workspace_id: str) -> Scope:
        """Build a Scope using the configured graph base IRI."""
        return Scope(
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            graph_base_iri=self._config.graph_base_iri,
        )

    # === Identity ===

    def resolve_identity(
        self,
        label: Any,
        entity_type: Any,
        scope: Scope | str | None = None,
        identity_key_values: Mapping[str, Any] | Sequence[Any] | None = None,
        identity_keys: Sequence[str] | None = None,
    ) -> str:
        """Deterministic entity identifier (see ingestion.resolution)."""
        return resolve_identity(label, entity_type, scope, identity_key_values, identity_keys)

    def new_identity_context(
        self,
        scope: Scope | str | None = None,
        identity_keys: Mapping[str, Sequence[str]] | None = None,
    ) -> IdentityContext:
        """Fresh per-document identity registry."""
        return IdentityContext(scope, identity_keys)

    # === Commit ===

    def _commit_lock(self, scope: Scope, source_document_uri: str | None) -> asyncio.Lock:
        key = (scope.data_graph_iri, source_document_uri or "")
        lock = self._commit_locks.get(key)
        if lock is None:
            lock = self._commit_locks[key] = asyncio.Lock()
        return lock

    async def commit(
        self,
        scope: Scope,
        triples: "Iterable[Triple | str]",
        source_document_uri: str | None = None,
    ) -> "CommitResult":
        """
        Audit, replace stale facts and insert new facts.

        Raises:
            EmptyInputError, AuditFailure, DeleteBatchFailure, InsertBatchFailure
        """
        await self._ensure_initialized()
        assert self._orchestrator is not None

        if not self._serialize_commits:
            return await self._orchestrator.commit(scope, triples, source_document_uri)

        async with self._commit_lock(scope, source_document_uri):
            return await self._orchestrator.commit(scope, triples, source_document_uri)

    def commit_sync(
        self,
        scope: Scope,
        triples: "Iterable[Triple | str]",
        source_document_uri: str | None = None,
    ) -> "CommitResult":
        """Sync wrapper for commit."""
        return asyncio.run(self._commit_and_close(scope, triples, source_document_uri))

    async def _commit_and_close(
        self,
        scope: Scope,
        triples: "Iterable[Triple | str]",
        source_document_uri: str | None,
    ) -> "CommitResult":
        # Sessions are bound to the event loop, so a sync call owns its loop
        try:
            return await self.commit(scope, triples, source_document_uri)
        finally:
            await self.close()

    # === Audit ===

    async def pre_commit_audit(
        self,
        scope: Scope,
        triples: "Iterable[Triple | str]",
        source_document_uri: str | None,
    ) -> "AuditResult":
        """Run and record the audit without writing data."""
        await self._ensure_initialized()
        assert self._audit is not None
        return await self._audit.pre_commit_audit(scope, triples, source_document_uri)

    async def preview_changes(
        self,
        scope: Scope,
        triples: "Iterable[Triple | str]",
        source_document_uri: str,
    ) -> "DiffResult":
        """Dry run: the changes a commit would record. Nothing is written."""
        await self._ensure_initialized()
        assert self._audit is not None
        return await self._audit.preview_changes(scope, triples, source_document_uri)

    async def mirror_changes(
        self,
        scope: Scope,
        changes: "Sequence[Change]",
        source_document_uri: str,
    ) -> "AuditWriteResult":
        """Record externally made changes. Failures are returned, not raised."""
        await self._ensure_initialized()
        assert self._audit is not None
        return await self._audit.mirror_change_events(scope, changes, source_document_uri)

    async def entity_history(self, scope: Scope, entity_uri: str) -> "list[ChangeEvent]":
        """Change events for one entity, newest first."""
        await self._ensure_initialized()
        assert self._audit is not None
        return await self._audit.get_entity_change_history(scope, entity_uri)

    async def audit_log(
        self,
        scope: Scope,
        limit: int | None = None,
        offset: int = 0,
        change_type: "ChangeType | str | None" = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> "AuditLogPage":
        """Paginated workspace audit log, newest first."""
        await self._ensure_initialized()
        assert self._audit is not None
        return await self._audit.get_workspace_audit_log(
            scope,
            limit=limit,
            offset=offset,
            change_type=change_type,
            date_from=date_from,
            date_to=date_to,
        )

    def __repr__(self) -> str:
        return f"KnowledgeLedger(backend={self._config.store_backend!r})"
