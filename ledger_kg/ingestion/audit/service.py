"""
Audit Service

Store-backed audit operations around the diff engine:

    pre_commit_audit      Diff incoming facts against stored facts and record
                          ChangeEvents in the audit graph before the data write
    preview_changes       The same diff without any writes (dry run)
    mirror_change_events  Secondary audit write that reports instead of raising
    get_entity_change_history / get_workspace_audit_log
                          Read the audit trail back

Pre-commit audit failures are fatal to the commit: every error inside the
flow is re-raised as AuditFailure, chained to the original exception.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from ledger_kg.config import KGConfig
from ledger_kg.errors import AuditFailure, StoreError
from ledger_kg.ingestion.audit.events import generate_change_events
from ledger_kg.ingestion.codec import coerce_triples, serialize_batch, triple_from_binding
from ledger_kg.ingestion.diff import compute_diff, extract_entity_uris, group_triples_by_entity
from ledger_kg.storage import sparql
from ledger_kg.storage.base import Binding, StoreClient
from ledger_kg.types import (
    AuditLogPage,
    AuditResult,
    AuditWriteResult,
    Change,
    ChangeEvent,
    ChangeType,
    DiffResult,
    Scope,
    Triple,
)

logger = logging.getLogger(__name__)


def _chunks(items: Sequence[Any], size: int) -> list[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _event_from_binding(row: Binding, entity_uri: str | None = None) -> ChangeEvent:
    return ChangeEvent(
        uri=row["event"]["value"],
        entity_uri=entity_uri or row["entity"]["value"],
        property=row["property"]["value"],
        previous_value=row.get("previousValue", {}).get("value", ""),
        new_value=row.get("newValue", {}).get("value", ""),
        change_type=ChangeType(row["changeType"]["value"]),
        changed_at=row["changedAt"]["value"],
        source_document=row["sourceDocument"]["value"],
    )


class AuditService:
    """
    Audit trail operations for one store.

    Example:
        >>> audit = AuditService(store)
        >>> result = await audit.pre_commit_audit(scope, triples, "urn:doc:42")
        >>> result.change_count
        3
    """

    def __init__(self, store: StoreClient, config: KGConfig | None = None):
        self.store = store
        self.config = config or KGConfig()

    # -------------------------------------------------------------------------
    # Store reads / writes
    # -------------------------------------------------------------------------

    async def get_existing_triples(
        self,
        scope: Scope,
        entity_uris: Sequence[str],
    ) -> dict[str, list[Triple]]:
        """
        Fetch stored facts for a set of entities from the data graph.

        Entities with no stored facts are absent from the result.
        """
        if not entity_uris:
            logger.info("No entity URIs provided, nothing to query")
            return {}

        batch_size = self.config.entity_batch_size
        existing: dict[str, list[Triple]] = {}

        logger.info(f"Querying existing triples for {len(entity_uris)} entities")

        for batch in _chunks(list(entity_uris), batch_size):
            rows = await self.store.query(
                sparql.select_entity_triples(scope.data_graph_iri, batch)
            )
            for row in rows:
                triple = triple_from_binding(row["s"], row["p"], row["o"])
                existing.setdefault(triple.subject, []).append(triple)

        total = sum(len(triples) for triples in existing.values())
        logger.info(f"Retrieved existing triples for {len(existing)} entities ({total} total triples)")
        return existing

    async def write_audit_triples(self, scope: Scope, triples: Sequence[Triple]) -> int:
        """
        Insert audit triples into the audit graph in batches.

        Returns:
            Number of triples written

        Raises:
            AuditFailure: A batch was rejected by the store
        """
        if not triples:
            logger.info("No audit triples to write")
            return 0

        audit_graph = scope.audit_graph_iri
        batches = _chunks(list(triples), self.config.audit_batch_size)

        for index, batch in enumerate(batches, start=1):
            response = await self.store.insert(audit_graph, serialize_batch(batch))
            if not response.ok:
                raise AuditFailure(
                    f"Audit graph write failed at batch {index}/{len(batches)}: "
                    f"{response.status} - {response.body or ''}"
                )
            logger.info(f"Wrote audit batch {index}/{len(batches)} ({len(batch)} triples) to {audit_graph}")

        logger.info(f"Wrote {len(triples)} total audit triples to {audit_graph}")
        return len(triples)

    # -------------------------------------------------------------------------
    # Diff
    # -------------------------------------------------------------------------

    async def _diff(
        self,
        scope: Scope,
        triples: list[Triple],
        source_document_uri: str,
    ) -> DiffResult | None:
        entity_uris = extract_entity_uris(triples)
        logger.info(f"Extracted {len(entity_uris)} entity URIs from {len(triples)} new triples")

        if not entity_uris:
            logger.info("No entity URIs found in new triples, skipping audit")
            return None

        existing = await self.get_existing_triples(scope, entity_uris)
        if not existing:
            # First ingestion of these entities: diffing would only report INSERTs
            logger.info(f"First commit (no existing triples), skipping audit for {len(entity_uris)} entities")
            return None

        diff = compute_diff(
            existing,
            group_triples_by_entity(triples),
            source_document_uri,
            normalize=self.config.diff_normalize_literals,
        )
        logger.info(
            f"Diff computed: {diff.change_count} changes, "
            f"{len(diff.entity_uris_to_delete)} entities to delete"
        )
        return diff

    async def preview_changes(
        self,
        scope: Scope,
        triples: Iterable[Triple | str],
        source_document_uri: str,
    ) -> DiffResult:
        """Compute the diff a commit would record, without writing anything."""
        diff = await self._diff(scope, coerce_triples(triples), source_document_uri)
        return diff or DiffResult()

    async def pre_commit_audit(
        self,
        scope: Scope,
        triples: Iterable[Triple | str],
        source_document_uri: str | None,
    ) -> AuditResult:
        """
        Full pre-commit audit: extract entities, read stored facts, diff,
        generate ChangeEvents and write them to the audit graph.

        Args:
            scope: Tenant/workspace being committed to
            triples: Incoming facts (Triple objects or fact lines)
            source_document_uri: Document triggering the commit

        Returns:
            AuditResult with change_count and entity_uris_to_delete

        Raises:
            AuditFailure: Any failure in the flow. No data has been mutated.
        """
        if not source_document_uri:
            logger.warning("pre_commit_audit called without a source document, skipping audit")
            return AuditResult()

        logger.info(f"Starting pre-commit audit for workspace {scope.workspace_id}, source: {source_document_uri}")

        try:
            diff = await self._diff(scope, coerce_triples(triples), source_document_uri)
            if diff is None:
                return AuditResult()

            if diff.changes:
                audit_triples = generate_change_events(
                    diff.changes, scope.audit_graph_iri, source_document_uri
                )
                logger.info(f"Generated {len(audit_triples)} audit triples for {diff.change_count} changes")
                await self.write_audit_triples(scope, audit_triples)
            else:
                logger.info("No changes detected, skipping audit write")
        except AuditFailure:
            raise
        except Exception as e:
            logger.error(f"Pre-commit audit failed: {e}")
            raise AuditFailure(f"Pre-commit audit failed: {e}") from e

        logger.info(f"Pre-commit audit complete: {diff.change_count} changes recorded")
        return AuditResult(
            change_count=diff.change_count,
            entity_uris_to_delete=diff.entity_uris_to_delete,
        )

    async def mirror_change_events(
        self,
        scope: Scope,
        changes: Sequence[Change],
        source_document_uri: str,
        changed_at: datetime | None = None,
    ) -> AuditWriteResult:
        """
        Record changes made outside the commit pipeline (e.g. manual edits).

        Unlike pre_commit_audit this never raises for store failures or
        unwritable events; the caller decides whether a failed mirror write
        matters.
        """
        if not changes:
            return AuditWriteResult(ok=True)

        try:
            audit_triples = generate_change_events(
                changes, scope.audit_graph_iri, source_document_uri, changed_at
            )
            written = await self.write_audit_triples(scope, audit_triples)
        except (AuditFailure, StoreError, ValueError) as e:
            logger.warning(f"Audit mirror write failed: {e}")
            return AuditWriteResult(ok=False, error=str(e))
        return AuditWriteResult(ok=True, triples_written=written)

    # -------------------------------------------------------------------------
    # Audit trail queries
    # -------------------------------------------------------------------------

    async def get_entity_change_history(self, scope: Scope, entity_uri: str) -> list[ChangeEvent]:
        """All ChangeEvents for one entity, newest first."""
        logger.info(f"Querying change history for entity: {entity_uri}")
        rows = await self.store.query(sparql.entity_history(scope.audit_graph_iri, entity_uri))
        return [_event_from_binding(row, entity_uri) for row in rows]

    async def get_workspace_audit_log(
        self,
        scope: Scope,
        limit: int | None = None,
        offset: int = 0,
        change_type: ChangeType | str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> AuditLogPage:
        """
        Paginated ChangeEvents across the workspace, newest first.

        Args:
            scope: Tenant/workspace
            limit: Page size (default from config, 50)
            offset: Rows to skip
            change_type: Only INSERT, UPDATE or DELETE events
            date_from: Inclusive lower bound (ISO-8601 dateTime)
            date_to: Inclusive upper bound (ISO-8601 dateTime)

        Returns:
            AuditLogPage with the page of events and the filtered total
        """
        if limit is None:
            limit = self.config.audit_log_default_limit
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        if isinstance(change_type, ChangeType):
            change_type = change_type.value

        logger.info(
            f"Querying workspace audit log (limit={limit}, offset={offset}, "
            f"change_type={change_type or 'all'}, date_from={date_from or 'none'}, "
            f"date_to={date_to or 'none'})"
        )

        audit_graph = scope.audit_graph_iri
        count_rows, data_rows = await asyncio.gather(
            self.store.query(sparql.audit_log_count(audit_graph, change_type, date_from, date_to)),
            self.store.query(
                sparql.audit_log_page(audit_graph, limit, offset, change_type, date_from, date_to)
            ),
        )

        total = int(count_rows[0]["total"]["value"]) if count_rows and "total" in count_rows[0] else 0
        return AuditLogPage(
            changes=[_event_from_binding(row) for row in data_rows],
            total=total,
        )
