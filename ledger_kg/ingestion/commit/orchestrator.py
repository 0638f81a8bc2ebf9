"""
Commit Orchestrator

Drives one commit through its phases:

    START -> AUDIT (optional) -> DELETE_STALE (optional) -> INSERT_NEW -> DONE
                  \\                   \\                      \\
                   +-------------------+----------------------+--> ABORTED

START rejects empty input before any I/O. AUDIT runs only when a source
document is given; a failure there aborts before any data mutation.
DELETE_STALE and INSERT_NEW are batched and sequential; a failed batch
aborts with its index, and earlier batches stay applied.

There is no locking here. Concurrent commits touching the same entities
must be serialized by the caller (per scope and source document).
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from enum import Enum
from typing import Any

from ledger_kg.config import KGConfig
from ledger_kg.errors import (
    BatchFailure,
    DeleteBatchFailure,
    EmptyInputError,
    InsertBatchFailure,
)
from ledger_kg.ingestion.audit import AuditService
from ledger_kg.ingestion.codec import coerce_triples, serialize_batch
from ledger_kg.storage import sparql
from ledger_kg.storage.base import StoreClient, StoreResponse
from ledger_kg.types import AuditResult, CommitResult, Scope, Triple

logger = logging.getLogger(__name__)


class CommitPhase(str, Enum):
    START = "START"
    AUDIT = "AUDIT"
    DELETE_STALE = "DELETE_STALE"
    INSERT_NEW = "INSERT_NEW"
    DONE = "DONE"
    ABORTED = "ABORTED"


class CommitOrchestrator:
    """
    Writes a batch of facts to a scope's data graph with a pre-commit audit.

    Example:
        >>> orchestrator = CommitOrchestrator(store)
        >>> result = await orchestrator.commit(scope, triples, "urn:doc:42")
        >>> result.triple_count
        120
    """

    def __init__(
        self,
        store: StoreClient,
        config: KGConfig | None = None,
        audit: AuditService | None = None,
    ):
        self.store = store
        self.config = config or KGConfig()
        self.audit = audit or AuditService(store, self.config)

    @staticmethod
    def _enter(current: CommitPhase, phase: CommitPhase, scope: Scope) -> CommitPhase:
        logger.info(f"Commit {scope.data_graph_iri}: {current.value} -> {phase.value}")
        return phase

    async def commit(
        self,
        scope: Scope,
        triples: Iterable[Triple | str] | None,
        source_document_uri: str | None = None,
    ) -> CommitResult:
        """
        Commit facts to the scope's data graph.

        Args:
            scope: Tenant/workspace to write to
            triples: Triple objects or fact lines (malformed lines are skipped)
            source_document_uri: Document the facts came from. Enables the
                audit and stale-data deletion phases.

        Returns:
            CommitResult

        Raises:
            EmptyInputError: No triples (no I/O performed)
            AuditFailure: Audit failed; nothing was mutated
            DeleteBatchFailure: A deletion batch failed
            InsertBatchFailure: An insert batch failed
        """
        phase = CommitPhase.START
        parsed = coerce_triples(triples or [])
        if not parsed:
            raise EmptyInputError("No triples to commit")

        audit_result = AuditResult()
        deleted = 0
        try:
            if source_document_uri:
                phase = self._enter(phase, CommitPhase.AUDIT, scope)
                audit_result = await self.audit.pre_commit_audit(
                    scope, parsed, source_document_uri
                )

            if audit_result.entity_uris_to_delete:
                phase = self._enter(phase, CommitPhase.DELETE_STALE, scope)
                deleted = await self.delete_entity_triples(
                    scope, audit_result.entity_uris_to_delete
                )

            phase = self._enter(phase, CommitPhase.INSERT_NEW, scope)
            inserted = await self.insert_triples(scope, parsed)
        except Exception as e:
            phase = self._enter(phase, CommitPhase.ABORTED, scope)
            logger.error(f"Commit to {scope.data_graph_iri} aborted: {e}")
            raise

        phase = self._enter(phase, CommitPhase.DONE, scope)
        return CommitResult(
            success=True,
            scope_ref=scope.data_graph_iri,
            triple_count=inserted,
            change_count=audit_result.change_count,
            deleted_entity_count=deleted,
        )

    async def _run_batches(
        self,
        batches: Sequence[Sequence[Any]],
        send: Callable[[Any], Awaitable[StoreResponse]],
        failure: type[BatchFailure],
    ) -> None:
        for index, batch in enumerate(batches, start=1):
            try:
                response: StoreResponse = await send(batch)
            except Exception as e:
                raise failure(index, len(batches), reason=str(e)) from e
            if not response.ok:
                raise failure(index, len(batches), status=response.status, body=response.body)
            logger.debug(f"{failure.operation} batch {index}/{len(batches)} ({len(batch)} items) ok")

    async def delete_entity_triples(self, scope: Scope, entity_uris: Sequence[str]) -> int:
        """
        Remove all data-graph facts of the given entities.

        Returns:
            Number of entities targeted

        Raises:
            DeleteBatchFailure: A batch failed; earlier batches stay applied
        """
        if not entity_uris:
            return 0

        graph = scope.data_graph_iri
        size = self.config.delete_batch_size
        uris = list(entity_uris)
        batches = [uris[i:i + size] for i in range(0, len(uris), size)]

        async def send(batch: Sequence[str]) -> StoreResponse:
            return await self.store.update(sparql.delete_entity_triples(graph, batch))

        await self._run_batches(batches, send, DeleteBatchFailure)
        logger.info(f"Deleted existing triples for {len(uris)} entities from {graph}")
        return len(uris)

    async def insert_triples(self, scope: Scope, triples: Iterable[Triple | str]) -> int:
        """
        Insert facts into the data graph in prefixed Turtle batches.

        Returns:
            Number of triples inserted

        Raises:
            InsertBatchFailure: A batch failed; earlier batches stay committed
        """
        parsed = coerce_triples(triples)
        if not parsed:
            return 0

        graph = scope.data_graph_iri
        size = self.config.insert_batch_size
        batches = [parsed[i:i + size] for i in range(0, len(parsed), size)]

        async def send(batch: Sequence[Triple]) -> StoreResponse:
            return await self.store.insert(graph, serialize_batch(batch))

        await self._run_batches(batches, send, InsertBatchFailure)
        logger.info(f"Inserted {len(parsed)} triples into {graph} in {len(batches)} batches")
        return len(parsed)
