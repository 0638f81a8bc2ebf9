"""Commit orchestration: audit, stale-data deletion and batched insert."""

from ledger_kg.ingestion.commit.orchestrator import CommitOrchestrator, CommitPhase

__all__ = ["CommitOrchestrator", "CommitPhase"]
