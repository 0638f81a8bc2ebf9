"""
Exceptions

Error kinds raised by the identity, diff and commit pipeline.

Parsing errors are recovered locally (logged, line skipped). Pipeline-stage
errors (audit, delete, insert) are fatal to the current commit and carry
enough context (batch index, store status) to diagnose or retry.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger_kg failures."""


class StoreError(LedgerError):
    """Raised when the triple store rejects a request or is unreachable."""

    def __init__(self, message: str, *, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class MalformedFactError(LedgerError):
    """Raised (in strict mode only) when a fact line cannot be parsed."""

    def __init__(self, line: str):
        super().__init__(f"Unparseable fact line: {line}")
        self.line = line


class EmptyInputError(LedgerError, ValueError):
    """Raised when a commit is requested with zero triples. No I/O happens."""


class AuditFailure(LedgerError):
    """Raised when the pre-commit audit fails. The commit aborts before any mutation."""


class AuditWriteError(LedgerError):
    """A failed secondary (post-hoc) audit write. Returned, not raised, by mirror writes."""


class BatchFailure(LedgerError):
    """A store mutation failed part-way through a batched operation."""

    operation = "batch"

    def __init__(
        self,
        batch_index: int,
        batch_count: int,
        *,
        status: int | None = None,
        body: str | None = None,
        reason: str | None = None,
    ):
        detail = reason or f"{status} - {body or ''}".rstrip(" -")
        super().__init__(
            f"{self.operation} failed at batch {batch_index}/{batch_count}: {detail}"
        )
        self.batch_index = batch_index
        self.batch_count = batch_count
        self.status = status
        self.body = body


class DeleteBatchFailure(BatchFailure):
    """Stale-data deletion failed. Earlier batches remain applied."""

    operation = "Delete"


class InsertBatchFailure(BatchFailure):
    """New-data insertion failed. Earlier batches remain committed."""

    operation = "Insert"


__all__ = [
    "LedgerError",
    "StoreError",
    "MalformedFactError",
    "EmptyInputError",
    "AuditFailure",
    "AuditWriteError",
    "BatchFailure",
    "DeleteBatchFailure",
    "InsertBatchFailure",
]
