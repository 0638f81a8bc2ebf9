"""
Result Types

Outputs of the diff, audit and commit stages.

Pipeline Models:
    - DiffResult: Changes plus the entities whose stale facts must be removed
    - AuditResult: Summary returned by the pre-commit audit
    - CommitResult: Summary returned by a successful commit

Audit Read Models:
    - AuditLogPage: One page of the workspace audit log
    - AuditWriteResult: Outcome of a secondary (non-fatal) audit write
"""

from pydantic import BaseModel, Field

from ledger_kg.errors import AuditWriteError
from ledger_kg.types.changes import Change, ChangeEvent


class DiffResult(BaseModel):
    """
    Output of the diff engine.

    Attributes:
        changes: Per-entity/per-predicate INSERT/UPDATE/DELETE records
        entity_uris_to_delete: Entities whose existing facts are replaced
    """

    changes: list[Change] = Field(default_factory=list)
    entity_uris_to_delete: list[str] = Field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.changes)


class AuditResult(BaseModel):
    """Summary of a pre-commit audit."""

    change_count: int = 0
    entity_uris_to_delete: list[str] = Field(default_factory=list)


class CommitResult(BaseModel):
    """
    Result of a successful commit.

    Attributes:
        success: Always True; failures raise instead
        scope_ref: Data graph IRI the facts were written to
        triple_count: Number of triples inserted
        change_count: Audit events recorded (0 when audit skipped)
        deleted_entity_count: Entities whose stale facts were removed
    """

    success: bool = True
    scope_ref: str
    triple_count: int
    change_count: int = 0
    deleted_entity_count: int = 0


class AuditLogPage(BaseModel):
    """One page of the workspace audit log, newest first."""

    changes: list[ChangeEvent] = Field(default_factory=list)
    total: int = 0


class AuditWriteResult(BaseModel):
    """
    Outcome of a secondary audit write.

    Pre-commit audit failures are always fatal. Secondary writes (mirroring
    changes recorded elsewhere) return this instead so callers choose whether
    a failure stops their workflow or is merely logged.
    """

    ok: bool
    triples_written: int = 0
    error: str | None = None

    def raise_for_error(self) -> None:
        """Raise AuditWriteError if the write failed."""
        if not self.ok:
            raise AuditWriteError(self.error or "audit write failed")
