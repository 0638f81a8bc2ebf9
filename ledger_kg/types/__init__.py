"""
Type Definitions

Pydantic models for all data structures.

Fact Models:
    - Triple, UriRef, Literal - Facts and their tagged object terms
    - Scope - Tenant/workspace addressing of the data and audit graphs

Change Models:
    - ChangeType, Change - Diff output
    - ChangeEvent - Audit record read back from the store

Result Models:
    - DiffResult, AuditResult, CommitResult - Pipeline stage outputs
    - AuditLogPage, AuditWriteResult - Audit queries and secondary writes
"""

from ledger_kg.types.changes import Change, ChangeEvent, ChangeType
from ledger_kg.types.results import (
    AuditLogPage,
    AuditResult,
    AuditWriteResult,
    CommitResult,
    DiffResult,
)
from ledger_kg.types.triples import Literal, ObjectTerm, Scope, Triple, UriRef

__all__ = [
    # Fact Models
    "Triple",
    "UriRef",
    "Literal",
    "ObjectTerm",
    "Scope",
    # Change Models
    "ChangeType",
    "Change",
    "ChangeEvent",
    # Result Models
    "DiffResult",
    "AuditResult",
    "CommitResult",
    "AuditLogPage",
    "AuditWriteResult",
]
