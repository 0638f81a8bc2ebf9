"""
Audit Module

ChangeEvent generation and the store-backed audit service.

Modules:
    events: generate_change_events (pure)
    service: AuditService (pre-commit audit, history and audit-log queries)
"""

from ledger_kg.ingestion.audit.events import (
    event_uri,
    format_timestamp,
    generate_change_events,
)
from ledger_kg.ingestion.audit.service import AuditService

__all__ = [
    "AuditService",
    "event_uri",
    "format_timestamp",
    "generate_change_events",
]
