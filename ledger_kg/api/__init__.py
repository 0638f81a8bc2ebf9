"""
Public API Layer

Modules:
    knowledge_ledger: KnowledgeLedger class - main entry point
    convenience: One-shot commit / pre_commit_audit coroutines

Design Principles:
    - Single entry point (KnowledgeLedger) for most operations
    - Async-first with a sync commit wrapper
    - Lazy initialization - don't connect until needed
"""

from ledger_kg.api.knowledge_ledger import KnowledgeLedger

__all__ = ["KnowledgeLedger"]
