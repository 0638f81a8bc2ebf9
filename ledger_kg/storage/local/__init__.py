"""Embedded rdflib backend."""

from ledger_kg.storage.local.backend import LocalStore

__all__ = ["LocalStore"]
