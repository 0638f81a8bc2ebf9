"""Shared fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_kg.config import KGConfig
from ledger_kg.storage.base import StoreClient, StoreResponse
from ledger_kg.types import Scope


@pytest.fixture
def scope():
    return Scope(tenant_id="acme", workspace_id="finance")


@pytest.fixture
def config(monkeypatch):
    # Keep LEDGER_* variables from the environment out of tests
    for name in list(os.environ):
        if name.startswith("LEDGER_"):
            monkeypatch.delenv(name)
    return KGConfig()


@pytest.fixture
def mock_store():
    """Store mock: empty query results, successful mutations."""
    store = MagicMock(spec=StoreClient)
    store.query = AsyncMock(return_value=[])
    store.update = AsyncMock(return_value=StoreResponse(ok=True, status=204))
    store.insert = AsyncMock(return_value=StoreResponse(ok=True, status=204))
    store.initialize = AsyncMock()
    store.close = AsyncMock()
    return store
