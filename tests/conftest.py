"""Shared fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from cardex.catalog import Catalog
from cardex.protocols.storage import StorageBackend
from cardex.storage.json_file import JSONFileStorage
from cardex.storage.memory import MemoryStorage
from cardex.storage.sqlite import SQLiteStorage


@pytest.fixture
def catalog() -> Catalog:
    """The bundled 10-manufacturer, 20-model catalog."""
    return Catalog.default()


@pytest.fixture(params=["memory", "json", "sqlite"])
async def backend(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncIterator[StorageBackend]:
    """Every storage backend, initialized and cleaned up."""
    if request.param == "memory":
        storage: StorageBackend = MemoryStorage()
    elif request.param == "json":
        storage = JSONFileStorage(tmp_path / "state.json")
    else:
        storage = SQLiteStorage(tmp_path / "cardex.db")
    await storage.initialize()
    yield storage
    await storage.close()
