"""Tests for cardex.storage.factory."""

from __future__ import annotations

from pathlib import Path

import pytest

from cardex.core.config import get_settings
from cardex.core.exceptions import ConfigurationError
from cardex.storage import (
    JSONFileStorage,
    MemoryStorage,
    SQLiteStorage,
    create_storage,
    detect_storage_type,
    storage_from_settings,
)


class TestDetectStorageType:
    """Tests for URL scheme detection."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("memory://", "memory"),
            (":memory:", "memory"),
            ("json:///data/state.json", "json"),
            ("state.json", "json"),
            ("sqlite:///data/cardex.db", "sqlite"),
            ("cardex.sqlite", "sqlite"),
        ],
    )
    def test_detect(self, url: str, expected: str) -> None:
        assert detect_storage_type(url) == expected

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError):
            detect_storage_type("redis://localhost")


class TestCreateStorage:
    """Tests for create_storage."""

    def test_memory(self) -> None:
        assert isinstance(create_storage("memory://"), MemoryStorage)

    def test_json(self, tmp_path: Path) -> None:
        storage = create_storage(f"json:///{tmp_path}/state.json", key_prefix="@x")
        assert isinstance(storage, JSONFileStorage)
        assert storage.path == tmp_path / "state.json"
        assert storage.sightings_key == "@x:sightings"

    def test_sqlite(self, tmp_path: Path) -> None:
        assert isinstance(create_storage(f"sqlite:///{tmp_path}/cardex.db"), SQLiteStorage)

    def test_relative_path_uses_data_dir(self, tmp_path: Path) -> None:
        storage = create_storage("json:///state.json", data_dir=tmp_path)
        assert isinstance(storage, JSONFileStorage)
        assert storage.path == tmp_path / "state.json"

    def test_missing_path(self) -> None:
        with pytest.raises(ConfigurationError):
            create_storage("json:///")

    def test_from_settings(self, tmp_path: Path) -> None:
        settings = get_settings(storage_url="state.json", data_dir=tmp_path, key_prefix="@t")
        storage = storage_from_settings(settings)
        assert isinstance(storage, JSONFileStorage)
        assert storage.entries_key == "@t:dex_entries"
