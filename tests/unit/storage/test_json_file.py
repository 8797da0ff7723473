"""Tests for cardex.storage.json_file - key-value JSON document storage."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from cardex.core.exceptions import PersistenceError
from cardex.models import CollectionEntry, Sighting
from cardex.storage import json_file
from cardex.storage.json_file import JSONFileStorage


def make_sighting(sid: str = "s1", model_id: str = "5") -> Sighting:
    return Sighting(
        id=sid,
        user_id="user-1",
        model_id=model_id,
        photo_reference=f"{sid}.jpg",
        created_at=datetime(2024, 6, 1, tzinfo=UTC),
    )


def entry_for(sighting: Sighting) -> CollectionEntry:
    return CollectionEntry(
        user_id=sighting.user_id,
        model_id=sighting.model_id,
        best_photo_reference=sighting.photo_reference,
        first_spotted_at=sighting.created_at,
    )


@pytest.fixture
async def storage(tmp_path: Path) -> JSONFileStorage:
    s = JSONFileStorage(tmp_path / "state.json")
    await s.initialize()
    yield s
    await s.close()


class TestLayout:
    """The on-disk document matches the namespaced key-value layout."""

    async def test_two_namespaced_arrays(self, storage: JSONFileStorage) -> None:
        sighting = make_sighting()
        await storage.commit_sighting(sighting, entry_for(sighting))

        document = json.loads(storage.path.read_text())
        assert set(document) == {"@cardex:sightings", "@cardex:dex_entries"}
        assert document["@cardex:sightings"][0]["modelId"] == "5"
        assert document["@cardex:sightings"][0]["photoReference"] == "s1.jpg"
        assert document["@cardex:dex_entries"][0]["bestPhotoUrl"] == "s1.jpg"
        assert document["@cardex:dex_entries"][0]["status"] == "spotted"

    async def test_custom_prefix(self, tmp_path: Path) -> None:
        storage = JSONFileStorage(tmp_path / "state.json", key_prefix="@carpokemon")
        await storage.initialize()
        sighting = make_sighting()
        await storage.commit_sighting(sighting, entry_for(sighting))

        document = json.loads(storage.path.read_text())
        assert "@carpokemon:sightings" in document
        assert "@carpokemon:dex_entries" in document

    async def test_unrelated_keys_preserved(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"@cardex:user": {"id": "user-1"}}))
        storage = JSONFileStorage(path)
        await storage.initialize()

        sighting = make_sighting()
        await storage.commit_sighting(sighting, entry_for(sighting))

        assert json.loads(path.read_text())["@cardex:user"] == {"id": "user-1"}


class TestPersistence:
    """State survives reopening the file."""

    async def test_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        first = JSONFileStorage(path)
        await first.initialize()
        sighting = make_sighting()
        await first.commit_sighting(sighting, entry_for(sighting))
        await first.close()

        second = JSONFileStorage(path)
        await second.initialize()
        assert await second.list_sightings() == [sighting]
        assert await second.get_entry("user-1", "5") == entry_for(sighting)

    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        storage = JSONFileStorage(tmp_path / "nested" / "state.json")
        await storage.initialize()
        assert await storage.list_sightings() == []

        sighting = make_sighting()
        await storage.commit_sighting(sighting, entry_for(sighting))
        assert storage.path.exists()

    async def test_missing_key_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{}")
        storage = JSONFileStorage(path)
        await storage.initialize()
        assert await storage.list_entries() == []


class TestCorruption:
    """Corrupt state is an error, never silently discarded."""

    async def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            await JSONFileStorage(path).initialize()

    async def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[]")
        with pytest.raises(PersistenceError):
            await JSONFileStorage(path).initialize()

    async def test_invalid_record(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"@cardex:sightings": [{"id": "s1"}]}))
        with pytest.raises(PersistenceError, match="Corrupt"):
            await JSONFileStorage(path).initialize()


class TestWriteFailure:
    """A failed write changes neither the file nor the visible state."""

    async def test_all_or_nothing(
        self, storage: JSONFileStorage, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first = make_sighting("s1")
        await storage.commit_sighting(first, entry_for(first))
        before = storage.path.read_text()

        def fail_replace(src: str, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(json_file.os, "replace", fail_replace)
        second = make_sighting("s2", model_id="6")
        with pytest.raises(PersistenceError, match="disk full"):
            await storage.commit_sighting(second, entry_for(second))

        assert storage.path.read_text() == before
        assert await storage.list_sightings() == [first]
        assert await storage.get_entry("user-1", "6") is None
        # No temporary files left behind
        assert [p.name for p in storage.path.parent.iterdir()] == ["state.json"]

    async def test_write_before_initialize(self, tmp_path: Path) -> None:
        storage = JSONFileStorage(tmp_path / "state.json")
        sighting = make_sighting()
        with pytest.raises(PersistenceError, match="not initialized"):
            await storage.commit_sighting(sighting, entry_for(sighting))
