"""JSON key-value file storage - the mobile client's on-device layout.

State is one JSON document mapping namespaced keys to JSON arrays:

    {
        "@cardex:sightings": [...],
        "@cardex:dex_entries": [...]
    }

Every write serializes the complete next document to a temporary file in
the same directory and renames it over the existing file, so a failed write
leaves the previous document untouched and both collections always change
together.

Example:
    >>> from cardex.storage.json_file import JSONFileStorage
    >>> storage = JSONFileStorage("state.json")
    >>> storage.sightings_key
    '@cardex:sightings'
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cardex.core.exceptions import PersistenceError
from cardex.models.collection import CollectionEntry
from cardex.models.sighting import Sighting

logger = logging.getLogger(__name__)


class JSONFileStorage:
    """Key-value JSON document storage.

    A missing file, or a document without one of the keys, is an empty
    collection. A file that exists but cannot be parsed is a
    ``PersistenceError``: silently starting over would lose the collection.

    Args:
        path: Path of the JSON document.
        key_prefix: Namespace for the persisted keys.
    """

    def __init__(self, path: str | Path, *, key_prefix: str = "@cardex") -> None:
        self._path = Path(path)
        self._key_prefix = key_prefix
        self._document: dict[str, Any] = {}
        self._sightings: list[Sighting] = []
        self._entries: dict[tuple[str, str], CollectionEntry] = {}
        self._write_lock = asyncio.Lock()
        self._initialized = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def sightings_key(self) -> str:
        return f"{self._key_prefix}:sightings"

    @property
    def entries_key(self) -> str:
        return f"{self._key_prefix}:dex_entries"

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Load the document from disk, if there is one."""
        self._document = self._read_document()
        try:
            self._sightings = [
                Sighting.model_validate(item) for item in self._document.get(self.sightings_key, [])
            ]
            entries = [
                CollectionEntry.model_validate(item) for item in self._document.get(self.entries_key, [])
            ]
        except (PydanticValidationError, TypeError) as exc:
            raise PersistenceError(f"Corrupt state in {self._path}: {exc}") from exc
        self._entries = {entry.key: entry for entry in entries}
        self._initialized = True
        logger.info(
            f"JSONFileStorage loaded {self._path} "
            f"({len(self._sightings)} sightings, {len(self._entries)} entries)"
        )

    async def close(self) -> None:
        self._document = {}
        self._sightings = []
        self._entries = {}
        self._initialized = False

    # --- Sighting Operations ---

    async def list_sightings(self) -> list[Sighting]:
        return list(self._sightings)

    async def get_sighting(self, sighting_id: str) -> Sighting | None:
        for sighting in self._sightings:
            if sighting.id == sighting_id:
                return sighting
        return None

    # --- Collection Entry Operations ---

    async def list_entries(self) -> list[CollectionEntry]:
        return list(self._entries.values())

    async def get_entry(self, user_id: str, model_id: str) -> CollectionEntry | None:
        return self._entries.get((user_id, model_id))

    async def save_entry(self, entry: CollectionEntry) -> None:
        def apply(sightings: list[Sighting], entries: dict[tuple[str, str], CollectionEntry]) -> None:
            entries[entry.key] = entry

        await self._update(apply)

    async def replace_entries(self, entries: list[CollectionEntry]) -> None:
        def apply(sightings: list[Sighting], current: dict[tuple[str, str], CollectionEntry]) -> None:
            current.clear()
            current.update({e.key: e for e in entries})

        await self._update(apply)

    # --- Combined Operations ---

    async def commit_sighting(self, sighting: Sighting, entry: CollectionEntry) -> None:
        def apply(sightings: list[Sighting], entries: dict[tuple[str, str], CollectionEntry]) -> None:
            sightings.append(sighting)
            entries[entry.key] = entry

        await self._update(apply)

    # --- Helpers ---

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise PersistenceError(f"Cannot read {self._path}: expected a JSON object")
        return document

    async def _update(
        self,
        apply: Callable[[list[Sighting], dict[tuple[str, str], CollectionEntry]], None],
    ) -> None:
        """Apply a change to copies of the state, persist them, then swap them in."""
        if not self._initialized:
            raise PersistenceError("Storage not initialized. Call initialize() first.")

        async with self._write_lock:
            sightings = list(self._sightings)
            entries = dict(self._entries)
            apply(sightings, entries)

            document = dict(self._document)
            document[self.sightings_key] = [s.to_storage() for s in sightings]
            document[self.entries_key] = [e.to_storage() for e in entries.values()]
            try:
                self._replace_file(json.dumps(document, indent=2))
            except (OSError, TypeError, ValueError) as exc:
                logger.error(f"Failed to write {self._path}: {exc}")
                raise PersistenceError(f"Cannot write {self._path}: {exc}") from exc

            self._document = document
            self._sightings = sightings
            self._entries = entries

    def _replace_file(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
