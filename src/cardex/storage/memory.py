"""In-memory storage backend for testing.

Provides a complete in-memory implementation of StorageBackend,
useful for testing, development, and throwaway sessions.

Example:
    >>> from cardex.storage.memory import MemoryStorage
    >>> storage = MemoryStorage()
    >>> # MemoryStorage implements StorageBackend protocol
    >>> hasattr(storage, 'commit_sighting')
    True

Note:
    All methods are async. Use within async context or with asyncio.run().
"""

from __future__ import annotations

from cardex.models.collection import CollectionEntry
from cardex.models.sighting import Sighting


class MemoryStorage:
    """In-memory storage using a list and a dictionary.

    Safe for single-process async usage: no method awaits between reading
    and writing its state. Data is lost when the process exits.

    Best for: Testing, development.

    Example:
        >>> from cardex.storage.memory import MemoryStorage
        >>> s = MemoryStorage()
        >>> s._initialized
        False
    """

    def __init__(self) -> None:
        self._sightings: list[Sighting] = []
        self._sighting_ids: set[str] = set()
        self._entries: dict[tuple[str, str], CollectionEntry] = {}
        self._initialized = False

    async def initialize(self) -> None:
        """No-op for memory storage."""
        self._initialized = True

    async def close(self) -> None:
        """Clear all data."""
        self._sightings.clear()
        self._sighting_ids.clear()
        self._entries.clear()
        self._initialized = False

    # --- Sighting Operations ---

    async def list_sightings(self) -> list[Sighting]:
        return list(self._sightings)

    async def get_sighting(self, sighting_id: str) -> Sighting | None:
        if sighting_id not in self._sighting_ids:
            return None
        return next(s for s in self._sightings if s.id == sighting_id)

    # --- Collection Entry Operations ---

    async def list_entries(self) -> list[CollectionEntry]:
        return list(self._entries.values())

    async def get_entry(self, user_id: str, model_id: str) -> CollectionEntry | None:
        return self._entries.get((user_id, model_id))

    async def save_entry(self, entry: CollectionEntry) -> None:
        self._entries[entry.key] = entry

    async def replace_entries(self, entries: list[CollectionEntry]) -> None:
        self._entries = {entry.key: entry for entry in entries}

    # --- Combined Operations ---

    async def commit_sighting(self, sighting: Sighting, entry: CollectionEntry) -> None:
        """Append a sighting and upsert its entry."""
        self._sightings.append(sighting)
        self._sighting_ids.add(sighting.id)
        self._entries[entry.key] = entry
