"""Storage backend protocol.

Defines the interface for the two durable collections Cardex persists:
``sightings`` (append-only) and ``collectionEntries`` (derived index).

Example:
    >>> from cardex.protocols.storage import StorageBackend
    >>> # StorageBackend is a Protocol - implementations include MemoryStorage
    >>> hasattr(StorageBackend, "commit_sighting")
    True
    >>> hasattr(StorageBackend, "get_entry")
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cardex.models import CollectionEntry, Sighting


@runtime_checkable
class StorageBackend(Protocol):
    """Storage backend protocol.

    All storage implementations must implement this interface.
    Supports: in-memory, JSON key-value file, SQLite.

    Every write method is all-or-nothing: when it raises
    ``PersistenceError`` nothing it was asked to write is visible afterwards.

    See Also:
        cardex.storage.memory.MemoryStorage: In-memory implementation
    """

    # --- Sighting Operations ---

    async def list_sightings(self) -> list[Sighting]:
        """All sightings in insertion order."""
        ...

    async def get_sighting(self, sighting_id: str) -> Sighting | None:
        """Get a sighting by ID."""
        ...

    # --- Collection Entry Operations ---

    async def list_entries(self) -> list[CollectionEntry]:
        """All collection entries."""
        ...

    async def get_entry(self, user_id: str, model_id: str) -> CollectionEntry | None:
        """Get the entry for a (user, model) pair."""
        ...

    async def save_entry(self, entry: CollectionEntry) -> None:
        """Insert or replace a single entry."""
        ...

    async def replace_entries(self, entries: list[CollectionEntry]) -> None:
        """Replace the whole entry collection."""
        ...

    # --- Combined Operations ---

    async def commit_sighting(self, sighting: Sighting, entry: CollectionEntry) -> None:
        """Append a sighting and upsert its merged entry in one atomic write."""
        ...

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Initialize storage (create tables, load files, etc.)."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        ...
