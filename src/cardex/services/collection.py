"""Collection index - the derived (user, model) -> entry mapping.

The index is maintained incrementally: every new sighting is folded into the
existing entry by ``merge_entry`` instead of rescanning the sighting history
on each read.

Merge rule:
- No entry yet: create one from the sighting.
- Entry exists: the newest merged photo wins, and ``first_spotted_at``
  becomes the earlier of the two timestamps, so merges applied out of
  chronological order still report the true first sighting.

Example:
    >>> from datetime import datetime, UTC
    >>> from cardex.models import Sighting
    >>> from cardex.services.collection import merge_entry
    >>> late = Sighting(id="2", user_id="u1", model_id="5", photo_reference="late.jpg",
    ...                 created_at=datetime(2024, 6, 2, tzinfo=UTC))
    >>> early = Sighting(id="1", user_id="u1", model_id="5", photo_reference="early.jpg",
    ...                  created_at=datetime(2024, 6, 1, tzinfo=UTC))
    >>> entry = merge_entry(merge_entry(None, late), early)
    >>> entry.first_spotted_at.day, entry.best_photo_reference
    (1, 'early.jpg')
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from cardex.core.exceptions import ValidationError
from cardex.models.collection import CollectionEntry, CollectionStatus
from cardex.models.sighting import Sighting
from cardex.utils.locks import KeyedLock

if TYPE_CHECKING:
    from cardex.protocols.storage import StorageBackend

logger = logging.getLogger(__name__)


def merge_entry(existing: CollectionEntry | None, sighting: Sighting) -> CollectionEntry:
    """Fold one sighting into the entry for its (user, model) pair.

    Raises:
        ValidationError: If ``existing`` belongs to a different key.
    """
    if existing is None:
        return CollectionEntry(
            user_id=sighting.user_id,
            model_id=sighting.model_id,
            status=CollectionStatus.SPOTTED,
            best_photo_reference=sighting.photo_reference,
            first_spotted_at=sighting.created_at,
        )

    if existing.key != sighting.key:
        raise ValidationError(
            f"Cannot merge sighting {sighting.id} for {sighting.key} into entry for {existing.key}"
        )

    return existing.model_copy(
        update={
            "status": CollectionStatus.SPOTTED,
            "best_photo_reference": sighting.photo_reference,
            "first_spotted_at": min(existing.first_spotted_at, sighting.created_at),
        }
    )


def fold_entries(sightings: Iterable[Sighting]) -> list[CollectionEntry]:
    """Recompute entries from a sighting history, in the given order."""
    entries: dict[tuple[str, str], CollectionEntry] = {}
    for sighting in sightings:
        entries[sighting.key] = merge_entry(entries.get(sighting.key), sighting)
    return list(entries.values())


class CollectionIndex:
    """Maintains collection entries under per-key mutual exclusion.

    Args:
        storage: Backend holding the entry collection.

    Example:
        >>> import asyncio
        >>> from cardex.storage.memory import MemoryStorage
        >>> from cardex.services.collection import CollectionIndex
        >>> index = CollectionIndex(MemoryStorage())
        >>> asyncio.run(index.list_entries("user-1"))
        []
    """

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage
        self._locks = KeyedLock()

    @asynccontextmanager
    async def locked(self, user_id: str, model_id: str) -> AsyncIterator[None]:
        """Hold the merge lock for one (user, model) key."""
        async with self._locks.hold((user_id, model_id)):
            yield

    async def prepare_merge(self, sighting: Sighting) -> CollectionEntry:
        """Compute the merged entry without persisting it.

        Callers must hold ``locked()`` for the sighting's key until the
        result is persisted.
        """
        existing = await self._storage.get_entry(sighting.user_id, sighting.model_id)
        return merge_entry(existing, sighting)

    async def merge_sighting(self, sighting: Sighting) -> CollectionEntry:
        """Merge a sighting into the index and persist only the entry."""
        async with self.locked(sighting.user_id, sighting.model_id):
            entry = await self.prepare_merge(sighting)
            await self._storage.save_entry(entry)
        logger.debug(f"Merged sighting {sighting.id} into entry {entry.key}")
        return entry

    async def get_entry(self, user_id: str, model_id: str) -> CollectionEntry | None:
        return await self._storage.get_entry(user_id, model_id)

    async def list_entries(self, user_id: str) -> list[CollectionEntry]:
        return [e for e in await self._storage.list_entries() if e.user_id == user_id]

    async def spotted_model_ids(self, user_id: str) -> set[str]:
        return {e.model_id for e in await self._storage.list_entries() if e.user_id == user_id}

    async def rebuild(self, user_id: str | None = None) -> list[CollectionEntry]:
        """Recompute entries from the full sighting history.

        Repairs an index that drifted from its sightings. Waits for in-flight
        merges and blocks new ones while it runs.

        Args:
            user_id: Only rebuild this user's entries; others are kept.

        Returns:
            The rebuilt entries (for ``user_id`` when given).
        """
        async with self._locks.exclusive():
            sightings = await self._storage.list_sightings()
            if user_id is None:
                rebuilt = fold_entries(sightings)
                await self._storage.replace_entries(rebuilt)
            else:
                rebuilt = fold_entries(s for s in sightings if s.user_id == user_id)
                others = [e for e in await self._storage.list_entries() if e.user_id != user_id]
                await self._storage.replace_entries([*others, *rebuilt])
        logger.info(f"Rebuilt collection index: {len(rebuilt)} entries")
        return rebuilt
