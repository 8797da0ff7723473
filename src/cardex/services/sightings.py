"""Sighting store - append-only record of every capture.

Appending a sighting and merging it into the collection index happen in one
storage commit: either both become visible or neither does.

Example:
    >>> import asyncio
    >>> from cardex.catalog import Catalog
    >>> from cardex.models import Sighting
    >>> from cardex.services import CollectionIndex, SightingStore
    >>> from cardex.storage.memory import MemoryStorage
    >>> async def example():
    ...     storage = MemoryStorage()
    ...     store = SightingStore(Catalog.default(), storage, CollectionIndex(storage))
    ...     entry = await store.append_sighting(
    ...         Sighting(id="1", user_id="user-1", model_id="5", photo_reference="civic.jpg")
    ...     )
    ...     return entry.best_photo_reference
    >>> asyncio.run(example())
    'civic.jpg'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cardex.core.exceptions import ValidationError
from cardex.models.collection import CollectionEntry
from cardex.models.sighting import Sighting

if TYPE_CHECKING:
    from cardex.catalog import Catalog
    from cardex.protocols.storage import StorageBackend
    from cardex.services.collection import CollectionIndex

logger = logging.getLogger(__name__)


def is_retry_of(stored: Sighting, candidate: Sighting) -> bool:
    """Whether ``candidate`` is a resubmission of ``stored``.

    A retry may carry a fresh ``created_at`` when the caller left the
    timestamp to the core, so only the capture itself is compared.
    """
    return (
        stored.id == candidate.id
        and stored.key == candidate.key
        and stored.photo_reference == candidate.photo_reference
    )


class SightingStore:
    """Validates, persists and lists sightings.

    Lookups are linear scans over the flat sighting collection; volumes are
    tens to low thousands of records.

    Args:
        catalog: Source of valid model ids.
        storage: Backend holding both durable collections.
        index: Collection index the sightings are merged into.
    """

    def __init__(self, catalog: Catalog, storage: StorageBackend, index: CollectionIndex) -> None:
        self._catalog = catalog
        self._storage = storage
        self._index = index

    def validate(self, sighting: Sighting) -> None:
        """Reject sightings that must never be persisted.

        Raises:
            ValidationError: Empty user id or unknown model.
        """
        if not sighting.user_id:
            raise ValidationError("Sighting user_id must not be empty")
        if not self._catalog.has_model(sighting.model_id):
            raise ValidationError(f"Unknown model {sighting.model_id!r}")

    async def append_sighting(self, sighting: Sighting) -> CollectionEntry:
        """Record a sighting and merge it into the collection index.

        Re-appending a sighting that is already stored (a client retry) does
        not merge it a second time. The retry matches on id, user, model and
        photo; its timestamp may differ and the stored one is kept.

        Returns:
            The entry for the sighting's (user, model) pair after the merge.

        Raises:
            ValidationError: Invalid sighting, or an ID reused for a
                different sighting. Nothing is persisted.
            PersistenceError: The storage commit failed. Neither the
                sighting nor the merged entry is persisted.
        """
        try:
            self.validate(sighting)
        except ValidationError as exc:
            logger.debug(f"Rejected sighting {sighting.id}: {exc}")
            raise

        async with self._index.locked(sighting.user_id, sighting.model_id):
            stored = await self._storage.get_sighting(sighting.id)
            if stored is not None:
                if not is_retry_of(stored, sighting):
                    raise ValidationError(f"Sighting id {sighting.id!r} is already used")
                sighting = stored
                entry = await self._index.get_entry(sighting.user_id, sighting.model_id)
                if entry is not None:
                    logger.debug(f"Sighting {sighting.id} already recorded")
                    return entry

            entry = await self._index.prepare_merge(sighting)
            if stored is None:
                await self._storage.commit_sighting(sighting, entry)
            else:
                # Sighting survived but its entry did not; restore the entry
                await self._storage.save_entry(entry)

        logger.debug(f"Recorded sighting {sighting.id} for {sighting.user_id}/{sighting.model_id}")
        return entry

    async def list_sightings_by_model(self, model_id: str, user_id: str) -> list[Sighting]:
        """Sightings of one model by one user, newest first."""
        matches = [
            s for s in await self._storage.list_sightings()
            if s.model_id == model_id and s.user_id == user_id
        ]
        return sorted(matches, key=lambda s: s.created_at, reverse=True)

    async def list_all_sightings(self, user_id: str) -> list[Sighting]:
        """All sightings of a user, in the order they were recorded."""
        return [s for s in await self._storage.list_sightings() if s.user_id == user_id]
