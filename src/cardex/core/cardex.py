"""Cardex - Main entry point for collection tracking.

The Cardex class wires catalog, storage, sighting store, collection index
and queries together, and exposes the request/response contract used by
capture, catalog and dex screens.

Example:
    >>> import asyncio
    >>> from cardex import Cardex, CaptureRequest, MemoryStorage
    >>> async def example():
    ...     async with Cardex(storage=MemoryStorage()) as dex:
    ...         result = await dex.submit_capture(
    ...             CaptureRequest(model_id="5", photo_reference="file:///civic.jpg")
    ...         )
    ...         return result.progress.spotted_count, result.is_new_model
    >>> asyncio.run(example())
    (1, True)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from cardex.catalog import Catalog
from cardex.core.exceptions import ValidationError
from cardex.models.capture import CaptureRequest, CaptureResult
from cardex.models.sighting import Sighting
from cardex.models.user import User
from cardex.services.collection import CollectionIndex
from cardex.services.query import QueryService
from cardex.services.sightings import SightingStore
from cardex.utils.ids import new_sighting_id

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from cardex.core.config import Settings
    from cardex.models.catalog import CarModel, Manufacturer, ModelWithManufacturer
    from cardex.models.collection import (
        CollectionEntry,
        DexFilter,
        DexItem,
        ModelDetail,
        Progress,
    )
    from cardex.protocols.storage import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_USER = User(id="user-1", display_name="Car Spotter", email="spotter@cardex.local")


class Cardex:
    """Main orchestrator for collection tracking.

    Args:
        storage: Required storage backend.
        catalog: Reference data (default: the bundled catalog).
        user: The implicit current user, used when a request omits user_id.
        id_factory: Source of sighting ids (default: time-based).
    """

    def __init__(
        self,
        storage: StorageBackend,
        *,
        catalog: Catalog | None = None,
        user: User = DEFAULT_USER,
        id_factory: Callable[[], str] = new_sighting_id,
    ) -> None:
        self._storage = storage
        self._catalog = catalog if catalog is not None else Catalog.default()
        self._user = user
        self._id_factory = id_factory
        self._index = CollectionIndex(storage)
        self._sightings = SightingStore(self._catalog, storage, self._index)
        self._queries = QueryService(self._catalog, self._index, self._sightings)
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Cardex:
        """Build from application settings (storage URL, catalog, user)."""
        from cardex.storage.factory import storage_from_settings

        catalog = Catalog.from_file(settings.catalog_path) if settings.catalog_path else None
        return cls(
            storage=storage_from_settings(settings),
            catalog=catalog,
            user=settings.current_user(),
        )

    # --- Components ---

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def user(self) -> User:
        """The current user."""
        return self._user

    @property
    def index(self) -> CollectionIndex:
        return self._index

    @property
    def sightings(self) -> SightingStore:
        return self._sightings

    @property
    def queries(self) -> QueryService:
        return self._queries

    # --- Capture submission ---

    def build_sighting(self, request: CaptureRequest) -> Sighting:
        """Turn a capture request into a sighting, filling in defaults."""
        fields: dict[str, Any] = {
            "id": request.id or self._id_factory(),
            "user_id": request.user_id if request.user_id is not None else self._user.id,
            "model_id": request.model_id,
            "photo_reference": request.photo_reference,
            "location": request.location,
            "note": request.note,
        }
        if request.created_at is not None:
            fields["created_at"] = request.created_at
        try:
            return Sighting(**fields)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid capture: {exc}") from exc

    async def submit_capture(self, request: CaptureRequest | dict[str, Any]) -> CaptureResult:
        """Record a capture and report the updated collection state.

        Raises:
            ValidationError: Invalid request, unknown model, empty user.
            PersistenceError: Storage failed; nothing was recorded.
        """
        if not isinstance(request, CaptureRequest):
            try:
                request = CaptureRequest.model_validate(request)
            except PydanticValidationError as exc:
                raise ValidationError(f"Invalid capture: {exc}") from exc

        sighting = self.build_sighting(request)
        was_spotted = await self._queries.is_model_spotted(sighting.user_id, sighting.model_id)
        entry = await self._sightings.append_sighting(sighting)
        # A retry keeps the sighting recorded by the first attempt
        sighting = await self._storage.get_sighting(sighting.id) or sighting
        progress = await self._queries.get_progress(sighting.user_id)
        logger.info(
            f"Captured model {sighting.model_id} for {sighting.user_id} "
            f"({progress.spotted_count}/{progress.total_count})"
        )
        return CaptureResult(
            sighting=sighting,
            entry=entry,
            progress=progress,
            is_new_model=not was_spotted,
        )

    # --- Catalog browsing ---

    def list_manufacturers(self) -> list[Manufacturer]:
        return self._catalog.list_manufacturers()

    def list_models_by_manufacturer(self, manufacturer_id: str) -> list[CarModel]:
        return self._catalog.list_models_by_manufacturer(manufacturer_id)

    def list_models_joined(self) -> list[ModelWithManufacturer]:
        return self._catalog.list_models_joined()

    # --- Dex screen ---

    def _user_id(self, user_id: str | None) -> str:
        return user_id if user_id is not None else self._user.id

    async def get_progress(self, user_id: str | None = None) -> Progress:
        return await self._queries.get_progress(self._user_id(user_id))

    async def get_manufacturer_progress(
        self, manufacturer_id: str, user_id: str | None = None
    ) -> Progress:
        return await self._queries.get_manufacturer_progress(self._user_id(user_id), manufacturer_id)

    async def filter_models(
        self,
        models: Sequence[ModelWithManufacturer],
        predicate: DexFilter | str,
        user_id: str | None = None,
    ) -> list[ModelWithManufacturer]:
        return await self._queries.filter_models(models, predicate, self._user_id(user_id))

    def search_models(
        self, query: str, models: Sequence[ModelWithManufacturer] | None = None
    ) -> list[ModelWithManufacturer]:
        return self._queries.search_models(query, models)

    async def browse(
        self,
        query: str = "",
        predicate: DexFilter | str = "all",
        user_id: str | None = None,
    ) -> list[DexItem]:
        return await self._queries.browse(self._user_id(user_id), query, predicate)

    async def get_model_detail(self, model_id: str, user_id: str | None = None) -> ModelDetail:
        return await self._queries.get_model_detail(self._user_id(user_id), model_id)

    async def list_entries(self, user_id: str | None = None) -> list[CollectionEntry]:
        return await self._index.list_entries(self._user_id(user_id))

    async def list_sightings(self, user_id: str | None = None) -> list[Sighting]:
        return await self._sightings.list_all_sightings(self._user_id(user_id))

    async def rebuild_index(self, user_id: str | None = None) -> list[CollectionEntry]:
        return await self._index.rebuild(user_id)

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Initialize storage."""
        if not self._initialized:
            await self._storage.initialize()
            self._initialized = True

    async def close(self) -> None:
        """Close storage."""
        if self._initialized:
            await self._storage.close()
            self._initialized = False

    async def __aenter__(self) -> Cardex:
        await self.initialize()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
