"""Query and aggregation over catalog, collection index and sightings.

Every operation here is a read: nothing mutates the sighting store or the
collection index.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, TypeVar

from cardex.core.exceptions import NotFoundError, ValidationError
from cardex.models.catalog import CarModel, ModelWithManufacturer
from cardex.models.collection import DexFilter, DexItem, ModelDetail, Progress

if TYPE_CHECKING:
    from cardex.catalog import Catalog
    from cardex.services.collection import CollectionIndex
    from cardex.services.sightings import SightingStore

ModelT = TypeVar("ModelT", CarModel, ModelWithManufacturer)


def search_models(query: str, models: Sequence[ModelWithManufacturer]) -> list[ModelWithManufacturer]:
    """Case-insensitive substring match on model or manufacturer name.

    An empty or whitespace-only query returns the input unchanged. Other
    queries are matched as given, without trimming.

    Example:
        >>> from cardex.catalog import Catalog
        >>> models = Catalog.default().list_models_joined()
        >>> [m.display_name for m in search_models("civic", models)]
        ['Honda Civic']
        >>> len(search_models("", models)) == len(models)
        True
    """
    if not query.strip():
        return list(models)
    needle = query.lower()
    return [
        m for m in models
        if needle in m.model.name.lower() or needle in m.manufacturer.name.lower()
    ]


def parse_filter(predicate: DexFilter | str) -> DexFilter:
    try:
        return DexFilter(predicate)
    except ValueError as exc:
        choices = ", ".join(f.value for f in DexFilter)
        raise ValidationError(f"Unknown filter {predicate!r} (expected one of: {choices})") from exc


def apply_filter(models: Sequence[ModelT], predicate: DexFilter | str, spotted_ids: set[str]) -> list[ModelT]:
    """Filter ``models`` against a known set of spotted model ids."""
    mode = parse_filter(predicate)
    if mode is DexFilter.SPOTTED:
        return [m for m in models if m.id in spotted_ids]
    if mode is DexFilter.UNSPOTTED:
        return [m for m in models if m.id not in spotted_ids]
    return list(models)


class QueryService:
    """Progress, filtering, search and detail views.

    Args:
        catalog: Static reference data.
        index: Collection index for spotted state.
        sightings: Sighting store for per-model history.
    """

    def __init__(self, catalog: Catalog, index: CollectionIndex, sightings: SightingStore) -> None:
        self._catalog = catalog
        self._index = index
        self._sightings = sightings

    async def get_progress(self, user_id: str) -> Progress:
        """Distinct spotted models against the full catalog."""
        entries = await self._index.list_entries(user_id)
        return Progress.from_counts(len(entries), len(self._catalog))

    async def get_manufacturer_progress(self, user_id: str, manufacturer_id: str) -> Progress:
        """Progress restricted to one manufacturer's models.

        Raises:
            NotFoundError: Unknown manufacturer.
        """
        if self._catalog.get_manufacturer(manufacturer_id) is None:
            raise NotFoundError(f"Manufacturer {manufacturer_id!r}")
        models = self._catalog.list_models_by_manufacturer(manufacturer_id)
        spotted_ids = await self._index.spotted_model_ids(user_id)
        spotted = sum(1 for m in models if m.id in spotted_ids)
        return Progress.from_counts(spotted, len(models))

    async def is_model_spotted(self, user_id: str, model_id: str) -> bool:
        return await self._index.get_entry(user_id, model_id) is not None

    async def filter_models(
        self,
        models: Sequence[ModelT],
        predicate: DexFilter | str,
        user_id: str,
    ) -> list[ModelT]:
        """Keep models matching ``predicate``, preserving input order.

        Raises:
            ValidationError: Unknown predicate.
        """
        spotted_ids = await self._index.spotted_model_ids(user_id)
        return apply_filter(models, predicate, spotted_ids)

    def search_models(
        self,
        query: str,
        models: Sequence[ModelWithManufacturer] | None = None,
    ) -> list[ModelWithManufacturer]:
        """Search ``models``, or the whole joined catalog when omitted."""
        if models is None:
            models = self._catalog.list_models_joined()
        return search_models(query, models)

    async def browse(
        self,
        user_id: str,
        query: str = "",
        predicate: DexFilter | str = DexFilter.ALL,
    ) -> list[DexItem]:
        """The dex grid: joined catalog, searched, then filtered."""
        entries = {e.model_id: e for e in await self._index.list_entries(user_id)}
        models = search_models(query, self._catalog.list_models_joined())
        models = apply_filter(models, predicate, set(entries))
        return [DexItem(model=m, entry=entries.get(m.id)) for m in models]

    async def get_model_detail(self, user_id: str, model_id: str) -> ModelDetail:
        """A model with the user's entry and sighting history.

        Raises:
            NotFoundError: Unknown model.
        """
        model = self._catalog.get_model_joined(model_id)
        if model is None:
            raise NotFoundError(f"Model {model_id!r}")
        return ModelDetail(
            model=model,
            entry=await self._index.get_entry(user_id, model_id),
            sightings=await self._sightings.list_sightings_by_model(model_id, user_id),
        )
