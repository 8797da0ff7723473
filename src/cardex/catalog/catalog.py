"""Static catalog of manufacturers and car models.

The catalog is data, not code: it ships as an embedded JSON resource and can
be swapped for another file without touching merge or query logic.

Example:
    >>> from cardex.catalog import Catalog
    >>> catalog = Catalog.default()
    >>> [m.name for m in catalog.list_manufacturers()][:3]
    ['Toyota', 'Honda', 'BMW']
    >>> [m.name for m in catalog.list_models_by_manufacturer("2")]
    ['Civic', 'Accord', 'CR-V', 'Pilot']
    >>> catalog.list_models_by_manufacturer("does-not-exist")
    []
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cardex.core.exceptions import CatalogIntegrityError
from cardex.models.catalog import CarModel, Manufacturer, ModelWithManufacturer

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "data/catalog.json"


class Catalog:
    """Read-only lookup over manufacturers and models.

    Order is catalog definition order everywhere. Duplicate ids are rejected
    at construction; dangling manufacturer references are reported by
    ``validate()`` and by ``list_models_joined()``.

    Args:
        manufacturers: Manufacturers in definition order.
        models: Models in definition order.

    Raises:
        CatalogIntegrityError: If an id is defined twice.
    """

    def __init__(
        self,
        manufacturers: Iterable[Manufacturer],
        models: Iterable[CarModel],
    ) -> None:
        self._manufacturers = tuple(manufacturers)
        self._models = tuple(models)
        self._manufacturers_by_id = _index_unique(self._manufacturers, "manufacturer")
        self._models_by_id = _index_unique(self._models, "model")

    # --- Loading ---

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Catalog:
        """Build and validate a catalog from its JSON document shape.

        Example:
            >>> from cardex.catalog import Catalog
            >>> c = Catalog.from_dict({
            ...     "manufacturers": [{"id": "m1", "name": "Lada", "country": "RU", "slug": "lada"}],
            ...     "models": [{"id": "x1", "manufacturerId": "m1", "name": "Niva", "slug": "niva"}],
            ... })
            >>> len(c)
            1
        """
        try:
            manufacturers = [Manufacturer.model_validate(m) for m in data.get("manufacturers", [])]
            models = [CarModel.model_validate(m) for m in data.get("models", [])]
        except PydanticValidationError as exc:
            raise CatalogIntegrityError(f"Malformed catalog entry: {exc}") from exc

        catalog = cls(manufacturers, models)
        catalog.validate()
        return catalog

    @classmethod
    def from_file(cls, path: str | Path) -> Catalog:
        """Load a catalog from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogIntegrityError(f"Cannot read catalog {path}: {exc}") from exc
        catalog = cls.from_dict(data)
        logger.debug(f"Loaded catalog from {path}: {len(catalog)} models")
        return catalog

    @classmethod
    def default(cls) -> Catalog:
        """Load the catalog bundled with the package."""
        resource = resources.files("cardex.catalog").joinpath(DEFAULT_CATALOG_RESOURCE)
        return cls.from_dict(json.loads(resource.read_text(encoding="utf-8")))

    def validate(self) -> None:
        """Check that every model resolves to a manufacturer.

        Raises:
            CatalogIntegrityError: On the first dangling reference.
        """
        for model in self._models:
            if model.manufacturer_id not in self._manufacturers_by_id:
                raise CatalogIntegrityError(
                    f"Model {model.id!r} ({model.name}) references missing "
                    f"manufacturer {model.manufacturer_id!r}"
                )

    # --- Reads ---

    def list_manufacturers(self) -> list[Manufacturer]:
        return list(self._manufacturers)

    def list_models(self) -> list[CarModel]:
        return list(self._models)

    def list_models_by_manufacturer(self, manufacturer_id: str) -> list[CarModel]:
        """Models of one manufacturer; empty for unknown manufacturers."""
        return [m for m in self._models if m.manufacturer_id == manufacturer_id]

    def list_models_joined(self) -> list[ModelWithManufacturer]:
        """Pair every model with its manufacturer.

        Raises:
            CatalogIntegrityError: If a model references a missing manufacturer.
        """
        joined: list[ModelWithManufacturer] = []
        for model in self._models:
            manufacturer = self._manufacturers_by_id.get(model.manufacturer_id)
            if manufacturer is None:
                raise CatalogIntegrityError(
                    f"Model {model.id!r} references missing manufacturer {model.manufacturer_id!r}"
                )
            joined.append(model.with_manufacturer(manufacturer))
        return joined

    def get_manufacturer(self, manufacturer_id: str) -> Manufacturer | None:
        return self._manufacturers_by_id.get(manufacturer_id)

    def get_model(self, model_id: str) -> CarModel | None:
        return self._models_by_id.get(model_id)

    def get_model_joined(self, model_id: str) -> ModelWithManufacturer | None:
        model = self._models_by_id.get(model_id)
        if model is None:
            return None
        manufacturer = self._manufacturers_by_id.get(model.manufacturer_id)
        if manufacturer is None:
            raise CatalogIntegrityError(
                f"Model {model.id!r} references missing manufacturer {model.manufacturer_id!r}"
            )
        return model.with_manufacturer(manufacturer)

    def has_model(self, model_id: str) -> bool:
        return model_id in self._models_by_id

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"Catalog(manufacturers={len(self._manufacturers)}, models={len(self._models)})"


def _index_unique(items: tuple[Any, ...], kind: str) -> dict[str, Any]:
    index: dict[str, Any] = {}
    for item in items:
        if item.id in index:
            raise CatalogIntegrityError(f"Duplicate {kind} id {item.id!r}")
        index[item.id] = item
    return index
