"""Catalog reference models - manufacturers and car models.

Example:
    >>> from cardex.models.catalog import CarModel, Manufacturer
    >>> honda = Manufacturer(id="2", name="Honda", country="JP", slug="honda")
    >>> civic = CarModel(id="5", manufacturer_id="2", name="Civic", slug="civic")
    >>> civic.with_manufacturer(honda).display_name
    'Honda Civic'
"""

from __future__ import annotations

from pydantic import Field

from cardex.models.base import FrozenCardexModel


class Manufacturer(FrozenCardexModel):
    """A car manufacturer in the static catalog."""

    id: str = Field(..., min_length=1, description="Stable manufacturer ID")
    name: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2 code")
    slug: str = Field(..., min_length=1)


class CarModel(FrozenCardexModel):
    """A car model in the static catalog.

    Example:
        >>> from cardex.models.catalog import CarModel
        >>> m = CarModel(id="1", manufacturer_id="1", name="Corolla", slug="corolla")
        >>> m.to_storage()["manufacturerId"]
        '1'
    """

    id: str = Field(..., min_length=1, description="Stable model ID")
    manufacturer_id: str = Field(..., min_length=1, description="References Manufacturer.id")
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)

    def with_manufacturer(self, manufacturer: Manufacturer) -> ModelWithManufacturer:
        return ModelWithManufacturer(model=self, manufacturer=manufacturer)


class ModelWithManufacturer(FrozenCardexModel):
    """A model joined with its resolved manufacturer."""

    model: CarModel
    manufacturer: Manufacturer

    @property
    def id(self) -> str:
        return self.model.id

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def display_name(self) -> str:
        return f"{self.manufacturer.name} {self.model.name}"
