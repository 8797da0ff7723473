"""Pydantic models for Cardex."""

from cardex.models.base import CardexModel, FrozenCardexModel
from cardex.models.capture import CaptureRequest, CaptureResult
from cardex.models.catalog import CarModel, Manufacturer, ModelWithManufacturer
from cardex.models.collection import (
    CollectionEntry,
    CollectionStatus,
    DexFilter,
    DexItem,
    ModelDetail,
    Progress,
)
from cardex.models.sighting import GeoLocation, Sighting
from cardex.models.user import User

__all__ = [
    # Base
    "CardexModel",
    "FrozenCardexModel",
    # Catalog
    "CarModel",
    "Manufacturer",
    "ModelWithManufacturer",
    # Sightings
    "GeoLocation",
    "Sighting",
    # Collection
    "CollectionEntry",
    "CollectionStatus",
    "DexFilter",
    "DexItem",
    "ModelDetail",
    "Progress",
    # Capture boundary
    "CaptureRequest",
    "CaptureResult",
    # Identity
    "User",
]
