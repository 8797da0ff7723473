"""
Cardex - Local collection tracking for car spotting.

Record sightings of real-world car models and track how much of a fixed
catalog of manufacturers and models you have collected.

Key Features:
- Append-only sighting history
- Incrementally maintained collection index ("dex")
- Order-independent first-spotted timestamps
- Progress, search and filter over the catalog
- Swappable storage (memory, JSON key-value file, SQLite)

Quick Start:
    >>> from cardex import Cardex, CaptureRequest, create_storage
    >>> storage = create_storage("json:///data/cardex.json")
    >>> async with Cardex(storage=storage) as dex:
    ...     result = await dex.submit_capture(
    ...         CaptureRequest(model_id="5", photo_reference="file:///civic.jpg")
    ...     )
    ...     print(result.progress.percentage)
"""

from cardex.catalog import Catalog
from cardex.core.cardex import Cardex
from cardex.core.config import Settings, get_settings
from cardex.core.exceptions import (
    CardexError,
    CatalogIntegrityError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from cardex.models import (
    CaptureRequest,
    CaptureResult,
    CarModel,
    CollectionEntry,
    CollectionStatus,
    DexFilter,
    DexItem,
    GeoLocation,
    Manufacturer,
    ModelDetail,
    ModelWithManufacturer,
    Progress,
    Sighting,
    User,
)
from cardex.protocols.storage import StorageBackend
from cardex.services import CollectionIndex, QueryService, SightingStore, merge_entry
from cardex.storage import (
    JSONFileStorage,
    MemoryStorage,
    SQLiteStorage,
    create_storage,
    storage_from_settings,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Cardex",
    "Catalog",
    "Settings",
    "get_settings",
    # Services
    "CollectionIndex",
    "QueryService",
    "SightingStore",
    "merge_entry",
    # Models
    "CaptureRequest",
    "CaptureResult",
    "CarModel",
    "CollectionEntry",
    "CollectionStatus",
    "DexFilter",
    "DexItem",
    "GeoLocation",
    "Manufacturer",
    "ModelDetail",
    "ModelWithManufacturer",
    "Progress",
    "Sighting",
    "User",
    # Storage
    "StorageBackend",
    "JSONFileStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "create_storage",
    "storage_from_settings",
    # Exceptions
    "CardexError",
    "CatalogIntegrityError",
    "ConfigurationError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
