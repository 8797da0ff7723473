"""Collection tracking services: sighting store, collection index, queries."""

from cardex.services.collection import CollectionIndex, fold_entries, merge_entry
from cardex.services.query import QueryService, apply_filter, search_models
from cardex.services.sightings import SightingStore

__all__ = [
    "CollectionIndex",
    "QueryService",
    "SightingStore",
    "apply_filter",
    "fold_entries",
    "merge_entry",
    "search_models",
]
