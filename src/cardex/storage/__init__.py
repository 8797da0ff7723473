"""Storage backend implementations.

All storage backends auto-create their schema or file on first write.
Just pass a connection/path and call initialize() - no manual setup needed.

Quick Start:
    from cardex.storage import create_storage

    storage = create_storage("json:///data/cardex.json")  # Key-value JSON file
    storage = create_storage("sqlite:///data/cardex.db")  # SQLite
    storage = create_storage("memory://")                 # In-memory

    await storage.initialize()

Environment Variables:
    export CARDEX_STORAGE_URL=sqlite:///data/cardex.db
    storage = storage_from_settings(get_settings())
"""

from cardex.storage.factory import create_storage, detect_storage_type, storage_from_settings
from cardex.storage.json_file import JSONFileStorage
from cardex.storage.memory import MemoryStorage
from cardex.storage.sqlite import SQLiteStorage

__all__ = [
    "JSONFileStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "create_storage",
    "detect_storage_type",
    "storage_from_settings",
]
