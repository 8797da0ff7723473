"""
Storage Factory - Easy storage backend configuration.

Usage:
    from cardex.storage import create_storage

    # Local file, same layout as the mobile client
    storage = create_storage("json:///data/cardex.json")

    # SQLite
    storage = create_storage("sqlite:///data/cardex.db")

    # Memory (for testing)
    storage = create_storage("memory://")
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Literal

from cardex.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from cardex.core.config import Settings
    from cardex.protocols.storage import StorageBackend

StorageType = Literal["memory", "json", "sqlite"]


def detect_storage_type(connection_string: str) -> StorageType:
    """Detect storage type from connection string.

    Example:
        >>> detect_storage_type("memory://")
        'memory'
        >>> detect_storage_type("./state.json")
        'json'
        >>> detect_storage_type("sqlite:///cardex.db")
        'sqlite'
    """
    if connection_string.startswith("memory://") or connection_string == ":memory:":
        return "memory"

    if connection_string.startswith("json://") or connection_string.endswith(".json"):
        return "json"

    if connection_string.startswith("sqlite://") or connection_string.endswith((".db", ".sqlite")):
        return "sqlite"

    raise ConfigurationError(f"Cannot detect storage type from {connection_string!r}")


def _strip_scheme(connection_string: str, scheme: str) -> str:
    prefix = f"{scheme}:///"
    if connection_string.startswith(prefix):
        return connection_string[len(prefix):]
    return connection_string


def create_storage(
    connection_string: str = "memory://",
    *,
    key_prefix: str = "@cardex",
    data_dir: str | os.PathLike[str] | None = None,
) -> StorageBackend:
    """
    Create storage backend from connection string.

    Args:
        connection_string: Backend URL or file path
            - "memory://" -> MemoryStorage
            - "json:///path/to/state.json" -> JSONFileStorage
            - "sqlite:///path/to/cardex.db" -> SQLiteStorage
        key_prefix: Namespace for the JSON key-value layout.
        data_dir: Base directory for relative file paths.

    Returns:
        Configured, not yet initialized storage backend.

    Raises:
        ConfigurationError: If the backend cannot be determined.
    """
    storage_type = detect_storage_type(connection_string)

    if storage_type == "memory":
        from cardex.storage.memory import MemoryStorage
        return MemoryStorage()

    path = _strip_scheme(connection_string, storage_type)
    if not path:
        raise ConfigurationError(f"Missing path in {connection_string!r}")
    if data_dir and not os.path.isabs(path):
        path = os.path.join(data_dir, path)

    if storage_type == "json":
        from cardex.storage.json_file import JSONFileStorage
        return JSONFileStorage(path, key_prefix=key_prefix)

    from cardex.storage.sqlite import SQLiteStorage
    return SQLiteStorage(path)


def storage_from_settings(settings: Settings) -> StorageBackend:
    """Create storage from application settings."""
    return create_storage(
        settings.storage_url,
        key_prefix=settings.key_prefix,
        data_dir=settings.data_dir,
    )
