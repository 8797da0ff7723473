"""Protocol definitions - all extension points."""

from cardex.protocols.storage import StorageBackend

__all__ = [
    # Storage
    "StorageBackend",
]
