"""Core configuration, errors and orchestration."""

from cardex.core.config import Settings, configure_logging, get_settings
from cardex.core.exceptions import (
    CardexError,
    CatalogIntegrityError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "Settings",
    "configure_logging",
    "get_settings",
    "CardexError",
    "CatalogIntegrityError",
    "ConfigurationError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
