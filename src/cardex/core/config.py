"""Cardex configuration.

Application settings loaded from environment variables with CARDEX_ prefix.

Example:
    >>> from cardex.core.config import get_settings
    >>> settings = get_settings(log_level="DEBUG")
    >>> settings.log_level
    'DEBUG'
    >>> settings.storage_url
    'memory://'
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler

from cardex.models.user import User


class Settings(BaseSettings):
    """Application settings.

    Loads from environment variables with CARDEX_ prefix.

    Example:
        >>> from cardex.core.config import Settings
        >>> s = Settings(storage_url="sqlite:///cardex.db")
        >>> s.storage_url
        'sqlite:///cardex.db'
        >>> s.key_prefix
        '@cardex'
    """

    model_config = SettingsConfigDict(
        env_prefix="CARDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_url: str = Field(default="memory://", description="Storage backend URL")
    data_dir: Path | None = Field(default=None, description="Base directory for relative storage paths")
    key_prefix: str = Field(default="@cardex", min_length=1, description="Namespace for persisted keys")

    # Catalog
    catalog_path: Path | None = Field(default=None, description="Override the embedded catalog")

    # Current user
    user_id: str = Field(default="user-1", min_length=1)
    user_display_name: str = Field(default="Car Spotter")
    user_email: str = Field(default="spotter@cardex.local")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "plain"] = Field(default="console", description="Log format: console or plain")

    def current_user(self) -> User:
        """The implicit single user of this process."""
        return User(id=self.user_id, display_name=self.user_display_name, email=self.user_email)


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Example:
        >>> from cardex.core.config import get_settings
        >>> s = get_settings(user_id="u-42")
        >>> s.current_user().id
        'u-42'
    """
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings."""
    if settings.log_format == "console":
        handler: logging.Handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        fmt = "%(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=fmt,
        handlers=[handler],
        force=True,
    )
