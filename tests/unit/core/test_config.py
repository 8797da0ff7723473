"""Tests for cardex.core.config and cardex.core.exceptions."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError
from rich.logging import RichHandler

from cardex.core.config import Settings, configure_logging, get_settings
from cardex.core.exceptions import (
    CardexError,
    CatalogIntegrityError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CARDEX_STORAGE_URL", "CARDEX_USER_ID", "CARDEX_KEY_PREFIX"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.storage_url == "memory://"
        assert settings.key_prefix == "@cardex"
        assert settings.catalog_path is None
        assert settings.current_user().id == "user-1"

    def test_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CARDEX_STORAGE_URL", "sqlite:///cardex.db")
        monkeypatch.setenv("CARDEX_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("CARDEX_USER_ID", "env-user")
        settings = Settings()
        assert settings.storage_url == "sqlite:///cardex.db"
        assert settings.data_dir == tmp_path
        assert settings.current_user().id == "env-user"

    def test_overrides(self) -> None:
        settings = get_settings(user_id="u-42", user_display_name="Forty Two")
        user = settings.current_user()
        assert (user.id, user.display_name) == ("u-42", "Forty Two")

    def test_invalid(self) -> None:
        with pytest.raises(PydanticValidationError):
            get_settings(log_format="json")
        with pytest.raises(PydanticValidationError):
            get_settings(user_id="")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console(self) -> None:
        configure_logging(get_settings(log_level="debug"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0], RichHandler)

    def test_plain(self) -> None:
        configure_logging(get_settings(log_format="plain", log_level="WARNING"))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0], RichHandler)


class TestExceptions:
    """All domain errors share one base."""

    @pytest.mark.parametrize(
        "exc_type",
        [ValidationError, PersistenceError, CatalogIntegrityError, NotFoundError, ConfigurationError],
    )
    def test_hierarchy(self, exc_type: type[CardexError]) -> None:
        with pytest.raises(CardexError):
            raise exc_type("boom")
