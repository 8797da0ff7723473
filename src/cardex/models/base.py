"""Base models and shared types.

This module provides the foundational model configuration used throughout
Cardex. Persisted JSON uses camelCase keys (``modelId``, ``createdAt``) while
Python attributes stay snake_case.

Example:
    >>> from cardex.models.base import CardexModel, ensure_utc
    >>> from datetime import datetime
    >>> ensure_utc(datetime(2024, 1, 1)).tzinfo is not None
    True
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel


# Kept byte-for-byte: photo URIs are opaque to the core
OpaqueStr = Annotated[str, StringConstraints(strip_whitespace=False)]


class CardexModel(BaseModel):
    """Base model with standard configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
        alias_generator=to_camel,
        # Fields such as ``model_id`` are domain names, not pydantic internals
        protected_namespaces=(),
    )

    def to_storage(self) -> dict:
        """Dump to the JSON-compatible camelCase shape used on disk."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FrozenCardexModel(CardexModel):
    """Immutable variant for catalog data and recorded facts."""

    model_config = ConfigDict(frozen=True)


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
