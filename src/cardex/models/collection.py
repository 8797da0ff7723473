"""Collection (dex) models - derived per-user, per-model state.

Example:
    >>> from cardex.models.collection import Progress
    >>> Progress.from_counts(5, 20).percentage
    25
    >>> Progress.from_counts(0, 0).percentage
    0
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from cardex.models.base import CardexModel, FrozenCardexModel, OpaqueStr, ensure_utc
from cardex.models.catalog import ModelWithManufacturer
from cardex.models.sighting import Sighting


class CollectionStatus(str, Enum):
    """Collection state of a model for a user.

    Only one state exists; an unspotted model simply has no entry.
    """

    SPOTTED = "spotted"


class DexFilter(str, Enum):
    """Predicate used by the browse screen.

    Example:
        >>> DexFilter("unspotted") is DexFilter.UNSPOTTED
        True
    """

    ALL = "all"
    SPOTTED = "spotted"
    UNSPOTTED = "unspotted"


class CollectionEntry(FrozenCardexModel):
    """Derived record summarizing one (user, model) pair.

    Mutated only through ``cardex.services.collection.merge_entry``.
    Persisted under the mobile client's ``bestPhotoUrl`` key.
    """

    user_id: str = Field(..., min_length=1)
    model_id: str = Field(..., min_length=1)
    status: CollectionStatus = CollectionStatus.SPOTTED
    best_photo_reference: OpaqueStr = Field(..., alias="bestPhotoUrl")
    first_spotted_at: datetime

    @field_validator("first_spotted_at")
    @classmethod
    def _aware_first_spotted_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.model_id)


class Progress(CardexModel):
    """Aggregate ratio of distinct spotted models to catalog models."""

    spotted_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)

    @classmethod
    def from_counts(cls, spotted: int, total: int) -> Progress:
        """Build a summary, rounding halves up like the mobile client did."""
        if total <= 0:
            return cls(spotted_count=spotted, total_count=0, percentage=0)
        percentage = math.floor(100 * spotted / total + 0.5)
        return cls(
            spotted_count=spotted,
            total_count=total,
            percentage=max(0, min(100, percentage)),
        )


class DexItem(FrozenCardexModel):
    """A catalog model as shown on the dex grid."""

    model: ModelWithManufacturer
    entry: CollectionEntry | None = None

    @property
    def spotted(self) -> bool:
        return self.entry is not None


class ModelDetail(FrozenCardexModel):
    """Everything the model screen shows for one user."""

    model: ModelWithManufacturer
    entry: CollectionEntry | None = None
    sightings: list[Sighting] = Field(default_factory=list, description="Newest first")

    @property
    def spotted(self) -> bool:
        return self.entry is not None
