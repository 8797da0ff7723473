"""Sighting model - one user-submitted observation of a car model.

Sightings are the source of truth for the collection:
- Created exactly once per capture event
- Never edited or deleted afterwards
- Folded into the collection index by the merge rule

Example:
    >>> from cardex.models.sighting import Sighting
    >>> s = Sighting(
    ...     id="1718000000000",
    ...     user_id="user-1",
    ...     model_id="5",
    ...     photo_reference="file:///photos/civic.jpg",
    ... )
    >>> s.model_id
    '5'
    >>> s.created_at.tzinfo is not None
    True
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from cardex.models.base import CardexModel, FrozenCardexModel, OpaqueStr, ensure_utc, utcnow


class GeoLocation(CardexModel):
    """Where a sighting was made.

    Example:
        >>> from cardex.models.sighting import GeoLocation
        >>> GeoLocation(lat=52.52, lng=13.405).to_storage()
        {'lat': 52.52, 'lng': 13.405}
    """

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class Sighting(FrozenCardexModel):
    """Records a single spot of a car model by a user.

    ``user_id`` is deliberately unconstrained here: an empty user id is
    rejected by the sighting store with a domain ``ValidationError`` rather
    than at construction time.
    """

    id: str = Field(..., min_length=1, description="Sighting ID, time-based")
    user_id: str = Field(..., description="Who made the sighting")
    model_id: str = Field(..., min_length=1, description="References CarModel.id")
    photo_reference: OpaqueStr = Field(..., description="Opaque photo URI")
    created_at: datetime = Field(default_factory=utcnow, description="When the car was spotted")
    location: GeoLocation | None = None
    note: str | None = Field(default=None, alias="notes")

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def key(self) -> tuple[str, str]:
        """Collection index key for this sighting."""
        return (self.user_id, self.model_id)
