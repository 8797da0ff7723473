"""Capture submission request/response models.

These are the boundary contract with the capture screen: the caller sends a
``CaptureRequest`` and renders its confirmation from the ``CaptureResult``
without a second round trip.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cardex.models.base import CardexModel, OpaqueStr
from cardex.models.collection import CollectionEntry, Progress
from cardex.models.sighting import GeoLocation, Sighting


class CaptureRequest(CardexModel):
    """A capture event as submitted by the UI.

    ``id``, ``user_id`` and ``created_at`` are filled in by the core when
    absent.
    """

    model_id: str
    photo_reference: OpaqueStr
    user_id: str | None = None
    id: str | None = None
    created_at: datetime | None = None
    note: str | None = None
    location: GeoLocation | None = None


class CaptureResult(CardexModel):
    """Outcome of a capture submission."""

    sighting: Sighting
    entry: CollectionEntry
    progress: Progress
    is_new_model: bool = Field(..., description="True when this capture added the model to the dex")
