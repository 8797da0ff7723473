"""User identity model."""

from __future__ import annotations

from pydantic import Field

from cardex.models.base import FrozenCardexModel


class User(FrozenCardexModel):
    """The person collecting sightings.

    Cardex reads the current user from settings; it never creates users.
    """

    id: str = Field(..., min_length=1)
    display_name: str
    email: str
    avatar_url: str | None = None
