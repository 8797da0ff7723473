"""Utility helpers."""

from cardex.utils.ids import SightingIdGenerator, new_sighting_id
from cardex.utils.locks import KeyedLock

__all__ = ["KeyedLock", "SightingIdGenerator", "new_sighting_id"]
