"""Custom exceptions.

Cardex uses a small hierarchy of exceptions so callers can tell operational
failures (retry them) from programming faults (fix the build):

Example:
    >>> from cardex.core.exceptions import CardexError, PersistenceError
    >>> isinstance(PersistenceError("disk full"), CardexError)
    True
    >>> try:
    ...     raise ValidationError("unknown model: 99")
    ... except CardexError as e:
    ...     print(f"Caught: {type(e).__name__}")
    Caught: ValidationError
"""

from __future__ import annotations


class CardexError(Exception):
    """Base exception for Cardex.

    Example:
        >>> from cardex.core.exceptions import CardexError
        >>> str(CardexError("something went wrong"))
        'something went wrong'
    """


class ValidationError(CardexError):
    """Caller input was rejected before anything was persisted.

    Raised for sightings that reference an unknown model or carry an empty
    user id. Fully recoverable: the caller must correct the input.

    Example:
        >>> from cardex.core.exceptions import ValidationError
        >>> raise ValidationError("user_id must not be empty")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ValidationError: user_id must not be empty
    """


class PersistenceError(CardexError):
    """Underlying storage read or write failed.

    Covers I/O faults, quota errors and corrupt serialized state. A failed
    append never leaves a partially recorded sighting behind.

    Example:
        >>> from cardex.core.exceptions import PersistenceError
        >>> raise PersistenceError("write failed")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        PersistenceError: write failed
    """


class CatalogIntegrityError(CardexError):
    """Static catalog is internally inconsistent.

    A model points at a manufacturer that does not exist, or an id is
    defined twice. This is a broken build, not something to retry.
    """


class NotFoundError(CardexError):
    """Requested resource not found.

    Example:
        >>> from cardex.core.exceptions import NotFoundError
        >>> raise NotFoundError("model 99")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        NotFoundError: model 99
    """


class ConfigurationError(CardexError):
    """Configuration is invalid."""
