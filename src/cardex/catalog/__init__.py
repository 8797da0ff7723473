"""Static reference data: manufacturers and models."""

from cardex.catalog.catalog import Catalog

__all__ = ["Catalog"]
