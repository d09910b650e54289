"""Club identity providers, in default priority order."""

from app.clubs.providers.base import ClubProvider
from app.clubs.providers.facr_api import FacrApiProvider
from app.clubs.providers.fotbal_cz import FotbalCzProvider
from app.clubs.providers.static_catalog import StaticCatalogProvider, STATIC_CLUBS

__all__ = [
    "ClubProvider",
    "FacrApiProvider",
    "FotbalCzProvider",
    "StaticCatalogProvider",
    "STATIC_CLUBS",
]
