"""Club identity resolution.

Looks clubs up by free-text query or by provider identifier, trying the
structured FAČR API first, then fotbal.cz HTML pages, and finally a small
static catalog (search only).
"""

from app.clubs.resolver import ClubResolver, get_club_resolver
from app.clubs.types import ClubIdentity, ClubType

__all__ = ["ClubResolver", "get_club_resolver", "ClubIdentity", "ClubType"]
