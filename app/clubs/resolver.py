"""Club identity resolution across providers.

Search order:
1. Each live provider in priority order; the first non-empty result wins
   and is returned as-is.
2. If all came back empty or failed, the whole chain once more with the
   query lower-cased and stripped of diacritics (skipped when that changes
   nothing).
3. The static catalog, which always answers (possibly with no clubs).

Lookup by identifier uses the live providers only and raises NotFound when
none of them produced a club with a name. Provider failures are logged and
never reach the caller.
"""

import logging
from functools import lru_cache
from typing import Optional, Sequence

from app.clubs.normalization import fold
from app.clubs.providers import (
    ClubProvider,
    FacrApiProvider,
    FotbalCzProvider,
    StaticCatalogProvider,
)
from app.clubs.types import ClubIdentity, ProviderResult
from app.config import get_settings
from app.errors import InvalidArgument, NotFound

logger = logging.getLogger(__name__)


class ClubResolver:
    """Chain-of-responsibility over an ordered list of providers."""

    def __init__(
        self,
        providers: Sequence[ClubProvider],
        fallback: Optional[ClubProvider] = None,
    ):
        self.providers = list(providers)
        self.fallback = fallback if fallback is not None else StaticCatalogProvider()

    async def _first_success(self, query: str) -> Optional[ProviderResult]:
        for provider in self.providers:
            result = await provider.search(query)
            if result.ok:
                logger.info(f"[CLUBS] '{query}' answered by {provider.name} ({len(result.clubs)} clubs)")
                return result
            logger.debug(f"[CLUBS] {provider.name} gave {result.status.value} for '{query}'")
        return None

    async def search(self, query: str) -> list[ClubIdentity]:
        """Search clubs by free text. Never fails for a non-empty query."""
        query = (query or "").strip()
        if not query:
            raise InvalidArgument("query parameter 'q' is required")

        result = await self._first_success(query)
        if result is not None:
            return result.clubs

        folded = fold(query)
        if folded != query.lower():
            logger.info(f"[CLUBS] No live results for '{query}', retrying as '{folded}'")
            result = await self._first_success(folded)
            if result is not None:
                return result.clubs

        logger.info(f"[CLUBS] No live results for '{query}', using {self.fallback.name}")
        result = await self.fallback.search(query)
        return result.clubs

    async def resolve_by_identifier(self, club_id: str) -> ClubIdentity:
        """Look a club up by provider id; raises NotFound when nobody knows it."""
        club_id = (club_id or "").strip()
        if not club_id:
            raise InvalidArgument("club ID is required")

        for provider in self.providers:
            result = await provider.get_by_identifier(club_id)
            if result.ok and result.clubs[0].name:
                return result.clubs[0]

        raise NotFound("club not found")

    async def aclose(self) -> None:
        for provider in self.providers:
            await provider.aclose()


def build_default_providers() -> list[ClubProvider]:
    """Live providers in priority order, configured from settings."""
    settings = get_settings()
    timeout = settings.PROVIDER_TIMEOUT_SECONDS
    return [
        FacrApiProvider(base_url=settings.FACR_API_BASE, timeout=timeout),
        FotbalCzProvider(
            base_url=settings.FOTBAL_BASE_URL,
            logo_base_url=settings.FOTBAL_LOGO_BASE,
            timeout=timeout,
        ),
    ]


@lru_cache()
def get_club_resolver() -> ClubResolver:
    """Process-wide resolver (FastAPI dependency)."""
    return ClubResolver(build_default_providers())
