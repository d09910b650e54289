"""Base class for club identity providers.

Subclasses implement ``_search`` and ``_get_by_identifier`` and may raise
freely; the public ``search`` / ``get_by_identifier`` wrappers turn every
failure into a ``ProviderResult`` so the resolver can fall through to the
next provider without exception handling of its own.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.clubs.types import ClubIdentity, ProviderResult
from app.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

# Browser-like headers; fotbal.cz serves a stripped page to unknown agents
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "cs-CZ,cs;q=0.9,en;q=0.8",
}


class ClubProvider(ABC):
    """A source that can answer "which club is this" questions."""

    name: str = "provider"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 12.0):
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def _search(self, query: str) -> list[ClubIdentity]:
        """Return clubs matching ``query``; raise on transport or parse errors."""

    @abstractmethod
    async def _get_by_identifier(self, club_id: str) -> Optional[ClubIdentity]:
        """Return one club or None; raise on transport or parse errors."""

    async def search(self, query: str) -> ProviderResult:
        try:
            clubs = await self._search(query)
        except httpx.HTTPStatusError as e:
            return self._soft_fail("search", f"HTTP {e.response.status_code}")
        except (httpx.HTTPError, UpstreamUnavailable, ValueError, KeyError, TypeError) as e:
            return self._soft_fail("search", str(e) or type(e).__name__)
        except Exception as e:
            # Unexpected upstream shape; never let it reach the resolver
            return self._soft_fail("search", f"{type(e).__name__}: {e}")
        return ProviderResult.success(self.name, clubs)

    async def get_by_identifier(self, club_id: str) -> ProviderResult:
        try:
            club = await self._get_by_identifier(club_id)
        except httpx.HTTPStatusError as e:
            return self._soft_fail("lookup", f"HTTP {e.response.status_code}")
        except (httpx.HTTPError, UpstreamUnavailable, ValueError, KeyError, TypeError) as e:
            return self._soft_fail("lookup", str(e) or type(e).__name__)
        except Exception as e:
            # Unexpected upstream shape; never let it reach the resolver
            return self._soft_fail("lookup", f"{type(e).__name__}: {e}")
        if club is None or not club.name:
            return ProviderResult.empty(self.name)
        return ProviderResult.success(self.name, [club])

    def _soft_fail(self, operation: str, reason: str) -> ProviderResult:
        logger.warning(f"[CLUBS] {self.name} {operation} failed: {reason}")
        return ProviderResult.failure(self.name, reason)
