"""FAČR structured API provider (primary source).

Endpoints:
    GET {base}/club/search?q=<query>
        {"query": ..., "count": N, "results": [{name, club_id, club_type,
         url, logo_url, category, address}, ...]}
    GET {base}/club/football/{club_id}
        {name, club_id, club_type, club_internal_id, url, logo_url,
         address, category}

Neither endpoint carries a website; the city comes from the address.
"""

import logging
from dataclasses import replace
from typing import Optional

from app.clubs.address import extract_city
from app.clubs.providers.base import ClubProvider
from app.clubs.types import ClubIdentity, ClubType
from app.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

FACR_API_BASE = "https://facr.tdvorak.dev"


KNOWN_CLUB_TYPES = {t.value for t in ClubType}


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value).strip()


def _club_from_payload(payload: dict) -> ClubIdentity:
    """Map one API club object; raises ValueError if it is not an object."""
    if not isinstance(payload, dict):
        raise ValueError(f"unexpected FAČR club entry: {type(payload).__name__}")
    club_type = _text(payload, "club_type").lower()
    if club_type not in KNOWN_CLUB_TYPES:
        club_type = ClubType.FOOTBALL.value
    return ClubIdentity(
        id=_text(payload, "club_id"),
        name=_text(payload, "name"),
        city=extract_city(_text(payload, "address")),
        type=club_type,
        website="",
        logo_url=_text(payload, "logo_url"),
    )


class FacrApiProvider(ClubProvider):
    """Club lookups against the FAČR JSON API."""

    name = "facr_api"

    def __init__(self, base_url: str = FACR_API_BASE, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def _search(self, query: str) -> list[ClubIdentity]:
        resp = await self._get_client().get(f"{self.base_url}/club/search", params={"q": query})
        if resp.status_code != 200:
            raise UpstreamUnavailable(f"FAČR API returned status {resp.status_code}")

        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected FAČR search payload")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise ValueError("unexpected FAČR search results")
        return [_club_from_payload(r) for r in results]

    async def _get_by_identifier(self, club_id: str) -> Optional[ClubIdentity]:
        resp = await self._get_client().get(f"{self.base_url}/club/football/{club_id}")
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise UpstreamUnavailable(f"FAČR API returned status {resp.status_code}")

        club = _club_from_payload(resp.json())
        if not club.id:
            club = replace(club, id=club_id)
        return club
