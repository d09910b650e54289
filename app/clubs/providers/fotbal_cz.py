"""fotbal.cz HTML scrape provider (secondary source).

Search page: {base}/club/hledej?q=<query>
    Each hit is an ``li.ListItemSplit`` holding an ``a.Link--inverted`` link
    to the club page, the name in ``span.H7``, a crest ``img`` and the
    address in ``.ClubAddress p``. Futsal clubs link under ``/futsal/``.

Detail pages:
    {base}/souteze/club/club/{id}   (football)
    {base}/futsal/club/club/{id}    (futsal)
    Name in ``h1.H4 span``, address in ``.ClubAddress p``.

Markup changes upstream surface as empty results, never as errors.
"""

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from app.clubs.address import extract_city
from app.clubs.providers.base import ClubProvider
from app.clubs.types import ClubIdentity, ClubType

logger = logging.getLogger(__name__)

FOTBAL_BASE_URL = "https://www.fotbal.cz"
FOTBAL_LOGO_BASE = "https://is1.fotbal.cz/media/kluby"

# (path prefix, club type) in lookup order
DETAIL_PAGES = [
    ("/souteze/club/club", ClubType.FOOTBALL.value),
    ("/futsal/club/club", ClubType.FUTSAL.value),
]


def parse_search_page(html: str, base_url: str = FOTBAL_BASE_URL) -> list[ClubIdentity]:
    """Extract club hits from a fotbal.cz search results page."""
    soup = BeautifulSoup(html, "html.parser")
    clubs = []

    for li in soup.select("li.ListItemSplit"):
        link = li.select_one("a.Link--inverted")
        if link is None:
            continue
        href = (link.get("href") or "").strip()
        if not href:
            continue

        name_el = link.select_one("span.H7")
        name = name_el.get_text(strip=True) if name_el else ""
        if not name:
            name = link.get_text(" ", strip=True)

        img = link.find("img")
        logo_url = (img.get("src") or "").strip() if img else ""

        address_el = li.select_one(".ClubAddress p")
        address = address_el.get_text(" ", strip=True) if address_el else ""

        club_type = ClubType.FUTSAL.value if "/futsal/" in href.lower() else ClubType.FOOTBALL.value
        segments = [s for s in href.rstrip("/").split("/") if s]
        club_id = segments[-1] if segments else ""

        if not href.startswith(("http://", "https://")):
            href = base_url.rstrip("/") + href

        clubs.append(ClubIdentity(
            id=club_id,
            name=name,
            city=extract_city(address),
            type=club_type,
            website=href,
            logo_url=logo_url,
        ))

    return clubs


def parse_detail_page(html: str) -> tuple[str, str]:
    """Return (name, address) from a club detail page; empty strings if absent."""
    soup = BeautifulSoup(html, "html.parser")
    name_el = soup.select_one("h1.H4 span")
    address_el = soup.select_one(".ClubAddress p")
    name = name_el.get_text(strip=True) if name_el else ""
    address = address_el.get_text(" ", strip=True) if address_el else ""
    return name, address


class FotbalCzProvider(ClubProvider):
    """Club lookups by scraping fotbal.cz pages."""

    name = "fotbal_cz"

    def __init__(
        self,
        base_url: str = FOTBAL_BASE_URL,
        logo_base_url: str = FOTBAL_LOGO_BASE,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")
        self.logo_base_url = logo_base_url.rstrip("/")

    async def _search(self, query: str) -> list[ClubIdentity]:
        client = self._get_client()
        url = f"{self.base_url}/club/hledej"

        resp = await client.get(url, params={"q": query})
        if resp.status_code != 200:
            # Retry once with the query as a quoted phrase
            logger.info(f"[CLUBS] fotbal.cz search returned {resp.status_code}, retrying quoted")
            resp = await client.get(url, params={"q": f'"{query}"'})
            if resp.status_code != 200:
                return []

        return parse_search_page(resp.text, self.base_url)

    async def _get_by_identifier(self, club_id: str) -> Optional[ClubIdentity]:
        client = self._get_client()
        last_error: Optional[httpx.HTTPError] = None

        for prefix, club_type in DETAIL_PAGES:
            try:
                resp = await client.get(f"{self.base_url}{prefix}/{club_id}")
            except httpx.HTTPError as e:
                last_error = e
                continue
            if resp.status_code != 200:
                continue
            name, address = parse_detail_page(resp.text)
            if not name:
                continue
            return ClubIdentity(
                id=club_id,
                name=name,
                city=extract_city(address),
                type=club_type,
                website="",
                logo_url=f"{self.logo_base_url}/{club_id}/{club_id}_crop.jpg",
            )

        if last_error is not None:
            raise last_error
        return None
