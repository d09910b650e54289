"""API Routes for club identity lookup.

- GET /clubs/search               live providers, then static catalog
- GET /clubs/search-with-logos    clubs that already have a stored logo
- GET /clubs/{club_id}            single club by provider id
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.clubs.resolver import ClubResolver, get_club_resolver
from app.database import get_async_session
from app.errors import InvalidArgument
from app.logos.catalog import LogoRepository
from app.logos.urls import primary_logo_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clubs", tags=["clubs"])


class ClubResponse(BaseModel):
    id: str
    name: str
    city: str = ""
    type: str = ""
    website: str = ""
    logo_url: str = ""


class ClubWithLogoResponse(BaseModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    has_local_logo: bool


@router.get("/search", response_model=list[ClubResponse])
async def search_clubs(
    q: str = Query("", description="Club name or city"),
    resolver: ClubResolver = Depends(get_club_resolver),
):
    clubs = await resolver.search(q)
    return [c.to_dict() for c in clubs]


@router.get("/search-with-logos", response_model=list[ClubWithLogoResponse])
async def search_clubs_with_logos(
    request: Request,
    q: str = Query(""),
    sport: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
):
    q = q.strip()
    if not q:
        raise InvalidArgument("query parameter 'q' is required")

    records = await LogoRepository(session).search_with_logos(q, sport or type or "")
    base_url = str(request.base_url)
    return [
        ClubWithLogoResponse(
            id=r.id,
            name=r.club_name,
            logo_url=primary_logo_url(base_url, r),
            has_local_logo=r.has_svg or r.has_png,
        )
        for r in records
    ]


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(
    club_id: str,
    resolver: ClubResolver = Depends(get_club_resolver),
):
    club = await resolver.resolve_by_identifier(club_id)
    return club.to_dict()
