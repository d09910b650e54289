"""API Routes for club logo storage.

- GET    /logos               list/search stored logos
- GET    /logos/{id}          stream the file (PNG preferred, SVG fallback)
- GET    /logos/{id}/json     metadata with rendition URLs
- POST   /logos/{id}          upload (.svg, .png or .pdf) + optional club fields
- DELETE /logos/{id}          remove metadata and files

Logo ids are UUIDs; anything else is rejected with 400.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.clubs.resolver import ClubResolver, get_club_resolver
from app.config import get_settings
from app.database import get_async_session
from app.errors import FileTooLarge, InvalidArgument, NotFound
from app.logos.catalog import LogoRepository
from app.logos.pipeline import RenditionPipeline, get_rendition_pipeline
from app.logos.service import delete_logo, store_logo
from app.logos.storage import PNG, SVG
from app.logos.urls import logo_url, primary_logo_url
from app.models import LogoRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/logos", tags=["logos"])

MEDIA_TYPES = {PNG: "image/png", SVG: "image/svg+xml"}
CACHE_CONTROL = "public, max-age=31536000"


# =============================================================================
# Pydantic Models
# =============================================================================


class LogoMetadataResponse(BaseModel):
    """Stored logo with its rendition URLs."""

    id: str
    club_name: str
    club_city: Optional[str] = None
    club_type: Optional[str] = None
    club_website: Optional[str] = None
    has_svg: bool
    has_png: bool
    primary_format: str
    logo_url: Optional[str] = None
    logo_url_svg: Optional[str] = None
    logo_url_png: Optional[str] = None
    file_size_svg: int = 0
    file_size_png: int = 0
    created_at: datetime
    updated_at: datetime


class UploadResponse(BaseModel):
    success: bool
    id: str
    club_name: str
    has_svg: bool
    has_png: bool
    size_svg: int
    size_png: int
    message: str


class DeleteResponse(BaseModel):
    success: bool
    id: str


def _to_response(record: LogoRecord, base_url: str, with_format_urls: bool = False) -> LogoMetadataResponse:
    return LogoMetadataResponse(
        id=record.id,
        club_name=record.club_name,
        club_city=record.club_city,
        club_type=record.club_type,
        club_website=record.club_website,
        has_svg=record.has_svg,
        has_png=record.has_png,
        primary_format=record.primary_format,
        logo_url=primary_logo_url(base_url, record),
        logo_url_svg=logo_url(base_url, record.id, SVG) if with_format_urls and record.has_svg else None,
        logo_url_png=logo_url(base_url, record.id, PNG) if with_format_urls and record.has_png else None,
        file_size_svg=record.file_size_svg,
        file_size_png=record.file_size_png,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def validate_logo_id(logo_id: str) -> str:
    """Path dependency: the id must parse as a UUID."""
    try:
        uuid.UUID(logo_id)
    except ValueError:
        raise InvalidArgument("invalid UUID format") from None
    return logo_id


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=list[LogoMetadataResponse])
async def list_logos(
    request: Request,
    q: str = Query(""),
    sport: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    sort: str = Query("name", pattern="^(name|recent)$"),
    limit: Optional[int] = Query(None, ge=1),
    page: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
):
    records = await LogoRepository(session).list_logos(
        query=q, sport=sport or type or "", sort=sort, limit=limit, page=page
    )
    base_url = str(request.base_url)
    return [_to_response(r, base_url) for r in records]


@router.get("/{logo_id}")
async def get_logo_file(
    logo_id: str = Depends(validate_logo_id),
    format: Optional[str] = Query(None, pattern="^(png|svg)$"),
    pipeline: RenditionPipeline = Depends(get_rendition_pipeline),
):
    storage = pipeline.storage
    candidates = [format] if format else [PNG, SVG]
    for namespace in candidates:
        if storage.exists(namespace, logo_id):
            return FileResponse(
                storage.path_for(namespace, logo_id),
                media_type=MEDIA_TYPES[namespace],
                headers={"Cache-Control": CACHE_CONTROL},
            )
    raise NotFound("logo not found")


@router.get("/{logo_id}/json", response_model=LogoMetadataResponse)
async def get_logo_metadata(
    request: Request,
    logo_id: str = Depends(validate_logo_id),
    session: AsyncSession = Depends(get_async_session),
):
    record = await LogoRepository(session).get(logo_id)
    if record is None:
        raise NotFound("logo not found")
    return _to_response(record, str(request.base_url), with_format_urls=True)


@router.post("/{logo_id}", response_model=UploadResponse)
async def upload_logo(
    logo_id: str = Depends(validate_logo_id),
    file: Optional[UploadFile] = File(None),
    club_name: Optional[str] = Form(None),
    club_city: Optional[str] = Form(None),
    club_type: Optional[str] = Form(None),
    club_website: Optional[str] = Form(None),
    session: AsyncSession = Depends(get_async_session),
    pipeline: RenditionPipeline = Depends(get_rendition_pipeline),
    resolver: ClubResolver = Depends(get_club_resolver),
):
    if file is None or not file.filename:
        raise InvalidArgument("no file provided")

    max_bytes = get_settings().LOGOS_MAX_UPLOAD_BYTES
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise FileTooLarge()

    record = await store_logo(
        logo_id,
        file.filename,
        data,
        pipeline=pipeline,
        repository=LogoRepository(session),
        resolver=resolver,
        club_name=club_name,
        club_city=club_city,
        club_type=club_type,
        club_website=club_website,
    )

    return UploadResponse(
        success=True,
        id=record.id,
        club_name=record.club_name,
        has_svg=record.has_svg,
        has_png=record.has_png,
        size_svg=record.file_size_svg,
        size_png=record.file_size_png,
        message="logo uploaded successfully",
    )


@router.delete("/{logo_id}", response_model=DeleteResponse)
async def remove_logo(
    logo_id: str = Depends(validate_logo_id),
    session: AsyncSession = Depends(get_async_session),
    pipeline: RenditionPipeline = Depends(get_rendition_pipeline),
):
    await delete_logo(logo_id, pipeline, LogoRepository(session))
    return DeleteResponse(success=True, id=logo_id)
