"""Upload/delete orchestration: ties the resolver, pipeline and repository together."""

import asyncio
import logging
from typing import Optional

from app.clubs.resolver import ClubResolver
from app.clubs.types import ClubIdentity
from app.errors import LogoServiceError
from app.logos.catalog import LogoRepository, assemble_logo_record
from app.logos.pipeline import RenditionPipeline, source_format_for
from app.models import LogoRecord

logger = logging.getLogger(__name__)


async def _lookup_identity(resolver: ClubResolver, asset_id: str) -> Optional[ClubIdentity]:
    try:
        return await resolver.resolve_by_identifier(asset_id)
    except LogoServiceError as e:
        logger.info(f"[LOGOS] No club identity for {asset_id}: {e.reason}")
        return None


async def store_logo(
    asset_id: str,
    filename: str,
    data: bytes,
    pipeline: RenditionPipeline,
    repository: LogoRepository,
    resolver: ClubResolver,
    club_name: Optional[str] = None,
    club_city: Optional[str] = None,
    club_type: Optional[str] = None,
    club_website: Optional[str] = None,
    target_width: Optional[int] = None,
) -> LogoRecord:
    """Ingest one uploaded file and upsert its metadata row.

    When no club name is supplied the club is looked up by ``asset_id``; a
    failed lookup only means the placeholder name is used.
    """
    source_format = source_format_for(filename)

    identity = None
    if not (club_name or "").strip():
        identity = await _lookup_identity(resolver, asset_id)

    loop = asyncio.get_running_loop()
    renditions = await loop.run_in_executor(
        None, pipeline.ingest, asset_id, data, source_format, target_width
    )

    record = assemble_logo_record(
        asset_id,
        renditions,
        identity=identity,
        club_name=club_name,
        club_city=club_city,
        club_type=club_type,
        club_website=club_website,
    )
    return await repository.upsert(record)


async def delete_logo(asset_id: str, pipeline: RenditionPipeline, repository: LogoRepository) -> None:
    """Drop the metadata row, then the files (best effort). Unknown ids are a no-op."""
    await repository.delete(asset_id)
    pipeline.delete(asset_id)
