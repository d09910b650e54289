"""Logo metadata: record assembly and the ``logos`` table repository."""

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.clubs.normalization import fold, normalize_club_search_query
from app.clubs.types import ClubIdentity
from app.logos.pipeline import RenditionSet
from app.models import LogoRecord, utc_now

logger = logging.getLogger(__name__)


def placeholder_club_name(asset_id: str) -> str:
    return f"Club {asset_id}"


def assemble_logo_record(
    asset_id: str,
    renditions: RenditionSet,
    identity: Optional[ClubIdentity] = None,
    club_name: Optional[str] = None,
    club_city: Optional[str] = None,
    club_type: Optional[str] = None,
    club_website: Optional[str] = None,
) -> LogoRecord:
    """Build the persisted record for one upload. Never fails.

    Explicit form values win, then the resolved identity, then empty; the
    name falls back to ``"Club <id>"``.
    """

    def pick(explicit: Optional[str], resolved: str) -> Optional[str]:
        explicit = (explicit or "").strip()
        return explicit or resolved or None

    name = pick(club_name, identity.name if identity else "") or placeholder_club_name(asset_id)
    return LogoRecord(
        id=asset_id,
        club_name=name,
        club_city=pick(club_city, identity.city if identity else ""),
        club_type=pick(club_type, identity.type if identity else ""),
        club_website=pick(club_website, identity.website if identity else ""),
        has_svg=renditions.has_vector,
        has_png=renditions.has_raster,
        primary_format=renditions.primary_format,
        file_size_svg=renditions.vector_size,
        file_size_png=renditions.raster_size,
    )


def _matches_folded(record: LogoRecord, folded_query: str, raw_query: str) -> bool:
    return (
        folded_query in fold(record.club_name or "")
        or folded_query in fold(record.club_city or "")
        or raw_query.lower() in record.id.lower()
    )


class LogoRepository:
    """Queries over ``LogoRecord`` for one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, asset_id: str) -> Optional[LogoRecord]:
        return await self.session.get(LogoRecord, asset_id)

    async def upsert(self, record: LogoRecord) -> LogoRecord:
        """Insert or fully replace the row for ``record.id``; keeps ``created_at``."""
        now = utc_now()
        existing = await self.get(record.id)
        if existing is None:
            record.created_at = now
            record.updated_at = now
            self.session.add(record)
            target = record
        else:
            for field in (
                "club_name", "club_city", "club_type", "club_website",
                "has_svg", "has_png", "primary_format", "file_size_svg", "file_size_png",
            ):
                setattr(existing, field, getattr(record, field))
            existing.updated_at = now
            target = existing
        await self.session.commit()
        await self.session.refresh(target)
        return target

    async def delete(self, asset_id: str) -> bool:
        """Delete the row; returns False if there was none."""
        result = await self.session.execute(delete(LogoRecord).where(LogoRecord.id == asset_id))
        await self.session.commit()
        return (result.rowcount or 0) > 0

    async def list_logos(
        self,
        query: str = "",
        sport: str = "",
        sort: str = "name",
        limit: Optional[int] = None,
        page: Optional[int] = None,
    ) -> list[LogoRecord]:
        """List logos, optionally filtered by text and club type.

        Text matches name, city or id as a substring. If a text query finds
        nothing, every row is re-checked with diacritics stripped
        ("Plzen" finds "Plzeň").
        """
        query = (query or "").strip()
        sport = (sport or "").strip().lower()

        stmt = select(LogoRecord)
        if query:
            like = f"%{query.lower()}%"
            stmt = stmt.where(or_(
                func.lower(LogoRecord.club_name).like(like),
                func.lower(LogoRecord.club_city).like(like),
                LogoRecord.id.like(f"%{query}%"),
            ))
        if sport and sport != "all":
            stmt = stmt.where(func.lower(LogoRecord.club_type) == sport)
        rows = list((await self.session.execute(self._paginate(self._order(stmt, sort), limit, page))).scalars().all())
        if rows or not query:
            return rows

        fallback = select(LogoRecord)
        if sport and sport != "all":
            fallback = fallback.where(func.lower(LogoRecord.club_type) == sport)
        candidates = (await self.session.execute(self._order(fallback, sort))).scalars().all()
        folded = fold(query)
        matched = [r for r in candidates if _matches_folded(r, folded, query)]
        if limit is not None and limit > 0:
            offset = (max(page or 1, 1) - 1) * limit
            matched = matched[offset:offset + limit]
        return matched

    async def search_with_logos(self, query: str, sport: str = "") -> list[LogoRecord]:
        """Stored logos whose name matches the raw or abbreviation-expanded query."""
        query = (query or "").strip()
        sport = (sport or "").strip().lower()

        like_raw = f"%{query.lower()}%"
        conditions = [func.lower(LogoRecord.club_name).like(like_raw), LogoRecord.id.like(f"%{query}%")]
        expanded = normalize_club_search_query(query)
        if expanded and expanded != query.lower():
            conditions.append(func.lower(LogoRecord.club_name).like(f"%{expanded}%"))

        stmt = select(LogoRecord).where(or_(*conditions))
        if sport and sport != "all":
            stmt = stmt.where(func.lower(LogoRecord.club_type) == sport)
        stmt = stmt.order_by(LogoRecord.club_name)
        return list((await self.session.execute(stmt)).scalars().all())

    @staticmethod
    def _order(stmt, sort: str):
        if sort == "recent":
            return stmt.order_by(LogoRecord.updated_at.desc(), LogoRecord.created_at.desc())
        return stmt.order_by(LogoRecord.club_name)

    @staticmethod
    def _paginate(stmt, limit: Optional[int], page: Optional[int]):
        if limit is None or limit <= 0:
            return stmt
        stmt = stmt.limit(limit)
        if page is not None:
            stmt = stmt.offset((max(page, 1) - 1) * limit)
        return stmt
