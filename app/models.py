"""Database models using SQLModel."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LogoRecord(SQLModel, table=True):
    """Metadata for one stored club logo (one row per asset UUID)."""

    __tablename__ = "logos"

    id: str = Field(primary_key=True, max_length=36, description="Asset UUID")
    club_name: str = Field(max_length=255, index=True)
    club_city: Optional[str] = Field(default=None, max_length=255)
    club_type: Optional[str] = Field(default=None, max_length=50, description="'football' or 'futsal'")
    club_website: Optional[str] = Field(default=None, max_length=500)

    has_svg: bool = Field(default=False)
    has_png: bool = Field(default=False)
    primary_format: str = Field(default="png", max_length=10, description="'png' or 'svg'")
    file_size_svg: int = Field(default=0)
    file_size_png: int = Field(default=0)

    # Timezone-aware UTC timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
