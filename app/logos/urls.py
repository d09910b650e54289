"""Public URL builders for stored logos."""

from typing import Optional

from app.models import LogoRecord


def logo_url(base_url: str, asset_id: str, fmt: str) -> str:
    return f"{base_url.rstrip('/')}/logos/{asset_id}?format={fmt}"


def primary_logo_url(base_url: str, record: LogoRecord) -> Optional[str]:
    """PNG when present, else SVG, else None."""
    if record.has_png:
        return logo_url(base_url, record.id, "png")
    if record.has_svg:
        return logo_url(base_url, record.id, "svg")
    return None
