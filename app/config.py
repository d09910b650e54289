"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./data/db.sqlite"

    # Logo storage root (svg/, png/ and temp/ live underneath)
    LOGOS_DIR: str = "./logos"
    LOGOS_MAX_UPLOAD_BYTES: int = 32 * 1024 * 1024  # 32MB

    # ═══════════════════════════════════════════════════════════════
    # Club identity providers
    # ═══════════════════════════════════════════════════════════════

    # Structured JSON API (primary)
    FACR_API_BASE: str = "https://facr.tdvorak.dev"

    # fotbal.cz HTML pages (secondary, brittle)
    FOTBAL_BASE_URL: str = "https://www.fotbal.cz"
    FOTBAL_LOGO_BASE: str = "https://is1.fotbal.cz/media/kluby"

    PROVIDER_TIMEOUT_SECONDS: float = 12.0

    # ═══════════════════════════════════════════════════════════════
    # Rendering
    # ═══════════════════════════════════════════════════════════════

    RENDER_DEFAULT_WIDTH: int = 512
    RENDER_PDF_DENSITY: int = 300
    RENDER_TIMEOUT_SECONDS: float = 30.0
    IMAGEMAGICK_BINARY: str = "convert"
    INKSCAPE_BINARY: str = "inkscape"

    # CORS (comma-separated, "*" = any origin)
    CORS_ALLOW_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
