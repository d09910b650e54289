"""Error kinds raised by the club and logo services.

Each error carries a short machine-readable ``reason`` and the HTTP status
the API layer answers with. ``UpstreamUnavailable`` is raised by providers
only; the resolver always absorbs it.
"""

from fastapi import Request
from fastapi.responses import JSONResponse


class LogoServiceError(Exception):
    """Base class for caller-visible failures."""

    status_code: int = 500
    default_reason: str = "internal error"

    def __init__(self, reason: str = ""):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class InvalidArgument(LogoServiceError):
    status_code = 400
    default_reason = "invalid argument"


class NotFound(LogoServiceError):
    status_code = 404
    default_reason = "not found"


class UnsupportedFormat(LogoServiceError):
    status_code = 400
    default_reason = "only .svg, .png and .pdf files are allowed"


class FileTooLarge(LogoServiceError):
    status_code = 413
    default_reason = "file too large"


class ConversionFailed(LogoServiceError):
    status_code = 500
    default_reason = "conversion failed"


class UpstreamUnavailable(LogoServiceError):
    status_code = 502
    default_reason = "upstream unavailable"


async def logo_service_error_handler(request: Request, exc: LogoServiceError) -> JSONResponse:
    """Render a LogoServiceError as ``{"error": reason}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.reason})
