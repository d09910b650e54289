"""Rendition pipeline: turn one uploaded logo into stored renditions.

    Received -> Validated -> {RasterStored | VectorStored}
             -> [RasterAttempted -> RasterStored | RasterFailed] -> Finalized

Invalid input is rejected before anything touches storage. New renditions
are built in a staging directory and swapped in at the end, so a failed
upload leaves the previous renditions in place and a successful one
replaces all of them (a PNG upload drops an older SVG and vice versa).

Only the paged-document path can fail after validation (ConversionFailed);
a vector upload whose rasterization fails on every backend is still a
valid, vector-only result.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

from app.config import get_settings
from app.errors import ConversionFailed, InvalidArgument, UnsupportedFormat
from app.logos.processor import is_svg_content, is_valid_png, optimize_png
from app.logos.renderers import (
    ConversionOutcome,
    Renderer,
    default_paged_renderer,
    default_vector_renderers,
)
from app.logos.storage import PNG, SVG, LogoStorage, get_logo_storage

logger = logging.getLogger(__name__)

DEFAULT_TARGET_WIDTH = 512


class SourceFormat(str, Enum):
    VECTOR = "vector"
    RASTER = "raster"
    PAGED_DOCUMENT = "paged-document"


EXTENSION_FORMATS = {
    ".svg": SourceFormat.VECTOR,
    ".png": SourceFormat.RASTER,
    ".pdf": SourceFormat.PAGED_DOCUMENT,
}


def source_format_for(filename: str) -> SourceFormat:
    """Map an upload file name to its source kind by extension."""
    ext = os.path.splitext(filename or "")[1].lower()
    try:
        return EXTENSION_FORMATS[ext]
    except KeyError:
        raise UnsupportedFormat() from None


@dataclass
class RenditionSet:
    """Which renditions exist for an asset after an upload, with byte sizes."""

    has_vector: bool = False
    has_raster: bool = False
    vector_size: int = 0
    raster_size: int = 0

    @property
    def primary_format(self) -> str:
        return PNG if self.has_raster or not self.has_vector else SVG

    @property
    def servable(self) -> bool:
        return self.has_raster or self.has_vector


class RenditionPipeline:
    """Validates an upload, produces a PNG rendition, and stores the result."""

    def __init__(
        self,
        storage: LogoStorage,
        vector_renderers: Optional[Sequence[Renderer]] = None,
        paged_renderer: Optional[Renderer] = None,
        default_width: int = DEFAULT_TARGET_WIDTH,
    ):
        self.storage = storage
        self.vector_renderers = list(vector_renderers) if vector_renderers is not None else default_vector_renderers()
        self.paged_renderer = paged_renderer if paged_renderer is not None else default_paged_renderer()
        self.default_width = default_width

    def _validate(self, data: bytes, source_format: SourceFormat, target_width: Optional[int]) -> int:
        if not isinstance(source_format, SourceFormat):
            try:
                source_format = SourceFormat(source_format)
            except ValueError:
                raise UnsupportedFormat() from None
        if target_width is not None and target_width < 0:
            raise InvalidArgument("width must be a positive integer")
        if not data:
            raise InvalidArgument("no file provided")
        if source_format == SourceFormat.VECTOR and not is_svg_content(data):
            raise InvalidArgument("file is not a valid SVG")
        if source_format == SourceFormat.RASTER and not is_valid_png(data):
            raise InvalidArgument("file is not a valid PNG")
        return target_width or self.default_width

    def ingest(
        self,
        asset_id: str,
        data: bytes,
        source_format: SourceFormat,
        target_width: Optional[int] = None,
    ) -> RenditionSet:
        """Store renditions for ``asset_id`` from one uploaded file.

        Raises:
            UnsupportedFormat: unknown source kind
            InvalidArgument: empty/malformed file or negative width
            ConversionFailed: a paged document could not be rasterized
        """
        width = self._validate(data, source_format, target_width)
        source_format = SourceFormat(source_format)

        with self.storage.staging() as stage:
            files: dict[str, Path] = {}
            png_path = stage / f"{asset_id}.png"

            if source_format == SourceFormat.RASTER:
                png_path.write_bytes(data)
                files[PNG] = png_path

            elif source_format == SourceFormat.VECTOR:
                svg_path = stage / f"{asset_id}.svg"
                svg_path.write_bytes(data)
                files[SVG] = svg_path
                if self._rasterize_vector(asset_id, svg_path, png_path, width):
                    files[PNG] = png_path

            else:
                pdf_path = stage / f"{asset_id}.pdf"
                pdf_path.write_bytes(data)
                outcome = self.paged_renderer.render(pdf_path, png_path, width)
                pdf_path.unlink(missing_ok=True)
                if not outcome.success:
                    logger.error(f"[LOGOS] PDF conversion failed for {asset_id}: {outcome.error}")
                    raise ConversionFailed("failed to convert PDF to PNG")
                files[PNG] = png_path

            if PNG in files:
                optimize_png(files[PNG])

            renditions = RenditionSet(
                has_vector=SVG in files,
                has_raster=PNG in files,
                vector_size=files[SVG].stat().st_size if SVG in files else 0,
                raster_size=files[PNG].stat().st_size if PNG in files else 0,
            )
            self.storage.commit(asset_id, files)

        logger.info(
            f"[LOGOS] Stored {asset_id} ({source_format.value}): "
            f"svg={renditions.vector_size}B png={renditions.raster_size}B"
        )
        return renditions

    def _rasterize_vector(self, asset_id: str, svg_path: Path, png_path: Path, width: int) -> bool:
        """Try each vector backend in order until one produces a PNG."""
        outcomes: list[ConversionOutcome] = []
        for renderer in self.vector_renderers:
            outcome = renderer.render(svg_path, png_path, width)
            outcomes.append(outcome)
            if outcome.success:
                logger.info(f"[LOGOS] {asset_id} rasterized by {outcome.backend.value} ({outcome.produced_bytes}B)")
                return True
            logger.debug(f"[LOGOS] {outcome.backend.value} failed for {asset_id}: {outcome.error}")

        png_path.unlink(missing_ok=True)
        reasons = "; ".join(f"{o.backend.value}: {o.error}" for o in outcomes)
        logger.warning(f"[LOGOS] Failed to convert SVG to PNG for {asset_id}, keeping SVG only ({reasons})")
        return False

    def delete(self, asset_id: str) -> None:
        """Remove all renditions of ``asset_id``; missing files are ignored."""
        self.storage.remove_all(asset_id)


@lru_cache()
def get_rendition_pipeline() -> RenditionPipeline:
    """Process-wide pipeline configured from settings."""
    settings = get_settings()
    return RenditionPipeline(
        storage=get_logo_storage(),
        vector_renderers=default_vector_renderers(
            imagemagick_binary=settings.IMAGEMAGICK_BINARY,
            inkscape_binary=settings.INKSCAPE_BINARY,
            density=settings.RENDER_PDF_DENSITY,
            timeout=settings.RENDER_TIMEOUT_SECONDS,
        ),
        paged_renderer=default_paged_renderer(
            imagemagick_binary=settings.IMAGEMAGICK_BINARY,
            density=settings.RENDER_PDF_DENSITY,
            timeout=settings.RENDER_TIMEOUT_SECONDS,
        ),
        default_width=settings.RENDER_DEFAULT_WIDTH,
    )
