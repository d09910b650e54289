"""Raster rendering backends.

Each backend turns a source file into a PNG at a target width and reports
a ``ConversionOutcome`` instead of raising, so the pipeline can move on to
the next backend. Missing executables, non-zero exits, timeouts and empty
output are all ordinary failures.

Vector (SVG) order: ImageMagick -> Inkscape -> embedded Pillow renderer.
Paged documents (PDF): ImageMagick with the Ghostscript delegate only.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from app.logos.svg_raster import SvgRenderError, render_svg_to_png

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    IMAGEMAGICK = "imagemagick"  # external-A
    INKSCAPE = "inkscape"        # external-B
    EMBEDDED = "embedded"


@dataclass
class ConversionOutcome:
    """Result of one backend attempt (not persisted)."""

    success: bool
    backend: Backend
    produced_bytes: int = 0
    error: Optional[str] = None


class Renderer(ABC):
    """Base class: render ``source`` to ``output`` at ``width`` pixels."""

    backend: Backend

    @abstractmethod
    def render(self, source: Path, output: Path, width: int) -> ConversionOutcome:
        """Attempt one conversion; report failure in the outcome, never raise."""

    def _finish(self, output: Path) -> ConversionOutcome:
        if not output.is_file() or output.stat().st_size == 0:
            output.unlink(missing_ok=True)
            return self._fail("no output produced")
        return ConversionOutcome(success=True, backend=self.backend, produced_bytes=output.stat().st_size)

    def _fail(self, reason: str) -> ConversionOutcome:
        return ConversionOutcome(success=False, backend=self.backend, error=reason)


class ExternalRenderer(Renderer):
    """Runs a rasterizing executable with a timeout."""

    def __init__(self, binary: str, timeout: float = 30.0):
        self.binary = binary
        self.timeout = timeout

    @abstractmethod
    def command(self, source: Path, output: Path, width: int) -> list[str]:
        """Argument vector for one invocation."""

    def render(self, source: Path, output: Path, width: int) -> ConversionOutcome:
        cmd = self.command(source, output, width)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError:
            return self._fail(f"{self.binary} not installed")
        except subprocess.TimeoutExpired:
            output.unlink(missing_ok=True)
            return self._fail(f"{self.binary} timed out after {self.timeout:.0f}s")
        except OSError as e:
            return self._fail(f"{self.binary} could not run: {e}")

        if result.returncode != 0:
            output.unlink(missing_ok=True)
            return self._fail(f"{self.binary} exited {result.returncode}: {(result.stderr or '').strip()[:300]}")
        return self._finish(output)


class ImageMagickRenderer(ExternalRenderer):
    backend = Backend.IMAGEMAGICK

    def __init__(self, binary: str = "convert", density: int = 300, first_page_only: bool = False, **kwargs):
        super().__init__(binary, **kwargs)
        self.density = density
        self.first_page_only = first_page_only

    def command(self, source: Path, output: Path, width: int) -> list[str]:
        src = f"{source}[0]" if self.first_page_only else str(source)
        return [
            self.binary,
            "-background", "none",
            "-density", str(self.density),
            "-resize", f"{width}x{width}",
            src,
            str(output),
        ]


class InkscapeRenderer(ExternalRenderer):
    backend = Backend.INKSCAPE

    def __init__(self, binary: str = "inkscape", **kwargs):
        super().__init__(binary, **kwargs)

    def command(self, source: Path, output: Path, width: int) -> list[str]:
        return [
            self.binary,
            "--export-type=png",
            f"--export-filename={output}",
            f"--export-width={width}",
            str(source),
        ]


class EmbeddedSvgRenderer(Renderer):
    """In-process renderer; the always-available last resort for SVG."""

    backend = Backend.EMBEDDED

    def render(self, source: Path, output: Path, width: int) -> ConversionOutcome:
        try:
            png_bytes = render_svg_to_png(source.read_bytes(), width)
        except (SvgRenderError, OSError, ValueError, ArithmeticError) as e:
            return self._fail(str(e) or type(e).__name__)
        except MemoryError:
            return self._fail("out of memory while rasterizing")
        output.write_bytes(png_bytes)
        return self._finish(output)


def default_vector_renderers(
    imagemagick_binary: str = "convert",
    inkscape_binary: str = "inkscape",
    density: int = 300,
    timeout: float = 30.0,
) -> list[Renderer]:
    return [
        ImageMagickRenderer(imagemagick_binary, density=density, timeout=timeout),
        InkscapeRenderer(inkscape_binary, timeout=timeout),
        EmbeddedSvgRenderer(),
    ]


def default_paged_renderer(
    imagemagick_binary: str = "convert",
    density: int = 300,
    timeout: float = 30.0,
) -> Renderer:
    return ImageMagickRenderer(imagemagick_binary, density=density, first_page_only=True, timeout=timeout)
