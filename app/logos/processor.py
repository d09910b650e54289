"""Image Processing for Logo Renditions.

Lossless PNG re-encoding and upload validation. Uses Pillow for image
manipulation.
"""

import io
import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

SVG_SNIFF_BYTES = 512


def optimize_png(png_path: Path) -> bool:
    """Re-encode a PNG in place with maximum compression.

    Pixel content is unchanged. The result is written to a sibling ``.tmp``
    file and swapped in with ``os.replace``; on any failure the temp file is
    removed and the original file is left untouched.

    Args:
        png_path: PNG file to optimize

    Returns:
        True if the file was re-encoded, False if the original was kept
    """
    png_path = Path(png_path)
    tmp_path = png_path.with_name(png_path.name + ".tmp")

    try:
        with Image.open(png_path) as img:
            img.load()
            img.save(tmp_path, format="PNG", optimize=True, compress_level=9)
        os.replace(tmp_path, png_path)
        return True

    except (OSError, ValueError, UnidentifiedImageError) as e:
        logger.warning(f"Failed to optimize PNG {png_path.name}: {e}")
        tmp_path.unlink(missing_ok=True)
        return False


def is_svg_content(data: bytes) -> bool:
    """Check the head of a file for an SVG root or XML declaration."""
    head = data[:SVG_SNIFF_BYTES]
    return b"<svg" in head or b"<?xml" in head


def is_valid_png(image_bytes: bytes) -> bool:
    """True if Pillow decodes ``image_bytes`` as a PNG."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            if img.format != "PNG":
                return False
            img.verify()
        return True
    except Exception:
        return False
