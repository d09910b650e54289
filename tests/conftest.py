"""Shared fixtures.

Settings are read once at import time by app.database, so the test database
and logo directory are pointed somewhere disposable before anything from
``app`` is imported.
"""

import io
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOGOS_DIR"] = tempfile.mkdtemp(prefix="logos-test-")

import pytest
from PIL import Image


def make_png(width: int = 64, height: int = 64, color=(200, 16, 46, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


SAMPLE_SVG = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100">'
    b'<rect x="0" y="0" width="200" height="100" fill="#ff0000"/>'
    b"</svg>"
)


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def svg_bytes() -> bytes:
    return SAMPLE_SVG
