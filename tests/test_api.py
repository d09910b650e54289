"""End-to-end API tests through FastAPI's TestClient.

The database is the in-memory SQLite configured in conftest; the rendition
pipeline and club resolver are replaced per test so nothing touches the
network or needs ImageMagick/Inkscape.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from app.clubs.providers.base import ClubProvider
from app.clubs.resolver import ClubResolver, get_club_resolver
from app.clubs.types import ClubIdentity
from app.config import get_settings
from app.logos.pipeline import RenditionPipeline, get_rendition_pipeline
from app.logos.renderers import ImageMagickRenderer, InkscapeRenderer
from app.logos.storage import LogoStorage
from app.main import app as application

LOGO_ID = "5f0c2a9e-1b7d-4c3e-9a8f-0123456789ab"
KNOWN_CLUB = ClubIdentity(id=LOGO_ID, name="SK Hranice", city="Hranice", type="football")
MISSING_BINARY = "no-such-rasterizer-binary"


class LookupOnlyProvider(ClubProvider):
    name = "lookup_only"

    async def _search(self, query: str) -> list[ClubIdentity]:
        return []

    async def _get_by_identifier(self, club_id: str) -> Optional[ClubIdentity]:
        return KNOWN_CLUB if club_id == KNOWN_CLUB.id else None


@pytest.fixture
def pipeline(tmp_path) -> RenditionPipeline:
    storage = LogoStorage(tmp_path / "logos")
    storage.ensure_dirs()
    # External backends deliberately unavailable: SVG stays vector-only
    return RenditionPipeline(
        storage,
        vector_renderers=[ImageMagickRenderer(MISSING_BINARY), InkscapeRenderer(MISSING_BINARY)],
        paged_renderer=ImageMagickRenderer(MISSING_BINARY, first_page_only=True),
    )


@pytest.fixture
def client(pipeline):
    resolver = ClubResolver([])
    application.dependency_overrides[get_rendition_pipeline] = lambda: pipeline
    application.dependency_overrides[get_club_resolver] = lambda: resolver
    with TestClient(application) as c:
        yield c
    application.dependency_overrides.clear()


@pytest.fixture
def client_with_known_club(client):
    resolver = ClubResolver([LookupOnlyProvider()])
    application.dependency_overrides[get_club_resolver] = lambda: resolver
    return client


def _upload(client, filename: str, data: bytes, logo_id: str = LOGO_ID, **fields):
    return client.post(f"/logos/{logo_id}", files={"file": (filename, data)}, data=fields)


# ---------------------------------------------------------------------------
# Health / clubs
# ---------------------------------------------------------------------------

class TestClubsApi:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_search_requires_query(self, client):
        resp = client.get("/clubs/search", params={"q": "  "})
        assert resp.status_code == 400
        assert resp.json() == {"error": "query parameter 'q' is required"}

    def test_search_falls_back_to_static_catalog(self, client):
        resp = client.get("/clubs/search", params={"q": "Hranice"})
        assert resp.status_code == 200
        names = {c["name"] for c in resp.json()}
        assert names == {"SK Sigma Hranice", "SK Hranice"}

    def test_search_no_results_is_empty_list(self, client):
        resp = client.get("/clubs/search", params={"q": "qwertyuiop"})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_get_club_not_found(self, client):
        resp = client.get("/clubs/unknown-id")
        assert resp.status_code == 404
        assert resp.json() == {"error": "club not found"}

    def test_get_club(self, client_with_known_club):
        resp = client_with_known_club.get(f"/clubs/{LOGO_ID}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "SK Hranice"
        assert body["city"] == "Hranice"
        assert body["type"] == "football"


# ---------------------------------------------------------------------------
# Logos
# ---------------------------------------------------------------------------

class TestLogoUpload:

    def test_png_upload_roundtrip(self, client, png_bytes):
        resp = _upload(client, "crest.png", png_bytes, club_name="SK Hranice", club_city="Hranice", club_type="football")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["club_name"] == "SK Hranice"
        assert body["has_png"] is True and body["has_svg"] is False
        assert body["size_png"] > 0

        image = client.get(f"/logos/{LOGO_ID}")
        assert image.status_code == 200
        assert image.headers["content-type"] == "image/png"
        assert image.headers["cache-control"] == "public, max-age=31536000"

        meta = client.get(f"/logos/{LOGO_ID}/json").json()
        assert meta["primary_format"] == "png"
        assert meta["logo_url"] == f"http://testserver/logos/{LOGO_ID}?format=png"
        assert meta["logo_url_png"] == meta["logo_url"]
        assert meta["logo_url_svg"] is None

    def test_svg_upload_without_rasterizer_is_vector_only(self, client, svg_bytes):
        resp = _upload(client, "crest.svg", svg_bytes, club_name="SK Hranice")
        assert resp.status_code == 200
        assert resp.json()["has_svg"] is True
        assert resp.json()["has_png"] is False

        image = client.get(f"/logos/{LOGO_ID}")
        assert image.status_code == 200
        assert image.headers["content-type"].startswith("image/svg+xml")
        assert client.get(f"/logos/{LOGO_ID}", params={"format": "png"}).status_code == 404

        meta = client.get(f"/logos/{LOGO_ID}/json").json()
        assert meta["primary_format"] == "svg"

    def test_pdf_without_converter_fails(self, client):
        resp = _upload(client, "crest.pdf", b"%PDF-1.4 minimal", club_name="SK Hranice")
        assert resp.status_code == 500
        assert resp.json() == {"error": "failed to convert PDF to PNG"}
        assert client.get(f"/logos/{LOGO_ID}/json").status_code == 404

    def test_club_name_from_resolver(self, client_with_known_club, png_bytes):
        resp = _upload(client_with_known_club, "crest.png", png_bytes)
        assert resp.json()["club_name"] == "SK Hranice"

    def test_placeholder_name_when_unresolved(self, client, png_bytes):
        resp = _upload(client, "crest.png", png_bytes)
        assert resp.status_code == 200
        assert resp.json()["club_name"] == f"Club {LOGO_ID}"

    def test_invalid_uuid(self, client, png_bytes):
        resp = _upload(client, "crest.png", png_bytes, logo_id="not-a-uuid")
        assert resp.status_code == 400
        assert resp.json() == {"error": "invalid UUID format"}

    def test_unsupported_extension(self, client, png_bytes):
        resp = _upload(client, "crest.jpg", png_bytes)
        assert resp.status_code == 400
        assert resp.json() == {"error": "only .svg, .png and .pdf files are allowed"}

    def test_missing_file(self, client):
        resp = client.post(f"/logos/{LOGO_ID}", data={"club_name": "SK Hranice"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "no file provided"}

    def test_corrupt_png(self, client):
        resp = _upload(client, "crest.png", b"definitely not a png")
        assert resp.status_code == 400
        assert resp.json() == {"error": "file is not a valid PNG"}

    def test_too_large(self, client, png_bytes, monkeypatch):
        monkeypatch.setattr(get_settings(), "LOGOS_MAX_UPLOAD_BYTES", 16)
        resp = _upload(client, "crest.png", png_bytes)
        assert resp.status_code == 413
        assert resp.json() == {"error": "file too large"}

    def test_reupload_replaces(self, client, png_bytes, svg_bytes):
        _upload(client, "crest.svg", svg_bytes, club_name="Old")
        resp = _upload(client, "crest.png", png_bytes, club_name="New")
        assert resp.json()["has_svg"] is False

        meta = client.get(f"/logos/{LOGO_ID}/json").json()
        assert meta["club_name"] == "New"
        assert meta["has_svg"] is False
        assert meta["file_size_svg"] == 0
        assert client.get(f"/logos/{LOGO_ID}", params={"format": "svg"}).status_code == 404


class TestLogoQueries:

    def test_list_and_filter(self, client, png_bytes):
        other = "6a1d3b0f-2c8e-4d4f-8b9a-abcdefabcdef"
        _upload(client, "a.png", png_bytes, club_name="FC Viktoria Plzeň", club_type="football")
        _upload(client, "b.png", png_bytes, logo_id=other, club_name="Futsal Hranice", club_type="futsal")

        assert len(client.get("/logos").json()) == 2
        assert [r["id"] for r in client.get("/logos", params={"sport": "futsal"}).json()] == [other]
        assert [r["id"] for r in client.get("/logos", params={"q": "plzen"}).json()] == [LOGO_ID]

    def test_search_with_logos(self, client, png_bytes):
        _upload(client, "a.png", png_bytes, club_name="Fotbalový klub Teplice")

        resp = client.get("/clubs/search-with-logos", params={"q": "FK Teplice"})
        assert resp.status_code == 200
        hits = resp.json()
        assert [h["id"] for h in hits] == [LOGO_ID]
        assert hits[0]["has_local_logo"] is True
        assert hits[0]["logo_url"].endswith(f"/logos/{LOGO_ID}?format=png")

    def test_search_with_logos_requires_query(self, client):
        assert client.get("/clubs/search-with-logos").status_code == 400

    def test_missing_logo(self, client):
        assert client.get(f"/logos/{LOGO_ID}").status_code == 404
        assert client.get(f"/logos/{LOGO_ID}/json").status_code == 404


class TestLogoDelete:

    def test_delete(self, client, png_bytes):
        _upload(client, "crest.png", png_bytes, club_name="SK Hranice")

        resp = client.delete(f"/logos/{LOGO_ID}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "id": LOGO_ID}
        assert client.get(f"/logos/{LOGO_ID}").status_code == 404
        assert client.get(f"/logos/{LOGO_ID}/json").status_code == 404

    def test_delete_unknown_is_ok(self, client):
        resp = client.delete(f"/logos/{LOGO_ID}")
        assert resp.status_code == 200

    def test_delete_invalid_uuid(self, client):
        assert client.delete("/logos/nope").status_code == 400
