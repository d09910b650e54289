"""Provider tests against canned upstream responses (no network)."""

import httpx

from app.clubs.providers import FacrApiProvider, FotbalCzProvider, StaticCatalogProvider
from app.clubs.providers.fotbal_cz import parse_detail_page, parse_search_page
from app.clubs.providers.static_catalog import filter_static_clubs
from app.clubs.types import ProviderStatus

FACR_BASE = "https://facr.test"
FOTBAL_BASE = "https://fotbal.test"
LOGO_BASE = "https://img.fotbal.test/kluby"

SEARCH_HTML = """
<ul>
  <li class="ListItemSplit">
    <a class="Link--inverted" href="/souteze/club/club/0f1e2d3c-hranice">
      <img src="https://img.fotbal.test/kluby/0f1e2d3c-hranice/crop.jpg">
      <span class="H7">SK Hranice</span>
    </a>
    <div class="ClubAddress"><p>Žáčkova 1, 75301 Hranice</p></div>
  </li>
  <li class="ListItemSplit">
    <a class="Link--inverted" href="https://fotbal.test/futsal/club/club/fut-9">Futsal Hranice</a>
  </li>
  <li class="ListItemSplit"><span>no link here</span></li>
</ul>
"""

DETAIL_HTML = """
<div>
  <h1 class="H4"><span>Futsal Hranice</span></h1>
  <div class="ClubAddress"><p>Nádražní 2, 75301 Hranice</p></div>
</div>
"""


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# FAČR API
# ---------------------------------------------------------------------------

class TestFacrApiProvider:

    async def test_search_parses_results(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/club/search"
            assert request.url.params["q"] == "Hranice"
            return httpx.Response(200, json={
                "query": "Hranice",
                "count": 1,
                "results": [{
                    "name": "SK Hranice",
                    "club_id": "abc-1",
                    "club_type": "football",
                    "logo_url": "https://facr.test/logo.png",
                    "address": "Žáčkova 1, 75301 Hranice",
                }],
            })

        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(handler))
        result = await provider.search("Hranice")

        assert result.status == ProviderStatus.SUCCESS
        club = result.clubs[0]
        assert club.id == "abc-1"
        assert club.name == "SK Hranice"
        assert club.city == "Hranice"
        assert club.type == "football"
        assert club.website == ""
        assert club.logo_url == "https://facr.test/logo.png"

    async def test_search_empty_results(self):
        provider = FacrApiProvider(
            base_url=FACR_BASE,
            client=_client(lambda r: httpx.Response(200, json={"query": "x", "count": 0, "results": []})),
        )
        result = await provider.search("x")
        assert result.status == ProviderStatus.EMPTY
        assert result.clubs == []

    async def test_search_server_error_is_soft_failure(self):
        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(lambda r: httpx.Response(503)))
        result = await provider.search("Hranice")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE
        assert "503" in result.error

    async def test_search_bad_json_is_soft_failure(self):
        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(lambda r: httpx.Response(200, text="<html>")))
        result = await provider.search("Hranice")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE

    async def test_search_transport_error_is_soft_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(handler))
        result = await provider.search("Hranice")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE

    async def test_search_top_level_list_is_soft_failure(self):
        provider = FacrApiProvider(
            base_url=FACR_BASE,
            client=_client(lambda r: httpx.Response(200, json=[{"name": "AC Sparta Praha"}])),
        )
        result = await provider.search("Sparta")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE

    async def test_search_results_not_a_list_is_soft_failure(self):
        provider = FacrApiProvider(
            base_url=FACR_BASE,
            client=_client(lambda r: httpx.Response(200, json={"results": "none"})),
        )
        result = await provider.search("Sparta")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE

    async def test_search_non_string_fields_are_coerced(self):
        provider = FacrApiProvider(
            base_url=FACR_BASE,
            client=_client(lambda r: httpx.Response(200, json={
                "results": [{"name": 1905, "club_id": 42, "club_type": 1, "address": None}],
            })),
        )
        result = await provider.search("Sparta")
        assert result.ok
        club = result.clubs[0]
        assert club.name == "1905"
        assert club.id == "42"
        assert club.type == "football"
        assert club.city == ""

    async def test_unknown_club_type_maps_to_football(self):
        provider = FacrApiProvider(
            base_url=FACR_BASE,
            client=_client(lambda r: httpx.Response(200, json={
                "results": [
                    {"name": "A", "club_id": "a", "club_type": "Beach Soccer"},
                    {"name": "B", "club_id": "b", "club_type": "FUTSAL"},
                ],
            })),
        )
        result = await provider.search("x")
        assert [c.type for c in result.clubs] == ["football", "futsal"]

    async def test_get_by_identifier_list_payload_is_soft_failure(self):
        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(lambda r: httpx.Response(200, json=["x"])))
        result = await provider.get_by_identifier("abc-1")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE

    async def test_get_by_identifier(self):
        def handler(request):
            assert request.url.path == "/club/football/abc-1"
            return httpx.Response(200, json={
                "name": "SK Hranice",
                "club_type": "football",
                "address": "Žáčkova 1, 75301 Hranice",
            })

        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(handler))
        result = await provider.get_by_identifier("abc-1")
        assert result.ok
        assert result.clubs[0].id == "abc-1"
        assert result.clubs[0].city == "Hranice"

    async def test_get_by_identifier_not_found(self):
        provider = FacrApiProvider(base_url=FACR_BASE, client=_client(lambda r: httpx.Response(404)))
        result = await provider.get_by_identifier("missing")
        assert result.status == ProviderStatus.EMPTY


# ---------------------------------------------------------------------------
# fotbal.cz scraping
# ---------------------------------------------------------------------------

class TestFotbalCzParsing:

    def test_search_page(self):
        clubs = parse_search_page(SEARCH_HTML, FOTBAL_BASE)
        assert [c.name for c in clubs] == ["SK Hranice", "Futsal Hranice"]

        football, futsal = clubs
        assert football.id == "0f1e2d3c-hranice"
        assert football.type == "football"
        assert football.city == "Hranice"
        assert football.website == "https://fotbal.test/souteze/club/club/0f1e2d3c-hranice"
        assert football.logo_url.endswith("crop.jpg")

        assert futsal.id == "fut-9"
        assert futsal.type == "futsal"
        assert futsal.city == ""
        assert futsal.website == "https://fotbal.test/futsal/club/club/fut-9"

    def test_unrecognised_markup_yields_nothing(self):
        assert parse_search_page("<html><body><p>Maintenance</p></body></html>") == []

    def test_detail_page(self):
        assert parse_detail_page(DETAIL_HTML) == ("Futsal Hranice", "Nádražní 2, 75301 Hranice")
        assert parse_detail_page("<html></html>") == ("", "")


class TestFotbalCzProvider:

    async def test_search_retries_quoted_query(self):
        seen = []

        def handler(request):
            q = request.url.params["q"]
            seen.append(q)
            if q.startswith('"'):
                return httpx.Response(200, text=SEARCH_HTML)
            return httpx.Response(500)

        provider = FotbalCzProvider(base_url=FOTBAL_BASE, logo_base_url=LOGO_BASE, client=_client(handler))
        result = await provider.search("Hranice")

        assert seen == ["Hranice", '"Hranice"']
        assert result.ok
        assert len(result.clubs) == 2

    async def test_search_gives_up_after_retry(self):
        provider = FotbalCzProvider(base_url=FOTBAL_BASE, client=_client(lambda r: httpx.Response(500)))
        result = await provider.search("Hranice")
        assert result.status == ProviderStatus.EMPTY

    async def test_lookup_falls_through_to_futsal_page(self):
        def handler(request):
            if request.url.path.startswith("/futsal/"):
                return httpx.Response(200, text=DETAIL_HTML)
            return httpx.Response(404)

        provider = FotbalCzProvider(base_url=FOTBAL_BASE, logo_base_url=LOGO_BASE, client=_client(handler))
        result = await provider.get_by_identifier("fut-9")

        assert result.ok
        club = result.clubs[0]
        assert club.name == "Futsal Hranice"
        assert club.type == "futsal"
        assert club.city == "Hranice"
        assert club.logo_url == f"{LOGO_BASE}/fut-9/fut-9_crop.jpg"

    async def test_lookup_page_without_name_is_empty(self):
        provider = FotbalCzProvider(
            base_url=FOTBAL_BASE,
            client=_client(lambda r: httpx.Response(200, text="<html><h1>Chyba</h1></html>")),
        )
        result = await provider.get_by_identifier("nothing")
        assert result.status == ProviderStatus.EMPTY

    async def test_lookup_transport_error_is_soft_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = FotbalCzProvider(base_url=FOTBAL_BASE, client=_client(handler))
        result = await provider.get_by_identifier("abc")
        assert result.status == ProviderStatus.TRANSIENT_FAILURE


# ---------------------------------------------------------------------------
# Static catalog
# ---------------------------------------------------------------------------

class TestStaticCatalog:

    def test_name_substring_case_insensitive(self):
        names = [c.name for c in filter_static_clubs("sparta")]
        assert names == ["AC Sparta Praha"]

    def test_diacritics_insensitive(self):
        assert [c.name for c in filter_static_clubs("pribram")] == ["1. FK Příbram"]
        assert [c.name for c in filter_static_clubs("PLZEŇ")] == ["FC Viktoria Plzeň"]

    def test_city_substring(self):
        names = {c.name for c in filter_static_clubs("Hranice")}
        assert names == {"SK Sigma Hranice", "SK Hranice"}

    def test_token_prefix(self):
        names = [c.name for c in filter_static_clubs("zbroj")]
        assert names == ["FC Zbrojovka Brno"]

    def test_no_match(self):
        assert filter_static_clubs("qwertyuiop") == []

    def test_blank(self):
        assert filter_static_clubs("  ") == []

    async def test_provider_has_no_identifier_lookup(self):
        provider = StaticCatalogProvider()
        result = await provider.get_by_identifier("11111111-2222-3333-4444-555555555555")
        assert result.status == ProviderStatus.EMPTY
