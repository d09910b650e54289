"""Static catalog of well-known clubs (terminal search fallback).

Only used when every live provider came back empty or failed, so that a
search never errors while any answer at all is possible. Not a source of
truth: identifiers here are local placeholders, not FAČR ids.
"""

from typing import Optional

from app.clubs.normalization import fold, matches_token_prefix
from app.clubs.providers.base import ClubProvider
from app.clubs.types import ClubIdentity

STATIC_CLUBS = [
    ClubIdentity("11111111-2222-3333-4444-555555555555", "SK Slavia Praha", "Praha", "football", "https://www.slavia.cz"),
    ClubIdentity("22222222-3333-4444-5555-666666666666", "AC Sparta Praha", "Praha", "football", "https://www.sparta.cz"),
    ClubIdentity("33333333-4444-5555-6666-777777777777", "FC Viktoria Plzeň", "Plzeň", "football", "https://www.fcviktoria.cz"),
    ClubIdentity("44444444-5555-6666-7777-888888888888", "FC Baník Ostrava", "Ostrava", "football", "https://www.fcb.cz"),
    ClubIdentity("55555555-6666-7777-8888-999999999999", "SK Sigma Olomouc", "Olomouc", "football", "https://www.sigmafotbal.cz"),
    ClubIdentity("66666666-7777-8888-9999-aaaaaaaaaaaa", "FC Slovan Liberec", "Liberec", "football", "https://www.fcslovanliberec.cz"),
    ClubIdentity("77777777-8888-9999-aaaa-bbbbbbbbbbbb", "MFK Karviná", "Karviná", "football", "https://www.mfkkarvina.cz"),
    ClubIdentity("88888888-9999-aaaa-bbbb-cccccccccccc", "FC Fastav Zlín", "Zlín", "football", "https://www.fczlin.cz"),
    ClubIdentity("99999999-aaaa-bbbb-cccc-dddddddddddd", "FK Jablonec", "Jablonec nad Nisou", "football", "https://www.fkjablonec.cz"),
    ClubIdentity("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee", "SFC Opava", "Opava", "football", "https://www.sfcopava.cz"),
    ClubIdentity("bbbbbbbb-cccc-dddd-eeee-ffffffffffff", "FK Teplice", "Teplice", "football", "https://www.fkteplice.cz"),
    ClubIdentity("cccccccc-dddd-eeee-ffff-000000000000", "1. FK Příbram", "Příbram", "football", "https://www.1fkpribram.cz"),
    ClubIdentity("dddddddd-eeee-ffff-0000-111111111111", "SK Dynamo České Budějovice", "České Budějovice", "football", "https://www.dynamocb.cz"),
    ClubIdentity("eeeeeeee-ffff-0000-1111-222222222222", "FC Zbrojovka Brno", "Brno", "football", "https://www.fczbrno.cz"),
    ClubIdentity("ffffffff-0000-1111-2222-333333333333", "FC Vysočina Jihlava", "Jihlava", "football", "https://www.fcvysocina.cz"),
    ClubIdentity("00000000-1111-2222-3333-444444444444", "FK Mladá Boleslav", "Mladá Boleslav", "football", "https://www.fkmb.cz"),
    ClubIdentity("10101010-1111-2222-3333-444444444444", "SK Sigma Hranice", "Hranice", "football"),
    ClubIdentity("20202020-2222-3333-4444-555555555555", "SK Hranice", "Hranice", "football"),
    ClubIdentity("30303030-3333-4444-5555-666666666666", "TJ Krnov", "Krnov", "football"),
]


def filter_static_clubs(query: str, clubs: Optional[list[ClubIdentity]] = None) -> list[ClubIdentity]:
    """Match ``query`` against the catalog.

    Case- and diacritic-insensitive: substring of name or city, or prefix of
    any single name token. Catalog order is preserved.
    """
    clubs = STATIC_CLUBS if clubs is None else clubs
    needle = fold(query.strip())
    if not needle:
        return []

    results = []
    for club in clubs:
        name = fold(club.name)
        if needle in name or needle in fold(club.city) or matches_token_prefix(name, needle):
            results.append(club)
    return results


class StaticCatalogProvider(ClubProvider):
    """In-process provider over ``STATIC_CLUBS``; search only."""

    name = "static_catalog"

    def __init__(self, clubs: Optional[list[ClubIdentity]] = None):
        super().__init__()
        self.clubs = STATIC_CLUBS if clubs is None else clubs

    async def _search(self, query: str) -> list[ClubIdentity]:
        return filter_static_clubs(query, self.clubs)

    async def _get_by_identifier(self, club_id: str) -> Optional[ClubIdentity]:
        return None

