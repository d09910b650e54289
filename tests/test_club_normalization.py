"""Unit tests for club query normalization and address parsing."""

import pytest

from app.clubs.address import extract_city
from app.clubs.normalization import (
    expand_abbreviation,
    fold,
    matches_token_prefix,
    normalize_club_search_query,
    strip_diacritics,
)


# ---------------------------------------------------------------------------
# strip_diacritics / fold
# ---------------------------------------------------------------------------

class TestStripDiacritics:
    """Combining marks are dropped, base letters kept."""

    def test_plain_text_unchanged(self):
        assert strip_diacritics("Hranice") == "Hranice"

    def test_czech_characters(self):
        assert strip_diacritics("Příbram") == "Pribram"
        assert strip_diacritics("České Budějovice") == "Ceske Budejovice"
        assert strip_diacritics("Plzeň") == "Plzen"
        assert strip_diacritics("Karviná") == "Karvina"

    @pytest.mark.parametrize("text", ["Žďár nad Sázavou", "Ústí nad Labem", "Hranice", "", "Zlín"])
    def test_idempotent(self, text):
        once = strip_diacritics(text)
        assert strip_diacritics(once) == once

    def test_empty(self):
        assert strip_diacritics("") == ""

    def test_fold_lowercases(self):
        assert fold("SK Dynamo České Budějovice") == "sk dynamo ceske budejovice"


# ---------------------------------------------------------------------------
# Abbreviation expansion
# ---------------------------------------------------------------------------

class TestAbbreviations:

    def test_known_prefixes(self):
        assert expand_abbreviation("FK") == "fotbalový klub"
        assert expand_abbreviation("tj") == "tělovýchovná jednota"
        assert expand_abbreviation("Sk") == "sportovní klub"

    def test_unknown_passes_through(self):
        assert expand_abbreviation("Sparta") == "Sparta"
        assert expand_abbreviation("AC") == "AC"

    def test_only_first_token_expanded(self):
        assert normalize_club_search_query("FK Teplice") == "fotbalový klub teplice"
        assert normalize_club_search_query("Teplice FK") == "teplice fk"

    def test_blank_query(self):
        assert normalize_club_search_query("   ") == ""

    def test_collapses_whitespace(self):
        assert normalize_club_search_query("  TJ   Krnov ") == "tělovýchovná jednota krnov"


class TestTokenPrefix:

    def test_prefix_of_any_token(self):
        assert matches_token_prefix("sk sigma hranice", "hran")
        assert matches_token_prefix("sk sigma hranice", "sig")

    def test_not_inside_token(self):
        assert not matches_token_prefix("sk sigma hranice", "anice")


# ---------------------------------------------------------------------------
# extract_city
# ---------------------------------------------------------------------------

class TestExtractCity:

    def test_simple(self):
        assert extract_city("Stadionová 1, 10000 Praha") == "Praha"

    def test_multi_word_city(self):
        assert extract_city("Sportovní 5, 29301 Mladá Boleslav") == "Mladá Boleslav"
        assert extract_city("Milady Horákové 98, 17000 Praha 7") == "Praha 7"

    def test_uses_last_segment(self):
        assert extract_city("Areál TJ, Nádražní 2, 75301 Hranice") == "Hranice"

    def test_missing_postal_code(self):
        assert extract_city("Stadionová 1, Praha") == ""

    def test_no_comma(self):
        assert extract_city("10000 Praha") == ""

    def test_empty(self):
        assert extract_city("") == ""
