import logging

import polars as pl
import pytest

from GP_researcher.analysis.county_resolver import (
    CountyResolver,
    PrefixMatch,
    county_code,
    outward_code,
    standardize_county,
)
from GP_researcher.analysis.county_tables import COUNTY_CODES, POSTTOWN_TO_COUNTY, WELSH_COUNTIES


@pytest.fixture
def resolver():
    return CountyResolver()


@pytest.fixture
def outward_resolver():
    return CountyResolver(PrefixMatch.OUTWARD)


def test_preserved_county_falls_back_to_postcode(resolver):
    assert resolver.resolve("NP11 5GX", "Gwent", "YSTRAD MYNACH") == "Caerphilly"


def test_postcode_outside_every_range_is_unknown(resolver):
    assert resolver.resolve("CF14 1AB", "Unknown County", "UNRECOGNISED TOWN") is None


def test_missing_fields_are_unknown(resolver):
    assert resolver.resolve(None, None, None) is None


def test_glamorgan_uses_post_town(resolver):
    assert standardize_county("South Glamorgan", "BARRY") == "Vale of Glamorgan"
    assert resolver.resolve("CF62 8XX", "South Glamorgan", "BARRY") == "Vale of Glamorgan"
    assert resolver.resolve("SA1 1AA", "West Glamorgan", "SWANSEA") == "Swansea"


def test_vale_does_not_trigger_glamorgan_branch():
    assert standardize_county("Vale of South Glamorgan", "BARRY") == "Vale of South Glamorgan"


def test_glamorgan_without_town_match_keeps_county():
    assert standardize_county("Mid Glamorgan", "NOWHERE") == "Mid Glamorgan"


def test_county_rules_are_case_insensitive_and_ordered():
    assert standardize_county("Cwmbran, gwent", None) == "Torfaen"
    assert standardize_county("New Tredegar", None) == "Caerphilly"
    assert standardize_county("Tredegar", None) == "Blaenau Gwent"
    assert standardize_county("Rhondda Cynon Taff", None) == "Rhondda Cynon Taf"


def test_unmatched_county_is_returned_unchanged():
    assert standardize_county("Atlantis", "NOWHERE") == "Atlantis"
    assert standardize_county(None, None) is None


def test_standardized_county_wins_over_postcode(resolver):
    # NP11 is Caerphilly, but the county rule applies first
    assert resolver.resolve("NP11 5GX", "Caerleon", None) == "Newport"


def test_county_already_canonical_still_uses_postcode(resolver):
    assert resolver.resolve("NP11 5GX", "Newport", None) == "Caerphilly"


def test_substring_mode_never_matches_three_character_districts(resolver):
    assert resolver.match_postcode("CF3 0AA") is None
    assert resolver.match_postcode("SA1 1AA") is None


def test_outward_mode_matches_districts_exactly(outward_resolver):
    assert outward_resolver.match_postcode("CF3 0AA") == "Cardiff"
    assert outward_resolver.match_postcode("SA1 1AA") == "Swansea"
    assert outward_resolver.match_postcode("CF14 1AB") is None


def test_prefix_matching_is_first_match_in_table_order(resolver, outward_resolver):
    # CF46 is listed for both Caerphilly and Merthyr Tydfil
    assert resolver.match_postcode("CF46 6AA") == "Caerphilly"
    assert outward_resolver.match_postcode("CF46 6AA") == "Caerphilly"
    assert resolver.match_postcode("NP44 3AB") == "Torfaen"


def test_prefix_match_mode_accepts_strings():
    assert CountyResolver("outward").prefix_match is PrefixMatch.OUTWARD
    with pytest.raises(ValueError):
        CountyResolver("fuzzy")


def test_resolve_is_idempotent(resolver):
    first = resolver.resolve("NP11 5GX", "Gwent", "YSTRAD MYNACH")
    assert resolver.resolve("NP11 5GX", "Gwent", "YSTRAD MYNACH") == first


def test_outward_code():
    assert outward_code("cf14 4xn") == "CF14"
    assert outward_code("CF144XN") == "CF14"
    assert outward_code(" SA1 1AA ") == "SA1"
    assert outward_code("CF1") == "CF1"


def test_county_code():
    assert county_code("Cardiff") == "W06000015"
    assert county_code("Atlantis") is None
    assert county_code(None) is None


def test_tables_cover_the_22_authorities():
    assert len(WELSH_COUNTIES) == 22
    assert len(COUNTY_CODES) == 22
    assert all(name == name.lower() for name in POSTTOWN_TO_COUNTY)
    with pytest.raises(TypeError):
        POSTTOWN_TO_COUNTY["new town"] = "Cardiff"


def test_resolve_frame_adds_county_and_warns_on_unknown(resolver, caplog):
    df = pl.DataFrame(
        {
            "postcode": ["NP11 5GX", "CF14 1AB"],
            "county": ["Gwent", "Unknown County"],
            "posttown": ["YSTRAD MYNACH", "UNRECOGNISED TOWN"],
        }
    )
    with caplog.at_level(logging.WARNING, logger="GP_researcher"):
        resolved = resolver.resolve_frame(df)

    assert resolved["county_name"].to_list() == ["Caerphilly", None]
    assert "1 of 2 practices could not be assigned a county" in caplog.text
