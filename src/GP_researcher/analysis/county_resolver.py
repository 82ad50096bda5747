"""Assign GP practices to one of the 22 Welsh unitary authorities.

County is recorded inconsistently in the address data, so a practice is
resolved through a layered fallback:

1. the free-text county, corrected by the post-town table when the county is
   an ambiguous "Glamorgan";
2. the ordered county substring rules;
3. the first four characters of the postcode against each authority's
   postcode districts.

Unresolvable practices come back as None.

Typical usage example:
    resolver = CountyResolver()
    resolver.resolve("NP11 5GX", "Gwent", "YSTRAD MYNACH")  # 'Caerphilly'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum

import polars as pl

from GP_researcher.analysis.county_tables import (
    COUNTY_CODES,
    COUNTY_RULES,
    POSTTOWN_TO_COUNTY,
    WELSH_COUNTIES,
    CountyRecord,
)

logger = logging.getLogger(__name__)

POSTCODE_PREFIX_LENGTH = 4
INWARD_CODE_LENGTH = 3


class PrefixMatch(str, Enum):
    """How a postcode is compared with an authority's postcode districts."""

    SUBSTRING = "substring"
    OUTWARD = "outward"


def standardize_county(
    county: str | None,
    posttown: str | None,
    posttown_table: Mapping[str, str] = POSTTOWN_TO_COUNTY,
    rules: Sequence[tuple[str, str]] = COUNTY_RULES,
) -> str | None:
    """Map a free-text county onto an authority name where a rule applies.

    Returns the county unchanged when nothing matches.
    """
    town: str = (posttown or "").lower()
    raw: str = county or ""
    lowered: str = raw.lower()

    corrected: str | None = county
    for town_fragment, town_county in posttown_table.items():
        if town_fragment in town:
            corrected = town_county
            break

    # "Glamorgan" alone spans several modern authorities
    if "glamorgan" in lowered and "vale" not in lowered:
        return corrected

    upper: str = raw.upper()
    for fragment, rule_county in rules:
        if fragment in upper:
            return rule_county

    return county


def outward_code(postcode: str) -> str:
    """Return the outward part of a UK postcode ("CF14 1AB" -> "CF14")."""
    cleaned: str = postcode.strip().upper()
    if " " in cleaned:
        return cleaned.split()[0]
    if len(cleaned) > INWARD_CODE_LENGTH:
        return cleaned[:-INWARD_CODE_LENGTH]
    return cleaned


class CountyResolver:
    """Resolves practice addresses to canonical Welsh authority names."""

    def __init__(
        self,
        prefix_match: PrefixMatch | str = PrefixMatch.SUBSTRING,
        counties: Sequence[CountyRecord] = WELSH_COUNTIES,
    ) -> None:
        self.prefix_match = PrefixMatch(prefix_match)
        self.counties = tuple(counties)
        self._joined_prefixes: tuple[str, ...] = tuple(
            "|".join(record.postcode_prefixes) for record in self.counties
        )

    def match_postcode(self, postcode: str | None) -> str | None:
        """Return the first authority whose postcode districts match the postcode."""
        if not postcode:
            return None

        if self.prefix_match is PrefixMatch.OUTWARD:
            district: str = outward_code(postcode)
            for record in self.counties:
                if district in record.postcode_prefixes:
                    return record.name
            return None

        # Unanchored containment; three-character districts ("CF3 ") never match
        prefix: str = postcode[:POSTCODE_PREFIX_LENGTH]
        for record, joined in zip(self.counties, self._joined_prefixes, strict=True):
            if prefix in joined:
                return record.name
        return None

    def resolve(
        self, postcode: str | None, county: str | None, posttown: str | None
    ) -> str | None:
        """Resolve a practice address to an authority name, or None if unknown."""
        standardized: str | None = standardize_county(county, posttown)
        if standardized is not None and standardized != county:
            return standardized

        resolved: str | None = self.match_postcode(postcode)
        if resolved is None:
            logger.debug(
                "No county for postcode=%r county=%r posttown=%r", postcode, county, posttown
            )
        return resolved

    def resolve_frame(self, df: pl.DataFrame, column: str = "county_name") -> pl.DataFrame:
        """Add a resolved county column to a frame with postcode, county and posttown."""
        names: list[str | None] = [
            self.resolve(postcode, county, posttown)
            for postcode, county, posttown in zip(
                df["postcode"].to_list(),
                df["county"].to_list(),
                df["posttown"].to_list(),
                strict=True,
            )
        ]
        unknown: int = sum(name is None for name in names)
        if unknown:
            logger.warning("%d of %d practices could not be assigned a county", unknown, len(names))
        return df.with_columns(pl.Series(column, names, dtype=pl.Utf8))


def county_code(name: str | None) -> str | None:
    """Return the ONS code (W06...) for a canonical authority name."""
    if name is None:
        return None
    return COUNTY_CODES.get(name)
