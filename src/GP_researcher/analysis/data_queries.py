"""Database queries for the GP Researcher analyses.

Every SQL statement the program issues lives here. Table names come from the
``Tables`` tuple so the same queries run against a DuckDB file or an attached
PostgreSQL database; user-supplied values are always bound as parameters.

Typical usage example:
    db = DatabaseConnection(Path("gp_practice_data.duckdb"))
    tables = source_tables("gp")
    practices = get_practices_by_postcode(db, tables, "CF14 4XN")
    drugs = get_top_drugs_by_postcode(db, tables, "CF14 4XN")
"""

from collections.abc import Sequence

import polars as pl

from GP_researcher.analysis.constants import (
    BETA_BLOCKER_PREFIX,
    BETA_BLOCKER_RANK_LIMIT,
    BNF_CHEMICAL_LENGTH,
    BNF_SECTION_LENGTH,
    CHD,
    DIABETES_SECTION,
    SIMILAR_POSTCODE_LENGTH,
    TOP_CATEGORIES_LIMIT,
    TOP_DRUGS_LIMIT,
    Tables,
)
from GP_researcher.db_connection import DatabaseConnection


def get_practices_by_postcode(db: DatabaseConnection, tables: Tables, postcode: str) -> pl.DataFrame:
    """Get the practices registered at exactly this postcode.

    Args:
        db: Open database connection
        tables: Source table names
        postcode: Postcode as entered by the user (upper-cased by the caller)

    Returns:
        DataFrame of practiceid and street, ordered by street.
    """
    return db.query_df(
        f"""
        SELECT DISTINCT ad.practiceid, ad.street, ad.postcode
        FROM {tables.address} AS ad
        WHERE ad.postcode = ?
        ORDER BY ad.street
        """,
        [postcode],
    )


def get_similar_practices(db: DatabaseConnection, tables: Tables, postcode: str) -> pl.DataFrame:
    """Get the practices whose postcode starts with the first four characters given.

    Args:
        db: Open database connection
        tables: Source table names
        postcode: Postcode as entered by the user

    Returns:
        DataFrame of practiceid, street and postcode, ordered by street.
    """
    return db.query_df(
        f"""
        SELECT DISTINCT ad.practiceid, ad.street, ad.postcode
        FROM {tables.address} AS ad
        WHERE starts_with(ad.postcode, ?)
        ORDER BY ad.street
        """,
        [postcode[:SIMILAR_POSTCODE_LENGTH]],
    )


def get_practice_by_id(db: DatabaseConnection, tables: Tables, practice_id: str) -> pl.DataFrame:
    """Get address details of one practice (empty when the id is unknown)."""
    return db.query_df(
        f"""
        SELECT practiceid, street, postcode, county, posttown
        FROM {tables.address}
        WHERE practiceid = ?
        LIMIT 1
        """,
        [practice_id],
    )


def practice_exists(db: DatabaseConnection, tables: Tables, practice_id: str) -> bool:
    """Check whether a practice id appears in the prescribing data."""
    found = db.query_df(
        f"SELECT COUNT(*) AS n FROM {tables.prescribing} WHERE practiceid = ?",
        [practice_id],
    )
    return found["n"].item() > 0


def get_practice_sizes(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get the number of prescription rows per practice.

    Returns:
        DataFrame of practiceid and total_prescriptions, one row per practice
        present in the prescribing data.
    """
    return db.query_df(f"""
        SELECT practiceid, COUNT(*) AS total_prescriptions
        FROM {tables.prescribing}
        GROUP BY practiceid
    """)


def get_top_drugs_by_postcode(
    db: DatabaseConnection,
    tables: Tables,
    postcode: str,
    limit: int = TOP_DRUGS_LIMIT,
) -> pl.DataFrame:
    """Get the most prescribed drugs, by items, for practices at a postcode.

    Args:
        db: Open database connection
        tables: Source table names
        postcode: The selected practice's postcode, matched as a prefix
        limit: Number of drugs to return

    Returns:
        DataFrame of bnfname and total_items in descending order of items.
    """
    return db.query_df(
        f"""
        SELECT gp.bnfname, SUM(gp.items)::BIGINT AS total_items
        FROM {tables.prescribing} AS gp
        JOIN {tables.address} AS ad ON gp.practiceid = ad.practiceid
        WHERE starts_with(ad.postcode, ?)
        GROUP BY gp.bnfname
        ORDER BY total_items DESC, gp.bnfname
        LIMIT {int(limit)}
        """,
        [postcode],
    )


def get_top_drugs_by_practice(
    db: DatabaseConnection,
    tables: Tables,
    practice_id: str,
    limit: int = TOP_DRUGS_LIMIT,
) -> pl.DataFrame:
    """Get the drugs with the most prescription rows for one practice."""
    return db.query_df(
        f"""
        SELECT bnfname, COUNT(*) AS prescriptions
        FROM {tables.prescribing}
        WHERE practiceid = ?
        GROUP BY bnfname
        ORDER BY prescriptions DESC, bnfname
        LIMIT {int(limit)}
        """,
        [practice_id],
    )


def get_top_drug_categories(
    db: DatabaseConnection,
    tables: Tables,
    practice_id: str,
    limit: int = TOP_CATEGORIES_LIMIT,
) -> pl.DataFrame:
    """Get the BNF sections a practice prescribes from most often.

    Prescription rows are matched to the formulary on the first six
    characters of the BNF code.

    Returns:
        DataFrame of sectiondesc and total_prescriptions.
    """
    return db.query_df(
        f"""
        SELECT b.sectiondesc, COUNT(*) AS total_prescriptions
        FROM {tables.bnf} AS b
        JOIN {tables.prescribing} AS gp
            ON LEFT(b.bnfchemical, {BNF_SECTION_LENGTH}) = LEFT(gp.bnfcode, {BNF_SECTION_LENGTH})
        WHERE gp.practiceid = ?
        GROUP BY b.sectiondesc
        ORDER BY total_prescriptions DESC, b.sectiondesc
        LIMIT {int(limit)}
        """,
        [practice_id],
    )


def get_practice_indicator_rate(
    db: DatabaseConnection, tables: Tables, practice_id: str, indicator: str
) -> float | None:
    """Get a practice's mean ratio for a QOF indicator, as a percentage."""
    rate = db.query_df(
        f"""
        SELECT AVG(ratio) * 100 AS percentage
        FROM {tables.achievement}
        WHERE orgcode = ? AND indicator = ?
        """,
        [practice_id, indicator],
    )
    return rate["percentage"].item()


def get_wales_indicator_rate(db: DatabaseConnection, tables: Tables, indicator: str) -> float | None:
    """Get the mean ratio of a QOF indicator across all practices, as a percentage."""
    rate = db.query_df(
        f"""
        SELECT AVG(ratio) * 100 AS percentage
        FROM {tables.achievement}
        WHERE indicator = ?
        """,
        [indicator],
    )
    return rate["percentage"].item()


def get_group_indicator_rate(
    db: DatabaseConnection,
    tables: Tables,
    indicator: str,
    practice_ids: Sequence[str],
) -> float | None:
    """Get the mean ratio of a QOF indicator over a group of practices, as a percentage."""
    if not practice_ids:
        return None
    rate = db.query_df(
        f"""
        SELECT AVG(ratio) * 100 AS percentage
        FROM {tables.achievement}
        WHERE indicator = ? AND list_contains(?::VARCHAR[], orgcode)
        """,
        [indicator, list(practice_ids)],
    )
    return rate["percentage"].item()


def get_drug_items_vs_indicator(
    db: DatabaseConnection,
    tables: Tables,
    indicator: str,
    rate_column: str,
    bnf_chemical: str | None = None,
    name_prefix: str | None = None,
) -> pl.DataFrame:
    """Get per-practice items of a drug alongside a QOF indicator rate.

    Exactly one of ``bnf_chemical`` (matched on its first eight characters)
    or ``name_prefix`` (matched against the start of bnfname) selects the drug.

    Args:
        db: Open database connection
        tables: Source table names
        indicator: QOF indicator code
        rate_column: Name for the indicator rate column in the result
        bnf_chemical: BNF chemical code of the drug
        name_prefix: Leading text of the drug's bnfname

    Returns:
        DataFrame of practiceid, total_drug_items and the rate column.
    """
    if (bnf_chemical is None) == (name_prefix is None):
        raise ValueError("Give exactly one of bnf_chemical or name_prefix")

    if bnf_chemical is not None:
        drug_filter = f"LEFT(bnfcode, {BNF_CHEMICAL_LENGTH}) = LEFT(?, {BNF_CHEMICAL_LENGTH})"
        drug_param = bnf_chemical
    else:
        drug_filter = "starts_with(bnfname, ?)"
        drug_param = name_prefix

    return db.query_df(
        f"""
        WITH drug_prescriptions AS (
            SELECT practiceid, SUM(items)::BIGINT AS total_drug_items
            FROM {tables.prescribing}
            WHERE {drug_filter}
            GROUP BY practiceid
        ),
        indicator_rates AS (
            SELECT orgcode, AVG(ratio) * 100 AS {rate_column}
            FROM {tables.achievement}
            WHERE indicator = ?
            GROUP BY orgcode
        )
        SELECT d.practiceid, d.total_drug_items, r.{rate_column}
        FROM drug_prescriptions AS d
        JOIN indicator_rates AS r ON d.practiceid = r.orgcode
        ORDER BY d.total_drug_items DESC, r.{rate_column} DESC
        """,
        [drug_param, indicator],
    )


def get_diabetic_drugs(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get the single-ingredient diabetes drugs in the formulary.

    Combination products (a "/" in the name) and test or other entries are
    left out.

    Returns:
        DataFrame of bnfchemical and chemicaldesc ordered by bnfchemical.
    """
    return db.query_df(
        f"""
        SELECT bnfchemical, MIN(chemicaldesc) AS chemicaldesc
        FROM {tables.bnf}
        WHERE bnfsection = ?
        AND chemicaldesc NOT LIKE '%/%'
        AND LOWER(chemicaldesc) NOT LIKE '%test%'
        AND LOWER(chemicaldesc) NOT LIKE '%other%'
        GROUP BY bnfchemical
        ORDER BY bnfchemical
        """,
        [DIABETES_SECTION],
    )


def get_chd_centiles_with_address(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get every practice's CHD centile with the address fields used to find its county."""
    return db.query_df(
        f"""
        SELECT ad.practiceid, ad.county, ad.postcode, ad.posttown, qa.centile
        FROM {tables.address} AS ad
        JOIN {tables.achievement} AS qa ON ad.practiceid = qa.orgcode
        WHERE qa.indicator = ?
        """,
        [CHD],
    )


def get_practice_centile(
    db: DatabaseConnection, tables: Tables, practice_id: str, indicator: str = CHD
) -> float | None:
    """Get a practice's centile for an indicator, or None when it has none."""
    centile = db.query_df(
        f"""
        SELECT AVG(centile) AS centile
        FROM {tables.achievement}
        WHERE orgcode = ? AND indicator = ?
        """,
        [practice_id, indicator],
    )
    return centile["centile"].item()


def get_beta_blockers_by_spend(
    db: DatabaseConnection,
    tables: Tables,
    descending: bool = True,
    limit: int = BETA_BLOCKER_RANK_LIMIT,
) -> pl.DataFrame:
    """Get beta-blockers ranked by total actual cost.

    Args:
        db: Open database connection
        tables: Source table names
        descending: True for the highest spend first, False for the lowest
        limit: Number of drugs to return

    Returns:
        DataFrame of bnfname and total_spend.
    """
    order = "DESC" if descending else "ASC"
    return db.query_df(
        f"""
        SELECT bnfname, SUM(actcost) AS total_spend
        FROM {tables.prescribing}
        WHERE starts_with(bnfcode, ?)
        GROUP BY bnfname
        ORDER BY total_spend {order}, bnfname
        LIMIT {int(limit)}
        """,
        [BETA_BLOCKER_PREFIX],
    )


def get_beta_blocker_spend_vs_centile(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get each practice's beta-blocker spend with its CHD centile."""
    return db.query_df(
        f"""
        SELECT
            gp.practiceid,
            SUM(gp.actcost) AS total_spend_on_beta_blockers,
            q.centile AS performance_centile
        FROM {tables.prescribing} AS gp
        JOIN {tables.achievement} AS q ON gp.practiceid = q.orgcode
        WHERE starts_with(gp.bnfcode, ?) AND q.indicator = ?
        GROUP BY gp.practiceid, q.centile
        """,
        [BETA_BLOCKER_PREFIX, CHD],
    )


def get_spend_per_item_extreme(
    db: DatabaseConnection, tables: Tables, drug_name: str, highest: bool = True
) -> pl.DataFrame:
    """Get the practice with the highest (or lowest) average spend per item on a drug.

    Args:
        db: Open database connection
        tables: Source table names
        drug_name: Drug name, matched case-insensitively anywhere in bnfname
        highest: True for the highest spender, False for the lowest

    Returns:
        DataFrame with at most one row of practiceid, street and
        average_spend_per_item.
    """
    order = "DESC" if highest else "ASC"
    return db.query_df(
        f"""
        SELECT
            gp.practiceid,
            ad.street,
            AVG(gp.actcost / NULLIF(gp.items, 0)) AS average_spend_per_item
        FROM {tables.prescribing} AS gp
        JOIN {tables.address} AS ad ON gp.practiceid = ad.practiceid
        WHERE contains(LOWER(gp.bnfname), LOWER(?))
        GROUP BY gp.practiceid, ad.street
        HAVING AVG(gp.actcost / NULLIF(gp.items, 0)) IS NOT NULL
        ORDER BY average_spend_per_item {order}, gp.practiceid
        LIMIT 1
        """,
        [drug_name],
    )


def get_cluster_features(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get per-practice beta-blocker spend, quantity and items with the CHD centile."""
    return db.query_df(
        f"""
        SELECT
            gp.practiceid,
            SUM(gp.actcost) AS total_spend_on_beta_blockers,
            SUM(gp.quantity) AS total_quantity_of_chd_medication,
            SUM(gp.items)::BIGINT AS number_of_chd_related_prescriptions,
            qof.centile AS performance_centile
        FROM {tables.prescribing} AS gp
        JOIN {tables.achievement} AS qof ON gp.practiceid = qof.orgcode
        WHERE starts_with(gp.bnfcode, ?) AND qof.indicator = ?
        GROUP BY gp.practiceid, qof.centile
        ORDER BY gp.practiceid
        """,
        [BETA_BLOCKER_PREFIX, CHD],
    )


def get_practice_names(db: DatabaseConnection, tables: Tables) -> pl.DataFrame:
    """Get practiceid and street for practices that appear in the prescribing data."""
    return db.query_df(f"""
        SELECT DISTINCT gp.practiceid, ad.street
        FROM {tables.prescribing} AS gp
        JOIN {tables.address} AS ad ON gp.practiceid = ad.practiceid
    """)
