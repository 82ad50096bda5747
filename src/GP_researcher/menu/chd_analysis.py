"""Performance and Spend sub-menu: CHD by county, beta-blocker spend and outliers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import polars as pl

from GP_researcher.analysis import data_queries as dq
from GP_researcher.analysis.clustering import (
    CENTILE,
    ITEMS,
    QUANTITY,
    SPEND,
    classical_mds,
    cluster_distribution,
    cluster_outliers,
    cluster_practices,
    cluster_summary,
    dominating_cluster_narrative,
    narrate_cluster_correlations,
    scale_features,
    within_cluster_correlations,
)
from GP_researcher.analysis.constants import N_CLUSTERS
from GP_researcher.analysis.correlation import has_sufficient_data, kendall_correlation, summarise
from GP_researcher.analysis.county_tables import WELSH_COUNTIES
from GP_researcher.menu.menu_state import MenuResult, end_of_operation_choice, select_another_choice
from GP_researcher.menu.practice_selection import select_practice
from GP_researcher.visualization.constants import VARIABLE_NAMES
from GP_researcher.visualization.text_utils import heading, print_table, ruled
from GP_researcher.visualization.visualization_utils import (
    create_cluster_box_plot,
    create_cluster_grid,
    create_county_bar_chart,
    create_county_choropleth,
    create_entity_comparison_chart,
    create_scatter_with_trend,
    load_boundaries,
    show_figure,
)

if TYPE_CHECKING:
    from GP_researcher.researcher import Session

logger = logging.getLogger(__name__)

COUNTY_INTRO = """
The 'performance' of CHD for a practice is a centile ranking based on the
frequency distribution of CHD across all practices in Wales. As this centile
tracks the rate of CHD across all practices, higher performance indicates a
higher rate of CHD at that practice or county.

The following analysis will allow you to investigate a practice and compare
the performance of CHD at that practice to that of its county.
"""

SPEND_INTRO = """
The following analyses find the beta blockers with the most and least spent on
them across Wales, test whether spend on beta blockers is related to CHD
performance, and show the spread in spend per item on the same drug between
practices.
"""

SPEND_SUMMARY = """
The disparity in spend could be attributed to various factors, e.g.
prescription habits (favouring branded drugs over their generic counterparts),
supplier contracts, purchase volume, etc.

However, identifying these differences functions as the first step in a series
of more in-depth analyses, whereby obtaining information about the geographic
location and patient demography of the practices would aid in investigating
the cause of these discrepancies further.
"""

OUTLIER_INTRO = """
The following analysis clusters practices into subgroups based on total spend
on beta blockers, total quantity of beta blockers, number of beta blocker
prescriptions and CHD performance centile, and identifies outliers within
those subgroups.

This helps target outliers with greater precision, which can suggest
differences worth further investigation, such as practice characteristics,
patient population size, or demographic factors.
"""

OUTLIER_SUMMARY = """
Differences in spend may be down to various inflexible factors, such as
location, bulk orders or higher volumes of branded-drug prescriptions.

Having narrowed down outliers based on prescription and spending patterns,
these analyses provide a starting point to investigate further. Combined with
geographic and demographic data they can identify practices that may be able to
review their budget and allocate resources more economically.
"""

OUTLIER_VARIABLES: tuple[str, ...] = (SPEND, CENTILE, QUANTITY, ITEMS)


def average_centile_by_county(centiles: pl.DataFrame) -> pl.DataFrame:
    """Mean CHD centile per resolved county, with each county's ONS code.

    Practices without a resolved county are grouped under a null county_name.
    """
    codes = pl.DataFrame(
        {
            "county_name": [record.name for record in WELSH_COUNTIES],
            "county_code": [record.code for record in WELSH_COUNTIES],
        }
    )
    return (
        centiles.group_by("county_name")
        .agg(pl.col("centile").mean().alias("average_centile"))
        .join(codes, on="county_name", how="left")
        .sort("average_centile", descending=True, nulls_last=True)
    )


def compare_to_county(practice_value: float, county_value: float) -> str:
    if practice_value > county_value:
        return "higher than"
    if practice_value < county_value:
        return "lower than"
    return "equal to"


def county_performance(session: Session) -> pl.DataFrame:
    centiles = session.resolver.resolve_frame(
        dq.get_chd_centiles_with_address(session.db, session.tables)
    )
    return average_centile_by_county(centiles)


def plot_county_performance(session: Session, by_county: pl.DataFrame) -> None:
    boundaries = session.settings.boundary_geojson
    if boundaries is not None and boundaries.exists():
        geojson = load_boundaries(boundaries, {record.code for record in WELSH_COUNTIES})
        fig = create_county_choropleth(by_county.drop_nulls("county_code"), geojson)
    else:
        if boundaries is not None:
            logger.warning("Boundary file %s not found, drawing a bar chart instead", boundaries)
        fig = create_county_bar_chart(by_county)
    show_figure(fig, "chd_performance_by_county", session.settings)


def compare_practice_with_county(session: Session, by_county: pl.DataFrame) -> None:
    practice = select_practice(session)
    if practice is None:
        return

    details = dq.get_practice_by_id(session.db, session.tables, practice.practice_id)
    if details.is_empty():
        print("No location information found for the selected practice.")
        return
    location = details.row(0, named=True)
    county = session.resolver.resolve(location["postcode"], location["county"], location["posttown"])

    practice_centile = dq.get_practice_centile(session.db, session.tables, practice.practice_id)
    county_rows = by_county.filter(pl.col("county_name") == county) if county else by_county.clear()
    county_centile = county_rows["average_centile"].item() if county_rows.height == 1 else None

    if practice_centile is None or county_centile is None:
        print("Missing CHD performance data for selected practice or county average.")
        return

    practice_pct = practice_centile * 100
    county_pct = county_centile * 100
    name = practice.name or practice.practice_id
    print(f"\n{heading('Summary information:')}")
    print(f"CHD performance for selected practice: {practice_pct:.2f}%")
    print(f"Average CHD performance for {county}: {county_pct:.2f}%")
    print(
        f"\nThe CHD performance for {name} is {compare_to_county(practice_pct, county_pct)} "
        f"that of its county {county}.\n"
    )

    fig = create_entity_comparison_chart(
        [name, county], [practice_pct, county_pct], f"CHD Performance: {name} vs. {county}"
    )
    show_figure(fig, f"chd_{practice.practice_id}_vs_county", session.settings)


def run_county_performance(session: Session) -> MenuResult:
    print(ruled(COUNTY_INTRO))
    print("Performing analysis. Please wait...\n")

    by_county = county_performance(session)
    plot_county_performance(session, by_county)

    ranked = by_county.drop_nulls("county_name").select(
        pl.col("county_name"), (pl.col("average_centile") * 100).round(2)
    )
    print_table(
        "Summary information:", ranked, {"county_name": "County", "average_centile": "Performance (%)"}
    )

    print("\nPlease enter the postcode of the practice you wish to investigate.")
    while True:
        compare_practice_with_county(session, by_county)
        if not select_another_choice():
            return MenuResult.CONTINUE


def show_spend_per_item(session: Session, drugs: list[str]) -> None:
    print(f"\n{heading('Difference in Spend for the Top Beta Blockers:')}\n")
    for drug in drugs:
        print(f"Highest and lowest spend for {drug}:")
        highest = dq.get_spend_per_item_extreme(session.db, session.tables, drug, highest=True)
        lowest = dq.get_spend_per_item_extreme(session.db, session.tables, drug, highest=False)
        if highest.is_empty() or lowest.is_empty():
            print(f"Insufficient data for drug: {drug}\n")
            continue
        extremes = pl.concat([highest, lowest]).with_columns(
            pl.col("average_spend_per_item").round(2)
        )
        print_table(
            drug,
            extremes,
            {
                "practiceid": "Practice ID",
                "street": "Practice",
                "average_spend_per_item": "Avg spend per item (£)",
            },
        )
        print()


def run_beta_blocker_spend(session: Session) -> MenuResult:
    print(ruled(SPEND_INTRO))
    print("Performing spend analysis on beta blockers. Please wait...")

    top = dq.get_beta_blockers_by_spend(session.db, session.tables, descending=True)
    bottom = dq.get_beta_blockers_by_spend(session.db, session.tables, descending=False)
    labels = {"bnfname": "Drug Type", "total_spend": "Total Spend (£)"}
    print_table("Top 5 Beta Blockers by Spend:", top, labels)
    print_table("Bottom 5 Beta Blockers by Spend:", bottom, labels)

    print("\nPerforming correlation analysis...\n")
    spend = dq.get_beta_blocker_spend_vs_centile(session.db, session.tables)
    print(heading("Summary information:"))
    if has_sufficient_data(spend, SPEND, CENTILE):
        result = kendall_correlation(spend, SPEND, CENTILE)
        print(
            f"Spend and CHD performance centile: tau = {result.coefficient:.3f}, "
            f"p = {result.p_value:.3g}, n = {result.n}. {summarise(result)}\n"
        )
        fig = create_scatter_with_trend(
            spend,
            SPEND,
            CENTILE,
            title="Relationship between Beta Blockers Spend and CHD Performance",
            x_label="Total Spend on Beta Blockers (£)",
            y_label="CHD Performance Centile",
        )
        show_figure(fig, "beta_blocker_spend_vs_chd", session.settings)
    else:
        print("Spend data not sufficient for correlation test.\n")

    show_spend_per_item(session, top["bnfname"].to_list())
    print(ruled(SPEND_SUMMARY))
    return end_of_operation_choice()


def show_cluster_outliers(clustered: pl.DataFrame, names: pl.DataFrame) -> None:
    for variable in OUTLIER_VARIABLES:
        display = VARIABLE_NAMES[variable]
        for cluster, outliers in cluster_outliers(clustered, variable, names).items():
            print_table(
                f"Outliers in cluster {cluster} for {display}:",
                outliers.select("practiceid", "street", variable),
                {"practiceid": "Practice ID", "street": "GP Surgery", variable: display},
            )


def run_outlier_analysis(session: Session) -> MenuResult:
    print(ruled(OUTLIER_INTRO))
    print("Performing cluster analysis. Please wait...")

    features = dq.get_cluster_features(session.db, session.tables)
    if features.drop_nulls().height < N_CLUSTERS:
        print(f"Insufficient data: at least {N_CLUSTERS} practices are needed for clustering.")
        return end_of_operation_choice()

    clustered = cluster_practices(features)
    mds = classical_mds(scale_features(clustered))
    show_figure(create_cluster_grid(clustered, mds), "cluster_overview", session.settings)

    summary = cluster_summary(clustered)
    print_table("Cluster Summary:", summary)
    distribution = cluster_distribution(clustered)
    print_table(
        "Cluster Distribution:",
        distribution,
        {"cluster": "Cluster", "count": "Total practices", "percentage": "% of total practices"},
    )

    print(f"\n{heading('Summary information:')}")
    for sentence in narrate_cluster_correlations(within_cluster_correlations(clustered)):
        print(f"\n{sentence}")
    print(ruled(dominating_cluster_narrative(summary["cluster_percentage"].to_list())))

    for variable in OUTLIER_VARIABLES:
        show_figure(create_cluster_box_plot(clustered, variable), f"{variable}_by_cluster", session.settings)

    names = dq.get_practice_names(session.db, session.tables).unique("practiceid", keep="first")
    show_cluster_outliers(clustered, names)
    print(ruled(OUTLIER_SUMMARY))
    return end_of_operation_choice()
