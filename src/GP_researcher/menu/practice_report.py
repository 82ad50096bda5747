"""Main menu option 1: prescriptions, size, hypertension and obesity for one practice."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import polars as pl

from GP_researcher.analysis import data_queries as dq
from GP_researcher.analysis.constants import HYPERTENSION, INDICATOR_DEFINITIONS, OBESITY
from GP_researcher.menu.menu_state import MenuResult, select_another_choice
from GP_researcher.menu.practice_selection import SelectedPractice, select_practice
from GP_researcher.visualization.text_utils import heading, print_table, ruled, wrap
from GP_researcher.visualization.visualization_utils import (
    create_comparison_bar_chart,
    show_figure,
)

if TYPE_CHECKING:
    from GP_researcher.analysis.size_classifier import SizeLabel
    from GP_researcher.researcher import Session

logger = logging.getLogger(__name__)

INTRO = """
The following analysis will allow you to choose a GP surgery by postcode and
identify its top 10 prescribed drugs and top 5 prescribed drug types, classify
it as big or small, and compare its hypertension and obesity rates against
similar sized practices and Wales.

Practices are differentiated by size to account for the considerable
variability between them. Size is set relative to the median number of
prescriptions across Wales.
"""

INDICATOR_NAMES: dict[str, str] = {HYPERTENSION: "Hypertension", OBESITY: "Obesity"}


def show_top_drugs(session: Session, practice: SelectedPractice) -> None:
    print("\nFetching Top 10 Drugs Prescribed...")
    if practice.postcode:
        drugs = dq.get_top_drugs_by_postcode(session.db, session.tables, practice.postcode)
        labels = {"bnfname": "Drug Name", "total_items": "Total Prescriptions"}
    else:
        drugs = dq.get_top_drugs_by_practice(session.db, session.tables, practice.practice_id)
        labels = {"bnfname": "Drug Name", "prescriptions": "Number of Prescriptions"}

    if drugs.is_empty():
        print("No drugs found for the selected practice.")
    else:
        print_table("Top 10 drugs prescribed:", drugs, labels)


def show_top_categories(session: Session, practice: SelectedPractice) -> None:
    print("\nFetching Top 5 Drug Categories Prescribed...")
    categories = dq.get_top_drug_categories(session.db, session.tables, practice.practice_id)
    if categories.is_empty():
        print("No drug categories found for the selected practice.")
    else:
        print_table(
            "Top 5 drug categories:",
            categories,
            {"sectiondesc": "Drug Type", "total_prescriptions": "Total Prescriptions"},
        )


def indicator_comparison(
    session: Session, practice: SelectedPractice, size: SizeLabel, indicator: str
) -> pl.DataFrame | None:
    """Practice, same-size and Wales average rates for an indicator, or None if any is missing."""
    same_size_ids = session.size_classifier.same_size_practices(size)
    rates = [
        ("Selected Practice", dq.get_practice_indicator_rate(
            session.db, session.tables, practice.practice_id, indicator
        )),
        (f"{size.value} Practices Average", dq.get_group_indicator_rate(
            session.db, session.tables, indicator, same_size_ids
        )),
        ("Wales Average", dq.get_wales_indicator_rate(session.db, session.tables, indicator)),
    ]
    if any(rate is None for _, rate in rates):
        logger.warning("Missing %s rate for practice %s", indicator, practice.practice_id)
        return None
    return pl.DataFrame(
        {
            "indicator": [indicator] * len(rates),
            "category": [category for category, _ in rates],
            "percentage": [rate for _, rate in rates],
        }
    )


def show_indicator_comparison(
    session: Session, practice: SelectedPractice, size: SizeLabel, indicator: str
) -> None:
    name = INDICATOR_NAMES[indicator]
    print(f"\nPlotting Comparison of {name} Rate...")
    comparison = indicator_comparison(session, practice, size, indicator)
    if comparison is None:
        print("\nNo data available for one or more categories. Cannot proceed with visualization.")
        return

    print_table(f"Comparison of {name} Rate:", comparison)
    print(f"\n{heading('Definitions:')}\n{indicator}: {wrap(INDICATOR_DEFINITIONS[indicator])}")

    fig = create_comparison_bar_chart(
        comparison,
        title=f"Comparison of {name} Rate",
        subtitle=f"Selected Practice vs. {size.value} Practices vs. Wales Average",
        x_label=name,
    )
    show_figure(fig, f"{name}_comparison_{practice.practice_id}", session.settings)


def practice_report(session: Session, practice: SelectedPractice) -> None:
    show_top_drugs(session, practice)
    show_top_categories(session, practice)

    size = session.size_classifier.classify(practice.practice_id)
    print(
        "\nThe size of this practice (based on number of prescriptions in Wales) "
        f"is classified as: {size.value}."
    )
    for indicator in (HYPERTENSION, OBESITY):
        show_indicator_comparison(session, practice, size, indicator)


def run_practice_report(session: Session) -> MenuResult:
    print(ruled(INTRO))
    print("Please enter the postcode of the practice you are interested in below.\n")
    while True:
        practice = select_practice(session)
        if practice is not None:
            practice_report(session, practice)
        if not select_another_choice():
            return MenuResult.CONTINUE
