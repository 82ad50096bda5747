"""Main menu options 2 and 3: diabetes drug prescribing against hypertension and obesity."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import polars as pl

from GP_researcher.analysis import data_queries as dq
from GP_researcher.analysis.constants import HYPERTENSION, METFORMIN_NAME_PREFIX, OBESITY
from GP_researcher.analysis.correlation import (
    CorrelationResult,
    describe_comparison,
    has_sufficient_data,
    kendall_correlation,
    summarise,
)
from GP_researcher.menu.menu_state import MenuResult, ask_choice, end_of_operation_choice
from GP_researcher.visualization.text_utils import heading, ruled, side_by_side
from GP_researcher.visualization.visualization_utils import create_scatter_with_trend, show_figure

if TYPE_CHECKING:
    from GP_researcher.researcher import Session

logger = logging.getLogger(__name__)

ITEMS = "total_drug_items"
OBESITY_RATE = "obesity_rate"
HYPERTENSION_RATE = "hypertension_rate"
DRUG_LIST_SPLIT_ROW = 29
DRUG_PROMPT = "Enter the number of the drug you want to select and press Enter: "

METFORMIN_INTRO = """
Metformin is commonly used to treat type 2 diabetes.

As hypertension and obesity are risk factors for this disease, the following
analysis will investigate whether the rates of these risk factors are related
to the rate of metformin prescriptions.
"""

DIABETIC_INTRO = """
The following analysis will allow you to choose another diabetes-prescribed
drug to determine whether there is a relationship between rate of prescription
and rate of hypertension/obesity.
"""


def correlate(df: pl.DataFrame, rate_column: str, label: str) -> CorrelationResult | None:
    if not has_sufficient_data(df, ITEMS, rate_column):
        print(f"Insufficient data for {label} correlation test.\n")
        return None
    return kendall_correlation(df, ITEMS, rate_column)


def report_correlations(drug_name: str, obesity: pl.DataFrame, hypertension: pl.DataFrame) -> None:
    """Print the Kendall correlations of a drug's items with obesity and hypertension."""
    obesity_result = correlate(obesity, OBESITY_RATE, "obesity")
    hypertension_result = correlate(hypertension, HYPERTENSION_RATE, "hypertension")

    print(f"\n{heading('Summary information:')}\n")
    for label, result in (("Obesity", obesity_result), ("Hypertension", hypertension_result)):
        if result is not None:
            print(
                f"{label} and {drug_name}: tau = {result.coefficient:.3f}, "
                f"p = {result.p_value:.3g}, n = {result.n}. {summarise(result)}\n"
            )

    if obesity_result is not None and hypertension_result is not None:
        print(
            describe_comparison(
                drug_name,
                "obesity",
                obesity_result.coefficient,
                "hypertension",
                hypertension_result.coefficient,
            )
        )


def plot_rates(session: Session, drug_name: str, obesity: pl.DataFrame, hypertension: pl.DataFrame) -> None:
    for df, rate_column, condition in (
        (obesity, OBESITY_RATE, "Obesity"),
        (hypertension, HYPERTENSION_RATE, "Hypertension"),
    ):
        if df.is_empty():
            continue
        fig = create_scatter_with_trend(
            df,
            ITEMS,
            rate_column,
            title=f"{drug_name} Prescriptions vs. {condition} Rate",
            x_label=f"Total {drug_name} Items",
            y_label=f"{condition} Rate (%)",
            degree=2,
        )
        show_figure(fig, f"{drug_name}_vs_{condition}", session.settings)


def analyse_drug(
    session: Session,
    drug_name: str,
    bnf_chemical: str | None = None,
    name_prefix: str | None = None,
) -> None:
    obesity = dq.get_drug_items_vs_indicator(
        session.db, session.tables, OBESITY, OBESITY_RATE,
        bnf_chemical=bnf_chemical, name_prefix=name_prefix,
    )
    hypertension = dq.get_drug_items_vs_indicator(
        session.db, session.tables, HYPERTENSION, HYPERTENSION_RATE,
        bnf_chemical=bnf_chemical, name_prefix=name_prefix,
    )
    logger.info(
        "%s: %d practices with obesity data, %d with hypertension data",
        drug_name, obesity.height, hypertension.height,
    )
    report_correlations(drug_name, obesity, hypertension)
    plot_rates(session, drug_name, obesity, hypertension)


def run_metformin_analysis(session: Session) -> MenuResult:
    print(ruled(METFORMIN_INTRO))
    analyse_drug(session, METFORMIN_NAME_PREFIX, name_prefix=METFORMIN_NAME_PREFIX)
    return end_of_operation_choice()


def drug_columns(drugs: pl.DataFrame, split_row: int = DRUG_LIST_SPLIT_ROW) -> str:
    """Lay the numbered drug list out in two columns, split after ``split_row`` entries."""
    entries = [
        f"{i}: {desc.strip()}"
        for i, desc in enumerate(drugs["chemicaldesc"].to_list(), start=1)
    ]
    return side_by_side(entries[:split_row], entries[split_row:])


def run_diabetic_drug_analysis(session: Session) -> MenuResult:
    print(ruled(DIABETIC_INTRO))
    print("Please wait a few seconds...\n")
    drugs = dq.get_diabetic_drugs(session.db, session.tables)
    if drugs.is_empty():
        print("No diabetic drugs found in the formulary.")
        return MenuResult.CONTINUE

    print(heading("Please select the number of the drug from the list below and press Enter:"))
    print(drug_columns(drugs))

    choice = ask_choice(DRUG_PROMPT, 1, drugs.height)
    if choice is None:
        print("Invalid selection. Please try again.")
        return MenuResult.CONTINUE

    drug = drugs.row(choice - 1, named=True)
    print("Performing analysis. Please wait, this may take up to a minute...\n")
    analyse_drug(session, drug["chemicaldesc"].strip(), bnf_chemical=drug["bnfchemical"])
    return end_of_operation_choice()
