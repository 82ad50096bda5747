"""GP Researcher: menu-driven analysis of Welsh GP prescribing and QOF data.

Run with ``gp-researcher`` (or ``python -m GP_researcher.researcher``) after
pointing GP_DATABASE or GP_POSTGRES_DSN at the source data.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

from GP_researcher.analysis import data_queries as dq
from GP_researcher.analysis.constants import Tables, source_tables
from GP_researcher.analysis.county_resolver import CountyResolver
from GP_researcher.analysis.size_classifier import SizeClassifier
from GP_researcher.config import Settings, load_settings, setup_logging
from GP_researcher.db_connection import DatabaseConnection
from GP_researcher.errors import ConfigurationError
from GP_researcher.menu.chd_analysis import (
    run_beta_blocker_spend,
    run_county_performance,
    run_outlier_analysis,
)
from GP_researcher.menu.drug_correlation import run_diabetic_drug_analysis, run_metformin_analysis
from GP_researcher.menu.menu_state import GOODBYE, SELECTION_PROMPT, MenuResult, parse_choice
from GP_researcher.menu.practice_report import run_practice_report
from GP_researcher.visualization.text_utils import heading, numbered, wrap

logger = logging.getLogger(__name__)

Handler = Callable[["Session"], MenuResult]

WELCOME = """
The GP Researcher program allows the user to query a health database to extract
and analyse data about disease, prescriptions and spending for any general
practice in Wales.
"""

SUB_MENU_INTRO = """
Coronary heart disease (CHD) is a chronic condition and one of the leading
causes of death worldwide. One of the better known treatments is the use of
beta blockers, a preventative measure against outcomes such as myocardial
infarction.

Use the menu options below to explore the performance and spend data for CHD
at practices across Wales.
"""

MAIN_MENU_OPTIONS = (
    "Select a GP surgery for prescription, hypertension, and obesity information",
    "Compare Metformin prescription rates with hypertension and obesity rates",
    "Select a diabetic drug to compare with hypertension and obesity rates",
    "Performance and Spend Sub-Menu",
    "Exit",
)

SUB_MENU_OPTIONS = (
    "Performance of CHD by county",
    "Spend efficiency of beta blockers",
    "Identify outliers for CHD performance",
    "Return to Main Menu",
    "Exit",
)


class Session:
    """Everything a menu handler needs for one run of the program."""

    def __init__(
        self,
        db: DatabaseConnection,
        settings: Settings,
        tables: Tables | None = None,
    ) -> None:
        self.db = db
        self.settings = settings
        self.tables = tables or source_tables(settings.schema)
        self.resolver = CountyResolver(settings.postcode_match)
        self._size_classifier: SizeClassifier | None = None

    @property
    def size_classifier(self) -> SizeClassifier:
        """Classifier over the practice sizes, loaded on first use."""
        if self._size_classifier is None:
            self._size_classifier = SizeClassifier(dq.get_practice_sizes(self.db, self.tables))
        return self._size_classifier


def _exit(session: Session) -> MenuResult:
    print("Exiting program...")
    return MenuResult.EXIT


def _return_to_main(session: Session) -> MenuResult:
    print("Returning to Main Menu...\n")
    return MenuResult.CONTINUE


def sub_menu(session: Session) -> MenuResult:
    """Performance and Spend sub-menu."""
    print(f"\n{heading('Welcome to the Performance and Spend Sub-Menu:')}\n\n{wrap(SUB_MENU_INTRO)}")
    print(f"\n{heading('Performance and Spend Sub-Menu:')}")
    print("\n".join(numbered(SUB_MENU_OPTIONS)))

    handlers: dict[int, Handler] = {
        1: run_county_performance,
        2: run_beta_blocker_spend,
        3: run_outlier_analysis,
        4: _return_to_main,
        5: _exit,
    }
    choice = parse_choice(input(SELECTION_PROMPT), 1, len(SUB_MENU_OPTIONS))
    if choice is None:
        print("Invalid selection. Please try again.")
        return MenuResult.CONTINUE
    return handlers[choice](session)


MAIN_MENU_HANDLERS: dict[int, Handler] = {
    1: run_practice_report,
    2: run_metformin_analysis,
    3: run_diabetic_drug_analysis,
    4: sub_menu,
    5: _exit,
}


def main_menu(session: Session) -> MenuResult:
    """Show the main menu once and run the chosen option."""
    print(f"\n{heading('Main Menu:')}")
    print("\n".join(numbered(MAIN_MENU_OPTIONS)))

    raw = input(SELECTION_PROMPT)
    choice = parse_choice(raw, 1, len(MAIN_MENU_OPTIONS))
    if choice is None:
        print("Invalid selection. Please try again.")
        return MenuResult.CONTINUE

    logger.info("Main menu option %d selected", choice)
    return MAIN_MENU_HANDLERS[choice](session)


def run(session: Session) -> None:
    """Show the main menu until a handler asks to exit."""
    print(f"\n{heading('Welcome to the GP Researcher program!')}\n\n{wrap(WELCOME)}")
    try:
        while main_menu(session) is MenuResult.CONTINUE:
            pass
    except (EOFError, KeyboardInterrupt):
        print("\nExiting program...")
    print(GOODBYE)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error("%s", e)
        return 1

    setup_logging(settings.log_level)
    try:
        db = DatabaseConnection.from_settings(settings)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    try:
        run(Session(db, settings))
    finally:
        db.cleanup()
    return 0


if __name__ == "__main__":
    sys.exit(main())
