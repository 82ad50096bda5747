"""Choosing a GP practice by postcode or practice id."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

import polars as pl

from GP_researcher.analysis import data_queries as dq
from GP_researcher.menu.menu_state import ask_until_valid

if TYPE_CHECKING:
    from GP_researcher.researcher import Session

logger = logging.getLogger(__name__)

POSTCODE_PROMPT = "Enter the postcode (or practice ID) of the GP of interest: "
PRACTICE_PROMPT = "Enter the number of the practice you want to select and press Enter: "
MULTIPLE_FOUND = (
    "\nMultiple practices found for the provided postcode. Please select one from the list below:"
)


class SelectedPractice(NamedTuple):
    practice_id: str
    name: str | None
    postcode: str | None


def _choose(practices: pl.DataFrame) -> SelectedPractice:
    if practices.height == 1:
        index = 0
    else:
        index = ask_until_valid(PRACTICE_PROMPT, [str(s) for s in practices["street"].to_list()])
    row = practices.row(index, named=True)
    return SelectedPractice(row["practiceid"], row["street"], row["postcode"])


def _by_practice_id(session: Session, practice_id: str) -> SelectedPractice | None:
    if not dq.practice_exists(session.db, session.tables, practice_id):
        return None
    details = dq.get_practice_by_id(session.db, session.tables, practice_id)
    if details.is_empty():
        logger.warning("Practice %s has prescriptions but no address", practice_id)
        return SelectedPractice(practice_id, None, None)
    row = details.row(0, named=True)
    return SelectedPractice(practice_id, row["street"], row["postcode"])


def find_practice(session: Session, entered: str) -> SelectedPractice | None:
    """Resolve user input to a practice.

    Tries an exact postcode, then a practice id, then practices sharing the
    first four characters of the postcode. Asks the user to pick when more
    than one practice matches.
    """
    entered = entered.strip().upper()
    if not entered:
        return None

    practices = dq.get_practices_by_postcode(session.db, session.tables, entered)
    if practices.height > 1:
        print(MULTIPLE_FOUND)
    if not practices.is_empty():
        return _choose(practices)

    selected = _by_practice_id(session, entered)
    if selected is not None:
        return selected

    print("\nNo practices found for the provided postcode. Finding practices with a similar postcode...\n")
    similar = dq.get_similar_practices(session.db, session.tables, entered)
    if similar.is_empty():
        print("No practices found with a similar postcode.")
        return None
    if similar.height > 1:
        print(MULTIPLE_FOUND)
    return _choose(similar)


def select_practice(session: Session) -> SelectedPractice | None:
    selected = find_practice(session, input(POSTCODE_PROMPT))
    if selected is not None:
        print(f"Selected practice: {selected.name or selected.practice_id}. Please wait a few seconds...")
    return selected
