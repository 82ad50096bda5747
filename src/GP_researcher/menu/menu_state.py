"""Menu control flow and input validation.

Every menu handler returns a ``MenuResult`` telling its caller whether to
keep showing the main menu or to end the program.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from GP_researcher.visualization.text_utils import heading, numbered

logger = logging.getLogger(__name__)

SELECTION_PROMPT = "Enter the number of your selection and press Enter: "
GOODBYE = "Thank you for using the GP Researcher program! Goodbye."


class MenuResult(Enum):
    CONTINUE = "continue"
    EXIT = "exit"


def parse_choice(raw: str | None, low: int, high: int) -> int | None:
    """Return the entered number if it lies in [low, high], else None."""
    if raw is None:
        return None
    try:
        choice = int(raw.strip())
    except ValueError:
        return None
    return choice if low <= choice <= high else None


def ask_choice(prompt: str, low: int, high: int) -> int | None:
    """Ask once; None for anything that is not a number in range."""
    raw = input(prompt)
    choice = parse_choice(raw, low, high)
    if choice is None:
        logger.debug("Rejected menu input %r (expected %d-%d)", raw, low, high)
    return choice


def ask_until_valid(prompt: str, options: Sequence[str]) -> int:
    """List the options and keep asking until a valid number is entered.

    Returns:
        The 0-based index of the chosen option.
    """
    while True:
        print("\n".join(numbered(options)))
        choice = ask_choice(prompt, 1, len(options))
        if choice is not None:
            return choice - 1
        print("Invalid selection. Please try again.\n")


def print_selection_menu(options: Sequence[str]) -> None:
    print(f"\n{heading('Please make a selection:')}")
    print("\n".join(numbered(options)))


def end_of_operation_choice() -> MenuResult:
    """Offer return-to-menu or exit; anything else returns to the main menu."""
    print_selection_menu(["Return to Main Menu", "Exit"])
    choice = ask_choice(SELECTION_PROMPT, 1, 2)
    if choice is None:
        print("Invalid input detected. Returning to Main Menu...")
        return MenuResult.CONTINUE
    if choice == 2:
        print("Exiting program...")
        return MenuResult.EXIT
    return MenuResult.CONTINUE


def select_another_choice() -> bool:
    """Offer another practice or return; True means select another."""
    print_selection_menu(["Select another practice", "Return to Main Menu"])
    choice = ask_choice(SELECTION_PROMPT, 1, 2)
    if choice is None:
        print("Invalid selection. Returning to Main Menu...")
        return False
    return choice == 1
