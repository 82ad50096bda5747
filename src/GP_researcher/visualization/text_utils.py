"""Text utilities for console output."""

import textwrap
from collections.abc import Mapping, Sequence

import polars as pl

from GP_researcher.visualization.constants import LINE_WIDTH

RULE = "-" * LINE_WIDTH


def wrap(text: str | None, width: int = LINE_WIDTH) -> str:
    """
    Wrap text to the console width, keeping paragraph breaks.

    Args:
        text: The text to wrap. If None, returns empty string.
        width: Maximum line width for wrapping.

    Returns:
        Wrapped text with paragraphs separated by a blank line.
    """
    if not text:
        return ""
    paragraphs = [" ".join(p.split()) for p in text.strip().split("\n\n")]
    return "\n\n".join(textwrap.fill(p, width) for p in paragraphs if p)


def heading(title: str) -> str:
    """Underline a title with '=' to its length."""
    return f"{title}\n{'=' * len(title)}"


def ruled(text: str) -> str:
    """Frame a block of text between two horizontal rules."""
    return f"\n{RULE}\n\n{wrap(text)}\n\n{RULE}\n"


def side_by_side(first: Sequence[str], second: Sequence[str], gap: int = 4) -> str:
    """Lay out two lists of lines as two columns."""
    longest = max((len(line) for line in first), default=0)
    rows = []
    for i in range(max(len(first), len(second))):
        left = first[i] if i < len(first) else ""
        right = second[i] if i < len(second) else ""
        rows.append(f"{left.ljust(longest + gap)}{right}".rstrip())
    return "\n".join(rows)


def numbered(options: Sequence[str]) -> list[str]:
    return [f"{i}. {option}" for i, option in enumerate(options, start=1)]


def format_table(df: pl.DataFrame, labels: Mapping[str, str] | None = None) -> str:
    """Render a DataFrame as a plain console table with optional column labels."""
    if labels:
        df = df.rename({old: new for old, new in labels.items() if old in df.columns})
    with pl.Config(
        tbl_rows=-1,
        tbl_cols=-1,
        tbl_hide_dataframe_shape=True,
        tbl_hide_column_data_types=True,
        tbl_formatting="ASCII_MARKDOWN",
        tbl_width_chars=LINE_WIDTH * 2,
        fmt_str_lengths=LINE_WIDTH,
        float_precision=2,
    ):
        return str(df)


def print_table(title: str, df: pl.DataFrame, labels: Mapping[str, str] | None = None) -> None:
    print(f"\n{heading(title)}")
    print(format_table(df, labels))
