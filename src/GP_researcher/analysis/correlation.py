"""Kendall rank correlations and their plain-English narration.

Typical usage example:
    if has_sufficient_data(df, "total_items", "obesity_rate"):
        result = kendall_correlation(df, "total_items", "obesity_rate")
        print(summarise(result))
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import NamedTuple

import polars as pl
from scipy import stats

from GP_researcher.analysis.constants import (
    CLUSTER_STRONG_THRESHOLD,
    CLUSTER_WEAK_THRESHOLD,
    MIN_OBSERVATIONS,
    SIGNIFICANCE_LEVEL,
    STRENGTH_THRESHOLDS,
    STRONGEST_LABEL,
)
from GP_researcher.errors import InsufficientDataError

logger = logging.getLogger(__name__)

UNDEFINED_LABEL = "undefined"
SIGNIFICANT = "statistically significant"
NOT_SIGNIFICANT = "not statistically significant"
INCOMPARABLE = "Insufficient data for comparing correlations."


class CorrelationResult(NamedTuple):
    coefficient: float
    p_value: float
    strength: str
    significance: str
    n: int


class Comparison(str, Enum):
    A_STRONGER = "A stronger"
    B_STRONGER = "B stronger"
    EQUAL = "equal"
    UNDEFINED = "undefined"


def strength_label(coefficient: float) -> str:
    if math.isnan(coefficient):
        return UNDEFINED_LABEL
    magnitude = abs(coefficient)
    for upper, label in STRENGTH_THRESHOLDS:
        if magnitude < upper:
            return label
    return STRONGEST_LABEL


def interpret(coefficient: float, p_value: float) -> tuple[str, str]:
    """Return the (strength, significance) labels for a correlation.

    A NaN p-value is never significant.
    """
    strength = strength_label(coefficient)
    significant = not math.isnan(p_value) and p_value < SIGNIFICANCE_LEVEL
    return strength, SIGNIFICANT if significant else NOT_SIGNIFICANT


def compare(coeff_a: float, coeff_b: float) -> Comparison:
    """Compare two correlations by absolute magnitude.

    Undefined when either coefficient is NaN.
    """
    if math.isnan(coeff_a) or math.isnan(coeff_b):
        return Comparison.UNDEFINED
    a, b = abs(coeff_a), abs(coeff_b)
    if a > b:
        return Comparison.A_STRONGER
    if a < b:
        return Comparison.B_STRONGER
    return Comparison.EQUAL


def complete_pairs(df: pl.DataFrame, x: str, y: str) -> pl.DataFrame:
    return df.select(x, y).drop_nulls().filter(
        pl.col(x).cast(pl.Float64).is_not_nan() & pl.col(y).cast(pl.Float64).is_not_nan()
    )


def has_sufficient_data(df: pl.DataFrame, x: str, y: str) -> bool:
    """True when there are at least two rows with both values present."""
    return complete_pairs(df, x, y).height >= MIN_OBSERVATIONS


def kendall_correlation(df: pl.DataFrame, x: str, y: str) -> CorrelationResult:
    """Kendall's tau-b between two columns, ignoring incomplete rows.

    Raises:
        InsufficientDataError: fewer than two complete observations.
    """
    pairs = complete_pairs(df, x, y)
    if pairs.height < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            f"Need at least {MIN_OBSERVATIONS} complete observations of {x} and {y}, "
            f"got {pairs.height}"
        )

    values = pairs.cast(pl.Float64)
    tau, p_value = stats.kendalltau(values[x].to_numpy(), values[y].to_numpy())
    tau, p_value = float(tau), float(p_value)
    strength, significance = interpret(tau, p_value)
    logger.info("Kendall tau %s vs %s: %.4f (p=%.4g, n=%d)", x, y, tau, p_value, pairs.height)
    return CorrelationResult(tau, p_value, strength, significance, pairs.height)


def summarise(result: CorrelationResult) -> str:
    return f"The correlation is {result.strength} and {result.significance}."


def describe_comparison(
    subject: str,
    label_a: str,
    coeff_a: float,
    label_b: str,
    coeff_b: float,
) -> str:
    """Sentence stating which of two relationships with ``subject`` is stronger."""
    outcome = compare(coeff_a, coeff_b)
    if outcome is Comparison.UNDEFINED:
        return INCOMPARABLE
    if outcome is Comparison.A_STRONGER:
        return (
            f"The relationship between {subject} and {label_a} is stronger than "
            f"that between {subject} and {label_b}."
        )
    if outcome is Comparison.B_STRONGER:
        return (
            f"The relationship between {subject} and {label_b} is stronger than "
            f"that between {subject} and {label_a}."
        )
    return (
        f"The relationship between {subject} and {label_a} is as strong as "
        f"that between {subject} and {label_b}."
    )


def cluster_strength_label(correlation: float) -> str:
    magnitude = abs(correlation)
    if magnitude > CLUSTER_STRONG_THRESHOLD:
        return "STRONG"
    if magnitude < CLUSTER_WEAK_THRESHOLD:
        return "WEAK"
    return "MODERATE"


def interpret_cluster_correlation(
    cluster: int, correlation: float, variable1: str, variable2: str
) -> str:
    """Narrate a within-cluster Pearson correlation."""
    if math.isnan(correlation):
        return (
            f"For Cluster {cluster}: the correlation between {variable1} and "
            f"{variable2} is undefined (one of them does not vary)."
        )
    positive = correlation > 0
    direction = "POSITIVE" if positive else "NEGATIVE"
    return (
        f"For Cluster {cluster}: there is a {direction} and "
        f"{cluster_strength_label(correlation)} correlation between {variable1} "
        f"and {variable2} ({correlation:.3f}).\n"
        f"This suggests that within this cluster, practices that spend "
        f"{'more' if positive else 'less'} on {variable1} tend to rank "
        f"{'higher' if positive else 'lower'} in performance for CHD rates."
    )
