"""Median-based Big/Small classification of GP practices.

A practice's size is the number of prescription rows it has in the
prescribing table. A practice is Big when its count is strictly above the
median count across all practices, otherwise Small.
"""

from __future__ import annotations

import logging
from enum import Enum

import polars as pl

logger = logging.getLogger(__name__)


class SizeLabel(str, Enum):
    BIG = "Big"
    SMALL = "Small"


class SizeClassifier:
    """Classifies practices against a cached population median.

    Args:
        population: DataFrame with one row per practice and columns
            ``practiceid`` and ``total_prescriptions``.
    """

    def __init__(self, population: pl.DataFrame) -> None:
        self._population: pl.DataFrame = population
        self._median: float | None = None
        self._median_computed: bool = False

    def refresh(self, population: pl.DataFrame) -> None:
        """Replace the population snapshot and drop the cached median."""
        self._population = population
        self._median = None
        self._median_computed = False

    @property
    def population(self) -> pl.DataFrame:
        return self._population

    @property
    def median(self) -> float | None:
        """Median prescription count, or None for an empty population."""
        if not self._median_computed:
            counts = self._population["total_prescriptions"].drop_nulls()
            self._median = float(counts.median()) if len(counts) else None
            self._median_computed = True
            logger.info("Population median prescription count: %s", self._median)
        return self._median

    def classify_count(self, count: int) -> SizeLabel:
        median = self.median
        if median is None:
            return SizeLabel.SMALL
        # Ties go to Small
        return SizeLabel.BIG if count > median else SizeLabel.SMALL

    def prescription_count(self, practice_id: str) -> int:
        matched = self._population.filter(pl.col("practiceid") == practice_id)
        if matched.is_empty():
            return 0
        return int(matched["total_prescriptions"].item())

    def classify(self, practice_id: str) -> SizeLabel:
        """Return Big or Small for a practice; practices with no rows are Small."""
        return self.classify_count(self.prescription_count(practice_id))

    def label_population(self) -> pl.DataFrame:
        """Return the population with a ``size_category`` column added."""
        median = self.median
        if median is None:
            return self._population.with_columns(
                pl.lit(SizeLabel.SMALL.value).alias("size_category")
            )
        return self._population.with_columns(
            pl.when(pl.col("total_prescriptions") > median)
            .then(pl.lit(SizeLabel.BIG.value))
            .otherwise(pl.lit(SizeLabel.SMALL.value))
            .alias("size_category")
        )

    def same_size_practices(self, label: SizeLabel) -> list[str]:
        """Return the practice ids sharing the given size label."""
        labelled = self.label_population()
        return (
            labelled.filter(pl.col("size_category") == SizeLabel(label).value)["practiceid"]
            .to_list()
        )
