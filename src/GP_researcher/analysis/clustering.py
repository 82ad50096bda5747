"""K-means clustering of practices on beta-blocker spend and CHD performance.

Typical usage example:
    clustered = cluster_practices(cluster_data)
    summary = cluster_summary(clustered)
    print(dominating_cluster_narrative(summary["cluster_percentage"].to_list()))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np
import polars as pl
from scipy.spatial.distance import pdist, squareform
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

from GP_researcher.analysis.constants import (
    CLUSTER_FEATURES,
    CLUSTER_SEED,
    DOMINATING_CLUSTER_THRESHOLD,
    N_CLUSTERS,
    OUTLIER_IQR_FACTOR,
)
from GP_researcher.analysis.correlation import interpret_cluster_correlation
from GP_researcher.errors import InsufficientDataError

logger = logging.getLogger(__name__)

SPEND, QUANTITY, ITEMS, CENTILE = CLUSTER_FEATURES

# (first column, second column, narrated name of first, narrated name of second)
CORRELATION_PAIRS: tuple[tuple[str, str, str, str], ...] = (
    (SPEND, CENTILE, "beta blockers", "performance centile"),
    (SPEND, QUANTITY, "beta blockers", "total quantity of CHD medication"),
    (QUANTITY, CENTILE, "total quantity of CHD medication", "performance centile"),
)


def scale_features(
    df: pl.DataFrame, features: Sequence[str] = CLUSTER_FEATURES
) -> np.ndarray:
    """Z-score the feature columns."""
    values = df.select(features).cast(pl.Float64).to_numpy()
    return StandardScaler().fit_transform(values)


def cluster_practices(
    df: pl.DataFrame,
    n_clusters: int = N_CLUSTERS,
    seed: int = CLUSTER_SEED,
    features: Sequence[str] = CLUSTER_FEATURES,
) -> pl.DataFrame:
    """Assign each practice to a k-means cluster on its standardised features.

    Rows missing any feature are dropped. Clusters are numbered from 1.

    Raises:
        InsufficientDataError: fewer complete rows than clusters.
    """
    complete = df.drop_nulls(subset=list(features))
    dropped = df.height - complete.height
    if dropped:
        logger.warning("Dropped %d practices with incomplete cluster features", dropped)
    if complete.height < n_clusters:
        raise InsufficientDataError(
            f"Need at least {n_clusters} practices to form {n_clusters} clusters, "
            f"got {complete.height}"
        )

    scaled = scale_features(complete, features)
    model = KMeans(n_clusters=n_clusters, random_state=seed, n_init=10)
    labels = model.fit_predict(scaled)
    logger.info("Clustered %d practices into %d clusters", complete.height, n_clusters)
    return complete.with_columns(pl.Series("cluster", labels + 1, dtype=pl.Int32))


def cluster_summary(clustered: pl.DataFrame) -> pl.DataFrame:
    """Per-cluster count, mean and median of every feature, and share of practices."""
    summary = (
        clustered.group_by("cluster")
        .agg(
            pl.len().alias("count"),
            pl.col(SPEND).mean().alias("mean_spend"),
            pl.col(SPEND).median().alias("median_spend"),
            pl.col(CENTILE).mean().alias("mean_performance_centile"),
            pl.col(CENTILE).median().alias("median_performance_centile"),
            pl.col(QUANTITY).mean().alias("mean_quantity_chd_medication"),
            pl.col(QUANTITY).median().alias("median_quantity_chd_medication"),
            pl.col(ITEMS).mean().alias("mean_number_prescriptions"),
            pl.col(ITEMS).median().alias("median_number_prescriptions"),
        )
        .sort("cluster")
    )
    return summary.with_columns(
        (pl.col("count") / pl.col("count").sum() * 100).alias("cluster_percentage")
    )


def cluster_distribution(clustered: pl.DataFrame) -> pl.DataFrame:
    return (
        clustered.group_by("cluster")
        .agg(pl.len().alias("count"))
        .sort("cluster")
        .with_columns((pl.col("count") / pl.col("count").sum() * 100).alias("percentage"))
    )


def has_dominating_cluster(
    percentages: Iterable[float], threshold: float = DOMINATING_CLUSTER_THRESHOLD
) -> bool:
    """True when any cluster holds more than ``threshold`` percent of practices."""
    return any(pct > threshold for pct in percentages)


def dominating_cluster_narrative(
    percentages: Iterable[float], threshold: float = DOMINATING_CLUSTER_THRESHOLD
) -> str:
    if has_dominating_cluster(percentages, threshold):
        return (
            "There is a dominating cluster, possibly indicating a specific strategy in "
            "treating CHD with this drug. This also suggests little diversity in the rate "
            "of CHD across practices in Wales."
        )
    return (
        "There is no dominating cluster, possibly indicating that there is no universal "
        "strategy adopted in treating CHD with this drug. This also suggests greater "
        "diversity in CHD prevalence across practices in Wales.\n\n"
        "A more nuanced investigation of local health factors and demographics is needed "
        "to refine our understanding of CHD management."
    )


def within_cluster_correlations(clustered: pl.DataFrame) -> pl.DataFrame:
    """Pearson correlations of the narrated feature pairs inside each cluster."""
    names = [f"{first}__{second}" for first, second, _, _ in CORRELATION_PAIRS]
    return (
        clustered.group_by("cluster")
        .agg(
            [
                pl.corr(first, second, method="pearson").alias(name)
                for (first, second, _, _), name in zip(CORRELATION_PAIRS, names, strict=True)
            ]
        )
        .sort("cluster")
        .with_columns(pl.col(names).cast(pl.Float64).fill_null(float("nan")))
    )


def narrate_cluster_correlations(correlations: pl.DataFrame) -> list[str]:
    sentences: list[str] = []
    for row in correlations.iter_rows(named=True):
        for first, second, name1, name2 in CORRELATION_PAIRS:
            sentences.append(
                interpret_cluster_correlation(
                    row["cluster"], float(row[f"{first}__{second}"]), name1, name2
                )
            )
    return sentences


def outlier_bounds(values: pl.Series, factor: float = OUTLIER_IQR_FACTOR) -> tuple[float, float]:
    """Tukey fences using linearly interpolated quartiles."""
    q1 = values.quantile(0.25, interpolation="linear")
    q3 = values.quantile(0.75, interpolation="linear")
    iqr = q3 - q1
    return q1 - factor * iqr, q3 + factor * iqr


def identify_outliers(
    df: pl.DataFrame,
    column: str,
    practice_names: pl.DataFrame | None = None,
    factor: float = OUTLIER_IQR_FACTOR,
) -> pl.DataFrame:
    """Rows of ``df`` whose ``column`` falls outside the Tukey fences.

    When ``practice_names`` (practiceid, street) is given the outliers are
    left-joined to it.
    """
    values = df[column].drop_nulls()
    if values.is_empty():
        outliers = df.clear()
    else:
        lower, upper = outlier_bounds(values, factor)
        outliers = df.filter((pl.col(column) < lower) | (pl.col(column) > upper))

    if practice_names is not None:
        outliers = outliers.join(practice_names, on="practiceid", how="left")
    return outliers


def cluster_outliers(
    clustered: pl.DataFrame,
    column: str,
    practice_names: pl.DataFrame | None = None,
) -> dict[int, pl.DataFrame]:
    """Outliers of ``column`` computed separately inside each cluster."""
    found: dict[int, pl.DataFrame] = {}
    for cluster in sorted(clustered["cluster"].unique().to_list()):
        subset = clustered.filter(pl.col("cluster") == cluster)
        outliers = identify_outliers(subset, column, practice_names)
        if not outliers.is_empty():
            found[cluster] = outliers
    return found


def classical_mds(values: np.ndarray, dimensions: int = 2) -> np.ndarray:
    """Classical (Torgerson) multidimensional scaling of Euclidean distances."""
    n = values.shape[0]
    if n == 0:
        return np.empty((0, dimensions))

    squared = squareform(pdist(values, metric="euclidean")) ** 2
    centring = np.eye(n) - np.ones((n, n)) / n
    gram = -0.5 * centring @ squared @ centring

    eigenvalues, eigenvectors = np.linalg.eigh(gram)
    order = np.argsort(eigenvalues)[::-1][:dimensions]
    top_values = np.clip(eigenvalues[order], 0.0, None)
    coords = eigenvectors[:, order] * np.sqrt(top_values)

    if coords.shape[1] < dimensions:
        coords = np.hstack([coords, np.zeros((n, dimensions - coords.shape[1]))])
    return coords
