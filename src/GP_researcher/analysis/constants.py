"""Constants for the GP Researcher analyses.

This module defines constants used throughout the analyses. It includes:
    - Source table names
    - QOF indicator codes and their definitions
    - BNF code prefixes for the drug groups under study
    - Thresholds used to interpret correlations and clusters
"""

from typing import Final, NamedTuple, TypeAlias

# Type aliases for improved readability
TableName: TypeAlias = str
IndicatorCode: TypeAlias = str


class Tables(NamedTuple):
    """Fully qualified source table names."""

    address: TableName
    prescribing: TableName
    achievement: TableName
    bnf: TableName


def source_tables(schema: str = "gp") -> Tables:
    """Qualify the source tables with the attached catalog/schema prefix."""
    return Tables(
        address=f"{schema}.address",
        prescribing=f"{schema}.gp_data_up_to_2015",
        achievement=f"{schema}.qof_achievement",
        bnf=f"{schema}.bnf",
    )


# QOF indicators
HYPERTENSION: Final[IndicatorCode] = "HYP001"
OBESITY: Final[IndicatorCode] = "OB001W"
CHD: Final[IndicatorCode] = "CHD001"

INDICATOR_DEFINITIONS: Final[dict[IndicatorCode, str]] = {
    HYPERTENSION: (
        "The contractor establishes and maintains a register of patients with "
        "established hypertension."
    ),
    OBESITY: (
        "The contractor establishes and maintains a register of patients aged 16 "
        "or over with a BMI greater than or equal to 30 in the preceding 15 months."
    ),
    CHD: (
        "The contractor establishes and maintains a register of patients with "
        "coronary heart disease."
    ),
}

# BNF codes
BETA_BLOCKER_PREFIX: Final[str] = "0204000"
DIABETES_SECTION: Final[str] = "601"
METFORMIN_NAME_PREFIX: Final[str] = "Metformin"
BNF_SECTION_LENGTH: Final[int] = 6
BNF_CHEMICAL_LENGTH: Final[int] = 8

# Result sizes
TOP_DRUGS_LIMIT: Final[int] = 10
TOP_CATEGORIES_LIMIT: Final[int] = 5
BETA_BLOCKER_RANK_LIMIT: Final[int] = 5
SIMILAR_POSTCODE_LENGTH: Final[int] = 4

# Correlation interpretation
SIGNIFICANCE_LEVEL: Final[float] = 0.05
STRENGTH_THRESHOLDS: Final[tuple[tuple[float, str], ...]] = (
    (0.1, "very weak"),
    (0.3, "weak"),
    (0.5, "moderate"),
)
STRONGEST_LABEL: Final[str] = "strong"
CLUSTER_STRONG_THRESHOLD: Final[float] = 0.7
CLUSTER_WEAK_THRESHOLD: Final[float] = 0.3
MIN_OBSERVATIONS: Final[int] = 2

# Clustering
N_CLUSTERS: Final[int] = 3
CLUSTER_SEED: Final[int] = 100
DOMINATING_CLUSTER_THRESHOLD: Final[float] = 50.0
OUTLIER_IQR_FACTOR: Final[float] = 1.5

CLUSTER_FEATURES: Final[tuple[str, ...]] = (
    "total_spend_on_beta_blockers",
    "total_quantity_of_chd_medication",
    "number_of_chd_related_prescriptions",
    "performance_centile",
)
