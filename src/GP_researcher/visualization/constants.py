"""Constants for GP Researcher charts and console output.

This module defines:
    - Chart colours and palettes
    - Display names for analysis columns
    - Map settings for the county choropleth
"""

from typing import Final, TypeAlias

# Type aliases for improved readability
Color: TypeAlias = str
ColumnName: TypeAlias = str

# Chart colors
PRIMARY_COLOR: Final[Color] = "#1f77b4"  # Blue for practice data
SECONDARY_COLOR: Final[Color] = "#ff7f0e"  # Orange for averages and trend lines
MISSING_COLOR: Final[Color] = "#bdbdbd"

# Brewer Pastel1, used for comparison groups
PASTEL1: Final[tuple[Color, ...]] = (
    "#fbb4ae",
    "#b3cde3",
    "#ccebc5",
    "#decbe4",
    "#fed9a6",
    "#ffffcc",
    "#e5d8bd",
    "#fddaec",
    "#f2f2f2",
)

CLUSTER_COLORS: Final[tuple[Color, ...]] = ("#1b9e77", "#d95f02", "#7570b3", "#e7298a", "#66a61e")

# Display names for the clustering features
VARIABLE_NAMES: Final[dict[ColumnName, str]] = {
    "total_spend_on_beta_blockers": "Total Spend",
    "total_quantity_of_chd_medication": "Total Quantity of Beta Blockers",
    "number_of_chd_related_prescriptions": "Beta Blocker Prescriptions",
    "performance_centile": "Performance",
}

# Map settings
WALES_MAP_CENTER: Final[tuple[float, float]] = (52.3, -3.7)
WALES_MAP_ZOOM: Final[float] = 6.2
BOUNDARY_CODE_PROPERTY: Final[str] = "LAD21CD"

LINE_WIDTH: Final[int] = 80
