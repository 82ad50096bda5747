"""Visualization utilities for creating charts and maps.

This module provides functions for creating the interactive Plotly figures
used by the analyses, and for showing or saving them.

Typical usage example:
    fig = create_comparison_bar_chart(
        df=comparison,
        title="Comparison of Hypertension Rate",
        x_label="Hypertension",
    )
    show_figure(fig, "hypertension_comparison", settings)
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import numpy as np
import plotly.graph_objects as go
import polars as pl
from plotly.subplots import make_subplots

from GP_researcher.config import Settings
from GP_researcher.visualization.constants import (
    BOUNDARY_CODE_PROPERTY,
    CLUSTER_COLORS,
    MISSING_COLOR,
    PASTEL1,
    PRIMARY_COLOR,
    SECONDARY_COLOR,
    VARIABLE_NAMES,
    WALES_MAP_CENTER,
    WALES_MAP_ZOOM,
)

logger = logging.getLogger(__name__)

BASE_LAYOUT: dict[str, Any] = dict(
    plot_bgcolor="rgba(0,0,0,0)",
    paper_bgcolor="rgba(0,0,0,0)",
    margin=dict(l=60, r=40, t=90, b=60),
    xaxis=dict(showgrid=True, gridcolor="rgba(0,0,0,0.1)"),
    yaxis=dict(showgrid=True, gridcolor="rgba(0,0,0,0.1)"),
)


def _title(text: str, subtitle: str | None = None) -> dict[str, Any]:
    if subtitle:
        text = f"{text}<br><sup>{subtitle}</sup>"
    return dict(text=text, x=0.5, xanchor="center", font=dict(size=14))


def create_comparison_bar_chart(
    df: pl.DataFrame,
    title: str,
    x_label: str,
    subtitle: str | None = None,
) -> go.Figure:
    """Create a grouped bar chart comparing an indicator rate across groups.

    Args:
        df: DataFrame containing indicator, category and percentage columns,
            one row per comparison group.
        title: Chart title.
        x_label: Label for the indicator axis.
        subtitle: Optional second title line.

    Returns:
        A Plotly Figure object containing one bar trace per comparison group.
    """
    fig = go.Figure()
    for i, row in enumerate(df.iter_rows(named=True)):
        fig.add_trace(
            go.Bar(
                x=[row["indicator"]],
                y=[row["percentage"]],
                name=row["category"],
                marker_color=PASTEL1[i % len(PASTEL1)],
                hovertemplate="%{y:.2f}%<extra>" + row["category"] + "</extra>",
            )
        )

    fig.update_layout(
        **BASE_LAYOUT,
        barmode="group",
        bargap=0.3,
        title=_title(title, subtitle),
        legend=dict(title=dict(text="Comparison Group")),
    )
    fig.update_xaxes(title_text=x_label)
    fig.update_yaxes(title_text="Percentage (%)", rangemode="tozero")
    return fig


def trend_line(x: np.ndarray, y: np.ndarray, degree: int = 1) -> tuple[np.ndarray, np.ndarray]:
    """Least-squares polynomial fit evaluated on a sorted grid over ``x``.

    Returns empty arrays when there are too few distinct points for the fit.
    """
    mask = ~(np.isnan(x) | np.isnan(y))
    x, y = x[mask], y[mask]
    if np.unique(x).size <= degree:
        return np.array([]), np.array([])
    coefficients = np.polyfit(x, y, degree)
    grid = np.linspace(x.min(), x.max(), 100)
    return grid, np.polyval(coefficients, grid)


def create_scatter_with_trend(
    df: pl.DataFrame,
    x: str,
    y: str,
    title: str,
    x_label: str,
    y_label: str,
    degree: int = 1,
) -> go.Figure:
    """Create a scatter plot with a fitted polynomial trend line.

    Args:
        df: DataFrame containing the x and y columns.
        x: Column for the horizontal axis.
        y: Column for the vertical axis.
        title: Chart title.
        x_label: Label for the horizontal axis.
        y_label: Label for the vertical axis.
        degree: Degree of the trend polynomial (1 linear, 2 quadratic).

    Returns:
        A Plotly Figure object with the points and, where it can be fitted,
        the trend line.
    """
    points = df.select(x, y).drop_nulls()
    xs = points[x].cast(pl.Float64).to_numpy()
    ys = points[y].cast(pl.Float64).to_numpy()

    fig = go.Figure(
        go.Scatter(
            x=xs,
            y=ys,
            mode="markers",
            marker=dict(color=PRIMARY_COLOR, opacity=0.6, size=6),
            name="Practices",
        )
    )
    grid, fitted = trend_line(xs, ys, degree)
    if grid.size:
        fig.add_trace(
            go.Scatter(
                x=grid,
                y=fitted,
                mode="lines",
                line=dict(color=SECONDARY_COLOR, width=2),
                name="Trend",
            )
        )

    fig.update_layout(**BASE_LAYOUT, title=_title(title), showlegend=False)
    fig.update_xaxes(title_text=x_label)
    fig.update_yaxes(title_text=y_label)
    return fig


def load_boundaries(path: Path, codes: set[str] | None = None) -> dict[str, Any]:
    """Load a GeoJSON boundary file, keeping only the features whose code is in ``codes``."""
    with path.open(encoding="utf-8") as f:
        geojson = json.load(f)
    if codes is not None:
        geojson["features"] = [
            feature
            for feature in geojson.get("features", [])
            if feature.get("properties", {}).get(BOUNDARY_CODE_PROPERTY) in codes
        ]
    return geojson


def create_county_choropleth(df: pl.DataFrame, geojson: dict[str, Any]) -> go.Figure:
    """Create a choropleth of average CHD centile by local authority.

    Args:
        df: DataFrame containing county_code, county_name and average_centile.
        geojson: Boundary features keyed by their LAD21CD property.

    Returns:
        A Plotly Figure object containing the map. Authorities without data
        are drawn in grey.
    """
    present = df.drop_nulls("average_centile")
    coded = set(present["county_code"].to_list())
    missing = [
        feature["properties"][BOUNDARY_CODE_PROPERTY]
        for feature in geojson.get("features", [])
        if feature["properties"][BOUNDARY_CODE_PROPERTY] not in coded
    ]

    fig = go.Figure(
        go.Choroplethmap(
            geojson=geojson,
            featureidkey=f"properties.{BOUNDARY_CODE_PROPERTY}",
            locations=present["county_code"].to_list(),
            z=present["average_centile"].to_list(),
            text=present["county_name"].to_list(),
            colorscale="Plasma_r",
            marker_line_color="white",
            marker_line_width=0.5,
            colorbar=dict(title=dict(text="Avg Centile Score"), orientation="h", y=-0.1),
            hovertemplate="<b>%{text}</b><br>%{z:.1%}<extra></extra>",
        )
    )
    if missing:
        fig.add_trace(
            go.Choroplethmap(
                geojson=geojson,
                featureidkey=f"properties.{BOUNDARY_CODE_PROPERTY}",
                locations=missing,
                z=[0] * len(missing),
                colorscale=[[0, MISSING_COLOR], [1, MISSING_COLOR]],
                showscale=False,
                marker_line_color="white",
                hovertemplate="No data<extra></extra>",
            )
        )

    fig.update_layout(
        title=_title("Average CHD Performance by County in Wales"),
        margin=dict(t=60, r=0, l=0, b=0),
        height=800,
        map=dict(
            style="carto-positron",
            center=dict(lat=WALES_MAP_CENTER[0], lon=WALES_MAP_CENTER[1]),
            zoom=WALES_MAP_ZOOM,
        ),
    )
    return fig


def create_county_bar_chart(df: pl.DataFrame) -> go.Figure:
    """Create a ranked bar chart of average CHD centile by county."""
    ranked = df.drop_nulls(["county_name", "average_centile"]).sort("average_centile")
    fig = go.Figure(
        go.Bar(
            x=(ranked["average_centile"] * 100).to_list(),
            y=ranked["county_name"].to_list(),
            orientation="h",
            marker_color=PRIMARY_COLOR,
            hovertemplate="%{y}<br>%{x:.2f}%<extra></extra>",
        )
    )
    fig.update_layout(
        **BASE_LAYOUT,
        title=_title("Average CHD Performance by County in Wales"),
        height=700,
    )
    fig.update_xaxes(title_text="Average CHD centile (%)")
    return fig


def create_entity_comparison_chart(labels: list[str], values: list[float], title: str) -> go.Figure:
    """Create a labelled bar chart comparing a practice with its county."""
    fig = go.Figure(
        go.Bar(
            x=labels,
            y=values,
            marker_color=list(PASTEL1[: len(labels)]),
            text=[f"{v:.2f}%" for v in values],
            textposition="outside",
            width=0.5,
        )
    )
    fig.update_layout(**BASE_LAYOUT, title=_title(title), showlegend=False)
    fig.update_yaxes(title_text="CHD Performance (%)", rangemode="tozero")
    return fig


def _cluster_color(cluster: int) -> str:
    return CLUSTER_COLORS[(cluster - 1) % len(CLUSTER_COLORS)]


def create_cluster_grid(clustered: pl.DataFrame, mds: np.ndarray) -> go.Figure:
    """Create a 2x2 grid of cluster scatter plots with a multidimensional scaling panel.

    Args:
        clustered: DataFrame with the clustering features and a 1-based cluster column.
        mds: Two-dimensional coordinates, one row per row of ``clustered``.

    Returns:
        A Plotly Figure object with one trace per cluster in each panel.
    """
    panels = (
        ("total_spend_on_beta_blockers", "Spend vs. Performance"),
        ("total_quantity_of_chd_medication", "Medication Quantity vs. Performance"),
        ("number_of_chd_related_prescriptions", "Prescriptions vs. Performance"),
    )
    fig = make_subplots(
        rows=2,
        cols=2,
        subplot_titles=[title for _, title in panels] + ["Multidimensional Scaling"],
    )
    clusters = clustered["cluster"].to_numpy()

    for cluster in sorted(set(clusters.tolist())):
        subset = clustered.filter(pl.col("cluster") == cluster)
        color = _cluster_color(cluster)
        for i, (column, _) in enumerate(panels):
            fig.add_trace(
                go.Scatter(
                    x=subset[column].to_list(),
                    y=subset["performance_centile"].to_list(),
                    mode="markers",
                    marker=dict(color=color, size=5),
                    name=f"Cluster {cluster}",
                    legendgroup=str(cluster),
                    showlegend=i == 0,
                ),
                row=i // 2 + 1,
                col=i % 2 + 1,
            )
        in_cluster = clusters == cluster
        fig.add_trace(
            go.Scatter(
                x=mds[in_cluster, 0],
                y=mds[in_cluster, 1],
                mode="markers",
                marker=dict(color=color, size=5),
                name=f"Cluster {cluster}",
                legendgroup=str(cluster),
                showlegend=False,
            ),
            row=2,
            col=2,
        )

    for i, (column, _) in enumerate(panels):
        fig.update_xaxes(title_text=VARIABLE_NAMES[column], row=i // 2 + 1, col=i % 2 + 1)
        fig.update_yaxes(title_text="Performance Centile", row=i // 2 + 1, col=i % 2 + 1)
    fig.update_xaxes(title_text="Dimension 1", row=2, col=2)
    fig.update_yaxes(title_text="Dimension 2", row=2, col=2)
    fig.update_layout(height=900, legend=dict(title=dict(text="Cluster")))
    return fig


def create_cluster_box_plot(clustered: pl.DataFrame, column: str) -> go.Figure:
    """Create a box plot of one feature per cluster."""
    name = VARIABLE_NAMES.get(column, column)
    fig = go.Figure()
    for cluster in sorted(clustered["cluster"].unique().to_list()):
        fig.add_trace(
            go.Box(
                y=clustered.filter(pl.col("cluster") == cluster)[column].to_list(),
                name=str(cluster),
                marker_color=_cluster_color(cluster),
            )
        )
    fig.update_layout(**BASE_LAYOUT, title=_title(f"{name} by Cluster"), showlegend=False)
    fig.update_xaxes(title_text="Cluster")
    fig.update_yaxes(title_text=name)
    return fig


def _file_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", name).strip("_").lower() or "figure"


def show_figure(fig: go.Figure, name: str, settings: Settings) -> Path | None:
    """Write the figure to the figure directory and/or open it in the browser.

    Returns:
        The path of the written HTML file, if one was written.
    """
    written: Path | None = None
    if settings.figure_dir is not None:
        settings.figure_dir.mkdir(parents=True, exist_ok=True)
        written = settings.figure_dir / f"{_file_name(name)}.html"
        fig.write_html(written, include_plotlyjs="cdn")
        logger.info("Wrote figure %s", written)
    if settings.show_figures:
        fig.show()
    return written
