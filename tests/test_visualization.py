import json

import numpy as np
import plotly.graph_objects as go
import polars as pl
import pytest

from GP_researcher.visualization.text_utils import (
    RULE,
    format_table,
    heading,
    numbered,
    ruled,
    side_by_side,
    wrap,
)
from GP_researcher.visualization.visualization_utils import (
    create_cluster_box_plot,
    create_cluster_grid,
    create_comparison_bar_chart,
    create_county_bar_chart,
    create_county_choropleth,
    create_entity_comparison_chart,
    create_scatter_with_trend,
    load_boundaries,
    show_figure,
    trend_line,
)


@pytest.fixture
def boundaries(tmp_path):
    def square(code, x):
        return {
            "type": "Feature",
            "properties": {"LAD21CD": code},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[x, 51.0], [x + 0.1, 51.0], [x + 0.1, 51.1], [x, 51.0]]],
            },
        }

    geojson = {
        "type": "FeatureCollection",
        "features": [
            square("W06000015", -3.2),
            square("W06000018", -3.1),
            square("E06000001", -1.0),
        ],
    }
    path = tmp_path / "boundaries.geojson"
    path.write_text(json.dumps(geojson), encoding="utf-8")
    return path


def test_wrap_keeps_paragraphs():
    text = "one two three\nfour\n\nfive six"
    assert wrap(text, width=8) == "one two\nthree\nfour\n\nfive six"
    assert wrap(None) == ""


def test_heading_ruled_and_numbered():
    assert heading("Main Menu:") == "Main Menu:\n=========="
    assert ruled("Hello").startswith(f"\n{RULE}\n\nHello")
    assert numbered(["a", "b"]) == ["1. a", "2. b"]


def test_side_by_side_uneven_columns():
    assert side_by_side(["ab", "c"], ["x"], gap=2) == "ab  x\nc"


def test_format_table_renames_columns():
    df = pl.DataFrame({"bnfname": ["Metformin"], "total_items": [60]})
    table = format_table(df, {"bnfname": "Drug Name"})
    assert "Drug Name" in table
    assert "total_items" in table
    assert "Metformin" in table


def test_comparison_bar_chart_has_one_trace_per_group():
    df = pl.DataFrame(
        {
            "indicator": ["HYP001"] * 3,
            "category": ["Selected Practice", "Big Practices Average", "Wales Average"],
            "percentage": [15.0, 16.3, 13.7],
        }
    )
    fig = create_comparison_bar_chart(df, title="Comparison", x_label="Hypertension", subtitle="sub")
    assert [trace.name for trace in fig.data] == df["category"].to_list()
    assert "<sup>sub</sup>" in fig.layout.title.text


def test_trend_line():
    x = np.array([1.0, 2.0, 3.0, np.nan])
    y = np.array([2.0, 4.0, 6.0, 1.0])
    grid, fitted = trend_line(x, y, degree=1)
    assert grid.size == 100
    assert fitted[0] == pytest.approx(2.0)
    assert fitted[-1] == pytest.approx(6.0)

    empty_grid, _ = trend_line(np.array([1.0, 1.0]), np.array([1.0, 2.0]), degree=1)
    assert empty_grid.size == 0


def test_scatter_with_trend():
    df = pl.DataFrame({"items": [1, 2, 3, 4, None], "rate": [1.0, 4.0, 9.0, 16.0, 2.0]})
    fig = create_scatter_with_trend(df, "items", "rate", "t", "x", "y", degree=2)
    assert len(fig.data) == 2
    assert len(fig.data[0].x) == 4

    single = create_scatter_with_trend(df.head(1), "items", "rate", "t", "x", "y")
    assert len(single.data) == 1


def test_load_boundaries_filters_codes(boundaries):
    geojson = load_boundaries(boundaries, {"W06000015", "W06000018"})
    codes = [feature["properties"]["LAD21CD"] for feature in geojson["features"]]
    assert codes == ["W06000015", "W06000018"]
    assert len(load_boundaries(boundaries)["features"]) == 3


def test_choropleth_greys_out_counties_without_data(boundaries):
    geojson = load_boundaries(boundaries, {"W06000015", "W06000018"})
    df = pl.DataFrame(
        {"county_code": ["W06000018"], "county_name": ["Caerphilly"], "average_centile": [0.75]}
    )
    fig = create_county_choropleth(df, geojson)
    assert len(fig.data) == 2
    assert list(fig.data[0].locations) == ["W06000018"]
    assert list(fig.data[1].locations) == ["W06000015"]


def test_county_bar_chart_drops_unknown_county():
    df = pl.DataFrame(
        {"county_name": ["Caerphilly", None, "Swansea"], "average_centile": [0.75, 0.2, 0.6]}
    )
    fig = create_county_bar_chart(df)
    assert list(fig.data[0].y) == ["Swansea", "Caerphilly"]
    assert list(fig.data[0].x) == pytest.approx([60.0, 75.0])


def test_entity_comparison_chart():
    fig = create_entity_comparison_chart(["Practice", "County"], [80.0, 75.0], "title")
    assert list(fig.data[0].text) == ["80.00%", "75.00%"]


def test_cluster_figures():
    clustered = pl.DataFrame(
        {
            "total_spend_on_beta_blockers": [1.0, 2.0, 10.0, 11.0],
            "total_quantity_of_chd_medication": [5.0, 6.0, 50.0, 55.0],
            "number_of_chd_related_prescriptions": [1, 2, 10, 12],
            "performance_centile": [0.1, 0.2, 0.8, 0.9],
            "cluster": pl.Series([1, 1, 2, 2], dtype=pl.Int32),
        }
    )
    mds = np.array([[0.0, 0.0], [0.1, 0.0], [1.0, 1.0], [1.1, 1.0]])
    grid = create_cluster_grid(clustered, mds)
    # Three feature panels and the scaling panel, for each of two clusters
    assert len(grid.data) == 8
    assert list(grid.data[3].x) == pytest.approx([0.0, 0.1])

    box = create_cluster_box_plot(clustered, "performance_centile")
    assert [trace.name for trace in box.data] == ["1", "2"]


def test_show_figure_writes_html(settings, tmp_path):
    fig = go.Figure()
    written = show_figure(fig, "CHD vs. County!", settings._replace(figure_dir=tmp_path / "out"))
    assert written == tmp_path / "out" / "chd_vs_county.html"
    assert written.exists()
    assert show_figure(fig, "nothing", settings) is None
