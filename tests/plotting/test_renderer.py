"""Unit tests for FigureRenderer: trace structure per layer, facets and marginals."""

from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest
from scipy import stats

from plotwalk.errors import InvalidFieldError
from plotwalk.plotting.renderer import category_levels, linear_fit, render
from plotwalk.plotting.spec import (
    Bars,
    Boxplot,
    ErrorBars,
    FacetWrap,
    Histogram,
    Labels,
    Marginal,
    Palette,
    Points,
    Size,
    Smooth,
    plot,
)
from plotwalk.summary.aggregator import error_bounds, summarize


@pytest.fixture
def cars():
    """Small synthetic cars-like table."""
    rng = np.random.default_rng(0)
    n = 24
    displ = np.round(rng.uniform(1.5, 6.0, size=n), 1)
    return pd.DataFrame({
        "displ": displ,
        "hwy": np.round(40 - 4 * displ + rng.normal(0, 1, size=n), 1),
        "drive": ["f", "r", "4"] * (n // 3),
        "class": ["compact", "suv"] * (n // 2),
    })


def test_no_layers_raises(cars):
    with pytest.raises(ValueError):
        render(plot(cars, x="displ", y="hwy"))


def test_unknown_column_raises(cars):
    with pytest.raises(InvalidFieldError) as exc_info:
        render(plot(cars, x="displ", y="cty") + Points())
    assert exc_info.value.field == "cty"


def test_unknown_facet_column_raises(cars):
    with pytest.raises(InvalidFieldError):
        render(plot(cars, x="displ", y="hwy") + Points() + FacetWrap("year"))


def test_points_single_trace(cars):
    fig = render(plot(cars, x="displ", y="hwy") + Points() + Labels(title="T", x="Displ"))
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    trace = fig.data[0]
    assert trace.type == "scatter"
    assert trace.mode == "markers"
    assert len(trace.x) == len(cars)
    assert fig.layout.title.text == "T"
    assert fig.layout.xaxis.title.text == "Displ"
    assert fig.layout.yaxis.title.text == "hwy"


def test_color_splits_traces_with_palette(cars):
    spec = plot(cars, x="displ", y="hwy", color="drive") + Points() + Palette(colors=("red", "green", "blue"))
    fig = render(spec)
    assert [t.name for t in fig.data] == ["4", "f", "r"]
    assert [t.marker.color for t in fig.data] == ["red", "green", "blue"]
    assert sum(len(t.x) for t in fig.data) == len(cars)
    assert fig.layout.legend.title.text == "drive"


def test_categorical_color_keeps_declared_order(cars):
    df = cars.copy()
    df["drive"] = pd.Categorical(df["drive"], categories=["f", "r", "4"], ordered=True)
    fig = render(plot(df, x="displ", y="hwy", color="drive") + Points())
    assert [t.name for t in fig.data] == ["f", "r", "4"]


def test_legend_shows_each_group_once(cars):
    fig = render(plot(cars, x="displ", y="hwy", color="class") + Points() + Smooth(se=False))
    shown = [t.name for t in fig.data if t.showlegend]
    assert sorted(shown) == ["compact", "suv"]


def test_smooth_adds_band_and_line_per_group(cars):
    fig = render(plot(cars, x="displ", y="hwy", color="class") + Points() + Smooth())
    # 2 point traces + 2 x (band + line)
    assert len(fig.data) == 6
    bands = [t for t in fig.data if t.fill == "toself"]
    lines = [t for t in fig.data if t.mode == "lines"]
    assert len(bands) == 2
    assert len(lines) == 2


def test_smooth_without_se_has_no_band(cars):
    fig = render(plot(cars, x="displ", y="hwy") + Smooth(se=False))
    assert len(fig.data) == 1
    assert fig.data[0].mode == "lines"


def test_smooth_skips_groups_with_too_few_x(cars):
    df = pd.concat([
        cars.assign(g="many"),
        pd.DataFrame({"displ": [2.0, 2.0], "hwy": [30.0, 31.0], "g": ["few", "few"]}),
    ], ignore_index=True)
    fig = render(plot(df, x="displ", y="hwy", color="g") + Smooth(se=False))
    assert [t.name for t in fig.data] == ["many"]


def test_linear_fit_recovers_line():
    x = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
    y = 2 * x + 1 + pd.Series([0.1, -0.1, 0.05, -0.05, 0.0])
    fit = linear_fit(x, y, level=0.95, n_points=5)
    assert list(fit.columns) == ["x", "y", "ymin", "ymax"]
    np.testing.assert_allclose(fit["x"], x)
    np.testing.assert_allclose(fit["y"], 2 * x + 1, atol=0.2)
    assert (fit["ymin"] <= fit["y"]).all()
    assert (fit["ymax"] >= fit["y"]).all()
    # band is narrowest at the mean of x
    width = fit["ymax"] - fit["ymin"]
    assert width.idxmin() == 2


@pytest.mark.parametrize("level", [0.9, 0.95])
def test_linear_fit_band_uses_t_quantile(level):
    """Half-width = t(n-2) * s * sqrt(1/n + (x0 - xbar)^2 / Sxx)."""
    x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    y = np.array([3.1, 4.9, 7.2, 8.8, 11.3])
    fit = linear_fit(pd.Series(x), pd.Series(y), level=level, n_points=5)

    n = len(x)
    slope, intercept = np.polyfit(x, y, 1)
    s = np.sqrt(np.sum((y - (slope * x + intercept)) ** 2) / (n - 2))
    sxx = np.sum((x - x.mean()) ** 2)
    expected = stats.t.ppf(0.5 + level / 2, n - 2) * s * np.sqrt(1 / n + (x - x.mean()) ** 2 / sxx)

    np.testing.assert_allclose(fit["ymax"] - fit["y"], expected)
    np.testing.assert_allclose(fit["y"] - fit["ymin"], expected)


def test_linear_fit_needs_three_distinct_x():
    with pytest.raises(ValueError):
        linear_fit(pd.Series([1.0, 1.0, 2.0]), pd.Series([1.0, 2.0, 3.0]))


def test_boxplot_by_category(cars):
    fig = render(plot(cars, x="class", y="hwy") + Boxplot())
    assert len(fig.data) == 1
    assert fig.data[0].type == "box"
    assert fig.data[0].boxpoints == "outliers"
    assert list(fig.layout.xaxis.categoryarray) == ["compact", "suv"]


def test_boxplot_with_color_is_grouped(cars):
    fig = render(plot(cars, x="class", y="hwy", color="drive") + Boxplot(points="all"))
    assert len(fig.data) == 3
    assert fig.layout.boxmode == "group"


def test_histogram(cars):
    fig = render(plot(cars, x="hwy") + Histogram(bins=8))
    assert len(fig.data) == 1
    assert fig.data[0].type == "histogram"
    assert fig.data[0].nbinsx == 8
    assert fig.layout.yaxis.title.text == "count"
    assert fig.layout.barmode == "overlay"


def test_histogram_needs_x(cars):
    with pytest.raises(ValueError):
        render(plot(cars, y="hwy") + Histogram())


def test_points_need_x_and_y(cars):
    with pytest.raises(ValueError):
        render(plot(cars, x="hwy") + Points())


def test_facet_wrap_panels(cars):
    fig = render(plot(cars, x="displ", y="hwy") + Points() + FacetWrap("drive", ncol=2))
    assert len(fig.data) == 3
    titles = [a.text for a in fig.layout.annotations]
    assert titles == ["drive = 4", "drive = f", "drive = r"]
    # 3 panels in 2 columns -> 2 rows; traces land on distinct axes
    assert len({(t.xaxis, t.yaxis) for t in fig.data}) == 3
    assert sum(len(t.x) for t in fig.data) == len(cars)


def test_facet_with_color_keeps_colors_consistent(cars):
    fig = render(plot(cars, x="displ", y="hwy", color="class") + Points() + FacetWrap("drive"))
    colors = {}
    for t in fig.data:
        colors.setdefault(t.name, set()).add(t.marker.color)
    assert all(len(c) == 1 for c in colors.values())
    assert sum(1 for t in fig.data if t.showlegend) == 2


def test_marginal_histograms(cars):
    fig = render(plot(cars, x="displ", y="hwy") + Points() + Marginal())
    types = [t.type for t in fig.data]
    assert types == ["scatter", "histogram", "histogram"]
    top, right = fig.data[1], fig.data[2]
    assert top.x is not None and top.y is None
    assert right.y is not None and right.x is None


def test_marginal_box(cars):
    fig = render(plot(cars, x="displ", y="hwy", color="class") + Points() + Marginal(kind="box"))
    assert [t.type for t in fig.data].count("box") == 4


def test_marginal_with_facet_rejected(cars):
    with pytest.raises(ValueError):
        render(plot(cars, x="displ", y="hwy") + Points() + Marginal() + FacetWrap("drive"))


def test_bars_with_error_bars_from_summary(cars):
    summary = error_bounds(summarize(cars, ["class", "drive"], "hwy"), kind="se")
    fig = render(plot(summary, x="drive", y="mean", color="class") + Bars() + ErrorBars())
    assert [t.type for t in fig.data] == ["bar", "bar"]
    assert fig.layout.barmode == "group"
    for trace in fig.data:
        sub = summary[summary["class"] == trace.name]
        np.testing.assert_allclose(trace.error_y.array, sub["se"])
        np.testing.assert_allclose(trace.error_y.arrayminus, sub["se"])
        assert list(trace.x) == [str(d) for d in sub["drive"]]


def test_error_bars_without_bars_draw_markers():
    df = pd.DataFrame({"k": ["a", "b"], "m": [1.0, 2.0], "lo": [0.5, 1.5], "hi": [1.5, 2.5]})
    fig = render(plot(df, x="k", y="m") + ErrorBars(ymin="lo", ymax="hi"))
    assert len(fig.data) == 1
    assert fig.data[0].mode == "markers"
    np.testing.assert_allclose(fig.data[0].error_y.array, [0.5, 0.5])


def test_error_bars_missing_columns(cars):
    with pytest.raises(InvalidFieldError):
        render(plot(cars, x="class", y="hwy") + Bars() + ErrorBars())


def test_size_sets_layout(cars):
    fig = render(plot(cars, x="displ", y="hwy") + Points() + Size(width=640, height=480))
    assert fig.layout.width == 640
    assert fig.layout.height == 480


def test_render_does_not_modify_data(cars):
    before = cars.copy()
    render(plot(cars, x="displ", y="hwy", color="drive") + Points() + Smooth() + FacetWrap("class"))
    pd.testing.assert_frame_equal(cars, before)


def test_category_levels():
    assert category_levels(pd.Series([2.0, 0.5, 1.0, 0.5])) == ["0.5", "1.0", "2.0"]
    cat = pd.Series(pd.Categorical(["b", "a"], categories=["b", "a", "c"]))
    assert category_levels(cat) == ["b", "a"]
    assert category_levels(pd.Series(["x", None, "w"])) == ["w", "x"]
