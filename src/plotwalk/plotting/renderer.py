"""Plotly rendering of plot specifications.

This module provides the FigureRenderer class, which turns a PlotSpec into a
plotly.graph_objects.Figure. Each layer type maps to one kind of trace:

- Points    -> go.Scatter (markers)
- Smooth    -> go.Scatter (fitted line) + filled band for the confidence interval
- Boxplot   -> go.Box
- Histogram -> go.Histogram
- Bars      -> go.Bar (error_y filled in from an ErrorBars layer, if any)
- ErrorBars -> go.Scatter with error_y (only when there is no Bars layer)

A color mapping splits each layer into one trace per group. Groups keep the
same color in every layer and facet panel, and appear once in the legend.
"""

from __future__ import annotations

import math
from typing import Any, Iterator, Optional

import numpy as np
import pandas as pd
import plotly.colors
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from scipy import stats

from plotwalk.errors import InvalidFieldError
from plotwalk.plotting.spec import (
    Bars,
    Boxplot,
    ErrorBars,
    Histogram,
    Layer,
    PlotSpec,
    Points,
    Smooth,
)
from plotwalk.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COLORS: tuple[str, ...] = tuple(plotly.colors.qualitative.Plotly)

# Color for single-group layers (no color mapping)
SINGLE_COLOR = "#3366CC"
SMOOTH_COLOR = "#3366FF"

# Number of x positions a fitted line is evaluated at
SMOOTH_POINTS = 80


def category_levels(s: pd.Series) -> list[str]:
    """Ordered levels of a grouping column, as strings.

    Categorical columns keep their declared order (levels with no rows are
    dropped); other columns are sorted, numerically when possible.
    """
    if isinstance(s.dtype, pd.CategoricalDtype):
        present = set(s.dropna().astype(str))
        return [str(c) for c in s.cat.categories if str(c) in present]
    values = s.dropna().unique().tolist()
    try:
        values = sorted(values)
    except TypeError:
        values = sorted(values, key=str)
    return [str(v) for v in values]


def linear_fit(x: pd.Series, y: pd.Series, level: float = 0.95, n_points: int = SMOOTH_POINTS) -> pd.DataFrame:
    """Least-squares line through (x, y) with a confidence band for the fitted mean.

    The band half-width at x0 is q * s * sqrt(1/n + (x0 - mean(x))**2 / Sxx),
    where s is the residual standard error (n - 2 degrees of freedom) and q
    is the Student t quantile at ``level`` with n - 2 degrees of freedom.

    Args:
        x: Predictor values (numeric, no NaN).
        y: Response values (numeric, no NaN).
        level: Confidence level of the band.
        n_points: Number of evaluation points between min(x) and max(x).

    Returns:
        DataFrame with columns x, y (fitted), ymin, ymax.

    Raises:
        ValueError: If there are fewer than three distinct x values.
    """
    xv = np.asarray(x, dtype=float)
    yv = np.asarray(y, dtype=float)
    n = len(xv)
    if len(np.unique(xv)) < 3:
        raise ValueError("linear_fit needs at least three distinct x values")

    slope, intercept = np.polyfit(xv, yv, 1)
    resid = yv - (slope * xv + intercept)
    s = math.sqrt(float(np.sum(resid ** 2)) / (n - 2))
    x_mean = float(xv.mean())
    sxx = float(np.sum((xv - x_mean) ** 2))

    grid = np.linspace(xv.min(), xv.max(), n_points)
    fitted = slope * grid + intercept
    q = float(stats.t.ppf(0.5 + level / 2, n - 2))
    half = q * s * np.sqrt(1.0 / n + (grid - x_mean) ** 2 / sxx)
    return pd.DataFrame({"x": grid, "y": fitted, "ymin": fitted - half, "ymax": fitted + half})


class FigureRenderer:
    """Renders one PlotSpec to a Plotly figure.

    Attributes:
        spec: The specification being rendered.
        df: The spec's data as a DataFrame.
    """

    def __init__(self, spec: PlotSpec) -> None:
        self.spec = spec
        self.df = spec.data
        self._legend_seen: set[str] = set()
        self._color_map: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        spec = self.spec
        if not spec.layers:
            raise ValueError("PlotSpec has no layers; add Points(), Boxplot(), ... before rendering")
        if spec.marginal is not None and spec.facet is not None:
            raise ValueError("Marginal plots cannot be combined with FacetWrap")

        needed = list(spec.aes.columns())
        if spec.facet is not None:
            needed.append(spec.facet.column)
        for layer in spec.layers:
            if isinstance(layer, ErrorBars):
                needed.extend([layer.ymin, layer.ymax])
        for col in needed:
            if col not in self.df.columns:
                raise InvalidFieldError(col, self.df.columns)

        for layer in spec.layers:
            kind = type(layer).__name__
            if isinstance(layer, Histogram):
                if not spec.aes.x:
                    raise ValueError("Histogram needs an x mapping")
            elif isinstance(layer, Boxplot):
                if not spec.aes.y:
                    raise ValueError("Boxplot needs a y mapping")
            elif not (spec.aes.x and spec.aes.y):
                raise ValueError(f"{kind} needs both x and y mappings")
        if spec.marginal is not None and not (spec.aes.x and spec.aes.y):
            raise ValueError("Marginal plots need both x and y mappings")

    # ------------------------------------------------------------------
    # Grouping helpers
    # ------------------------------------------------------------------

    def _build_color_map(self) -> None:
        if not self.spec.aes.color:
            return
        colors = self.spec.palette.colors if self.spec.palette else DEFAULT_COLORS
        levels = category_levels(self.df[self.spec.aes.color])
        self._color_map = {lvl: colors[i % len(colors)] for i, lvl in enumerate(levels)}

    def _groups(self, df: pd.DataFrame) -> Iterator[tuple[Optional[str], pd.DataFrame]]:
        """Yield (color level, rows) pairs; a single (None, df) without color mapping."""
        color_col = self.spec.aes.color
        if not color_col:
            yield None, df
            return
        labels = df[color_col].astype(str)
        for level in self._color_map:
            sub = df[labels == level]
            if len(sub) > 0:
                yield level, sub

    def _color(self, level: Optional[str], default: str = SINGLE_COLOR) -> str:
        if level is None:
            return default
        return self._color_map[level]

    def _legend(self, level: Optional[str]) -> dict[str, Any]:
        """Legend kwargs: each color level is shown once across layers and panels."""
        if level is None:
            return dict(showlegend=False)
        show = level not in self._legend_seen
        self._legend_seen.add(level)
        return dict(name=level, legendgroup=level, showlegend=show)

    def _x_categories(self) -> Optional[list[str]]:
        """Category order for a non-numeric x column, else None."""
        x = self.spec.aes.x
        if not x:
            return None
        kind = getattr(self.df[x].dtype, "kind", None)
        if kind in {"i", "u", "f"} and not self._x_is_discrete():
            return None
        return category_levels(self.df[x])

    def _x_is_discrete(self) -> bool:
        """Bars, boxes and error bars place numeric x values as categories."""
        return any(isinstance(layer, (Bars, Boxplot, ErrorBars)) for layer in self.spec.layers)

    def _x_values(self, sub: pd.DataFrame) -> pd.Series:
        x = sub[self.spec.aes.x]
        if self._x_is_discrete():
            return x.astype(str)
        return x

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def _add_layer(self, fig: go.Figure, layer: Layer, df: pd.DataFrame, row: Optional[int], col: Optional[int]) -> None:
        if isinstance(layer, Points):
            self._add_points(fig, layer, df, row, col)
        elif isinstance(layer, Smooth):
            self._add_smooth(fig, layer, df, row, col)
        elif isinstance(layer, Boxplot):
            self._add_boxplot(fig, layer, df, row, col)
        elif isinstance(layer, Histogram):
            self._add_histogram(fig, layer, df, row, col)
        elif isinstance(layer, Bars):
            self._add_bars(fig, layer, df, row, col)
        elif isinstance(layer, ErrorBars):
            # Drawn on the bars themselves when the spec has a Bars layer
            if not any(isinstance(other, Bars) for other in self.spec.layers):
                self._add_error_markers(fig, layer, df, row, col)

    def _add_points(self, fig: go.Figure, layer: Points, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            fig.add_trace(go.Scatter(
                x=self._x_values(sub),
                y=sub[aes.y],
                mode="markers",
                marker=dict(size=layer.size, color=self._color(level), opacity=layer.opacity),
                **self._legend(level),
            ), row=row, col=col)

    def _add_smooth(self, fig: go.Figure, layer: Smooth, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            tmp = pd.DataFrame({
                "x": pd.to_numeric(sub[aes.x], errors="coerce"),
                "y": pd.to_numeric(sub[aes.y], errors="coerce"),
            }).dropna()
            if tmp["x"].nunique() < 3:
                logger.warning(
                    f"Smooth: skipping group {level!r}, needs at least three distinct x values "
                    f"(has {tmp['x'].nunique()})"
                )
                continue
            fit = linear_fit(tmp["x"], tmp["y"], level=layer.level)
            color = self._color(level, default=SMOOTH_COLOR)
            if layer.se:
                fig.add_trace(go.Scatter(
                    x=np.concatenate([fit["x"].values, fit["x"].values[::-1]]),
                    y=np.concatenate([fit["ymax"].values, fit["ymin"].values[::-1]]),
                    fill="toself",
                    fillcolor=color,
                    opacity=0.2,
                    line=dict(width=0),
                    hoverinfo="skip",
                    showlegend=False,
                    legendgroup=level,
                ), row=row, col=col)
            fig.add_trace(go.Scatter(
                x=fit["x"],
                y=fit["y"],
                mode="lines",
                line=dict(color=color, width=layer.line_width),
                hoverinfo="skip",
                **self._legend(level),
            ), row=row, col=col)

    def _add_boxplot(self, fig: go.Figure, layer: Boxplot, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            kwargs: dict[str, Any] = {}
            if aes.x:
                kwargs["x"] = self._x_values(sub)
            elif level is None:
                kwargs["name"] = aes.y
            if level is not None:
                kwargs.update(alignmentgroup="x", offsetgroup=level)
            fig.add_trace(go.Box(
                y=sub[aes.y],
                boxpoints=layer.points,
                marker=dict(size=4, color=self._color(level)),
                line=dict(width=1.5),
                **kwargs,
                **self._legend(level),
            ), row=row, col=col)

    def _add_histogram(self, fig: go.Figure, layer: Histogram, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            fig.add_trace(go.Histogram(
                x=sub[aes.x],
                nbinsx=layer.bins,
                opacity=layer.opacity,
                marker=dict(color=self._color(level)),
                **self._legend(level),
            ), row=row, col=col)

    def _error_y(self, sub: pd.DataFrame) -> Optional[dict[str, Any]]:
        """error_y dict from the spec's ErrorBars layer (None if there is none)."""
        bars = [layer for layer in self.spec.layers if isinstance(layer, ErrorBars)]
        if not bars:
            return None
        eb = bars[0]
        y = sub[self.spec.aes.y]
        return dict(
            type="data",
            symmetric=False,
            array=(sub[eb.ymax] - y).tolist(),
            arrayminus=(y - sub[eb.ymin]).tolist(),
            width=eb.width,
            color="#333333",
        )

    def _add_bars(self, fig: go.Figure, layer: Bars, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            kwargs: dict[str, Any] = {}
            error_y = self._error_y(sub)
            if error_y is not None:
                kwargs["error_y"] = error_y
            if level is not None:
                kwargs["offsetgroup"] = level
            fig.add_trace(go.Bar(
                x=self._x_values(sub),
                y=sub[aes.y],
                marker=dict(color=self._color(level)),
                opacity=layer.opacity,
                **kwargs,
                **self._legend(level),
            ), row=row, col=col)

    def _add_error_markers(self, fig: go.Figure, layer: ErrorBars, df: pd.DataFrame, row, col) -> None:
        aes = self.spec.aes
        for level, sub in self._groups(df):
            fig.add_trace(go.Scatter(
                x=self._x_values(sub),
                y=sub[aes.y],
                mode="markers",
                marker=dict(size=6, color=self._color(level)),
                error_y=self._error_y(sub),
                **self._legend(level),
            ), row=row, col=col)

    def _add_marginals(self, fig: go.Figure) -> None:
        """Marginal distribution of x above the main panel and of y to its right."""
        aes = self.spec.aes
        kind = self.spec.marginal.kind
        for level, sub in self._groups(self.df):
            color = self._color(level)
            common = dict(marker=dict(color=color), showlegend=False, legendgroup=level)
            if kind == "histogram":
                fig.add_trace(go.Histogram(x=sub[aes.x], opacity=0.6, **common), row=1, col=1)
                fig.add_trace(go.Histogram(y=sub[aes.y], opacity=0.6, **common), row=2, col=2)
            else:
                fig.add_trace(go.Box(x=sub[aes.x], boxpoints=False, **common), row=1, col=1)
                fig.add_trace(go.Box(y=sub[aes.y], boxpoints=False, **common), row=2, col=2)

    # ------------------------------------------------------------------
    # Figure assembly
    # ------------------------------------------------------------------

    def _default_y_title(self) -> str:
        if self.spec.aes.y:
            return self.spec.aes.y
        return "count"

    def render(self) -> go.Figure:
        """Build the figure.

        Raises:
            ValueError: If the spec has no layers or an invalid combination.
            InvalidFieldError: If a mapped column is missing from the data.
        """
        self._validate()
        self._build_color_map()
        spec = self.spec
        logger.info(
            f"FigureRenderer.render: rows={len(self.df)}, layers={[type(layer).__name__ for layer in spec.layers]}, "
            f"aes={spec.aes}, facet={spec.facet.column if spec.facet else None}, "
            f"marginal={spec.marginal.kind if spec.marginal else None}"
        )

        x_title = spec.labels.x or spec.aes.x or ""
        y_title = spec.labels.y or self._default_y_title()

        if spec.facet is not None:
            facet_col = spec.facet.column
            levels = category_levels(self.df[facet_col])
            ncols = max(1, min(spec.facet.ncol, len(levels)))
            nrows = max(1, math.ceil(len(levels) / ncols))
            fig = make_subplots(
                rows=nrows,
                cols=ncols,
                shared_xaxes="all",
                shared_yaxes="all",
                subplot_titles=[f"{facet_col} = {lvl}" for lvl in levels],
                horizontal_spacing=0.04,
                vertical_spacing=0.12 if nrows > 1 else 0.0,
            )
            labels = self.df[facet_col].astype(str)
            for i, lvl in enumerate(levels):
                row, col = i // ncols + 1, i % ncols + 1
                panel = self.df[labels == lvl]
                for layer in spec.layers:
                    self._add_layer(fig, layer, panel, row, col)
            for c in range(1, ncols + 1):
                fig.update_xaxes(title_text=x_title, row=nrows, col=c)
            for r in range(1, nrows + 1):
                fig.update_yaxes(title_text=y_title, row=r, col=1)
        elif spec.marginal is not None:
            fig = make_subplots(
                rows=2,
                cols=2,
                shared_xaxes=True,
                shared_yaxes=True,
                column_widths=[0.8, 0.2],
                row_heights=[0.2, 0.8],
                horizontal_spacing=0.02,
                vertical_spacing=0.02,
            )
            for layer in spec.layers:
                self._add_layer(fig, layer, self.df, 2, 1)
            self._add_marginals(fig)
            fig.update_xaxes(title_text=x_title, row=2, col=1)
            fig.update_yaxes(title_text=y_title, row=2, col=1)
        else:
            fig = go.Figure()
            for layer in spec.layers:
                self._add_layer(fig, layer, self.df, None, None)
            fig.update_layout(xaxis_title=x_title, yaxis_title=y_title)

        categories = self._x_categories()
        if categories is not None:
            fig.update_xaxes(categoryorder="array", categoryarray=categories)

        layout: dict[str, Any] = dict(
            margin=dict(l=40, r=20, t=60 if spec.labels.title else 40, b=40),
            showlegend=bool(spec.aes.color),
        )
        if spec.labels.title:
            layout["title_text"] = spec.labels.title
        if spec.aes.color:
            layout["legend_title_text"] = spec.labels.color or spec.aes.color
        if any(isinstance(layer, Bars) for layer in spec.layers):
            layout["barmode"] = "group"
        elif any(isinstance(layer, Histogram) for layer in spec.layers) or spec.marginal is not None:
            layout["barmode"] = "overlay"
        if any(isinstance(layer, Boxplot) for layer in spec.layers) and spec.aes.color:
            layout["boxmode"] = "group"
        if spec.size.width:
            layout["width"] = spec.size.width
        if spec.size.height:
            layout["height"] = spec.size.height
        fig.update_layout(**layout)

        logger.debug(f"Figure rendered: {len(fig.data)} traces")
        return fig


def render(spec: PlotSpec) -> go.Figure:
    """Render ``spec`` to a Plotly figure (see FigureRenderer)."""
    return FigureRenderer(spec).render()
