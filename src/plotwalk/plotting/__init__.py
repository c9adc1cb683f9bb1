"""Plot specifications, Plotly rendering and figure export."""

from plotwalk.plotting.export import save_figure, to_pixels
from plotwalk.plotting.renderer import FigureRenderer, linear_fit, render
from plotwalk.plotting.spec import (
    Aes,
    Bars,
    Boxplot,
    ErrorBars,
    FacetWrap,
    Histogram,
    Labels,
    Marginal,
    Palette,
    PlotSpec,
    Points,
    Size,
    Smooth,
    plot,
)

__all__ = [
    "Aes",
    "Bars",
    "Boxplot",
    "ErrorBars",
    "FacetWrap",
    "FigureRenderer",
    "Histogram",
    "Labels",
    "Marginal",
    "Palette",
    "PlotSpec",
    "Points",
    "Size",
    "Smooth",
    "linear_fit",
    "plot",
    "render",
    "save_figure",
    "to_pixels",
]
