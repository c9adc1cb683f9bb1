"""Plot specifications built by adding layers.

A PlotSpec is immutable. Adding a component returns a new spec and leaves
the original untouched, so partial specs can be reused across lessons:

    base = plot(cars, x="displ", y="hwy", color="class")
    scatter = base + Points()
    fitted = scatter + Smooth(method="lm") + Labels(title="Highway mpg")

Supported components:

- layers: Points, Smooth, Boxplot, Histogram, Bars, ErrorBars
- FacetWrap: one panel per level of a column
- Labels: title and axis/legend titles (merged with earlier Labels)
- Palette: colors cycled over color groups
- Marginal: marginal distributions for a scatter
- Size: on-screen width/height in pixels
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Optional, Union

import pandas as pd

MARGINAL_KINDS = ("histogram", "box")
SMOOTH_METHODS = ("lm",)
BOX_POINTS = ("outliers", "all", False)


@dataclass(frozen=True)
class Aes:
    """Aesthetic mapping: which columns feed x, y and color."""
    x: Optional[str] = None
    y: Optional[str] = None
    color: Optional[str] = None

    def columns(self) -> list[str]:
        return [c for c in (self.x, self.y, self.color) if c]


@dataclass(frozen=True)
class Points:
    """Scatter markers."""
    size: int = 6
    opacity: float = 0.8


@dataclass(frozen=True)
class Smooth:
    """Fitted line with optional confidence band for the fitted mean."""
    method: str = "lm"
    se: bool = True
    level: float = 0.95
    line_width: int = 2

    def __post_init__(self) -> None:
        if self.method not in SMOOTH_METHODS:
            raise ValueError(f"Smooth method must be one of {SMOOTH_METHODS}, got {self.method!r}")
        if not 0.0 < self.level < 1.0:
            raise ValueError(f"Smooth level must be in (0, 1), got {self.level}")


@dataclass(frozen=True)
class Boxplot:
    """Box and whiskers of y per x category."""
    points: Union[str, bool] = "outliers"

    def __post_init__(self) -> None:
        if self.points not in BOX_POINTS:
            raise ValueError(f"Boxplot points must be one of {BOX_POINTS}, got {self.points!r}")


@dataclass(frozen=True)
class Histogram:
    """Histogram of x."""
    bins: int = 30
    opacity: float = 0.6

    def __post_init__(self) -> None:
        if self.bins < 1:
            raise ValueError(f"Histogram bins must be >= 1, got {self.bins}")


@dataclass(frozen=True)
class Bars:
    """Bars of precomputed y values (identity stat)."""
    opacity: float = 0.9


@dataclass(frozen=True)
class ErrorBars:
    """Vertical error bars from the ymin/ymax columns."""
    ymin: str = "ymin"
    ymax: str = "ymax"
    width: int = 6


@dataclass(frozen=True)
class FacetWrap:
    """One panel per level of ``column``, wrapped into ``ncol`` columns."""
    column: str
    ncol: int = 3

    def __post_init__(self) -> None:
        if self.ncol < 1:
            raise ValueError(f"FacetWrap ncol must be >= 1, got {self.ncol}")


@dataclass(frozen=True)
class Labels:
    """Plot title and axis/legend titles. None keeps the current value."""
    title: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    color: Optional[str] = None

    def merge(self, other: "Labels") -> "Labels":
        return Labels(
            title=other.title if other.title is not None else self.title,
            x=other.x if other.x is not None else self.x,
            y=other.y if other.y is not None else self.y,
            color=other.color if other.color is not None else self.color,
        )


@dataclass(frozen=True)
class Palette:
    """Colors assigned to color groups in sorted group order (cycled)."""
    colors: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("Palette needs at least one color")


@dataclass(frozen=True)
class Marginal:
    """Marginal distributions of x (top) and y (right) for a scatter."""
    kind: str = "histogram"

    def __post_init__(self) -> None:
        if self.kind not in MARGINAL_KINDS:
            raise ValueError(f"Marginal kind must be one of {MARGINAL_KINDS}, got {self.kind!r}")


@dataclass(frozen=True)
class Size:
    """On-screen figure size in pixels (None lets Plotly decide)."""
    width: Optional[int] = None
    height: Optional[int] = None


Layer = Union[Points, Smooth, Boxplot, Histogram, Bars, ErrorBars]
LAYER_TYPES = (Points, Smooth, Boxplot, Histogram, Bars, ErrorBars)


@dataclass(frozen=True, eq=False)
class PlotSpec:
    """Immutable plot specification.

    Attributes:
        data: Table to plot (not copied; treated as read-only).
        aes: Base aesthetic mapping shared by all layers.
        layers: Layers in drawing order.
        facet: Optional facet wrap.
        labels: Title and axis/legend titles.
        palette: Optional palette; defaults to Plotly's qualitative colors.
        marginal: Optional marginal distributions (scatter only).
        size: On-screen size.
    """
    data: pd.DataFrame
    aes: Aes = field(default_factory=Aes)
    layers: tuple[Layer, ...] = ()
    facet: Optional[FacetWrap] = None
    labels: Labels = field(default_factory=Labels)
    palette: Optional[Palette] = None
    marginal: Optional[Marginal] = None
    size: Size = field(default_factory=Size)

    def __add__(self, other: Any) -> "PlotSpec":
        if isinstance(other, LAYER_TYPES):
            return replace(self, layers=self.layers + (other,))
        if isinstance(other, FacetWrap):
            return replace(self, facet=other)
        if isinstance(other, Labels):
            return replace(self, labels=self.labels.merge(other))
        if isinstance(other, Palette):
            return replace(self, palette=other)
        if isinstance(other, Marginal):
            return replace(self, marginal=other)
        if isinstance(other, Size):
            return replace(self, size=other)
        return NotImplemented

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly description of everything but the data."""
        return {
            "aes": asdict(self.aes),
            "layers": [{"type": type(layer).__name__, **asdict(layer)} for layer in self.layers],
            "facet": asdict(self.facet) if self.facet else None,
            "labels": asdict(self.labels),
            "palette": list(self.palette.colors) if self.palette else None,
            "marginal": self.marginal.kind if self.marginal else None,
            "size": asdict(self.size),
            "n_rows": len(self.data),
        }


def plot(
    data: pd.DataFrame,
    x: Optional[str] = None,
    y: Optional[str] = None,
    color: Optional[str] = None,
) -> PlotSpec:
    """Start a plot specification on ``data`` with a base aesthetic mapping."""
    return PlotSpec(data=data, aes=Aes(x=x, y=y, color=color))
