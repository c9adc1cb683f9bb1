"""
plotwalk tutorial: a plotting grammar, one layer at a time.

Each lesson is a small function that builds a PlotSpec from the bundled
datasets. Lessons are meant to be read in order; later lessons reuse the
pieces introduced earlier.

1. scatter             - displacement vs highway mpg
2. colored_scatter     - color by vehicle class, labels, custom palette
3. marginal_scatter    - lesson 2 plus marginal histograms
4. faceted_scatter     - one panel per drive train
5. regression          - linear fit with a 95% band, per drive train
6. boxplot             - highway mpg by class
7. histogram           - distribution of highway mpg
8. bars_with_errors    - mean growth by supplement and dose, +/- standard error

Run everything top to bottom and export the last figure:

    python -m plotwalk.tutorial [output_dir]
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import pandas as pd
import plotly.graph_objects as go

from plotwalk.config import TutorialConfig
from plotwalk.data.loader import load_dataset
from plotwalk.plotting.export import save_figure
from plotwalk.plotting.renderer import render
from plotwalk.plotting.spec import (
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
    Smooth,
    plot,
)
from plotwalk.summary.aggregator import error_bounds, summarize
from plotwalk.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

Tables = dict[str, pd.DataFrame]

CLASS_PALETTE = Palette(colors=(
    "#E69F00", "#56B4E9", "#009E73", "#F0E442",
    "#0072B2", "#D55E00", "#CC79A7",
))

SUPP_PALETTE = Palette(colors=("#F8766D", "#00BFC4"))

DISPL_HWY_LABELS = Labels(x="Engine displacement (L)", y="Highway (mpg)")

FINAL_FIGURE_STEM = "growth_by_dose"


@dataclass(frozen=True)
class Lesson:
    """A named tutorial step that builds one plot specification."""
    name: str
    title: str
    build: Callable[[Tables], PlotSpec]


def load_tables() -> Tables:
    """Both bundled datasets, keyed by name."""
    return {"cars": load_dataset("cars"), "growth": load_dataset("growth")}


def scatter(tables: Tables) -> PlotSpec:
    return (
        plot(tables["cars"], x="displ", y="hwy")
        + Points()
        + DISPL_HWY_LABELS
        + Labels(title="Bigger engines, fewer miles per gallon")
    )


def colored_scatter(tables: Tables) -> PlotSpec:
    # color is a base mapping, so every later layer is split by class too
    return (
        plot(tables["cars"], x="displ", y="hwy", color="class")
        + Points(size=8)
        + DISPL_HWY_LABELS
        + Labels(title="Highway mileage by vehicle class", color="Class")
        + CLASS_PALETTE
    )


def marginal_scatter(tables: Tables) -> PlotSpec:
    return colored_scatter(tables) + Marginal(kind="histogram")


def faceted_scatter(tables: Tables) -> PlotSpec:
    return (
        plot(tables["cars"], x="displ", y="hwy")
        + Points()
        + FacetWrap("drive", ncol=3)
        + DISPL_HWY_LABELS
        + Labels(title="One panel per drive train (f = front, r = rear, 4 = 4wd)")
    )


def regression(tables: Tables) -> PlotSpec:
    return (
        plot(tables["cars"], x="displ", y="hwy", color="drive")
        + Points(opacity=0.6)
        + Smooth(method="lm", se=True, level=0.95)
        + DISPL_HWY_LABELS
        + Labels(title="Linear fit per drive train", color="Drive")
    )


def boxplot(tables: Tables) -> PlotSpec:
    return (
        plot(tables["cars"], x="class", y="hwy")
        + Boxplot(points="outliers")
        + Labels(title="Highway mileage by class", x="Class", y="Highway (mpg)")
    )


def histogram(tables: Tables) -> PlotSpec:
    return (
        plot(tables["cars"], x="hwy")
        + Histogram(bins=10, opacity=0.9)
        + Labels(title="Distribution of highway mileage", x="Highway (mpg)", y="Number of models")
    )


def bars_with_errors(tables: Tables) -> PlotSpec:
    """Summarize first, then plot the summary: bars are means, whiskers are +/- se."""
    summary = error_bounds(summarize(tables["growth"], ["supp", "dose"], "len"), kind="se")
    return (
        plot(summary, x="dose", y="mean", color="supp")
        + Bars()
        + ErrorBars(ymin="ymin", ymax="ymax", width=6)
        + Labels(title="Growth by supplement and dose (mean +/- se)", x="Dose (mg/day)",
                 y="Mean length", color="Supplement")
        + SUPP_PALETTE
    )


LESSONS: tuple[Lesson, ...] = (
    Lesson("scatter", "Scatter plot", scatter),
    Lesson("colored_scatter", "Color, labels and palettes", colored_scatter),
    Lesson("marginal_scatter", "Marginal distributions", marginal_scatter),
    Lesson("faceted_scatter", "Faceting", faceted_scatter),
    Lesson("regression", "Regression overlay", regression),
    Lesson("boxplot", "Boxplots", boxplot),
    Lesson("histogram", "Histograms", histogram),
    Lesson("bars_with_errors", "Bar chart with error bars", bars_with_errors),
)


def build_lessons(tables: Optional[Tables] = None) -> dict[str, go.Figure]:
    """Render every lesson in order. Returns lesson name -> figure."""
    tables = tables if tables is not None else load_tables()
    figures: dict[str, go.Figure] = {}
    for i, lesson in enumerate(LESSONS, start=1):
        logger.info(f"Lesson {i}/{len(LESSONS)}: {lesson.title}")
        figures[lesson.name] = render(lesson.build(tables))
    return figures


def run_tutorial(
    output_dir: Optional[Path] = None,
    config: Optional[TutorialConfig] = None,
) -> Path:
    """Run all lessons and export the final figure.

    Args:
        output_dir: Where to write the figure. Defaults to config.output_dir.
        config: Export settings. Defaults to the user's saved config.

    Returns:
        Path of the exported figure.
    """
    config = config if config is not None else TutorialConfig.load()
    figures = build_lessons()
    final = figures[LESSONS[-1].name]
    path = config.output_path(FINAL_FIGURE_STEM, output_dir)
    return save_figure(final, path, **config.export_kwargs())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="python -m plotwalk.tutorial",
        description="Run the plotwalk lessons and export the final figure.",
    )
    parser.add_argument("output_dir", nargs="?", type=Path, default=None,
                        help="directory for the exported figure (default: from config)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)
    path = run_tutorial(output_dir=args.output_dir)
    print(path)


if __name__ == "__main__":
    main()
