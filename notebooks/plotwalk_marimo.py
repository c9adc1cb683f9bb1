"""
plotwalk: Marimo notebook

The tutorial lessons, one cell per layer idea. Each cell builds a PlotSpec
and renders it with plotwalk; the last cell exports the bar chart.

Run:
  uv run marimo edit notebooks/plotwalk_marimo.py
  uv run marimo run notebooks/plotwalk_marimo.py

Requires: pip install plotwalk[notebook]
"""

import marimo

__generated_with = "0.19.11"
app = marimo.App(width="medium")


@app.cell(hide_code=True)
def _():
    import marimo as mo
    import sys
    from pathlib import Path

    # Make src/ importable when the package is not installed
    _src = Path(__file__).resolve().parent.parent / "src"
    if str(_src) not in sys.path:
        sys.path.insert(0, str(_src))

    from plotwalk.plotting import (
        Bars,
        Boxplot,
        ErrorBars,
        FacetWrap,
        Histogram,
        Labels,
        Marginal,
        Points,
        Smooth,
        plot,
        render,
        save_figure,
    )
    from plotwalk.summary import error_bounds, summarize
    from plotwalk.tutorial import CLASS_PALETTE, SUPP_PALETTE, load_tables
    from plotwalk.utils.logging import configure_logging

    configure_logging(level="INFO")
    tables = load_tables()
    cars = tables["cars"]
    growth = tables["growth"]
    return (
        Bars,
        Boxplot,
        CLASS_PALETTE,
        ErrorBars,
        FacetWrap,
        Histogram,
        Labels,
        Marginal,
        Path,
        Points,
        SUPP_PALETTE,
        Smooth,
        cars,
        error_bounds,
        growth,
        mo,
        plot,
        render,
        save_figure,
        summarize,
    )


@app.cell
def _(cars, mo):
    mo.vstack([
        mo.md("## 1. Scatter plots\n\nStart from a table and a mapping of columns to x and y, then add a layer."),
        mo.ui.table(cars.head(8)),
    ])
    return


@app.cell
def _(Labels, Points, cars, plot, render):
    base = plot(cars, x="displ", y="hwy") + Labels(x="Engine displacement (L)", y="Highway (mpg)")
    render(base + Points())
    return (base,)


@app.cell
def _(CLASS_PALETTE, Labels, Points, cars, mo, plot, render):
    colored = (
        plot(cars, x="displ", y="hwy", color="class")
        + Points(size=8)
        + Labels(x="Engine displacement (L)", y="Highway (mpg)", color="Class")
        + CLASS_PALETTE
    )
    mo.vstack([
        mo.md("## 2. Color and palettes\n\nMapping `color` splits every layer by class."),
        render(colored),
    ])
    return (colored,)


@app.cell
def _(Marginal, colored, mo, render):
    mo.vstack([
        mo.md("## 3. Marginal plots\n\nAdding `Marginal()` returns a new spec; `colored` is unchanged."),
        render(colored + Marginal(kind="histogram")),
    ])
    return


@app.cell
def _(FacetWrap, Points, base, mo, render):
    mo.vstack([
        mo.md("## 4. Faceting\n\nOne panel per drive train."),
        render(base + Points() + FacetWrap("drive", ncol=3)),
    ])
    return


@app.cell
def _(Labels, Points, Smooth, cars, mo, plot, render):
    fitted = (
        plot(cars, x="displ", y="hwy", color="drive")
        + Points(opacity=0.6)
        + Smooth(method="lm", se=True)
        + Labels(color="Drive")
    )
    mo.vstack([mo.md("## 5. Regression overlays"), render(fitted)])
    return


@app.cell
def _(Boxplot, Histogram, Labels, cars, mo, plot, render):
    mo.vstack([
        mo.md("## 6-7. Boxplots and histograms"),
        render(plot(cars, x="class", y="hwy") + Boxplot()),
        render(plot(cars, x="hwy") + Histogram(bins=10) + Labels(y="Number of models")),
    ])
    return


@app.cell
def _(error_bounds, growth, mo, summarize):
    summary = error_bounds(summarize(growth, ["supp", "dose"], "len"), kind="se")
    mo.vstack([
        mo.md(
            "## 8. Bar charts with error bars\n\n"
            "Summarize first: count, mean, sample sd and se = sd / sqrt(count) per group."
        ),
        mo.ui.table(summary),
    ])
    return (summary,)


@app.cell
def _(Bars, ErrorBars, Labels, SUPP_PALETTE, plot, render, summary):
    bars = (
        plot(summary, x="dose", y="mean", color="supp")
        + Bars()
        + ErrorBars()
        + Labels(x="Dose (mg/day)", y="Mean length", color="Supplement")
        + SUPP_PALETTE
    )
    bars_fig = render(bars)
    bars_fig
    return (bars_fig,)


@app.cell
def _(Path, bars_fig, mo, save_figure):
    _out = save_figure(bars_fig, Path("figures") / "growth_by_dose.html", width=6, height=4, units="in")
    mo.md(f"Saved `{_out}`")
    return


if __name__ == "__main__":
    app.run()
