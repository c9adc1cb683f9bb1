"""Summarize a CSV and draw a bar chart with standard-error bars.

Usage:
    python examples/example_script.py path/to/table.csv group_col measure_col [out.html]
"""

import sys
from pathlib import Path

from plotwalk import error_bounds, load_table, plot, render, save_figure, summarize
from plotwalk.plotting import Bars, ErrorBars, Labels
from plotwalk.utils.logging import configure_logging

configure_logging(level="INFO")

csv_path, group_col, measure_col = sys.argv[1:4]
out = Path(sys.argv[4]) if len(sys.argv) > 4 else Path("summary.html")

df = load_table(csv_path)
summary = error_bounds(summarize(df, [group_col], measure_col), kind="se")
print(summary.to_string(index=False))

spec = (
    plot(summary, x=group_col, y="mean")
    + Bars()
    + ErrorBars()
    + Labels(title=f"{measure_col} by {group_col} (mean +/- se)", y=f"mean {measure_col}")
)
save_figure(render(spec), out, width=800, height=500, units="px")
