"""
plotwalk: a literate walkthrough of a declarative plotting grammar.

This package provides:
- summarize(): per-group count / mean / sd / se for bar charts with error bars
- Table loading with declared schemas, and two small bundled datasets
- PlotSpec: an immutable plot specification built by adding layers
- render() / save_figure(): Plotly rendering and file export
- The tutorial lessons (plotwalk.tutorial)

For logging output in scripts and notebooks:
    ```python
    from plotwalk.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from plotwalk.utils.logging import configure_logging, get_logger

from plotwalk.data import load_dataset, load_table
from plotwalk.errors import (
    DegenerateGroupError,
    InvalidFieldError,
    NonNumericMeasurementError,
    PlotwalkError,
)
from plotwalk.plotting import plot, render, save_figure
from plotwalk.summary import error_bounds, summarize

# NullHandler so plotwalk logs don't reach the root logger until
# configure_logging() (or the host application) sets up handlers.
_logger = logging.getLogger("plotwalk")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "DegenerateGroupError",
    "InvalidFieldError",
    "NonNumericMeasurementError",
    "PlotwalkError",
    "configure_logging",
    "error_bounds",
    "get_logger",
    "load_dataset",
    "load_table",
    "plot",
    "render",
    "save_figure",
    "summarize",
]

__version__ = "0.1.0"
