"""Per-group descriptive statistics for bar charts with error bars."""

from plotwalk.summary.aggregator import (
    STATS_COLUMNS,
    GroupSummary,
    error_bounds,
    iter_group_summaries,
    summarize,
)
from plotwalk.errors import (
    DegenerateGroupError,
    InvalidFieldError,
    NonNumericMeasurementError,
    PlotwalkError,
)

__all__ = [
    "STATS_COLUMNS",
    "DegenerateGroupError",
    "GroupSummary",
    "InvalidFieldError",
    "NonNumericMeasurementError",
    "PlotwalkError",
    "error_bounds",
    "iter_group_summaries",
    "summarize",
]
