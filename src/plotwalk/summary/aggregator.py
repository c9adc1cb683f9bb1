"""
Group summary statistics: count, mean, sd and se per group.

The summary table feeds bar charts with error bars. It has one row per
distinct combination of the group-key columns, with columns:

    [*keys, "count", "mean", "sd", "se"]

- sd is the sample standard deviation (ddof=1).
- se is sd / sqrt(count).

Single-record groups have no sample sd. The ``degenerate`` argument picks
what happens to them, and the choice applies to every such group in a call:

- "nan" (default): the group is kept, sd and se are NaN.
- "raise": the call fails with DegenerateGroupError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Union

import numpy as np
import pandas as pd

from plotwalk.data.frames import TableLike, as_pandas
from plotwalk.errors import DegenerateGroupError, InvalidFieldError, NonNumericMeasurementError
from plotwalk.utils.logging import get_logger

logger = get_logger(__name__)

STATS_COLUMNS = ["count", "mean", "sd", "se"]

DEGENERATE_POLICIES = ("nan", "raise")


@dataclass(frozen=True)
class GroupSummary:
    """One row of a summary table.

    Attributes:
        key: Group-key values, in the order the keys were requested.
        count: Number of records in the group.
        mean: Arithmetic mean of the measurement.
        sd: Sample standard deviation (NaN when count == 1).
        se: Standard error of the mean (NaN when count == 1).
    """
    key: tuple
    count: int
    mean: float
    sd: float
    se: float


def _numeric_measurement(df: pd.DataFrame, measure: str) -> pd.Series:
    """Return the measurement column as float, failing on anything non-numeric."""
    raw = df[measure]
    y = pd.to_numeric(raw, errors="coerce")
    bad = raw[y.isna()]
    if len(bad) > 0:
        raise NonNumericMeasurementError(measure, bad.tolist())
    return y.astype(float)


def summarize(
    table: TableLike,
    keys: Union[str, Sequence[str]],
    measure: str,
    *,
    degenerate: str = "nan",
) -> pd.DataFrame:
    """Compute count, mean, sd and se of ``measure`` for each group of ``keys``.

    Args:
        table: Input records (pandas or polars DataFrame). Not modified.
        keys: Group-key column name, or ordered list of names.
        measure: Numeric measurement column name.
        degenerate: Policy for single-record groups, "nan" or "raise".

    Returns:
        Summary table, one row per key combination, sorted by key.

    Raises:
        ValueError: If ``keys`` is empty, repeats a name or uses one of the
            summary column names (count, mean, sd, se), or ``degenerate``
            is unknown.
        InvalidFieldError: If a key or the measurement column is missing.
        NonNumericMeasurementError: If any measurement value is not a number.
        DegenerateGroupError: If degenerate="raise" and a group has one record.
    """
    if degenerate not in DEGENERATE_POLICIES:
        raise ValueError(f"degenerate must be one of {DEGENERATE_POLICIES}, got {degenerate!r}")
    key_cols = [keys] if isinstance(keys, str) else list(keys)
    if not key_cols:
        raise ValueError("At least one group key is required")
    if len(set(key_cols)) != len(key_cols):
        raise ValueError(f"Group keys must be distinct, got {key_cols}")
    reserved = [k for k in key_cols if k in STATS_COLUMNS]
    if reserved:
        raise ValueError(
            f"Group key(s) {reserved} clash with summary columns {STATS_COLUMNS}; rename them first"
        )

    df = as_pandas(table)
    for col in [*key_cols, measure]:
        if col not in df.columns:
            raise InvalidFieldError(col, df.columns)

    if len(df) == 0:
        return pd.DataFrame(columns=[*key_cols, *STATS_COLUMNS])

    y = _numeric_measurement(df, measure)
    grouped = y.groupby([df[k] for k in key_cols], sort=True, dropna=False, observed=True)
    out = grouped.agg(count="size", mean="mean", sd="std").reset_index()
    out["se"] = out["sd"] / np.sqrt(out["count"])

    single = out[out["count"] < 2]
    if len(single) > 0:
        single_keys = [tuple(row) for row in single[key_cols].itertuples(index=False)]
        if degenerate == "raise":
            raise DegenerateGroupError(single_keys)
        # std(ddof=1) of a single value is already NaN, so se is NaN too
        logger.debug(f"{len(single_keys)} single-record group(s), sd/se left as NaN: {single_keys}")

    logger.info(f"summarize: {len(df)} rows -> {len(out)} groups by {key_cols} on {measure!r}")
    return out[[*key_cols, *STATS_COLUMNS]]


def iter_group_summaries(summary: pd.DataFrame) -> Iterator[GroupSummary]:
    """Yield one GroupSummary per row of a table returned by summarize()."""
    # keys come first; anything after the stats (e.g. ymin/ymax) is ignored
    key_cols = list(summary.columns[: list(summary.columns).index("count")])
    for row in summary.itertuples(index=False):
        values: dict[str, Any] = dict(zip(summary.columns, row))
        yield GroupSummary(
            key=tuple(values[c] for c in key_cols),
            count=int(values["count"]),
            mean=float(values["mean"]),
            sd=float(values["sd"]),
            se=float(values["se"]),
        )


def error_bounds(summary: pd.DataFrame, kind: str = "se") -> pd.DataFrame:
    """Return a copy of ``summary`` with ``ymin``/``ymax`` = mean -/+ ``kind``.

    Args:
        summary: Table returned by summarize().
        kind: "se" or "sd".
    """
    if kind not in ("se", "sd"):
        raise ValueError(f"kind must be 'se' or 'sd', got {kind!r}")
    out = summary.copy()
    out["ymin"] = out["mean"] - out[kind]
    out["ymax"] = out["mean"] + out[kind]
    return out
