"""Conversion of table-like inputs to pandas DataFrames."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING, Union

import pandas as pd

# Optional polars
try:  # pragma: no cover - import guard
    import polars as _pl  # type: ignore[import]
    HAS_POLARS = True
except ImportError:  # pragma: no cover - polars optional
    _pl = None  # type: ignore[assignment]
    HAS_POLARS = False

if TYPE_CHECKING:  # for type checkers only
    import polars as pl
else:
    pl = _pl  # type: ignore[assignment]


TableLike = Union["pd.DataFrame", "pl.DataFrame"]  # type: ignore[name-defined]


def as_pandas(table: Any) -> pd.DataFrame:
    """Return ``table`` as a pandas DataFrame.

    pandas frames are returned as-is (callers must not mutate them). Polars
    frames are converted column by column, which keeps column order and does
    not need pyarrow.

    Raises:
        TypeError: If ``table`` is neither a pandas nor a polars DataFrame.
    """
    if isinstance(table, pd.DataFrame):
        return table
    if HAS_POLARS and pl is not None and isinstance(table, pl.DataFrame):
        return pd.DataFrame(table.to_dict(as_series=False), columns=table.columns)
    raise TypeError(
        f"Unsupported table type {type(table).__name__}. "
        "Expected pandas.DataFrame or polars.DataFrame."
    )
