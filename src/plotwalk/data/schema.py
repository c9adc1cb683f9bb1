"""Declared table schemas.

A TableSchema names the columns a table must have and what each one holds.
apply() converts a freshly loaded frame to those types and fails loudly on
mismatch instead of coercing silently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import pandas as pd

from plotwalk.errors import InvalidFieldError, NonNumericMeasurementError


class ColumnKind(Enum):
    """Kinds of declared columns."""
    CATEGORICAL = "categorical"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class ColumnSpec:
    """Declaration of a single column.

    Attributes:
        name: Column name as it appears in the header row.
        kind: CATEGORICAL or NUMERIC.
        categories: Level order for categorical columns. None keeps sorted order.
    """
    name: str
    kind: ColumnKind = ColumnKind.NUMERIC
    categories: Optional[tuple] = None


@dataclass(frozen=True)
class TableSchema:
    """Ordered column declarations for a table."""
    columns: tuple[ColumnSpec, ...] = field(default_factory=tuple)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def numeric(self) -> list[str]:
        return [c.name for c in self.columns if c.kind == ColumnKind.NUMERIC]

    def categorical(self) -> list[str]:
        return [c.name for c in self.columns if c.kind == ColumnKind.CATEGORICAL]

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of ``df`` with declared columns converted.

        Raises:
            InvalidFieldError: If a declared column is missing.
            NonNumericMeasurementError: If a numeric column has non-numeric values.
        """
        for spec in self.columns:
            if spec.name not in df.columns:
                raise InvalidFieldError(spec.name, df.columns)

        out = df.copy()
        for spec in self.columns:
            if spec.kind == ColumnKind.NUMERIC:
                try:
                    out[spec.name] = pd.to_numeric(out[spec.name], errors="raise")
                except (ValueError, TypeError):
                    coerced = pd.to_numeric(out[spec.name], errors="coerce")
                    bad = out[spec.name][coerced.isna() & out[spec.name].notna()]
                    raise NonNumericMeasurementError(spec.name, bad.tolist()) from None
            else:
                out = to_categorical(out, spec.name, spec.categories)
        return out


def to_categorical(
    df: pd.DataFrame,
    column: str,
    categories: Optional[Sequence] = None,
) -> pd.DataFrame:
    """Return a copy of ``df`` with ``column`` as an ordered categorical.

    Values are converted to strings first, so a numeric column such as
    ``dose`` (0.5, 1.0, 2.0) becomes levels "0.5", "1.0", "2.0".

    Args:
        df: Source frame (not modified).
        column: Column to convert.
        categories: Level order. Defaults to the sorted distinct values
            (numeric sort when the original column is numeric).

    Raises:
        InvalidFieldError: If ``column`` is missing.
        ValueError: If a value is not among ``categories``.
    """
    if column not in df.columns:
        raise InvalidFieldError(column, df.columns)
    s = df[column]
    if categories is None:
        distinct = s.dropna().unique().tolist()
        try:
            distinct = sorted(distinct)
        except TypeError:
            distinct = sorted(distinct, key=str)
        levels = [str(v) for v in distinct]
    else:
        levels = [str(v) for v in categories]

    as_str = s.map(lambda v: str(v) if pd.notna(v) else v)
    unknown = sorted(set(as_str.dropna()) - set(levels))
    if unknown:
        raise ValueError(f"Column {column!r} has values not in categories {levels}: {unknown}")

    out = df.copy()
    out[column] = pd.Categorical(as_str, categories=levels, ordered=True)
    return out
