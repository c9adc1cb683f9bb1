"""Table loading: CSV files and the bundled tutorial datasets.

Bundled datasets live in plotwalk/data/datasets/ and each has a declared
TableSchema, so they come back with typed columns:

- cars.csv: fuel economy of a few dozen car models
  (class, drive, cylinders, displacement, city/highway mpg).
- growth.csv: growth length by supplement (OJ, VC) and dose (0.5, 1.0, 2.0).
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from plotwalk.data.schema import ColumnKind, ColumnSpec, TableSchema
from plotwalk.utils.logging import get_logger

logger = get_logger(__name__)

CARS_SCHEMA = TableSchema(columns=(
    ColumnSpec("manufacturer", ColumnKind.CATEGORICAL),
    ColumnSpec("class", ColumnKind.CATEGORICAL),
    ColumnSpec("drive", ColumnKind.CATEGORICAL, categories=("f", "r", "4")),
    ColumnSpec("cylinders", ColumnKind.NUMERIC),
    ColumnSpec("displ", ColumnKind.NUMERIC),
    ColumnSpec("cty", ColumnKind.NUMERIC),
    ColumnSpec("hwy", ColumnKind.NUMERIC),
))

GROWTH_SCHEMA = TableSchema(columns=(
    ColumnSpec("supp", ColumnKind.CATEGORICAL, categories=("OJ", "VC")),
    ColumnSpec("dose", ColumnKind.CATEGORICAL, categories=("0.5", "1.0", "2.0")),
    ColumnSpec("len", ColumnKind.NUMERIC),
))

DATASET_SCHEMAS: dict[str, TableSchema] = {
    "cars": CARS_SCHEMA,
    "growth": GROWTH_SCHEMA,
}


def load_table(path: Union[str, Path], schema: Optional[TableSchema] = None) -> pd.DataFrame:
    """Read a comma-separated file with a header row.

    Args:
        path: CSV file path.
        schema: Optional declared schema; when given, declared columns are
            checked and converted (see TableSchema.apply).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidFieldError: If a declared column is missing.
        NonNumericMeasurementError: If a declared numeric column is not numeric.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV not found: {path}")
    df = pd.read_csv(path)
    logger.debug(f"Loaded {path.name}: {len(df)} rows, columns={list(df.columns)}")
    if schema is not None:
        df = schema.apply(df)
    return df


def list_datasets() -> list[str]:
    """Names of the bundled datasets (sorted)."""
    root = resources.files("plotwalk.data") / "datasets"
    return sorted(p.name[: -len(".csv")] for p in root.iterdir() if p.name.endswith(".csv"))


def load_dataset(name: str) -> pd.DataFrame:
    """Load a bundled dataset by name ("cars" or "growth") with its schema applied.

    Raises:
        KeyError: If ``name`` is not a bundled dataset.
    """
    if name not in DATASET_SCHEMAS:
        raise KeyError(f"Unknown dataset {name!r}; available: {list_datasets()}")
    resource = resources.files("plotwalk.data") / "datasets" / f"{name}.csv"
    with resources.as_file(resource) as path:
        return load_table(path, DATASET_SCHEMAS[name])
