"""Table loading and declared schemas."""

from plotwalk.data.frames import as_pandas
from plotwalk.data.loader import (
    CARS_SCHEMA,
    GROWTH_SCHEMA,
    list_datasets,
    load_dataset,
    load_table,
)
from plotwalk.data.schema import ColumnKind, ColumnSpec, TableSchema, to_categorical

__all__ = [
    "CARS_SCHEMA",
    "GROWTH_SCHEMA",
    "ColumnKind",
    "ColumnSpec",
    "TableSchema",
    "as_pandas",
    "list_datasets",
    "load_dataset",
    "load_table",
    "to_categorical",
]
