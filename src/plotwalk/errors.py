"""Errors raised when summarizing or loading tables.

All errors subclass ValueError so existing ``except ValueError`` handlers
keep catching them.
"""

from __future__ import annotations

from typing import Any, Iterable


class PlotwalkError(ValueError):
    """Base class for plotwalk data errors."""


class InvalidFieldError(PlotwalkError):
    """A requested column is not in the table."""

    def __init__(self, field: str, available: Iterable[Any] = ()) -> None:
        self.field = field
        self.available = [str(c) for c in available]
        super().__init__(
            f"Unknown field {field!r}; available columns: {', '.join(self.available) or '(none)'}"
        )


class NonNumericMeasurementError(PlotwalkError):
    """A measurement column holds values that are not numbers."""

    def __init__(self, field: str, bad_values: Iterable[Any] = ()) -> None:
        self.field = field
        self.bad_values = list(bad_values)
        preview = ", ".join(repr(v) for v in self.bad_values[:5])
        super().__init__(f"Column {field!r} has non-numeric values: {preview}")


class DegenerateGroupError(PlotwalkError):
    """One or more groups have a single record, so sample sd is undefined."""

    def __init__(self, groups: Iterable[tuple]) -> None:
        self.groups = list(groups)
        super().__init__(
            f"{len(self.groups)} group(s) have fewer than two records: {self.groups[:5]}"
        )
