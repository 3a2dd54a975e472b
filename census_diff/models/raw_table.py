from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Union

import pandas as pd

"""RawTable model for census-diff.

A RawTable is the immutable cell grid handed over by the spreadsheet reader.
The reconciliation engine only ever looks at cells through this abstraction:
extent, cell value at (row, col) and the optional sheet name.
"""

__all__ = [
    "Cell",
    "RawTable",
    "column_letter",
    "cell_text",
]

Cell = Union[str, int, float, None]


def column_letter(index: int) -> str:
    """Spreadsheet column letter for a 0-based column index (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"column index must be >= 0: {index}")
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def cell_text(value: Any) -> str:
    """Render a cell value as the trimmed string the engine compares on."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (datetime, pd.Timestamp)):
        if pd.isna(value):
            return ""
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _to_cell(value: Any) -> Cell:
    # Anything that is not a plain number is kept as its text form
    if value is None:
        return None
    if isinstance(value, bool):
        return cell_text(value)
    if isinstance(value, numbers.Real):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    text = cell_text(value)
    return text if text != "" or isinstance(value, str) else None


@dataclass(frozen=True)
class RawTable:
    """Immutable 2-D grid of cell values with an explicit extent.

    Rows may be ragged in the source; ``cell`` pads them logically so that
    every (row, col) inside ``n_rows`` x ``n_cols`` is addressable.
    """
    rows: tuple[tuple[Cell, ...], ...]
    n_rows: int
    n_cols: int
    sheet_name: str | None = None

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]], sheet_name: str | None = None) -> RawTable:
        frozen = tuple(tuple(_to_cell(v) for v in row) for row in rows)
        n_cols = max((len(r) for r in frozen), default=0)
        return cls(rows=frozen, n_rows=len(frozen), n_cols=n_cols, sheet_name=sheet_name)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, sheet_name: str | None = None) -> RawTable:
        """Build a RawTable from a header-less DataFrame (``header=None`` read)."""
        # object dtype keeps ints as ints instead of upcasting to float
        values = df.astype(object).where(pd.notna(df), None).values.tolist()
        return cls.from_rows(values, sheet_name=sheet_name)

    def cell(self, row: int, col: int) -> Cell:
        if row < 0 or col < 0 or row >= self.n_rows:
            return None
        r = self.rows[row]
        if col >= len(r):
            return None
        return r[col]

    def text(self, row: int, col: int) -> str:
        return cell_text(self.cell(row, col))

    def row_texts(self, row: int) -> list[str]:
        return [self.text(row, c) for c in range(self.n_cols)]

    def header(self, row: int = 0) -> list[str]:
        return self.row_texts(row)

    def is_empty(self) -> bool:
        return all(self.text(r, c) == "" for r in range(self.n_rows) for c in range(self.n_cols))

    def column_has_data(self, col: int, start_row: int = 1) -> bool:
        return any(self.text(r, col) != "" for r in range(start_row, self.n_rows))
