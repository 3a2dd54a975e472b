from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.raw_table import RawTable

"""Spreadsheet reader: file on disk -> RawTable.

Only the first sheet of a workbook is used; later sheets are ignored. Cells
are read header-less so the extractor decides where the header is.

By default pandas' NA string conversion is disabled so placeholder text such
as "NA" or "N/A" stays literal; the engine compares strings, not nulls.
"""

__all__ = [
    "UnsupportedFileError",
    "EXCEL_SUFFIXES",
    "CSV_SUFFIXES",
    "read_table",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


class UnsupportedFileError(Exception):
    """Raised when a file extension is neither an Excel workbook nor CSV."""


def read_table(path: Path, keep_na_strings: bool = True) -> RawTable:
    """Read the first sheet of ``path`` into a RawTable.

    Parameters
    ----------
    path: workbook (.xlsx/.xlsm/.xls) or .csv file
    keep_na_strings: keep "NA"-like strings literal instead of converting them to NaN

    Raises
    ------
    FileNotFoundError: path does not exist
    UnsupportedFileError: unknown file extension
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"file not found: {path}")
    suffix = path.suffix.lower()
    keep_default_na = not keep_na_strings

    if suffix in CSV_SUFFIXES:
        try:
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=keep_default_na,
                skip_blank_lines=False,
            )
        except pd.errors.EmptyDataError:
            return RawTable.from_rows([], sheet_name=path.stem)
        return RawTable.from_dataframe(df, sheet_name=path.stem)

    if suffix in EXCEL_SUFFIXES:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                return RawTable.from_rows([], sheet_name=None)
            name = xls.sheet_names[0]
            df = xls.parse(name, header=None, keep_default_na=keep_default_na)
        return RawTable.from_dataframe(df, sheet_name=str(name))

    raise UnsupportedFileError(f"unsupported file type: {path.name}")
