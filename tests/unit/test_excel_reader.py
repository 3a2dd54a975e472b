from __future__ import annotations

from pathlib import Path

import pytest

from census_diff.excel.reader import UnsupportedFileError, read_table


def test_read_xlsx_first_sheet_only(temp_workdir: Path, census_rows, workbook_writer):
    path = workbook_writer(
        temp_workdir / "data" / "census.xlsx",
        census_rows,
        sheets={"Other": [["First Name"], ["Ignored"]]},
    )
    table = read_table(path)
    assert table.sheet_name == "Sheet1"
    assert table.n_rows == 5
    assert table.n_cols == 6
    assert table.header() == census_rows[0]
    assert table.row_texts(1) == ["Jane", "Doe", "1990-01-01", "F", "Employee", "Single"]


def test_read_xlsx_numbers_and_blanks(temp_workdir: Path, workbook_writer):
    path = workbook_writer(
        temp_workdir / "data" / "ids.xlsx",
        [["First Name", "Employee ID", "Note"], ["Jane", 1001, None]],
    )
    table = read_table(path)
    assert table.text(1, 1) == "1001"
    assert table.text(1, 2) == ""


def test_read_xlsx_keeps_na_strings(temp_workdir: Path, workbook_writer):
    path = workbook_writer(temp_workdir / "data" / "na.xlsx", [["First Name", "Gender"], ["NA", "N/A"]])
    kept = read_table(path)
    assert kept.row_texts(1) == ["NA", "N/A"]
    converted = read_table(path, keep_na_strings=False)
    assert converted.row_texts(1) == ["", ""]


def test_read_csv(temp_workdir: Path):
    path = temp_workdir / "data" / "census.csv"
    path.write_text("First Name,Last Name,DOB\nJane,Doe,01/01/1990\nNA,Smith,\n", encoding="utf-8")
    table = read_table(path)
    assert table.sheet_name == "census"
    assert table.row_texts(1) == ["Jane", "Doe", "01/01/1990"]
    assert table.row_texts(2) == ["NA", "Smith", ""]


def test_read_empty_csv(temp_workdir: Path):
    path = temp_workdir / "data" / "empty.csv"
    path.write_text("", encoding="utf-8")
    table = read_table(path)
    assert table.n_rows == 0
    assert table.is_empty()


def test_missing_file(temp_workdir: Path):
    with pytest.raises(FileNotFoundError):
        read_table(temp_workdir / "data" / "nope.xlsx")


def test_unsupported_extension(temp_workdir: Path):
    path = temp_workdir / "data" / "census.txt"
    path.write_text("First Name\nJane\n", encoding="utf-8")
    with pytest.raises(UnsupportedFileError):
        read_table(path)
