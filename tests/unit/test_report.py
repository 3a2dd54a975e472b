from __future__ import annotations

from datetime import date
from pathlib import Path

from openpyxl import load_workbook

from census_diff.excel.report import (
    REPORT_HEADERS,
    build_report_rows,
    default_report_name,
    write_report,
)
from census_diff.services.diff_engine import compare


def _sample_result(jane, record_factory):
    tom = record_factory(first_name="Tom", last_name="Lee", dob="2010-07-30", enrollment_tier="Family")
    ana = record_factory(first_name="Ana", last_name="Park", dob="1992-11-02", enrollment_tier="Single")
    return compare([jane, tom], [jane.replace(enrollment_tier="Family"), ana])


def test_build_report_rows_order_and_status(jane, record_factory):
    rows = build_report_rows(_sample_result(jane, record_factory))
    assert [r.status for r in rows] == ["New", "Missing", "Modified (New)", "Modified (Old)"]
    assert rows[0].values[0] == "Ana"
    assert rows[1].values[0] == "Tom"
    new, old = rows[2], rows[3]
    assert new.values[5] == "Family"
    assert old.values[5] == "Single"
    # unchanged fields repeat the current values
    assert old.values[:5] == new.values[:5]
    assert new.changed == frozenset({"enrollment_tier"})


def test_default_report_name():
    assert default_report_name(today=date(2024, 3, 1)) == "variance_analysis_2024-03-01.xlsx"
    assert default_report_name("report_{date}.xlsx", date(2024, 3, 1)) == "report_2024-03-01.xlsx"


def test_write_report_styles(temp_workdir: Path, jane, record_factory):
    path = write_report(_sample_result(jane, record_factory), temp_workdir / "out" / "report.xlsx")
    assert path.exists()

    wb = load_workbook(path)
    ws = wb["Variance Analysis"]
    assert [c.value for c in ws[1]] == REPORT_HEADERS
    assert ws.max_row == 5
    assert ws.cell(row=1, column=1).font.bold
    assert ws.cell(row=1, column=1).fill.fgColor.rgb.endswith("F5F5F5")

    assert ws.cell(row=2, column=7).value == "New"
    assert ws.cell(row=2, column=1).fill.fgColor.rgb.endswith("E6F4EA")
    assert ws.cell(row=3, column=1).fill.fgColor.rgb.endswith("FFEBEE")

    # Modified (New): unchanged cells yellow, changed tier cell orange
    assert ws.cell(row=4, column=1).fill.fgColor.rgb.endswith("FFFDE7")
    tier_cell = ws.cell(row=4, column=6)
    assert tier_cell.value == "Family"
    assert tier_cell.fill.fgColor.rgb.endswith("FFF3E0")
    assert tier_cell.font.color.rgb.endswith("CC5500")
    assert ws.cell(row=5, column=6).value == "Single"
    assert ws.cell(row=5, column=7).value == "Modified (Old)"

    assert ws.column_dimensions["A"].width == 15
    assert ws.column_dimensions["C"].width == 12
    assert ws.column_dimensions["D"].width == 10


def test_write_report_custom_sheet_and_empty_result(temp_workdir: Path):
    path = write_report(compare([], []), temp_workdir / "empty.xlsx", sheet_name="Diff")
    ws = load_workbook(path)["Diff"]
    assert ws.max_row == 1
    assert [c.value for c in ws[1]] == REPORT_HEADERS
