from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side

from ..models.diff_result import DiffResult
from ..models.record import CANONICAL_FIELDS, Record

"""Variance report export.

Serializes a DiffResult into a single styled worksheet:

- New rows (current only) on light green
- Missing rows (baseline only) on light red
- Each modified pair as a "Modified (New)" row with the current values and a
  "Modified (Old)" row with the baseline values of the changed fields, both on
  light yellow, changed cells highlighted in orange
"""

__all__ = [
    "REPORT_HEADERS",
    "ReportRow",
    "build_report_rows",
    "default_report_name",
    "write_report",
]

REPORT_HEADERS = [
    "First Name",
    "Last Name",
    "DOB",
    "Gender",
    "Relationship",
    "Enrollment Tier",
    "Status",
]

STATUS_NEW = "New"
STATUS_MISSING = "Missing"
STATUS_MODIFIED_NEW = "Modified (New)"
STATUS_MODIFIED_OLD = "Modified (Old)"

COLUMN_WIDTHS = [15, 15, 12, 10, 15, 15, 15]

_HEADER_FILL = PatternFill(patternType="solid", fgColor="F5F5F5")
_NEW_FILL = PatternFill(patternType="solid", fgColor="E6F4EA")
_MISSING_FILL = PatternFill(patternType="solid", fgColor="FFEBEE")
_MODIFIED_FILL = PatternFill(patternType="solid", fgColor="FFFDE7")
_CHANGED_FILL = PatternFill(patternType="solid", fgColor="FFF3E0")
_CHANGED_FONT = Font(color="CC5500")
_HEADER_FONT = Font(bold=True)
_THIN = Side(style="thin", color="000000")
_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)


@dataclass(frozen=True)
class ReportRow:
    values: list[str]
    status: str
    changed: frozenset[str] = field(default_factory=frozenset)


def _canonical_values(record: Record) -> list[str]:
    return [record.get(name) for name in CANONICAL_FIELDS]


def build_report_rows(result: DiffResult) -> list[ReportRow]:
    """Row model of the report, in output order (new, missing, modified pairs)."""
    rows: list[ReportRow] = []
    for rec in result.added:
        rows.append(ReportRow(values=_canonical_values(rec), status=STATUS_NEW))
    for rec in result.removed:
        rows.append(ReportRow(values=_canonical_values(rec), status=STATUS_MISSING))
    for item in result.modified:
        changed = frozenset(item.differences)
        rows.append(
            ReportRow(values=_canonical_values(item.current), status=STATUS_MODIFIED_NEW, changed=changed)
        )
        old = item.current.replace(**{name: d.baseline for name, d in item.differences.items()})
        rows.append(ReportRow(values=_canonical_values(old), status=STATUS_MODIFIED_OLD, changed=changed))
    return rows


def default_report_name(template: str = "variance_analysis_{date}.xlsx", today: date | None = None) -> str:
    return template.format(date=(today or date.today()).isoformat())


def write_report(result: DiffResult, path: Path, sheet_name: str = "Variance Analysis") -> Path:
    """Write the styled variance workbook to ``path`` and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = build_report_rows(result)
    df = pd.DataFrame([r.values + [r.status] for r in rows], columns=REPORT_HEADERS)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        ws = writer.sheets[sheet_name]

        for col_idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[ws.cell(row=1, column=col_idx).column_letter].width = width

        for col_idx in range(1, len(REPORT_HEADERS) + 1):
            cell = ws.cell(row=1, column=col_idx)
            cell.fill = _HEADER_FILL
            cell.font = _HEADER_FONT
            cell.border = _BORDER

        for offset, report_row in enumerate(rows):
            excel_row = offset + 2
            if report_row.status == STATUS_NEW:
                base_fill = _NEW_FILL
            elif report_row.status == STATUS_MISSING:
                base_fill = _MISSING_FILL
            else:
                base_fill = _MODIFIED_FILL
            for col_idx in range(1, len(REPORT_HEADERS) + 1):
                cell = ws.cell(row=excel_row, column=col_idx)
                cell.border = _BORDER
                cell.fill = base_fill
                if col_idx <= len(CANONICAL_FIELDS) and CANONICAL_FIELDS[col_idx - 1] in report_row.changed:
                    cell.fill = _CHANGED_FILL
                    cell.font = _CHANGED_FONT
    return path
