# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from census_diff.models.raw_table import RawTable
from census_diff.models.record import Record

HEADER = ["First Name", "Last Name", "Date of Birth", "Gender", "Relationship", "Enrollment Tier"]


def make_record(**values: str) -> Record:
    """Record with snake_case canonical keys; missing fields default to ''."""
    return Record.from_mapping(values)


@pytest.fixture()
def record_factory():
    return make_record


def write_excel(path: Path, rows: list[list[object]], sheets: dict[str, list[list[object]]] | None = None) -> Path:
    """Write ``rows`` header-less to the first sheet (extra sheets after it)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
        for name, extra in (sheets or {}).items():
            pd.DataFrame(extra).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture()
def workbook_writer():
    return write_excel


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CENSUS_DIFF_CONFIG", raising=False)
    return tmp_path


@pytest.fixture()
def jane() -> Record:
    return make_record(
        first_name="Jane",
        last_name="Doe",
        dob="1990-01-01",
        gender="F",
        relationship="Employee",
        enrollment_tier="Single",
    )


@pytest.fixture()
def census_rows() -> list[list[object]]:
    return [
        HEADER,
        ["Jane", "Doe", "1990-01-01", "F", "Employee", "Single"],
        ["John", "Smith", "1985-05-12", "M", "Employee", "Family"],
        ["Amy", "Smith", "1987-03-04", "F", "Spouse", "Family"],
        ["Tom", "Lee", "2010-07-30", "M", "Child", "Family"],
    ]


@pytest.fixture()
def census_table(census_rows) -> RawTable:
    return RawTable.from_rows(census_rows, sheet_name="Census")


@pytest.fixture()
def sample_config_yaml() -> str:
    return """extraction:
  validity_threshold: 0.8
  sample_rows: 3
  default_fill: N/A
export:
  directory: ./out
  filename_template: report_{date}.xlsx
log_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "census_diff.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def census_files(temp_workdir: Path, census_rows) -> tuple[Path, Path]:
    """Baseline and current workbooks: one tier change, one removed, one added."""
    baseline = write_excel(temp_workdir / "data" / "baseline.xlsx", census_rows)
    current_rows = [
        ["Enrollment Export"],
        ["Last Name", "First Name", "DOB", "Sex", "Member Type", "Plan Type"],
        ["Doe", "Jane", "1990-01-01", "F", "Employee", "Family"],
        ["Smith", "John", "1985-05-12", "M", "Employee", "Family"],
        ["Smith", "Amy", "1987-03-04", "F", "Spouse", "Family"],
        ["Park", "Ana", "1992-11-02", "F", "Employee", "Single"],
    ]
    current = write_excel(temp_workdir / "data" / "current.xlsx", current_rows)
    return baseline, current
