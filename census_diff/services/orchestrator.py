from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import read_table
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import AppConfig, ExtractionConfig
from ..models.diff_result import DiffResult
from ..models.error_record import FILE_READ_ERROR, PARSE_FAILURE, ErrorRecord
from ..models.record import Record
from .diff_engine import compare
from .extractor import ParseFailure, extract_records
from .progress import ProgressTracker

"""Comparison orchestration.

Reads the baseline and current files (one RawTable each, first sheet only),
extracts records, compares them and returns everything the CLI reports on.
File-level failures are recorded in the error log buffer and re-raised as
ProcessingError; nothing is retried.
"""

__all__ = [
    "ProcessingError",
    "LoadedFile",
    "ComparisonRun",
    "load_records",
    "run_comparison",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """A baseline or current file could not be turned into records."""


@dataclass(frozen=True)
class LoadedFile:
    path: Path
    sheet_name: str | None
    records: list[Record]
    strategy: str
    valid: bool


@dataclass(frozen=True)
class ComparisonRun:
    baseline: LoadedFile
    current: LoadedFile
    result: DiffResult
    start_time: datetime
    end_time: datetime

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


def load_records(path: Path, config: ExtractionConfig | None = None) -> LoadedFile:
    """Read ``path`` and extract its records.

    Raises:
        FileNotFoundError / UnsupportedFileError: from the reader
        ParseFailure: no strategy produced any record
    """
    cfg = config or ExtractionConfig()
    table = read_table(path, keep_na_strings=cfg.keep_na_strings)
    logger.debug(
        "read %s sheet=%s rows=%d cols=%d", Path(path).name, table.sheet_name, table.n_rows, table.n_cols
    )
    outcome = extract_records(table, cfg)
    return LoadedFile(
        path=Path(path),
        sheet_name=table.sheet_name,
        records=outcome.records,
        strategy=outcome.strategy,
        valid=outcome.valid,
    )


def _record_failure(error_log: ErrorLogBuffer | None, path: Path, error_type: str, message: str) -> None:
    if error_log is not None:
        error_log.append(ErrorRecord.file_level(path.name, error_type, message))


def run_comparison(
    baseline_path: Path,
    current_path: Path,
    config: AppConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ComparisonRun:
    """Load both files and compare them.

    Raises:
        ProcessingError: either file is unreadable or yields no records
    """
    cfg = config or AppConfig()
    start_time = datetime.now(UTC)
    inputs = (("baseline", Path(baseline_path)), ("current", Path(current_path)))
    loaded: dict[str, LoadedFile] = {}

    with ProgressTracker([path for _, path in inputs]) as progress:
        for role, path in inputs:
            progress.file_started(role, path)
            try:
                loaded[role] = load_records(path, cfg.extraction)
            except ParseFailure as e:
                _record_failure(error_log, path, PARSE_FAILURE, e.reason)
                raise ProcessingError(f"{role} file {path.name}: {e.reason}") from e
            except Exception as e:
                _record_failure(error_log, path, FILE_READ_ERROR, str(e))
                raise ProcessingError(f"{role} file {path.name}: {e}") from e
            progress.file_done(len(loaded[role].records))

        progress.compare_started()
        result = compare(loaded["baseline"].records, loaded["current"].records)
        progress.compare_done(result.total_differences)

    end_time = datetime.now(UTC)
    return ComparisonRun(
        baseline=loaded["baseline"],
        current=loaded["current"],
        result=result,
        start_time=start_time,
        end_time=end_time,
    )
