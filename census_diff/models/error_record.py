from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

census-diff fails per file, never per row: a baseline or current file that
cannot be read or yields no records. Those entries carry ``row=-1`` and the
``<FILE_LEVEL>`` sheet marker unless the sheet is known.
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL_SHEET",
    "FILE_LEVEL_ROW",
    "FILE_READ_ERROR",
    "PARSE_FAILURE",
]

FILE_LEVEL_SHEET = "<FILE_LEVEL>"
FILE_LEVEL_ROW = -1

# error_type values
FILE_READ_ERROR = "FILE_READ_ERROR"
PARSE_FAILURE = "PARSE_FAILURE"


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """One error log entry.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: input file name (baseline or current)
        sheet: sheet name, FILE_LEVEL_SHEET when the failure precedes sheet selection
        row: 1-based row number, FILE_LEVEL_ROW for file-level failures
        error_type: UPPER_SNAKE_CASE classification (FILE_READ_ERROR, PARSE_FAILURE)
        message: exception text
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        return ErrorRecord(
            timestamp=_utc_timestamp(),
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    @classmethod
    def file_level(cls, file: str, error_type: str, message: str, sheet: str | None = None) -> ErrorRecord:
        """Entry for a whole input file that could not be compared."""
        return cls.create(file, sheet or FILE_LEVEL_SHEET, FILE_LEVEL_ROW, error_type, message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
