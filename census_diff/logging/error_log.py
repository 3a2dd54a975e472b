from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""JSON Lines error log for a comparison run.

A run collects at most one entry per input file (the baseline or current file
that stopped it). Entries stay in memory until ``flush``, which writes them to
``<log_directory>/errors-YYYYMMDD-HHMMSS.log``. A clean run leaves no file.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "error_log_name",
]

DEFAULT_LOG_DIRECTORY = Path("./logs")


def error_log_name(now: datetime | None = None) -> str:
    """``errors-YYYYMMDD-HHMMSS.log`` for ``now`` (UTC)."""
    stamp = (now or datetime.now(UTC)).strftime("%Y%m%d-%H%M%S")
    return f"errors-{stamp}.log"


class ErrorLogBuffer:
    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = Path(logs_dir) if logs_dir is not None else DEFAULT_LOG_DIRECTORY
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    @property
    def file_path(self) -> Path:
        # fixed on first use so repeated flushes land in one file
        if self._target is None:
            self._target = self.logs_dir / error_log_name()
        return self._target

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(self._pending)

    def counts(self) -> dict[str, int]:
        """Pending entries per error_type."""
        return dict(Counter(r.error_type for r in self._pending))

    def flush(self) -> Path | None:
        """Append pending entries to the log file and clear them.

        Returns the file path, or None when nothing was pending.
        """
        if not self._pending:
            return None
        target = self.file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = "".join(f"{r.to_json_line()}\n" for r in self._pending)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(payload)
        self._pending = []
        return target
