from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Comparison progress with tqdm (TTY only).

One step per input file (read + extract) and one for the comparison itself,
so a run over a baseline and a current file is three steps. In non-TTY
environments (CI, pipes) the bar is disabled so log output stays free of ANSI
control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar over the steps of one comparison run."""

    def __init__(self, files: Sequence[Path], *, description: str = "Comparing") -> None:
        self.files = [Path(f) for f in files]
        self.total_steps = len(self.files) + 1
        self.completed_steps = 0
        self.description = description

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=self.total_steps,
                desc=description,
                unit="step",
                leave=False,
                ncols=80,
                ascii=True,
            )

    def _step(self, **postfix: Any) -> None:
        self.completed_steps += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**postfix)
            self.pbar.update(1)

    def _describe(self, text: str) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} [{text}]")

    def file_started(self, role: str, path: Path) -> None:
        self._describe(f"{role}: {Path(path).name}")

    def file_done(self, records: int) -> None:
        self._step(records=records)

    def compare_started(self) -> None:
        self._describe("diff")

    def compare_done(self, differences: int) -> None:
        self._step(differences=differences)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
