from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .record import CANONICAL_FIELDS, Record

"""Diff result models for census-diff.

DiffResult is the only artifact handed to report / UI consumers. It is built
once by services.diff_engine.compare and never mutated afterwards.
"""

__all__ = [
    "FieldDelta",
    "ModifiedRecord",
    "DiffResult",
    "variation_percentage",
]


def variation_percentage(added: int, removed: int, modified: int, baseline_count: int) -> float:
    """(|added| + |removed| + |modified|) / max(|baseline|, 1) * 100"""
    return (added + removed + modified) / max(baseline_count, 1) * 100


@dataclass(frozen=True)
class FieldDelta:
    baseline: str
    current: str


@dataclass(frozen=True)
class ModifiedRecord:
    """A baseline/current pair judged to be the same person with changed data."""
    baseline: Record
    current: Record
    differences: dict[str, FieldDelta] = field(default_factory=dict)

    def changed_fields(self) -> list[str]:
        return [name for name in CANONICAL_FIELDS if name in self.differences]

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline": self.baseline.to_dict(),
            "current": self.current.to_dict(),
            "differences": {
                name: {"baseline": d.baseline, "current": d.current}
                for name, d in self.differences.items()
            },
        }


@dataclass(frozen=True)
class DiffResult:
    """Classified differences between a baseline and a current record set.

    Attributes:
        added: records present only in current
        removed: records present only in baseline
        modified: matched pairs with field-level deltas
        variation_percentage: total differences relative to the baseline size
        baseline_count: number of baseline records compared
        current_count: number of current records compared
    """
    added: tuple[Record, ...] = ()
    removed: tuple[Record, ...] = ()
    modified: tuple[ModifiedRecord, ...] = ()
    variation_percentage: float = 0.0
    baseline_count: int = 0
    current_count: int = 0

    @property
    def total_differences(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    def is_empty(self) -> bool:
        return self.total_differences == 0

    def field_change_counts(self) -> dict[str, int]:
        """Number of modified entries touching each field, most changed first."""
        counts: dict[str, int] = {}
        for item in self.modified:
            for name in item.differences:
                counts[name] = counts.get(name, 0) + 1
        return dict(sorted(counts.items(), key=lambda kv: kv[1], reverse=True))

    def category_shares(self) -> dict[str, float]:
        """Percentage of the total differences falling in each category."""
        total = self.total_differences
        if total == 0:
            return {"added": 0.0, "removed": 0.0, "modified": 0.0}
        return {
            "added": len(self.added) / total * 100,
            "removed": len(self.removed) / total * 100,
            "modified": len(self.modified) / total * 100,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": [r.to_dict() for r in self.added],
            "removed": [r.to_dict() for r in self.removed],
            "modified": [m.to_dict() for m in self.modified],
            "variation_percentage": self.variation_percentage,
            "baseline_count": self.baseline_count,
            "current_count": self.current_count,
            "field_change_counts": self.field_change_counts(),
        }
