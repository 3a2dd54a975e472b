from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.diff_result import DiffResult, FieldDelta, ModifiedRecord, variation_percentage
from ..models.record import CANONICAL_FIELDS, CanonicalField, Record
from .matcher import dates_likely_equal, full_key, name_key

"""Diff engine: reconcile a baseline record set against a current one.

Two passes over the current records, order sensitive:

1. exact full-key match (first + last name + dob) against the baseline map;
   the baseline entry is consumed whether or not any field changed.
2. name-only fallback for current records not resolved in pass 1; the first
   unconsumed baseline entry with the same name is consumed, dob compared
   with ``dates_likely_equal`` so a reformatted date is not a change.

Whatever is left over is added (current side) or removed (baseline side).
"""

__all__ = [
    "compare",
    "field_differences",
]

logger = logging.getLogger(__name__)

_DOB = CanonicalField.DOB.value


def _norm(value: str) -> str:
    return (value or "").strip().lower()


def field_differences(
    baseline: Record, current: Record, *, tolerant_dob: bool = False
) -> dict[str, FieldDelta]:
    """Field-level deltas over the six canonical fields.

    A field differs when both sides are non-empty and unequal ignoring case and
    surrounding whitespace. With ``tolerant_dob`` the dob field instead differs
    whenever the two values are not ``dates_likely_equal`` (so an empty dob
    against a filled one counts as a change).
    """
    deltas: dict[str, FieldDelta] = {}
    for name in CANONICAL_FIELDS:
        b = _norm(baseline.get(name))
        c = _norm(current.get(name))
        if name == _DOB and tolerant_dob:
            changed = b != c and not dates_likely_equal(b, c)
        else:
            changed = b != c and bool(b) and bool(c)
        if changed:
            deltas[name] = FieldDelta(baseline=baseline.get(name), current=current.get(name))
    return deltas


def compare(
    baseline: Sequence[Record],
    current: Sequence[Record],
    log: logging.Logger | None = None,
) -> DiffResult:
    """Classify current records against baseline records.

    Never raises. A current record without a name key is ``added``; one with
    names but no full key is left out of every category. Baseline records
    without a full key are not tracked and so never show up as removed.

    Args:
        baseline: source-of-truth records (census)
        current: new snapshot records (enrollment)
        log: diagnostics sink, defaults to this module's logger

    Returns:
        DiffResult with added / removed / modified and the variation percentage
    """
    log = log or logger
    log.debug("comparing baseline=%d current=%d", len(baseline), len(current))

    # Last write wins on duplicate keys; dict keeps first insertion position.
    baseline_map: dict[str, Record] = {}
    for rec in baseline:
        key = full_key(rec)
        if key is None:
            log.debug("baseline record id=%s has no full key, not tracked", rec.id)
            continue
        baseline_map[key] = rec

    by_name: dict[str, list[str]] = {}
    for key, rec in baseline_map.items():
        nkey = name_key(rec)
        if nkey is not None:
            by_name.setdefault(nkey, []).append(key)

    consumed: set[str] = set()
    resolved: set[int] = set()
    added: list[Record] = []
    modified: list[ModifiedRecord] = []

    # Pass 1: exact identity
    for idx, rec in enumerate(current):
        key = full_key(rec)
        if key is None or key not in baseline_map:
            continue
        base = baseline_map[key]
        deltas = field_differences(base, rec)
        if deltas:
            log.debug("modified (exact key) %s fields=%s", key, sorted(deltas))
            modified.append(ModifiedRecord(baseline=base, current=rec, differences=deltas))
        consumed.add(key)
        resolved.add(idx)

    # Pass 2: same name, possibly different or reformatted dob
    for idx, rec in enumerate(current):
        if idx in resolved:
            continue
        key = full_key(rec)
        nkey = name_key(rec)
        if nkey is None:
            log.debug("current record id=%s has no name key, classified as added", rec.id)
            added.append(rec)
            continue
        if key is None:
            # named but undated: not matchable, not added
            log.debug("current record id=%s has no full key, left unclassified", rec.id)
            continue
        match_key = next((k for k in by_name.get(nkey, ()) if k not in consumed), None)
        if match_key is None:
            log.debug("added %s", key)
            added.append(rec)
            continue
        consumed.add(match_key)
        base = baseline_map[match_key]
        deltas = field_differences(base, rec, tolerant_dob=True)
        if deltas:
            log.debug("modified (name only) %s fields=%s", nkey, sorted(deltas))
            modified.append(ModifiedRecord(baseline=base, current=rec, differences=deltas))

    removed: list[Record] = []
    for rec in baseline:
        key = full_key(rec)
        if key is not None and key not in consumed:
            log.debug("removed %s", key)
            removed.append(rec)

    pct = variation_percentage(len(added), len(removed), len(modified), len(baseline))
    log.debug(
        "comparison done added=%d removed=%d modified=%d variation=%.2f",
        len(added),
        len(removed),
        len(modified),
        pct,
    )
    return DiffResult(
        added=tuple(added),
        removed=tuple(removed),
        modified=tuple(modified),
        variation_percentage=pct,
        baseline_count=len(baseline),
        current_count=len(current),
    )
