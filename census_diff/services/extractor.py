from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from ..models.config_models import ExtractionConfig
from ..models.raw_table import RawTable, column_letter
from ..models.record import CANONICAL_FIELDS, CanonicalField, Record
from .normalizer import (
    ENROLLMENT_HINTS,
    RELATIONSHIP_HINTS,
    ColumnMapping,
    alias_mapping,
    fuzzy_match,
    infer_from_content,
    normalize_headers,
    passthrough_key,
)

"""Record extractor: turn a RawTable into canonical Records.

Spreadsheets exported by different carriers and HR systems rarely agree on
headers, so extraction runs a fixed list of strategies and keeps the first
result judged VALID (enough rows with both names). When none qualifies the
best non-empty attempt is used. Only when every strategy comes back empty does
``parse_table`` raise ``ParseFailure``.

After a result is chosen, missing relationship / enrollment tier values are
backfilled from hint columns or raw cell vocabularies, else ``"Unknown"``.
"""

__all__ = [
    "ParseFailure",
    "ExtractionOutcome",
    "Strategy",
    "STRATEGIES",
    "extract_header_mapped",
    "extract_auto_header",
    "extract_raw_guess",
    "extract_fuzzy_header",
    "extract_direct_index",
    "detect_header_row",
    "is_valid",
    "valid_ratio",
    "first_acceptable",
    "infer_missing_fields",
    "extract_records",
    "parse_table",
]

logger = logging.getLogger(__name__)

_F = CanonicalField


class ParseFailure(Exception):
    """Raised when no extraction strategy yields a single usable record."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class ExtractionOutcome:
    records: list[Record]
    strategy: str
    valid: bool


Strategy = Callable[[RawTable, ExtractionConfig], list[Record]]

# Content vocabularies for raw positional guessing
_NAME_RE = re.compile(r"^[A-Za-z\s\-']{2,30}$")
_DIGIT_RE = re.compile(r"\d")
_DATE_SEP_RE = re.compile(r"[/\-.]")
GENDER_VALUES = frozenset({"m", "f", "male", "female", "man", "woman"})
RELATIONSHIP_VALUES = frozenset(
    {"employee", "spouse", "dependent", "child", "self", "partner", "family", "subscriber"}
)
TIER_VALUES = frozenset(
    {
        "single",
        "family",
        "employee only",
        "employee + spouse",
        "employee + child",
        "employee + children",
        "full family",
        "employee+family",
    }
)

# Raw cell vocabularies used when backfilling missing fields
_RELATIONSHIP_FILL = frozenset({"subscriber", "spouse", "child", "dependent", "employee", "self"})
_TIER_FILL_FRAGMENTS = ("employee", "family", "single", "spouse", "child", "tier")

# Candidate header names for direct column-index extraction
DIRECT_CANDIDATES: dict[CanonicalField, tuple[str, ...]] = {
    _F.FIRST_NAME: ("first name", "firstname", "first", "given name"),
    _F.LAST_NAME: ("last name", "lastname", "last", "surname", "family name"),
    _F.DOB: ("date of birth", "dob", "birth date", "birthdate", "birth"),
    _F.GENDER: ("gender", "sex"),
    _F.RELATIONSHIP: ("relationship", "relation", "rel", "member type", "type", "status"),
    _F.ENROLLMENT_TIER: ("enrollment tier", "tier", "plan", "coverage", "level", "benefit"),
}


def _empty_values() -> dict[str, str]:
    return {name: "" for name in CANONICAL_FIELDS}


def _build_records(
    table: RawTable,
    mapping: ColumnMapping,
    header_row: int = 0,
    passthrough: dict[int, str] | None = None,
) -> list[Record]:
    """One Record per row below ``header_row``; rows with an empty leading cell are skipped."""
    records: list[Record] = []
    for row in range(header_row + 1, table.n_rows):
        if table.text(row, 0) == "":
            continue
        values = _empty_values()
        if passthrough:
            for col, key in passthrough.items():
                text = table.text(row, col)
                if text and key not in values:
                    values[key] = text
        for col, target in mapping.items():
            values[target.value] = table.text(row, col)
        records.append(Record(values=values, id=str(row - header_row - 1), source_row=row))
    return records


def _passthrough_columns(headers: Sequence[str], mapping: ColumnMapping) -> dict[int, str]:
    out: dict[int, str] = {}
    for col, header in enumerate(headers):
        if col in mapping or not header:
            continue
        key = passthrough_key(header)
        if key and key not in CANONICAL_FIELDS:
            out[col] = key
    return out


def detect_header_row(table: RawTable, scan_rows: int = 10) -> int:
    """Row among the first ``scan_rows`` with the most exact alias hits (0 if none hit)."""
    best_row, best_hits = 0, 0
    for row in range(min(scan_rows, table.n_rows)):
        hits = len(alias_mapping(table.row_texts(row)))
        if hits > best_hits:
            best_row, best_hits = row, hits
    return best_row


# --- strategies -----------------------------------------------------------

def extract_header_mapped(table: RawTable, config: ExtractionConfig) -> list[Record]:
    """Row 0 as header, exact aliases plus the relationship / tier heuristic."""
    if table.n_rows < 2:
        return []
    mapping = normalize_headers(table, 0, fuzzy=False)
    if not mapping:
        logger.debug("header_mapped: no header matched an alias")
        return []
    passthrough = _passthrough_columns(table.header(0), mapping)
    return _build_records(table, mapping, 0, passthrough)


def extract_auto_header(table: RawTable, config: ExtractionConfig) -> list[Record]:
    """Locate the header row positionally and map headers per column index.

    Copes with title rows above the header; columns with a blank header cell
    are ignored.
    """
    header_row = detect_header_row(table, config.header_scan_rows)
    if header_row + 1 >= table.n_rows:
        return []
    headers = table.header(header_row)
    mapping = infer_from_content(table, alias_mapping(headers), header_row=header_row)
    logger.debug(
        "auto_header: header row %d mapping %s",
        header_row,
        {column_letter(c): f.value for c, f in sorted(mapping.items())},
    )
    if not mapping:
        return []
    passthrough = _passthrough_columns(headers, mapping)
    return _build_records(table, mapping, header_row, passthrough)


def _classify_value(value: str, guesses: dict[CanonicalField, int]) -> CanonicalField | None:
    # Branch order matters: a name-shaped token is claimed as a name first.
    lower = value.lower()
    if _F.FIRST_NAME not in guesses and _NAME_RE.match(value):
        return _F.FIRST_NAME
    if _F.LAST_NAME not in guesses and _F.FIRST_NAME in guesses and _NAME_RE.match(value):
        return _F.LAST_NAME
    if _F.DOB not in guesses and _DIGIT_RE.search(value) and _DATE_SEP_RE.search(value):
        return _F.DOB
    if _F.GENDER not in guesses and lower in GENDER_VALUES:
        return _F.GENDER
    if _F.RELATIONSHIP not in guesses and lower in RELATIONSHIP_VALUES:
        return _F.RELATIONSHIP
    if _F.ENROLLMENT_TIER not in guesses and lower in TIER_VALUES:
        return _F.ENROLLMENT_TIER
    return None


def extract_raw_guess(table: RawTable, config: ExtractionConfig) -> list[Record]:
    """Ignore headers; classify columns by the shape of the first data rows' values."""
    guesses: dict[CanonicalField, int] = {}
    last_sample = min(table.n_rows, 1 + config.sample_rows)
    for row in range(1, last_sample):
        for col in range(table.n_cols):
            if col in guesses.values():
                continue
            value = table.text(row, col)
            if not value:
                continue
            target = _classify_value(value, guesses)
            if target is not None:
                guesses[target] = col
        if len(guesses) == len(CANONICAL_FIELDS):
            break
    logger.debug(
        "raw_guess: column guesses %s",
        {f.value: column_letter(c) for f, c in guesses.items()},
    )
    if not guesses:
        return []
    mapping: ColumnMapping = {col: target for target, col in guesses.items()}
    return _build_records(table, mapping, 0)


def extract_fuzzy_header(table: RawTable, config: ExtractionConfig) -> list[Record]:
    """Row 0 as header, every header scored with the fuzzy similarity only."""
    if table.n_rows < 2:
        return []
    mapping: ColumnMapping = {}
    claimed: set[CanonicalField] = set()
    for col, header in enumerate(table.header(0)):
        hit = fuzzy_match(header, threshold=config.fuzzy_threshold)
        if hit is None or hit[0] in claimed:
            continue
        mapping[col] = hit[0]
        claimed.add(hit[0])
    logger.debug("fuzzy_header: mapping %s", {column_letter(c): f.value for c, f in mapping.items()})
    if not mapping:
        return []
    return _build_records(table, mapping, 0)


def _find_column(headers: Sequence[str], candidates: Iterable[str]) -> int:
    lowered = [h.lower() for h in headers]
    for name in candidates:
        for idx, h in enumerate(lowered):
            if h and (h == name or name in h):
                return idx
    return -1


def extract_direct_index(table: RawTable, config: ExtractionConfig) -> list[Record]:
    """Substring search for column indices; needs both name columns to proceed."""
    if table.n_rows < 2:
        return []
    headers = table.header(0)
    indices = {target: _find_column(headers, names) for target, names in DIRECT_CANDIDATES.items()}
    logger.debug("direct_index: column indices %s", {f.value: i for f, i in indices.items()})
    if indices[_F.FIRST_NAME] == -1 or indices[_F.LAST_NAME] == -1:
        logger.debug("direct_index: first / last name columns not found")
        return []

    records: list[Record] = []
    for row in range(1, table.n_rows):
        if table.text(row, 0) == "":
            continue
        values = {
            target.value: (table.text(row, col) if col != -1 else "")
            for target, col in indices.items()
        }
        if values[_F.FIRST_NAME.value] and values[_F.LAST_NAME.value]:
            records.append(Record(values=values, id=str(row - 1), source_row=row))
    return records


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("header_mapped", extract_header_mapped),
    ("auto_header", extract_auto_header),
    ("raw_guess", extract_raw_guess),
    ("fuzzy_header", extract_fuzzy_header),
    ("direct_index", extract_direct_index),
)


# --- validation / selection ---------------------------------------------

def valid_ratio(records: Sequence[Record]) -> float:
    if not records:
        return 0.0
    return sum(1 for r in records if r.has_names()) / len(records)


def is_valid(records: Sequence[Record], threshold: float = 0.7) -> bool:
    """VALID: non-empty and at least ``threshold`` of records carry both names."""
    return bool(records) and valid_ratio(records) >= threshold


def first_acceptable(
    strategies: Iterable[tuple[str, Strategy]],
    table: RawTable,
    config: ExtractionConfig,
    accept: Callable[[list[Record]], bool],
    on_result: Callable[[str, list[Record]], None] | None = None,
    log: logging.Logger | None = None,
) -> tuple[str, list[Record]] | None:
    """Run strategies in order; return the first (name, records) that ``accept`` approves."""
    log = log or logger
    for name, strategy in strategies:
        records = strategy(table, config)
        log.debug("strategy %s produced %d records", name, len(records))
        if on_result is not None:
            on_result(name, records)
        if accept(records):
            return name, records
    return None


# --- backfill -------------------------------------------------------------

def _hint_columns(headers: Sequence[str], hints: Sequence[str]) -> list[int]:
    return [c for c, h in enumerate(headers) if h and any(hint in h.lower() for hint in hints)]


def _from_columns(table: RawTable, row: int, cols: Sequence[int], used: set[str]) -> str:
    for col in cols:
        text = table.text(row, col)
        if text and text.lower() not in used:
            return text
    return ""


def _scan_row(table: RawTable, row: int, match: Callable[[str], bool], used: set[str]) -> str:
    for col in range(table.n_cols):
        text = table.text(row, col)
        if text and text.lower() not in used and match(text.lower()):
            return text
    return ""


def infer_missing_fields(
    table: RawTable,
    records: Sequence[Record],
    default_fill: str = "Unknown",
    header_row: int = 0,
    log: logging.Logger | None = None,
) -> list[Record]:
    """Backfill empty relationship / enrollment tier values.

    Per record: first a non-empty cell under a header hinting at the field,
    then any raw cell of the row matching the field's vocabulary, finally
    ``default_fill``. Values the record already uses for another canonical
    field are never reused.
    """
    log = log or logger
    headers = table.header(header_row)
    rel_cols = _hint_columns(headers, RELATIONSHIP_HINTS)
    tier_cols = _hint_columns(headers, ENROLLMENT_HINTS)
    log.debug(
        "inferring from relationship columns %s, tier columns %s",
        [headers[c] for c in rel_cols],
        [headers[c] for c in tier_cols],
    )

    out: list[Record] = []
    for rec in records:
        relationship = rec.relationship
        tier = rec.enrollment_tier
        row = rec.source_row
        if row is not None and (not relationship or not tier):
            used = {v.lower() for v in rec.canonical().values() if v}
            if not relationship:
                relationship = _from_columns(table, row, rel_cols, used) or _scan_row(
                    table, row, lambda v: v in _RELATIONSHIP_FILL, used
                )
                if relationship:
                    used.add(relationship.lower())
            if not tier:
                tier = _from_columns(table, row, tier_cols, used) or _scan_row(
                    table, row, lambda v: any(f in v for f in _TIER_FILL_FRAGMENTS), used
                )
        out.append(
            rec.replace(
                relationship=relationship or default_fill,
                enrollment_tier=tier or default_fill,
            )
        )
    return out


def _needs_inference(records: Sequence[Record]) -> bool:
    return all(not r.relationship for r in records) or all(not r.enrollment_tier for r in records)


# --- entry points ---------------------------------------------------------

def extract_records(
    table: RawTable,
    config: ExtractionConfig | None = None,
    strategies: Sequence[tuple[str, Strategy]] = STRATEGIES,
    log: logging.Logger | None = None,
) -> ExtractionOutcome:
    """Run the strategy chain and report which strategy produced the records.

    ``log`` receives the chain-level diagnostics (per-strategy counts, the
    best-effort warning, backfill); it defaults to this module's logger.

    Raises:
        ParseFailure: the table is empty or every strategy yields zero records
    """
    log = log or logger
    cfg = config or ExtractionConfig()
    if table.n_rows == 0 or table.is_empty():
        raise ParseFailure(f"sheet {table.sheet_name or '<unnamed>'} has no data")

    attempts: list[tuple[str, list[Record]]] = []
    hit = first_acceptable(
        strategies,
        table,
        cfg,
        accept=lambda recs: is_valid(recs, cfg.validity_threshold),
        on_result=lambda name, recs: attempts.append((name, recs)),
        log=log,
    )
    if hit is not None:
        name, records = hit
        valid = True
    else:
        non_empty = [(n, r) for n, r in attempts if r]
        if not non_empty:
            raise ParseFailure("no extraction strategy produced any records")
        # max() keeps the earliest strategy on equal ratios
        name, records = max(non_empty, key=lambda a: valid_ratio(a[1]))
        valid = False
        log.warning(
            "no strategy met the validity threshold; using best effort %s (%d records, %.0f%% named)",
            name,
            len(records),
            valid_ratio(records) * 100,
        )

    if _needs_inference(records):
        log.debug("relationship or enrollment tier missing for every record, inferring")
        header_row = detect_header_row(table, cfg.header_scan_rows)
        records = infer_missing_fields(table, records, cfg.default_fill, header_row=header_row, log=log)

    log.debug("extracted %d records with %s (valid=%s)", len(records), name, valid)
    return ExtractionOutcome(records=records, strategy=name, valid=valid)


def parse_table(
    table: RawTable,
    config: ExtractionConfig | None = None,
    log: logging.Logger | None = None,
) -> list[Record]:
    """Extract canonical Records from a RawTable.

    Raises:
        ParseFailure: when every strategy yields zero usable records
    """
    return extract_records(table, config, log=log).records
