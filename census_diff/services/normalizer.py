from __future__ import annotations

import logging
import re

from ..models.raw_table import RawTable
from ..models.record import CanonicalField

"""Schema normalizer: map spreadsheet headers onto canonical fields.

Escalating chain, each step only looks at what the previous one left
unmapped:

1. exact alias lookup (``COLUMN_ALIASES``)
2. heuristic content inference for relationship / enrollment tier, only when
   those two are missing while other fields did map
3. fuzzy similarity against ``FUZZY_ALIASES`` (score >= threshold)

A canonical field is claimed by at most one column; the leftmost wins.
"""

__all__ = [
    "ColumnMapping",
    "COLUMN_ALIASES",
    "FUZZY_ALIASES",
    "RELATIONSHIP_HINTS",
    "ENROLLMENT_HINTS",
    "match_alias",
    "alias_mapping",
    "similarity",
    "fuzzy_match",
    "infer_from_content",
    "normalize_headers",
    "passthrough_key",
]

logger = logging.getLogger(__name__)

# column index -> canonical field
ColumnMapping = dict[int, CanonicalField]

_F = CanonicalField

COLUMN_ALIASES: dict[str, CanonicalField] = {
    # first name
    "First Name": _F.FIRST_NAME,
    "FirstName": _F.FIRST_NAME,
    "first name": _F.FIRST_NAME,
    "firstname": _F.FIRST_NAME,
    "first_name": _F.FIRST_NAME,
    "First": _F.FIRST_NAME,
    "FIRST NAME": _F.FIRST_NAME,
    "FIRSTNAME": _F.FIRST_NAME,
    "First name": _F.FIRST_NAME,
    "Given Name": _F.FIRST_NAME,
    # last name
    "Last Name": _F.LAST_NAME,
    "LastName": _F.LAST_NAME,
    "last name": _F.LAST_NAME,
    "lastname": _F.LAST_NAME,
    "last_name": _F.LAST_NAME,
    "Last": _F.LAST_NAME,
    "LAST NAME": _F.LAST_NAME,
    "LASTNAME": _F.LAST_NAME,
    "Last name": _F.LAST_NAME,
    "Surname": _F.LAST_NAME,
    # date of birth
    "Date of Birth": _F.DOB,
    "DateOfBirth": _F.DOB,
    "DOB": _F.DOB,
    "dob": _F.DOB,
    "date_of_birth": _F.DOB,
    "Birth Date": _F.DOB,
    "birthdate": _F.DOB,
    "Birthdate": _F.DOB,
    "Birth": _F.DOB,
    "Date": _F.DOB,
    "DATE OF BIRTH": _F.DOB,
    "BIRTH DATE": _F.DOB,
    "Date of birth": _F.DOB,
    # gender
    "Gender": _F.GENDER,
    "gender": _F.GENDER,
    "sex": _F.GENDER,
    "Sex": _F.GENDER,
    "GENDER": _F.GENDER,
    "SEX": _F.GENDER,
    # relationship
    "Relationship": _F.RELATIONSHIP,
    "relationship": _F.RELATIONSHIP,
    "relation": _F.RELATIONSHIP,
    "Relation": _F.RELATIONSHIP,
    "RelationshipType": _F.RELATIONSHIP,
    "Relationship Type": _F.RELATIONSHIP,
    "Type": _F.RELATIONSHIP,
    "RELATIONSHIP": _F.RELATIONSHIP,
    "RELATION": _F.RELATIONSHIP,
    "Relationship type": _F.RELATIONSHIP,
    "Rel": _F.RELATIONSHIP,
    "REL": _F.RELATIONSHIP,
    "Rel Type": _F.RELATIONSHIP,
    "Rel Status": _F.RELATIONSHIP,
    "Status": _F.RELATIONSHIP,
    "Member Type": _F.RELATIONSHIP,
    "MemberType": _F.RELATIONSHIP,
    "Member": _F.RELATIONSHIP,
    "Subscriber": _F.RELATIONSHIP,
    "Spouse": _F.RELATIONSHIP,
    "Child": _F.RELATIONSHIP,
    "Dependent": _F.RELATIONSHIP,
    # enrollment tier
    "Enrollment Tier": _F.ENROLLMENT_TIER,
    "EnrollmentTier": _F.ENROLLMENT_TIER,
    "Tier": _F.ENROLLMENT_TIER,
    "tier": _F.ENROLLMENT_TIER,
    "enrollment tier": _F.ENROLLMENT_TIER,
    "enrollment_tier": _F.ENROLLMENT_TIER,
    "Plan": _F.ENROLLMENT_TIER,
    "plan": _F.ENROLLMENT_TIER,
    "Coverage": _F.ENROLLMENT_TIER,
    "coverage": _F.ENROLLMENT_TIER,
    "Level": _F.ENROLLMENT_TIER,
    "level": _F.ENROLLMENT_TIER,
    "ENROLLMENT TIER": _F.ENROLLMENT_TIER,
    "TIER": _F.ENROLLMENT_TIER,
    "PLAN": _F.ENROLLMENT_TIER,
    "Plan Type": _F.ENROLLMENT_TIER,
    "PlanType": _F.ENROLLMENT_TIER,
    "Coverage Type": _F.ENROLLMENT_TIER,
    "CoverageType": _F.ENROLLMENT_TIER,
    "Benefit": _F.ENROLLMENT_TIER,
    "Benefit Plan": _F.ENROLLMENT_TIER,
    "BenefitPlan": _F.ENROLLMENT_TIER,
    "Medical Plan": _F.ENROLLMENT_TIER,
    "MedicalPlan": _F.ENROLLMENT_TIER,
    "Insurance": _F.ENROLLMENT_TIER,
    "Insurance Plan": _F.ENROLLMENT_TIER,
}

# Lower-case aliases scored by ``similarity``; dict order is the tie-break order.
FUZZY_ALIASES: dict[CanonicalField, tuple[str, ...]] = {
    _F.FIRST_NAME: ("first name", "firstname", "first"),
    _F.LAST_NAME: ("last name", "lastname", "last"),
    _F.DOB: ("date of birth", "birth date", "birthdate", "birth", "date"),
    _F.GENDER: ("gender", "sex"),
    _F.RELATIONSHIP: (
        "relationship", "relation", "type", "member type", "status",
        "subscriber", "spouse", "child", "dependent",
    ),
    _F.ENROLLMENT_TIER: (
        "enrollment tier", "tier", "plan", "coverage", "level", "benefit", "insurance",
    ),
}

# Header substrings that suggest a column holds the field
RELATIONSHIP_HINTS: tuple[str, ...] = (
    "rel", "type", "member", "status", "subscriber", "spouse", "child", "dependent",
)
ENROLLMENT_HINTS: tuple[str, ...] = (
    "plan", "tier", "coverage", "level", "benefit", "insurance", "medical",
)

_WS = re.compile(r"\s+")


def passthrough_key(header: str) -> str:
    """Key used for a non-canonical column: lower-cased, whitespace removed."""
    return _WS.sub("", header).lower()


def match_alias(header: str) -> CanonicalField | None:
    return COLUMN_ALIASES.get(header.strip())


def alias_mapping(headers: list[str]) -> ColumnMapping:
    """Exact alias step only; leftmost column wins each field."""
    mapping: ColumnMapping = {}
    claimed: set[CanonicalField] = set()
    for col, header in enumerate(headers):
        target = match_alias(header) if header else None
        if target is None or target in claimed:
            continue
        mapping[col] = target
        claimed.add(target)
    return mapping


def similarity(s1: str, s2: str) -> float:
    """Cheap header similarity score in {0, 0.5, 0.7, 0.8, 1.0}.

    exact (case-insensitive) 1.0, one contains the other 0.8, a shared word
    longer than two characters 0.7, any shared 3-character substring 0.5.
    """
    a = s1.lower()
    b = s2.lower()
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.8
    words_b = set(b.split())
    for w in a.split():
        if len(w) > 2 and w in words_b:
            return 0.7
    for i in range(len(a) - 2):
        if a[i:i + 3] in b:
            return 0.5
    return 0.0


def fuzzy_match(header: str, threshold: float = 0.5) -> tuple[CanonicalField, float] | None:
    """Best scoring canonical field for a header, or None below ``threshold``."""
    text = header.strip()
    if not text:
        return None
    best: CanonicalField | None = None
    best_score = 0.0
    for target, aliases in FUZZY_ALIASES.items():
        for alias in aliases:
            score = similarity(text, alias)
            if score > best_score:
                best, best_score = target, score
    if best is None or best_score < threshold:
        return None
    return best, best_score


def _hint_fields(header: str) -> list[CanonicalField]:
    lower = header.lower()
    found: list[CanonicalField] = []
    if any(h in lower for h in RELATIONSHIP_HINTS):
        found.append(_F.RELATIONSHIP)
    if any(h in lower for h in ENROLLMENT_HINTS):
        found.append(_F.ENROLLMENT_TIER)
    return found


def infer_from_content(
    table: RawTable, mapping: ColumnMapping, header_row: int = 0
) -> ColumnMapping:
    """Heuristic fallback for relationship / enrollment tier columns.

    Runs only when at least one other field mapped and one of the two is still
    missing. The first unmapped header carrying a hint substring whose data
    cells are not all empty is taken for the field.
    """
    claimed = set(mapping.values())
    missing = [f for f in (_F.RELATIONSHIP, _F.ENROLLMENT_TIER) if f not in claimed]
    others = claimed - {_F.RELATIONSHIP, _F.ENROLLMENT_TIER}
    if not missing or not others:
        return dict(mapping)

    result = dict(mapping)
    headers = table.header(header_row)
    for target in missing:
        for col, header in enumerate(headers):
            if col in result or not header:
                continue
            if target not in _hint_fields(header):
                continue
            if not table.column_has_data(col, start_row=header_row + 1):
                continue
            logger.debug("inferred %s from header %r (column %d)", target.value, header, col)
            result[col] = target
            break
    return result


def normalize_headers(
    table: RawTable,
    header_row: int = 0,
    *,
    fuzzy: bool = True,
    fuzzy_threshold: float = 0.5,
) -> ColumnMapping:
    """Map raw column indices to canonical fields using the escalating chain.

    Pure function of the header row (and, for the heuristic step, of whether
    candidate columns hold any data).
    """
    headers = table.header(header_row)
    mapping = alias_mapping(headers)
    mapping = infer_from_content(table, mapping, header_row=header_row)
    if fuzzy:
        claimed = set(mapping.values())
        for col, header in enumerate(headers):
            if col in mapping:
                continue
            hit = fuzzy_match(header, threshold=fuzzy_threshold)
            if hit is None or hit[0] in claimed:
                continue
            logger.debug("fuzzy header %r -> %s (score=%.1f)", header, hit[0].value, hit[1])
            mapping[col] = hit[0]
            claimed.add(hit[0])
    logger.debug(
        "header mapping %s",
        {headers[c]: f.value for c, f in sorted(mapping.items())},
    )
    return mapping
