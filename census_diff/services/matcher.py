from __future__ import annotations

import re

from ..models.record import Record

"""Identity matching helpers.

Records are paired across the baseline and current sets by a full identity
key (first name + last name + date of birth) and, as a fallback, by a
name-only key. Keys are not unique across a dataset; callers resolve
collisions with first-match-wins / last-write-wins semantics.
"""

__all__ = [
    "full_key",
    "name_key",
    "dates_likely_equal",
]

_DIGIT_RUN = re.compile(r"\d+")


def full_key(record: Record) -> str | None:
    """``first_last_dob`` (names lower-cased, all parts trimmed) or None if any part is empty."""
    first = record.first_name.strip().lower()
    last = record.last_name.strip().lower()
    dob = record.dob.strip()
    if not first or not last or not dob:
        return None
    return f"{first}_{last}_{dob}"


def name_key(record: Record) -> str | None:
    """``first_last`` (lower-cased, trimmed) or None if either name is empty."""
    first = record.first_name.strip().lower()
    last = record.last_name.strip().lower()
    if not first or not last:
        return None
    return f"{first}_{last}"


def dates_likely_equal(d1: str, d2: str) -> bool:
    """True when two date strings carry the same numbers in any order.

    Tolerates reordered day/month/year and different separators
    ("01/02/2020" vs "02-01-2020"), never different numeric content.
    """
    if d1 == d2:
        return True
    nums1 = _DIGIT_RUN.findall(d1)
    nums2 = _DIGIT_RUN.findall(d2)
    if not nums1 or not nums2 or len(nums1) != len(nums2):
        return False
    return sorted(nums1) == sorted(nums2)
