from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Record model for census-diff.

A Record is one person row after extraction: the six canonical fields plus any
passthrough columns, all as trimmed strings. Dates and numbers are never
coerced; comparison downstream is string based.
"""

__all__ = [
    "CanonicalField",
    "CANONICAL_FIELDS",
    "Record",
]


class CanonicalField(str, Enum):
    """Closed set of standardized attributes every Record carries.

    Extending this set means updating the alias tables and the content
    heuristics in services.normalizer / services.extractor together.
    """
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    DOB = "dob"
    GENDER = "gender"
    RELATIONSHIP = "relationship"
    ENROLLMENT_TIER = "enrollment_tier"


# Comparison / export order
CANONICAL_FIELDS: tuple[str, ...] = tuple(f.value for f in CanonicalField)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class Record:
    """One extracted row.

    ``values`` always holds every canonical key (default ``""``) plus
    passthrough keys. ``id`` is the positional id assigned at extraction and
    ``source_row`` the 0-based row index inside the RawTable it came from.
    """
    values: dict[str, str] = field(default_factory=dict)
    id: str | None = None
    source_row: int | None = None

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], id: str | None = None, source_row: int | None = None
    ) -> Record:
        values = {name: "" for name in CANONICAL_FIELDS}
        for key, val in mapping.items():
            name = key.value if isinstance(key, CanonicalField) else str(key)
            values[name] = _as_text(val)
        return cls(values=values, id=id, source_row=source_row)

    def get(self, key: str | CanonicalField, default: str = "") -> str:
        name = key.value if isinstance(key, CanonicalField) else key
        return self.values.get(name, default)

    def __getitem__(self, key: str | CanonicalField) -> str:
        name = key.value if isinstance(key, CanonicalField) else key
        return self.values[name]

    @property
    def first_name(self) -> str:
        return self.get(CanonicalField.FIRST_NAME)

    @property
    def last_name(self) -> str:
        return self.get(CanonicalField.LAST_NAME)

    @property
    def dob(self) -> str:
        return self.get(CanonicalField.DOB)

    @property
    def gender(self) -> str:
        return self.get(CanonicalField.GENDER)

    @property
    def relationship(self) -> str:
        return self.get(CanonicalField.RELATIONSHIP)

    @property
    def enrollment_tier(self) -> str:
        return self.get(CanonicalField.ENROLLMENT_TIER)

    def has_names(self) -> bool:
        return bool(self.first_name) and bool(self.last_name)

    def canonical(self) -> dict[str, str]:
        return {name: self.values.get(name, "") for name in CANONICAL_FIELDS}

    def passthrough(self) -> dict[str, str]:
        return {k: v for k, v in self.values.items() if k not in CANONICAL_FIELDS}

    def __hash__(self) -> int:
        # values is a dict, hash its items
        return hash((frozenset(self.values.items()), self.id, self.source_row))

    def replace(self, **updates: str) -> Record:
        """Return a copy with the given keys overwritten (values trimmed)."""
        values = dict(self.values)
        for key, val in updates.items():
            values[key] = _as_text(val)
        return Record(values=values, id=self.id, source_row=self.source_row)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.values)
        if self.id is not None:
            data["id"] = self.id
        return data
