#!/usr/bin/env python3
"""Sample census generator for manual and performance runs.

Writes a baseline and a current workbook describing the same population
with deliberately different spreadsheet conventions:

- baseline: plain header row ("First Name", "Last Name", "Date of Birth", ...)
- current: a title row above the header, other header names ("DOB",
  "Member Type", "Plan Type"), reordered columns and dates as MM/DD/YYYY

A share of people is changed (enrollment tier, gender), added and removed, so
comparing the two files yields a known mix of differences.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

FIRST_NAMES = [
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "David", "Elizabeth", "William", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas",
]
RELATIONSHIPS = ["Employee", "Spouse", "Child"]
TIERS = ["Single", "Family", "Employee + Spouse", "Employee + Child"]


def generate_population(rows: int, seed: int = 42) -> pd.DataFrame:
    """Baseline population with unique first/last/dob combinations."""
    rng = np.random.default_rng(seed)
    start = pd.Timestamp("1950-01-01")
    people: list[dict[str, Any]] = []
    seen: set[tuple[str, str, str]] = set()
    while len(people) < rows:
        first = FIRST_NAMES[rng.integers(len(FIRST_NAMES))]
        # suffix keeps names unique for large populations
        last = f"{LAST_NAMES[rng.integers(len(LAST_NAMES))]}{len(people) // len(LAST_NAMES) or ''}"
        dob = (start + pd.Timedelta(days=int(rng.integers(0, 20000)))).strftime("%Y-%m-%d")
        if (first, last, dob) in seen:
            continue
        seen.add((first, last, dob))
        people.append(
            {
                "First Name": first,
                "Last Name": last,
                "Date of Birth": dob,
                "Gender": rng.choice(["M", "F"]),
                "Relationship": rng.choice(RELATIONSHIPS),
                "Enrollment Tier": rng.choice(TIERS),
            }
        )
    return pd.DataFrame(people)


def derive_current(baseline: pd.DataFrame, change_rate: float, seed: int = 42) -> pd.DataFrame:
    """Apply tier / gender changes, drop some people and add new ones."""
    rng = np.random.default_rng(seed + 1)
    current = baseline.copy()
    n = len(current)
    n_changes = int(n * change_rate)

    changed = rng.choice(n, size=n_changes, replace=False) if n_changes else np.array([], dtype=int)
    for idx in changed:
        tier = current.at[idx, "Enrollment Tier"]
        current.at[idx, "Enrollment Tier"] = next(t for t in TIERS if t != tier)

    removed = rng.choice(n, size=n_changes // 2, replace=False) if n_changes else np.array([], dtype=int)
    current = current.drop(index=removed).reset_index(drop=True)

    added = generate_population(max(n_changes // 2, 0), seed=seed + 2)
    added["Last Name"] = added["Last Name"] + "-New"
    current = pd.concat([current, added], ignore_index=True)

    current["Date of Birth"] = pd.to_datetime(current["Date of Birth"]).dt.strftime("%m/%d/%Y")
    return current.rename(
        columns={"Date of Birth": "DOB", "Relationship": "Member Type", "Enrollment Tier": "Plan Type"}
    )[["Last Name", "First Name", "DOB", "Gender", "Plan Type", "Member Type"]]


def write_workbook(df: pd.DataFrame, path: Path, title: str | None = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    sheet_rows: list[list[Any]] = []
    if title:
        sheet_rows.append([title] + [""] * (len(df.columns) - 1))
    sheet_rows.append(df.columns.tolist())
    sheet_rows.extend(df.values.tolist())
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(sheet_rows).to_excel(writer, sheet_name="Census", header=False, index=False)
    print(f"Created {path} ({len(df)} people)")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a baseline/current census workbook pair")
    parser.add_argument("output_dir", type=Path, help="Directory for baseline.xlsx and current.xlsx")
    parser.add_argument("--rows", type=int, default=1_000, help="Baseline population size (default: 1,000)")
    parser.add_argument("--change-rate", type=float, default=0.1, help="Share of people changed (default: 0.1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.change_rate <= 1:
        print("Error: --change-rate must be between 0 and 1", file=sys.stderr)
        return 1

    baseline = generate_population(args.rows, args.seed)
    current = derive_current(baseline, args.change_rate, args.seed)
    write_workbook(baseline, args.output_dir / "baseline.xlsx")
    write_workbook(current, args.output_dir / "current.xlsx", title="Enrollment Export")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
