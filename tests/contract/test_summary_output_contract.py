from __future__ import annotations

import re

from census_diff.models.diff_result import DiffResult
from census_diff.services.diff_engine import compare
from census_diff.services.summary import render_summary_line

"""SUMMARY line format contract.

SUMMARY baseline=<n> current=<m> added=<a> removed=<r> modified=<k> variation_pct=<p>
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+baseline=([0-9]+)\s+current=([0-9]+)\s+added=([0-9]+)\s+"
    r"removed=([0-9]+)\s+modified=([0-9]+)\s+variation_pct=([0-9]+\.[0-9]{2})$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY baseline=4 current=4 added=1 removed=1 modified=1 variation_pct=75.00"
    assert SUMMARY_PATTERN.match(line), "SUMMARY line should match contract regex"


def test_summary_pattern_rejects_missing_field():
    line = "SUMMARY baseline=4 current=4 added=1 removed=1 variation_pct=75.00"
    assert SUMMARY_PATTERN.match(line) is None


def test_rendered_line_matches_contract(jane, record_factory):
    tom = record_factory(first_name="Tom", last_name="Lee", dob="2010-07-30")
    result = compare([jane, tom], [jane.replace(enrollment_tier="Family")])
    m = SUMMARY_PATTERN.match(render_summary_line(result))
    assert m
    baseline, current, added, removed, modified, pct = m.groups()
    assert (baseline, current, added, removed, modified) == ("2", "1", "0", "1", "1")
    assert pct == "100.00"


def test_rendered_empty_line_matches_contract():
    assert SUMMARY_PATTERN.match(render_summary_line(DiffResult()))
