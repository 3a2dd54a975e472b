"""census-diff: reconcile a baseline census spreadsheet against a current one.

The engine entry points are ``parse_table`` (RawTable -> records) and
``compare`` (records x records -> DiffResult).
"""

from census_diff.models import DiffResult, RawTable, Record
from census_diff.services.diff_engine import compare
from census_diff.services.extractor import ParseFailure, parse_table
from census_diff.services.matcher import dates_likely_equal, full_key, name_key

__all__ = [
    "compare",
    "dates_likely_equal",
    "DiffResult",
    "full_key",
    "name_key",
    "parse_table",
    "ParseFailure",
    "RawTable",
    "Record",
]

__version__ = "0.1.0"
