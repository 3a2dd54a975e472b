"""Domain models for census-diff.

Raw input grid, extracted records, diff results, configuration and error
records shared by the engine, the spreadsheet collaborators and the CLI.
"""

from .config_models import AppConfig, ExportConfig, ExtractionConfig
from .diff_result import DiffResult, FieldDelta, ModifiedRecord, variation_percentage
from .error_record import ErrorRecord
from .raw_table import RawTable
from .record import CANONICAL_FIELDS, CanonicalField, Record

__all__ = [
    # Configuration models
    "AppConfig",
    "ExportConfig",
    "ExtractionConfig",
    # Input models
    "RawTable",
    "CanonicalField",
    "CANONICAL_FIELDS",
    "Record",
    # Output models
    "DiffResult",
    "FieldDelta",
    "ModifiedRecord",
    "variation_percentage",
    "ErrorRecord",
]
