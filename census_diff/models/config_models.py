from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for census-diff.

Defaults carry the engine constants, so running without a config file behaves
exactly like the built-in heuristics. The YAML loader in
census_diff/config/loader.py only overrides what the file sets.
"""

__all__ = [
    "ExtractionConfig",
    "ExportConfig",
    "AppConfig",
]


@dataclass(frozen=True)
class ExtractionConfig:
    """Knobs for the record extractor and schema normalizer."""
    validity_threshold: float = 0.7  # share of records that need both names
    sample_rows: int = 5  # data rows inspected by raw positional guessing
    header_scan_rows: int = 10  # leading rows searched for an offset header
    fuzzy_threshold: float = 0.5  # minimum similarity to accept a fuzzy header match
    default_fill: str = "Unknown"  # relationship / enrollment tier when nothing can be inferred
    keep_na_strings: bool = True  # keep "NA", "N/A", ... as literal text when reading


@dataclass(frozen=True)
class ExportConfig:
    """Variance report export settings."""
    directory: str = "./reports"
    filename_template: str = "variance_analysis_{date}.xlsx"
    sheet_name: str = "Variance Analysis"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log_directory: str = "./logs"
