from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from census_diff.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from census_diff.excel.report import default_report_name, write_report
from census_diff.logging.error_log import ErrorLogBuffer
from census_diff.logging.init import log_summary, setup_logging
from census_diff.services.orchestrator import LoadedFile, ProcessingError, run_comparison
from census_diff.services.summary import render_field_changes, render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (--config, $CENSUS_DIFF_CONFIG or
  config/census_diff.yml when present; built-in defaults otherwise)
- Read and parse the baseline and current files, compare them
- Log per-category counts and the SUMMARY line, optionally print JSON and
  export the styled variance workbook
"""

EXIT_NO_DIFFERENCES = 0
EXIT_FATAL = 1
EXIT_DIFFERENCES = 2

CONFIG_ENV_VAR = "CENSUS_DIFF_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="census-diff",
        description="Reconcile a baseline census spreadsheet against a current enrollment spreadsheet",
    )
    p.add_argument("baseline", type=Path, help="Baseline (census) spreadsheet")
    p.add_argument("current", type=Path, help="Current (enrollment) spreadsheet")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument(
        "--export",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Write the variance workbook (default name from config when PATH is omitted)",
    )
    p.add_argument("--json", action="store_true", help="Print the diff result as JSON")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config_path(arg: Path | None) -> Path | None:
    if arg is not None:
        return arg
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def _describe(role: str, loaded: LoadedFile) -> str:
    return (
        f"{role}: {loaded.path.name} sheet={loaded.sheet_name} "
        f"records={len(loaded.records)} strategy={loaded.strategy}"
    )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest flags)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))

    try:
        cfg = load_config(_resolve_config_path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(Path(cfg.log_directory))
    try:
        run = run_comparison(args.baseline, args.current, cfg, error_log=error_log)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        counts = " ".join(f"{k}={v}" for k, v in sorted(error_log.counts().items()))
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path} ({counts})")
        return EXIT_FATAL

    for role, loaded in (("baseline", run.baseline), ("current", run.current)):
        logger.info(_describe(role, loaded))
        if not loaded.valid:
            logger.warning(f"{role}: low-confidence extraction, results are best effort")

    result = run.result
    logger.info(f"added={len(result.added)} removed={len(result.removed)} modified={len(result.modified)}")
    logger.info(f"field changes: {render_field_changes(result)}")

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    if args.export is not None:
        if args.export:
            report_path = Path(args.export)
        else:
            report_path = Path(cfg.export.directory) / default_report_name(cfg.export.filename_template)
        try:
            write_report(result, report_path, sheet_name=cfg.export.sheet_name)
        except OSError as e:
            logger.error(f"export: {e}")
            return EXIT_FATAL
        logger.info(f"report written: {report_path}")

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.is_empty():
        return EXIT_NO_DIFFERENCES
    return EXIT_DIFFERENCES


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
