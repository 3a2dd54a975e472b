from __future__ import annotations

import json
from pathlib import Path

import pytest

from census_diff.cli.__main__ import CONFIG_ENV_VAR, main as cli_main
from census_diff.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handler binds to the stdout captured for each test
    reset_logging()
    yield
    reset_logging()


def _json_block(out: str) -> dict:
    lines = out.splitlines()
    start = lines.index("{")
    end = lines.index("}", start)
    return json.loads("\n".join(lines[start:end + 1]))


def test_cli_no_differences(census_files, capsys):
    baseline, _ = census_files
    code = cli_main([str(baseline), str(baseline)])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY baseline=4 current=4 added=0 removed=0 modified=0 variation_pct=0.00" in out
    assert "INFO field changes: none" in out


def test_cli_differences(census_files, capsys):
    baseline, current = census_files
    code = cli_main([str(baseline), str(current)])
    out = capsys.readouterr().out
    assert code == 2
    assert "INFO baseline: baseline.xlsx sheet=Sheet1 records=4 strategy=header_mapped" in out
    assert "INFO current: current.xlsx sheet=Sheet1 records=4 strategy=auto_header" in out
    assert "INFO added=1 removed=1 modified=1" in out
    assert "INFO field changes: enrollment_tier=1" in out
    assert out.strip().splitlines()[-1] == (
        "SUMMARY baseline=4 current=4 added=1 removed=1 modified=1 variation_pct=75.00"
    )


def test_cli_json_output(census_files, capsys):
    baseline, current = census_files
    code = cli_main([str(baseline), str(current), "--json"])
    data = _json_block(capsys.readouterr().out)
    assert code == 2
    assert [r["first_name"] for r in data["added"]] == ["Ana"]
    assert data["modified"][0]["differences"]["enrollment_tier"] == {"baseline": "Single", "current": "Family"}
    assert data["variation_percentage"] == 75.0


def test_cli_missing_file_is_fatal(census_files, temp_workdir: Path, capsys):
    baseline, _ = census_files
    code = cli_main([str(baseline), str(temp_workdir / "data" / "missing.xlsx")])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: current file missing.xlsx" in out
    assert "INFO error log written:" in out
    assert "(FILE_READ_ERROR=1)" in out
    assert len(list((temp_workdir / "logs").glob("errors-*.log"))) == 1
    assert "SUMMARY" not in out


def test_cli_missing_explicit_config(census_files, temp_workdir: Path, capsys):
    baseline, current = census_files
    code = cli_main([str(baseline), str(current), "--config", str(temp_workdir / "config" / "nope.yml")])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_config_from_env_var(census_files, temp_workdir: Path, monkeypatch, capsys):
    baseline, current = census_files
    bad = temp_workdir / "config" / "bad.yml"
    bad.write_text("extraction:\n  validity_threshold: 2\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(bad))
    code = cli_main([str(baseline), str(current)])
    assert code == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_cli_config_from_dotenv(census_files, temp_workdir: Path, monkeypatch, capsys):
    baseline, current = census_files
    # register the variable with monkeypatch so the value set by .env is undone
    monkeypatch.setenv(CONFIG_ENV_VAR, "placeholder")
    monkeypatch.delenv(CONFIG_ENV_VAR)
    (temp_workdir / "config" / "strict.yml").write_text("extraction:\n  sample_rows: 0\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"{CONFIG_ENV_VAR}=config/strict.yml\n", encoding="utf-8")
    code = cli_main([str(baseline), str(current)])
    assert code == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_cli_default_config_file_is_used(census_files, write_config, temp_workdir: Path, capsys):
    baseline, current = census_files
    code = cli_main([str(baseline), str(current), "--export"])
    out = capsys.readouterr().out
    assert code == 2
    reports = list((temp_workdir / "out").glob("report_*.xlsx"))
    assert len(reports) == 1
    assert f"INFO report written: {Path('out') / reports[0].name}" in out


def test_cli_export_explicit_path(census_files, temp_workdir: Path, capsys):
    baseline, current = census_files
    target = temp_workdir / "reports" / "variance.xlsx"
    code = cli_main([str(baseline), str(current), "--export", str(target)])
    assert code == 2
    assert target.exists()
    assert f"INFO report written: {target}" in capsys.readouterr().out


def test_cli_debug_mode(census_files, capsys):
    baseline, _ = census_files
    code = cli_main([str(baseline), str(baseline), "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG comparing baseline=4 current=4" in out
