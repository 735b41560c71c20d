"""
tests/test_verify_catalog.py — Catalog verification CLI tests.

Covers:
    - Exit codes for each failure class
    - Output modes (human, --json, --quiet)
    - VerificationReport bookkeeping (first failure wins)
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from nationdb.catalog import CATALOG_PATH_ENV, DEFAULT_CATALOG_PATH, load_catalog
from nationdb.verify_catalog import (
    EXIT_DUPLICATE_CODES,
    EXIT_MISSING_FILE,
    EXIT_OK,
    EXIT_UNPARSEABLE,
    EXIT_VALIDATION_ERRORS,
    VerificationReport,
    main as cli_main,
    verify_catalog,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CATALOG_PATH_ENV, raising=False)


@pytest.fixture(scope="module")
def raw_records() -> list[dict[str, Any]]:
    with open(DEFAULT_CATALOG_PATH, encoding="utf-8") as fh:
        return json.load(fh)


def _write(path: Path, payload: Any) -> str:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return str(path)


# ===========================================================================
# Exit codes
# ===========================================================================


class TestExitCodes:

    def test_shipped_catalog_exit_0(self):
        assert cli_main(["--quiet"]) == EXIT_OK

    def test_missing_file_exit_1(self, tmp_path: Path):
        assert cli_main(["--catalog", str(tmp_path / "nope.json"), "--quiet"]) == EXIT_MISSING_FILE

    def test_bad_json_exit_2(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert cli_main(["--catalog", str(path), "--quiet"]) == EXIT_UNPARSEABLE

    def test_not_array_exit_2(self, tmp_path: Path):
        path = _write(tmp_path / "obj.json", {"USA": {}})
        assert cli_main(["--catalog", path, "--quiet"]) == EXIT_UNPARSEABLE

    def test_duplicates_exit_3(self, tmp_path: Path, raw_records: list[dict[str, Any]]):
        path = _write(tmp_path / "dup.json", [raw_records[0], raw_records[0]])
        assert cli_main(["--catalog", path, "--quiet"]) == EXIT_DUPLICATE_CODES

    def test_validation_errors_exit_4(self, tmp_path: Path, raw_records: list[dict[str, Any]]):
        records = copy.deepcopy(raw_records[:2])
        records[1]["demographics"]["lifeExpectancy"] = 10
        path = _write(tmp_path / "invalid.json", records)
        assert cli_main(["--catalog", path, "--quiet"]) == EXIT_VALIDATION_ERRORS

    def test_duplicates_reported_before_validation(self, tmp_path: Path, raw_records: list[dict[str, Any]]):
        records = copy.deepcopy([raw_records[0], raw_records[0]])
        records[1]["stability"] = 500
        path = _write(tmp_path / "both.json", records)
        report = verify_catalog(path)
        assert report.exit_code == EXIT_DUPLICATE_CODES
        assert [c["check"] for c in report.checks if not c["passed"]] == ["unique_codes", "nation_validation"]

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(CATALOG_PATH_ENV, str(tmp_path / "missing.json"))
        assert cli_main(["--quiet"]) == EXIT_MISSING_FILE


# ===========================================================================
# Output modes
# ===========================================================================


class TestOutput:

    def test_json_report(self, capsys: pytest.CaptureFixture[str]):
        cli_main(["--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["valid"] is True
        assert data["exit_code"] == 0
        assert data["nation_count"] == 26
        assert data["fingerprint"] == load_catalog(DEFAULT_CATALOG_PATH).fingerprint
        assert data["summary"] == {"total": 0, "invalid": 0, "errorCount": 0}
        assert data["results"] == {}

    def test_json_report_lists_errors(
        self, tmp_path: Path, raw_records: list[dict[str, Any]], capsys: pytest.CaptureFixture[str],
    ):
        records = copy.deepcopy(raw_records[:1])
        records[0]["economy"]["unemployment"] = 120
        path = _write(tmp_path / "invalid.json", records)
        cli_main(["--catalog", path, "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["valid"] is False
        assert data["fingerprint"] is None
        assert data["summary"] == {"total": 1, "invalid": 1, "errorCount": 1}
        assert data["results"]["USA"]["errors"][0] == {
            "field": "economy.unemployment",
            "message": "Unemployment must be between 0 and 100",
            "value": 120,
        }

    def test_human_output(self, capsys: pytest.CaptureFixture[str]):
        cli_main([])
        output = capsys.readouterr().out
        assert "VALID" in output
        assert "✓" in output
        assert "Exit code: 0" in output

    def test_human_output_lists_failures(
        self, tmp_path: Path, raw_records: list[dict[str, Any]], capsys: pytest.CaptureFixture[str],
    ):
        records = copy.deepcopy(raw_records[:1])
        del records[0]["military"]
        path = _write(tmp_path / "invalid.json", records)
        cli_main(["--catalog", path])
        output = capsys.readouterr().out
        assert "VALIDATION_ERRORS" in output
        assert "✗" in output
        assert "military: Military data is required" in output

    def test_quiet_prints_nothing(self, capsys: pytest.CaptureFixture[str]):
        cli_main(["--quiet"])
        assert capsys.readouterr().out == ""


# ===========================================================================
# Report
# ===========================================================================


class TestVerificationReport:

    def test_first_failure_keeps_exit_code(self):
        report = VerificationReport()
        report.fail("a", "first", 3)
        report.fail("b", "second", 4)
        assert report.exit_code == 3
        assert report.valid is False
        assert report.errors == ["[a] first", "[b] second"]

    def test_ok_records_passing_check(self):
        report = VerificationReport()
        report.ok("file_exists")
        assert report.valid is True
        assert report.checks == [{"check": "file_exists", "passed": True, "detail": ""}]

    def test_to_dict_is_json_serializable(self):
        report = verify_catalog(DEFAULT_CATALOG_PATH)
        assert json.loads(json.dumps(report.to_dict()))["valid"] is True
