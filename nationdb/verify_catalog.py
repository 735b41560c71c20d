"""
nationdb.verify_catalog — CLI for catalog verification.

Usage:
    python -m nationdb.verify_catalog
    python -m nationdb.verify_catalog --catalog path/to/nations.json --json
    python -m nationdb.verify_catalog --quiet

Exit codes:
    0: Valid — every nation passes validation.
    1: Missing file — the catalog file does not exist.
    2: Unparseable — the file is not JSON or not a JSON array.
    3: Duplicate codes — a nation code appears more than once.
    4: Validation errors — one or more nations fail validation.

Output:
    Default: human-readable summary to stdout.
    --json: structured JSON report to stdout.
    --quiet: no output, only exit code.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from nationdb.catalog import (
    Catalog,
    CatalogIntegrityError,
    CatalogNotFoundError,
    find_duplicate_codes,
    read_catalog_records,
    resolve_catalog_path,
)
from nationdb.validator import get_validation_summary, validate_nations

logger = logging.getLogger("nationdb.verify")

# ---------------------------------------------------------------------------
# Exit codes: used by CLI, exposed for programmatic use
# ---------------------------------------------------------------------------

EXIT_OK: int = 0
EXIT_MISSING_FILE: int = 1
EXIT_UNPARSEABLE: int = 2
EXIT_DUPLICATE_CODES: int = 3
EXIT_VALIDATION_ERRORS: int = 4

EXIT_CODE_LABELS: dict[int, str] = {
    EXIT_OK: "VALID",
    EXIT_MISSING_FILE: "MISSING_FILE",
    EXIT_UNPARSEABLE: "UNPARSEABLE",
    EXIT_DUPLICATE_CODES: "DUPLICATE_CODES",
    EXIT_VALIDATION_ERRORS: "VALIDATION_ERRORS",
}


# ---------------------------------------------------------------------------
# VerificationReport
# ---------------------------------------------------------------------------


@dataclass
class VerificationReport:
    """Structured result of one catalog verification run.

    Fields:
        valid: True only if ALL checks pass.
        path: The catalog file that was checked.
        nation_count: Records found in the file (0 if unreadable).
        fingerprint: Catalog fingerprint, only set for a valid catalog.
        summary: get_validation_summary() output as a dict.
        results: {code: ValidationResult dict} for invalid nations.
        checks: List of {check, passed, detail?} dicts.
        errors: Flat list of human-readable error strings.
        exit_code: Numeric exit code (0 = ok, non-zero = first failure).
    """
    valid: bool = True
    path: str = ""
    nation_count: int = 0
    fingerprint: Optional[str] = None
    summary: dict[str, int] = field(default_factory=dict)
    results: dict[str, Any] = field(default_factory=dict)
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    exit_code: int = EXIT_OK

    def fail(self, check: str, detail: str, code: int) -> None:
        """Record a failed check."""
        self.valid = False
        self.checks.append({"check": check, "passed": False, "detail": detail})
        self.errors.append(f"[{check}] {detail}")
        if self.exit_code == EXIT_OK:
            self.exit_code = code

    def ok(self, check: str, detail: str = "") -> None:
        """Record a passing check."""
        self.checks.append({"check": check, "passed": True, "detail": detail})

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "path": self.path,
            "exit_code": self.exit_code,
            "nation_count": self.nation_count,
            "fingerprint": self.fingerprint,
            "summary": self.summary,
            "results": self.results,
            "checks": self.checks,
            "errors": self.errors,
        }


def verify_catalog(path: str | Path | None = None) -> VerificationReport:
    """Run every catalog check. Never raises on a bad catalog."""
    catalog_path = resolve_catalog_path(path)
    report = VerificationReport(path=str(catalog_path))

    try:
        records = read_catalog_records(catalog_path)
    except CatalogNotFoundError as exc:
        report.fail("file_exists", str(exc), EXIT_MISSING_FILE)
        return report
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        report.ok("file_exists")
        report.fail("json_array", f"Catalog file is not valid JSON: {exc}", EXIT_UNPARSEABLE)
        return report
    report.ok("file_exists")

    if not isinstance(records, list):
        report.fail("json_array", f"Expected a JSON array, got {type(records).__name__}", EXIT_UNPARSEABLE)
        return report
    report.nation_count = len(records)
    report.ok("json_array", f"{len(records)} records")

    duplicates = find_duplicate_codes(records)
    if duplicates:
        report.fail("unique_codes", f"Duplicate nation codes: {', '.join(duplicates)}", EXIT_DUPLICATE_CODES)
    else:
        report.ok("unique_codes")

    results = validate_nations(records)
    report.summary = get_validation_summary(results).to_dict()
    report.results = {code: result.to_dict() for code, result in results.items()}
    if results:
        report.fail(
            "nation_validation",
            f"{len(results)} nation(s) with {report.summary['errorCount']} error(s)",
            EXIT_VALIDATION_ERRORS,
        )
    else:
        report.ok("nation_validation", f"{len(records)} nations valid")

    if report.valid:
        try:
            report.fingerprint = Catalog.from_records(records).fingerprint
        except CatalogIntegrityError as exc:
            report.fail("nation_model", exc.detail, EXIT_VALIDATION_ERRORS)

    logger.debug(json.dumps({
        "event": "catalog_verified",
        "path": report.path,
        "valid": report.valid,
        "exit_code": report.exit_code,
    }))
    return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verify_catalog",
        description="Verify the nation catalog: JSON shape, unique codes, per-nation invariants.",
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="Catalog file (default: $NATIONDB_CATALOG_PATH or nationdb/data/nations.json).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output structured JSON report.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all output. Exit code only.",
    )
    return parser


def _configure_logging() -> None:
    level = logging.DEBUG if os.getenv("ENV", "prod") == "dev" else logging.INFO
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)


def main(argv: list[str] | None = None) -> int:
    """Run catalog verification. Returns exit code."""
    args = _build_parser().parse_args(argv)
    _configure_logging()

    report = verify_catalog(args.catalog)

    if args.quiet:
        return report.exit_code

    if args.json_output:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False, default=str))
        return report.exit_code

    status = "VALID" if report.valid else EXIT_CODE_LABELS.get(report.exit_code, "FAILED")
    print(f"Catalog:  {report.path}")
    print(f"Status:   {status}")
    print(f"Nations:  {report.nation_count}")
    if report.fingerprint:
        print(f"Fingerprint: {report.fingerprint}")

    for check in report.checks:
        marker = "✓" if check["passed"] else "✗"
        detail = f" ({check['detail']})" if check.get("detail") else ""
        print(f"  {marker} {check['check']}{detail}")

    for code, result in report.results.items():
        print(f"\n{code}:")
        for err in result["errors"]:
            print(f"  • {err['field']}: {err['message']}")

    print(f"\nExit code: {report.exit_code}")
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
