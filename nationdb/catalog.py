"""
nationdb.catalog — The immutable nation catalog.

Loads the catalog JSON, validates every record, and exposes the resulting
nations as one frozen Catalog value with code-indexed lookup.

Design contract:
    - Catalog.from_records() is the ONLY constructor that accepts raw data.
    - A catalog that fails validation is never built. CatalogIntegrityError
      carries the full validation results.
    - No module-level catalog. Callers load one value and pass it around.
    - Selectors never mutate the catalog and always return new lists.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from pydantic import ValidationError as ModelValidationError

from nationdb.hashing import compute_catalog_fingerprint, compute_nation_hash
from nationdb.models import AllianceAffiliation, Nation, Region
from nationdb.validator import ValidationResult, validate_nations

logger = logging.getLogger("nationdb.catalog")

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

DEFAULT_CATALOG_PATH: Path = Path(__file__).resolve().parent / "data" / "nations.json"

CATALOG_PATH_ENV: str = "NATIONDB_CATALOG_PATH"
"""Environment variable overriding the catalog file location."""


def resolve_catalog_path(path: str | Path | None = None) -> Path:
    """Explicit path, else $NATIONDB_CATALOG_PATH, else the shipped catalog."""
    if path is not None:
        return Path(path)
    override = os.getenv(CATALOG_PATH_ENV, "").strip()
    if override:
        return Path(override)
    return DEFAULT_CATALOG_PATH


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class CatalogNotFoundError(Exception):
    """Raised when the catalog file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Catalog file not found: {path}")


class CatalogIntegrityError(Exception):
    """Raised when catalog records fail validation or repeat a code.

    Attributes:
        results: validate_nations() output, invalid nations only.
        duplicates: codes that appear more than once, sorted.
    """

    def __init__(
        self,
        detail: str,
        results: Mapping[str, ValidationResult] | None = None,
        duplicates: Iterable[str] = (),
    ) -> None:
        self.detail = detail
        self.results = dict(results or {})
        self.duplicates = tuple(duplicates)
        super().__init__(detail)


def find_duplicate_codes(records: Iterable[Any]) -> list[str]:
    """Codes that occur more than once among raw records, sorted."""
    seen: set[str] = set()
    duplicates: set[str] = set()
    for record in records:
        code = record.get("code") if isinstance(record, Mapping) else None
        if not isinstance(code, str):
            continue
        if code in seen:
            duplicates.add(code)
        seen.add(code)
    return sorted(duplicates)


# ---------------------------------------------------------------------------
# Catalog: immutable value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Catalog:
    """Validated, immutable set of nations.

    nations keeps catalog (file) order. by_code is a read-only view keyed
    by uppercase code. fingerprint identifies this exact build.
    """

    nations: tuple[Nation, ...]
    by_code: Mapping[str, Nation]
    codes: tuple[str, ...]
    fingerprint: str

    def __len__(self) -> int:
        return len(self.nations)

    def __iter__(self):
        return iter(self.nations)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self.by_code

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> Catalog:
        """Validate raw camelCase records and build a Catalog.

        Raises:
            CatalogIntegrityError: on validation errors, duplicate codes,
                or records that cannot be turned into models.
        """
        records = list(records)

        results = validate_nations(records)
        if results:
            for code, result in results.items():
                logger.error(json.dumps({
                    "event": "catalog_invalid",
                    "code": code,
                    "errors": [e.to_dict() for e in result.errors],
                }, default=str))
            raise CatalogIntegrityError(
                f"{len(results)} nation(s) failed validation: {', '.join(results)}",
                results=results,
            )

        duplicates = find_duplicate_codes(records)
        if duplicates:
            logger.error(json.dumps({
                "event": "catalog_duplicate_code",
                "codes": duplicates,
            }))
            raise CatalogIntegrityError(
                f"Duplicate nation codes: {', '.join(duplicates)}",
                duplicates=duplicates,
            )

        try:
            nations = tuple(Nation.model_validate(record) for record in records)
        except ModelValidationError as exc:
            raise CatalogIntegrityError(f"Catalog record does not match the Nation model: {exc}") from exc

        by_code = {nation.code: nation for nation in nations}
        if not by_code:
            raise CatalogIntegrityError("Catalog is empty")

        fingerprint = compute_catalog_fingerprint(
            {nation.code: compute_nation_hash(nation.to_dict()) for nation in nations}
        )

        return cls(
            nations=nations,
            by_code=MappingProxyType(by_code),
            codes=tuple(nation.code for nation in nations),
            fingerprint=fingerprint,
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def read_catalog_records(path: str | Path | None = None) -> Any:
    """Read and parse the catalog JSON file without validating it.

    Raises:
        CatalogNotFoundError: if the file does not exist.
        json.JSONDecodeError: if the file is not valid JSON.
    """
    catalog_path = resolve_catalog_path(path)
    if not catalog_path.is_file():
        raise CatalogNotFoundError(catalog_path)
    with open(catalog_path, encoding="utf-8") as fh:
        return json.load(fh)


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load, validate and freeze the catalog.

    Args:
        path: catalog JSON file. None → $NATIONDB_CATALOG_PATH or the
              shipped nationdb/data/nations.json.

    Raises:
        CatalogNotFoundError: the file does not exist.
        CatalogIntegrityError: the file is not a JSON array of valid nations.
    """
    catalog_path = resolve_catalog_path(path)
    try:
        records = read_catalog_records(catalog_path)
    except json.JSONDecodeError as exc:
        raise CatalogIntegrityError(f"Catalog file is not valid JSON: {exc}") from exc

    if not isinstance(records, list):
        raise CatalogIntegrityError("Catalog file must contain a JSON array of nations")

    catalog = Catalog.from_records(records)
    logger.info(json.dumps({
        "event": "catalog_loaded",
        "path": str(catalog_path),
        "count": len(catalog),
        "fingerprint": catalog.fingerprint,
    }))
    return catalog


# ---------------------------------------------------------------------------
# Lookups and selectors
# ---------------------------------------------------------------------------


def get_nation_by_code(catalog: Catalog, code: str) -> Optional[Nation]:
    """Case-insensitive lookup. None when the code is not in the catalog."""
    return catalog.by_code.get(code.strip().upper())


def get_nations_by_region(catalog: Catalog, region: Region | str) -> list[Nation]:
    return [n for n in catalog.nations if n.geography.region == region]


def get_nations_by_alliance(catalog: Catalog, alliance: AllianceAffiliation | str) -> list[Nation]:
    return [n for n in catalog.nations if alliance in n.diplomacy.alliances]


def get_nuclear_nations(catalog: Catalog) -> list[Nation]:
    return [n for n in catalog.nations if n.military.nuclear_weapons]


def _top(catalog: Catalog, key, count: int) -> list[Nation]:
    return sorted(catalog.nations, key=key, reverse=True)[:count]


def get_top_nations_by_gdp(catalog: Catalog, count: int = 10) -> list[Nation]:
    return _top(catalog, lambda n: n.economy.gdp, count)


def get_top_nations_by_population(catalog: Catalog, count: int = 10) -> list[Nation]:
    return _top(catalog, lambda n: n.demographics.population, count)


def get_top_nations_by_defense_spending(catalog: Catalog, count: int = 10) -> list[Nation]:
    return _top(catalog, lambda n: n.military.defense, count)


def search_nations_by_name(catalog: Catalog, term: str) -> list[Nation]:
    """Case-insensitive substring match on name, official name or code."""
    needle = term.lower()
    return [
        n for n in catalog.nations
        if needle in n.name.lower()
        or needle in n.official_name.lower()
        or needle in n.code.lower()
    ]
