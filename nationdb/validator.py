"""
nationdb.validator — Structural validation of nation records.

Walks every field group of a nation and reports each invariant violation
with a dotted/bracketed field path (e.g. demographics.ethnicGroups[2].percentage).

Design contract:
    - validate_nation() is the ONLY per-record validation entry point.
    - Never raises on invalid input. Returns a structured ValidationResult.
    - Never stops at the first error. Five bad fields yield five errors.
    - A missing sub-record skips that sub-record's nested checks only.
    - Input is either a Nation model or a raw camelCase mapping as found
      in the catalog JSON.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Union

from nationdb.constants import (
    DEFENSE_PERCENT_GDP_RANGE,
    GDP_GROWTH_RANGE,
    LATITUDE_RANGE,
    LIFE_EXPECTANCY_RANGE,
    LONGITUDE_RANGE,
    NATION_CODE_RE,
    PERCENT_RANGE,
)
from nationdb.models import (
    AllianceAffiliation,
    DiplomaticStance,
    EconomicSystem,
    GovernmentType,
    MilitaryPosture,
    Nation,
    Region,
    enum_values,
)

_REGIONS = enum_values(Region)
_ALLIANCES = enum_values(AllianceAffiliation)
_ECONOMIC_SYSTEMS = enum_values(EconomicSystem)
_POSTURES = enum_values(MilitaryPosture)
_STANCES = enum_values(DiplomaticStance)
_GOVERNMENT_TYPES = enum_values(GovernmentType)

_UNSET: Any = object()


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationError:
    """One invariant violation."""

    field: str
    message: str
    value: Any = _UNSET

    @property
    def has_value(self) -> bool:
        return self.value is not _UNSET

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.has_value:
            out["value"] = self.value
        return out


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one nation."""

    valid: bool
    errors: tuple[ValidationError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}


@dataclass(frozen=True)
class ValidationSummary:
    """Counts over a validate_nations() result map.

    total and invalid are both the size of the map, which only ever holds
    invalid nations.
    """

    total: int
    invalid: int
    error_count: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "invalid": self.invalid, "errorCount": self.error_count}


@dataclass
class _Collector:
    """Accumulates violations during one validation pass."""

    errors: list[ValidationError] = field(default_factory=list)

    def fail(self, path: str, message: str, value: Any = _UNSET) -> None:
        self.errors.append(ValidationError(field=path, message=message, value=value))

    def result(self) -> ValidationResult:
        return ValidationResult(valid=not self.errors, errors=tuple(self.errors))


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _number(c: _Collector, record: Mapping[str, Any], key: str, path: str, label: str) -> float | None:
    """Return a numeric field, or record a violation and return None."""
    value = record.get(key)
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
    ):
        c.fail(path, f"{label} must be a number", value)
        return None
    return float(value)


def _in_range(
    c: _Collector,
    record: Mapping[str, Any],
    key: str,
    path: str,
    label: str,
    bounds: tuple[float, float],
    message: str,
    *,
    exclusive_low: bool = False,
) -> None:
    value = _number(c, record, key, path, label)
    if value is None:
        return
    low, high = bounds
    too_low = value <= low if exclusive_low else value < low
    if too_low or value > high:
        c.fail(path, message, record.get(key))


def _positive(c: _Collector, record: Mapping[str, Any], key: str, path: str, label: str) -> None:
    value = _number(c, record, key, path, label)
    if value is not None and value <= 0:
        c.fail(path, f"{label} must be greater than 0", record.get(key))


def _non_negative(c: _Collector, record: Mapping[str, Any], key: str, path: str, label: str) -> None:
    value = _number(c, record, key, path, label)
    if value is not None and value < 0:
        c.fail(path, f"{label} cannot be negative", record.get(key))


def _text(c: _Collector, record: Mapping[str, Any], key: str, path: str, message: str) -> None:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        c.fail(path, message, value)


def _sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _non_empty_list(c: _Collector, record: Mapping[str, Any], key: str, path: str, message: str) -> None:
    value = record.get(key)
    if not _sequence(value) or len(value) == 0:
        c.fail(path, message, value)


def _boolean(c: _Collector, record: Mapping[str, Any], key: str, path: str, message: str) -> None:
    value = record.get(key)
    if not isinstance(value, bool):
        c.fail(path, message, value)


def _member(c: _Collector, value: Any, allowed: frozenset[str], path: str, message: str) -> None:
    if not isinstance(value, str) or value not in allowed:
        c.fail(path, message, value)


def _nation_code(c: _Collector, value: Any, path: str, message: str) -> None:
    if not isinstance(value, str) or not NATION_CODE_RE.fullmatch(value):
        c.fail(path, message, value)


# ---------------------------------------------------------------------------
# Group checks
# ---------------------------------------------------------------------------

def _check_identity(record: Mapping[str, Any], c: _Collector) -> None:
    _nation_code(c, record.get("code"), "code", "Code must be a 3-letter uppercase ISO code")
    _text(c, record, "name", "name", "Name is required")
    _text(c, record, "officialName", "officialName", "Official name is required")
    _member(
        c, record.get("governmentType"), _GOVERNMENT_TYPES,
        "governmentType", "Government type must be a known government type",
    )


def _check_geography(geo: Mapping[str, Any], c: _Collector) -> None:
    _member(c, geo.get("region"), _REGIONS, "geography.region", "Region must be a known region")
    _positive(c, geo, "area", "geography.area", "Area")
    _non_negative(c, geo, "coastline", "geography.coastline", "Coastline")

    coordinates = geo.get("coordinates")
    if not isinstance(coordinates, Mapping):
        c.fail("geography.coordinates", "Coordinates are required", coordinates)
    else:
        _in_range(
            c, coordinates, "latitude", "geography.coordinates.latitude", "Latitude",
            LATITUDE_RANGE, "Latitude must be between -90 and 90",
        )
        _in_range(
            c, coordinates, "longitude", "geography.coordinates.longitude", "Longitude",
            LONGITUDE_RANGE, "Longitude must be between -180 and 180",
        )

    _text(c, geo, "capital", "geography.capital", "Capital is required")
    _non_empty_list(c, geo, "majorCities", "geography.majorCities", "At least one major city is required")

    borders = geo.get("landBorders")
    if not _sequence(borders):
        c.fail("geography.landBorders", "Land borders must be an array", borders)
    else:
        for index, code in enumerate(borders):
            _nation_code(
                c, code, f"geography.landBorders[{index}]",
                "Land border must be a 3-letter uppercase ISO code",
            )


def _check_economy(economy: Mapping[str, Any], c: _Collector) -> None:
    _positive(c, economy, "gdp", "economy.gdp", "GDP")
    _in_range(
        c, economy, "gdpGrowthRate", "economy.gdpGrowthRate", "GDP growth rate",
        GDP_GROWTH_RANGE, "GDP growth rate must be between -50 and 50",
    )
    _in_range(
        c, economy, "unemployment", "economy.unemployment", "Unemployment",
        PERCENT_RANGE, "Unemployment must be between 0 and 100",
    )
    _number(c, economy, "inflation", "economy.inflation", "Inflation")
    _non_negative(c, economy, "publicDebt", "economy.publicDebt", "Public debt")
    _number(c, economy, "tradeBalance", "economy.tradeBalance", "Trade balance")
    _member(
        c, economy.get("economicSystem"), _ECONOMIC_SYSTEMS,
        "economy.economicSystem", "Economic system must be a known economic system",
    )
    _text(c, economy, "currency", "economy.currency", "Currency is required")
    _non_empty_list(
        c, economy, "majorIndustries", "economy.majorIndustries",
        "At least one major industry is required",
    )


def _check_shares(
    demographics: Mapping[str, Any],
    c: _Collector,
    key: str,
    label: str,
) -> None:
    """Per-element checks for ethnicGroups / religions."""
    shares = demographics.get(key)
    if shares is None:
        return
    if not _sequence(shares):
        c.fail(f"demographics.{key}", f"{label}s must be an array", shares)
        return
    for index, share in enumerate(shares):
        path = f"demographics.{key}[{index}]"
        if not isinstance(share, Mapping):
            c.fail(path, f"{label} must be an object", share)
            continue
        name = share.get("name")
        if not isinstance(name, str) or not name.strip():
            c.fail(f"{path}.name", f"{label} name is required")
        _in_range(
            c, share, "percentage", f"{path}.percentage", f"{label} percentage",
            PERCENT_RANGE, f"{label} percentage must be between 0 and 100",
            exclusive_low=True,
        )


def _check_demographics(demographics: Mapping[str, Any], c: _Collector) -> None:
    _positive(c, demographics, "population", "demographics.population", "Population")
    _number(
        c, demographics, "populationGrowthRate",
        "demographics.populationGrowthRate", "Population growth rate",
    )
    _in_range(
        c, demographics, "medianAge", "demographics.medianAge", "Median age",
        PERCENT_RANGE, "Median age must be between 0 and 100",
        exclusive_low=True,
    )
    _in_range(
        c, demographics, "urbanizationRate", "demographics.urbanizationRate", "Urbanization rate",
        PERCENT_RANGE, "Urbanization rate must be between 0 and 100",
    )
    _in_range(
        c, demographics, "literacyRate", "demographics.literacyRate", "Literacy rate",
        PERCENT_RANGE, "Literacy rate must be between 0 and 100",
    )
    _in_range(
        c, demographics, "lifeExpectancy", "demographics.lifeExpectancy", "Life expectancy",
        LIFE_EXPECTANCY_RANGE, "Life expectancy must be between 40 and 120",
    )
    _non_empty_list(
        c, demographics, "languages", "demographics.languages",
        "At least one language is required",
    )
    _check_shares(demographics, c, "ethnicGroups", "Ethnic group")
    _check_shares(demographics, c, "religions", "Religion")


def _check_military(military: Mapping[str, Any], c: _Collector) -> None:
    _non_negative(c, military, "activeDuty", "military.activeDuty", "Active duty personnel")
    _non_negative(c, military, "reserves", "military.reserves", "Reserve personnel")
    _non_negative(c, military, "defense", "military.defense", "Defense spending")
    _in_range(
        c, military, "defenseAsPercentGDP", "military.defenseAsPercentGDP", "Defense as percent GDP",
        DEFENSE_PERCENT_GDP_RANGE, "Defense as percent GDP must be between 0 and 20",
    )
    _boolean(c, military, "nuclearWeapons", "military.nuclearWeapons", "Nuclear weapons must be a boolean")
    _member(
        c, military.get("militaryPosture"), _POSTURES,
        "military.militaryPosture", "Military posture must be a known posture",
    )
    systems = military.get("majorWeaponSystems")
    if systems is not None and not _sequence(systems):
        c.fail("military.majorWeaponSystems", "Major weapon systems must be an array", systems)


def _check_relations(relations: Any, c: _Collector) -> None:
    if not _sequence(relations):
        c.fail("diplomacy.relations", "Relations must be an array", relations)
        return
    for index, relation in enumerate(relations):
        path = f"diplomacy.relations[{index}]"
        if not isinstance(relation, Mapping):
            c.fail(path, "Relation must be an object", relation)
            continue
        _nation_code(
            c, relation.get("nationCode"), f"{path}.nationCode",
            "Relation nation code must be a 3-letter uppercase ISO code",
        )
        _member(
            c, relation.get("stance"), _STANCES,
            f"{path}.stance", "Relation stance must be a known diplomatic stance",
        )
        _boolean(c, relation, "tradeAgreement", f"{path}.tradeAgreement", "Trade agreement must be a boolean")
        _boolean(c, relation, "defensePact", f"{path}.defensePact", "Defense pact must be a boolean")


def _check_diplomacy(diplomacy: Mapping[str, Any], c: _Collector) -> None:
    alliances = diplomacy.get("alliances")
    if not _sequence(alliances):
        c.fail("diplomacy.alliances", "Alliances must be an array", alliances)
    else:
        for index, alliance in enumerate(alliances):
            _member(
                c, alliance, _ALLIANCES, f"diplomacy.alliances[{index}]",
                "Alliance must be a known alliance affiliation",
            )

    _check_relations(diplomacy.get("relations"), c)

    _in_range(
        c, diplomacy, "softPower", "diplomacy.softPower", "Soft power",
        PERCENT_RANGE, "Soft power must be between 0 and 100",
    )
    _non_negative(c, diplomacy, "diplomaticMissions", "diplomacy.diplomaticMissions", "Diplomatic missions")
    _boolean(
        c, diplomacy, "unSecurityCouncilMember", "diplomacy.unSecurityCouncilMember",
        "UN Security Council member must be a boolean",
    )


def _check_indices(record: Mapping[str, Any], c: _Collector) -> None:
    for key, label in (("stability", "Stability"), ("corruption", "Corruption"), ("freedomIndex", "Freedom index")):
        _in_range(c, record, key, key, label, PERCENT_RANGE, f"{label} must be between 0 and 100")


def _check_last_updated(record: Mapping[str, Any], c: _Collector) -> None:
    value = record.get("lastUpdated")
    if not value:
        c.fail("lastUpdated", "Last updated date is required")
        return
    try:
        datetime.fromisoformat(value)
    except (TypeError, ValueError):
        c.fail("lastUpdated", "Last updated must be a valid ISO date string", value)


# (key, label, checker): each group is validated independently
_GROUP_CHECKS: tuple[tuple[str, str, Callable[[Mapping[str, Any], _Collector], None]], ...] = (
    ("geography", "Geography", _check_geography),
    ("economy", "Economy", _check_economy),
    ("demographics", "Demographics", _check_demographics),
    ("military", "Military", _check_military),
    ("diplomacy", "Diplomacy", _check_diplomacy),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

NationInput = Union[Nation, Mapping[str, Any]]


def _as_record(nation: NationInput) -> Any:
    if isinstance(nation, Nation):
        return nation.model_dump(mode="json", by_alias=True)
    return nation


def validate_nation(nation: NationInput) -> ValidationResult:
    """Validate one nation. Collects every violation; never raises."""
    record = _as_record(nation)
    c = _Collector()

    if not isinstance(record, Mapping):
        c.fail("", "Nation must be an object", record)
        return c.result()

    _check_identity(record, c)

    for key, label, checker in _GROUP_CHECKS:
        group = record.get(key)
        if not isinstance(group, Mapping):
            c.fail(key, f"{label} data is required")
            continue
        checker(group, c)

    _check_indices(record, c)
    _check_last_updated(record, c)

    return c.result()


def _result_key(record: Any, index: int) -> str:
    code = record.get("code") if isinstance(record, Mapping) else None
    return code if isinstance(code, str) and code else f"[{index}]"


def validate_nations(nations: Iterable[NationInput]) -> dict[str, ValidationResult]:
    """Validate many nations. Only invalid nations appear in the result.

    Keys are nation codes; a record without a usable code is keyed by its
    position, e.g. "[3]".
    """
    results: dict[str, ValidationResult] = {}
    for index, nation in enumerate(nations):
        result = validate_nation(nation)
        if not result.valid:
            results[_result_key(_as_record(nation), index)] = result
    return results


def get_validation_summary(results: Mapping[str, ValidationResult]) -> ValidationSummary:
    """Summarize a validate_nations() result map."""
    error_count = sum(len(result.errors) for result in results.values())
    return ValidationSummary(total=len(results), invalid=len(results), error_count=error_count)
