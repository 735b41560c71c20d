"""
nationdb.query — Nation list queries: parse, execute, summarize.

Turns raw request parameters into a validated NationListQuery, applies it
to a Catalog, and shapes the result into the list and single-nation
payloads served to clients.

Design contract:
    - parse_nation_list_query() is the ONLY entry point for raw parameters.
      Every rejection is an InvalidQueryError with a client-facing message.
    - list_nations() never fails on a valid query. An empty result is
      a successful result.
    - Sorting is stable. Ties keep catalog order in both directions.
    - Unknown parameters are not errors. They are passed through verbatim
      in additional_filters and echoed in the filter summary.
"""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from nationdb.catalog import Catalog
from nationdb.constants import (
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_ORDER,
    INVALID_QUERY_STATUS,
    KNOWN_QUERY_KEYS,
    NATION_CODE_RE,
    SORT_ORDERS,
)
from nationdb.models import AllianceAffiliation, Nation, Region

logger = logging.getLogger("nationdb.query")

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InvalidQueryError(Exception):
    """A request parameter was rejected. Maps to an HTTP 400 by default."""

    def __init__(self, message: str, status: int = INVALID_QUERY_STATUS) -> None:
        self.message = message
        self.status = status
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Error body as served to clients."""
        return {"error": self.message}


# ---------------------------------------------------------------------------
# Sort fields
# ---------------------------------------------------------------------------


class SortField(str, Enum):
    NAME = "name"
    POPULATION = "population"
    GDP = "gdp"
    AREA = "area"
    STABILITY = "stability"
    FREEDOM_INDEX = "freedomIndex"
    SOFT_POWER = "softPower"


SORT_EXTRACTORS: dict[SortField, Callable[[Nation], Union[str, float]]] = {
    SortField.NAME: lambda n: n.name,
    SortField.POPULATION: lambda n: n.demographics.population,
    SortField.GDP: lambda n: n.economy.gdp,
    SortField.AREA: lambda n: n.geography.area,
    SortField.STABILITY: lambda n: n.stability,
    SortField.FREEDOM_INDEX: lambda n: n.freedom_index,
    SortField.SOFT_POWER: lambda n: n.diplomacy.soft_power,
}

_SORT_FIELDS_FOLDED: dict[str, SortField] = {f.value.lower(): f for f in SortField}
_REGIONS_FOLDED: dict[str, Region] = {r.value.lower(): r for r in Region}
_ALLIANCES_FOLDED: dict[str, AllianceAffiliation] = {a.value.lower(): a for a in AllianceAffiliation}


_LEADING_INT_RE = re.compile(r"[+-]?\d+")


def _param_text(v: Any) -> str:
    """Raw text of a parameter. Enum members contribute their value."""
    return v.value if isinstance(v, Enum) else str(v)


def _fold(text: str) -> str:
    """Accent- and case-insensitive comparison key ("Türkiye" → "turkiye")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


# ---------------------------------------------------------------------------
# NationListQuery: validated request
# ---------------------------------------------------------------------------

FilterValue = Union[str, list[str]]


class NationListQuery(BaseModel):
    """Validated list request.

    Validators run on raw (string) input and raise ValueError with the
    exact message returned to the client.
    """

    model_config = {"frozen": True}

    search: Optional[str] = None
    region: Optional[Region] = None
    alliance: Optional[AllianceAffiliation] = None
    sort: SortField = SortField(DEFAULT_SORT_FIELD)
    order: str = DEFAULT_SORT_ORDER
    limit: Optional[int] = None
    additional_filters: dict[str, FilterValue] = Field(default_factory=dict)

    @field_validator("search", mode="before")
    @classmethod
    def _trim_search(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        trimmed = str(v).strip()
        return trimmed or None

    @field_validator("region", mode="before")
    @classmethod
    def _match_region(cls, v: Any) -> Optional[Region]:
        if v is None:
            return None
        match = _REGIONS_FOLDED.get(_param_text(v).lower())
        if match is None:
            raise ValueError(f"Invalid region parameter: {v}")
        return match

    @field_validator("alliance", mode="before")
    @classmethod
    def _match_alliance(cls, v: Any) -> Optional[AllianceAffiliation]:
        if v is None:
            return None
        match = _ALLIANCES_FOLDED.get(_param_text(v).lower())
        if match is None:
            raise ValueError(f"Invalid alliance parameter: {v}")
        return match

    @field_validator("sort", mode="before")
    @classmethod
    def _match_sort(cls, v: Any) -> SortField:
        match = _SORT_FIELDS_FOLDED.get(_param_text(v).lower())
        if match is None:
            raise ValueError(f"Invalid sort field: {v}")
        return match

    @field_validator("order", mode="before")
    @classmethod
    def _match_order(cls, v: Any) -> str:
        normalized = _param_text(v).lower()
        if normalized not in SORT_ORDERS:
            raise ValueError(f"Invalid order parameter: {v}")
        return normalized

    @field_validator("limit", mode="before")
    @classmethod
    def _positive_limit(cls, v: Any) -> Optional[int]:
        if v is None:
            return None
        if isinstance(v, int) and not isinstance(v, bool):
            limit = v
        else:
            # leading integer only: "2.5" -> 2, "3abc" -> 3
            match = _LEADING_INT_RE.match(str(v).strip())
            if match is None:
                raise ValueError('Invalid "limit" parameter. Expected a positive integer.')
            limit = int(match.group())
        if limit <= 0:
            raise ValueError('Invalid "limit" parameter. Expected a positive integer.')
        return limit

    @property
    def descending(self) -> bool:
        return self.order == "desc"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

QueryParams = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def _iter_params(params: QueryParams) -> Iterator[tuple[str, str]]:
    """Flatten supported parameter containers to (key, value) pairs in order.

    Accepts multi-dicts exposing multi_items(), plain mappings whose values
    are strings or lists of strings, and iterables of pairs.
    """
    multi_items = getattr(params, "multi_items", None)
    if callable(multi_items):
        yield from multi_items()
        return
    if isinstance(params, Mapping):
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                for item in value:
                    yield key, item
            else:
                yield key, value
        return
    yield from params


def parse_nation_list_query(params: QueryParams) -> NationListQuery:
    """Validate raw list parameters.

    For each known key the first value wins and an empty value counts as
    absent. Unknown keys accumulate into additional_filters: a scalar on
    first sight, a list once repeated.

    Raises:
        InvalidQueryError: on any rejected parameter.
    """
    known: dict[str, Any] = {}
    additional: dict[str, FilterValue] = {}

    for key, value in _iter_params(params):
        if key in KNOWN_QUERY_KEYS:
            if key not in known:
                known[key] = value
            continue
        existing = additional.get(key)
        if existing is None:
            additional[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            additional[key] = [existing, value]

    fields = {k: v for k, v in known.items() if v is not None and v != ""}

    try:
        return NationListQuery(**fields, additional_filters=additional)
    except ValidationError as exc:
        error = exc.errors()[0]
        cause = (error.get("ctx") or {}).get("error")
        message = str(cause) if cause is not None else error["msg"]
        raise InvalidQueryError(message) from None


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NationListResult:
    items: tuple[Nation, ...]
    total: int
    filtered_total: int
    has_more: bool
    query: NationListQuery


def _sort_key(field: SortField) -> Callable[[Nation], Union[str, float]]:
    extractor = SORT_EXTRACTORS[field]

    def key(nation: Nation) -> Union[str, float]:
        value = extractor(nation)
        return _fold(value) if isinstance(value, str) else value

    return key


def list_nations(query: NationListQuery, catalog: Catalog) -> NationListResult:
    """Filter, sort and truncate the catalog.

    Steps: search, region, alliance, stable sort, limit. has_more is True
    only when a limit cut the filtered set short.
    """
    total = len(catalog.nations)
    items = list(catalog.nations)

    if query.search:
        needle = query.search.lower()
        items = [
            n for n in items
            if needle in n.name.lower()
            or needle in n.official_name.lower()
            or needle in n.code.lower()
        ]

    if query.region is not None:
        items = [n for n in items if n.geography.region == query.region]

    if query.alliance is not None:
        items = [n for n in items if query.alliance in n.diplomacy.alliances]

    filtered_total = len(items)

    items.sort(key=_sort_key(query.sort), reverse=query.descending)

    if query.limit is not None:
        items = items[:query.limit]

    has_more = query.limit is not None and query.limit < filtered_total

    logger.debug(json.dumps({
        "event": "nation_query",
        "filters": build_filter_summary(query),
        "sort": query.sort.value,
        "order": query.order,
        "limit": query.limit,
        "total": total,
        "filtered": filtered_total,
        "returned": len(items),
    }))

    return NationListResult(
        items=tuple(items),
        total=total,
        filtered_total=filtered_total,
        has_more=has_more,
        query=query,
    )


# ---------------------------------------------------------------------------
# Filter summary and payloads
# ---------------------------------------------------------------------------


def build_filter_summary(query: NationListQuery) -> dict[str, FilterValue]:
    """Flat map of applied filters plus pass-through parameters."""
    filters: dict[str, FilterValue] = {}
    if query.search:
        filters["search"] = query.search
    if query.region is not None:
        filters["region"] = query.region.value
    if query.alliance is not None:
        filters["alliance"] = query.alliance.value
    for key, value in query.additional_filters.items():
        filters[key] = list(value) if isinstance(value, list) else value
    return filters


def build_list_payload(result: NationListResult) -> dict[str, Any]:
    """List response body: {"data": [...], "meta": {...}}."""
    query = result.query
    return {
        "data": [nation.to_dict() for nation in result.items],
        "meta": {
            "total": result.total,
            "filtered": result.filtered_total,
            "count": len(result.items),
            "hasMore": result.has_more,
            "limit": query.limit,
            "sort": {"field": query.sort.value, "order": query.order},
            "filters": build_filter_summary(query),
        },
    }


def build_nation_payload(nation: Nation) -> dict[str, Any]:
    """Single-nation response body: {"data": {...}, "meta": {"code": ...}}."""
    return {"data": nation.to_dict(), "meta": {"code": nation.code}}


# ---------------------------------------------------------------------------
# Single-nation lookup
# ---------------------------------------------------------------------------


def normalize_nation_code(raw: str) -> str:
    return raw.strip().upper()


def assert_nation_code(raw: str) -> str:
    """Normalize and check a client-supplied code.

    Raises:
        InvalidQueryError: unless the normalized code is three letters A-Z.
    """
    code = normalize_nation_code(raw)
    if not NATION_CODE_RE.fullmatch(code):
        raise InvalidQueryError("Invalid nation code format. Expected a 3-letter ISO code.")
    return code


def lookup_nation(catalog: Catalog, raw: str) -> Optional[Nation]:
    """Nation for a client-supplied code, or None if it is not in the catalog.

    Raises:
        InvalidQueryError: when the code is malformed.
    """
    return catalog.by_code.get(assert_nation_code(raw))
