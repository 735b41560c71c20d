"""
nationdb.constants — Single source of truth for nationdb global constants.

Every module that needs these values MUST import from here.
No hardcoded duplicates anywhere in the codebase.

The power-index calibration constants are fixed. They define what counts
as a superpower on the 0–100 scale; changing any of them changes every
derived index in the catalog.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------

BILLION: float = 1_000_000_000
"""GDP and defense spending are stored in billions of USD."""

PER_THOUSAND: int = 1000
"""Military personnel are reported per 1000 inhabitants."""

EARTH_RADIUS_KM: float = 6371
"""Mean Earth radius used by the haversine distance."""

# ---------------------------------------------------------------------------
# Economic power index calibration
# ---------------------------------------------------------------------------

ECON_GDP_REFERENCE: float = 30000
"""GDP (billions USD) that earns the full GDP sub-score."""

ECON_GDP_MAX_SCORE: float = 40
ECON_GROWTH_MULTIPLIER: float = 2
ECON_GROWTH_MAX_SCORE: float = 30
ECON_TRADE_REFERENCE: float = 1000
"""Trade surplus (billions USD) that earns the full trade sub-score."""

ECON_TRADE_MAX_SCORE: float = 15
ECON_DEBT_MAX_SCORE: float = 15
"""Debt sub-score at zero debt; reaches 0 at 100% of GDP."""

# ---------------------------------------------------------------------------
# Military power index calibration
# ---------------------------------------------------------------------------

MIL_PERSONNEL_REFERENCE: float = 2_000_000
MIL_PERSONNEL_MAX_SCORE: float = 30
MIL_SPENDING_REFERENCE: float = 900
"""Defense budget (billions USD) that earns the full spending sub-score."""

MIL_SPENDING_MAX_SCORE: float = 40
MIL_NUCLEAR_BONUS: float = 20
MIL_AGGRESSIVE_POSTURE_BONUS: float = 10
MIL_DEFAULT_POSTURE_BONUS: float = 5
"""Every posture other than aggressive earns the same flat bonus."""

# ---------------------------------------------------------------------------
# Overall power index weights
# ---------------------------------------------------------------------------

OVERALL_ECONOMIC_WEIGHT: float = 0.4
OVERALL_MILITARY_WEIGHT: float = 0.35
OVERALL_SOFT_POWER_WEIGHT: float = 0.25

INDEX_MAX: float = 100

# ---------------------------------------------------------------------------
# Query contract
# ---------------------------------------------------------------------------

DEFAULT_SORT_FIELD: str = "name"
DEFAULT_SORT_ORDER: str = "asc"
SORT_ORDERS: tuple[str, ...] = ("asc", "desc")

KNOWN_QUERY_KEYS: frozenset[str] = frozenset([
    "search", "region", "alliance", "sort", "order", "limit",
])
"""Query keys applied as filters. Everything else is passed through."""

INVALID_QUERY_STATUS: int = 400

# ---------------------------------------------------------------------------
# Nation codes
# ---------------------------------------------------------------------------

NATION_CODE_RE: re.Pattern[str] = re.compile(r"^[A-Z]{3}$")
"""ISO 3166-1 alpha-3, uppercase only."""

# ---------------------------------------------------------------------------
# Validator bounds: (low, high), inclusive unless noted at the call site
# ---------------------------------------------------------------------------

LATITUDE_RANGE: tuple[float, float] = (-90, 90)
LONGITUDE_RANGE: tuple[float, float] = (-180, 180)
GDP_GROWTH_RANGE: tuple[float, float] = (-50, 50)
PERCENT_RANGE: tuple[float, float] = (0, 100)
LIFE_EXPECTANCY_RANGE: tuple[float, float] = (40, 120)
DEFENSE_PERCENT_GDP_RANGE: tuple[float, float] = (0, 20)
