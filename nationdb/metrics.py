"""
nationdb.metrics — Derived per-capita ratios and power indices.

THIS IS THE ONLY PLACE where the power-index formulas exist. Calibration
constants live in nationdb.constants; nothing here hardcodes a threshold.

Design contract:
    - Every function is pure over one Nation. Same input, same output.
    - Per-capita ratios return exactly 0 for a zero population.
    - Economic and military indices are capped at INDEX_MAX.
    - The overall index is a weighted sum and is not capped.
    - NationMetrics is recomputed on demand, never stored in the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass

from nationdb.constants import (
    BILLION,
    ECON_DEBT_MAX_SCORE,
    ECON_GDP_MAX_SCORE,
    ECON_GDP_REFERENCE,
    ECON_GROWTH_MAX_SCORE,
    ECON_GROWTH_MULTIPLIER,
    ECON_TRADE_MAX_SCORE,
    ECON_TRADE_REFERENCE,
    INDEX_MAX,
    MIL_AGGRESSIVE_POSTURE_BONUS,
    MIL_DEFAULT_POSTURE_BONUS,
    MIL_NUCLEAR_BONUS,
    MIL_PERSONNEL_MAX_SCORE,
    MIL_PERSONNEL_REFERENCE,
    MIL_SPENDING_MAX_SCORE,
    MIL_SPENDING_REFERENCE,
    OVERALL_ECONOMIC_WEIGHT,
    OVERALL_MILITARY_WEIGHT,
    OVERALL_SOFT_POWER_WEIGHT,
    PER_THOUSAND,
)
from nationdb.models import MilitaryPosture, Nation


@dataclass(frozen=True)
class NationMetrics:
    """Derived metrics for one nation."""

    gdp_per_capita: float
    military_per_capita: float
    defense_per_capita: float
    economic_power_index: float
    military_power_index: float
    overall_power_index: float

    def to_dict(self) -> dict[str, float]:
        """camelCase keys, matching the nation payload shape."""
        return {
            "gdpPerCapita": self.gdp_per_capita,
            "militaryPerCapita": self.military_per_capita,
            "defensePerCapita": self.defense_per_capita,
            "economicPowerIndex": self.economic_power_index,
            "militaryPowerIndex": self.military_power_index,
            "overallPowerIndex": self.overall_power_index,
        }


# ---------------------------------------------------------------------------
# Per-capita ratios
# ---------------------------------------------------------------------------

def compute_gdp_per_capita(nation: Nation) -> float:
    """GDP per inhabitant in USD."""
    population = nation.demographics.population
    if population == 0:
        return 0.0
    return nation.economy.gdp * BILLION / population


def compute_military_per_capita(nation: Nation) -> float:
    """Active and reserve personnel per 1000 inhabitants."""
    population = nation.demographics.population
    if population == 0:
        return 0.0
    personnel = nation.military.active_duty + nation.military.reserves
    return personnel / population * PER_THOUSAND


def compute_defense_per_capita(nation: Nation) -> float:
    """Defense spending per inhabitant in USD."""
    population = nation.demographics.population
    if population == 0:
        return 0.0
    return nation.military.defense * BILLION / population


# ---------------------------------------------------------------------------
# Power indices
# ---------------------------------------------------------------------------

def compute_economic_power_index(nation: Nation) -> float:
    """Economic power on [0, 100] from GDP, growth, trade surplus and debt.

    Sub-scores:
        gdp     min(gdp / 30000 * 40, 40)
        growth  min(max(growth * 2, 0), 30)
        trade   min(surplus / 1000 * 15, 15), 0 for a deficit
        debt    max(15 - debt / 100 * 15, 0)
    """
    economy = nation.economy
    gdp_score = min(economy.gdp / ECON_GDP_REFERENCE * ECON_GDP_MAX_SCORE, ECON_GDP_MAX_SCORE)
    growth_score = min(max(economy.gdp_growth_rate * ECON_GROWTH_MULTIPLIER, 0), ECON_GROWTH_MAX_SCORE)
    if economy.trade_balance > 0:
        trade_score = min(economy.trade_balance / ECON_TRADE_REFERENCE * ECON_TRADE_MAX_SCORE, ECON_TRADE_MAX_SCORE)
    else:
        trade_score = 0.0
    debt_score = max(ECON_DEBT_MAX_SCORE - economy.public_debt / 100 * ECON_DEBT_MAX_SCORE, 0)

    return min(gdp_score + growth_score + trade_score + debt_score, INDEX_MAX)


def compute_military_power_index(nation: Nation) -> float:
    """Military power on [0, 100] from personnel, spending, arsenal and posture.

    Only an aggressive posture earns the higher bonus. Every other posture,
    isolationist included, earns the same flat bonus.
    """
    military = nation.military
    personnel_score = min(
        military.active_duty / MIL_PERSONNEL_REFERENCE * MIL_PERSONNEL_MAX_SCORE,
        MIL_PERSONNEL_MAX_SCORE,
    )
    spending_score = min(
        military.defense / MIL_SPENDING_REFERENCE * MIL_SPENDING_MAX_SCORE,
        MIL_SPENDING_MAX_SCORE,
    )
    nuclear_bonus = MIL_NUCLEAR_BONUS if military.nuclear_weapons else 0
    if military.military_posture == MilitaryPosture.AGGRESSIVE:
        posture_bonus = MIL_AGGRESSIVE_POSTURE_BONUS
    else:
        posture_bonus = MIL_DEFAULT_POSTURE_BONUS

    return min(personnel_score + spending_score + nuclear_bonus + posture_bonus, INDEX_MAX)


def compute_overall_power_index(nation: Nation) -> float:
    """Weighted blend of economic, military and soft power."""
    return (
        compute_economic_power_index(nation) * OVERALL_ECONOMIC_WEIGHT
        + compute_military_power_index(nation) * OVERALL_MILITARY_WEIGHT
        + nation.diplomacy.soft_power * OVERALL_SOFT_POWER_WEIGHT
    )


def compute_nation_metrics(nation: Nation) -> NationMetrics:
    return NationMetrics(
        gdp_per_capita=compute_gdp_per_capita(nation),
        military_per_capita=compute_military_per_capita(nation),
        defense_per_capita=compute_defense_per_capita(nation),
        economic_power_index=compute_economic_power_index(nation),
        military_power_index=compute_military_power_index(nation),
        overall_power_index=compute_overall_power_index(nation),
    )
