"""
nationdb.relations — Neighbors, distances and bilateral relations.

Relations are directional: a nation's relations list records how THAT
nation views each counterpart. A→B and B→A are independent entries and
are never symmetrized here.

Design contract:
    - Codes are normalized (strip + upper) before every lookup.
    - Unknown nations and missing relation entries are not errors. They
      yield None, False or an empty list.
    - Border codes that do not resolve to a catalog nation are dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from nationdb.catalog import Catalog, get_nation_by_code
from nationdb.constants import EARTH_RADIUS_KM
from nationdb.metrics import NationMetrics, compute_nation_metrics
from nationdb.models import DiplomaticRelation, DiplomaticStance, Nation


def get_neighbors(catalog: Catalog, nation: Nation) -> list[Nation]:
    """Catalog nations sharing a land border with nation, in border order."""
    neighbors = []
    for code in nation.geography.land_borders:
        neighbor = catalog.by_code.get(code)
        if neighbor is not None:
            neighbors.append(neighbor)
    return neighbors


def calculate_distance(a: Nation, b: Nation) -> float:
    """Great-circle (haversine) distance in km between the two capitals."""
    lat1 = math.radians(a.geography.coordinates.latitude)
    lon1 = math.radians(a.geography.coordinates.longitude)
    lat2 = math.radians(b.geography.coordinates.latitude)
    lon2 = math.radians(b.geography.coordinates.longitude)

    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _relation(catalog: Catalog, code_a: str, code_b: str) -> Optional[DiplomaticRelation]:
    """A's recorded relation towards B, if any."""
    origin = get_nation_by_code(catalog, code_a)
    if origin is None:
        return None
    target = code_b.strip().upper()
    for relation in origin.diplomacy.relations:
        if relation.nation_code == target:
            return relation
    return None


def get_diplomatic_stance(catalog: Catalog, code_a: str, code_b: str) -> Optional[DiplomaticStance]:
    """A's stance towards B. Directional, never symmetrized.

    Both codes are trimmed and upper-cased before lookup, so "usa"/"gbr"
    finds the same relation as "USA"/"GBR".
    """
    relation = _relation(catalog, code_a, code_b)
    return relation.stance if relation is not None else None


def have_trade_agreement(catalog: Catalog, code_a: str, code_b: str) -> bool:
    relation = _relation(catalog, code_a, code_b)
    return relation.trade_agreement if relation is not None else False


def have_defense_pact(catalog: Catalog, code_a: str, code_b: str) -> bool:
    relation = _relation(catalog, code_a, code_b)
    return relation.defense_pact if relation is not None else False


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NationComparison:
    """Side-by-side view of two nations, relation fields read from A towards B."""

    nation_a: Nation
    nation_b: Nation
    metrics_a: NationMetrics
    metrics_b: NationMetrics
    distance: float
    diplomatic_stance: Optional[DiplomaticStance]
    trade_agreement: bool
    defense_pact: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "nationA": self.nation_a.to_dict(),
            "nationB": self.nation_b.to_dict(),
            "metricsA": self.metrics_a.to_dict(),
            "metricsB": self.metrics_b.to_dict(),
            "distance": self.distance,
            "diplomaticStance": self.diplomatic_stance.value if self.diplomatic_stance else None,
            "tradeAgreement": self.trade_agreement,
            "defensePact": self.defense_pact,
        }


def compare_nations(catalog: Catalog, code_a: str, code_b: str) -> Optional[NationComparison]:
    """Compare two nations. None if either code is not in the catalog."""
    nation_a = get_nation_by_code(catalog, code_a)
    nation_b = get_nation_by_code(catalog, code_b)
    if nation_a is None or nation_b is None:
        return None

    return NationComparison(
        nation_a=nation_a,
        nation_b=nation_b,
        metrics_a=compute_nation_metrics(nation_a),
        metrics_b=compute_nation_metrics(nation_b),
        distance=calculate_distance(nation_a, nation_b),
        diplomatic_stance=get_diplomatic_stance(catalog, code_a, code_b),
        trade_agreement=have_trade_agreement(catalog, code_a, code_b),
        defense_pact=have_defense_pact(catalog, code_a, code_b),
    )
