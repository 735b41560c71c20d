"""
tests/test_relations.py — Neighbors, distances, directional relations, comparison.

Relations are read from the origin nation's list only. The catalog records
USA→ISR as allied while Israel records no entry towards the USA; several
tests depend on that asymmetry.
"""

from __future__ import annotations

import pytest

from nationdb.catalog import Catalog, load_catalog
from nationdb.metrics import compute_nation_metrics
from nationdb.models import DiplomaticStance
from nationdb.relations import (
    NationComparison,
    calculate_distance,
    compare_nations,
    get_diplomatic_stance,
    get_neighbors,
    have_defense_pact,
    have_trade_agreement,
)


@pytest.fixture(scope="module")
def catalog() -> Catalog:
    return load_catalog()


# ===========================================================================
# Neighbors
# ===========================================================================


class TestNeighbors:

    def test_unresolved_borders_dropped_in_border_order(self, catalog: Catalog):
        neighbors = get_neighbors(catalog, catalog.by_code["DEU"])
        assert [n.code for n in neighbors] == ["POL", "FRA"]

    def test_all_borders_resolved(self, catalog: Catalog):
        assert [n.code for n in get_neighbors(catalog, catalog.by_code["USA"])] == ["CAN", "MEX"]

    def test_island_nation(self, catalog: Catalog):
        assert get_neighbors(catalog, catalog.by_code["JPN"]) == []

    def test_neighbors_are_catalog_nations(self, catalog: Catalog):
        for nation in catalog.nations:
            for neighbor in get_neighbors(catalog, nation):
                assert neighbor is catalog.by_code[neighbor.code]


# ===========================================================================
# Distance
# ===========================================================================


class TestDistance:

    def test_same_nation_is_zero(self, catalog: Catalog):
        usa = catalog.by_code["USA"]
        assert calculate_distance(usa, usa) == 0

    def test_symmetric(self, catalog: Catalog):
        for a, b in [("USA", "CHN"), ("AUS", "BRA"), ("GBR", "ZAF")]:
            x, y = catalog.by_code[a], catalog.by_code[b]
            assert calculate_distance(x, y) == calculate_distance(y, x)

    def test_london_paris(self, catalog: Catalog):
        d = calculate_distance(catalog.by_code["GBR"], catalog.by_code["FRA"])
        assert d == pytest.approx(343.5, abs=2)

    def test_bounded_by_half_circumference(self, catalog: Catalog):
        limit = 3.141592653589793 * 6371
        for a in catalog.nations:
            for b in catalog.nations:
                assert 0 <= calculate_distance(a, b) <= limit + 1e-6


# ===========================================================================
# Directional relations
# ===========================================================================


class TestDiplomaticStance:

    def test_recorded_stance(self, catalog: Catalog):
        assert get_diplomatic_stance(catalog, "USA", "GBR") is DiplomaticStance.ALLIED
        assert get_diplomatic_stance(catalog, "RUS", "USA") is DiplomaticStance.HOSTILE

    def test_directional_not_symmetrized(self, catalog: Catalog):
        assert get_diplomatic_stance(catalog, "USA", "ISR") is DiplomaticStance.ALLIED
        assert get_diplomatic_stance(catalog, "ISR", "USA") is None

    def test_unknown_origin(self, catalog: Catalog):
        assert get_diplomatic_stance(catalog, "XXX", "USA") is None

    def test_no_entry(self, catalog: Catalog):
        assert get_diplomatic_stance(catalog, "NGA", "JPN") is None

    def test_codes_normalized(self, catalog: Catalog):
        assert get_diplomatic_stance(catalog, " usa", "gbr ") is DiplomaticStance.ALLIED


class TestAgreements:

    def test_trade_agreement(self, catalog: Catalog):
        assert have_trade_agreement(catalog, "USA", "CAN") is True
        assert have_trade_agreement(catalog, "USA", "GBR") is False

    def test_defense_pact(self, catalog: Catalog):
        assert have_defense_pact(catalog, "USA", "GBR") is True
        assert have_defense_pact(catalog, "USA", "MEX") is False

    def test_directional_trade(self, catalog: Catalog):
        assert have_trade_agreement(catalog, "USA", "ISR") is True
        assert have_trade_agreement(catalog, "ISR", "USA") is False

    def test_unknown_nations_are_false(self, catalog: Catalog):
        assert have_trade_agreement(catalog, "XXX", "USA") is False
        assert have_defense_pact(catalog, "USA", "XXX") is False

    def test_codes_normalized(self, catalog: Catalog):
        assert have_defense_pact(catalog, "usa", "can") is True


# ===========================================================================
# Comparison
# ===========================================================================


class TestCompareNations:

    def test_unknown_code_is_none(self, catalog: Catalog):
        assert compare_nations(catalog, "USA", "XXX") is None
        assert compare_nations(catalog, "XXX", "USA") is None

    def test_lowercase_codes(self, catalog: Catalog):
        cmp = compare_nations(catalog, "usa", "gbr")
        assert isinstance(cmp, NationComparison)
        assert cmp.nation_a.code == "USA"
        assert cmp.nation_b.code == "GBR"
        assert cmp.diplomatic_stance is DiplomaticStance.ALLIED
        assert cmp.trade_agreement is False
        assert cmp.defense_pact is True

    def test_metrics_and_distance(self, catalog: Catalog):
        cmp = compare_nations(catalog, "GBR", "FRA")
        assert cmp.metrics_a == compute_nation_metrics(catalog.by_code["GBR"])
        assert cmp.metrics_b == compute_nation_metrics(catalog.by_code["FRA"])
        assert cmp.distance == calculate_distance(catalog.by_code["GBR"], catalog.by_code["FRA"])

    def test_relation_read_from_first_nation(self, catalog: Catalog):
        assert compare_nations(catalog, "ISR", "USA").diplomatic_stance is None
        assert compare_nations(catalog, "USA", "ISR").diplomatic_stance is DiplomaticStance.ALLIED

    def test_to_dict(self, catalog: Catalog):
        d = compare_nations(catalog, "USA", "CAN").to_dict()
        assert d["nationA"]["code"] == "USA"
        assert d["nationB"]["code"] == "CAN"
        assert d["diplomaticStance"] == "allied"
        assert d["tradeAgreement"] is True
        assert d["defensePact"] is True
        assert "overallPowerIndex" in d["metricsA"]

    def test_to_dict_without_relation(self, catalog: Catalog):
        assert compare_nations(catalog, "NGA", "JPN").to_dict()["diplomaticStance"] is None
