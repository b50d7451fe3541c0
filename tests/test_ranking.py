"""Unit tests for the reachable-charger ranking engine."""

import random

import pytest

from echarger.domain.distance import haversine_km
from echarger.domain.entities import Location
from echarger.domain.enums import OnRoute
from echarger.domain.ranking import SAFETY_MARGIN_KM, rank_reachable, round_km
from tests.conftest import BREDA, BRUSSELS, ROTTERDAM, make_charger, north_of


def _corridor_pair():
    return [
        make_charger("brussels", *BRUSSELS, name="Brussels"),
        make_charger("breda", *BREDA, name="Breda"),
    ]


class TestCorridorScenarios:
    def test_only_breda_within_margin(self):
        result = rank_reachable(_corridor_pair(), ROTTERDAM, 125)
        assert [r.charger.id for r in result] == ["breda"]
        assert result[0].distance_km == 44.0
        assert result[0].range_after_km == 81.0

    def test_both_reachable_with_long_range(self):
        result = rank_reachable(_corridor_pair(), ROTTERDAM, 150)
        assert [r.charger.id for r in result] == ["breda", "brussels"]
        assert result[1].range_after_km == pytest.approx(30.2, abs=0.2)

    def test_short_range_excludes_everything(self):
        # Breda is 44 km away; 50 - 10 leaves only 40 km
        assert rank_reachable(_corridor_pair(), ROTTERDAM, 50) == []

    def test_limit_keeps_closest(self):
        origin = Location(45.0, 3.0)
        chargers = [
            make_charger("30", *north_of(origin, 30)),
            make_charger("10", *north_of(origin, 10)),
            make_charger("20", *north_of(origin, 20)),
        ]
        result = rank_reachable(chargers, origin, 100, result_limit=1)
        assert [r.charger.id for r in result] == ["10"]

    def test_default_limit_is_three(self):
        origin = Location(45.0, 3.0)
        chargers = [make_charger(str(k), *north_of(origin, k)) for k in range(1, 8)]
        result = rank_reachable(chargers, origin, 100)
        assert [r.charger.id for r in result] == ["1", "2", "3"]


class TestEdgeCases:
    def test_range_at_margin_is_empty_even_on_top_of_charger(self):
        here = Location(45.0, 3.0)
        charger = make_charger("here", 45.0, 3.0)
        assert rank_reachable([charger], here, SAFETY_MARGIN_KM) == []

    def test_range_just_above_margin_admits_charger_on_the_spot(self):
        here = Location(45.0, 3.0)
        charger = make_charger("here", 45.0, 3.0)
        result = rank_reachable([charger], here, SAFETY_MARGIN_KM + 0.5)
        assert result[0].distance_km == 0.0
        assert result[0].range_after_km == 10.5

    def test_negative_range_is_empty(self):
        assert rank_reachable(_corridor_pair(), ROTTERDAM, -20) == []

    def test_zero_limit_is_empty(self):
        assert rank_reachable(_corridor_pair(), ROTTERDAM, 500, result_limit=0) == []

    def test_negative_limit_is_empty(self):
        assert rank_reachable(_corridor_pair(), ROTTERDAM, 500, result_limit=-1) == []

    def test_empty_catalog(self):
        assert rank_reachable([], ROTTERDAM, 300) == []

    def test_duplicate_positions_are_both_kept_in_input_order(self):
        chargers = [
            make_charger("a", *BREDA),
            make_charger("b", *BREDA),
        ]
        result = rank_reachable(chargers, ROTTERDAM, 200)
        assert [r.charger.id for r in result] == ["a", "b"]

    def test_input_is_not_mutated(self):
        chargers = _corridor_pair()
        snapshot = list(chargers)
        rank_reachable(chargers, ROTTERDAM, 150)
        assert chargers == snapshot

    def test_custom_margin(self):
        result = rank_reachable(
            _corridor_pair(), ROTTERDAM, 125, safety_margin_km=0
        )
        assert [r.charger.id for r in result] == ["breda", "brussels"]


class TestUnroundedFiltering:
    """Admission uses raw distance; only the output is rounded."""

    origin = Location(45.0, 3.0)

    def test_just_beyond_threshold_is_rejected_even_if_it_rounds_inside(self):
        charger = make_charger("edge", *north_of(self.origin, 40.04))
        assert rank_reachable([charger], self.origin, 50) == []

    def test_just_inside_threshold_is_admitted_and_rounded(self):
        charger = make_charger("edge", *north_of(self.origin, 39.96))
        (result,) = rank_reachable([charger], self.origin, 50)
        assert result.distance_km == 40.0
        assert result.range_after_km == 10.0


class TestOnRouteOnly:
    def test_prefilter_keeps_yes_and_nearby(self):
        origin = Location(45.0, 3.0)
        chargers = [
            make_charger("yes", *north_of(origin, 5), on_route=OnRoute.YES),
            make_charger("nearby", *north_of(origin, 6), on_route=OnRoute.NEARBY),
            make_charger("no", *north_of(origin, 1), on_route=OnRoute.NO),
            make_charger("unknown", *north_of(origin, 2), on_route=OnRoute.UNKNOWN),
        ]
        result = rank_reachable(chargers, origin, 100, 10, on_route_only=True)
        assert [r.charger.id for r in result] == ["yes", "nearby"]

    def test_switch_off_considers_everything(self):
        origin = Location(45.0, 3.0)
        chargers = [
            make_charger("yes", *north_of(origin, 5), on_route=OnRoute.YES),
            make_charger("no", *north_of(origin, 1), on_route=OnRoute.NO),
        ]
        result = rank_reachable(chargers, origin, 100, 10)
        assert [r.charger.id for r in result] == ["no", "yes"]


class TestInvariants:
    """Randomised catalogs; every output must respect the contract."""

    @pytest.mark.parametrize("seed", range(5))
    def test_output_contract(self, seed):
        rng = random.Random(seed)
        origin = Location(rng.uniform(40, 50), rng.uniform(0, 4))
        chargers = [
            make_charger(
                str(i),
                origin.latitude + rng.uniform(-2, 2),
                origin.longitude + rng.uniform(-2, 2),
            )
            for i in range(60)
        ]
        range_km = rng.uniform(0, 250)
        limit = rng.randint(0, 8)

        result = rank_reachable(chargers, origin, range_km, limit)

        assert len(result) <= limit
        distances = [r.distance_km for r in result]
        assert distances == sorted(distances)
        for r in result:
            raw = haversine_km(
                origin.latitude, origin.longitude,
                r.charger.latitude, r.charger.longitude,
            )
            assert raw <= range_km - SAFETY_MARGIN_KM
            assert range_km - raw >= 0
            assert r.distance_km == round_km(raw)
        if range_km <= SAFETY_MARGIN_KM:
            assert result == []


class TestRoundKm:
    def test_half_rounds_up(self):
        assert round_km(0.25) == 0.3
        assert round_km(0.05) == 0.1

    def test_negative_half_rounds_away_from_zero(self):
        assert round_km(-0.25) == -0.3

    def test_plain_values(self):
        assert round_km(44.006) == 44.0
        assert round_km(119.75) == 119.8
