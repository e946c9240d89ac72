"""
Unit tests for models.py - rate table validation and result types.
"""
import pickle

import pytest

from pity_core import (
    InvalidConfiguration,
    RarityTier,
    RateTable,
    TrialResult,
    build_rate_table,
    configure,
)


def make_table(weights, pity_threshold=10, max_draws_per_trial=20):
    return RateTable(
        tiers=tuple(RarityTier(name, weight) for name, weight in weights),
        pity_threshold=pity_threshold,
        max_draws_per_trial=max_draws_per_trial,
    )


class TestRateTableConstruction:
    """Tests for valid RateTable construction."""

    def test_default_table_shape(self, default_table):
        assert default_table.tier_ids == ("legendary", "gold", "orange", "purple")
        assert default_table.pity_threshold == 600
        assert default_table.max_draws_per_trial == 1000

    def test_top_tier_is_first(self, default_table):
        assert default_table.top_tier_id == "legendary"
        assert default_table.top_tier.weight == 0.002

    def test_cumulative_bounds_are_monotonic(self, default_table):
        bounds = default_table.cumulative_bounds
        assert len(bounds) == 4
        assert all(a <= b for a, b in zip(bounds, bounds[1:]))
        assert bounds[0] == pytest.approx(0.002)
        assert bounds[-1] == pytest.approx(1.0)

    def test_order_is_not_sorted_by_weight(self):
        table = make_table([("common", 0.9), ("rare", 0.1)])
        assert table.top_tier_id == "common"
        assert table.cumulative_bounds == pytest.approx((0.9, 1.0))

    def test_list_of_tiers_is_frozen_to_tuple(self):
        table = RateTable(
            tiers=[RarityTier("a", 0.5), RarityTier("b", 0.5)],
            pity_threshold=3,
            max_draws_per_trial=3,
        )
        assert isinstance(table.tiers, tuple)

    def test_value_equality_and_hash(self):
        assert configure() == configure()
        assert hash(configure()) == hash(configure())

    def test_immutable(self, default_table):
        with pytest.raises(AttributeError):
            default_table.pity_threshold = 10

    def test_pickle_round_trip_keeps_bounds(self, default_table):
        restored = pickle.loads(pickle.dumps(default_table))
        assert restored == default_table
        assert restored.cumulative_bounds == default_table.cumulative_bounds

    def test_weight_of(self, default_table):
        assert default_table.weight_of("orange") == 0.30
        with pytest.raises(KeyError):
            default_table.weight_of("missing")

    def test_cap_equal_to_pity_is_allowed(self):
        table = make_table([("a", 0.5), ("b", 0.5)], pity_threshold=5, max_draws_per_trial=5)
        assert table.max_draws_per_trial == table.pity_threshold

    def test_sum_within_tolerance_is_accepted(self):
        table = make_table([("a", 0.5), ("b", 0.4999995)])
        assert table.cumulative_bounds[-1] < 1.0


class TestRateTableValidation:
    """Tests for InvalidConfiguration cases."""

    def test_non_positive_pity(self):
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 1.0)], pity_threshold=0)
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 1.0)], pity_threshold=-3)

    def test_cap_below_pity(self):
        with pytest.raises(InvalidConfiguration, match="Safety cap"):
            make_table([("a", 0.5), ("b", 0.5)], pity_threshold=600, max_draws_per_trial=599)

    def test_negative_weight(self):
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 0.5), ("b", -0.1), ("c", 0.6)])

    def test_weight_above_one(self):
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 0.5), ("b", 1.5)])

    def test_weights_not_reaching_one(self):
        with pytest.raises(InvalidConfiguration, match="sum to 1"):
            make_table([("a", 0.5), ("b", 0.4)])

    def test_weights_overshooting_one(self):
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 0.5), ("b", 0.6)])

    def test_zero_weight_top_tier(self):
        with pytest.raises(InvalidConfiguration, match="Top tier"):
            make_table([("a", 0.0), ("b", 1.0)])

    def test_duplicate_ids(self):
        with pytest.raises(InvalidConfiguration, match="Duplicate"):
            make_table([("a", 0.5), ("a", 0.5)])

    def test_empty_tiers(self):
        with pytest.raises(InvalidConfiguration):
            make_table([])

    def test_non_integer_pity(self):
        with pytest.raises(InvalidConfiguration):
            make_table([("a", 1.0)], pity_threshold=2.5)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            build_rate_table({"a": 1.0}, pity_threshold=0)


class TestTrialResult:
    """Tests for TrialResult helpers."""

    def test_reached_top_tier(self):
        hit = TrialResult(total_draws=3, tier_counts={"a": 1, "b": 2}, top_tier_draw_index=3)
        capped = TrialResult(total_draws=5, tier_counts={"a": 0, "b": 5}, top_tier_draw_index=None)
        assert hit.reached_top_tier
        assert not capped.reached_top_tier

    def test_tier_counts_are_read_only(self):
        counts = {"a": 1, "b": 2}
        result = TrialResult(total_draws=3, tier_counts=counts, top_tier_draw_index=3)
        with pytest.raises(TypeError):
            result.tier_counts["a"] = 5
        counts["a"] = 5
        assert result.tier_counts["a"] == 1

    def test_equal_results_hash_equal(self):
        first = TrialResult(total_draws=3, tier_counts={"a": 1, "b": 2}, top_tier_draw_index=3)
        second = TrialResult(total_draws=3, tier_counts={"b": 2, "a": 1}, top_tier_draw_index=3)
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_pickle_round_trip(self):
        result = TrialResult(total_draws=5, tier_counts={"a": 0, "b": 5}, top_tier_draw_index=None)
        assert pickle.loads(pickle.dumps(result)) == result
