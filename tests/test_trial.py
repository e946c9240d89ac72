"""
Unit tests for trial.py - pity counter and safety cap behaviour.
"""
import random

import pytest

from conftest import FixedRandom, ScriptedRandom
from pity_core import RarityTier, RateTable, TrialAccumulator, run_trial, summarize

ALWAYS_PURPLE = 0.5
ALWAYS_LEGENDARY = 0.0


class TestForcedPaths:
    """Tests driven by scripted random sources."""

    def test_pity_forces_top_tier_at_threshold(self, default_table):
        rng = FixedRandom(ALWAYS_PURPLE)
        result = run_trial(default_table, rng)

        assert result.top_tier_draw_index == 600
        assert result.total_draws == 600
        assert result.tier_counts["legendary"] == 1
        assert result.tier_counts["purple"] == 599
        # The forced draw does not consume randomness.
        assert rng.calls == 599

    def test_natural_hit_on_first_draw(self, default_table):
        result = run_trial(default_table, FixedRandom(ALWAYS_LEGENDARY))

        assert result.top_tier_draw_index == 1
        assert result.total_draws == 1
        assert result.tier_counts == {"legendary": 1, "gold": 0, "orange": 0, "purple": 0}

    def test_natural_hit_ends_trial(self, default_table):
        rng = ScriptedRandom([0.5] * 5 + [0.01] * 4 + [0.001, 0.001])
        result = run_trial(default_table, rng)

        assert result.top_tier_draw_index == 10
        assert result.total_draws == 10
        assert result.tier_counts["purple"] == 5
        assert result.tier_counts["gold"] == 4
        assert result.tier_counts["legendary"] == 1
        assert rng.calls == 10

    def test_custom_pity_threshold(self):
        table = RateTable(
            tiers=(RarityTier("top", 0.1), RarityTier("rest", 0.9)),
            pity_threshold=5,
            max_draws_per_trial=50,
        )
        result = run_trial(table, FixedRandom(0.9))
        assert result.top_tier_draw_index == 5
        assert result.tier_counts == {"top": 1, "rest": 4}

    def test_pity_fires_when_cap_equals_threshold(self):
        table = RateTable(
            tiers=(RarityTier("top", 0.1), RarityTier("rest", 0.9)),
            pity_threshold=7,
            max_draws_per_trial=7,
        )
        result = run_trial(table, FixedRandom(0.9))
        assert result.top_tier_draw_index == 7
        assert result.reached_top_tier


class TestSeededTrials:
    """Invariants over many seeded trials."""

    def test_trials_are_bounded_and_hit_once(self, default_table):
        rng = random.Random(2024)
        for _ in range(300):
            result = run_trial(default_table, rng)
            assert 1 <= result.total_draws <= default_table.pity_threshold
            assert result.total_draws <= default_table.max_draws_per_trial
            assert result.tier_counts["legendary"] == 1
            assert result.top_tier_draw_index == result.total_draws
            assert sum(result.tier_counts.values()) == result.total_draws

    def test_same_seed_same_trial(self, default_table):
        first = run_trial(default_table, random.Random(99))
        second = run_trial(default_table, random.Random(99))
        assert first == second


class TestSafetyCap:
    """The cap ends a trial when pity has not fired."""

    @staticmethod
    def capped_table(cap):
        table = RateTable(
            tiers=(RarityTier("top", 0.1), RarityTier("rest", 0.9)),
            pity_threshold=10,
            max_draws_per_trial=10,
        )
        # Validation rejects a cap below pity; force one to reach the cap exit.
        object.__setattr__(table, "max_draws_per_trial", cap)
        return table

    def test_cap_ends_trial_without_top_tier(self):
        rng = FixedRandom(0.9)
        result = run_trial(self.capped_table(5), rng)

        assert result.total_draws == 5
        assert result.top_tier_draw_index is None
        assert not result.reached_top_tier
        assert result.tier_counts == {"top": 0, "rest": 5}
        assert rng.calls == 5

    def test_capped_trials_make_summary_degenerate(self):
        table = self.capped_table(5)
        results = [run_trial(table, FixedRandom(0.9)) for _ in range(3)]
        summary = summarize(table, TrialAccumulator.from_results(table.tier_ids, results))

        assert summary.capped_trials == 3
        assert summary.total_draws == 15
        assert summary.is_degenerate
        assert summary.expected_top_tier.empirical is None
        assert summary.tier("rest").empirical_pct == pytest.approx(100.0)
