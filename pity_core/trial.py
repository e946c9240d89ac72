"""Single-trial runner with a pity counter and a safety cap."""

from __future__ import annotations

import random
from typing import Optional

from .models import RateTable, TrialResult
from .sampler import tier_index_for

TOP_TIER_INDEX = 0


def run_trial(rate_table: RateTable, rng: random.Random) -> TrialResult:
    """Draw until the first top-tier outcome or the safety cap.

    Each draw first advances the pity counter. Once it reaches the pity
    threshold the top tier is forced without sampling; otherwise one value is
    sampled from ``rng``. Either path resets the counter and ends the trial, so
    a result never holds more than one top-tier outcome.

    Parameters
    ----------
    rate_table:
        Validated tier configuration shared by all trials.
    rng:
        Random source owned by the caller's trial loop.

    Returns
    -------
    TrialResult
        Per-tier counts and the 1-based draw index of the top-tier outcome, or
        ``None`` when the safety cap ended the trial first.
    """

    counts = [0] * len(rate_table.tiers)
    draws_taken = 0
    pity_counter = 0
    top_tier_draw_index: Optional[int] = None

    while top_tier_draw_index is None and draws_taken < rate_table.max_draws_per_trial:
        draws_taken += 1
        pity_counter += 1
        if pity_counter >= rate_table.pity_threshold:
            tier_index = TOP_TIER_INDEX
        else:
            tier_index = tier_index_for(rate_table, rng.random())
        counts[tier_index] += 1
        if tier_index == TOP_TIER_INDEX:
            top_tier_draw_index = draws_taken
            pity_counter = 0

    return TrialResult(
        total_draws=draws_taken,
        tier_counts={tier.id: count for tier, count in zip(rate_table.tiers, counts)},
        top_tier_draw_index=top_tier_draw_index,
    )
