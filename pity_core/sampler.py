"""Categorical sampling over a rate table's cumulative partition."""

from __future__ import annotations

import random
from bisect import bisect_right

from .models import RateTable


def tier_index_for(rate_table: RateTable, u: float) -> int:
    """Return the index of the tier owning the uniform value ``u``.

    The first tier whose cumulative upper bound exceeds ``u`` wins. Values left
    uncovered because the bounds sum to slightly less than 1.0 fall back to the
    last tier.
    """

    bounds = rate_table.cumulative_bounds
    index = bisect_right(bounds, u)
    if index >= len(bounds):
        index = len(bounds) - 1
    return index


def sample(rate_table: RateTable, rng: random.Random) -> str:
    """Draw one tier id, consuming exactly one value from ``rng``.

    Parameters
    ----------
    rate_table:
        Tier configuration to sample from.
    rng:
        Uniform random source; only ``rng.random()`` is used.
    """

    return rate_table.tiers[tier_index_for(rate_table, rng.random())].id
