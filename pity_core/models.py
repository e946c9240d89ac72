"""Dataclasses shared across sampling, trial, and aggregation modules."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from itertools import accumulate
from types import MappingProxyType
from typing import Optional

from .data import WEIGHT_SUM_TOLERANCE
from .errors import InvalidConfiguration


@dataclass(frozen=True)
class RarityTier:
    """One reward category and the probability of drawing it."""

    id: str
    weight: float


@dataclass(frozen=True)
class RateTable:
    """Immutable draw configuration shared read-only by every trial.

    Parameters
    ----------
    tiers:
        Tiers in evaluation order. The first tier is the top tier tracked by pity.
    pity_threshold:
        Draw count since the last top-tier outcome at which one is forced.
    max_draws_per_trial:
        Hard bound on draws per trial; must not be below ``pity_threshold``.

    Raises
    ------
    InvalidConfiguration
        If the tiers do not partition ``[0, 1)`` or the bounds are inconsistent.
    """

    tiers: tuple[RarityTier, ...]
    pity_threshold: int
    max_draws_per_trial: int
    cumulative_bounds: tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", tuple(self.tiers))
        self._validate()
        bounds = tuple(accumulate(tier.weight for tier in self.tiers))
        object.__setattr__(self, "cumulative_bounds", bounds)

    def _validate(self) -> None:
        if not self.tiers:
            raise InvalidConfiguration("Rate table requires at least one tier.")

        seen: set[str] = set()
        for tier in self.tiers:
            if not tier.id:
                raise InvalidConfiguration("Tier ids must be non-empty strings.")
            if tier.id in seen:
                raise InvalidConfiguration(f"Duplicate tier id '{tier.id}'")
            seen.add(tier.id)
            if not math.isfinite(tier.weight) or tier.weight < 0.0:
                raise InvalidConfiguration(
                    f"Tier '{tier.id}' has invalid weight {tier.weight!r}; weights must be >= 0."
                )
            if tier.weight > 1.0:
                raise InvalidConfiguration(
                    f"Tier '{tier.id}' has weight {tier.weight!r} above 1."
                )

        if self.tiers[0].weight <= 0.0:
            raise InvalidConfiguration(
                f"Top tier '{self.tiers[0].id}' must have a positive weight."
            )

        total = math.fsum(tier.weight for tier in self.tiers)
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise InvalidConfiguration(
                f"Tier weights must sum to 1 (within {WEIGHT_SUM_TOLERANCE}), got {total!r}"
            )

        if isinstance(self.pity_threshold, bool) or not isinstance(self.pity_threshold, int):
            raise InvalidConfiguration("Pity threshold must be an integer.")
        if self.pity_threshold <= 0:
            raise InvalidConfiguration(
                f"Pity threshold must be positive, got {self.pity_threshold}"
            )
        if isinstance(self.max_draws_per_trial, bool) or not isinstance(
            self.max_draws_per_trial, int
        ):
            raise InvalidConfiguration("Safety cap must be an integer.")
        if self.max_draws_per_trial < self.pity_threshold:
            raise InvalidConfiguration(
                f"Safety cap ({self.max_draws_per_trial}) must not be below the "
                f"pity threshold ({self.pity_threshold})"
            )

    @property
    def top_tier(self) -> RarityTier:
        return self.tiers[0]

    @property
    def top_tier_id(self) -> str:
        return self.tiers[0].id

    @property
    def tier_ids(self) -> tuple[str, ...]:
        return tuple(tier.id for tier in self.tiers)

    def weight_of(self, tier_id: str) -> float:
        """Return the configured weight for ``tier_id``.

        Raises
        ------
        KeyError
            If the tier is not part of the table.
        """

        for tier in self.tiers:
            if tier.id == tier_id:
                return tier.weight
        raise KeyError(tier_id)


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one trial, from the first draw until a top-tier outcome.

    ``tier_counts`` is copied into a read-only mapping, so results stay
    immutable and hashable.
    """

    total_draws: int
    tier_counts: Mapping[str, int]
    top_tier_draw_index: Optional[int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tier_counts", MappingProxyType(dict(self.tier_counts)))

    def __hash__(self) -> int:
        return hash((self.total_draws, tuple(sorted(self.tier_counts.items())), self.top_tier_draw_index))

    def __reduce__(self):
        return (TrialResult, (self.total_draws, dict(self.tier_counts), self.top_tier_draw_index))

    @property
    def reached_top_tier(self) -> bool:
        return self.top_tier_draw_index is not None


@dataclass
class TierStatistic:
    """Theoretical versus observed frequency for one tier."""

    id: str
    theoretical_pct: float
    empirical_pct: Optional[float]
    count: int

    @property
    def deviation_pct(self) -> Optional[float]:
        if self.empirical_pct is None:
            return None
        return self.empirical_pct - self.theoretical_pct


@dataclass
class ExpectedDrawsComparison:
    """Expected number of draws until the first top-tier outcome.

    ``empirical`` and ``absolute_difference`` are ``None`` when no trial reached
    the top tier.
    """

    theoretical: float
    empirical: Optional[float]
    absolute_difference: Optional[float]


@dataclass
class HistogramBucket:
    """Share of first top-tier hits whose draw index falls in ``[start, end]``."""

    range_label: str
    start: int
    end: int
    count: int
    percentage: Optional[float]


@dataclass
class CumulativePoint:
    """Probability of having reached the top tier within ``draw_count`` draws."""

    draw_count: int
    theoretical_pct: float
    empirical_pct: Optional[float]


@dataclass
class SimulationSummary:
    """Aggregated Monte Carlo metrics for a rate table."""

    trial_count: int
    total_draws: int
    average_draws_per_trial: float
    top_tier_id: str
    per_tier: list[TierStatistic]
    expected_top_tier: ExpectedDrawsComparison
    histogram: list[HistogramBucket]
    cumulative_curve: list[CumulativePoint]
    first_hit_draws: tuple[int, ...]
    capped_trials: int
    degenerate_fields: tuple[str, ...] = ()

    @property
    def is_degenerate(self) -> bool:
        return bool(self.degenerate_fields)

    def tier(self, tier_id: str) -> TierStatistic:
        """Return the per-tier row for ``tier_id``."""

        for row in self.per_tier:
            if row.id == tier_id:
                return row
        raise KeyError(tier_id)
