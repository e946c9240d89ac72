"""Fold trial results into running totals and derive summary statistics."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from .data import HISTOGRAM_BUCKET_WIDTH, PERCENT_DECIMALS
from .errors import InvalidTrialCount
from .models import (
    CumulativePoint,
    ExpectedDrawsComparison,
    HistogramBucket,
    RateTable,
    SimulationSummary,
    TierStatistic,
    TrialResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialAccumulator:
    """Associative running totals over any number of trials.

    Two accumulators over disjoint trial sets merge into the accumulator of
    their union, in either order up to the ordering of ``first_hit_draws``.
    """

    tier_ids: tuple[str, ...]
    trial_count: int
    total_draws: int
    tier_totals: tuple[int, ...]
    first_hit_draws: tuple[int, ...]
    capped_trials: int

    @classmethod
    def empty(cls, tier_ids: Sequence[str]) -> TrialAccumulator:
        ids = tuple(tier_ids)
        return cls(
            tier_ids=ids,
            trial_count=0,
            total_draws=0,
            tier_totals=(0,) * len(ids),
            first_hit_draws=(),
            capped_trials=0,
        )

    @classmethod
    def from_results(
        cls,
        tier_ids: Sequence[str],
        results: Iterable[TrialResult],
    ) -> TrialAccumulator:
        """Fold ``results`` into a fresh accumulator."""

        ids = tuple(tier_ids)
        totals = [0] * len(ids)
        hits: list[int] = []
        trial_count = 0
        total_draws = 0
        capped = 0
        for result in results:
            trial_count += 1
            total_draws += result.total_draws
            for idx, tier_id in enumerate(ids):
                totals[idx] += result.tier_counts.get(tier_id, 0)
            if result.top_tier_draw_index is None:
                capped += 1
            else:
                hits.append(result.top_tier_draw_index)
        return cls(
            tier_ids=ids,
            trial_count=trial_count,
            total_draws=total_draws,
            tier_totals=tuple(totals),
            first_hit_draws=tuple(hits),
            capped_trials=capped,
        )

    def merge(self, other: TrialAccumulator) -> TrialAccumulator:
        """Return the accumulator covering the trials of both operands.

        Raises
        ------
        ValueError
            If the operands were built for different tier lists.
        """

        if self.tier_ids != other.tier_ids:
            raise ValueError(
                f"Cannot merge accumulators over different tiers: {self.tier_ids} != {other.tier_ids}"
            )
        return TrialAccumulator(
            tier_ids=self.tier_ids,
            trial_count=self.trial_count + other.trial_count,
            total_draws=self.total_draws + other.total_draws,
            tier_totals=tuple(a + b for a, b in zip(self.tier_totals, other.tier_totals)),
            first_hit_draws=self.first_hit_draws + other.first_hit_draws,
            capped_trials=self.capped_trials + other.capped_trials,
        )


def merge_all(tier_ids: Sequence[str], parts: Iterable[TrialAccumulator]) -> TrialAccumulator:
    """Reduce accumulators from independent trial batches into one."""

    merged = TrialAccumulator.empty(tier_ids)
    for part in parts:
        merged = merged.merge(part)
    return merged


def theoretical_percent(weight: float) -> float:
    """Convert a configured weight to a percentage without float noise."""

    return round(weight * 100.0, PERCENT_DECIMALS)


def build_tier_statistics(
    rate_table: RateTable,
    accumulator: TrialAccumulator,
) -> list[TierStatistic]:
    """Compare each tier's configured weight with its observed share of draws."""

    total = accumulator.total_draws
    rows: list[TierStatistic] = []
    for tier, count in zip(rate_table.tiers, accumulator.tier_totals):
        empirical = count / total * 100.0 if total > 0 else None
        rows.append(
            TierStatistic(
                id=tier.id,
                theoretical_pct=theoretical_percent(tier.weight),
                empirical_pct=empirical,
                count=count,
            )
        )
    return rows


def expected_draws_to_top_tier(
    rate_table: RateTable,
    first_hit_draws: Sequence[int],
) -> ExpectedDrawsComparison:
    """Return the geometric expectation ``1 / w`` next to the observed mean."""

    theoretical = 1.0 / rate_table.top_tier.weight
    if not first_hit_draws:
        return ExpectedDrawsComparison(theoretical=theoretical, empirical=None, absolute_difference=None)
    empirical = float(np.mean(np.asarray(first_hit_draws, dtype=np.float64)))
    return ExpectedDrawsComparison(
        theoretical=theoretical,
        empirical=empirical,
        absolute_difference=abs(theoretical - empirical),
    )


def build_histogram(
    first_hit_draws: Sequence[int],
    pity_threshold: int,
    bucket_width: int = HISTOGRAM_BUCKET_WIDTH,
) -> list[HistogramBucket]:
    """Bucket first-hit draw indices over ``[1, pity_threshold]``.

    Buckets are ``[start, start + width)`` except the last one, which is closed
    at ``pity_threshold`` so hits forced by pity are counted.

    Raises
    ------
    ValueError
        If ``bucket_width`` is not positive or a hit lies outside
        ``[1, pity_threshold]``.
    """

    if bucket_width <= 0:
        raise ValueError(f"Bucket width must be positive, got {bucket_width}")

    starts = list(range(0, pity_threshold, bucket_width))
    bucket_count = len(starts)
    hits = np.asarray(first_hit_draws, dtype=np.int64)
    if hits.size:
        out_of_range = hits[(hits < 1) | (hits > pity_threshold)]
        if out_of_range.size:
            raise ValueError(
                f"First-hit draws must lie in [1, {pity_threshold}], got {int(out_of_range[0])}"
            )
        # A hit exactly at the threshold can index one bucket past the last.
        indices = np.minimum(hits // bucket_width, bucket_count - 1)
        counts = np.bincount(indices, minlength=bucket_count)
    else:
        counts = np.zeros(bucket_count, dtype=np.int64)
    total = int(hits.size)

    buckets: list[HistogramBucket] = []
    for idx, start in enumerate(starts):
        is_last = idx == bucket_count - 1
        end = pity_threshold if is_last else start + bucket_width - 1
        count = int(counts[idx])
        buckets.append(
            HistogramBucket(
                range_label=f"{start}-{end}",
                start=start,
                end=end,
                count=count,
                percentage=count / total * 100.0 if total > 0 else None,
            )
        )
    return buckets


def curve_draw_counts(pity_threshold: int, step: int = HISTOGRAM_BUCKET_WIDTH) -> list[int]:
    """Return ``step, 2*step, ...`` up to and including ``pity_threshold``."""

    points = list(range(step, pity_threshold + 1, step))
    if not points or points[-1] != pity_threshold:
        points.append(pity_threshold)
    return points


def build_cumulative_curve(
    rate_table: RateTable,
    first_hit_draws: Sequence[int],
    step: int = HISTOGRAM_BUCKET_WIDTH,
) -> list[CumulativePoint]:
    """Theoretical ``1 - (1 - w)^d`` against the observed share of hits by draw ``d``."""

    draw_counts = curve_draw_counts(rate_table.pity_threshold, step)
    miss_rate = 1.0 - rate_table.top_tier.weight
    sorted_hits = np.sort(np.asarray(first_hit_draws, dtype=np.int64))
    total = int(sorted_hits.size)
    reached = np.searchsorted(sorted_hits, draw_counts, side="right")

    curve: list[CumulativePoint] = []
    for draw_count, hit_count in zip(draw_counts, reached):
        curve.append(
            CumulativePoint(
                draw_count=draw_count,
                theoretical_pct=(1.0 - miss_rate**draw_count) * 100.0,
                empirical_pct=int(hit_count) / total * 100.0 if total > 0 else None,
            )
        )
    return curve


def _degenerate_fields(accumulator: TrialAccumulator) -> tuple[str, ...]:
    fields: list[str] = []
    if accumulator.total_draws == 0:
        fields.append("per_tier.empirical_pct")
    if not accumulator.first_hit_draws:
        fields.extend(
            [
                "expected_top_tier.empirical",
                "expected_top_tier.absolute_difference",
                "histogram.percentage",
                "cumulative_curve.empirical_pct",
            ]
        )
    return tuple(fields)


def summarize(
    rate_table: RateTable,
    accumulator: TrialAccumulator,
    bucket_width: int = HISTOGRAM_BUCKET_WIDTH,
) -> SimulationSummary:
    """Derive the externally visible summary from folded trial totals.

    Parameters
    ----------
    rate_table:
        Configuration the trials were run against.
    accumulator:
        Totals over at least one trial.
    bucket_width:
        Histogram bucket width and cumulative-curve step.

    Raises
    ------
    InvalidTrialCount
        If the accumulator holds no trials.
    ValueError
        If the accumulator was built for a different tier list.
    """

    if accumulator.trial_count < 1:
        raise InvalidTrialCount("Cannot summarize a simulation without trials.")
    if accumulator.tier_ids != rate_table.tier_ids:
        raise ValueError(
            f"Accumulator tiers {accumulator.tier_ids} do not match rate table {rate_table.tier_ids}"
        )

    hits = accumulator.first_hit_draws
    degenerate = _degenerate_fields(accumulator)
    if degenerate:
        logger.warning(
            "Degenerate statistics after %d trials (%d capped): %s",
            accumulator.trial_count,
            accumulator.capped_trials,
            ", ".join(degenerate),
        )

    return SimulationSummary(
        trial_count=accumulator.trial_count,
        total_draws=accumulator.total_draws,
        average_draws_per_trial=accumulator.total_draws / accumulator.trial_count,
        top_tier_id=rate_table.top_tier_id,
        per_tier=build_tier_statistics(rate_table, accumulator),
        expected_top_tier=expected_draws_to_top_tier(rate_table, hits),
        histogram=build_histogram(hits, rate_table.pity_threshold, bucket_width),
        cumulative_curve=build_cumulative_curve(rate_table, hits, bucket_width),
        first_hit_draws=hits,
        capped_trials=accumulator.capped_trials,
        degenerate_fields=degenerate,
    )

