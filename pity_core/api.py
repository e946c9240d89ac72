"""High-level entry points used by the UI and callers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from time import perf_counter
from typing import Optional

from .data import (
    DEFAULT_MAX_DRAWS_PER_TRIAL,
    DEFAULT_PITY_THRESHOLD,
    DEFAULT_TIER_WEIGHTS,
)
from .models import RarityTier, RateTable, SimulationSummary
from .simulation import ProgressFn, StopFn, run_simulation

logger = logging.getLogger(__name__)


def build_rate_table(
    tier_weights: Mapping[str, float],
    pity_threshold: int = DEFAULT_PITY_THRESHOLD,
    max_draws_per_trial: int = DEFAULT_MAX_DRAWS_PER_TRIAL,
) -> RateTable:
    """Build a validated rate table from an ordered name-to-weight mapping.

    Parameters
    ----------
    tier_weights:
        Mapping from tier id to probability weight. Iteration order is the
        evaluation order and the first entry is the top tier.
    pity_threshold:
        Draws without a top-tier outcome after which one is forced.
    max_draws_per_trial:
        Safety cap on draws per trial.

    Raises
    ------
    InvalidConfiguration
        If the weights or bounds cannot describe a valid draw.
    """

    tiers = tuple(RarityTier(id=name, weight=float(weight)) for name, weight in tier_weights.items())
    return RateTable(
        tiers=tiers,
        pity_threshold=pity_threshold,
        max_draws_per_trial=max_draws_per_trial,
    )


def configure() -> RateTable:
    """Return the fixed four-tier table with a 600-draw pity and a 1000-draw cap."""

    return build_rate_table(DEFAULT_TIER_WEIGHTS)


@dataclass
class ExperimentResult:
    """Bundle containing the rate table, the summary, and run metadata."""

    rate_table: RateTable
    summary: SimulationSummary
    seed: Optional[int]
    workers: int
    compute_seconds: float


def run_experiment(
    trial_count: int,
    rate_table: Optional[RateTable] = None,
    seed: Optional[int] = None,
    workers: int = 1,
    should_stop: Optional[StopFn] = None,
    on_progress: Optional[ProgressFn] = None,
) -> ExperimentResult:
    """Run a timed simulation against ``rate_table`` (the default table if omitted).

    Parameters
    ----------
    trial_count:
        Number of independent trials to run.
    rate_table:
        Optional override for the default configuration.
    seed:
        Seed forwarded to the random source; ``None`` uses fresh entropy.
    workers:
        Number of worker processes used for the trials.
    should_stop:
        Optional cancellation probe checked between trials.
    on_progress:
        Optional ``(completed, total)`` progress callback.

    Returns
    -------
    ExperimentResult
        Summary plus the configuration and timing it was produced with.
    """

    if rate_table is None:
        rate_table = configure()

    compute_start = perf_counter()
    summary = run_simulation(
        rate_table,
        trial_count,
        seed=seed,
        workers=workers,
        should_stop=should_stop,
        on_progress=on_progress,
    )
    compute_seconds = perf_counter() - compute_start
    logger.info(
        "Simulated %d trials (%d draws) in %.2f s",
        summary.trial_count,
        summary.total_draws,
        compute_seconds,
    )

    return ExperimentResult(
        rate_table=rate_table,
        summary=summary,
        seed=seed,
        workers=workers,
        compute_seconds=compute_seconds,
    )
