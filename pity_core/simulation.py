"""Monte Carlo driver that runs independent pity trials and summarizes them."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterator
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Optional

import numpy as np

from .aggregation import TrialAccumulator, merge_all, summarize
from .errors import InvalidTrialCount, SimulationCancelled
from .models import RateTable, SimulationSummary, TrialResult
from .trial import run_trial

logger = logging.getLogger(__name__)

StopFn = Callable[[], bool]
ProgressFn = Callable[[int, int], None]

CHUNKS_PER_WORKER = 8


def validate_trial_count(trial_count: int) -> int:
    """Return ``trial_count`` if it is a positive integer.

    Raises
    ------
    InvalidTrialCount
        If the value is not an integer or is below one.
    """

    if isinstance(trial_count, bool) or not isinstance(trial_count, (int, np.integer)):
        raise InvalidTrialCount(f"Trial count must be an integer, got {trial_count!r}")
    if trial_count < 1:
        raise InvalidTrialCount(f"Trial count must be at least 1, got {trial_count}")
    return int(trial_count)


def iter_trials(
    rate_table: RateTable,
    trial_count: int,
    rng: random.Random,
    should_stop: Optional[StopFn] = None,
    on_progress: Optional[ProgressFn] = None,
) -> Iterator[TrialResult]:
    """Yield ``trial_count`` trial results, checking for cancellation between trials."""

    report_every = max(1, trial_count // 100)
    for completed in range(trial_count):
        if should_stop is not None and should_stop():
            logger.info("Simulation stopped after %d of %d trials", completed, trial_count)
            raise SimulationCancelled(completed, trial_count)
        yield run_trial(rate_table, rng)
        done = completed + 1
        if on_progress is not None and (done % report_every == 0 or done == trial_count):
            on_progress(done, trial_count)


def simulate_chunk(task: tuple[RateTable, int, int]) -> TrialAccumulator:
    """Run one batch of trials with its own seeded generator (worker entry point)."""

    rate_table, size, seed = task
    rng = random.Random(seed)
    return TrialAccumulator.from_results(
        rate_table.tier_ids,
        (run_trial(rate_table, rng) for _ in range(size)),
    )


def split_trials(trial_count: int, workers: int) -> list[int]:
    """Split ``trial_count`` into at most ``workers`` near-equal positive chunks."""

    base, extra = divmod(trial_count, workers)
    sizes = [base + (1 if i < extra else 0) for i in range(workers)]
    return [size for size in sizes if size > 0]


def _chunk_seeds(seed: Optional[int], count: int) -> list[int]:
    seed_sequence = np.random.SeedSequence(seed)
    return [int(child.generate_state(1)[0]) for child in seed_sequence.spawn(count)]


def _run_parallel(
    rate_table: RateTable,
    trial_count: int,
    seed: Optional[int],
    workers: int,
    should_stop: Optional[StopFn],
    on_progress: Optional[ProgressFn],
) -> TrialAccumulator:
    # More chunks than workers so queued chunks can still be cancelled.
    chunk_sizes = split_trials(trial_count, workers * CHUNKS_PER_WORKER)
    seeds = _chunk_seeds(seed, len(chunk_sizes))
    tasks = [(rate_table, size, chunk_seed) for size, chunk_seed in zip(chunk_sizes, seeds)]

    parts: list[TrialAccumulator] = []
    completed = 0
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(simulate_chunk, task) for task in tasks]
        for future in as_completed(futures):
            part = future.result()
            parts.append(part)
            completed += part.trial_count
            if on_progress is not None:
                on_progress(completed, trial_count)
            if completed < trial_count and should_stop is not None and should_stop():
                pool.shutdown(wait=True, cancel_futures=True)
                finished = sum(
                    pending.result().trial_count
                    for pending in futures
                    if pending.done() and not pending.cancelled()
                )
                logger.info("Simulation stopped after %d of %d trials", finished, trial_count)
                raise SimulationCancelled(finished, trial_count)
    return merge_all(rate_table.tier_ids, parts)


def run_simulation(
    rate_table: RateTable,
    trial_count: int,
    seed: Optional[int] = None,
    workers: int = 1,
    should_stop: Optional[StopFn] = None,
    on_progress: Optional[ProgressFn] = None,
) -> SimulationSummary:
    """Run ``trial_count`` independent trials and summarize them.

    Parameters
    ----------
    rate_table:
        Validated tier configuration.
    trial_count:
        Number of trials; any positive integer.
    seed:
        Seed for the random source. ``None`` draws fresh entropy.
    workers:
        Number of worker processes. ``1`` runs sequentially in-process; larger
        values split the trials into independently seeded chunks.
    should_stop:
        Optional callable polled between trials (or between chunks when
        parallel); returning ``True`` cancels the run.
    on_progress:
        Optional callback receiving ``(completed, total)`` trial counts.

    Returns
    -------
    SimulationSummary
        Frequencies, expectation, histogram, and cumulative curve for the run.

    Raises
    ------
    InvalidTrialCount
        If ``trial_count`` is not a positive integer.
    SimulationCancelled
        If ``should_stop`` requested cancellation before all trials finished.
    """

    trial_count = validate_trial_count(trial_count)
    if workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {workers}")
    workers = min(workers, trial_count)

    logger.debug(
        "Running %d trials (pity=%d, cap=%d, workers=%d, seed=%r)",
        trial_count,
        rate_table.pity_threshold,
        rate_table.max_draws_per_trial,
        workers,
        seed,
    )
    if workers == 1:
        rng = random.Random(seed)
        accumulator = TrialAccumulator.from_results(
            rate_table.tier_ids,
            iter_trials(rate_table, trial_count, rng, should_stop, on_progress),
        )
    else:
        accumulator = _run_parallel(
            rate_table, trial_count, seed, workers, should_stop, on_progress
        )

    summary = summarize(rate_table, accumulator)
    logger.debug(
        "Finished %d trials: %d draws, %d top-tier hits",
        summary.trial_count,
        summary.total_draws,
        len(summary.first_hit_draws),
    )
    return summary
