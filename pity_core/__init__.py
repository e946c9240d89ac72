"""Monte Carlo engine for tiered draws with a guaranteed top-tier ceiling."""

from __future__ import annotations

from .aggregation import (
    TrialAccumulator,
    build_cumulative_curve,
    build_histogram,
    merge_all,
    summarize,
)
from .api import ExperimentResult, build_rate_table, configure, run_experiment
from .data import (
    DEFAULT_MAX_DRAWS_PER_TRIAL,
    DEFAULT_PITY_THRESHOLD,
    DEFAULT_TIER_WEIGHTS,
    DEFAULT_TRIAL_COUNT,
    HISTOGRAM_BUCKET_WIDTH,
    TIER_COLORS,
    TIER_LABELS,
    TRIAL_COUNT_OPTIONS,
)
from .errors import InvalidConfiguration, InvalidTrialCount, SimulationCancelled
from .models import (
    CumulativePoint,
    ExpectedDrawsComparison,
    HistogramBucket,
    RarityTier,
    RateTable,
    SimulationSummary,
    TierStatistic,
    TrialResult,
)
from .sampler import sample
from .simulation import run_simulation
from .trial import run_trial

__all__ = [
    "DEFAULT_MAX_DRAWS_PER_TRIAL",
    "DEFAULT_PITY_THRESHOLD",
    "DEFAULT_TIER_WEIGHTS",
    "DEFAULT_TRIAL_COUNT",
    "HISTOGRAM_BUCKET_WIDTH",
    "TIER_COLORS",
    "TIER_LABELS",
    "TRIAL_COUNT_OPTIONS",
    "CumulativePoint",
    "ExpectedDrawsComparison",
    "ExperimentResult",
    "HistogramBucket",
    "InvalidConfiguration",
    "InvalidTrialCount",
    "RarityTier",
    "RateTable",
    "SimulationCancelled",
    "SimulationSummary",
    "TierStatistic",
    "TrialAccumulator",
    "TrialResult",
    "build_cumulative_curve",
    "build_histogram",
    "build_rate_table",
    "configure",
    "merge_all",
    "run_experiment",
    "run_simulation",
    "run_trial",
    "sample",
    "summarize",
]
