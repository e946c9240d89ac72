"""Tabular views of a simulation summary for charts and console output."""

from __future__ import annotations

from collections.abc import Mapping

import pandas as pd

from .data import TIER_LABELS
from .models import SimulationSummary

THEORETICAL_SERIES = "theoretical"
EMPIRICAL_SERIES = "empirical"


def tier_frame(
    summary: SimulationSummary,
    labels: Mapping[str, str] = TIER_LABELS,
) -> pd.DataFrame:
    """Return one row per tier with theoretical, empirical, and deviation percentages."""

    return pd.DataFrame(
        {
            "tier": [row.id for row in summary.per_tier],
            "label": [labels.get(row.id, row.id) for row in summary.per_tier],
            "theoretical_pct": [row.theoretical_pct for row in summary.per_tier],
            "empirical_pct": [row.empirical_pct for row in summary.per_tier],
            "deviation_pct": [row.deviation_pct for row in summary.per_tier],
            "count": [row.count for row in summary.per_tier],
        }
    )


def histogram_frame(summary: SimulationSummary) -> pd.DataFrame:
    """Return the first-hit histogram with one row per bucket."""

    return pd.DataFrame(
        {
            "range": [bucket.range_label for bucket in summary.histogram],
            "start": [bucket.start for bucket in summary.histogram],
            "end": [bucket.end for bucket in summary.histogram],
            "count": [bucket.count for bucket in summary.histogram],
            "percentage": [bucket.percentage for bucket in summary.histogram],
        }
    )


def cumulative_frame(summary: SimulationSummary) -> pd.DataFrame:
    """Return the cumulative curve in long format (one row per draw count and series)."""

    wide = pd.DataFrame(
        {
            "draw_count": [point.draw_count for point in summary.cumulative_curve],
            THEORETICAL_SERIES: [point.theoretical_pct for point in summary.cumulative_curve],
            EMPIRICAL_SERIES: [point.empirical_pct for point in summary.cumulative_curve],
        }
    )
    long = wide.melt(
        id_vars="draw_count",
        value_vars=[THEORETICAL_SERIES, EMPIRICAL_SERIES],
        var_name="series",
        value_name="probability_pct",
    )
    return long.dropna(subset=["probability_pct"]).reset_index(drop=True)


def overview_frame(summary: SimulationSummary) -> pd.DataFrame:
    """Return headline metrics as a two-column metric/value table."""

    expected = summary.expected_top_tier
    rows = [
        ("trials", summary.trial_count),
        ("total_draws", summary.total_draws),
        ("average_draws_per_trial", summary.average_draws_per_trial),
        ("expected_draws_theoretical", expected.theoretical),
        ("expected_draws_empirical", expected.empirical),
        ("expected_draws_difference", expected.absolute_difference),
        ("capped_trials", summary.capped_trials),
    ]
    return pd.DataFrame(rows, columns=["metric", "value"])
