"""Domain constants and the default rate configuration."""

from __future__ import annotations

from typing import Final

TIER_LABELS: Final[dict[str, str]] = {
    "legendary": "殿堂",
    "gold": "金枠",
    "orange": "オレンジ枠",
    "purple": "紫枠",
}

TIER_COLORS: Final[dict[str, str]] = {
    "legendary": "#FFD700",
    "gold": "#FFA500",
    "orange": "#FF4500",
    "purple": "#9932CC",
}

# Evaluation order matters: the first tier is checked first and is the top tier.
DEFAULT_TIER_WEIGHTS: Final[dict[str, float]] = {
    "legendary": 0.002,
    "gold": 0.012,
    "orange": 0.30,
    "purple": 0.686,
}

DEFAULT_PITY_THRESHOLD: Final[int] = 600
DEFAULT_MAX_DRAWS_PER_TRIAL: Final[int] = 1000

HISTOGRAM_BUCKET_WIDTH: Final[int] = 50

TRIAL_COUNT_OPTIONS: Final[list[int]] = [100, 500, 1000, 2000, 5000]
DEFAULT_TRIAL_COUNT: Final[int] = 1000

# Cumulative weights may undershoot 1.0 by float summation error.
WEIGHT_SUM_TOLERANCE: Final[float] = 1e-6

# Decimal places kept on configuration-derived percentages (0.002 -> 0.2 exactly).
PERCENT_DECIMALS: Final[int] = 10
