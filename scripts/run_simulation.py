"""Run the pity simulation from the command line and print the report tables."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pity_core import DEFAULT_TRIAL_COUNT, configure, run_experiment
from pity_core.reporting import cumulative_frame, histogram_frame, overview_frame, tier_frame


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate tiered draws with a pity ceiling.")
    parser.add_argument(
        "--trials",
        type=int,
        default=DEFAULT_TRIAL_COUNT,
        help="Number of independent trials to run.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible runs (fresh entropy when omitted).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes used for the trials.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def print_section(title: str, frame: pd.DataFrame) -> None:
    print(f"\n== {title} ==")
    print(frame.to_string(index=False, na_rep="undefined", float_format=lambda v: f"{v:.3f}"))


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = run_experiment(
            args.trials,
            rate_table=configure(),
            seed=args.seed,
            workers=args.workers,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    summary = result.summary

    print_section("Overview", overview_frame(summary))
    print_section("Tiers", tier_frame(summary))
    print_section("First top-tier draw histogram", histogram_frame(summary))
    print_section("Cumulative probability", cumulative_frame(summary))
    if summary.is_degenerate:
        print(f"\nUndefined statistics: {', '.join(summary.degenerate_fields)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
