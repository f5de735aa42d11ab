"""Command-line interface for running the D0 candidate selection on event inputs."""

from __future__ import annotations

import argparse
import logging

from .io import load_events_json, load_selection_config_json, write_selection_table
from .models import SelectionConfig
from .selector import D0CandidateSelector, stage_counts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="hf-d0-selector",
        description="Assign D0/D0bar selection statuses to two-prong candidates using topology and PID.",
    )
    parser.add_argument(
        "--events",
        required=True,
        help="Input JSON with key 'events' (each with 'tracks' and 'candidates').",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional selection config JSON (pT range, detector windows, cut table).",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output table file for selection statuses (.parquet, .csv, .pkl).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load config and inputs, run the selector, write table."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Configuration errors abort here, before any candidate is read.
    config = SelectionConfig() if args.config is None else load_selection_config_json(args.config)
    selector = D0CandidateSelector(config)

    events = load_events_json(args.events)
    results = selector.select_events(events)
    write_selection_table(args.out, results)

    n_d0 = sum(r.status_d0 for r in results)
    n_d0bar = sum(r.status_d0bar for r in results)
    logger.info(
        "Processed %d candidates: %d D0, %d D0bar. Stages: %s",
        len(results),
        n_d0,
        n_d0bar,
        dict(stage_counts(results)),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
