"""Multi-event API example: select D0/D0bar candidates with a custom config.

Run from repository root without installation:
    PYTHONPATH=src python examples/select_events_api.py
"""

from __future__ import annotations
__author__ = "hfselect developers"


from pathlib import Path

from hfselect import D0CandidateSelector, stage_counts
from hfselect.io import load_events_json, load_selection_config_json, write_selection_table


def main() -> int:
    """Load events and config, assign D0/D0bar statuses, and write a parquet table."""
    config = load_selection_config_json("examples/config.json")
    events = load_events_json("examples/events.json")
    results = D0CandidateSelector(config).select_events(events)
    for res in results:
        print(f"{res.event_id:>6} {res.candidate_id:<12} D0={res.status_d0} D0bar={res.status_d0bar} ({res.stage.value})")
    out_path = Path("examples/selection_output.parquet")
    write_selection_table(out_path, results)
    print(f"Wrote {len(results)} statuses to {out_path}: {dict(stage_counts(results))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
