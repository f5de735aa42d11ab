"""Summarise a status table written by `hf-d0-selector`.

Usage:
    python examples/inspect_statuses.py statuses.parquet [--plot stages.png]
"""

from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd

_READERS = {
    ".parquet": pd.read_parquet,
    ".csv": pd.read_csv,
    ".pkl": pd.read_pickle,
    ".pickle": pd.read_pickle,
}


def summarise(df: pd.DataFrame) -> pd.DataFrame:
    """Per-stage candidate counts with the number selected under each hypothesis."""
    return (
        df.groupby("stage")
        .agg(candidates=("candidate_id", "size"), d0=("status_d0", "sum"), d0bar=("status_d0bar", "sum"))
        .sort_values("candidates", ascending=False)
    )


def plot_stages(summary: pd.DataFrame, out: Path) -> None:
    import matplotlib.pyplot as plt

    ax = summary["candidates"].plot.barh()
    ax.set_xlabel("candidates")
    ax.invert_yaxis()
    plt.tight_layout()
    plt.savefig(out, dpi=120)


def main(argv: list[str]) -> int:
    if not argv:
        print(__doc__)
        return 2
    table = Path(argv[0])
    df = _READERS[table.suffix.lower()](table)
    summary = summarise(df)
    print(summary.to_string())
    ambiguous = df[(df["status_d0"] == 1) & (df["status_d0bar"] == 1)]
    print(f"\n{len(df)} candidates, {len(ambiguous)} selected under both hypotheses")
    if "--plot" in argv[1:]:
        out = Path(argv[argv.index("--plot") + 1])
        plot_stages(summary, out)
        print(f"Saved {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
