"""pT-binned cut table: maps a transverse momentum to a row of named thresholds."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from .errors import ConfigurationError


@dataclass(frozen=True)
class PtBinnedCuts:
    """Named cut thresholds per pT bin.

    `pt_bins` holds the bin edges; bin `i` covers the half-open interval
    `[pt_bins[i], pt_bins[i + 1])`. `values[i][j]` is the threshold of cut
    `cut_labels[j]` in bin `i`.
    """

    pt_bins: tuple[float, ...]
    cut_labels: tuple[str, ...]
    values: tuple[tuple[float, ...], ...]

    def __post_init__(self) -> None:
        if len(self.pt_bins) < 2:
            raise ConfigurationError("At least two pT bin edges are required.")
        for lo, hi in zip(self.pt_bins, self.pt_bins[1:]):
            if not lo < hi:
                raise ConfigurationError(
                    f"pT bin edges must be strictly increasing, got {lo} followed by {hi}."
                )
        if len(set(self.cut_labels)) != len(self.cut_labels):
            raise ConfigurationError("Cut labels must be unique.")
        if len(self.values) != self.n_bins:
            raise ConfigurationError(
                f"Cut table has {len(self.values)} rows for {self.n_bins} pT bins."
            )
        for idx, row in enumerate(self.values):
            if len(row) != len(self.cut_labels):
                raise ConfigurationError(
                    f"Cut table row {idx} has {len(row)} values for "
                    f"{len(self.cut_labels)} labels."
                )

    @property
    def n_bins(self) -> int:
        return len(self.pt_bins) - 1

    def find_bin(self, pt: float) -> int | None:
        """Return the bin index containing `pt`, or `None` outside all bins."""
        # NaN fails this comparison too.
        if not self.pt_bins[0] <= pt < self.pt_bins[-1]:
            return None
        return bisect_right(self.pt_bins, pt) - 1

    def get(self, pt_bin: int, label: str) -> float:
        """Return the threshold of cut `label` in bin `pt_bin`."""
        try:
            col = self.cut_labels.index(label)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown cut label '{label}'.") from exc
        return self.values[pt_bin][col]

    def row(self, pt_bin: int) -> dict[str, float]:
        """Return all thresholds of one bin keyed by label."""
        return dict(zip(self.cut_labels, self.values[pt_bin]))

    def require(self, labels: Iterable[str]) -> None:
        """Fail if any of `labels` is missing from the table."""
        missing = [label for label in labels if label not in self.cut_labels]
        if missing:
            raise ConfigurationError(
                f"Cut table is missing required labels: {', '.join(missing)}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PtBinnedCuts":
        """Build a table from `{"pt_bins": [...], "cut_labels": [...], "values": [[...]]}`."""
        try:
            pt_bins = data["pt_bins"]
            labels = data["cut_labels"]
            values = data["values"]
        except KeyError as exc:
            raise ConfigurationError(f"Cut table is missing key {exc.args[0]!r}.") from exc
        if not all(isinstance(x, Sequence) and not isinstance(x, str) for x in (pt_bins, labels, values)):
            raise ConfigurationError("Cut table keys 'pt_bins', 'cut_labels', 'values' must be lists.")
        try:
            return cls(
                pt_bins=tuple(float(x) for x in pt_bins),
                cut_labels=tuple(str(x) for x in labels),
                values=tuple(tuple(float(v) for v in row) for row in values),
            )
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Cut table values must be numeric: {exc}") from exc

    def to_mapping(self) -> dict[str, Any]:
        return {
            "pt_bins": list(self.pt_bins),
            "cut_labels": list(self.cut_labels),
            "values": [list(row) for row in self.values],
        }
