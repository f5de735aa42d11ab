"""Core data models used by the candidate-selection framework.

This module defines:
- immutable input records (`Track`, `Candidate`, `CandidateEvent`)
- particle-mass assignment objects (`ParticleHypothesis`) and `LorentzVector`
- PID enumerations (`Detector`, `PIDStatus`)
- configurable selection controls (`DetectorPIDConfig`, `PIDConfig`,
  `ExclusionRule`, `SelectionConfig`)
- selection outputs (`SelectionStage`, `SelectionStatus`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping

from .bins import PtBinnedCuts
from .defaults import default_d0_cuts
from .errors import ConfigurationError

Vector3 = tuple[float, float, float]
NSigmaMap = Mapping[str, float]


class Detector(str, enum.Enum):
    """PID detector subsystems providing n-sigma responses."""

    TPC = "tpc"
    TOF = "tof"
    RICH = "rich"


class PIDStatus(enum.IntEnum):
    """Outcome of one detector (or detector combination) for one species."""

    INDETERMINATE = 0
    REJECTED = 1
    ACCEPTED = 2


class SelectionStage(str, enum.Enum):
    """Pipeline stage at which a candidate decision was taken."""

    DECAY_TYPE = "decay_type"
    TOPOLOGY = "topology"
    CONJUGATE_TOPOLOGY = "conjugate_topology"
    ELECTRON_VETO = "electron_veto"
    PID = "pid"
    SELECTED = "selected"


@dataclass(frozen=True)
class Track:
    """Daughter track with kinematics and per-detector n-sigma responses.

    Each `*_nsigma` map goes from species name (`"pi"`, `"K"`, `"e"`) to the
    signed deviation from the expected detector response. `None` means the
    detector delivered no signal for this track.
    """

    track_id: str
    pt: float
    impact_parameter: float
    sign: int
    tpc_nsigma: NSigmaMap | None = None
    tof_nsigma: NSigmaMap | None = None
    rich_nsigma: NSigmaMap | None = None

    def nsigma(self, detector: Detector, species: str) -> float | None:
        """Return the deviation for one detector/species, or `None` if unavailable."""
        values = {
            Detector.TPC: self.tpc_nsigma,
            Detector.TOF: self.tof_nsigma,
            Detector.RICH: self.rich_nsigma,
        }[Detector(detector)]
        if values is None:
            return None
        return values.get(species)


@dataclass(frozen=True)
class Candidate:
    """Two-prong candidate with pre-computed topological observables.

    `prong0` is the positive-charge slot, `prong1` the negative-charge slot.
    Prong momenta are `(px, py, pz)` at the secondary vertex.
    """

    candidate_id: str
    pt: float
    p: float
    impact_parameter_product: float
    cpa: float
    cpa_xy: float
    decay_length_xy_normalised: float
    impact_parameter_normalised0: float
    impact_parameter_normalised1: float
    decay_length: float
    decay_length_normalised: float
    hf_flag: int
    prong0_id: str
    prong1_id: str
    prong0_momentum: Vector3
    prong1_momentum: Vector3


@dataclass(frozen=True)
class CandidateEvent:
    """One event payload with its candidates and the tracks they reference."""

    event_id: str
    candidates: tuple[Candidate, ...]
    tracks: tuple[Track, ...]

    def track_lookup(self) -> dict[str, Track]:
        """Index event tracks by `track_id`."""
        return {t.track_id: t for t in self.tracks}


@dataclass(frozen=True)
class ParticleHypothesis:
    """Named particle hypothesis used to derive mass-dependent observables."""

    name: str
    mass: float
    pdg_id: int | None = None


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with convenience properties and addition."""

    px: float
    py: float
    pz: float
    e: float

    def __add__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector addition."""
        return LorentzVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2

    @property
    def mass(self) -> float:
        """Invariant mass with signed handling for small negative mass2 values."""
        m2 = self.mass2
        return m2**0.5 if m2 >= 0.0 else -((-m2) ** 0.5)


@dataclass(frozen=True)
class DetectorPIDConfig:
    """Validity range and n-sigma windows of one detector.

    The combined window is only used when the companion detector already
    accepts the track in its primary window. `None` bounds disable it.
    """

    pt_min: float
    pt_max: float
    nsigma_min: float
    nsigma_max: float
    nsigma_combined_min: float | None = None
    nsigma_combined_max: float | None = None

    def __post_init__(self) -> None:
        if self.pt_min > self.pt_max:
            raise ConfigurationError(
                f"Detector pT range [{self.pt_min}, {self.pt_max}] is inverted."
            )
        if self.nsigma_min > self.nsigma_max:
            raise ConfigurationError(
                f"n-sigma window [{self.nsigma_min}, {self.nsigma_max}] is inverted."
            )
        if (self.nsigma_combined_min is None) != (self.nsigma_combined_max is None):
            raise ConfigurationError("Provide both combined n-sigma bounds, or neither.")
        if (
            self.nsigma_combined_min is not None
            and self.nsigma_combined_max is not None
            and self.nsigma_combined_min > self.nsigma_combined_max
        ):
            raise ConfigurationError(
                f"Combined n-sigma window [{self.nsigma_combined_min}, "
                f"{self.nsigma_combined_max}] is inverted."
            )

    @classmethod
    def symmetric(
        cls,
        pt_min: float,
        pt_max: float,
        nsigma: float,
        nsigma_combined: float | None = None,
    ) -> "DetectorPIDConfig":
        """Build a config with `[-n, +n]` windows."""
        return cls(
            pt_min=pt_min,
            pt_max=pt_max,
            nsigma_min=-nsigma,
            nsigma_max=nsigma,
            nsigma_combined_min=None if nsigma_combined is None else -nsigma_combined,
            nsigma_combined_max=nsigma_combined,
        )

    @property
    def has_combined_window(self) -> bool:
        return self.nsigma_combined_min is not None

    def in_pt_range(self, pt: float) -> bool:
        return self.pt_min <= pt <= self.pt_max

    def in_window(self, nsigma: float) -> bool:
        return self.nsigma_min <= nsigma <= self.nsigma_max

    def in_combined_window(self, nsigma: float) -> bool:
        if self.nsigma_combined_min is None or self.nsigma_combined_max is None:
            return False
        return self.nsigma_combined_min <= nsigma <= self.nsigma_combined_max


def _default_tpc() -> DetectorPIDConfig:
    return DetectorPIDConfig.symmetric(0.15, 5.0, 3.0, 5.0)


def _default_tof() -> DetectorPIDConfig:
    return DetectorPIDConfig.symmetric(0.15, 5.0, 3.0, 5.0)


def _default_rich() -> DetectorPIDConfig:
    return DetectorPIDConfig.symmetric(0.15, 10.0, 3.0, 5.0)


@dataclass(frozen=True)
class PIDConfig:
    """Per-detector PID configuration shared by all species selectors."""

    tpc: DetectorPIDConfig = field(default_factory=_default_tpc)
    tof: DetectorPIDConfig = field(default_factory=_default_tof)
    rich: DetectorPIDConfig = field(default_factory=_default_rich)

    def for_detector(self, detector: Detector) -> DetectorPIDConfig:
        return {
            Detector.TPC: self.tpc,
            Detector.TOF: self.tof,
            Detector.RICH: self.rich,
        }[Detector(detector)]


@dataclass(frozen=True)
class ExclusionRule:
    """Thresholds for the "is species X and not species Y" predicate.

    A detector votes for X when `|nsigma_X| < nsigma_accept` and
    `|nsigma_Y| >= nsigma_reject`. Detectors are only consulted below their
    separation-power pT limit.
    """

    nsigma_accept: float = 3.0
    nsigma_reject: float = 3.0
    tof_pt_max: float = 0.6
    rich_pt_max: float = 2.0

    def __post_init__(self) -> None:
        if self.nsigma_accept <= 0.0 or self.nsigma_reject <= 0.0:
            raise ConfigurationError("Exclusion n-sigma thresholds must be positive.")

    def pt_max(self, detector: Detector) -> float:
        if Detector(detector) is Detector.TOF:
            return self.tof_pt_max
        if Detector(detector) is Detector.RICH:
            return self.rich_pt_max
        raise ConfigurationError(f"Exclusion rules do not use detector '{detector}'.")


def _default_electron_rule() -> ExclusionRule:
    return ExclusionRule(nsigma_accept=3.0, nsigma_reject=3.0, tof_pt_max=0.6, rich_pt_max=2.0)


def _default_pion_kaon_rule() -> ExclusionRule:
    return ExclusionRule(nsigma_accept=3.0, nsigma_reject=3.0, tof_pt_max=2.5, rich_pt_max=10.0)


@dataclass(frozen=True)
class SelectionConfig:
    """Immutable configuration of the D0 candidate selection."""

    pt_cand_min: float = 0.0
    pt_cand_max: float = 50.0
    pid: PIDConfig = field(default_factory=PIDConfig)
    electron_rule: ExclusionRule = field(default_factory=_default_electron_rule)
    pion_kaon_rule: ExclusionRule = field(default_factory=_default_pion_kaon_rule)
    cuts: PtBinnedCuts = field(default_factory=default_d0_cuts)
    # Optional cut on decay_length_normalised, off by default.
    apply_decay_length_normalised_cut: bool = False
    min_decay_length_normalised: float = 1.0

    def __post_init__(self) -> None:
        if self.pt_cand_min >= self.pt_cand_max:
            raise ConfigurationError(
                f"Candidate pT range [{self.pt_cand_min}, {self.pt_cand_max}) is empty."
            )


@dataclass(frozen=True)
class SelectionStatus:
    """Selection verdicts for one candidate under both conjugate hypotheses."""

    candidate_id: str
    status_d0: int
    status_d0bar: int
    stage: SelectionStage
    event_id: str | None = None

    @property
    def is_selected(self) -> bool:
        return bool(self.status_d0 or self.status_d0bar)
