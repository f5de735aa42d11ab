"""Particle-identification helpers.

This module exposes:
- named particle-hypothesis builders (`make_pion`, `make_kaon`, `make_electron`)
- `TrackSelectorPID`, which turns per-detector n-sigma responses of a track
  into `PIDStatus` verdicts for one species, plus the exclusive
  "is species X and not species Y" predicates used to resolve ambiguities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .models import (
    Detector,
    ExclusionRule,
    ParticleHypothesis,
    PIDConfig,
    PIDStatus,
    Track,
)

_PION = ParticleHypothesis(name="pi", mass=0.13957039, pdg_id=211)
_KAON = ParticleHypothesis(name="K", mass=0.493677, pdg_id=321)
_ELECTRON = ParticleHypothesis(name="e", mass=0.00051099895, pdg_id=11)

_NAME_TO_HYPOTHESIS: dict[str, ParticleHypothesis] = {
    "pi": _PION,
    "pion": _PION,
    "k": _KAON,
    "kaon": _KAON,
    "e": _ELECTRON,
    "electron": _ELECTRON,
}

# Detector whose primary-window acceptance unlocks the combined window.
_COMPANION: dict[Detector, Detector] = {
    Detector.TPC: Detector.TOF,
    Detector.TOF: Detector.TPC,
    Detector.RICH: Detector.TOF,
}

_EXCLUSION_DETECTORS = (Detector.TOF, Detector.RICH)


def make_pion() -> ParticleHypothesis:
    """Return the standard charged-pion mass hypothesis."""
    return _PION


def make_kaon() -> ParticleHypothesis:
    """Return the standard charged-kaon mass hypothesis."""
    return _KAON


def make_electron() -> ParticleHypothesis:
    """Return the electron mass hypothesis."""
    return _ELECTRON


def particle_hypothesis_from_name(name: str) -> ParticleHypothesis:
    """Resolve a short particle name (e.g. `pi`, `kaon`) into a hypothesis."""
    key = name.strip().lower()
    try:
        return _NAME_TO_HYPOTHESIS[key]
    except KeyError as exc:
        supported = ", ".join(sorted(_NAME_TO_HYPOTHESIS))
        raise ValueError(
            f"Unknown particle hypothesis name '{name}'. Supported names: {supported}"
        ) from exc


@dataclass(frozen=True)
class TrackSelectorPID:
    """PID selection of tracks for one species hypothesis.

    Per detector the verdict is:
    - `INDETERMINATE` if the detector has no signal for the species or the
      track pT is outside the detector validity range,
    - `ACCEPTED` if the deviation is inside the primary window, or inside the
      combined window while the companion detector accepts the track in its
      own primary window,
    - `REJECTED` otherwise.
    """

    species: ParticleHypothesis
    config: PIDConfig = field(default_factory=PIDConfig)

    def is_valid(self, track: Track, detector: Detector) -> bool:
        """Return whether `detector` provides usable information for this track."""
        if track.nsigma(detector, self.species.name) is None:
            return False
        return self.config.for_detector(detector).in_pt_range(track.pt)

    def status(self, track: Track, detector: Detector) -> PIDStatus:
        """PID verdict of a single detector."""
        if not self.is_valid(track, detector):
            return PIDStatus.INDETERMINATE
        if self._accepted_in_primary_window(track, detector):
            return PIDStatus.ACCEPTED
        det_cfg = self.config.for_detector(detector)
        nsigma = track.nsigma(detector, self.species.name)
        assert nsigma is not None
        if det_cfg.in_combined_window(nsigma) and self._accepted_in_primary_window(
            track, _COMPANION[Detector(detector)]
        ):
            return PIDStatus.ACCEPTED
        return PIDStatus.REJECTED

    def status_tpc(self, track: Track) -> PIDStatus:
        return self.status(track, Detector.TPC)

    def status_tof(self, track: Track) -> PIDStatus:
        return self.status(track, Detector.TOF)

    def status_rich(self, track: Track) -> PIDStatus:
        return self.status(track, Detector.RICH)

    def status_all(
        self,
        track: Track,
        detectors: Sequence[Detector] = (Detector.TPC, Detector.TOF, Detector.RICH),
    ) -> PIDStatus:
        """Combined verdict: any acceptance wins, then any rejection."""
        statuses = [self.status(track, det) for det in detectors]
        if PIDStatus.ACCEPTED in statuses:
            return PIDStatus.ACCEPTED
        if PIDStatus.REJECTED in statuses:
            return PIDStatus.REJECTED
        return PIDStatus.INDETERMINATE

    def is_species_and_not(
        self,
        track: Track,
        species: ParticleHypothesis,
        other: ParticleHypothesis,
        rule: ExclusionRule,
    ) -> bool:
        """Return whether the track is clearly `species` and clearly not `other`.

        Only TOF and RICH are consulted, each below its separation pT limit
        from `rule`. One detector must vote for `species`; any usable
        detector incompatible with `species` vetoes the decision.
        """
        evidence = False
        for detector in _EXCLUSION_DETECTORS:
            nsigma_x = track.nsigma(detector, species.name)
            nsigma_y = track.nsigma(detector, other.name)
            if nsigma_x is None or nsigma_y is None:
                continue
            if not self.config.for_detector(detector).in_pt_range(track.pt):
                continue
            if track.pt > rule.pt_max(detector):
                continue
            if abs(nsigma_x) >= rule.nsigma_accept:
                return False
            if abs(nsigma_y) >= rule.nsigma_reject:
                evidence = True
        return evidence

    def is_electron_and_not_pion(self, track: Track, rule: ExclusionRule) -> bool:
        return self.is_species_and_not(track, _ELECTRON, _PION, rule)

    def is_pion_and_not_kaon(self, track: Track, rule: ExclusionRule) -> bool:
        return self.is_species_and_not(track, _PION, _KAON, rule)

    def _accepted_in_primary_window(self, track: Track, detector: Detector) -> bool:
        if not self.is_valid(track, detector):
            return False
        nsigma = track.nsigma(detector, self.species.name)
        assert nsigma is not None
        return self.config.for_detector(detector).in_window(nsigma)
