"""Topological cuts on D0 candidates, parameterized by a pT-binned cut table."""

from __future__ import annotations

from dataclasses import dataclass

from .bins import PtBinnedCuts
from .defaults import (
    CUT_COS_THETA_STAR,
    CUT_CPA,
    CUT_CPA_XY,
    CUT_D0_KAON,
    CUT_D0_PION,
    CUT_D0D0,
    CUT_DECAY_LENGTH_XY_NORMALISED,
    CUT_MASS,
    CUT_PT_KAON,
    CUT_PT_PION,
)
from .models import Candidate, SelectionConfig, Track
from .physics import MASS_D0, cos_theta_star, invariant_mass
from .pid import make_kaon, make_pion

REQUIRED_CUT_LABELS: tuple[str, ...] = (
    CUT_MASS,
    CUT_COS_THETA_STAR,
    CUT_PT_KAON,
    CUT_PT_PION,
    CUT_D0_KAON,
    CUT_D0_PION,
    CUT_D0D0,
    CUT_CPA,
    CUT_CPA_XY,
    CUT_DECAY_LENGTH_XY_NORMALISED,
)

# Daughters closer to the PV than this (in units of resolution) are not displaced.
MIN_IMPACT_PARAMETER_NORMALISED = 0.5


def decay_length_floor(p: float) -> float:
    """Momentum-dependent minimum decay length, capped at 0.06."""
    return min(p * 0.0066 + 0.01, 0.06)


def d0_mass(candidate: Candidate) -> float:
    """Invariant mass with pi on the positive prong and K on the negative prong."""
    return invariant_mass(
        (candidate.prong0_momentum, candidate.prong1_momentum),
        (make_pion().mass, make_kaon().mass),
    )


def d0bar_mass(candidate: Candidate) -> float:
    """Invariant mass with K on the positive prong and pi on the negative prong."""
    return invariant_mass(
        (candidate.prong0_momentum, candidate.prong1_momentum),
        (make_kaon().mass, make_pion().mass),
    )


def d0_cos_theta_star(candidate: Candidate) -> float:
    """cos(theta*) of the kaon (negative prong) under the D0 assignment."""
    return cos_theta_star(
        (candidate.prong0_momentum, candidate.prong1_momentum),
        (make_pion().mass, make_kaon().mass),
        MASS_D0,
        1,
    )


def d0bar_cos_theta_star(candidate: Candidate) -> float:
    """cos(theta*) of the kaon (positive prong) under the D0bar assignment."""
    return cos_theta_star(
        (candidate.prong0_momentum, candidate.prong1_momentum),
        (make_kaon().mass, make_pion().mass),
        MASS_D0,
        0,
    )


@dataclass(frozen=True)
class TopologicalSelector:
    """Conjugate-independent and conjugate-dependent topological selection."""

    config: SelectionConfig

    def __post_init__(self) -> None:
        self.cuts.require(REQUIRED_CUT_LABELS)

    @property
    def cuts(self) -> PtBinnedCuts:
        return self.config.cuts

    def select_topology(self, candidate: Candidate) -> bool:
        """Cuts that do not depend on the mass assignment of the daughters."""
        pt_bin = self.cuts.find_bin(candidate.pt)
        if pt_bin is None:
            return False
        if candidate.pt < self.config.pt_cand_min or candidate.pt >= self.config.pt_cand_max:
            return False
        if candidate.impact_parameter_product > self.cuts.get(pt_bin, CUT_D0D0):
            return False
        if candidate.cpa < self.cuts.get(pt_bin, CUT_CPA):
            return False
        if candidate.cpa_xy < self.cuts.get(pt_bin, CUT_CPA_XY):
            return False
        if candidate.decay_length_xy_normalised < self.cuts.get(pt_bin, CUT_DECAY_LENGTH_XY_NORMALISED):
            return False
        if (
            abs(candidate.impact_parameter_normalised0) < MIN_IMPACT_PARAMETER_NORMALISED
            or abs(candidate.impact_parameter_normalised1) < MIN_IMPACT_PARAMETER_NORMALISED
        ):
            return False
        floor = decay_length_floor(candidate.p)
        if candidate.decay_length * candidate.decay_length < floor * floor:
            return False
        if self.config.apply_decay_length_normalised_cut:
            min_norm = self.config.min_decay_length_normalised
            if candidate.decay_length_normalised * candidate.decay_length_normalised < min_norm * min_norm:
                return False
        return True

    def select_topology_conjugate(
        self,
        candidate: Candidate,
        track_pion: Track,
        track_kaon: Track,
    ) -> bool:
        """Cuts for one assignment of the pion and kaon roles to the daughters.

        `track_pion` is the positive prong for D0 and the negative one for D0bar;
        the mass and cos(theta*) formulas follow its charge sign.
        """
        pt_bin = self.cuts.find_bin(candidate.pt)
        if pt_bin is None:
            return False

        if track_pion.sign > 0:
            mass = d0_mass(candidate)
        else:
            mass = d0bar_mass(candidate)
        if abs(mass - MASS_D0) > self.cuts.get(pt_bin, CUT_MASS):
            return False

        if track_pion.pt < self.cuts.get(pt_bin, CUT_PT_PION) or track_kaon.pt < self.cuts.get(pt_bin, CUT_PT_KAON):
            return False

        if (
            abs(track_pion.impact_parameter) > self.cuts.get(pt_bin, CUT_D0_PION)
            or abs(track_kaon.impact_parameter) > self.cuts.get(pt_bin, CUT_D0_KAON)
        ):
            return False

        if track_pion.sign > 0:
            cts = d0_cos_theta_star(candidate)
        else:
            cts = d0bar_cos_theta_star(candidate)
        if abs(cts) > self.cuts.get(pt_bin, CUT_COS_THETA_STAR):
            return False

        return True
