"""Public package exports for the heavy-flavour candidate-selection framework."""
__author__ = "hfselect developers"


from .bins import PtBinnedCuts
from .defaults import default_d0_cuts
from .errors import ConfigurationError, InputError, SelectionError
from .models import (
    Candidate,
    CandidateEvent,
    Detector,
    DetectorPIDConfig,
    ExclusionRule,
    LorentzVector,
    ParticleHypothesis,
    PIDConfig,
    PIDStatus,
    SelectionConfig,
    SelectionStage,
    SelectionStatus,
    Track,
)
from .pid import (
    TrackSelectorPID,
    make_electron,
    make_kaon,
    make_pion,
    particle_hypothesis_from_name,
)
from .selector import D0CandidateSelector, stage_counts
from .topology import TopologicalSelector

__all__ = [
    "D0CandidateSelector",
    "TopologicalSelector",
    "TrackSelectorPID",
    "PtBinnedCuts",
    "default_d0_cuts",
    "Candidate",
    "CandidateEvent",
    "Track",
    "Detector",
    "PIDStatus",
    "DetectorPIDConfig",
    "PIDConfig",
    "ExclusionRule",
    "SelectionConfig",
    "SelectionStage",
    "SelectionStatus",
    "LorentzVector",
    "ParticleHypothesis",
    "SelectionError",
    "ConfigurationError",
    "InputError",
    "make_pion",
    "make_kaon",
    "make_electron",
    "particle_hypothesis_from_name",
    "stage_counts",
]
