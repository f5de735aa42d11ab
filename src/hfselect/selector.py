"""High-level D0/D0bar candidate selector combining topology and PID."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence

from .errors import InputError
from .models import (
    Candidate,
    CandidateEvent,
    PIDStatus,
    SelectionConfig,
    SelectionStage,
    SelectionStatus,
    Track,
)
from .pid import TrackSelectorPID, make_kaon, make_pion
from .topology import TopologicalSelector

logger = logging.getLogger(__name__)

# Bit of the candidate decay-type flag marking D0 -> pi K candidates.
DECAY_D0_TO_PI_K = 0


@dataclass
class D0CandidateSelector:
    """Assign D0 and D0bar selection statuses to two-prong candidates."""

    config: SelectionConfig = field(default_factory=SelectionConfig)

    def __post_init__(self) -> None:
        self.topology = TopologicalSelector(self.config)
        self.selector_pion = TrackSelectorPID(make_pion(), self.config.pid)
        self.selector_kaon = TrackSelectorPID(make_kaon(), self.config.pid)

    def evaluate(self, candidate: Candidate, tracks: Mapping[str, Track]) -> SelectionStatus:
        """Run the selection pipeline on one candidate.

        Workflow:
        1. Require the D0 -> pi K decay-type bit.
        2. Conjugate-independent topology.
        3. Conjugate-dependent topology for D0 (pi+ K-) and D0bar (K+ pi-).
        4. Veto candidates with an electron-like daughter.
        5. TOF/RICH PID for both mass assignments.
        6. Status per hypothesis = topology AND PID of that hypothesis.
        """
        if not candidate.hf_flag & (1 << DECAY_D0_TO_PI_K):
            return _rejected(candidate, SelectionStage.DECAY_TYPE)

        track_pos = _lookup(tracks, candidate.prong0_id, candidate)
        track_neg = _lookup(tracks, candidate.prong1_id, candidate)

        if not self.topology.select_topology(candidate):
            return _rejected(candidate, SelectionStage.TOPOLOGY)

        topol_d0 = self.topology.select_topology_conjugate(candidate, track_pos, track_neg)
        topol_d0bar = self.topology.select_topology_conjugate(candidate, track_neg, track_pos)
        if not topol_d0 and not topol_d0bar:
            return _rejected(candidate, SelectionStage.CONJUGATE_TOPOLOGY)

        rule_e = self.config.electron_rule
        if any(self.selector_pion.is_electron_and_not_pion(t, rule_e) for t in (track_pos, track_neg)):
            return _rejected(candidate, SelectionStage.ELECTRON_VETO)

        pid_d0 = self._pid_accepts(track_pion=track_pos, track_kaon=track_neg)
        pid_d0bar = self._pid_accepts(track_pion=track_neg, track_kaon=track_pos)

        status_d0 = int(topol_d0 and pid_d0)
        status_d0bar = int(topol_d0bar and pid_d0bar)
        stage = SelectionStage.SELECTED if status_d0 or status_d0bar else SelectionStage.PID
        return SelectionStatus(
            candidate_id=candidate.candidate_id,
            status_d0=status_d0,
            status_d0bar=status_d0bar,
            stage=stage,
        )

    def select(
        self,
        candidates: Sequence[Candidate],
        tracks: Mapping[str, Track],
        event_id: str | None = None,
    ) -> list[SelectionStatus]:
        """Evaluate all candidates, returning one status per candidate in input order."""
        out: list[SelectionStatus] = []
        for candidate in candidates:
            status = self.evaluate(candidate, tracks)
            if event_id is not None:
                status = replace(status, event_id=event_id)
            out.append(status)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Selected %d/%d candidates%s: %s",
                sum(1 for s in out if s.is_selected),
                len(out),
                "" if event_id is None else f" in event '{event_id}'",
                dict(stage_counts(out)),
            )
        return out

    def select_events(self, events: Sequence[CandidateEvent]) -> list[SelectionStatus]:
        """Run `select` on a list of events and aggregate tagged statuses."""
        out: list[SelectionStatus] = []
        for event in events:
            out.extend(
                self.select(
                    candidates=event.candidates,
                    tracks=event.track_lookup(),
                    event_id=event.event_id,
                )
            )
        return out

    def _pid_accepts(self, track_pion: Track, track_kaon: Track) -> bool:
        """PID decision for one mass assignment.

        The pion track must be accepted as pion and the kaon track as kaon by
        TOF, or both by RICH. On top, only the pion track may be
        exclusively pion-like.
        """
        rule = self.config.pion_kaon_rule
        pion_not_kaon = self.selector_kaon.is_pion_and_not_kaon(track_pion, rule)
        other_pion_not_kaon = self.selector_kaon.is_pion_and_not_kaon(track_kaon, rule)
        if not pion_not_kaon or other_pion_not_kaon:
            return False
        tof = (
            self.selector_pion.status_tof(track_pion) == PIDStatus.ACCEPTED
            and self.selector_kaon.status_tof(track_kaon) == PIDStatus.ACCEPTED
        )
        rich = (
            self.selector_pion.status_rich(track_pion) == PIDStatus.ACCEPTED
            and self.selector_kaon.status_rich(track_kaon) == PIDStatus.ACCEPTED
        )
        return tof or rich


def stage_counts(results: Sequence[SelectionStatus]) -> Counter[str]:
    """Count candidates by the stage at which their decision was taken."""
    return Counter(r.stage.value for r in results)


def _rejected(candidate: Candidate, stage: SelectionStage) -> SelectionStatus:
    return SelectionStatus(
        candidate_id=candidate.candidate_id,
        status_d0=0,
        status_d0bar=0,
        stage=stage,
    )


def _lookup(tracks: Mapping[str, Track], track_id: str, candidate: Candidate) -> Track:
    try:
        return tracks[track_id]
    except KeyError as exc:
        raise InputError(
            f"Candidate '{candidate.candidate_id}' references unknown track '{track_id}'."
        ) from exc
