"""Unit tests for the D0/D0bar hypothesis resolver."""

from __future__ import annotations

import unittest

from hfselect import (
    CandidateEvent,
    D0CandidateSelector,
    InputError,
    SelectionStage,
    stage_counts,
)
from hfselect.physics import MASS_D0
from hfselect.topology import d0_mass, d0bar_mass

from factories import candidate, config, cut_table, kaon_track, pion_track


def _tracks(*tracks):
    return {t.track_id: t for t in tracks}


class TestCandidateStatuses(unittest.TestCase):
    """End-to-end statuses for single candidates."""

    def setUp(self) -> None:
        self.selector = D0CandidateSelector(config())
        self.tracks = _tracks(pion_track(sign=1), kaon_track(sign=-1))

    def test_clean_d0_is_selected_as_d0_only(self) -> None:
        status = self.selector.evaluate(candidate(), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (1, 0))
        self.assertEqual(status.stage, SelectionStage.SELECTED)
        self.assertTrue(status.is_selected)
        self.assertEqual(status.candidate_id, "c0")

    def test_candidate_below_global_pt_minimum(self) -> None:
        """Candidate pT under the global minimum fails before any hypothesis test."""
        selector = D0CandidateSelector(config(pt_cand_min=1.0))
        status = selector.evaluate(candidate(pt=0.8), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.TOPOLOGY)

    def test_tight_mass_window_keeps_one_hypothesis(self) -> None:
        window = abs(d0bar_mass(candidate()) - MASS_D0) / 2.0
        selector = D0CandidateSelector(config(cuts=cut_table(mass=window)))
        status = selector.evaluate(candidate(), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (1, 0))

    def test_non_displaced_daughter_rejected(self) -> None:
        status = self.selector.evaluate(candidate(impact_parameter_normalised0=0.4), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.TOPOLOGY)

    def test_rich_identifies_tracks_beyond_tof_range(self) -> None:
        """At daughter pT 6 GeV/c TOF abstains and RICH alone accepts both tracks."""
        tracks = _tracks(pion_track(sign=1, pt=6.0), kaon_track(sign=-1, pt=6.0))
        status = self.selector.evaluate(candidate(), tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (1, 0))

    def test_clean_d0bar_is_selected_as_d0bar_only(self) -> None:
        """K+ on the positive prong and pi- on the negative prong."""
        anti = candidate(antiparticle=True, prong0_id="K", prong1_id="pi")
        tracks = _tracks(kaon_track(sign=1), pion_track(sign=-1))
        window = abs(d0_mass(anti) - MASS_D0) / 2.0
        selector = D0CandidateSelector(config(cuts=cut_table(mass=window)))
        status = selector.evaluate(anti, tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 1))
        self.assertEqual(status.stage, SelectionStage.SELECTED)

    def test_d0bar_selected_by_rich_alone(self) -> None:
        """Without TOF signals the D0bar hypothesis is still reachable through RICH."""
        anti = candidate(antiparticle=True, prong0_id="K", prong1_id="pi")
        tracks = _tracks(kaon_track(sign=1, tof_nsigma=None), pion_track(sign=-1, tof_nsigma=None))
        window = abs(d0_mass(anti) - MASS_D0) / 2.0
        selector = D0CandidateSelector(config(cuts=cut_table(mass=window)))
        status = selector.evaluate(anti, tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 1))
        self.assertEqual(status.stage, SelectionStage.SELECTED)

    def test_nan_pt_is_rejected_not_raised(self) -> None:
        status = self.selector.evaluate(candidate(pt=float("nan")), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.TOPOLOGY)

    def test_conjugate_topology_failure(self) -> None:
        selector = D0CandidateSelector(config(cuts=cut_table(pt_pi=5.0, pt_k=5.0)))
        status = selector.evaluate(candidate(), self.tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.CONJUGATE_TOPOLOGY)

    def test_electron_daughter_vetoes_both_hypotheses(self) -> None:
        """An electron-like daughter rejects the candidate even when PID would accept."""
        electron_like = kaon_track(sign=-1, rich_nsigma={"pi": 5.0, "K": 0.2, "e": 0.1})
        status = self.selector.evaluate(candidate(), _tracks(pion_track(sign=1), electron_like))
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.ELECTRON_VETO)

    def test_topology_rejection_takes_precedence_over_electron_veto(self) -> None:
        electron_like = kaon_track(sign=-1, rich_nsigma={"pi": 5.0, "K": 0.2, "e": 0.1})
        status = self.selector.evaluate(candidate(cpa=0.5), _tracks(pion_track(sign=1), electron_like))
        self.assertEqual(status.stage, SelectionStage.TOPOLOGY)

    def test_ambiguous_pion_fails_pid(self) -> None:
        """A pion track also compatible with the kaon hypothesis gives no PID decision."""
        ambiguous = pion_track(sign=1, tof_nsigma={"pi": 0.5, "K": 1.0}, rich_nsigma={"pi": 0.3, "K": 0.8})
        status = self.selector.evaluate(candidate(), _tracks(ambiguous, kaon_track(sign=-1)))
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.PID)

    def test_two_pion_like_daughters_fail_both_hypotheses(self) -> None:
        """The kaon-side track must not itself be exclusively pion-like."""
        cand = candidate(prong1_id="pi2")
        tracks = _tracks(pion_track(sign=1), pion_track("pi2", sign=-1, pt=1.0))
        status = self.selector.evaluate(cand, tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.PID)

    def test_hypotheses_combine_topology_and_pid_independently(self) -> None:
        """D0 topology with D0bar-like PID selects neither hypothesis."""
        cand = candidate(prong0_id="K", prong1_id="pi")
        tracks = _tracks(kaon_track(sign=1), pion_track(sign=-1))
        window = abs(d0bar_mass(cand) - MASS_D0) / 2.0
        selector = D0CandidateSelector(config(cuts=cut_table(mass=window)))
        status = selector.evaluate(cand, tracks)
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.PID)

    def test_tightening_one_hypothesis_leaves_the_other_status(self) -> None:
        """A cut that only removes the other assignment never changes a status of 1."""
        anti = candidate(antiparticle=True, prong0_id="K", prong1_id="pi")
        kaon_pos, pion_neg = kaon_track(sign=1), pion_track(sign=-1)
        pion_pos, kaon_neg = pion_track(sign=1), kaon_track(sign=-1)
        cases = (
            # (candidate, positive track, negative track, status under test)
            (anti, kaon_pos, pion_neg, "status_d0bar"),
            (candidate(), pion_pos, kaon_neg, "status_d0"),
        )
        loose = D0CandidateSelector(config())
        for cand, pos, neg, field_name in cases:
            with self.subTest(status=field_name):
                self.assertTrue(loose.topology.select_topology_conjugate(cand, pos, neg))
                self.assertTrue(loose.topology.select_topology_conjugate(cand, neg, pos))
                before = loose.evaluate(cand, _tracks(pos, neg))
                self.assertEqual(getattr(before, field_name), 1)
                other_name = "status_d0" if field_name == "status_d0bar" else "status_d0bar"
                self.assertEqual(getattr(before, other_name), 0)

                window = abs((d0_mass if field_name == "status_d0bar" else d0bar_mass)(cand) - MASS_D0) / 2.0
                for cuts in (cut_table(pt_pi=1.1), cut_table(mass=window)):
                    tight = D0CandidateSelector(config(cuts=cuts))
                    # The tightened cut removes only the other assignment.
                    pion_side, kaon_side = (neg, pos) if field_name == "status_d0bar" else (pos, neg)
                    self.assertTrue(tight.topology.select_topology_conjugate(cand, pion_side, kaon_side))
                    self.assertFalse(tight.topology.select_topology_conjugate(cand, kaon_side, pion_side))
                    after = tight.evaluate(cand, _tracks(pos, neg))
                    self.assertEqual(getattr(after, field_name), 1)
                    self.assertEqual(getattr(after, other_name), 0)

    def test_decay_type_flag_required(self) -> None:
        """Without the D0 -> pi K bit the candidate is rejected before track lookup."""
        status = self.selector.evaluate(candidate(hf_flag=2), {})
        self.assertEqual((status.status_d0, status.status_d0bar), (0, 0))
        self.assertEqual(status.stage, SelectionStage.DECAY_TYPE)
        status = self.selector.evaluate(candidate(hf_flag=3), self.tracks)
        self.assertEqual(status.stage, SelectionStage.SELECTED)

    def test_unknown_track_raises(self) -> None:
        with self.assertRaises(InputError):
            self.selector.evaluate(candidate(prong1_id="missing"), self.tracks)

    def test_evaluation_is_deterministic(self) -> None:
        cand = candidate()
        self.assertEqual(self.selector.evaluate(cand, self.tracks), self.selector.evaluate(cand, self.tracks))


class TestBatchSelection(unittest.TestCase):
    """Batch helpers preserve order and tag events."""

    def setUp(self) -> None:
        self.selector = D0CandidateSelector(config())
        self.tracks = (pion_track(sign=1), kaon_track(sign=-1))

    def test_select_preserves_input_order(self) -> None:
        candidates = [
            candidate("a"),
            candidate("b", hf_flag=0),
            candidate("c", cpa=0.1),
            candidate("d"),
        ]
        results = self.selector.select(candidates, _tracks(*self.tracks))
        self.assertEqual([r.candidate_id for r in results], ["a", "b", "c", "d"])
        self.assertEqual([r.status_d0 for r in results], [1, 0, 0, 1])
        self.assertTrue(all(r.event_id is None for r in results))

    def test_select_events_tags_event_id(self) -> None:
        events = [
            CandidateEvent("evt0", candidates=(candidate("a"),), tracks=self.tracks),
            CandidateEvent("evt1", candidates=(candidate("b"), candidate("c", hf_flag=0)), tracks=self.tracks),
        ]
        results = self.selector.select_events(events)
        self.assertEqual([(r.event_id, r.candidate_id) for r in results], [("evt0", "a"), ("evt1", "b"), ("evt1", "c")])

    def test_stage_counts(self) -> None:
        results = self.selector.select(
            [candidate("a"), candidate("b", hf_flag=0), candidate("c")],
            _tracks(*self.tracks),
        )
        counts = stage_counts(results)
        self.assertEqual(counts["selected"], 2)
        self.assertEqual(counts["decay_type"], 1)
        self.assertEqual(counts["pid"], 0)


if __name__ == "__main__":
    unittest.main()
