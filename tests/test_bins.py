"""Unit tests for the pT-binned cut table."""

from __future__ import annotations

import unittest

from hfselect import ConfigurationError, D0CandidateSelector, PtBinnedCuts, SelectionConfig, default_d0_cuts
from hfselect.defaults import D0_CUT_LABELS

from factories import cut_table


class TestPtBinnedCuts(unittest.TestCase):
    """Validate bin lookup, threshold access and load-time validation."""

    def setUp(self) -> None:
        self.table = PtBinnedCuts(
            pt_bins=(0.0, 1.0, 2.5, 5.0),
            cut_labels=("m", "d0d0"),
            values=((0.1, -1.0), (0.2, -2.0), (0.3, -3.0)),
        )

    def test_find_bin_uses_half_open_intervals(self) -> None:
        """Lower edges belong to their bin, upper edges to the next one."""
        self.assertEqual(self.table.find_bin(0.0), 0)
        self.assertEqual(self.table.find_bin(0.999), 0)
        self.assertEqual(self.table.find_bin(1.0), 1)
        self.assertEqual(self.table.find_bin(2.4), 1)
        self.assertEqual(self.table.find_bin(2.5), 2)
        self.assertEqual(self.table.find_bin(4.99), 2)

    def test_find_bin_outside_edges_returns_none(self) -> None:
        """Values below the first edge or at/above the last edge have no bin."""
        self.assertIsNone(self.table.find_bin(-0.1))
        self.assertIsNone(self.table.find_bin(5.0))
        self.assertIsNone(self.table.find_bin(100.0))

    def test_find_bin_nan_returns_none(self) -> None:
        """A NaN pT belongs to no bin."""
        self.assertIsNone(self.table.find_bin(float("nan")))
        one_bin = PtBinnedCuts(pt_bins=(0.0, 5.0), cut_labels=("m",), values=((0.1,),))
        self.assertIsNone(one_bin.find_bin(float("nan")))

    def test_get_and_row(self) -> None:
        """Thresholds are addressed by bin index and cut label."""
        self.assertEqual(self.table.get(1, "m"), 0.2)
        self.assertEqual(self.table.get(2, "d0d0"), -3.0)
        self.assertEqual(self.table.row(0), {"m": 0.1, "d0d0": -1.0})

    def test_unknown_label_is_configuration_error(self) -> None:
        """Missing cut names are configuration errors, not per-candidate failures."""
        with self.assertRaises(ConfigurationError):
            self.table.get(0, "cos theta*")
        with self.assertRaises(ConfigurationError):
            self.table.require(["m", "cos theta*"])
        self.table.require(["m", "d0d0"])

    def test_non_increasing_edges_raise(self) -> None:
        """Bin edges must be strictly increasing."""
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts(pt_bins=(0.0, 1.0, 1.0), cut_labels=("m",), values=((0.1,), (0.2,)))
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts(pt_bins=(0.0, 2.0, 1.0), cut_labels=("m",), values=((0.1,), (0.2,)))

    def test_table_shape_is_validated(self) -> None:
        """Row count must equal edge count minus one and rows must match labels."""
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts(pt_bins=(0.0, 1.0, 2.0), cut_labels=("m",), values=((0.1,),))
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts(pt_bins=(0.0, 1.0), cut_labels=("m", "d0d0"), values=((0.1,),))
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts(pt_bins=(0.0,), cut_labels=("m",), values=())

    def test_from_mapping_parses_numeric_lists(self) -> None:
        """Tables can be built from JSON-style mappings."""
        table = PtBinnedCuts.from_mapping(
            {"pt_bins": [0, 1, 2], "cut_labels": ["m"], "values": [[0.1], [0.2]]}
        )
        self.assertEqual(table.pt_bins, (0.0, 1.0, 2.0))
        self.assertEqual(table.to_mapping()["values"], [[0.1], [0.2]])
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts.from_mapping({"pt_bins": [0, 1], "cut_labels": ["m"]})
        with self.assertRaises(ConfigurationError):
            PtBinnedCuts.from_mapping({"pt_bins": [0, 1], "cut_labels": ["m"], "values": [["x"]]})

    def test_default_d0_table(self) -> None:
        """The standard table has 25 bins up to 100 GeV/c and all D0 cut labels."""
        table = default_d0_cuts()
        self.assertEqual(table.n_bins, 25)
        self.assertEqual(table.pt_bins[-1], 100.0)
        self.assertEqual(table.cut_labels, D0_CUT_LABELS)
        self.assertEqual(table.find_bin(3.0), 6)
        self.assertEqual(table.find_bin(60.0), 24)

    def test_selector_rejects_table_missing_required_cut(self) -> None:
        """A selector cannot be built on a table lacking a required cut."""
        full = cut_table()
        labels = tuple(label for label in full.cut_labels if label != "cos theta*")
        values = tuple(
            tuple(v for label, v in zip(full.cut_labels, row) if label != "cos theta*")
            for row in full.values
        )
        table = PtBinnedCuts(pt_bins=full.pt_bins, cut_labels=labels, values=values)
        with self.assertRaises(ConfigurationError):
            D0CandidateSelector(SelectionConfig(cuts=table))


if __name__ == "__main__":
    unittest.main()
