#!/usr/bin/env python3
"""
Test Debt Scoring

Tests for the ATDI score, the analysis report, the traffic light and the
deploy gate, including end-to-end runs over small source trees.
"""

import unittest
import tempfile
import os
import shutil
import json
from datetime import datetime
from pathlib import Path
import sys

# Add project root to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from atdi.architectural_analysis import ArchitecturalSniffer, run_debt_analysis
from atdi.debt_scorer import check_deploy_gate, classify_score, score
from atdi.errors import AnalysisIOError
from atdi.models import AnalysisReport
from atdi.report_generators import report_to_dict
from atdi.smell_factory import create_god_component_smell, create_smell


class TestScore(unittest.TestCase):
    """Test score aggregation."""

    def test_no_smells_scores_zero(self):
        report = score([], [], nodes_count=3, edges_count=2)
        self.assertEqual(report.atdi_score, 0)
        self.assertEqual(report.smells, ())
        self.assertEqual((report.nodes_count, report.edges_count), (3, 2))
        self.assertFalse(report.truncated)

    def test_cycle_costs_weight_per_member(self):
        """A two-file cycle costs 20."""
        report = score([["a.ts", "b.ts"]], [], nodes_count=2, edges_count=2)
        self.assertEqual(report.atdi_score, 20)

        smell = report.smells[0]
        self.assertEqual(smell.type, "CYCLE")
        self.assertEqual(smell.severity, 10)
        self.assertEqual(smell.files, ("a.ts", "b.ts"))
        self.assertEqual(smell.description, "Circular dependency detected: a.ts -> b.ts")

    def test_cycles_are_summed(self):
        report = score([["a", "b"], ["x", "y", "z"]], [], nodes_count=5, edges_count=5)
        self.assertEqual(report.atdi_score, 50)

    def test_god_components_add_their_severity(self):
        god = create_god_component_smell("big.ts", 301, 11, 5)
        report = score([["a", "b"]], [god], nodes_count=14, edges_count=13)

        self.assertEqual(report.atdi_score, 25)
        self.assertEqual([s.type for s in report.smells], ["CYCLE", "GOD_COMPONENT"])

    def test_configured_cycle_weight(self):
        report = score([["a", "b", "c"]], [], 3, 3, config={"cycle_weight": 1})
        self.assertEqual(report.atdi_score, 3)
        self.assertEqual(report.smells[0].severity, 1)

    def test_score_equals_sum_of_contributions(self):
        gods = [create_god_component_smell(f"g{i}.ts", 400, 20, 5) for i in range(3)]
        cycles = [["a", "b"], ["c", "d", "e", "f"]]
        report = score(cycles, gods, 10, 10)
        self.assertEqual(report.atdi_score, 10 * 2 + 10 * 4 + 5 * 3)

    def test_timestamp_is_utc_iso8601(self):
        report = score([], [], 0, 0)
        self.assertTrue(report.timestamp.endswith("Z"))
        datetime.fromisoformat(report.timestamp.replace("Z", "+00:00"))

    def test_truncation_flag_is_carried(self):
        self.assertTrue(score([], [], 0, 0, truncated=True).truncated)


class TestSmells(unittest.TestCase):
    """Test smell construction rules."""

    def test_smells_are_immutable(self):
        smell = create_smell("CYCLE", 10, "x", ["a", "b"])
        with self.assertRaises(AttributeError):
            smell.severity = 0

    def test_negative_severity_is_rejected(self):
        with self.assertRaises(ValueError):
            create_smell("CYCLE", -1, "x", ["a"])

    def test_unknown_type_is_rejected(self):
        with self.assertRaises(ValueError):
            create_smell("SPAGHETTI", 1, "x", ["a"])


class TestTrafficLight(unittest.TestCase):
    """Test score classification and the deploy gate."""

    def _report(self, value):
        return AnalysisReport(value, (), 0, 0, "2026-01-01T00:00:00Z")

    def test_classification_boundaries(self):
        self.assertEqual(classify_score(0), "GREEN")
        self.assertEqual(classify_score(4), "GREEN")
        self.assertEqual(classify_score(5), "AMBER")
        self.assertEqual(classify_score(14), "AMBER")
        self.assertEqual(classify_score(15), "RED")

    def test_configured_limits(self):
        config = {"green_max": 50, "amber_max": 100}
        self.assertEqual(classify_score(20, config), "GREEN")
        self.assertEqual(classify_score(99, config), "AMBER")

    def test_gate_blocks_red(self):
        result = check_deploy_gate(self._report(20))
        self.assertFalse(result.allowed)
        self.assertEqual(result.traffic_light, "RED")
        self.assertEqual(result.score, 20)

    def test_gate_allows_amber_and_green(self):
        self.assertTrue(check_deploy_gate(self._report(10)).allowed)
        self.assertEqual(check_deploy_gate(self._report(10)).traffic_light, "AMBER")
        self.assertTrue(check_deploy_gate(self._report(0)).allowed)

    def test_gate_allows_missing_report(self):
        result = check_deploy_gate(None)
        self.assertTrue(result.allowed)
        self.assertEqual(result.score, 0)


class TestDebtAnalysisEndToEnd(unittest.TestCase):
    """Test the full pipeline over source trees on disk."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.src = Path(self.temp_dir) / "src"
        self.src.mkdir()

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_two_file_cycle(self):
        (self.src / "a.ts").write_text("import { b } from './b';\n")
        (self.src / "b.ts").write_text("import { a } from './a';\n")

        report = run_debt_analysis(self.src)

        self.assertEqual(report.atdi_score, 20)
        self.assertEqual(len(report.smells), 1)
        self.assertEqual(report.smells[0].files, ("a.ts", "b.ts"))
        self.assertEqual((report.nodes_count, report.edges_count), (2, 2))

    def test_god_component(self):
        """301 lines and 11 dependencies, no cycle."""
        imports = [f"import {{ d{i} }} from './d{i}';" for i in range(11)]
        filler = [f"export const value{i} = {i};" for i in range(290)]
        (self.src / "big.ts").write_text("\n".join(imports + filler))
        for i in range(11):
            (self.src / f"d{i}.ts").write_text(f"export const d{i} = {i};\n")

        report = run_debt_analysis(self.src)

        self.assertEqual(report.atdi_score, 5)
        self.assertEqual([s.type for s in report.smells], ["GOD_COMPONENT"])
        self.assertEqual(report.smells[0].files, ("big.ts",))
        self.assertEqual(report.nodes_count, 12)
        self.assertEqual(report.edges_count, 11)

    def test_empty_source_tree(self):
        """An empty tree still produces a valid report."""
        report = run_debt_analysis(self.src)
        data = json.loads(json.dumps(report_to_dict(report)))

        self.assertEqual(data["atdi_score"], 0)
        self.assertEqual(data["smells"], [])
        self.assertEqual(data["nodes_count"], 0)
        self.assertEqual(data["edges_count"], 0)
        self.assertIn("timestamp", data)

    def test_missing_source_root(self):
        with self.assertRaises(AnalysisIOError):
            run_debt_analysis(Path(self.temp_dir) / "nope")

    def test_analysis_is_deterministic(self):
        (self.src / "a.ts").write_text("import './b';\nimport './c';\n")
        (self.src / "b.ts").write_text("import './c';\nimport './a';\n")
        (self.src / "c.ts").write_text("import './a';\n")

        first = run_debt_analysis(self.src)
        second = run_debt_analysis(self.src)

        self.assertEqual(first.smells, second.smells)
        self.assertEqual(first.atdi_score, second.atdi_score)

    def test_sniffer_reuses_graph(self):
        (self.src / "a.ts").write_text("")
        sniffer = ArchitecturalSniffer(self.src)
        self.assertIs(sniffer.build_graph(), sniffer.build_graph())


if __name__ == '__main__':
    unittest.main()
