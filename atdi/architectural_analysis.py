"""
Orchestrates the ATDI pipelines: debt analysis, structure metrics and the
atrophy scan.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from .debt_scorer import score
from .dependency_analysis import DependencyGraph, build_dependency_graph
from .errors import HistoryUnavailableError
from .git_analysis import AtrophyScanner, GitHistoryProvider, unavailable_report
from .models import AnalysisReport, AtrophyReport
from .pattern_analysis import PatternAnalyzer
from .structure_analysis import build_structure_report


class ArchitecturalSniffer:
    """
    Runs the dependency-graph pipelines over one source root.

    The graph is built on the first call and reused by later calls on the
    same instance. A new instance starts from a fresh graph.
    """

    def __init__(self, source_root: str, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            source_root (str): Directory whose source files form the graph.
            config (Optional[Dict[str, Any]]): Configuration dictionary.
        """
        self.source_root = Path(source_root)
        self.config = config or {}
        self.pattern_analyzer = PatternAnalyzer(self.config)
        self.dependency_graph: Optional[DependencyGraph] = None

    def build_graph(self) -> DependencyGraph:
        """Builds (once) and returns the dependency graph. Raises AnalysisIOError."""
        if self.dependency_graph is None:
            self.dependency_graph = build_dependency_graph(self.source_root, self.config)
        return self.dependency_graph

    def analyze_architecture(self) -> AnalysisReport:
        """Graph -> cycles + god components -> scored report."""
        graph = self.build_graph()
        cycle_result = self.pattern_analyzer.detect_cycles(graph)
        god_components = self.pattern_analyzer.detect_god_components(graph, self.source_root)
        return score(
            cycle_result.cycles,
            god_components,
            nodes_count=graph.nodes_count,
            edges_count=graph.edges_count,
            config=self.config,
            truncated=cycle_result.truncated
        )

    def analyze_structure(self) -> Dict[str, Any]:
        """Graph -> fan-in/fan-out metrics, hubs and SDP violations."""
        return build_structure_report(self.build_graph(), self.config)


def run_debt_analysis(source_root, config=None) -> AnalysisReport:
    return ArchitecturalSniffer(source_root, config).analyze_architecture()


def run_structure_analysis(source_root, config=None) -> Dict[str, Any]:
    return ArchitecturalSniffer(source_root, config).analyze_structure()


def run_atrophy_scan(project_root, config=None, subpath=None) -> AtrophyReport:
    """
    Scans the Git history of ``project_root``.

    A directory outside any repository yields an empty report with a warning.
    """
    try:
        provider = GitHistoryProvider(project_root)
    except HistoryUnavailableError as e:
        return unavailable_report(e)
    return AtrophyScanner(provider, config).scan(subpath)
