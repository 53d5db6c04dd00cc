"""
ATDI - Architecture Technical Debt Index

Builds a file-level dependency graph of a JavaScript/TypeScript codebase,
detects circular dependencies and god components, turns them into a weighted
debt score, and mines Git history to flag atrophied files.
"""

__version__ = "1.0.0"
__author__ = "ATDI Team"

from .main import main
from .architectural_analysis import (
    ArchitecturalSniffer, run_debt_analysis, run_structure_analysis, run_atrophy_scan
)
from .dependency_analysis import DependencyGraph, ImportParser, build_dependency_graph
from .pattern_analysis import PatternAnalyzer, find_cycles, find_god_components
from .debt_scorer import score, classify_score, check_deploy_gate
from .git_analysis import (
    HistoryProvider, GitHistoryProvider, AtrophyScanner, scan_atrophy, classify_commit_message
)
from .file_classifier import FileClassifier
from .workspace_resolver import WorkspaceResolver
from .errors import ATDIError, AnalysisIOError, HistoryUnavailableError
from .smell_factory import create_smell

__all__ = [
    'main',
    'ArchitecturalSniffer',
    'run_debt_analysis',
    'run_structure_analysis',
    'run_atrophy_scan',
    'DependencyGraph',
    'ImportParser',
    'build_dependency_graph',
    'PatternAnalyzer',
    'find_cycles',
    'find_god_components',
    'score',
    'classify_score',
    'check_deploy_gate',
    'HistoryProvider',
    'GitHistoryProvider',
    'AtrophyScanner',
    'scan_atrophy',
    'classify_commit_message',
    'FileClassifier',
    'WorkspaceResolver',
    'ATDIError',
    'AnalysisIOError',
    'HistoryUnavailableError',
    'create_smell'
]
