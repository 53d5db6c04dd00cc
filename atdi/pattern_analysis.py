"""
pattern_analysis.py

This module detects the two structural smells the debt index is built from:
circular dependencies (elementary cycles of the dependency graph) and god
components (files that are both large and highly coupled).
"""

import os
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Set

from .config import (
    DEFAULT_CONFIG, get_configured_god_component_threshold,
    get_configured_god_component_weight, get_configured_max_cycles
)
from .dependency_analysis import as_adjacency
from .models import CycleSearchResult, Smell
from .smell_factory import create_god_component_smell
from .utils import count_lines


def _component_of(start, allowed, successors, predecessors) -> Set[str]:
    """Strongly connected component of ``start`` within the ``allowed`` nodes."""
    def reach(edges):
        seen = {start}
        frontier = [start]
        while frontier:
            node = frontier.pop()
            for nxt in edges[node]:
                if nxt in allowed and nxt not in seen:
                    seen.add(nxt)
                    frontier.append(nxt)
        return seen

    return reach(successors) & reach(predecessors)


def find_cycles(graph, max_cycles: Optional[int] = None) -> CycleSearchResult:
    """
    Enumerates the elementary cycles of a directed dependency graph.

    Nodes are ranked lexicographically. For every start node the search is
    confined to the strongly connected component of the start among the
    nodes ranked at or after it, so each cycle is found once, beginning at
    its smallest node. Inside the component a node that cannot currently
    lead back to the start stays blocked until a cycle through it closes
    (Johnson's algorithm), which keeps the work bounded by the number of
    cycles found. The members of a cycle are listed in visitation order.

    The number of elementary cycles can grow exponentially in a dense
    strongly-connected component. ``max_cycles`` stops the enumeration once
    that many cycles were collected and marks the result truncated.

    Args:
        graph: A DependencyGraph or a mapping of file -> dependency list.
        max_cycles (Optional[int]): Cap on reported cycles, None for no cap.

    Returns:
        CycleSearchResult: The cycles and whether the search was cut short.
    """
    adjacency = as_adjacency(graph)
    nodes = set(adjacency)
    for deps in adjacency.values():
        nodes.update(deps)
    order = sorted(nodes)
    # Multi-edges would report the same cycle twice; self-imports are not cycles
    successors = {
        node: [dep for dep in dict.fromkeys(adjacency.get(node, ())) if dep != node]
        for node in order
    }
    predecessors: Dict[str, List[str]] = {node: [] for node in order}
    for node in order:
        for dep in successors[node]:
            predecessors[dep].append(node)

    cycles: List[List[str]] = []
    for i, start in enumerate(order):
        component = _component_of(start, set(order[i:]), successors, predecessors)
        if len(component) < 2:
            continue

        blocked = {start}
        blocked_by: Dict[str, Set[str]] = defaultdict(set)
        path = [start]
        closed = [False]
        stack = [iter([n for n in successors[start] if n in component])]

        while stack:
            for neighbor in stack[-1]:
                if neighbor == start:
                    if max_cycles is not None and len(cycles) >= max_cycles:
                        return CycleSearchResult(cycles, True)
                    cycles.append(list(path))
                    closed[-1] = True
                elif neighbor not in blocked:
                    path.append(neighbor)
                    closed.append(False)
                    blocked.add(neighbor)
                    stack.append(iter([n for n in successors[neighbor] if n in component]))
                    break
            else:
                stack.pop()
                node = path.pop()
                found = closed.pop()
                if found:
                    if closed:
                        closed[-1] = True
                    _unblock(node, blocked, blocked_by)
                else:
                    for dep in successors[node]:
                        if dep in component:
                            blocked_by[dep].add(node)

    return CycleSearchResult(cycles, False)


def _unblock(node, blocked, blocked_by):
    pending = [node]
    while pending:
        current = pending.pop()
        if current in blocked:
            blocked.discard(current)
            pending.extend(blocked_by.pop(current, ()))


def find_god_components(
    graph,
    root_dir,
    thresholds: Optional[Mapping[str, int]] = None,
    weight: int = DEFAULT_CONFIG["god_component_weight"]
) -> List[Smell]:
    """
    Flags files that exceed both the line and the fan-out threshold.

    Both comparisons are strict. A file that cannot be read is skipped.

    Args:
        graph: A DependencyGraph or a mapping of file -> dependency list.
        root_dir: Directory the FileIds are relative to.
        thresholds: Mapping with 'lines' and 'dependencies'; defaults 300 and 10.
        weight (int): Flat severity given to each god component.

    Returns:
        List[Smell]: One GOD_COMPONENT smell per flagged file, in FileId order.
    """
    limits = dict(DEFAULT_CONFIG["god_component_threshold"])
    limits.update(thresholds or {})
    line_limit = int(limits["lines"])
    dependency_limit = int(limits["dependencies"])

    adjacency = as_adjacency(graph)
    smells = []
    for file_id in sorted(adjacency):
        fan_out = len(adjacency[file_id])
        if fan_out <= dependency_limit:
            continue
        lines = count_lines(os.path.join(str(root_dir), *file_id.split('/')))
        if lines is None:
            continue
        if lines > line_limit:
            smells.append(create_god_component_smell(file_id, lines, fan_out, weight))
    return smells


class PatternAnalyzer:
    """
    Runs both smell detectors with thresholds taken from a configuration dict.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        lines, dependencies = get_configured_god_component_threshold(self.config)
        self.thresholds = {"lines": lines, "dependencies": dependencies}
        self.god_component_weight = get_configured_god_component_weight(self.config)
        self.max_cycles = get_configured_max_cycles(self.config)

    def detect_cycles(self, graph) -> CycleSearchResult:
        return find_cycles(graph, self.max_cycles)

    def detect_god_components(self, graph, root_dir) -> List[Smell]:
        return find_god_components(graph, root_dir, self.thresholds, self.god_component_weight)

    def analyze_patterns(self, graph, root_dir) -> Dict[str, Any]:
        """
        Performs both detections.

        Returns:
            Dict[str, Any]: {"cyclic_dependencies": {"detected", "count", "details", "truncated"},
                             "god_components": {"detected", "count", "details"}}
        """
        cycle_result = self.detect_cycles(graph)
        god_components = self.detect_god_components(graph, root_dir)
        return {
            "cyclic_dependencies": {
                "detected": bool(cycle_result.cycles),
                "count": len(cycle_result.cycles),
                "details": cycle_result.cycles,
                "truncated": cycle_result.truncated,
            },
            "god_components": {
                "detected": bool(god_components),
                "count": len(god_components),
                "details": god_components,
            },
        }
