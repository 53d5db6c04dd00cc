"""
structure_analysis.py

Per-file coupling metrics: fan-in, fan-out, instability, hubs and violations
of the Stable Dependencies Principle (a file depending on a less stable one).
"""

from typing import Any, Dict, List, NamedTuple

from .config import get_config_value
from .dependency_analysis import as_adjacency
from .debt_scorer import utc_timestamp
from .pattern_analysis import find_cycles


class NodeMetrics(NamedTuple):
    id: str
    fan_in: int
    fan_out: int
    instability: float
    is_hub: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'fanIn': self.fan_in,
            'fanOut': self.fan_out,
            'instability': self.instability,
            'isHub': self.is_hub,
        }


def compute_node_metrics(graph, hub_threshold: int = 5) -> Dict[str, NodeMetrics]:
    """
    Computes coupling metrics for every node.

    Fan-in counts every edge into a node, a self-import included. Instability
    is ``fan_out / (fan_in + fan_out)``, 0 for an isolated file.
    A hub has both fan-in and fan-out above ``hub_threshold``.
    """
    adjacency = as_adjacency(graph)
    fan_in = {file_id: 0 for file_id in adjacency}
    for deps in adjacency.values():
        for dep in deps:
            if dep in fan_in:
                fan_in[dep] += 1

    metrics = {}
    for file_id in sorted(adjacency):
        incoming = fan_in[file_id]
        outgoing = len(adjacency[file_id])
        total = incoming + outgoing
        instability = outgoing / total if total else 0.0
        metrics[file_id] = NodeMetrics(
            id=file_id,
            fan_in=incoming,
            fan_out=outgoing,
            instability=instability,
            is_hub=incoming > hub_threshold and outgoing > hub_threshold
        )
    return metrics


def find_sdp_violations(graph, metrics: Dict[str, NodeMetrics], margin: float = 0.3) -> List[Dict[str, Any]]:
    """
    Edges whose target is less stable than the source by more than ``margin``.

    Sorted by the instability difference, largest first.
    """
    adjacency = as_adjacency(graph)
    violations = []
    for file_id in sorted(adjacency):
        depender = metrics.get(file_id)
        if depender is None:
            continue
        for dep in adjacency[file_id]:
            dependee = metrics.get(dep)
            if dependee is None:
                continue
            if dependee.instability > depender.instability + margin:
                violations.append({
                    'stable': file_id,
                    'unstable': dep,
                    'diff': round(dependee.instability - depender.instability, 2),
                })
    return sorted(violations, key=lambda v: (-v['diff'], v['stable'], v['unstable']))


def build_structure_report(graph, config=None) -> Dict[str, Any]:
    """Assembles the architecture topography report."""
    hub_threshold = int(get_config_value(config, "hub_threshold"))
    margin = float(get_config_value(config, "sdp_margin"))
    top_n = int(get_config_value(config, "structure_top_n"))

    metrics = compute_node_metrics(graph, hub_threshold)
    cycles = find_cycles(graph, get_config_value(config, "max_cycles"))
    hubs = sorted(
        (m for m in metrics.values() if m.is_hub),
        key=lambda m: (-(m.fan_in + m.fan_out), m.id)
    )
    unstable = sorted(metrics.values(), key=lambda m: (-m.instability, m.id))[:top_n]

    return {
        'generated_at': utc_timestamp(),
        'circular_dependencies': cycles.cycles,
        'hubs': [m.to_dict() for m in hubs],
        'unstable_nodes': [m.to_dict() for m in unstable],
        'sdp_violations': find_sdp_violations(graph, metrics, margin)[:top_n],
        'metrics': {file_id: m.to_dict() for file_id, m in metrics.items()},
    }
