"""
Immutable report values produced by the ATDI pipelines.

Every type serialises itself through ``to_dict`` with the field names used in
the JSON reports.
"""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple

SEVERITY_HIGH = 'HIGH'
SEVERITY_MEDIUM = 'MEDIUM'

ATROPHY_HIGH = 'HIGH'
ATROPHY_LOW = 'LOW'


class Smell(NamedTuple):
    type: str
    severity: int
    description: str
    files: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'severity': self.severity,
            'description': self.description,
            'files': list(self.files),
        }


class AnalysisReport(NamedTuple):
    atdi_score: int
    smells: Tuple[Smell, ...]
    nodes_count: int
    edges_count: int
    timestamp: str
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'atdi_score': self.atdi_score,
            'smells': [smell.to_dict() for smell in self.smells],
            'nodes_count': self.nodes_count,
            'edges_count': self.edges_count,
            'timestamp': self.timestamp,
            'truncated': self.truncated,
        }


class AtrophyCandidate(NamedTuple):
    path: str
    ktlo_ratio: float
    last_modified: str
    reason: str
    severity: str

    def to_dict(self) -> Dict[str, Any]:
        return self._asdict()


class AtrophyReport(NamedTuple):
    scan_date: str
    atrophy_level: str
    candidates: Tuple[AtrophyCandidate, ...]
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'scan_date': self.scan_date,
            'atrophy_level': self.atrophy_level,
            'candidates': [c.to_dict() for c in self.candidates],
        }
        if self.warning:
            data['warning'] = self.warning
        return data


class DeployGateResult(NamedTuple):
    allowed: bool
    reason: str
    traffic_light: str
    score: int


class CycleSearchResult(NamedTuple):
    cycles: List[List[str]]
    truncated: bool
