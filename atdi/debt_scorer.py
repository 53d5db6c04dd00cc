"""
Turns detected smells into the Architecture Technical Debt Index.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import (
    get_configured_cycle_weight, get_configured_traffic_light_limits
)
from .models import AnalysisReport, DeployGateResult, Smell
from .smell_factory import create_cycle_smell

GREEN_LIGHT = 'GREEN'
AMBER_LIGHT = 'AMBER'
RED_LIGHT = 'RED'


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def score(
    cycles: Sequence[Sequence[str]],
    god_components: Sequence[Smell],
    nodes_count: int,
    edges_count: int,
    config: Optional[dict] = None,
    truncated: bool = False,
    timestamp: Optional[str] = None
) -> AnalysisReport:
    """
    Builds the analysis report.

    Each cycle costs ``cycle_weight`` per member file, so longer cycles cost
    more. Each god component costs its own (flat) severity. Cycle smells are
    listed before god component smells.
    """
    cycle_weight = get_configured_cycle_weight(config)

    atdi_score = 0
    smells = []
    for cycle in cycles:
        atdi_score += cycle_weight * len(cycle)
        smells.append(create_cycle_smell(cycle, cycle_weight))
    for smell in god_components:
        atdi_score += smell.severity
        smells.append(smell)

    return AnalysisReport(
        atdi_score=atdi_score,
        smells=tuple(smells),
        nodes_count=nodes_count,
        edges_count=edges_count,
        timestamp=timestamp or utc_timestamp(),
        truncated=truncated
    )


def classify_score(atdi_score: int, config: Optional[dict] = None) -> str:
    """Map a score onto the GREEN / AMBER / RED traffic light."""
    green_max, amber_max = get_configured_traffic_light_limits(config)
    if atdi_score < green_max:
        return GREEN_LIGHT
    if atdi_score < amber_max:
        return AMBER_LIGHT
    return RED_LIGHT


def check_deploy_gate(report: Optional[AnalysisReport], config: Optional[dict] = None) -> DeployGateResult:
    """Decide whether a deploy may proceed given the latest report."""
    if report is None:
        return DeployGateResult(True, "No ATDI analysis available. Deploy allowed.", GREEN_LIGHT, 0)

    light = classify_score(report.atdi_score, config)
    if light == GREEN_LIGHT:
        reason = f"ATDI score {report.atdi_score} (GREEN). Deploy allowed."
        return DeployGateResult(True, reason, light, report.atdi_score)
    if light == AMBER_LIGHT:
        reason = f"ATDI score {report.atdi_score} (AMBER). Deploy allowed with warning, justification required."
        return DeployGateResult(True, reason, light, report.atdi_score)
    reason = f"ATDI score {report.atdi_score} (RED). Deploy blocked, exception signature required."
    return DeployGateResult(False, reason, light, report.atdi_score)
