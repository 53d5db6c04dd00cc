"""
Report generation utilities for different output formats.
"""

import os
import re
import json
from collections import defaultdict

from jinja2 import Template

from .config import (
    BOLD, RESET, GREY, GREEN, YELLOW, RED, ARCHITECTURAL_SMELLS
)
from .debt_scorer import classify_score, GREEN_LIGHT, AMBER_LIGHT
from .models import ATROPHY_HIGH

LIGHT_COLORS = {GREEN_LIGHT: GREEN, AMBER_LIGHT: YELLOW}

# =============================================================================
# JSON REPORTS
# =============================================================================

def report_to_dict(report):
    """Plain-dict view of a report value (or a dict passed through)."""
    if hasattr(report, 'to_dict'):
        return report.to_dict()
    return dict(report)

def write_json_report(report, out_path):
    """Write ``report`` as indented JSON, creating parent directories."""
    out_dir = os.path.dirname(os.path.abspath(out_path))
    os.makedirs(out_dir, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, indent=2)
        f.write("\n")
    return out_path

# =============================================================================
# CONSOLE SUMMARIES
# =============================================================================

def _to_markdown(result):
    result = result.replace(BOLD, "**").replace(RESET, "**")
    return re.sub(r"\033\[[0-9;]*m", "", result)

def format_analysis_summary(report, config=None, markdown=False):
    """Format an AnalysisReport for display."""
    lines = [
        f"\n{BOLD}📊 ATDI Analysis Report{RESET}",
        f"{GREY}-----------------------{RESET}",
        f"Nodes: {report.nodes_count}",
        f"Edges: {report.edges_count}",
        f"Smells Detected: {len(report.smells)}",
    ]
    if report.truncated:
        lines.append(f"{YELLOW}Cycle enumeration truncated at {sum(1 for s in report.smells if s.type == 'CYCLE')} cycles.{RESET}")

    light = classify_score(report.atdi_score, config)
    color = LIGHT_COLORS.get(light, RED)
    lines.append(f"\n{BOLD}📉 Final ATDI Score: {report.atdi_score}{RESET} {color}[{light}]{RESET}")

    if report.atdi_score == 0:
        lines.append(f"{GREEN}✅ Clean Architecture. No strict smells detected.{RESET}")
    else:
        lines.append(f"{RED}🚨 Architectural Debt Detected!{RESET}")
        smell_groups = defaultdict(list)
        for smell in report.smells:
            smell_groups[smell.type].append(smell)
        for smell_type, smell_list in smell_groups.items():
            label = ARCHITECTURAL_SMELLS.get(smell_type, '⚠️ ISSUE')
            lines.append(f"\n{label} ({len(smell_list)} issues):")
            for smell in smell_list:
                lines.append(f"  - [{smell.type}] {smell.description}")

    result = "\n".join(lines)
    return _to_markdown(result) if markdown else result

def format_atrophy_summary(report, report_path=None, markdown=False, top_n=3):
    """Format an AtrophyReport for display."""
    level_color = RED if report.atrophy_level == ATROPHY_HIGH else GREEN
    lines = [
        f"\n{BOLD}📉 [VALUE] Atrophy Scan Complete.{RESET}",
        f"   - Candidates for Purgatory: {len(report.candidates)}",
        f"   - Atrophy Level: {level_color}{report.atrophy_level}{RESET}",
    ]
    if report_path:
        lines.append(f"   - Report generated at: {report_path}")
    if report.candidates:
        lines.append(f"\n{YELLOW}⚠️  TOP RECOMMENDATIONS FOR REMOVAL:{RESET}")
        for candidate in report.candidates[:top_n]:
            lines.append(f"   - [{candidate.severity}] {candidate.path}: {candidate.reason}")

    result = "\n".join(lines)
    return _to_markdown(result) if markdown else result

def format_structure_summary(structure, markdown=False):
    """Format the architecture topography report for display."""
    cycles = structure['circular_dependencies']
    lines = [
        f"\n{BOLD}📡 Architecture Topography{RESET}",
        f"🔄 Circular Dependencies: {len(cycles)}",
        f"🕸️ Hubs Detected: {len(structure['hubs'])}",
        f"⚠️ SDP Violations: {len(structure['sdp_violations'])}",
    ]
    if cycles:
        lines.append(f"{RED}CRITICAL: Cycles found:{RESET}")
        for cycle in cycles:
            lines.append(f"  {' -> '.join(cycle)}")

    result = "\n".join(lines)
    return _to_markdown(result) if markdown else result

# =============================================================================
# HTML REPORT
# =============================================================================

HTML_TEMPLATE = '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{{ title }}</title>
    <style>
        body { font-family: Arial, sans-serif; background: #f8f8f8; color: #222; }
        .container { max-width: 900px; margin: 2em auto; background: #fff; padding: 2em; border-radius: 8px; box-shadow: 0 2px 8px #0001; }
        h1 { color: #2d5be3; }
        table { border-collapse: collapse; width: 100%; }
        th, td { text-align: left; padding: 0.4em; border-bottom: 1px solid #eee; }
        .timestamp { color: #888; font-size: 0.9em; }
        .score { font-size: 1.6em; }
    </style>
</head>
<body>
    <div class="container">
        <h1>{{ title }}</h1>
        <div class="timestamp">Generated: {{ timestamp }}</div>
        {% if data.atdi_score is defined %}
        <p class="score">ATDI Score: {{ data.atdi_score }} ({{ light }})</p>
        <p>Nodes: {{ data.nodes_count }} &middot; Edges: {{ data.edges_count }}</p>
        <table>
            <tr><th>Type</th><th>Severity</th><th>Description</th></tr>
            {% for smell in data.smells %}
            <tr><td>{{ smell.type }}</td><td>{{ smell.severity }}</td><td>{{ smell.description }}</td></tr>
            {% else %}
            <tr><td colspan="3">No smells detected.</td></tr>
            {% endfor %}
        </table>
        {% else %}
        <p class="score">Atrophy Level: {{ data.atrophy_level }}</p>
        <table>
            <tr><th>Path</th><th>Severity</th><th>KTLO</th><th>Last Modified</th><th>Reason</th></tr>
            {% for c in data.candidates %}
            <tr><td>{{ c.path }}</td><td>{{ c.severity }}</td><td>{{ c.ktlo_ratio }}</td><td>{{ c.last_modified }}</td><td>{{ c.reason }}</td></tr>
            {% else %}
            <tr><td colspan="5">No atrophy candidates.</td></tr>
            {% endfor %}
        </table>
        {% endif %}
    </div>
</body>
</html>
'''

def generate_html_report(report, out_path, config=None):
    """Render an AnalysisReport or AtrophyReport as a standalone HTML page."""
    data = report_to_dict(report)
    is_debt = 'atdi_score' in data
    html = Template(HTML_TEMPLATE, autoescape=True).render(
        title="ATDI Report" if is_debt else "Atrophy Report",
        timestamp=data.get('timestamp') or data.get('scan_date'),
        light=classify_score(data['atdi_score'], config) if is_debt else None,
        data=data
    )
    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(html)
    return out_path
