"""
Configuration constants and settings for the ATDI engine.
"""

import os
import json
import sys

# =============================================================================
# CONSTANTS AND CONFIGURATION
# =============================================================================

# ANSI escape sequences for colored output
RESET = "\033[0m"
GREY = "\033[90m"
BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
BOLD = "\033[1m"

# Source files the graph builder follows
SCRIPT_EXTS = ('.ts', '.tsx', '.js', '.jsx')

# Default exclusions
EXCLUDED_DIRS = {
    "node_modules", ".git", ".vscode", ".idea", "dist", "coverage",
    "venv", ".venv", "__pycache__", "build", "target", "vendor"
}

# Smell types and their console labels
SMELL_CYCLE = 'CYCLE'
SMELL_GOD_COMPONENT = 'GOD_COMPONENT'

ARCHITECTURAL_SMELLS = {
    SMELL_CYCLE: '🔄 CIRCULAR DEPENDENCY',
    SMELL_GOD_COMPONENT: '🏋️ GOD COMPONENT',
}

# Process exit codes
EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_GATE_BLOCKED = 2

CONFIG_FILE_NAME = ".atdi-config.json"

# =============================================================================
# DEFAULT CONFIGURATION
# =============================================================================

DEFAULT_CONFIG = {
    # Graph builder settings
    "source_dir": "src",
    "source_extensions": list(SCRIPT_EXTS),
    "test_file_patterns": [
        "*.test.*", "*.spec.*", "setupTests.*"
    ],
    "exclude_dirs": sorted(EXCLUDED_DIRS),
    "exclude_patterns": [],

    # Smell detection and scoring
    "god_component_threshold": {
        "lines": 300,
        "dependencies": 10
    },
    "cycle_weight": 10,
    "god_component_weight": 5,
    "max_cycles": None,

    # Traffic light
    "green_max": 5,
    "amber_max": 15,

    # Structure metrics
    "hub_threshold": 5,
    "sdp_margin": 0.3,
    "structure_top_n": 20,

    # History miner settings
    "history_subpath": "src",
    "threshold_months": 6,
    "ktlo_critical_ratio": 0.7,
    "min_log_entries": 3,
    "high_ktlo_min_entries": 5,
    "atrophy_level_candidate_count": 10,
    "history_workers": 1,

    # Report sink
    "report_dir": os.path.join("src", "data"),
    "debt_report_name": "atdi_report.json",
    "atrophy_report_name": "atrophy_report.json",
    "structure_report_name": "architecture_report.json",
}


# =============================================================================
# CONFIGURATION MANAGEMENT
# =============================================================================

def load_config(config_path=None, directory=None):
    """Load configuration from a JSON file if it exists.

    Without an explicit path, ``.atdi-config.json`` inside ``directory``
    (or the current working directory) is used.
    """
    if config_path is None:
        config_path = os.path.join(directory or os.getcwd(), CONFIG_FILE_NAME)
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"{YELLOW}Warning: Could not read config {config_path}: {e}. Using defaults.{RESET}", file=sys.stderr)
        return {}
    if not isinstance(data, dict):
        print(f"{YELLOW}Warning: Config {config_path} is not a JSON object. Using defaults.{RESET}", file=sys.stderr)
        return {}
    return data

def _get(config, key):
    if config is None:
        return DEFAULT_CONFIG[key]
    return config.get(key, DEFAULT_CONFIG[key])

def get_configured_source_extensions(config):
    """Get the extension allow-list, normalised to lower case with a leading dot."""
    exts = _get(config, "source_extensions")
    return tuple(e.lower() if e.startswith('.') else f".{e.lower()}" for e in exts)

def get_configured_test_patterns(config):
    """Get configured test/spec file patterns."""
    return list(_get(config, "test_file_patterns"))

def get_configured_excluded_dirs(config):
    """Get configured excluded directories."""
    return set(_get(config, "exclude_dirs"))

def get_configured_exclude_patterns(config):
    """Get configured exclusion patterns."""
    return set(_get(config, "exclude_patterns"))

def get_configured_god_component_threshold(config):
    """Get the (lines, dependencies) god component thresholds."""
    threshold = dict(DEFAULT_CONFIG["god_component_threshold"])
    if config:
        threshold.update(config.get("god_component_threshold") or {})
    return int(threshold["lines"]), int(threshold["dependencies"])

def get_configured_cycle_weight(config):
    """Get the score weight per cycle member."""
    return int(_get(config, "cycle_weight"))

def get_configured_god_component_weight(config):
    """Get the flat score weight of a god component."""
    return int(_get(config, "god_component_weight"))

def get_configured_max_cycles(config):
    """Get the cycle enumeration cap, or None for no cap."""
    value = _get(config, "max_cycles")
    return None if value is None else int(value)

def get_configured_traffic_light_limits(config):
    """Get the (green_max, amber_max) score limits."""
    return int(_get(config, "green_max")), int(_get(config, "amber_max"))

def get_configured_threshold_months(config):
    """Get the inactivity threshold in months."""
    return float(_get(config, "threshold_months"))

def get_configured_ktlo_critical_ratio(config):
    """Get the KTLO ratio above which a file is flagged HIGH."""
    return float(_get(config, "ktlo_critical_ratio"))

def get_configured_history_workers(config):
    """Get the size of the history query worker pool."""
    return max(1, int(_get(config, "history_workers")))

def get_configured_report_path(config, directory, report_key):
    """Resolve the output path of a report inside ``directory``."""
    report_dir = _get(config, "report_dir")
    if not os.path.isabs(report_dir):
        report_dir = os.path.join(directory, report_dir)
    return os.path.join(report_dir, _get(config, report_key))

def get_config_value(config, key):
    """Get any configured value, falling back to DEFAULT_CONFIG."""
    return _get(config, key)
