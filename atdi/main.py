"""
Main application entry point and CLI handling.
"""

import argparse
import json
import os
import sys

from .architectural_analysis import ArchitecturalSniffer, run_atrophy_scan
from .config import (
    load_config, get_config_value, get_configured_report_path,
    EXIT_OK, EXIT_INPUT_ERROR, EXIT_GATE_BLOCKED, GREY, RED, YELLOW, RESET
)
from .debt_scorer import check_deploy_gate
from .errors import ATDIError
from .report_generators import (
    write_json_report, report_to_dict, generate_html_report,
    format_analysis_summary, format_atrophy_summary, format_structure_summary
)

# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def build_parser():
    parser = argparse.ArgumentParser(
        prog="atdi",
        description="ATDI - Architecture Technical Debt Index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  atdi                          # Debt analysis of ./src
  atdi ../webapp                # Debt analysis of ../webapp/src
  atdi --source lib             # Analyze ./lib instead of ./src
  atdi --atrophy                # Git history atrophy scan
  atdi --structure              # Fan-in/fan-out, hubs and SDP violations
  atdi --full --html-report     # Everything, plus HTML reports
  atdi --gate                   # Exit 2 when the score is RED"""
    )
    parser.add_argument('directory', nargs='?', default=None,
                        help='Project directory (defaults to current directory)')
    parser.add_argument('--source', default=None,
                        help='Source root, relative to the project directory (default: src)')
    parser.add_argument('--atrophy', action='store_true',
                        help='Run the git history atrophy scan instead of the debt analysis')
    parser.add_argument('--structure', action='store_true',
                        help='Run the structure metrics analysis instead of the debt analysis')
    parser.add_argument('--full', action='store_true',
                        help='Run debt analysis, structure metrics and atrophy scan')
    parser.add_argument('--json', action='store_true',
                        help='Print the JSON report instead of the console summary')
    parser.add_argument('--markdown', action='store_true',
                        help='Print the summary in Markdown format')
    parser.add_argument('--html-report', action='store_true',
                        help='Also write an HTML report next to each JSON report')
    parser.add_argument('--output', default=None,
                        help='Report path (only with a single analysis)')
    parser.add_argument('--config', default=None,
                        help='Path to a JSON config file (default: <directory>/.atdi-config.json)')
    parser.add_argument('--gate', action='store_true',
                        help='Exit with status 2 when the ATDI traffic light is RED')
    return parser


def _progress(message, args):
    # stdout carries only the JSON document in --json mode
    print(f"{GREY}{message}{RESET}", file=sys.stderr if args.json else sys.stdout)


def _emit(report, out_path, text, args):
    write_json_report(report, out_path)
    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
    else:
        print(text)
        print(f"{GREY}Report written to {out_path}{RESET}")
    if args.html_report:
        html_path = generate_html_report(report, os.path.splitext(out_path)[0] + ".html")
        _progress(f"HTML report generated at: {html_path}", args)


def main(argv=None):
    """Main entry point for the ATDI engine. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    directory = os.path.abspath(args.directory or os.getcwd())
    config = load_config(args.config, directory)
    source_root = os.path.join(directory, args.source or get_config_value(config, "source_dir"))

    run_debt = args.full or not (args.atrophy or args.structure)
    run_structure = args.full or args.structure
    run_atrophy = args.full or args.atrophy
    if args.output and sum([run_debt, run_structure, run_atrophy]) > 1:
        parser.error("--output can only be used with a single analysis")

    exit_code = EXIT_OK
    sniffer = ArchitecturalSniffer(source_root, config)

    try:
        if run_debt:
            _progress(f"🔍 Starting ATDI Analysis on {source_root}...", args)
            report = sniffer.analyze_architecture()
            out_path = args.output or get_configured_report_path(config, directory, "debt_report_name")
            _emit(report, out_path, format_analysis_summary(report, config, args.markdown), args)
            if args.gate:
                gate = check_deploy_gate(report, config)
                _progress(gate.reason, args)
                if not gate.allowed:
                    exit_code = EXIT_GATE_BLOCKED

        if run_structure:
            structure = sniffer.analyze_structure()
            out_path = args.output or get_configured_report_path(config, directory, "structure_report_name")
            write_json_report(structure, out_path)
            print(json.dumps(structure, indent=2) if args.json else format_structure_summary(structure, args.markdown))
    except ATDIError as e:
        print(f"{RED}Error: Analysis failed: {e}{RESET}", file=sys.stderr)
        # The atrophy scan does not read the source root
        exit_code = EXIT_INPUT_ERROR

    if run_atrophy:
        _progress("✂️ Starting Digital Atrophy Scan...", args)
        atrophy = run_atrophy_scan(directory, config)
        out_path = args.output or get_configured_report_path(config, directory, "atrophy_report_name")
        _emit(atrophy, out_path, format_atrophy_summary(atrophy, out_path, args.markdown), args)
        if atrophy.warning:
            print(f"{YELLOW}Atrophy scan could not read the version-control history.{RESET}", file=sys.stderr)
            exit_code = EXIT_INPUT_ERROR

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
