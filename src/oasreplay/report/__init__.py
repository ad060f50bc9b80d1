"""
Reporting module for oasreplay.

Output formats:
    - Console: Rich summary of total, valid and invalid entries
    - JSON: Structured report with the same counts plus per-entry outcomes

Example:
    from oasreplay.report import generate_console_report, generate_json_report

    generate_console_report(result)
    print(generate_json_report(result, "recorded.json", "openapi.yaml"))
"""

from oasreplay.report.console import generate_console_report, print_summary
from oasreplay.report.json import build_report_dict, generate_json_report, write_json_report

__all__ = [
    "generate_console_report",
    "print_summary",
    "generate_json_report",
    "build_report_dict",
    "write_json_report",
]
