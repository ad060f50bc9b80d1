"""
JSON report generator for oasreplay.

Generates structured JSON output for CI pipelines and other tools. The
three counts (total, valid, invalid) are always present and keep the
valid + invalid <= total invariant; skipped is derived from them.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from oasreplay import __version__
from oasreplay.replay.engine import EntryResult, ReplayResult

REPORT_VERSION = "1.0"


def generate_json_report(
    result: ReplayResult,
    requests_file: str | Path | None = None,
    openapi_file: str | Path | None = None,
    indent: int = 2,
) -> str:
    """
    Generate a JSON report for a replay run.

    Args:
        result: The replay result
        requests_file: Transcript the run read, recorded in the report
        openapi_file: Contract the run validated against
        indent: JSON indentation level (default: 2)

    Returns:
        JSON string with the full report
    """
    report = build_report_dict(result, requests_file, openapi_file)
    return json.dumps(report, indent=indent)


def write_json_report(
    result: ReplayResult,
    path: str | Path,
    requests_file: str | Path | None = None,
    openapi_file: str | Path | None = None,
) -> Path:
    """Write the JSON report to a file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        generate_json_report(result, requests_file, openapi_file) + "\n",
        encoding="utf-8",
    )
    return path


def build_report_dict(
    result: ReplayResult,
    requests_file: str | Path | None = None,
    openapi_file: str | Path | None = None,
) -> dict[str, Any]:
    """
    Build a report dictionary for a replay run.

    Returns:
        Dictionary with summary, warnings and per-entry outcomes
    """
    return {
        "report_version": REPORT_VERSION,
        "tool_version": __version__,
        "generated_at": datetime.now(UTC).isoformat(),
        "inputs": {
            "requests_file": str(requests_file) if requests_file is not None else None,
            "openapi_file": str(openapi_file) if openapi_file is not None else None,
        },
        "summary": result.summary.to_dict(),
        "success": result.success,
        "warnings": [str(w) for w in result.warnings],
        "entries": [_serialize_entry(e) for e in result.entries],
    }


def _serialize_entry(entry: EntryResult) -> dict[str, Any]:
    return {
        "index": entry.index,
        "method": entry.method,
        "path": entry.path,
        "status": entry.status.value,
        "state": entry.state.value,
        "skip_reason": entry.skip_reason,
        "errors": [e.to_dict() for e in entry.errors],
    }
