"""
CLI entry point for oasreplay.

This module provides the Typer-based command-line interface:

    oasreplay <requests-file> <openapi-file> [options]

The CLI is thin: it loads the two inputs, builds the validator, hands the
transcript to the ReplayEngine and prints the summary. Problems with the
inputs are fatal (exit 1); entries that fail validation are reported and do
not change the exit code unless --fail-on-invalid is given.
"""

import json
import sys
import traceback
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from oasreplay import __version__
from oasreplay.contract import build_validator, load_contract
from oasreplay.errors import OasReplayError
from oasreplay.replay import ReplayEngine, ReplayResult
from oasreplay.report import generate_console_report, generate_json_report, write_json_report
from oasreplay.schema import ReplayOptions, load_transcript

# Initialize Typer app with metadata
app = typer.Typer(
    name="oasreplay",
    help="Replay recorded HTTP exchanges against an OpenAPI contract.",
    add_completion=False,
)

# Exit status the command line parser uses for usage errors
USAGE_ERROR_EXIT_CODE = 2

# Rich consoles for formatted output
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]oasreplay[/bold] version {__version__}")
        raise typer.Exit()


@app.command()
def main(
    requests_file: Annotated[
        Path,
        typer.Argument(help="JSON transcript of recorded request/response pairs."),
    ],
    openapi_file: Annotated[
        Path,
        typer.Argument(help="OpenAPI 3.0/3.1 document (YAML or JSON)."),
    ],
    server_url: Annotated[
        Optional[str],
        typer.Option(
            "--server-url",
            "-s",
            help="Base URL for relative request paths. Defaults to the first absolute server in the contract.",
            envvar="OASREPLAY_SERVER_URL",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the report as JSON on stdout (diagnostics go to stderr).",
        ),
    ] = False,
    report_path: Annotated[
        Optional[Path],
        typer.Option(
            "--report",
            "-r",
            help="Also write the JSON report to this file.",
            resolve_path=True,
        ),
    ] = None,
    fail_on_invalid: Annotated[
        bool,
        typer.Option(
            "--fail-on-invalid",
            help="Exit with status 1 if any entry is invalid.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Report every entry, including those that pass.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full error tracebacks.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Validate every recorded exchange in REQUESTS_FILE against OPENAPI_FILE.

    Example:
        $ oasreplay cf_requests.json openapi.yaml
    """
    options = ReplayOptions(
        server_url=server_url,
        verbose=verbose,
        json_output=json_output,
        report_path=report_path,
        fail_on_invalid=fail_on_invalid,
        debug=debug,
    )

    try:
        result = replay_files(requests_file, openapi_file, options)
    except OasReplayError as e:
        _fatal(e, options)

    if options.report_path is not None:
        try:
            written = write_json_report(result, options.report_path, requests_file, openapi_file)
        except OSError as e:
            err_console.print(f"[red]Failed to write report '{escape(str(options.report_path))}': {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        if not options.json_output:
            console.print(f"[dim]Report written to {escape(str(written))}[/dim]")

    if options.json_output:
        print(generate_json_report(result, requests_file, openapi_file))
    else:
        generate_console_report(result, console=console, verbose=options.verbose)

    if options.fail_on_invalid and not result.success:
        raise typer.Exit(code=1)


def replay_files(
    requests_file: Path,
    openapi_file: Path,
    options: ReplayOptions,
) -> ReplayResult:
    """
    Load both inputs and replay the transcript.

    The contract is loaded and compiled first, then the transcript; any
    failure there raises before a single entry is validated.

    Raises:
        OasReplayError: For unreadable or malformed inputs, or when no
            validator can be built
    """
    log = err_console if options.json_output else console

    contract = load_contract(openapi_file)
    validator, warnings = build_validator(contract, server_url=options.server_url)
    entries = load_transcript(requests_file)

    engine = ReplayEngine(validator, console=log, verbose=options.verbose)
    return engine.replay(entries, warnings)


def _fatal(error: OasReplayError, options: ReplayOptions) -> NoReturn:
    """Report a run-aborting error and exit with status 1."""
    if options.json_output:
        output = {"error": True, **error.to_dict()}
        if options.debug:
            output["traceback"] = traceback.format_exc()
        print(json.dumps(output, indent=2))
    else:
        err_console.print(f"[red]{escape(str(error))}[/red]")
        if options.debug:
            err_console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
    raise typer.Exit(code=1)


def run() -> None:
    """
    Console script entry point.

    Usage errors (wrong number of arguments, unknown options) are printed
    with the usage line and exit with status 1 rather than 2.
    """
    try:
        app()
    except SystemExit as e:
        if e.code == USAGE_ERROR_EXIT_CODE:
            sys.exit(1)
        raise


if __name__ == "__main__":
    run()
