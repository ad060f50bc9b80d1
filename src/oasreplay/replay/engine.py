"""
Replay Engine for oasreplay.

The ReplayEngine walks a transcript in order and, for every entry:

    1. Rebuilds the request           (failure -> entry skipped)
    2. Validates the request          (errors kept, the entry continues)
    3. Rebuilds the response          (failure -> entry skipped, even after step 2)
    4. Validates the response         (errors added to those of step 2)
    5. Classifies the entry           (valid iff steps 2 and 4 found nothing)

Entries are independent. A bad entry is never fatal: the worst outcome is
exclusion from the tally. Diagnostics go to an injected rich Console so
callers (and tests) decide where they end up.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from rich.console import Console
from rich.markup import escape

from oasreplay.contract.validator import AdvisoryWarning, ConformanceError, Validator
from oasreplay.errors import ReconstructionError
from oasreplay.messages import build_request, build_response
from oasreplay.schema import EntryState, EntryStatus, TranscriptEntry


@dataclass
class RunSummary:
    """
    Counts for one replay run.

    Entries that were skipped count toward total only, so
    valid + invalid <= total always holds.
    """

    total: int = 0
    valid: int = 0
    invalid: int = 0

    def __post_init__(self) -> None:
        """Check the counts after dataclass init."""
        if min(self.total, self.valid, self.invalid) < 0:
            raise ValueError("counts must be non-negative")
        if self.valid + self.invalid > self.total:
            raise ValueError(
                f"valid ({self.valid}) + invalid ({self.invalid}) exceeds total ({self.total})"
            )

    @property
    def skipped(self) -> int:
        return self.total - self.valid - self.invalid

    def record(self, status: EntryStatus) -> None:
        """Fold one classified entry into the tally."""
        if status == EntryStatus.SKIPPED:
            return
        if self.valid + self.invalid >= self.total:
            raise ValueError("more entries classified than were loaded")
        if status == EntryStatus.VALID:
            self.valid += 1
        else:
            self.invalid += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "skipped": self.skipped,
        }


@dataclass
class EntryResult:
    """
    Outcome of validating one transcript entry.

    Attributes:
        index: 1-based position in the transcript
        method: Recorded request method
        path: Recorded request path
        state: Last lifecycle state reached
        errors: Conformance errors from request and response validation
        skip_reason: Why the entry was skipped, if it was
    """

    index: int
    method: str
    path: str
    state: EntryState = EntryState.PENDING
    errors: list[ConformanceError] = field(default_factory=list)
    skip_reason: str | None = None

    @property
    def status(self) -> EntryStatus:
        if self.state == EntryState.SKIPPED:
            return EntryStatus.SKIPPED
        if self.state != EntryState.CLASSIFIED:
            raise ValueError(f"entry {self.index} has not been classified ({self.state.value})")
        return EntryStatus.INVALID if self.errors else EntryStatus.VALID

    @property
    def request_errors(self) -> list[ConformanceError]:
        return [e for e in self.errors if e.phase == "request"]

    @property
    def response_errors(self) -> list[ConformanceError]:
        return [e for e in self.errors if e.phase == "response"]


@dataclass
class ReplayResult:
    """
    Result of replaying a complete transcript.

    Attributes:
        summary: Total/valid/invalid counts
        entries: Per-entry outcomes, in transcript order
        warnings: Advisory warnings about the contract
    """

    summary: RunSummary
    entries: list[EntryResult] = field(default_factory=list)
    warnings: list[AdvisoryWarning] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether no entry was classified invalid."""
        return self.summary.invalid == 0


class ReplayEngine:
    """
    Drives reconstruction and validation over a transcript.

    Usage:
        engine = ReplayEngine(validator, console=Console(stderr=True))
        result = engine.replay(entries, warnings)
        print(result.summary.valid, result.summary.invalid)

    Attributes:
        validator: Checks messages against the contract
        console: Sink for diagnostics
        verbose: Also report entries that pass
    """

    def __init__(
        self,
        validator: Validator,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        self.validator = validator
        self.console = console if console is not None else Console(stderr=True)
        self.verbose = verbose

    def surface_warnings(self, warnings: Sequence[AdvisoryWarning]) -> None:
        """Print contract warnings once. They never block validation."""
        if not warnings:
            return
        self.console.print(f"[yellow]Validator creation warnings: {len(warnings)}[/yellow]")
        for warning in warnings:
            self.console.print(f"[yellow]Warning: {escape(str(warning))}[/yellow]")

    def replay(
        self,
        entries: Sequence[TranscriptEntry],
        warnings: Iterable[AdvisoryWarning] = (),
    ) -> ReplayResult:
        """
        Validate every entry and tally the outcome.

        Args:
            entries: Decoded transcript, in recorded order
            warnings: Advisory warnings to surface before the loop

        Returns:
            ReplayResult with the summary and per-entry outcomes
        """
        warnings = list(warnings)
        self.surface_warnings(warnings)

        self.console.print(f"Loaded {len(entries)} requests for validation")

        summary = RunSummary(total=len(entries))
        results: list[EntryResult] = []
        for index, entry in enumerate(entries, start=1):
            result = self.validate_entry(index, entry)
            summary.record(result.status)
            results.append(result)

        return ReplayResult(summary=summary, entries=results, warnings=warnings)

    def validate_entry(self, index: int, entry: TranscriptEntry) -> EntryResult:
        """Run one entry through the reconstruct/validate/classify steps."""
        result = EntryResult(index=index, method=entry.request.method, path=entry.request.path)

        try:
            request = build_request(entry.request)
        except ReconstructionError as e:
            return self._skip(result, f"Error creating HTTP request {index}: {e.message}")
        result.state = EntryState.RECONSTRUCTED

        request_errors = self.validator.validate_request(request)
        result.errors.extend(request_errors)
        result.state = EntryState.REQUEST_VALIDATED
        if request_errors:
            self._report_errors(f"Request {index} validation failed:", request_errors)

        try:
            response = build_response(entry.response, request)
        except ReconstructionError as e:
            return self._skip(result, f"Error creating HTTP response {index}: {e.message}")

        response_errors = self.validator.validate_response(request, response)
        result.errors.extend(response_errors)
        result.state = EntryState.RESPONSE_VALIDATED
        if response_errors:
            self._report_errors(f"Response {index} validation failed:", response_errors)

        result.state = EntryState.CLASSIFIED
        if self.verbose and not result.errors:
            self.console.print(
                f"[green]✓[/green] {index}: {escape(result.method)} {escape(result.path)}"
                f" -> {response.status_line}"
            )
        return result

    def _skip(self, result: EntryResult, reason: str) -> EntryResult:
        result.state = EntryState.SKIPPED
        result.skip_reason = reason
        self.console.print(f"[yellow]{escape(reason)}[/yellow]")
        return result

    def _report_errors(self, header: str, errors: Sequence[ConformanceError]) -> None:
        self.console.print(f"[red]{header}[/red]")
        for error in errors:
            self.console.print(f"  - {escape(error.message)}")
