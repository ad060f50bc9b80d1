"""
Schema definitions for oasreplay.

This module defines the Pydantic models for the transcript format and the
run options, plus the enums shared by the engine and the reporters:
- RequestRecord/ResponseRecord/TranscriptEntry: one recorded exchange
- ReplayOptions: settings collected from the command line
- EntryState/EntryStatus: lifecycle and outcome of one entry

Transcript format:
    [
      {
        "timestamp": "2024-05-01T10:00:00Z",
        "request": {"method": "GET", "path": "/pets?limit=1", "headers": {}, "body": null},
        "response": {"status": 200, "headers": {"Content-Type": "application/json"}, "body": []}
      }
    ]

Design Decisions:
    - Decoded records are immutable (frozen=True)
    - Scalar fields are strict: a string status or a numeric header value
      rejects the file
    - Unknown keys are ignored so transcripts from other recorders still load
    - body is an arbitrary JSON value; null and a missing key both mean "no body"
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
)

from oasreplay.errors import TranscriptDecodeError, TranscriptReadError


# =============================================================================
# Enums
# =============================================================================


class EntryState(str, Enum):
    """Where an entry is in its validation lifecycle."""

    PENDING = "pending"
    RECONSTRUCTED = "reconstructed"
    REQUEST_VALIDATED = "request_validated"
    RESPONSE_VALIDATED = "response_validated"
    CLASSIFIED = "classified"
    SKIPPED = "skipped"


class EntryStatus(str, Enum):
    """Final outcome of an entry."""

    VALID = "valid"
    INVALID = "invalid"
    SKIPPED = "skipped"


# =============================================================================
# Transcript Models
# =============================================================================


class RequestRecord(BaseModel):
    """
    The request half of a recorded exchange.

    Attributes:
        method: HTTP method, kept exactly as recorded
        path: Request target, possibly with a query string or a full URL
        headers: Header name to value mapping
        body: Any JSON value, or None when the request had no body
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    method: StrictStr = Field(..., description="HTTP method as recorded")
    path: StrictStr = Field(..., description="Request target (may include a query string)")
    headers: dict[StrictStr, StrictStr] = Field(
        default_factory=dict,
        description="Request headers",
    )
    body: Any = Field(default=None, description="Request body as a JSON value")


class ResponseRecord(BaseModel):
    """
    The response half of a recorded exchange.

    Attributes:
        status: Numeric HTTP status code
        headers: Header name to value mapping
        body: Any JSON value, or None when the response had no body
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: StrictInt = Field(..., description="HTTP status code")
    headers: dict[StrictStr, StrictStr] = Field(
        default_factory=dict,
        description="Response headers",
    )
    body: Any = Field(default=None, description="Response body as a JSON value")


class TranscriptEntry(BaseModel):
    """
    One observed request/response exchange.

    The timestamp is informational only and never validated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    timestamp: StrictStr = Field(default="", description="When the exchange was recorded")
    request: RequestRecord
    response: ResponseRecord


_TRANSCRIPT_ADAPTER = TypeAdapter(list[TranscriptEntry])


# =============================================================================
# Run Options
# =============================================================================


class ReplayOptions(BaseModel):
    """
    Settings for one replay run.

    Attributes:
        server_url: Base URL used to resolve relative request paths
        verbose: Print a line for every entry, not only failures
        json_output: Emit the summary as JSON on stdout
        report_path: Where to write the JSON report, if anywhere
        fail_on_invalid: Exit non-zero when any entry is invalid
        debug: Show tracebacks for fatal errors
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    server_url: str | None = Field(
        default=None,
        description="Base URL used to resolve relative request paths",
    )
    verbose: bool = Field(default=False, description="Print every entry")
    json_output: bool = Field(default=False, description="Emit JSON summary")
    report_path: Path | None = Field(default=None, description="JSON report destination")
    fail_on_invalid: bool = Field(
        default=False,
        description="Exit non-zero when any entry is invalid",
    )
    debug: bool = Field(default=False, description="Show tracebacks for fatal errors")


# =============================================================================
# Loading Helpers
# =============================================================================


def decode_transcript(data: bytes | str, source: str = "<memory>") -> list[TranscriptEntry]:
    """
    Decode a transcript document into entries.

    Args:
        data: Raw JSON text
        source: Name used in error messages

    Returns:
        The entries, in file order

    Raises:
        TranscriptDecodeError: If the text is not JSON, the top-level value is
            not an array, or any element does not match the entry shape
    """
    try:
        document = json.loads(data, parse_constant=_reject_constant)
    except ValueError as e:
        # Covers JSONDecodeError, UnicodeDecodeError and rejected constants.
        raise TranscriptDecodeError(source=source, underlying_error=str(e)) from e

    if not isinstance(document, list):
        raise TranscriptDecodeError(
            source=source,
            underlying_error=f"expected a JSON array, got {type(document).__name__}",
        )

    try:
        return _TRANSCRIPT_ADAPTER.validate_python(document)
    except ValidationError as e:
        raise TranscriptDecodeError(
            source=source,
            underlying_error=_summarize_validation_error(e),
        ) from e


def load_transcript(path: Path | str) -> list[TranscriptEntry]:
    """
    Read and decode a transcript file.

    Raises:
        TranscriptReadError: If the file cannot be read
        TranscriptDecodeError: If the content is malformed
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise TranscriptReadError(source=str(path), underlying_error=str(e)) from e

    return decode_transcript(data, source=str(path))


def _reject_constant(token: str) -> Any:
    """NaN, Infinity and -Infinity are not JSON."""
    raise ValueError(f"invalid JSON token {token!r}")


def _summarize_validation_error(error: ValidationError, limit: int = 3) -> str:
    """Render the first few pydantic errors as 'loc: msg' fragments."""
    parts = []
    for err in error.errors()[:limit]:
        loc = ".".join(str(x) for x in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    remaining = error.error_count() - limit
    if remaining > 0:
        parts.append(f"... and {remaining} more")
    return "; ".join(parts)
