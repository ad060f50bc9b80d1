"""
Exception hierarchy for oasreplay.

All oasreplay exceptions inherit from OasReplayError, allowing callers to
catch every tool-specific failure with a single except clause.

Exception Categories:
    - InputError: A transcript or contract could not be read or decoded.
      These abort the run before any validation starts.
    - ReconstructionError: One transcript entry could not be turned into a
      synthetic HTTP message. The entry is skipped, the run continues.
    - ValidatorBuildError: The contract parsed but no validator could be
      built from it. Aborts the run.

Conformance errors reported by the validator are not exceptions; they are
the result being measured and live in oasreplay.contract.validator.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Input errors: 1xxx
ERROR_TRANSCRIPT_READ = 1001
ERROR_TRANSCRIPT_DECODE = 1002
ERROR_CONTRACT_READ = 1003
ERROR_CONTRACT_PARSE = 1004

# Reconstruction errors: 2xxx
ERROR_RECONSTRUCT_PATH = 2001
ERROR_RECONSTRUCT_BODY = 2002
ERROR_RECONSTRUCT_HEADER = 2003
ERROR_RECONSTRUCT_METHOD = 2004

# Validator errors: 3xxx
ERROR_VALIDATOR_BUILD = 3001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class OasReplayError(Exception):
    """
    Base exception for all oasreplay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Input Errors
# =============================================================================


@dataclass
class InputError(OasReplayError):
    """
    Base class for fatal input errors.

    Attributes:
        source: File name (or "<memory>") the input came from
        underlying_error: Text of the error that caused the failure
    """

    source: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "source": self.source,
            "underlying_error": self.underlying_error,
        })


@dataclass
class TranscriptReadError(InputError):
    """Raised when the transcript file cannot be read."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to read requests file '{self.source}': {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_TRANSCRIPT_READ
        if not self.suggestion:
            self.suggestion = "Check that the file exists and is readable"
        super().__post_init__()


@dataclass
class TranscriptDecodeError(InputError):
    """
    Raised when the transcript is not a JSON array of exchange objects.

    The whole file is rejected; there is no per-entry recovery.
    """

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to parse requests JSON: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_TRANSCRIPT_DECODE
        if not self.suggestion:
            self.suggestion = (
                "The transcript must be a JSON array of "
                "{timestamp, request, response} objects"
            )
        super().__post_init__()


@dataclass
class ContractReadError(InputError):
    """Raised when the OpenAPI document cannot be read."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to read OpenAPI spec from '{self.source}': {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONTRACT_READ
        if not self.suggestion:
            self.suggestion = "Check that the file exists and is readable"
        super().__post_init__()


@dataclass
class ContractParseError(InputError):
    """Raised when the OpenAPI document is not a usable YAML/JSON mapping."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to parse OpenAPI document: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONTRACT_PARSE
        super().__post_init__()


# =============================================================================
# Reconstruction Errors
# =============================================================================


@dataclass
class ReconstructionError(OasReplayError):
    """
    Base class for errors building a synthetic HTTP message.

    Attributes:
        part: Which message was being built ("request" or "response")
    """

    part: str = "request"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["part"] = self.part


@dataclass
class PathError(ReconstructionError):
    """Raised when a request path is not a parseable URI reference."""

    path: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"invalid path {self.path!r}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_RECONSTRUCT_PATH
        super().__post_init__()
        self.context.update({
            "path": self.path,
            "reason": self.reason,
        })


@dataclass
class BodyEncodeError(ReconstructionError):
    """Raised when a recorded body cannot be serialized back to JSON."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"failed to marshal {self.part} body: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_RECONSTRUCT_BODY
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class HeaderError(ReconstructionError):
    """Raised when a recorded header cannot be carried by an HTTP message."""

    name: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"invalid {self.part} header {self.name!r}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_RECONSTRUCT_HEADER
        super().__post_init__()
        self.context.update({
            "name": self.name,
            "reason": self.reason,
        })


@dataclass
class MethodError(ReconstructionError):
    """Raised when a recorded method is not a valid HTTP token."""

    method: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"invalid method {self.method!r}"
        if self.code == 0:
            self.code = ERROR_RECONSTRUCT_METHOD
        super().__post_init__()
        self.context["method"] = self.method


# =============================================================================
# Validator Errors
# =============================================================================


@dataclass
class ValidatorBuildError(OasReplayError):
    """Raised when no validator can be built from a parsed contract."""

    source: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to create validator for '{self.source}': {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_VALIDATOR_BUILD
        if not self.suggestion:
            self.suggestion = "Check the 'openapi' version field and the document structure"
        self.context.update({
            "source": self.source,
            "underlying_error": self.underlying_error,
        })
