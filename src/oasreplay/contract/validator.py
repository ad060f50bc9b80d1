"""
Contract validators for oasreplay.

The Validator interface is the narrow seam between the replay engine and
whatever checks messages against the contract. OpenAPIValidator is the
production implementation, built on openapi-core. Tests can substitute any
Validator subclass.

build_validator() is the factory: it collects advisory warnings about the
contract itself with openapi-spec-validator, then builds the openapi-core
object with spec validation turned off so those warnings never block a run.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from openapi_core import Config, OpenAPI
from openapi_spec_validator import OpenAPIV30SpecValidator, OpenAPIV31SpecValidator

from oasreplay.contract.adapters import (
    DEFAULT_HOST_URL,
    OpenAPIRequestAdapter,
    OpenAPIResponseAdapter,
)
from oasreplay.contract.loader import Contract
from oasreplay.errors import ValidatorBuildError
from oasreplay.messages import SyntheticRequest, SyntheticResponse


VALIDATOR_FAILURE = "ValidatorFailure"
SUPPORTED_VERSIONS = ("3.0", "3.1")


@dataclass(frozen=True)
class ConformanceError:
    """
    One violation of the contract by a request or a response.

    Attributes:
        phase: "request" or "response"
        kind: Name of the validator error class
        message: Human-readable description, including nested schema errors
    """

    phase: str
    kind: str
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, str]:
        return {"phase": self.phase, "kind": self.kind, "message": self.message}


@dataclass(frozen=True)
class AdvisoryWarning:
    """A non-fatal problem found in the contract document itself."""

    message: str
    location: str = ""

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at {self.location})"
        return self.message


class Validator(ABC):
    """
    Checks synthetic messages against a contract.

    Both methods return an empty list when the message conforms. They never
    raise for a non-conforming message.
    """

    @abstractmethod
    def validate_request(self, request: SyntheticRequest) -> list[ConformanceError]:
        """Return the conformance errors for a request."""

    @abstractmethod
    def validate_response(
        self,
        request: SyntheticRequest,
        response: SyntheticResponse,
    ) -> list[ConformanceError]:
        """Return the conformance errors for a response to the given request."""


class OpenAPIValidator(Validator):
    """
    Validator backed by openapi-core.

    Attributes:
        openapi: The openapi-core application object
        host_url: Scheme and host used for relative request targets
    """

    def __init__(self, openapi: OpenAPI, host_url: str = DEFAULT_HOST_URL) -> None:
        self.openapi = openapi
        self.host_url = host_url

    def validate_request(self, request: SyntheticRequest) -> list[ConformanceError]:
        adapter = OpenAPIRequestAdapter(request, self.host_url)
        try:
            result = self.openapi.unmarshal_request(adapter)
        except Exception as e:
            return [_validator_failure("request", e)]
        return _conformance_errors("request", result.errors)

    def validate_response(
        self,
        request: SyntheticRequest,
        response: SyntheticResponse,
    ) -> list[ConformanceError]:
        request_adapter = OpenAPIRequestAdapter(request, self.host_url)
        response_adapter = OpenAPIResponseAdapter(response)
        try:
            result = self.openapi.unmarshal_response(request_adapter, response_adapter)
        except Exception as e:
            return [_validator_failure("response", e)]
        return _conformance_errors("response", result.errors)


# =============================================================================
# Factory
# =============================================================================


def build_validator(
    contract: Contract,
    server_url: str | None = None,
) -> tuple[OpenAPIValidator, list[AdvisoryWarning]]:
    """
    Build a validator for a contract.

    Args:
        contract: The parsed contract
        server_url: Optional base URL for relative request targets. Only its
            scheme and host are used.

    Returns:
        The validator and the advisory warnings found in the contract

    Raises:
        ValidatorBuildError: If openapi-core cannot build a spec object
    """
    if not contract.openapi_version.startswith(SUPPORTED_VERSIONS):
        raise ValidatorBuildError(
            source=contract.source,
            underlying_error=f"unsupported OpenAPI version {contract.openapi_version!r}",
        )

    warnings = collect_warnings(contract)

    try:
        openapi = OpenAPI.from_dict(
            dict(contract.document),
            config=Config(spec_validator_cls=None),
        )
    except Exception as e:
        raise ValidatorBuildError(source=contract.source, underlying_error=str(e)) from e

    host_url = _origin(server_url) or contract.default_origin() or DEFAULT_HOST_URL
    return OpenAPIValidator(openapi, host_url=host_url), warnings


def collect_warnings(contract: Contract) -> list[AdvisoryWarning]:
    """Check the contract document and return its problems as warnings."""
    version = contract.openapi_version
    if version.startswith("3.1"):
        spec_validator_cls: Any = OpenAPIV31SpecValidator
    elif version.startswith("3.0"):
        spec_validator_cls = OpenAPIV30SpecValidator
    else:
        return [AdvisoryWarning(f"unsupported OpenAPI version {version!r}, contract not checked")]

    warnings: list[AdvisoryWarning] = []
    try:
        for error in spec_validator_cls(dict(contract.document)).iter_errors():
            location = "/".join(str(p) for p in getattr(error, "absolute_path", ()))
            warnings.append(AdvisoryWarning("; ".join(_leaf_messages(error)), location))
    except Exception as e:
        # Broken references stop the checker; report what stopped it.
        warnings.append(AdvisoryWarning(f"contract check aborted: {e}"))
    return warnings


# =============================================================================
# Helpers
# =============================================================================


def describe_error(error: BaseException) -> str:
    """
    Describe a validator error, following its cause chain.

    openapi-core wraps schema failures (e.g. InvalidRequestBody caused by
    InvalidSchemaValue); the interesting detail is usually in the nested
    jsonschema errors.
    """
    parts: list[str] = []
    current: BaseException | None = error
    while current is not None:
        text = str(current)
        if text and text not in parts:
            parts.append(text)
        for schema_error in getattr(current, "schema_errors", None) or ():
            parts.append(getattr(schema_error, "message", str(schema_error)))
        current = current.__cause__
    return "; ".join(parts) or error.__class__.__name__


def _leaf_messages(error: Any) -> list[str]:
    """
    Messages of the innermost schema errors.

    oneOf/anyOf failures only say "is not valid under any of the given
    schemas"; the cause (e.g. a missing "description") is in error.context.
    """
    context = getattr(error, "context", None) or ()
    if not context:
        return [getattr(error, "message", str(error))]
    messages: list[str] = []
    for sub_error in context:
        for message in _leaf_messages(sub_error):
            if message not in messages:
                messages.append(message)
    return messages


def _conformance_errors(phase: str, errors: Iterable[BaseException]) -> list[ConformanceError]:
    return [
        ConformanceError(phase=phase, kind=err.__class__.__name__, message=describe_error(err))
        for err in errors
    ]


def _validator_failure(phase: str, error: Exception) -> ConformanceError:
    return ConformanceError(
        phase=phase,
        kind=VALIDATOR_FAILURE,
        message=f"validator failed: {describe_error(error)}",
    )


def _origin(url: str | None) -> str | None:
    if not url:
        return None
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return None
