"""
Synthetic HTTP messages rebuilt from transcript records.

A recorded exchange only carries plain JSON values. Before it can be handed
to the contract validator it is rebuilt into in-memory request and response
objects with a parsed target, a case-insensitive header collection and a
byte body.

Rules:
    - The method is kept exactly as recorded (no upper-casing); an empty
      method means GET and a method that is not an HTTP token raises MethodError
    - The target is parsed as a URI reference; unparseable targets raise PathError
    - Bodies are re-serialized as canonical JSON (sorted keys, compact)
    - Setting a header that already exists replaces it
    - Text that cannot be encoded as UTF-8 skips the entry, never the run
    - Unknown status codes get an empty reason phrase
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from oasreplay.errors import BodyEncodeError, HeaderError, MethodError, PathError
from oasreplay.schema import RequestRecord, ResponseRecord


_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@dataclass(frozen=True)
class SyntheticRequest:
    """
    An HTTP request rebuilt from a RequestRecord.

    Attributes:
        method: HTTP method as recorded
        target: Parsed request target (absolute URL or relative reference)
        headers: Case-insensitive header collection
        body: Serialized body, empty when the record had none
    """

    method: str
    target: httpx.URL
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    @property
    def path(self) -> str:
        return self.target.path

    @property
    def query(self) -> httpx.QueryParams:
        return self.target.params

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    @property
    def is_absolute(self) -> bool:
        return self.target.is_absolute_url


@dataclass(frozen=True)
class SyntheticResponse:
    """
    An HTTP response rebuilt from a ResponseRecord.

    The request reference is read-only context for validators that check a
    response against the operation that produced it. It lives no longer than
    the entry being validated.

    Attributes:
        status_code: Numeric status
        reason_phrase: Standard phrase for the status, "" if unknown
        headers: Case-insensitive header collection
        body: Serialized body, empty when the record had none
        request: The request this response answers
    """

    status_code: int
    reason_phrase: str
    request: SyntheticRequest
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason_phrase}".rstrip()

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")


# =============================================================================
# Building blocks
# =============================================================================


def parse_target(path: str) -> httpx.URL:
    """
    Parse a recorded path as a URI reference.

    Accepts absolute URLs ("https://api.example.com/pets") and relative
    references with or without a query string ("/pets?limit=1").

    Raises:
        PathError: If the path is not a valid URI reference
    """
    for ch in path:
        if ord(ch) < 0x20 or ord(ch) == 0x7F:
            raise PathError(path=path, reason="invalid control character in URL")

    # Everything before the first ':' is a scheme unless a '/', '?' or '#'
    # comes first.
    delimiter = re.search(r"[:/?#]", path)
    if delimiter is not None and delimiter.group() == ":":
        scheme = path[: delimiter.start()]
        if not scheme:
            raise PathError(path=path, reason="missing protocol scheme")
        if not _SCHEME_RE.fullmatch(scheme):
            raise PathError(path=path, reason="first path segment in URL cannot contain colon")

    if _BAD_ESCAPE_RE.search(path):
        raise PathError(path=path, reason="invalid URL escape")

    try:
        return httpx.URL(path)
    except (httpx.InvalidURL, ValueError) as e:
        # Lone surrogates fail percent-encoding with UnicodeEncodeError.
        raise PathError(path=path, reason=str(e)) from e


def encode_body(value: Any, part: str = "request") -> bytes:
    """
    Serialize a recorded body to canonical JSON bytes.

    None means "no body" and yields b"". Keys are sorted and separators are
    compact so identical values always produce identical bytes.

    Raises:
        BodyEncodeError: If the value cannot be represented as JSON
            (for example NaN or Infinity)
    """
    if value is None:
        return b""
    try:
        data = json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError, RecursionError) as e:
        # UnicodeEncodeError (lone surrogates) is a ValueError.
        raise BodyEncodeError(part=part, underlying_error=str(e)) from e
    return data


def apply_headers(
    headers: httpx.Headers,
    values: Mapping[str, str],
    part: str = "request",
) -> httpx.Headers:
    """
    Set each header, replacing any existing value for the same name.

    Raises:
        HeaderError: If a name or value cannot be encoded
    """
    for key, value in values.items():
        try:
            headers[key] = value
        except UnicodeEncodeError as e:
            raise HeaderError(part=part, name=key, reason=str(e)) from e
    return headers


def check_method(method: str) -> str:
    """
    Return the method to send, as recorded.

    An empty method means GET. Anything else must be an HTTP token.

    Raises:
        MethodError: If the method is not a valid token
    """
    if not method:
        return "GET"
    if not _TOKEN_RE.fullmatch(method):
        raise MethodError(method=method)
    return method


# =============================================================================
# Reconstruction
# =============================================================================


def build_request(record: RequestRecord) -> SyntheticRequest:
    """
    Rebuild a request from its record.

    Raises:
        MethodError: If the method is not a valid HTTP token
        PathError: If the path cannot be parsed
        BodyEncodeError: If the body cannot be serialized
        HeaderError: If a header cannot be encoded
    """
    method = check_method(record.method)
    target = parse_target(record.path)
    body = encode_body(record.body, part="request")
    headers = apply_headers(httpx.Headers(), record.headers, part="request")
    return SyntheticRequest(
        method=method,
        target=target,
        headers=headers,
        body=body,
    )


def build_response(record: ResponseRecord, request: SyntheticRequest) -> SyntheticResponse:
    """
    Rebuild a response from its record, bound to the request it answers.

    Raises:
        BodyEncodeError: If the body cannot be serialized
        HeaderError: If a header cannot be encoded
    """
    body = encode_body(record.body, part="response")
    headers = apply_headers(httpx.Headers(), record.headers, part="response")
    return SyntheticResponse(
        status_code=record.status,
        reason_phrase=httpx.codes.get_reason_phrase(record.status),
        request=request,
        headers=headers,
        body=body,
    )
