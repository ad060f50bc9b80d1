"""
Unit tests for synthetic message reconstruction.

Tests cover:
- Target parsing (relative, absolute, query strings, bad URIs)
- Canonical body encoding
- Header replacement semantics
- Request/response building
"""

import json

import httpx
import pytest

from oasreplay.errors import BodyEncodeError, HeaderError, MethodError, PathError
from oasreplay.messages import (
    apply_headers,
    build_request,
    build_response,
    check_method,
    encode_body,
    parse_target,
)
from oasreplay.schema import RequestRecord, ResponseRecord


class TestParseTarget:
    """Tests for parse_target."""

    def test_relative_path_with_query(self) -> None:
        """Relative paths keep their query string."""
        url = parse_target("/pets?limit=10&tag=a&tag=b")
        assert url.path == "/pets"
        assert url.params["limit"] == "10"
        assert url.params.get_list("tag") == ["a", "b"]
        assert not url.is_absolute_url

    def test_absolute_url(self) -> None:
        """Absolute URLs are accepted."""
        url = parse_target("https://api.example.com/v1/pets")
        assert url.is_absolute_url
        assert url.host == "api.example.com"
        assert url.path == "/v1/pets"

    def test_colon_after_slash_allowed(self) -> None:
        """A colon inside a later segment is not a scheme."""
        assert parse_target("/files/a:b").path == "/files/a:b"

    def test_missing_scheme_rejected(self) -> None:
        """'://bad' has an empty scheme."""
        with pytest.raises(PathError) as exc_info:
            parse_target("://bad")
        assert "missing protocol scheme" in exc_info.value.message

    def test_colon_in_first_segment_rejected(self) -> None:
        """'1pets:x' is neither a scheme nor a valid relative path."""
        with pytest.raises(PathError):
            parse_target("1pets:x")

    def test_control_character_rejected(self) -> None:
        """Control characters are not allowed."""
        with pytest.raises(PathError):
            parse_target("/pets\n")

    def test_bad_percent_escape_rejected(self) -> None:
        """Percent signs must start a two-digit hex escape."""
        with pytest.raises(PathError) as exc_info:
            parse_target("/pets/%zz")
        assert "escape" in exc_info.value.message

    def test_lone_surrogate_rejected(self) -> None:
        """Text that cannot be encoded as UTF-8 is a path error."""
        with pytest.raises(PathError):
            parse_target("/pets/\ud800")


class TestEncodeBody:
    """Tests for encode_body."""

    def test_absent_body_is_empty(self) -> None:
        """None means no body."""
        assert encode_body(None) == b""

    def test_canonical_form(self) -> None:
        """Keys are sorted and separators compact."""
        assert encode_body({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'

    def test_same_value_same_bytes(self) -> None:
        """Key order in the record does not change the bytes."""
        assert encode_body({"x": 1, "y": 2}) == encode_body({"y": 2, "x": 1})

    def test_unicode_is_utf8(self) -> None:
        """Non-ASCII text is emitted as UTF-8, not escaped."""
        assert encode_body({"name": "café"}) == '{"name":"café"}'.encode("utf-8")

    def test_falsy_values_are_bodies(self) -> None:
        """Empty arrays, false and zero are real bodies."""
        assert encode_body([]) == b"[]"
        assert encode_body(False) == b"false"
        assert encode_body(0) == b"0"

    def test_nan_rejected(self) -> None:
        """Non-finite numbers cannot be represented as JSON."""
        with pytest.raises(BodyEncodeError) as exc_info:
            encode_body({"value": float("nan")}, part="response")
        assert exc_info.value.part == "response"

    def test_lone_surrogate_rejected(self) -> None:
        """Strings that cannot be encoded as UTF-8 are body errors."""
        with pytest.raises(BodyEncodeError):
            encode_body({"name": "\ud800"})


class TestApplyHeaders:
    """Tests for apply_headers."""

    def test_replaces_existing_value(self) -> None:
        """Setting an existing header replaces it, whatever the case."""
        headers = httpx.Headers({"Content-Type": "text/plain"})
        apply_headers(headers, {"content-type": "application/json"})
        assert headers.get_list("Content-Type") == ["application/json"]

    def test_idempotent(self) -> None:
        """Applying the same map twice equals applying it once."""
        values = {"Accept": "application/json", "X-Trace": "abc"}
        once = apply_headers(httpx.Headers(), values)
        twice = apply_headers(apply_headers(httpx.Headers(), values), values)
        assert once.multi_items() == twice.multi_items()

    def test_lone_surrogate_rejected(self) -> None:
        """Unencodable header values name the header and message part."""
        with pytest.raises(HeaderError) as exc_info:
            apply_headers(httpx.Headers(), {"X-Trace": "\ud800"}, part="response")
        assert exc_info.value.name == "X-Trace"
        assert exc_info.value.part == "response"


class TestCheckMethod:
    """Tests for check_method."""

    def test_token_kept_verbatim(self) -> None:
        """Valid tokens, including extension methods, are returned unchanged."""
        assert check_method("get") == "get"
        assert check_method("PROPFIND") == "PROPFIND"

    def test_empty_means_get(self) -> None:
        assert check_method("") == "GET"

    @pytest.mark.parametrize("method", ["GE T", "GET\n", "P\u00d6ST", "(GET)"])
    def test_non_token_rejected(self, method: str) -> None:
        """Methods that cannot go on a request line are rejected."""
        with pytest.raises(MethodError):
            check_method(method)


class TestBuildRequest:
    """Tests for build_request."""

    def test_method_kept_verbatim(self) -> None:
        """No method normalization."""
        request = build_request(RequestRecord(method="get", path="/pets"))
        assert request.method == "get"

    def test_no_body(self) -> None:
        """Absent body gives an empty body."""
        request = build_request(RequestRecord(method="GET", path="/pets"))
        assert request.body == b""
        assert request.content_type == ""

    def test_body_round_trip(self) -> None:
        """The body re-decodes to the recorded value."""
        body = {"id": 7, "name": "Rex", "tags": ["a", None], "meta": {"weight": 3.5}}
        request = build_request(RequestRecord(method="POST", path="/pets", body=body))
        assert json.loads(request.body) == body

    def test_headers_case_insensitive(self) -> None:
        """Headers are looked up without regard to case."""
        request = build_request(
            RequestRecord(method="POST", path="/pets", headers={"content-type": "application/json"})
        )
        assert request.content_type == "application/json"
        assert request.headers["CONTENT-TYPE"] == "application/json"

    def test_bad_path_raises(self) -> None:
        """Bad paths surface as PathError."""
        with pytest.raises(PathError):
            build_request(RequestRecord(method="GET", path="://bad"))

    def test_bad_method_raises(self) -> None:
        """Bad methods surface as MethodError before anything else."""
        with pytest.raises(MethodError):
            build_request(RequestRecord(method="GE T", path="://bad"))

    def test_bad_header_raises(self) -> None:
        """Unencodable request headers surface as HeaderError."""
        with pytest.raises(HeaderError):
            build_request(RequestRecord(method="GET", path="/pets", headers={"X-Trace": "\ud800"}))


class TestBuildResponse:
    """Tests for build_response."""

    def test_reason_phrase(self) -> None:
        """Known codes get their standard phrase."""
        request = build_request(RequestRecord(method="GET", path="/pets"))
        response = build_response(ResponseRecord(status=404), request)
        assert response.reason_phrase == "Not Found"
        assert response.status_line == "404 Not Found"

    def test_unknown_status_has_empty_phrase(self) -> None:
        """Unknown codes are not an error."""
        request = build_request(RequestRecord(method="GET", path="/pets"))
        response = build_response(ResponseRecord(status=799), request)
        assert response.reason_phrase == ""
        assert response.status_line == "799"

    def test_bound_to_request(self) -> None:
        """The response refers back to its request."""
        request = build_request(RequestRecord(method="GET", path="/pets"))
        response = build_response(
            ResponseRecord(status=200, headers={"Content-Type": "application/json"}, body=[]),
            request,
        )
        assert response.request is request
        assert response.body == b"[]"
        assert response.content_type == "application/json"

    def test_bad_body_raises(self) -> None:
        """Unencodable response bodies surface as BodyEncodeError."""
        request = build_request(RequestRecord(method="GET", path="/pets"))
        with pytest.raises(BodyEncodeError):
            build_response(ResponseRecord(status=200, body=float("inf")), request)
