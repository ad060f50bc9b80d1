"""
openapi-core protocol adapters for synthetic messages.

openapi-core validates any object that looks like its Request/Response
protocols. These adapters expose SyntheticRequest and SyntheticResponse that
way, following the shape of openapi-core's own contrib adapters (werkzeug
multi-dicts for the query string and cookies, werkzeug Headers for headers).
"""

from http.cookies import CookieError, SimpleCookie

from openapi_core.datatypes import RequestParameters
from werkzeug.datastructures import Headers, ImmutableMultiDict

from oasreplay.messages import SyntheticRequest, SyntheticResponse


DEFAULT_HOST_URL = "http://localhost"


class OpenAPIRequestAdapter:
    """
    Request protocol view of a SyntheticRequest.

    Relative targets are resolved against host_url; absolute targets keep
    their own scheme and host.
    """

    def __init__(self, request: SyntheticRequest, host_url: str = DEFAULT_HOST_URL) -> None:
        self.request = request
        self._host_url = host_url.rstrip("/")
        self.parameters = RequestParameters(
            query=ImmutableMultiDict(list(request.query.multi_items())),
            header=Headers(list(request.headers.multi_items())),
            cookie=ImmutableMultiDict(_parse_cookies(request.headers.get("Cookie", ""))),
        )

    @property
    def host_url(self) -> str:
        if self.request.is_absolute:
            target = self.request.target
            return f"{target.scheme}://{target.netloc.decode('ascii')}"
        return self._host_url

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def method(self) -> str:
        # Operation keys in OpenAPI documents are lower-case.
        return self.request.method.lower()

    @property
    def body(self) -> bytes | None:
        return self.request.body or None

    @property
    def content_type(self) -> str:
        return self.request.content_type


class OpenAPIResponseAdapter:
    """Response protocol view of a SyntheticResponse."""

    def __init__(self, response: SyntheticResponse) -> None:
        self.response = response

    @property
    def data(self) -> bytes | None:
        return self.response.body or None

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def content_type(self) -> str:
        return self.response.content_type

    @property
    def headers(self) -> Headers:
        return Headers(list(self.response.headers.multi_items()))


def _parse_cookies(header: str) -> dict[str, str]:
    """Parse a Cookie header; an unparseable header yields no cookies."""
    if not header:
        return {}
    cookie = SimpleCookie()
    try:
        cookie.load(header)
    except CookieError:
        return {}
    return {name: morsel.value for name, morsel in cookie.items()}
