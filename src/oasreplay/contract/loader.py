"""
Contract loading for oasreplay.

Reads an OpenAPI document (YAML or JSON; JSON is valid YAML) into a
Contract. Only the structural minimum is checked here: the document must be
a mapping with an "openapi" version field. Everything else is the
validator's business.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from oasreplay.errors import ContractParseError, ContractReadError


@dataclass(frozen=True)
class Contract:
    """
    A parsed OpenAPI document.

    Attributes:
        document: The document as plain Python data
        source: File name the document was read from
    """

    document: Mapping[str, Any]
    source: str = "<memory>"
    servers: tuple[str, ...] = field(default=())

    @property
    def openapi_version(self) -> str:
        return str(self.document.get("openapi", ""))

    def default_origin(self) -> str | None:
        """Scheme and host of the first absolute server, if there is one."""
        for url in self.servers:
            parts = urlsplit(url)
            if parts.scheme and parts.netloc:
                return f"{parts.scheme}://{parts.netloc}"
        return None


def parse_contract(data: bytes | str, source: str = "<memory>") -> Contract:
    """
    Parse an OpenAPI document.

    Args:
        data: Raw YAML or JSON text
        source: Name used in error messages

    Returns:
        The parsed Contract

    Raises:
        ContractParseError: If the text is not YAML, is not a mapping, or has
            no "openapi" version field
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ContractParseError(source=source, underlying_error=str(e)) from e

    if not isinstance(document, dict):
        raise ContractParseError(
            source=source,
            underlying_error=f"expected a mapping at the top level, got {type(document).__name__}",
        )

    if "openapi" not in document:
        raise ContractParseError(
            source=source,
            underlying_error="missing 'openapi' version field",
            suggestion="Only OpenAPI 3.0 and 3.1 documents are supported",
        )

    servers = tuple(
        str(server["url"])
        for server in document.get("servers") or []
        if isinstance(server, dict) and "url" in server
    )
    return Contract(document=document, source=source, servers=servers)


def load_contract(path: Path | str) -> Contract:
    """
    Read and parse an OpenAPI document from disk.

    Raises:
        ContractReadError: If the file cannot be read
        ContractParseError: If the content is not a usable document
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ContractReadError(source=str(path), underlying_error=str(e)) from e

    return parse_contract(data, source=str(path))
