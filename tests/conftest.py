"""
Pytest configuration and fixtures for oasreplay tests.

This module provides shared fixtures used across unit and integration tests:
a small pets contract, a transcript entry factory and helpers that write
both to disk.
"""

import json
import tempfile
from collections.abc import Callable
from io import StringIO
from pathlib import Path
from typing import Any, Generator

import pytest
from rich.console import Console

from oasreplay.schema import TranscriptEntry


PETS_CONTRACT_YAML = """
openapi: "3.0.3"
info:
  title: Pets
  version: "1.0.0"
paths:
  /pets:
    get:
      parameters:
        - name: limit
          in: query
          required: false
          schema:
            type: integer
      responses:
        "200":
          description: A list of pets
          content:
            application/json:
              schema:
                type: array
                items:
                  $ref: "#/components/schemas/Pet"
        "500":
          description: Server error
    post:
      requestBody:
        required: true
        content:
          application/json:
            schema:
              $ref: "#/components/schemas/Pet"
      responses:
        "201":
          description: Created
          content:
            application/json:
              schema:
                $ref: "#/components/schemas/Pet"
components:
  schemas:
    Pet:
      type: object
      required: [id, name]
      properties:
        id:
          type: integer
        name:
          type: string
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def pets_contract_yaml() -> str:
    """Return the pets contract as YAML text."""
    return PETS_CONTRACT_YAML


@pytest.fixture
def make_entry() -> Callable[..., TranscriptEntry]:
    """Return a factory for transcript entries with sensible defaults."""

    def _make(
        method: str = "GET",
        path: str = "/pets",
        request_headers: dict[str, str] | None = None,
        request_body: Any = None,
        status: int = 200,
        response_headers: dict[str, str] | None = None,
        response_body: Any = None,
    ) -> TranscriptEntry:
        return TranscriptEntry.model_validate({
            "timestamp": "2024-05-01T10:00:00Z",
            "request": {
                "method": method,
                "path": path,
                "headers": request_headers or {},
                "body": request_body,
            },
            "response": {
                "status": status,
                "headers": response_headers if response_headers is not None else {"Content-Type": "application/json"},
                "body": response_body,
            },
        })

    return _make


@pytest.fixture
def write_files(temp_dir: Path, pets_contract_yaml: str) -> Callable[..., tuple[Path, Path]]:
    """Return a helper that writes a transcript and the pets contract to disk."""

    def _write(transcript: Any, contract: str | None = None) -> tuple[Path, Path]:
        requests_file = temp_dir / "requests.json"
        openapi_file = temp_dir / "openapi.yaml"
        if isinstance(transcript, str):
            requests_file.write_text(transcript)
        else:
            requests_file.write_text(json.dumps(transcript))
        openapi_file.write_text(contract if contract is not None else pets_contract_yaml)
        return requests_file, openapi_file

    return _write


@pytest.fixture
def capture_console() -> tuple[Console, StringIO]:
    """Return a wide, non-terminal Console and the buffer it writes to."""
    output = StringIO()
    return Console(file=output, width=200), output
