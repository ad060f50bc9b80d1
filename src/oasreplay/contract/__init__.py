"""
Contract module for oasreplay.

This module loads OpenAPI documents and builds the validator the replay
engine checks every exchange with.

Components:
    - loader: Read YAML/JSON documents into a Contract
    - validator: The Validator interface, the openapi-core implementation
      and the build_validator() factory
    - adapters: openapi-core protocol views of synthetic messages

Example:
    from oasreplay.contract import build_validator, load_contract

    contract = load_contract("openapi.yaml")
    validator, warnings = build_validator(contract)
"""

from oasreplay.contract.loader import Contract, load_contract, parse_contract
from oasreplay.contract.validator import (
    AdvisoryWarning,
    ConformanceError,
    OpenAPIValidator,
    Validator,
    build_validator,
)

__all__ = [
    "AdvisoryWarning",
    "ConformanceError",
    "Contract",
    "OpenAPIValidator",
    "Validator",
    "build_validator",
    "load_contract",
    "parse_contract",
]
