"""
oasreplay - Replay recorded HTTP traffic against an OpenAPI contract.

oasreplay takes a transcript of recorded request/response exchanges and
checks every exchange against an OpenAPI document. Schema conformance is
delegated to openapi-core; this package turns the transcript into synthetic
HTTP messages, drives the validator and tallies the outcome.

Example usage:
    $ oasreplay recorded.json openapi.yaml
    $ oasreplay recorded.json openapi.yaml --json --report out/reports/replay.json
"""

__version__ = "0.1.0"
__author__ = "oasreplay Contributors"

__all__ = [
    "__version__",
    "__author__",
]
