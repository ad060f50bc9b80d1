"""
Replay module for oasreplay.

This module replays a recorded transcript against a contract validator and
tallies how many exchanges conform.

How it works:
    1. Surface any advisory warnings about the contract
    2. For each entry, rebuild the request and validate it
    3. Rebuild the response (bound to its request) and validate it
    4. Classify the entry as valid or invalid, or skip it if it could not
       be rebuilt

Example:
    from oasreplay.replay import ReplayEngine

    engine = ReplayEngine(validator)
    result = engine.replay(entries, warnings)
    print(f"{result.summary.valid}/{result.summary.total} valid")
"""

from oasreplay.replay.engine import EntryResult, ReplayEngine, ReplayResult, RunSummary

__all__ = [
    "EntryResult",
    "ReplayEngine",
    "ReplayResult",
    "RunSummary",
]
