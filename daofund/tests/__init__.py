from __future__ import annotations
"""
daofund test suite package.

Shared constants for the tests. Timestamps are chosen away from zero so that
off-by-one mistakes around window boundaries show up as wrong outcomes rather
than negative-time errors.
"""


T0: int = 1_000
CONTRIBUTION_PERIOD: int = 2_000
VOTING_PERIOD: int = 2_000

ADMIN = "admin"
ALICE, BOB, CAROL = "investor1", "investor2", "investor3"
DAVE = "recipient4"


__all__ = ["T0", "CONTRIBUTION_PERIOD", "VOTING_PERIOD", "ADMIN", "ALICE", "BOB", "CAROL", "DAVE"]
