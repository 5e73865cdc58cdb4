from __future__ import annotations

"""
Quorum arithmetic.

The vote percentage is `votes * 100 // total_shares` using integer floor
division. Truncation is part of the rule: with 300 shares, 149 votes is 49%
and fails a 50% quorum even though 149/300 = 49.67%.
"""


from daofund.config import PERCENT_SCALE


def vote_percent(votes: int, total_shares: int) -> int:
    """Integer percentage of `total_shares` represented by `votes` (truncated)."""
    if votes < 0 or total_shares < 0:
        raise ValueError("votes and total_shares must be non-negative")
    if total_shares == 0:
        return 0
    return (votes * PERCENT_SCALE) // total_shares


def meets_quorum(votes: int, total_shares: int, quorum_percent: int) -> bool:
    return vote_percent(votes, total_shares) >= quorum_percent


def min_votes_for_quorum(total_shares: int, quorum_percent: int) -> int:
    """Smallest vote weight whose truncated percentage reaches `quorum_percent`."""
    if total_shares <= 0:
        return 0
    # ceil(quorum * total / 100)
    return -(-(quorum_percent * total_shares) // PERCENT_SCALE)


__all__ = ["vote_percent", "meets_quorum", "min_votes_for_quorum"]
