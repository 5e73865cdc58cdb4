from __future__ import annotations
"""
daofund.ledger
==============

The governance ledger state machine and its quorum arithmetic.
"""


from .governance import GovernanceLedger
from .quorum import meets_quorum, min_votes_for_quorum, vote_percent

__all__ = ["GovernanceLedger", "vote_percent", "meets_quorum", "min_votes_for_quorum"]
