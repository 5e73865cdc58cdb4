from __future__ import annotations

"""
Lightweight shared types for the governance ledger.

These are intentionally minimal so they can be imported from both runtime
code and type-checkers without importing heavier submodules.

Conventions
-----------
- Identities (investors, recipients, admin) are opaque, non-empty strings
  supplied by the host environment; no signature checks happen here.
- Proposal ids are the 0-based creation index.
- Monetary values are integers in the smallest unit.
- Timestamps are UNIX seconds.
"""


from typing import Literal, NewType

# ────────────────────────────────────────────────────────────────────────────────
# Identifiers
# ────────────────────────────────────────────────────────────────────────────────

InvestorId = NewType("InvestorId", str)
ProposalId = NewType("ProposalId", int)

# ────────────────────────────────────────────────────────────────────────────────
# Primitive numeric types
# ────────────────────────────────────────────────────────────────────────────────

Amount = NewType("Amount", int)  # smallest unit
Timestamp = NewType("Timestamp", int)  # UNIX seconds

# ────────────────────────────────────────────────────────────────────────────────
# Core literals
# ────────────────────────────────────────────────────────────────────────────────

EventKind = Literal[
    "contribute",  # investor contribution (grants shares)
    "deposit",  # plain deposit (no shares)
    "create_proposal",
    "vote",
    "execute_proposal",
    "withdraw",  # direct admin withdrawal
]


def is_identity(s: object) -> bool:
    """Return True iff `s` is usable as a caller/recipient identity."""
    return isinstance(s, str) and bool(s.strip())


def is_amount(x: object) -> bool:
    """Non-negative int (bools excluded)."""
    return isinstance(x, int) and not isinstance(x, bool) and x >= 0


from .investor import Investor, InvestorView  # noqa: E402
from .proposal import Proposal, ProposalView  # noqa: E402
from .events import LedgerEvent  # noqa: E402

__all__ = [
    "InvestorId",
    "ProposalId",
    "Amount",
    "Timestamp",
    "EventKind",
    "is_identity",
    "is_amount",
    "Investor",
    "InvestorView",
    "Proposal",
    "ProposalView",
    "LedgerEvent",
]
