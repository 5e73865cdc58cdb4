from __future__ import annotations

"""
Investor records.

An investor is created on the first accepted contribution and never removed.
`shares` is the cumulative contribution and only ever grows; it is both the
investor's voting weight and their part of the quorum denominator.
"""


from dataclasses import asdict, dataclass
from typing import Any, Dict

from . import Amount, InvestorId


@dataclass
class Investor:
    investor_id: InvestorId
    shares: Amount = Amount(0)
    is_investor: bool = True

    def add_shares(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("share increments must be non-negative")
        self.shares = Amount(self.shares + amount)

    def view(self) -> "InvestorView":
        return InvestorView(is_investor=self.is_investor, shares=self.shares)


@dataclass(frozen=True)
class InvestorView:
    """Read-only projection returned by `get_investor`."""

    is_investor: bool
    shares: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


NON_INVESTOR = InvestorView(is_investor=False, shares=0)
