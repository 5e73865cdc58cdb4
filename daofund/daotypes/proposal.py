from __future__ import annotations

"""
Proposal records.

Proposals live in an append-only sequence; a proposal's id is its creation
index. `name`, `amount`, `recipient` and `end` are fixed at creation. `votes`
only grows, and `executed` flips from False to True at most once.
"""


from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Set

from . import Amount, InvestorId, ProposalId, Timestamp


@dataclass
class Proposal:
    id: ProposalId
    name: str
    amount: Amount
    recipient: str
    end: Timestamp
    votes: Amount = Amount(0)
    executed: bool = False
    created_at: Timestamp = Timestamp(0)
    creator: str = ""
    voters: Set[InvestorId] = field(default_factory=set)

    def has_voted(self, investor_id: str) -> bool:
        return investor_id in self.voters

    def record_vote(self, investor_id: InvestorId, weight: int) -> None:
        if investor_id in self.voters:
            # Callers check first; this guards the no-double-count invariant.
            raise ValueError(f"{investor_id!r} already voted on proposal {self.id}")
        self.voters.add(investor_id)
        self.votes = Amount(self.votes + weight)

    def mark_executed(self) -> None:
        if self.executed:
            raise ValueError(f"proposal {self.id} already executed")
        self.executed = True

    def view(self) -> "ProposalView":
        return ProposalView(
            id=self.id,
            name=self.name,
            amount=self.amount,
            recipient=self.recipient,
            votes=self.votes,
            end=self.end,
            executed=self.executed,
        )


@dataclass(frozen=True)
class ProposalView:
    """Read-only projection returned by `get_proposal`."""

    id: int
    name: str
    amount: int
    recipient: str
    votes: int
    end: int
    executed: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
