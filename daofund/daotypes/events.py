from __future__ import annotations

"""
Journal entries appended by the ledger for each committed transition.

Entries are immutable and carry the ledger totals *after* the transition so a
reader can follow the bookkeeping without replaying it.
"""


from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from . import EventKind


@dataclass(frozen=True)
class LedgerEvent:
    seq: int
    kind: EventKind
    actor: str
    timestamp: int
    amount: int = 0
    proposal_id: Optional[int] = None
    recipient: Optional[str] = None
    total_shares_after: int = 0
    available_funds_after: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "kind": self.kind,
            "actor": self.actor,
            "timestamp": self.timestamp,
            "amount": self.amount,
            "proposal_id": self.proposal_id,
            "recipient": self.recipient,
            "total_shares_after": self.total_shares_after,
            "available_funds_after": self.available_funds_after,
            "meta": dict(self.meta),
        }
