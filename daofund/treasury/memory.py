from __future__ import annotations

"""
In-memory treasury.

Holds a single integer balance and a credit map per recipient so tests can
assert on "recipient balance before/after". A coarse `threading.RLock`
protects mutating methods.

Failure injection
~~~~~~~~~~~~~~~~~
`fail_next_payouts(n)` makes the next `n` payouts return False;
`reject_recipient(r)` makes every payout to `r` raise `TreasuryError`.
Failed payouts move no value and are recorded in the payout log with ok=False.
"""


import logging
from threading import RLock
from typing import Dict, Iterable, List, Set

from .base import PayoutRecord, TreasuryError

log = logging.getLogger(__name__)


class InMemoryTreasury:
    def __init__(self, initial_balance: int = 0) -> None:
        if initial_balance < 0:
            raise ValueError("initial_balance must be >= 0")
        self._balance = int(initial_balance)
        self._credited: Dict[str, int] = {}
        self._payouts: List[PayoutRecord] = []
        self._fail_next = 0
        self._rejected: Set[str] = set()
        self._lock = RLock()

    # --- collaborator protocol ---

    def receive(self, amount: int) -> None:
        if amount < 0:
            raise TreasuryError(f"amount must be non-negative, got {amount}")
        with self._lock:
            self._balance += amount

    def pay(self, amount: int, recipient: str) -> bool:
        if amount < 0:
            raise TreasuryError(f"amount must be non-negative, got {amount}")
        with self._lock:
            seq = len(self._payouts) + 1
            if recipient in self._rejected:
                self._payouts.append(PayoutRecord(seq, amount, recipient, ok=False, reason="rejected"))
                raise TreasuryError(f"recipient {recipient!r} rejected the transfer")
            if self._fail_next > 0:
                self._fail_next -= 1
                self._payouts.append(PayoutRecord(seq, amount, recipient, ok=False, reason="injected"))
                log.debug("treasury: injected payout failure amount=%d recipient=%s", amount, recipient)
                return False
            if amount > self._balance:
                self._payouts.append(PayoutRecord(seq, amount, recipient, ok=False, reason="balance"))
                return False
            self._balance -= amount
            self._credited[recipient] = self._credited.get(recipient, 0) + amount
            self._payouts.append(PayoutRecord(seq, amount, recipient, ok=True))
            return True

    def balance(self) -> int:
        return self._balance

    # --- introspection ---

    def credited(self, recipient: str) -> int:
        """Total value successfully paid to `recipient`."""
        return self._credited.get(recipient, 0)

    def payouts(self) -> Iterable[PayoutRecord]:
        return tuple(self._payouts)

    # --- failure injection ---

    def fail_next_payouts(self, n: int = 1) -> None:
        if n < 0:
            raise ValueError("n must be >= 0")
        with self._lock:
            self._fail_next = n

    def reject_recipient(self, recipient: str) -> None:
        with self._lock:
            self._rejected.add(recipient)

    def accept_recipient(self, recipient: str) -> None:
        with self._lock:
            self._rejected.discard(recipient)
