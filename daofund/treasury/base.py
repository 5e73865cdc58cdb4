from __future__ import annotations

"""
Treasury collaborator protocol.

    receive(amount)             -> None   (value arrives from a contributor/depositor)
    pay(amount, recipient)      -> bool   (True iff the transfer happened)
    balance()                   -> int

`pay` may also raise; the ledger treats both a False return and an exception as
a failed payout and commits nothing.
"""


from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class TreasuryError(Exception):
    """Raised by treasury implementations for transfer-level failures."""


@runtime_checkable
class Treasury(Protocol):
    def receive(self, amount: int) -> None: ...

    def pay(self, amount: int, recipient: str) -> bool: ...

    def balance(self) -> int: ...


@dataclass(frozen=True)
class PayoutRecord:
    seq: int
    amount: int
    recipient: str
    ok: bool
    reason: str = ""
