from __future__ import annotations
"""
daofund.treasury
================

The treasury is the external value holder the ledger collaborates with. It
receives contributions and deposits, pays out on proposal execution and admin
withdrawal, and reports its balance. The ledger never holds value itself; it
only keeps the bookkeeping (`available_funds`) and reads `balance()` when
validating payouts.

- `Treasury` is the collaborator protocol.
- `InMemoryTreasury` is a process-local reference implementation used by the
  CLI, the RPC wiring and the test suite.
"""


from .base import PayoutRecord, Treasury, TreasuryError
from .memory import InMemoryTreasury

__all__ = ["Treasury", "TreasuryError", "PayoutRecord", "InMemoryTreasury"]
