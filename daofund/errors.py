from __future__ import annotations
# daofund/errors.py
"""
Error types for the governance ledger. Every rejected transition raises one of
these; none of them is raised after state has been mutated.

Each error carries a stable `code` and a `details` mapping holding the
offending values, so callers (and the RPC layer) can tell a programming error
apart from a legitimate business rejection. They are lightweight and safe to
surface over RPC/logs.

Exports:
- DAOError (base)
- WindowClosed, VotingClosed
- NotInvestor, NotAdmin
- InsufficientFunds
- NotFound
- AlreadyVoted, AlreadyExecuted
- TooEarly, QuorumNotMet
- InvalidAmount, ClockSkew, PayoutFailed
"""


import json
from typing import Any, Dict, Mapping, Optional


class DAOError(Exception):
    """Base class for governance ledger errors."""

    code: str = "DAO_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:
        if self.details:
            # Keep this compact and stable for logs
            packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class WindowClosed(DAOError):
    """A time window (contribution or voting) has already expired."""
    code = "DAO_WINDOW_CLOSED"

    def __init__(
        self,
        *,
        now: int,
        deadline: int,
        message: str = "cannot contribute after contribution end",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"now": int(now), "deadline": int(deadline)})
        super().__init__(message, details=d)


class VotingClosed(WindowClosed):
    """Vote attempted after the proposal's end timestamp."""
    code = "DAO_VOTING_CLOSED"

    def __init__(self, *, proposal_id: int, now: int, end: int) -> None:
        super().__init__(
            now=now,
            deadline=end,
            message="can only vote until proposal end date",
            details={"proposal_id": int(proposal_id)},
        )


class NotInvestor(DAOError):
    """Caller has never contributed and therefore holds no membership."""
    code = "DAO_NOT_INVESTOR"

    def __init__(self, *, caller: str, message: str = "only investors") -> None:
        super().__init__(message, details={"caller": caller})


class NotAdmin(DAOError):
    """Caller is not the admin principal fixed at construction."""
    code = "DAO_NOT_ADMIN"

    def __init__(self, *, caller: str, message: str = "only admin") -> None:
        super().__init__(message, details={"caller": caller})


class InsufficientFunds(DAOError):
    """
    Requested amount exceeds what is available at check time. `source` is
    "available_funds" for the ledger's own bookkeeping, "treasury" when the
    external treasury balance is short.
    """
    code = "DAO_INSUFFICIENT_FUNDS"

    def __init__(
        self,
        *,
        requested: int,
        available: int,
        source: str = "available_funds",
        message: str = "not enough available funds",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"requested": int(requested), "available": int(available), "source": source})
        super().__init__(message, details=d)


class NotFound(DAOError):
    """Unknown proposal id."""
    code = "DAO_NOT_FOUND"

    def __init__(self, *, proposal_id: Any, message: str = "proposal does not exist") -> None:
        super().__init__(message, details={"proposal_id": proposal_id})


class AlreadyVoted(DAOError):
    code = "DAO_ALREADY_VOTED"

    def __init__(self, *, proposal_id: int, caller: str) -> None:
        super().__init__(
            "investor can only vote once for a proposal",
            details={"proposal_id": int(proposal_id), "caller": caller},
        )


class AlreadyExecuted(DAOError):
    code = "DAO_ALREADY_EXECUTED"

    def __init__(self, *, proposal_id: int) -> None:
        super().__init__(
            "cannot execute proposal already executed",
            details={"proposal_id": int(proposal_id)},
        )


class TooEarly(DAOError):
    """Execution attempted while the voting window is still open."""
    code = "DAO_TOO_EARLY"

    def __init__(self, *, proposal_id: int, now: int, end: int) -> None:
        super().__init__(
            "cannot execute proposal before end date",
            details={"proposal_id": int(proposal_id), "now": int(now), "end": int(end)},
        )


class QuorumNotMet(DAOError):
    code = "DAO_QUORUM_NOT_MET"

    def __init__(
        self,
        *,
        proposal_id: int,
        votes: int,
        total_shares: int,
        percent: int,
        quorum: int,
    ) -> None:
        super().__init__(
            "cannot execute proposal with votes # below quorum",
            details={
                "proposal_id": int(proposal_id),
                "votes": int(votes),
                "total_shares": int(total_shares),
                "percent": int(percent),
                "quorum": int(quorum),
            },
        )


class InvalidAmount(DAOError):
    """Malformed input: negative or non-integer amount, empty identity or name."""
    code = "DAO_INVALID_ARGUMENT"

    def __init__(self, *, field: str, value: Any, message: str = "invalid argument") -> None:
        super().__init__(message, details={"field": field, "value": value})


class ClockSkew(DAOError):
    """Supplied timestamp is earlier than one the ledger has already observed."""
    code = "DAO_CLOCK_SKEW"

    def __init__(self, *, now: int, last_seen: int) -> None:
        super().__init__(
            "timestamps must be non-decreasing",
            details={"now": int(now), "last_seen": int(last_seen)},
        )


class PayoutFailed(DAOError):
    """The treasury refused or failed a payout; the ledger rolled nothing forward."""
    code = "DAO_PAYOUT_FAILED"

    def __init__(
        self,
        *,
        amount: int,
        recipient: str,
        reason: Optional[str] = None,
        proposal_id: Optional[int] = None,
    ) -> None:
        d: Dict[str, Any] = {"amount": int(amount), "recipient": recipient}
        if reason is not None:
            d["reason"] = reason
        if proposal_id is not None:
            d["proposal_id"] = int(proposal_id)
        super().__init__("treasury payout failed", details=d)


__all__ = [
    "DAOError",
    "WindowClosed",
    "VotingClosed",
    "NotInvestor",
    "NotAdmin",
    "InsufficientFunds",
    "NotFound",
    "AlreadyVoted",
    "AlreadyExecuted",
    "TooEarly",
    "QuorumNotMet",
    "InvalidAmount",
    "ClockSkew",
    "PayoutFailed",
]
