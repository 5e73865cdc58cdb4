from __future__ import annotations

"""
Governance Ledger — contributions, proposals, votes, execution
--------------------------------------------------------------

This module owns the whole state of a pooled fund:
  • Investors (membership flag + cumulative shares)
  • Proposals (append-only; id = creation index)
  • Per-proposal voter sets
  • Ledger totals: total_shares and available_funds

Value itself lives in an external Treasury (see daofund.treasury). The ledger
tells the treasury to receive and to pay, and reads `treasury.balance()` when
validating payouts; nothing else about the treasury is assumed.

Transitions
~~~~~~~~~~~
  contribute(caller, amount)                     only before contribution_end
  deposit(caller, amount)                        funds without shares, any time
  create_proposal(caller, name, amount, recipient) -> proposal id
  vote(caller, proposal_id)                      until proposal.end (inclusive)
  execute_proposal(caller, proposal_id)          admin, after end, quorum met
  withdraw_ether(caller, amount, recipient)      admin, no vote required

Every transition takes the caller identity explicitly and an optional `now`
(UNIX seconds; read from the ledger clock when omitted). Each one either
commits completely or raises a DAOError with nothing changed.

Optimistic reservation
~~~~~~~~~~~~~~~~~~~~~~
`create_proposal` checks `amount <= available_funds` but reserves nothing.
Several proposals can therefore be open whose amounts together exceed the
funds; whichever executes first is paid, and a later execution fails with
InsufficientFunds even though its quorum was met.

Payout policy
~~~~~~~~~~~~~
Fail-closed. Preconditions are validated, then the treasury is asked to pay,
and only a successful payout commits `executed` / `available_funds`. A payout
that returns False or raises becomes PayoutFailed and the proposal stays
executable.

Concurrency: a single `threading.RLock` serializes every transition and every
read used for validation, and is held across the treasury call.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from threading import RLock
from typing import Any, Dict, Iterable, Iterator, List, Optional

from daofund import metrics
from daofund.clock import Clock, SystemClock
from daofund.config import DAOConfig
from daofund.daotypes import (Amount, EventKind, InvestorId, LedgerEvent, ProposalId,
                              Timestamp, is_amount, is_identity)
from daofund.daotypes.investor import NON_INVESTOR, Investor, InvestorView
from daofund.daotypes.proposal import Proposal, ProposalView
from daofund.errors import (AlreadyExecuted, AlreadyVoted, ClockSkew, DAOError,
                            InsufficientFunds, InvalidAmount, NotAdmin, NotFound,
                            NotInvestor, PayoutFailed, QuorumNotMet, TooEarly,
                            VotingClosed, WindowClosed)
from daofund.ledger.quorum import vote_percent
from daofund.treasury.base import Treasury

log = logging.getLogger(__name__)


def _require_identity(field: str, value: Any) -> None:
    if not is_identity(value):
        raise InvalidAmount(field=field, value=value, message=f"{field} must be a non-empty identity")


def _require_amount(value: Any, field: str = "amount") -> None:
    if not is_amount(value):
        raise InvalidAmount(field=field, value=value, message=f"{field} must be a non-negative integer")


class GovernanceLedger:
    """
    Single-writer governance ledger.

    Usage:
      ledger = GovernanceLedger(DAOConfig(quorum_percent=50), InMemoryTreasury())
      ledger.contribute("alice", 100, now=t0)
      pid = ledger.create_proposal("alice", "Proposal 1", 50, "dave", now=t0)
    """

    def __init__(
        self,
        config: DAOConfig,
        treasury: Treasury,
        *,
        clock: Optional[Clock] = None,
        deployed_at: Optional[int] = None,
    ) -> None:
        config.validate()
        self._cfg = replace(config)
        self._treasury = treasury
        self._clock: Clock = clock or SystemClock()

        start = self._clock.now() if deployed_at is None else int(deployed_at)
        if start < 0:
            raise ValueError("deployed_at must be >= 0")
        self._deployed_at = start
        self._contribution_end = start + self._cfg.contribution_period
        self._last_now = start

        self._investors: Dict[str, Investor] = {}
        self._proposals: List[Proposal] = []
        self._total_shares = 0
        self._available_funds = 0
        self._journal: List[LedgerEvent] = []
        self._lock = RLock()

        log.info(
            "ledger: deployed admin=%s quorum=%d%% contribution_end=%d voting_period=%d",
            self._cfg.admin, self._cfg.quorum_percent, self._contribution_end, self._cfg.voting_period,
        )

    # --- configuration / totals ---

    @property
    def config(self) -> DAOConfig:
        return self._cfg

    @property
    def admin(self) -> str:
        return self._cfg.admin

    @property
    def quorum(self) -> int:
        return self._cfg.quorum_percent

    @property
    def voting_period(self) -> int:
        return self._cfg.voting_period

    @property
    def deployed_at(self) -> int:
        return self._deployed_at

    @property
    def contribution_end(self) -> int:
        return self._contribution_end

    @property
    def total_shares(self) -> int:
        return self._total_shares

    @property
    def available_funds(self) -> int:
        return self._available_funds

    @property
    def treasury(self) -> Treasury:
        return self._treasury

    # --- internal helpers ---

    @contextmanager
    def _transition(self, op: EventKind) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except DAOError as e:
                metrics.record_rejection(op, e.code)
                log.debug("ledger: rejected op=%s %s", op, e)
                raise

    def _resolve_now(self, now: Optional[int]) -> int:
        ts = self._clock.now() if now is None else now
        if not isinstance(ts, int) or isinstance(ts, bool) or ts < 0:
            raise InvalidAmount(field="now", value=ts, message="now must be a non-negative integer")
        if ts < self._last_now:
            raise ClockSkew(now=ts, last_seen=self._last_now)
        return ts

    def _proposal(self, proposal_id: Any) -> Proposal:
        if (
            not isinstance(proposal_id, int)
            or isinstance(proposal_id, bool)
            or not (0 <= proposal_id < len(self._proposals))
        ):
            raise NotFound(proposal_id=proposal_id)
        return self._proposals[proposal_id]

    def _require_investor(self, caller: str) -> Investor:
        inv = self._investors.get(caller)
        if inv is None or not inv.is_investor:
            raise NotInvestor(caller=caller)
        return inv

    def _require_admin(self, caller: str) -> None:
        if caller != self._cfg.admin:
            raise NotAdmin(caller=caller)

    def _require_funds(self, amount: int) -> None:
        if amount > self._available_funds:
            raise InsufficientFunds(requested=amount, available=self._available_funds)
        held = self._treasury.balance()
        if amount > held:
            raise InsufficientFunds(requested=amount, available=held, source="treasury")

    def _check_executable(self, p: Proposal, ts: int) -> None:
        if p.executed:
            raise AlreadyExecuted(proposal_id=p.id)
        if ts <= p.end:
            raise TooEarly(proposal_id=p.id, now=ts, end=p.end)
        pct = vote_percent(p.votes, self._total_shares)
        if pct < self._cfg.quorum_percent:
            raise QuorumNotMet(
                proposal_id=p.id,
                votes=p.votes,
                total_shares=self._total_shares,
                percent=pct,
                quorum=self._cfg.quorum_percent,
            )

    def _payout(self, amount: int, recipient: str, *, path: str, proposal_id: Optional[int] = None) -> None:
        try:
            ok = self._treasury.pay(amount, recipient)
        except Exception as exc:
            metrics.record_payout_failure(path)
            log.warning(
                "ledger: payout raised path=%s amount=%d recipient=%s err=%s",
                path, amount, recipient, exc,
            )
            raise PayoutFailed(
                amount=amount, recipient=recipient, reason=str(exc), proposal_id=proposal_id
            ) from exc
        if not ok:
            metrics.record_payout_failure(path)
            log.warning("ledger: payout declined path=%s amount=%d recipient=%s", path, amount, recipient)
            raise PayoutFailed(
                amount=amount, recipient=recipient, reason="declined", proposal_id=proposal_id
            )

    def _commit(
        self,
        kind: EventKind,
        actor: str,
        ts: int,
        *,
        amount: int = 0,
        proposal_id: Optional[int] = None,
        recipient: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> LedgerEvent:
        self._last_now = ts
        ev = LedgerEvent(
            seq=len(self._journal) + 1,
            kind=kind,
            actor=actor,
            timestamp=ts,
            amount=amount,
            proposal_id=proposal_id,
            recipient=recipient,
            total_shares_after=self._total_shares,
            available_funds_after=self._available_funds,
            meta=dict(meta or {}),
        )
        self._journal.append(ev)
        metrics.set_totals(self._total_shares, self._available_funds)
        return ev

    # --- transitions ---

    def contribute(self, caller: str, amount: int, *, now: Optional[int] = None) -> None:
        """
        Add `amount` to the caller's shares (creating the investor on first use)
        and to total_shares; the value goes into the treasury.
        """
        with self._transition("contribute"):
            ts = self._resolve_now(now)
            _require_identity("caller", caller)
            _require_amount(amount)
            if ts >= self._contribution_end:
                raise WindowClosed(now=ts, deadline=self._contribution_end)

            self._treasury.receive(amount)

            inv = self._investors.get(caller)
            if inv is None:
                inv = Investor(investor_id=InvestorId(caller))
                self._investors[caller] = inv
            inv.add_shares(amount)
            self._total_shares += amount
            self._available_funds += amount

            self._commit("contribute", caller, ts, amount=amount)
            metrics.record_contribution(amount)
            log.info(
                "ledger: contribution caller=%s amount=%d shares=%d total_shares=%d",
                caller, amount, inv.shares, self._total_shares,
            )

    def deposit(self, caller: str, amount: int, *, now: Optional[int] = None) -> None:
        """Send value to the fund without acquiring shares or membership."""
        with self._transition("deposit"):
            ts = self._resolve_now(now)
            _require_identity("caller", caller)
            _require_amount(amount)

            self._treasury.receive(amount)
            self._available_funds += amount

            self._commit("deposit", caller, ts, amount=amount)
            metrics.record_deposit(amount)
            log.info("ledger: deposit caller=%s amount=%d available=%d", caller, amount, self._available_funds)

    def create_proposal(
        self,
        caller: str,
        name: str,
        amount: int,
        recipient: str,
        *,
        now: Optional[int] = None,
    ) -> int:
        """
        Append a proposal paying `amount` to `recipient`; returns its id.
        Funds are checked, not reserved (see module docstring).
        """
        with self._transition("create_proposal"):
            ts = self._resolve_now(now)
            self._require_investor(caller)
            if not isinstance(name, str) or not name:
                raise InvalidAmount(field="name", value=name, message="name must be a non-empty string")
            _require_amount(amount)
            _require_identity("recipient", recipient)
            if amount > self._available_funds:
                raise InsufficientFunds(
                    requested=amount, available=self._available_funds, message="amount too big"
                )

            pid = ProposalId(len(self._proposals))
            self._proposals.append(
                Proposal(
                    id=pid,
                    name=name,
                    amount=Amount(amount),
                    recipient=recipient,
                    end=Timestamp(ts + self._cfg.voting_period),
                    created_at=Timestamp(ts),
                    creator=caller,
                )
            )

            self._commit("create_proposal", caller, ts, amount=amount, proposal_id=pid, recipient=recipient)
            metrics.record_proposal_created()
            log.info(
                "ledger: proposal created id=%d name=%r amount=%d recipient=%s end=%d",
                pid, name, amount, recipient, ts + self._cfg.voting_period,
            )
            return pid

    def vote(self, caller: str, proposal_id: int, *, now: Optional[int] = None) -> None:
        """
        Add the caller's current shares to the proposal's votes. Weight is read
        at vote time, so contributions made after the proposal was created count.
        """
        with self._transition("vote"):
            ts = self._resolve_now(now)
            p = self._proposal(proposal_id)
            inv = self._require_investor(caller)
            if p.has_voted(caller):
                raise AlreadyVoted(proposal_id=p.id, caller=caller)
            if ts > p.end:
                raise VotingClosed(proposal_id=p.id, now=ts, end=p.end)

            p.record_vote(InvestorId(caller), inv.shares)

            self._commit("vote", caller, ts, amount=inv.shares, proposal_id=p.id)
            metrics.record_vote()
            log.info(
                "ledger: vote proposal=%d caller=%s weight=%d votes=%d",
                p.id, caller, inv.shares, p.votes,
            )

    def execute_proposal(self, caller: str, proposal_id: int, *, now: Optional[int] = None) -> None:
        """
        Pay out a proposal whose voting window has closed and whose truncated
        vote percentage reaches quorum. Admin only; at most once per proposal.
        """
        with self._transition("execute_proposal"):
            self._require_admin(caller)
            ts = self._resolve_now(now)
            p = self._proposal(proposal_id)
            self._check_executable(p, ts)
            self._require_funds(p.amount)

            self._payout(p.amount, p.recipient, path="proposal", proposal_id=p.id)

            p.mark_executed()
            self._available_funds -= p.amount

            self._commit(
                "execute_proposal", caller, ts,
                amount=p.amount, proposal_id=p.id, recipient=p.recipient,
                meta={"votes": p.votes, "percent": vote_percent(p.votes, self._total_shares)},
            )
            metrics.record_execution(p.amount)
            log.info(
                "ledger: proposal executed id=%d amount=%d recipient=%s available=%d",
                p.id, p.amount, p.recipient, self._available_funds,
            )

    def withdraw_ether(
        self,
        caller: str,
        amount: int,
        recipient: str,
        *,
        now: Optional[int] = None,
    ) -> None:
        """Admin escape valve: pay `amount` to `recipient` without a proposal."""
        with self._transition("withdraw"):
            self._require_admin(caller)
            ts = self._resolve_now(now)
            _require_amount(amount)
            _require_identity("recipient", recipient)
            self._require_funds(amount)

            self._payout(amount, recipient, path="withdraw")

            self._available_funds -= amount

            self._commit("withdraw", caller, ts, amount=amount, recipient=recipient)
            metrics.record_withdrawal(amount)
            log.info(
                "ledger: withdrawal amount=%d recipient=%s available=%d",
                amount, recipient, self._available_funds,
            )

    # --- queries ---

    def get_investor(self, investor_id: str) -> InvestorView:
        with self._lock:
            inv = self._investors.get(investor_id)
            return inv.view() if inv is not None else NON_INVESTOR

    def get_proposal(self, proposal_id: int) -> ProposalView:
        with self._lock:
            return self._proposal(proposal_id).view()

    def proposal_count(self) -> int:
        return len(self._proposals)

    def list_proposals(self, *, offset: int = 0, limit: Optional[int] = None) -> List[ProposalView]:
        if offset < 0:
            raise ValueError("offset must be >= 0")
        with self._lock:
            items = self._proposals[offset:] if limit is None else self._proposals[offset:offset + limit]
            return [p.view() for p in items]

    def has_voted(self, proposal_id: int, investor_id: str) -> bool:
        with self._lock:
            return self._proposal(proposal_id).has_voted(investor_id)

    def vote_percent(self, proposal_id: int) -> int:
        """Current truncated vote percentage of a proposal."""
        with self._lock:
            return vote_percent(self._proposal(proposal_id).votes, self._total_shares)

    def is_executable(self, proposal_id: int, *, now: Optional[int] = None) -> bool:
        """
        True iff `execute_proposal` by the admin would pass every ledger-side
        precondition at `now`. Does not consult the treasury and mutates nothing.
        """
        with self._lock:
            try:
                ts = self._resolve_now(now)
                p = self._proposal(proposal_id)
                self._check_executable(p, ts)
            except DAOError:
                return False
            return p.amount <= self._available_funds

    def journal(self) -> Iterable[LedgerEvent]:
        return tuple(self._journal)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of all public state."""
        with self._lock:
            return {
                "config": self._cfg.to_dict(),
                "deployed_at": self._deployed_at,
                "contribution_end": self._contribution_end,
                "total_shares": self._total_shares,
                "available_funds": self._available_funds,
                "treasury_balance": self._treasury.balance(),
                "investors": {
                    k: v.view().to_dict() for k, v in sorted(self._investors.items())
                },
                "proposals": [p.view().to_dict() for p in self._proposals],
            }

    # --- utilities ---

    def assert_consistent(self) -> None:
        """Verify ledger invariants; raises AssertionError with the offending totals."""
        with self._lock:
            share_sum = sum(inv.shares for inv in self._investors.values())
            if share_sum != self._total_shares:
                raise AssertionError(
                    f"total_shares={self._total_shares} != sum(investor shares)={share_sum}"
                )
            if self._available_funds < 0:
                raise AssertionError(f"available_funds went negative: {self._available_funds}")
            for p in self._proposals:
                if p.votes > self._total_shares:
                    raise AssertionError(
                        f"proposal {p.id} votes={p.votes} exceed total_shares={self._total_shares}"
                    )


__all__ = ["GovernanceLedger"]
