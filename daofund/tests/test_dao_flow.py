"""
End-to-end walk through the fund lifecycle on one ledger instance: investors
join during the contribution window, proposals are created and voted on after
it closes, and the admin executes and withdraws.
"""

import pytest

from daofund.clock import ManualClock
from daofund.config import DAOConfig
from daofund.errors import (AlreadyExecuted, AlreadyVoted, InsufficientFunds, NotAdmin,
                            NotInvestor, QuorumNotMet, TooEarly, VotingClosed, WindowClosed)
from daofund.ledger.governance import GovernanceLedger
from daofund.treasury.memory import InMemoryTreasury

ADMIN, INV1, INV2, INV3, OUTSIDER = "acct0", "acct1", "acct2", "acct3", "acct4"


@pytest.fixture(scope="module")
def env():
    clock = ManualClock(start=1_700_000_000)
    treasury = InMemoryTreasury()
    cfg = DAOConfig(quorum_percent=50, contribution_period=2000, voting_period=2000, admin=ADMIN)
    return GovernanceLedger(cfg, treasury, clock=clock), clock, treasury


def test_accepts_contributions(env):
    dao, _, _ = env
    for who in (INV1, INV2, INV3):
        dao.contribute(who, 100)
    assert all(dao.get_investor(w).is_investor for w in (INV1, INV2, INV3))
    assert dao.total_shares == 300


def test_rejects_contribution_after_window(env):
    dao, clock, _ = env
    clock.advance(2001)
    with pytest.raises(WindowClosed):
        dao.contribute(OUTSIDER, 100)
    assert dao.total_shares == 300


def test_creates_proposal(env):
    dao, _, _ = env
    pid = dao.create_proposal(INV1, "Proposal 1", 50, OUTSIDER)
    p = dao.get_proposal(pid)
    assert (p.name, p.amount, p.recipient) == ("Proposal 1", 50, OUTSIDER)


def test_rejects_proposal_from_non_investor(env):
    dao, _, _ = env
    with pytest.raises(NotInvestor):
        dao.create_proposal(OUTSIDER, "Proposal Nah", 100, OUTSIDER)


def test_rejects_proposal_amount_too_big(env):
    dao, _, _ = env
    with pytest.raises(InsufficientFunds):
        dao.create_proposal(INV1, "Proposal Nah", 400, OUTSIDER)


def test_votes(env):
    dao, _, _ = env
    pid = dao.create_proposal(INV1, "Proposal 2", 50, OUTSIDER)
    assert pid == 1
    dao.vote(INV2, 1)
    dao.vote(INV3, 1)
    assert dao.get_proposal(1).votes == 200


def test_rejects_vote_from_non_investor(env):
    dao, _, _ = env
    with pytest.raises(NotInvestor):
        dao.vote(OUTSIDER, 1)


def test_rejects_double_vote(env):
    dao, _, _ = env
    with pytest.raises(AlreadyVoted):
        dao.vote(INV2, 1)


def test_rejects_vote_after_end(env):
    dao, clock, _ = env
    clock.advance(2001)
    with pytest.raises(VotingClosed):
        dao.vote(INV1, 1)


def test_executes_proposal(env):
    dao, _, treasury = env
    before = treasury.credited(OUTSIDER)
    dao.execute_proposal(ADMIN, 1)
    assert treasury.credited(OUTSIDER) - before == 50
    assert dao.get_proposal(1).executed is True
    assert dao.available_funds == 250


def test_rejects_execution_below_quorum(env):
    dao, _, _ = env
    with pytest.raises(QuorumNotMet):
        dao.execute_proposal(ADMIN, 0)


def test_rejects_second_execution(env):
    dao, _, _ = env
    with pytest.raises(AlreadyExecuted):
        dao.execute_proposal(ADMIN, 1)


def test_rejects_execution_before_end(env):
    dao, _, _ = env
    pid = dao.create_proposal(INV1, "Proposal 3", 50, OUTSIDER)
    dao.vote(INV2, pid)
    dao.vote(INV3, pid)
    with pytest.raises(TooEarly):
        dao.execute_proposal(ADMIN, pid)


def test_withdraws(env):
    dao, _, treasury = env
    before = treasury.credited(OUTSIDER)
    dao.withdraw_ether(ADMIN, 50, OUTSIDER)
    assert treasury.credited(OUTSIDER) - before == 50
    assert dao.available_funds == 200


def test_rejects_withdraw_from_non_admin(env):
    dao, _, _ = env
    with pytest.raises(NotAdmin):
        dao.withdraw_ether(INV1, 50, OUTSIDER)


def test_rejects_withdraw_too_much(env):
    dao, _, _ = env
    with pytest.raises(InsufficientFunds):
        dao.withdraw_ether(ADMIN, 500, OUTSIDER)


def test_books_balance(env):
    dao, _, treasury = env
    dao.assert_consistent()
    assert treasury.balance() == dao.available_funds == 200
