import pytest

from daofund.errors import ClockSkew, InvalidAmount, QuorumNotMet, WindowClosed
from daofund.tests import ADMIN, ALICE, BOB, CAROL, CONTRIBUTION_PERIOD, T0, VOTING_PERIOD


def test_first_contribution_creates_investor(ledger, treasury):
    assert ledger.get_investor(ALICE).is_investor is False

    ledger.contribute(ALICE, 100)

    inv = ledger.get_investor(ALICE)
    assert inv.is_investor is True
    assert inv.shares == 100
    assert ledger.total_shares == 100
    assert ledger.available_funds == 100
    assert treasury.balance() == 100


def test_repeated_contributions_accumulate(ledger):
    ledger.contribute(ALICE, 100)
    ledger.contribute(ALICE, 40)
    ledger.contribute(BOB, 7)

    assert ledger.get_investor(ALICE).shares == 140
    assert ledger.get_investor(BOB).shares == 7
    assert ledger.total_shares == 147
    ledger.assert_consistent()


def test_total_shares_is_sum_of_accepted_amounts(ledger, clock):
    amounts = [(ALICE, 5), (BOB, 11), (CAROL, 3), (ALICE, 1000), (BOB, 2)]
    for who, amt in amounts:
        ledger.contribute(who, amt)
        clock.advance(10)

    assert ledger.total_shares == sum(a for _, a in amounts)
    ledger.assert_consistent()


def test_contribution_rejected_at_window_end(ledger, clock, treasury):
    ledger.contribute(ALICE, 100)
    clock.set(T0 + CONTRIBUTION_PERIOD)  # boundary: now == contribution_end

    with pytest.raises(WindowClosed) as ei:
        ledger.contribute(BOB, 100)

    assert ei.value.details == {"now": T0 + CONTRIBUTION_PERIOD, "deadline": T0 + CONTRIBUTION_PERIOD}
    assert ledger.total_shares == 100
    assert ledger.get_investor(BOB).is_investor is False
    assert treasury.balance() == 100


def test_contribution_accepted_one_second_before_end(ledger):
    ledger.contribute(ALICE, 1, now=T0 + CONTRIBUTION_PERIOD - 1)
    assert ledger.total_shares == 1


def test_contribution_after_window_does_not_alter_state(ledger, clock):
    ledger.contribute(ALICE, 100)
    clock.advance(CONTRIBUTION_PERIOD + 1)
    before = ledger.snapshot()

    with pytest.raises(WindowClosed):
        ledger.contribute("investor4", 100)
    with pytest.raises(WindowClosed):
        ledger.contribute(ALICE, 100)

    assert ledger.snapshot() == before


@pytest.mark.parametrize("amount", [-5, -1, 1.5, "100", True, None])
def test_contribution_amount_must_be_non_negative_int(ledger, amount):
    with pytest.raises(InvalidAmount):
        ledger.contribute(ALICE, amount)
    assert ledger.total_shares == 0


def test_zero_contribution_makes_investor_without_shares(ledger, treasury):
    ledger.contribute(ALICE, 0)

    inv = ledger.get_investor(ALICE)
    assert inv.is_investor is True
    assert inv.shares == 0
    assert ledger.total_shares == 0
    assert ledger.available_funds == 0
    assert treasury.balance() == 0
    ledger.assert_consistent()


def test_zero_share_investors_cannot_reach_nonzero_quorum(ledger, clock):
    ledger.contribute(ALICE, 0)
    clock.advance(CONTRIBUTION_PERIOD + 1)
    pid = ledger.create_proposal(ALICE, "Nothing", 0, BOB)
    ledger.vote(ALICE, pid)
    assert ledger.get_proposal(pid).votes == 0
    assert ledger.vote_percent(pid) == 0

    clock.advance(VOTING_PERIOD + 1)
    with pytest.raises(QuorumNotMet):
        ledger.execute_proposal(ADMIN, pid)


def test_contribution_requires_identity(ledger):
    with pytest.raises(InvalidAmount):
        ledger.contribute("", 10)


def test_deposit_adds_funds_without_shares(ledger, clock, treasury):
    ledger.contribute(ALICE, 100)
    clock.advance(CONTRIBUTION_PERIOD + 50)

    ledger.deposit("sponsor", 25)

    assert ledger.available_funds == 125
    assert ledger.total_shares == 100
    assert ledger.get_investor("sponsor").is_investor is False
    assert treasury.balance() == 125


def test_timestamps_must_not_go_backwards(ledger):
    ledger.contribute(ALICE, 10, now=T0 + 100)
    with pytest.raises(ClockSkew):
        ledger.contribute(BOB, 10, now=T0 + 99)
    assert ledger.total_shares == 10


def test_contribution_is_journaled(ledger):
    ledger.contribute(ALICE, 10)
    ledger.contribute(BOB, 20)

    entries = list(ledger.journal())
    assert [e.kind for e in entries] == ["contribute", "contribute"]
    assert [e.seq for e in entries] == [1, 2]
    assert entries[-1].total_shares_after == 30
    assert entries[-1].available_funds_after == 30
