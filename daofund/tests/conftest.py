from __future__ import annotations

import pytest

from daofund.clock import ManualClock
from daofund.config import DAOConfig
from daofund.ledger.governance import GovernanceLedger
from daofund.treasury.memory import InMemoryTreasury
from daofund.tests import ADMIN, ALICE, BOB, CAROL, CONTRIBUTION_PERIOD, T0, VOTING_PERIOD


@pytest.fixture
def config() -> DAOConfig:
    return DAOConfig(
        quorum_percent=50,
        contribution_period=CONTRIBUTION_PERIOD,
        voting_period=VOTING_PERIOD,
        admin=ADMIN,
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=T0)


@pytest.fixture
def treasury() -> InMemoryTreasury:
    return InMemoryTreasury()


@pytest.fixture
def ledger(config: DAOConfig, treasury: InMemoryTreasury, clock: ManualClock) -> GovernanceLedger:
    return GovernanceLedger(config, treasury, clock=clock)


@pytest.fixture
def funded(ledger: GovernanceLedger, clock: ManualClock) -> GovernanceLedger:
    """Three investors with 100 each (total_shares=300), contribution window closed."""
    for who in (ALICE, BOB, CAROL):
        ledger.contribute(who, 100)
    clock.advance(CONTRIBUTION_PERIOD + 1)
    return ledger
