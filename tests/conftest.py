"""Pytest configuration and fixtures for govledger testing."""

import pytest

from govledger.core.clock import ManualClock
from govledger.datastructures.governance_ledger import GovernanceLedger
from govledger.datastructures.governance_types import DAY_SECONDS, GovernanceConfig

OWNER = "alice"


@pytest.fixture
def clock() -> ManualClock:
    """Deterministic clock starting at a fixed epoch."""
    return ManualClock()


@pytest.fixture
def ledger(clock: ManualClock) -> GovernanceLedger:
    """Ledger owned by alice with bob and carol as members."""
    ledger = GovernanceLedger(
        owner=OWNER,
        config=GovernanceConfig(name="test-org", voting_period_seconds=2 * DAY_SECONDS),
        clock=clock,
    )
    ledger.add_member(OWNER, "bob").unwrap()
    ledger.add_member(OWNER, "carol").unwrap()
    return ledger


@pytest.fixture
def make_ledger(clock: ManualClock):
    """Factory for a ledger owned by alice with ``members`` members (alice, m1, m2, ...)."""

    def _make(members: int, **config_overrides: object) -> GovernanceLedger:
        ledger = GovernanceLedger(
            owner=OWNER,
            config=GovernanceConfig(**config_overrides),  # type: ignore[arg-type]
            clock=clock,
        )
        for i in range(1, members):
            ledger.add_member(OWNER, f"m{i}").unwrap()
        return ledger

    return _make
