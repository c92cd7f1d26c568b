"""
govledger - single-organization governance ledger

Group membership control plus a proposal -> vote -> finalize lifecycle with
quorum-based outcomes and vote delegation, kept in an in-memory ledger that
callers drive with an already-authenticated caller identity.

## Quick Start

```python
from govledger import GovernanceLedger, VoteType

ledger = GovernanceLedger(owner="alice")
ledger.add_member("alice", "bob")

proposal_id = ledger.create_proposal("bob", "Raise dues").unwrap()
ledger.cast_vote("alice", proposal_id, VoteType.FOR)
```
"""

# datastructures first: core modules import its type aliases
from .datastructures import (
    AmendAuthority,
    BatchFinalizeOutcome,
    DelegationMode,
    GovernanceConfig,
    GovernanceError,
    GovernanceErrorCode,
    GovernanceException,
    GovernanceInvariantError,
    GovernanceLedger,
    LedgerResult,
    ProposalStats,
    ProposalStatus,
    ProposalView,
    QuorumFailurePolicy,
    VoteRecord,
    VoteType,
    VotingTally,
)
from .core import (
    Clock,
    GovernanceEvent,
    GovernanceEventBus,
    GovernanceEventType,
    ManualClock,
    SystemClock,
    configure_logging,
)

# Version info
__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "AmendAuthority",
    "BatchFinalizeOutcome",
    "Clock",
    "DelegationMode",
    "GovernanceConfig",
    "GovernanceError",
    "GovernanceErrorCode",
    "GovernanceEvent",
    "GovernanceEventBus",
    "GovernanceEventType",
    "GovernanceException",
    "GovernanceInvariantError",
    "GovernanceLedger",
    "LedgerResult",
    "ManualClock",
    "ProposalStats",
    "ProposalStatus",
    "ProposalView",
    "QuorumFailurePolicy",
    "SystemClock",
    "VoteRecord",
    "VoteType",
    "VotingTally",
    "configure_logging",
]
