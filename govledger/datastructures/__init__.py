"""
govledger datastructures.

Key datastructures:
- GovernanceLedger: membership, proposals, votes and delegations for one organization
- Governance types: immutable proposal and vote records, configuration and enums
- Governance errors: error codes and the LedgerResult container
"""

from __future__ import annotations

from .governance_errors import (
    GovernanceError,
    GovernanceErrorCode,
    GovernanceException,
    GovernanceInvariantError,
    LedgerResult,
)
from .governance_ledger import GovernanceLedger, coerce_vote_type, is_valid_identity
from .governance_types import (
    DAY_SECONDS,
    HOUR_SECONDS,
    AmendAuthority,
    BatchFinalizeOutcome,
    DelegationMode,
    GovernanceConfig,
    ProposalRecord,
    ProposalStats,
    ProposalStatus,
    ProposalView,
    QuorumFailurePolicy,
    VoteRecord,
    VoteType,
    VotingTally,
)

__all__ = [
    # Ledger
    "GovernanceLedger",
    "coerce_vote_type",
    "is_valid_identity",
    # Types
    "DAY_SECONDS",
    "HOUR_SECONDS",
    "AmendAuthority",
    "BatchFinalizeOutcome",
    "DelegationMode",
    "GovernanceConfig",
    "ProposalRecord",
    "ProposalStats",
    "ProposalStatus",
    "ProposalView",
    "QuorumFailurePolicy",
    "VoteRecord",
    "VoteType",
    "VotingTally",
    # Errors
    "GovernanceError",
    "GovernanceErrorCode",
    "GovernanceException",
    "GovernanceInvariantError",
    "LedgerResult",
]
