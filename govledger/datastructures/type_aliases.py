"""
Semantic type aliases for govledger datastructures.

These aliases keep signatures self-documenting: a caller identity is a
``MemberId``, not just a ``str``.
"""

# Identity types
type MemberId = str
type LedgerName = str

# Proposal types
type ProposalId = int
type ProposalDescription = str
type VoteCount = int
type QuorumPercent = int
type VotingPower = int

# Time types
type Timestamp = float
type DurationSeconds = float

# Event types
type EventSequence = int
type EventPayload = dict[str, object]
