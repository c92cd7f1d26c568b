"""
Governance ledger type definitions.

This module provides the enums, configuration and immutable records used by
the governance ledger. Records are frozen; every state change produces a new
record through one of the ``with_*`` helpers so the ledger can validate a
transition completely before committing it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .governance_errors import GovernanceErrorCode
from .type_aliases import (
    DurationSeconds,
    LedgerName,
    MemberId,
    ProposalDescription,
    ProposalId,
    QuorumPercent,
    Timestamp,
    VoteCount,
)

HOUR_SECONDS: DurationSeconds = 3600
DAY_SECONDS: DurationSeconds = 86400


class ProposalStatus(Enum):
    """Lifecycle status of a proposal. PENDING is the only open state."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ProposalStatus.PENDING


class VoteType(Enum):
    """Choices a member can vote for."""

    FOR = "for"
    AGAINST = "against"


class AmendAuthority(Enum):
    """Who may amend a pending proposal."""

    OWNER_ONLY = "owner_only"
    PROPOSER_ONLY = "proposer_only"
    BOTH = "both"


class DelegationMode(Enum):
    """
    How an active delegation changes the slot a vote is written to.

    REDIRECT: a member with a delegate votes in the delegate's slot.
    PROXY: a delegate's vote is also recorded for each delegator who has
    not voted yet, each in the delegator's own slot.
    """

    REDIRECT = "redirect"
    PROXY = "proxy"


class QuorumFailurePolicy(Enum):
    """What finalizing does when quorum was not reached."""

    REJECT = "reject"
    REVERT = "revert"


@dataclass(frozen=True, slots=True)
class GovernanceConfig:
    """Configuration parameters for a governance ledger."""

    name: LedgerName = "governance"
    quorum_percent: QuorumPercent = 50
    voting_period_seconds: DurationSeconds = 3 * DAY_SECONDS
    min_voting_period_seconds: DurationSeconds = HOUR_SECONDS
    max_voting_period_seconds: DurationSeconds = 30 * DAY_SECONDS
    amend_authority: AmendAuthority = AmendAuthority.BOTH
    delegation_mode: DelegationMode = DelegationMode.REDIRECT
    quorum_failure_policy: QuorumFailurePolicy = QuorumFailurePolicy.REJECT
    event_history_size: int = 1000

    def __post_init__(self) -> None:
        """Validate governance configuration."""
        if not self.name:
            raise ValueError("Ledger name cannot be empty")
        if not (0 < self.quorum_percent <= 100):
            raise ValueError("Quorum percent must be between 1 and 100")
        if self.min_voting_period_seconds <= 0:
            raise ValueError("Minimum voting period must be positive")
        if self.max_voting_period_seconds < self.min_voting_period_seconds:
            raise ValueError("Maximum voting period cannot be below the minimum")
        if not self.is_valid_duration(self.voting_period_seconds):
            raise ValueError("Voting period must lie within the configured bounds")
        if self.event_history_size <= 0:
            raise ValueError("Event history size must be positive")

    def is_valid_duration(self, duration: DurationSeconds) -> bool:
        return (
            self.min_voting_period_seconds
            <= duration
            <= self.max_voting_period_seconds
        )

    def with_quorum_percent(self, percent: QuorumPercent) -> GovernanceConfig:
        return replace(self, quorum_percent=percent)

    def with_voting_period(self, period: DurationSeconds) -> GovernanceConfig:
        return replace(self, voting_period_seconds=period)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "quorum_percent": self.quorum_percent,
            "voting_period_seconds": self.voting_period_seconds,
            "min_voting_period_seconds": self.min_voting_period_seconds,
            "max_voting_period_seconds": self.max_voting_period_seconds,
            "amend_authority": self.amend_authority.value,
            "delegation_mode": self.delegation_mode.value,
            "quorum_failure_policy": self.quorum_failure_policy.value,
            "event_history_size": self.event_history_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> GovernanceConfig:
        return cls(
            name=str(data["name"]),
            quorum_percent=int(data["quorum_percent"]),  # type: ignore[arg-type]
            voting_period_seconds=float(data["voting_period_seconds"]),  # type: ignore[arg-type]
            min_voting_period_seconds=float(data["min_voting_period_seconds"]),  # type: ignore[arg-type]
            max_voting_period_seconds=float(data["max_voting_period_seconds"]),  # type: ignore[arg-type]
            amend_authority=AmendAuthority(data["amend_authority"]),
            delegation_mode=DelegationMode(data["delegation_mode"]),
            quorum_failure_policy=QuorumFailurePolicy(data["quorum_failure_policy"]),
            event_history_size=int(data.get("event_history_size", 1000)),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class ProposalRecord:
    """Stored state of a single proposal."""

    proposal_id: ProposalId
    description: ProposalDescription
    proposer: MemberId
    created_at: Timestamp
    voting_deadline: Timestamp
    status: ProposalStatus = ProposalStatus.PENDING
    total_votes: VoteCount = 0
    for_votes: VoteCount = 0

    def __post_init__(self) -> None:
        """Validate proposal record."""
        if self.proposal_id <= 0:
            raise ValueError("Proposal ID must be positive")
        if not self.description:
            raise ValueError("Proposal description cannot be empty")
        if not self.proposer:
            raise ValueError("Proposer cannot be empty")
        if self.created_at < 0:
            raise ValueError("Created timestamp cannot be negative")
        if self.voting_deadline < self.created_at:
            raise ValueError("Voting deadline cannot precede creation")
        if self.total_votes < 0 or self.for_votes < 0:
            raise ValueError("Vote counts cannot be negative")
        if self.for_votes > self.total_votes:
            raise ValueError("For votes cannot exceed total votes")

    @property
    def against_votes(self) -> VoteCount:
        return self.total_votes - self.for_votes

    @property
    def is_pending(self) -> bool:
        return self.status == ProposalStatus.PENDING

    def is_open(self, current_time: Timestamp) -> bool:
        """Voting is open up to and including the deadline."""
        return self.is_pending and current_time <= self.voting_deadline

    def time_remaining(self, current_time: Timestamp) -> DurationSeconds:
        return max(0.0, self.voting_deadline - current_time)

    def with_status(self, new_status: ProposalStatus) -> ProposalRecord:
        return replace(self, status=new_status)

    def with_vote_added(self, choice: VoteType, count: int = 1) -> ProposalRecord:
        return replace(
            self,
            total_votes=self.total_votes + count,
            for_votes=self.for_votes + (count if choice == VoteType.FOR else 0),
        )

    def with_vote_removed(self, choice: VoteType, count: int = 1) -> ProposalRecord:
        return replace(
            self,
            total_votes=self.total_votes - count,
            for_votes=self.for_votes - (count if choice == VoteType.FOR else 0),
        )

    def with_description(self, description: ProposalDescription) -> ProposalRecord:
        return replace(self, description=description)

    def with_deadline(self, deadline: Timestamp) -> ProposalRecord:
        return replace(self, voting_deadline=deadline)

    def to_dict(self) -> dict[str, object]:
        return {
            "proposal_id": self.proposal_id,
            "description": self.description,
            "proposer": self.proposer,
            "created_at": self.created_at,
            "voting_deadline": self.voting_deadline,
            "status": self.status.value,
            "total_votes": self.total_votes,
            "for_votes": self.for_votes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ProposalRecord:
        return cls(
            proposal_id=int(data["proposal_id"]),  # type: ignore[arg-type]
            description=str(data["description"]),
            proposer=str(data["proposer"]),
            created_at=float(data["created_at"]),  # type: ignore[arg-type]
            voting_deadline=float(data["voting_deadline"]),  # type: ignore[arg-type]
            status=ProposalStatus(data["status"]),
            total_votes=int(data["total_votes"]),  # type: ignore[arg-type]
            for_votes=int(data["for_votes"]),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class VoteRecord:
    """A filled vote slot on one proposal."""

    voter: MemberId
    choice: VoteType
    cast_at: Timestamp
    cast_by: MemberId

    def __post_init__(self) -> None:
        if not self.voter:
            raise ValueError("Voter cannot be empty")
        if not self.cast_by:
            raise ValueError("Casting identity cannot be empty")
        if self.cast_at < 0:
            raise ValueError("Cast timestamp cannot be negative")

    @property
    def is_delegated(self) -> bool:
        """True when someone other than the slot owner filled this slot."""
        return self.voter != self.cast_by

    def to_dict(self) -> dict[str, object]:
        return {
            "voter": self.voter,
            "choice": self.choice.value,
            "cast_at": self.cast_at,
            "cast_by": self.cast_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> VoteRecord:
        return cls(
            voter=str(data["voter"]),
            choice=VoteType(data["choice"]),
            cast_at=float(data["cast_at"]),  # type: ignore[arg-type]
            cast_by=str(data.get("cast_by", data["voter"])),
        )


@dataclass(frozen=True, slots=True)
class ProposalView:
    """Read model of a proposal at a given instant."""

    proposal_id: ProposalId
    description: ProposalDescription
    proposer: MemberId
    created_at: Timestamp
    voting_deadline: Timestamp
    status: ProposalStatus
    total_votes: VoteCount
    for_votes: VoteCount
    against_votes: VoteCount
    time_remaining: DurationSeconds
    is_open: bool

    @classmethod
    def from_record(
        cls, record: ProposalRecord, current_time: Timestamp
    ) -> ProposalView:
        return cls(
            proposal_id=record.proposal_id,
            description=record.description,
            proposer=record.proposer,
            created_at=record.created_at,
            voting_deadline=record.voting_deadline,
            status=record.status,
            total_votes=record.total_votes,
            for_votes=record.for_votes,
            against_votes=record.against_votes,
            time_remaining=record.time_remaining(current_time),
            is_open=record.is_open(current_time),
        )


@dataclass(frozen=True, slots=True)
class ProposalStats:
    """Proposal counts grouped by status."""

    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    cancelled: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "cancelled": self.cancelled,
        }


@dataclass(frozen=True, slots=True)
class BatchFinalizeOutcome:
    """Per-proposal result of a batch finalization."""

    proposal_id: ProposalId
    status: ProposalStatus | None = None
    skipped_reason: GovernanceErrorCode | None = None

    @property
    def skipped(self) -> bool:
        return self.status is None


@dataclass(frozen=True, slots=True)
class VotingTally:
    """Quorum and majority arithmetic for one proposal at a given instant."""

    proposal_id: ProposalId
    member_count: int
    total_votes: VoteCount
    for_votes: VoteCount
    against_votes: VoteCount
    quorum_percent: QuorumPercent
    participation_percent: int
    quorum_reached: bool
    majority_reached: bool

    def __post_init__(self) -> None:
        if self.member_count <= 0:
            raise ValueError("Member count must be positive")
        if self.for_votes + self.against_votes != self.total_votes:
            raise ValueError("Vote counts do not add up")

    @property
    def projected_status(self) -> ProposalStatus:
        """Outcome if the proposal were finalized with these numbers."""
        if self.quorum_reached and self.majority_reached:
            return ProposalStatus.ACCEPTED
        return ProposalStatus.REJECTED
