"""
Single-organization governance ledger.

This module provides the authoritative in-memory store for group membership,
proposals, votes and delegations, together with the proposal lifecycle:

    create -> vote / withdraw / amend / extend -> finalize | cancel

Every operation takes the already-authenticated caller identity as its first
argument and returns a ``LedgerResult``. All operations on one ledger run
under a single re-entrant lock, so each call is atomic with respect to every
other call, and every precondition is checked before anything is mutated.
"""

from __future__ import annotations

import math
from threading import RLock
from typing import Any

from hypothesis import strategies as st

from ..core.clock import Clock, ManualClock, SystemClock
from ..core.events import GovernanceEvent, GovernanceEventBus, GovernanceEventType
from ..core.logging import ledger_logger
from .governance_errors import (
    GovernanceError,
    GovernanceErrorCode,
    GovernanceInvariantError,
    LedgerResult,
)
from .governance_types import (
    DAY_SECONDS,
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
from .type_aliases import (
    DurationSeconds,
    MemberId,
    ProposalDescription,
    ProposalId,
    QuorumPercent,
    Timestamp,
    VotingPower,
)

type VoteChoice = VoteType | str | bool


def is_valid_identity(identity: object) -> bool:
    """Identities are non-blank strings."""
    return isinstance(identity, str) and bool(identity.strip())


def _is_number(value: object) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def coerce_vote_type(choice: object) -> VoteType | None:
    """Map accepted spellings of a vote choice onto ``VoteType``."""
    if isinstance(choice, VoteType):
        return choice
    if isinstance(choice, bool):
        return VoteType.FOR if choice else VoteType.AGAINST
    if isinstance(choice, str):
        try:
            return VoteType(choice.strip().lower())
        except ValueError:
            return None
    return None


class GovernanceLedger:
    """
    Membership, proposals and voting for one organization.

    The owner is the first member and the only identity allowed to manage
    membership, finalize or cancel proposals, and tune the quorum and the
    default voting period.
    """

    def __init__(
        self,
        owner: MemberId,
        config: GovernanceConfig | None = None,
        clock: Clock | None = None,
        event_bus: GovernanceEventBus | None = None,
    ):
        if not is_valid_identity(owner):
            raise ValueError("Owner identity cannot be empty")

        self._config = config or GovernanceConfig()
        self._clock: Clock = clock or SystemClock()
        self._events = event_bus or GovernanceEventBus(
            max_history=self._config.event_history_size
        )
        self._lock = RLock()
        self._log = ledger_logger(self._config.name)

        self._owner: MemberId = owner
        self._members: set[MemberId] = set()
        self._member_count = 0
        self._proposals: dict[ProposalId, ProposalRecord] = {}
        self._votes: dict[ProposalId, dict[MemberId, VoteRecord]] = {}
        self._delegations: dict[MemberId, MemberId] = {}
        self._next_proposal_id: ProposalId = 1

        with self._lock:
            self._admit(owner)

        self._log.info(f"Initialized GovernanceLedger owned by {owner}")

    # Internal helpers

    def _now(self) -> Timestamp:
        return self._clock.now()

    def _emit(
        self, event_type: GovernanceEventType, **payload: Any
    ) -> GovernanceEvent:
        return self._events.emit(event_type, self._now(), payload)

    def _refuse(
        self, code: GovernanceErrorCode, message: str = ""
    ) -> LedgerResult[Any]:
        self._log.debug(f"refused: {code.value} {message}")
        return LedgerResult.fail(code, message)

    def _refuse_with(self, error: GovernanceError) -> LedgerResult[Any]:
        return self._refuse(error.code, error.message)

    def _admit(self, identity: MemberId) -> None:
        self._members.add(identity)
        self._member_count += 1
        self._emit(GovernanceEventType.MEMBER_ADDED, member=identity)
        self._log.info(f"member added: {identity}")

    def _revoke(self, identity: MemberId) -> None:
        for delegator, delegate in list(self._delegations.items()):
            if identity in (delegator, delegate):
                del self._delegations[delegator]
                self._emit(
                    GovernanceEventType.DELEGATION_REVOKED,
                    delegator=delegator,
                    delegate=delegate,
                )

        self._members.discard(identity)
        self._member_count -= 1
        self._emit(GovernanceEventType.MEMBER_REMOVED, member=identity)
        self._log.info(f"member removed: {identity}")

    def _require_owner(self, caller: MemberId) -> GovernanceError | None:
        if caller != self._owner:
            return GovernanceError(
                GovernanceErrorCode.UNAUTHORIZED, f"{caller!r} is not the owner"
            )
        return None

    def _require_pending(
        self, proposal_id: ProposalId
    ) -> GovernanceError | None:
        record = self._proposals.get(proposal_id)
        if record is None:
            return GovernanceError(
                GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                f"Proposal {proposal_id} not found",
            )
        if not record.is_pending:
            return GovernanceError(
                GovernanceErrorCode.PROPOSAL_NOT_PENDING,
                f"Proposal {proposal_id} is {record.status.value}",
            )
        return None

    def _require_open(
        self, caller: MemberId, proposal_id: ProposalId, now: Timestamp
    ) -> GovernanceError | None:
        """Shared preconditions of casting and withdrawing a vote."""
        if caller not in self._members:
            return GovernanceError(
                GovernanceErrorCode.NOT_MEMBER, f"{caller!r} is not a member"
            )
        error = self._require_pending(proposal_id)
        if error is not None:
            return error
        if now > self._proposals[proposal_id].voting_deadline:
            return GovernanceError(
                GovernanceErrorCode.VOTING_CLOSED,
                f"Voting on proposal {proposal_id} has closed",
            )
        return None

    def _quorum_reached(self, total_votes: int) -> bool:
        if self._member_count <= 0:
            raise GovernanceInvariantError("Quorum computed with zero members")
        return (total_votes * 100) // self._member_count >= self._config.quorum_percent

    def _tally(self, record: ProposalRecord) -> VotingTally:
        if self._member_count <= 0:
            raise GovernanceInvariantError("Tally computed with zero members")
        return VotingTally(
            proposal_id=record.proposal_id,
            member_count=self._member_count,
            total_votes=record.total_votes,
            for_votes=record.for_votes,
            against_votes=record.against_votes,
            quorum_percent=self._config.quorum_percent,
            participation_percent=(record.total_votes * 100) // self._member_count,
            quorum_reached=self._quorum_reached(record.total_votes),
            majority_reached=record.for_votes > record.total_votes // 2,
        )

    # Member Management

    def add_member(self, caller: MemberId, identity: MemberId) -> LedgerResult[None]:
        """Admit a new member. Owner only."""
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            if not is_valid_identity(identity):
                return self._refuse(
                    GovernanceErrorCode.INVALID_IDENTITY, "Member identity is empty"
                )
            if identity in self._members:
                return self._refuse(
                    GovernanceErrorCode.ALREADY_MEMBER,
                    f"{identity!r} is already a member",
                )

            self._admit(identity)
            return LedgerResult.ok()

    def remove_member(
        self, caller: MemberId, identity: MemberId
    ) -> LedgerResult[None]:
        """
        Remove a member. Owner only.

        Votes the member already cast stay counted; delegations from and to
        the member are revoked.
        """
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            if not is_valid_identity(identity):
                return self._refuse(
                    GovernanceErrorCode.INVALID_IDENTITY, "Member identity is empty"
                )
            if identity not in self._members:
                return self._refuse(
                    GovernanceErrorCode.NOT_MEMBER, f"{identity!r} is not a member"
                )
            if identity == self._owner:
                return self._refuse(
                    GovernanceErrorCode.CANNOT_REMOVE_OWNER,
                    "Transfer ownership before removing the owner",
                )

            self._revoke(identity)
            return LedgerResult.ok()

    def transfer_ownership(
        self, caller: MemberId, new_owner: MemberId
    ) -> LedgerResult[None]:
        """
        Hand ownership to another identity. Owner only.

        The new owner is admitted before the old owner's membership is
        revoked, so the member count never passes through zero.
        """
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            if not is_valid_identity(new_owner):
                return self._refuse(
                    GovernanceErrorCode.INVALID_IDENTITY, "New owner identity is empty"
                )
            if new_owner == self._owner:
                return self._refuse(
                    GovernanceErrorCode.INVALID_IDENTITY,
                    f"{new_owner!r} already owns the ledger",
                )

            previous_owner = self._owner
            if new_owner not in self._members:
                self._admit(new_owner)
            self._revoke(previous_owner)
            self._owner = new_owner

            self._emit(
                GovernanceEventType.OWNERSHIP_TRANSFERRED,
                previous_owner=previous_owner,
                new_owner=new_owner,
            )
            self._log.info(
                f"ownership transferred "
                f"{previous_owner} -> {new_owner}"
            )
            return LedgerResult.ok()

    # Proposal Management

    def create_proposal(
        self,
        caller: MemberId,
        description: ProposalDescription,
        duration: DurationSeconds | None = None,
    ) -> LedgerResult[ProposalId]:
        """Open a new proposal for voting and return its id."""
        with self._lock:
            if caller not in self._members:
                return self._refuse(
                    GovernanceErrorCode.NOT_MEMBER, f"{caller!r} is not a member"
                )
            if not is_valid_identity(description):
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER,
                    "Proposal description cannot be empty",
                )
            if duration is None:
                duration = self._config.voting_period_seconds
            elif not _is_number(duration) or not self._config.is_valid_duration(
                duration
            ):
                return self._refuse(
                    GovernanceErrorCode.INVALID_DURATION,
                    f"Duration {duration!r} outside "
                    f"[{self._config.min_voting_period_seconds}, "
                    f"{self._config.max_voting_period_seconds}]",
                )

            now = self._now()
            record = ProposalRecord(
                proposal_id=self._next_proposal_id,
                description=description,
                proposer=caller,
                created_at=now,
                voting_deadline=now + duration,
            )

            self._proposals[record.proposal_id] = record
            self._votes[record.proposal_id] = {}
            self._next_proposal_id += 1

            self._emit(
                GovernanceEventType.PROPOSAL_CREATED,
                proposal_id=record.proposal_id,
                proposer=caller,
                description=description,
                voting_deadline=record.voting_deadline,
            )
            self._log.info(
                f"proposal {record.proposal_id} created by {caller}"
            )
            return LedgerResult.ok(record.proposal_id)

    def cast_vote(
        self, caller: MemberId, proposal_id: ProposalId, choice: VoteChoice
    ) -> LedgerResult[MemberId]:
        """
        Record a vote and return the identity whose slot was written.

        With ``DelegationMode.REDIRECT`` a caller who has delegated votes in
        the delegate's slot. With ``DelegationMode.PROXY`` the caller votes
        in their own slot and, as a delegate, also fills the empty slots of
        the members who delegated to them.
        """
        with self._lock:
            now = self._now()
            error = self._require_open(caller, proposal_id, now)
            if error is not None:
                return self._refuse_with(error)

            vote_type = coerce_vote_type(choice)
            if vote_type is None:
                return self._refuse(
                    GovernanceErrorCode.INVALID_VOTE_TYPE,
                    f"Unknown vote choice {choice!r}",
                )

            ballots = self._votes[proposal_id]
            redirect = self._config.delegation_mode == DelegationMode.REDIRECT
            voter = self._delegations.get(caller, caller) if redirect else caller
            if voter in ballots:
                return self._refuse(
                    GovernanceErrorCode.ALREADY_VOTED,
                    f"{voter!r} already voted on proposal {proposal_id}",
                )

            if redirect:
                slots = [voter]
            else:
                slots = [voter] + [
                    delegator
                    for delegator, delegate in self._delegations.items()
                    if delegate == caller and delegator not in ballots
                ]

            record = self._proposals[proposal_id].with_vote_added(
                vote_type, len(slots)
            )
            for slot in slots:
                ballots[slot] = VoteRecord(
                    voter=slot, choice=vote_type, cast_at=now, cast_by=caller
                )
            self._proposals[proposal_id] = record

            for slot in slots:
                self._emit(
                    GovernanceEventType.VOTE_CAST,
                    proposal_id=proposal_id,
                    voter=slot,
                    choice=vote_type.value,
                    cast_by=caller,
                )
            self._log.info(
                f"{caller} voted {vote_type.value} on "
                f"proposal {proposal_id} (slots: {', '.join(slots)})"
            )
            return LedgerResult.ok(voter)

    def withdraw_vote(
        self, caller: MemberId, proposal_id: ProposalId
    ) -> LedgerResult[MemberId]:
        """Clear the caller's effective vote and reverse its counters."""
        with self._lock:
            now = self._now()
            error = self._require_open(caller, proposal_id, now)
            if error is not None:
                return self._refuse_with(error)

            ballots = self._votes[proposal_id]
            if self._config.delegation_mode == DelegationMode.REDIRECT:
                voter = self._delegations.get(caller, caller)
                slots = [voter] if voter in ballots else []
            else:
                voter = caller
                slots = [
                    slot
                    for slot, ballot in ballots.items()
                    if slot == caller or ballot.cast_by == caller
                ]

            if not slots:
                return self._refuse(
                    GovernanceErrorCode.NO_VOTE_TO_WITHDRAW,
                    f"{voter!r} has no vote on proposal {proposal_id}",
                )

            record = self._proposals[proposal_id]
            withdrawn = [ballots[slot] for slot in slots]
            for ballot in withdrawn:
                record = record.with_vote_removed(ballot.choice)
            for slot in slots:
                del ballots[slot]
            self._proposals[proposal_id] = record

            for ballot in withdrawn:
                self._emit(
                    GovernanceEventType.VOTE_WITHDRAWN,
                    proposal_id=proposal_id,
                    voter=ballot.voter,
                    choice=ballot.choice.value,
                    withdrawn_by=caller,
                )
            self._log.info(
                f"{caller} withdrew vote on proposal "
                f"{proposal_id} (slots: {', '.join(slots)})"
            )
            return LedgerResult.ok(voter)

    # Delegation

    def delegate_vote(
        self, caller: MemberId, delegate: MemberId
    ) -> LedgerResult[None]:
        """Point the caller's vote at another member, replacing any previous one."""
        with self._lock:
            if caller not in self._members:
                return self._refuse(
                    GovernanceErrorCode.NOT_MEMBER, f"{caller!r} is not a member"
                )
            if delegate == caller:
                return self._refuse(
                    GovernanceErrorCode.SELF_DELEGATION, "Cannot delegate to self"
                )
            if not is_valid_identity(delegate) or delegate not in self._members:
                return self._refuse(
                    GovernanceErrorCode.INVALID_DELEGATE,
                    f"Delegate {delegate!r} is not a member",
                )

            previous = self._delegations.get(caller)
            self._delegations[caller] = delegate
            self._emit(
                GovernanceEventType.VOTE_DELEGATED,
                delegator=caller,
                delegate=delegate,
                previous_delegate=previous,
            )
            self._log.info(f"{caller} delegated to {delegate}")
            return LedgerResult.ok()

    def revoke_delegation(self, caller: MemberId) -> LedgerResult[MemberId]:
        """Drop the caller's delegation, if any, returning the former delegate."""
        with self._lock:
            delegate = self._delegations.pop(caller, None)
            if delegate is not None:
                self._emit(
                    GovernanceEventType.DELEGATION_REVOKED,
                    delegator=caller,
                    delegate=delegate,
                )
                self._log.info(
                    f"{caller} revoked delegation to {delegate}"
                )
            return LedgerResult.ok(delegate)

    # Proposal Administration

    def amend_proposal(
        self,
        caller: MemberId,
        proposal_id: ProposalId,
        description: ProposalDescription | None = None,
        duration: DurationSeconds | None = None,
    ) -> LedgerResult[None]:
        """
        Change a pending proposal's description and/or restart its window.

        Who may amend is governed by ``GovernanceConfig.amend_authority``. A
        new duration resets the deadline to now + duration.
        """
        with self._lock:
            record = self._proposals.get(proposal_id)
            if record is None:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )

            authority = self._config.amend_authority
            is_owner = caller == self._owner
            is_proposer = caller == record.proposer and caller in self._members
            allowed = {
                AmendAuthority.OWNER_ONLY: is_owner,
                AmendAuthority.PROPOSER_ONLY: is_proposer,
                AmendAuthority.BOTH: is_owner or is_proposer,
            }[authority]
            if not allowed:
                return self._refuse(
                    GovernanceErrorCode.UNAUTHORIZED,
                    f"{caller!r} may not amend proposal {proposal_id} "
                    f"({authority.value})",
                )

            if not record.is_pending:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_PENDING,
                    f"Proposal {proposal_id} is {record.status.value}",
                )
            if description is None and duration is None:
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER, "Nothing to amend"
                )
            if description is not None and not is_valid_identity(description):
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER,
                    "Proposal description cannot be empty",
                )
            if duration is not None and (
                not _is_number(duration)
                or not self._config.is_valid_duration(duration)
            ):
                return self._refuse(
                    GovernanceErrorCode.INVALID_DURATION,
                    f"Duration {duration!r} outside the configured bounds",
                )

            amended = record
            if description is not None:
                amended = amended.with_description(description)
            if duration is not None:
                amended = amended.with_deadline(self._now() + duration)
            self._proposals[proposal_id] = amended

            self._emit(
                GovernanceEventType.PROPOSAL_AMENDED,
                proposal_id=proposal_id,
                amended_by=caller,
                description=amended.description,
                voting_deadline=amended.voting_deadline,
            )
            self._log.info(f"proposal {proposal_id} amended by {caller}")
            return LedgerResult.ok()

    def extend_voting_period(
        self, caller: MemberId, proposal_id: ProposalId, new_deadline: Timestamp
    ) -> LedgerResult[None]:
        """Move a pending proposal's deadline later. Owner only."""
        with self._lock:
            error = self._require_owner(caller) or self._require_pending(proposal_id)
            if error is not None:
                return self._refuse_with(error)
            if not _is_number(new_deadline):
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER,
                    f"Deadline {new_deadline!r} is not a timestamp",
                )

            record = self._proposals[proposal_id]
            if new_deadline <= record.voting_deadline:
                return self._refuse(
                    GovernanceErrorCode.DEADLINE_NOT_LATER,
                    f"{new_deadline} is not after {record.voting_deadline}",
                )
            limit = record.created_at + self._config.max_voting_period_seconds
            if new_deadline > limit:
                return self._refuse(
                    GovernanceErrorCode.EXCEEDS_MAX_DURATION,
                    f"{new_deadline} is past the maximum deadline {limit}",
                )

            self._proposals[proposal_id] = record.with_deadline(new_deadline)
            self._emit(
                GovernanceEventType.VOTING_EXTENDED,
                proposal_id=proposal_id,
                previous_deadline=record.voting_deadline,
                voting_deadline=new_deadline,
            )
            self._log.info(
                f"proposal {proposal_id} extended to {new_deadline}"
            )
            return LedgerResult.ok()

    def cancel_proposal(
        self, caller: MemberId, proposal_id: ProposalId
    ) -> LedgerResult[None]:
        """Cancel a pending proposal for good. Owner only."""
        with self._lock:
            error = self._require_owner(caller) or self._require_pending(proposal_id)
            if error is not None:
                return self._refuse_with(error)

            self._proposals[proposal_id] = self._proposals[proposal_id].with_status(
                ProposalStatus.CANCELLED
            )
            self._emit(
                GovernanceEventType.PROPOSAL_CANCELLED,
                proposal_id=proposal_id,
                cancelled_by=caller,
            )
            self._log.info(f"proposal {proposal_id} cancelled")
            return LedgerResult.ok()

    def _finalize(
        self, proposal_id: ProposalId, now: Timestamp
    ) -> LedgerResult[ProposalStatus]:
        error = self._require_pending(proposal_id)
        if error is not None:
            return self._refuse_with(error)

        record = self._proposals[proposal_id]
        if now <= record.voting_deadline:
            return self._refuse(
                GovernanceErrorCode.VOTING_STILL_OPEN,
                f"Voting on proposal {proposal_id} is open until "
                f"{record.voting_deadline}",
            )

        tally = self._tally(record)
        if (
            not tally.quorum_reached
            and self._config.quorum_failure_policy == QuorumFailurePolicy.REVERT
        ):
            return self._refuse(
                GovernanceErrorCode.QUORUM_NOT_MET,
                f"{tally.participation_percent}% participation is below "
                f"{tally.quorum_percent}%",
            )

        status = tally.projected_status
        self._proposals[proposal_id] = record.with_status(status)
        self._emit(
            GovernanceEventType.PROPOSAL_FINALIZED,
            proposal_id=proposal_id,
            status=status.value,
            total_votes=tally.total_votes,
            for_votes=tally.for_votes,
            against_votes=tally.against_votes,
            member_count=tally.member_count,
            quorum_reached=tally.quorum_reached,
        )
        self._log.info(
            f"proposal {proposal_id} finalized as "
            f"{status.value} ({tally.for_votes} for / {tally.total_votes} votes, "
            f"{tally.participation_percent}% participation)"
        )
        return LedgerResult.ok(status)

    def finalize_proposal(
        self, caller: MemberId, proposal_id: ProposalId
    ) -> LedgerResult[ProposalStatus]:
        """
        Decide a proposal whose deadline has strictly passed. Owner only.

        Quorum is ``total_votes * 100 // member_count >= quorum_percent``.
        Without quorum the proposal is rejected (or, under the REVERT
        policy, the call fails with QUORUM_NOT_MET and it stays pending).
        With quorum it is accepted iff ``for_votes > total_votes // 2``.
        """
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            return self._finalize(proposal_id, self._now())

    def batch_finalize(
        self, caller: MemberId, proposal_ids: list[ProposalId]
    ) -> LedgerResult[list[BatchFinalizeOutcome]]:
        """Finalize many proposals, skipping (not failing on) ineligible ones."""
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)

            now = self._now()
            outcomes: list[BatchFinalizeOutcome] = []
            for proposal_id in proposal_ids:
                result = self._finalize(proposal_id, now)
                if result.success:
                    outcomes.append(
                        BatchFinalizeOutcome(proposal_id=proposal_id, status=result.value)
                    )
                else:
                    outcomes.append(
                        BatchFinalizeOutcome(
                            proposal_id=proposal_id, skipped_reason=result.error_code
                        )
                    )

            finalized = sum(1 for outcome in outcomes if not outcome.skipped)
            self._log.info(
                f"batch finalize: {finalized} finalized, "
                f"{len(outcomes) - finalized} skipped"
            )
            return LedgerResult.ok(outcomes)

    # Parameters

    def adjust_quorum_percent(
        self, caller: MemberId, percent: QuorumPercent
    ) -> LedgerResult[None]:
        """Set the quorum percentage (1-100). Owner only."""
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            if (
                not isinstance(percent, int)
                or isinstance(percent, bool)
                or not (0 < percent <= 100)
            ):
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER,
                    f"Quorum percent {percent!r} must be between 1 and 100",
                )

            previous = self._config.quorum_percent
            self._config = self._config.with_quorum_percent(percent)
            self._emit(
                GovernanceEventType.QUORUM_ADJUSTED,
                previous_quorum_percent=previous,
                quorum_percent=percent,
            )
            self._log.info(f"quorum {previous}% -> {percent}%")
            return LedgerResult.ok()

    def update_voting_period(
        self, caller: MemberId, period: DurationSeconds
    ) -> LedgerResult[None]:
        """Set the default voting period within the configured bounds. Owner only."""
        with self._lock:
            error = self._require_owner(caller)
            if error is not None:
                return self._refuse_with(error)
            if not _is_number(period) or not self._config.is_valid_duration(period):
                return self._refuse(
                    GovernanceErrorCode.INVALID_PARAMETER,
                    f"Voting period {period!r} outside "
                    f"[{self._config.min_voting_period_seconds}, "
                    f"{self._config.max_voting_period_seconds}]",
                )

            previous = self._config.voting_period_seconds
            self._config = self._config.with_voting_period(period)
            self._emit(
                GovernanceEventType.VOTING_PERIOD_UPDATED,
                previous_voting_period_seconds=previous,
                voting_period_seconds=period,
            )
            self._log.info(f"voting period {previous}s -> {period}s")
            return LedgerResult.ok()

    # Queries

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> GovernanceConfig:
        with self._lock:
            return self._config

    @property
    def owner(self) -> MemberId:
        with self._lock:
            return self._owner

    @property
    def member_count(self) -> int:
        with self._lock:
            return self._member_count

    @property
    def quorum_percent(self) -> QuorumPercent:
        with self._lock:
            return self._config.quorum_percent

    @property
    def voting_period_seconds(self) -> DurationSeconds:
        with self._lock:
            return self._config.voting_period_seconds

    @property
    def events(self) -> GovernanceEventBus:
        return self._events

    @property
    def clock(self) -> Clock:
        return self._clock

    def is_member(self, identity: MemberId) -> bool:
        with self._lock:
            return identity in self._members

    def members(self) -> list[MemberId]:
        with self._lock:
            return sorted(self._members)

    def delegate_of(self, member: MemberId) -> MemberId | None:
        with self._lock:
            return self._delegations.get(member)

    def delegators_of(self, delegate: MemberId) -> list[MemberId]:
        with self._lock:
            return sorted(d for d, target in self._delegations.items() if target == delegate)

    def get_voting_power(self, identity: MemberId) -> VotingPower:
        """Every member weighs exactly one vote."""
        with self._lock:
            return 1 if identity in self._members else 0

    def get_proposal(self, proposal_id: ProposalId) -> LedgerResult[ProposalView]:
        with self._lock:
            record = self._proposals.get(proposal_id)
            if record is None:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            return LedgerResult.ok(ProposalView.from_record(record, self._now()))

    def has_voted(
        self, proposal_id: ProposalId, member: MemberId
    ) -> LedgerResult[bool]:
        with self._lock:
            if proposal_id not in self._proposals:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            return LedgerResult.ok(member in self._votes[proposal_id])

    def get_vote(
        self, proposal_id: ProposalId, member: MemberId
    ) -> LedgerResult[VoteType | None]:
        """The choice recorded in ``member``'s slot, or None."""
        with self._lock:
            if proposal_id not in self._proposals:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            ballot = self._votes[proposal_id].get(member)
            return LedgerResult.ok(ballot.choice if ballot else None)

    def get_proposal_votes(
        self, proposal_id: ProposalId
    ) -> LedgerResult[list[VoteRecord]]:
        with self._lock:
            if proposal_id not in self._proposals:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            return LedgerResult.ok(
                sorted(self._votes[proposal_id].values(), key=lambda v: v.cast_at)
            )

    def time_remaining(
        self, proposal_id: ProposalId
    ) -> LedgerResult[DurationSeconds]:
        with self._lock:
            record = self._proposals.get(proposal_id)
            if record is None:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            return LedgerResult.ok(record.time_remaining(self._now()))

    def calculate_voting_result(
        self, proposal_id: ProposalId
    ) -> LedgerResult[VotingTally]:
        """Current quorum/majority arithmetic without finalizing."""
        with self._lock:
            record = self._proposals.get(proposal_id)
            if record is None:
                return self._refuse(
                    GovernanceErrorCode.PROPOSAL_NOT_FOUND,
                    f"Proposal {proposal_id} not found",
                )
            return LedgerResult.ok(self._tally(record))

    def list_proposals(
        self, status: ProposalStatus | None = None
    ) -> list[ProposalId]:
        with self._lock:
            return sorted(
                proposal_id
                for proposal_id, record in self._proposals.items()
                if status is None or record.status == status
            )

    def get_proposal_stats(self) -> ProposalStats:
        with self._lock:
            statuses = [record.status for record in self._proposals.values()]
            return ProposalStats(
                total=len(statuses),
                pending=statuses.count(ProposalStatus.PENDING),
                accepted=statuses.count(ProposalStatus.ACCEPTED),
                rejected=statuses.count(ProposalStatus.REJECTED),
                cancelled=statuses.count(ProposalStatus.CANCELLED),
            )

    def get_ledger_statistics(self) -> dict[str, Any]:
        """Summary of the ledger for dashboards and the CLI."""
        with self._lock:
            return {
                "name": self._config.name,
                "owner": self._owner,
                "member_count": self._member_count,
                "quorum_percent": self._config.quorum_percent,
                "voting_period_seconds": self._config.voting_period_seconds,
                "delegation_mode": self._config.delegation_mode.value,
                "active_delegations": len(self._delegations),
                "proposals": self.get_proposal_stats().to_dict(),
                "total_votes_cast": sum(len(v) for v in self._votes.values()),
                "next_proposal_id": self._next_proposal_id,
            }

    def validate_ledger_integrity(self) -> bool:
        """Check every structural invariant of the ledger."""
        with self._lock:
            if self._member_count != len(self._members) or self._member_count <= 0:
                return False
            if self._owner not in self._members:
                return False
            if set(self._votes) != set(self._proposals):
                return False

            for proposal_id, record in self._proposals.items():
                ballots = self._votes[proposal_id]
                if record.total_votes != len(ballots):
                    return False
                for_count = sum(1 for b in ballots.values() if b.choice == VoteType.FOR)
                if record.for_votes != for_count:
                    return False
                if record.for_votes + record.against_votes != record.total_votes:
                    return False
                if record.voting_deadline < record.created_at:
                    return False
                if proposal_id >= self._next_proposal_id:
                    return False

            for delegator, delegate in self._delegations.items():
                if delegator == delegate:
                    return False
                if delegator not in self._members or delegate not in self._members:
                    return False

            return True

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Convert the ledger to a JSON-compatible dictionary."""
        with self._lock:
            return {
                "config": self._config.to_dict(),
                "owner": self._owner,
                "members": sorted(self._members),
                "member_count": self._member_count,
                "next_proposal_id": self._next_proposal_id,
                "proposals": [
                    self._proposals[pid].to_dict() for pid in sorted(self._proposals)
                ],
                "votes": {
                    str(pid): [ballot.to_dict() for ballot in ballots.values()]
                    for pid, ballots in sorted(self._votes.items())
                },
                "delegations": dict(self._delegations),
                "events": [event.to_dict() for event in self._events.history()],
                "next_event_sequence": self._events.next_sequence,
            }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], clock: Clock | None = None
    ) -> GovernanceLedger:
        """Rebuild a ledger from ``to_dict`` output."""
        config = GovernanceConfig.from_dict(data["config"])
        ledger = cls(owner=data["owner"], config=config, clock=clock)

        members = set(data["members"])
        if data["owner"] not in members:
            raise ValueError("Owner must be a member")
        if int(data.get("member_count", len(members))) != len(members):
            raise ValueError("Member count does not match member list")

        proposals = {
            record.proposal_id: record
            for record in (ProposalRecord.from_dict(p) for p in data["proposals"])
        }
        votes: dict[ProposalId, dict[MemberId, VoteRecord]] = {
            pid: {} for pid in proposals
        }
        for pid_text, ballots in data.get("votes", {}).items():
            pid = int(pid_text)
            if pid not in proposals:
                raise ValueError(f"Votes reference unknown proposal {pid}")
            for ballot in (VoteRecord.from_dict(b) for b in ballots):
                votes[pid][ballot.voter] = ballot

        with ledger._lock:
            ledger._members = members
            ledger._member_count = len(members)
            ledger._proposals = proposals
            ledger._votes = votes
            ledger._delegations = dict(data.get("delegations", {}))
            ledger._next_proposal_id = int(
                data.get("next_proposal_id", max(proposals, default=0) + 1)
            )
            ledger._events.restore(
                [GovernanceEvent.from_dict(e) for e in data.get("events", [])],
                next_sequence=data.get("next_event_sequence"),
            )

        if not ledger.validate_ledger_integrity():
            raise GovernanceInvariantError("Loaded ledger state is inconsistent")

        ledger._log.info(
            f"Loaded GovernanceLedger with {len(members)} members "
            f"and {len(proposals)} proposals"
        )
        return ledger

    def __str__(self) -> str:
        return (
            f"GovernanceLedger(name='{self._config.name}', owner={self._owner}, "
            f"members={self._member_count}, proposals={len(self._proposals)})"
        )


# Hypothesis strategies for property-based testing


def member_id_strategy() -> st.SearchStrategy[MemberId]:
    """Generate short, printable member identities."""
    return st.text(
        alphabet=st.characters(min_codepoint=97, max_codepoint=122),
        min_size=1,
        max_size=12,
    )


def governance_config_strategy() -> st.SearchStrategy[GovernanceConfig]:
    """Generate valid GovernanceConfig instances for testing."""

    @st.composite
    def generate_valid_config(draw):
        min_period = draw(st.integers(min_value=60, max_value=int(DAY_SECONDS)))
        max_period = draw(
            st.integers(min_value=min_period, max_value=int(60 * DAY_SECONDS))
        )
        period = draw(st.integers(min_value=min_period, max_value=max_period))
        return GovernanceConfig(
            name=draw(member_id_strategy()),
            quorum_percent=draw(st.integers(min_value=1, max_value=100)),
            voting_period_seconds=period,
            min_voting_period_seconds=min_period,
            max_voting_period_seconds=max_period,
            amend_authority=draw(st.sampled_from(AmendAuthority)),
            delegation_mode=draw(st.sampled_from(DelegationMode)),
            quorum_failure_policy=draw(st.sampled_from(QuorumFailurePolicy)),
        )

    return generate_valid_config()


def ledger_strategy() -> st.SearchStrategy[GovernanceLedger]:
    """Generate ledgers with an owner and a handful of extra members."""

    @st.composite
    def generate_ledger(draw):
        owner = draw(member_id_strategy())
        ledger = GovernanceLedger(
            owner=owner,
            config=draw(governance_config_strategy()),
            clock=ManualClock(),
        )
        extra = draw(st.lists(member_id_strategy(), max_size=8, unique=True))
        for identity in extra:
            ledger.add_member(owner, identity)
        return ledger

    return generate_ledger()
