"""
Error taxonomy and result containers for governance operations.

Expected failures (a non-member voting, a proposal past its deadline, ...)
are reported as values through ``LedgerResult``. Exceptions are reserved for
callers that opt in via ``unwrap()`` and for genuine invariant violations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class GovernanceErrorCode(StrEnum):
    """Reasons a governance operation can be refused."""

    UNAUTHORIZED = "unauthorized"
    NOT_MEMBER = "not_member"
    ALREADY_MEMBER = "already_member"
    INVALID_IDENTITY = "invalid_identity"
    PROPOSAL_NOT_FOUND = "proposal_not_found"
    PROPOSAL_NOT_PENDING = "proposal_not_pending"
    VOTING_CLOSED = "voting_closed"
    VOTING_STILL_OPEN = "voting_still_open"
    INVALID_VOTE_TYPE = "invalid_vote_type"
    ALREADY_VOTED = "already_voted"
    NO_VOTE_TO_WITHDRAW = "no_vote_to_withdraw"
    INVALID_DURATION = "invalid_duration"
    DEADLINE_NOT_LATER = "deadline_not_later"
    EXCEEDS_MAX_DURATION = "exceeds_max_duration"
    INVALID_PARAMETER = "invalid_parameter"
    INVALID_DELEGATE = "invalid_delegate"
    SELF_DELEGATION = "self_delegation"
    QUORUM_NOT_MET = "quorum_not_met"
    CANNOT_REMOVE_OWNER = "cannot_remove_owner"


@dataclass(frozen=True, slots=True)
class GovernanceError:
    """A refused operation: machine-readable code plus human message."""

    code: GovernanceErrorCode
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return f"{self.code.value}: {self.message}"
        return self.code.value


class GovernanceException(Exception):
    """Raised by ``LedgerResult.unwrap()`` for a failed result."""

    def __init__(self, error: GovernanceError):
        super().__init__(str(error))
        self.error = error

    @property
    def code(self) -> GovernanceErrorCode:
        return self.error.code


class GovernanceInvariantError(RuntimeError):
    """Ledger state violated one of its invariants. Always a bug."""


@dataclass(frozen=True, slots=True)
class LedgerResult[T]:
    """Outcome of a ledger operation."""

    success: bool
    value: T | None = None
    error: GovernanceError | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("Successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("Failed result must carry an error")

    @classmethod
    def ok(cls, value: T | None = None) -> LedgerResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, code: GovernanceErrorCode, message: str = "") -> LedgerResult[T]:
        return cls(success=False, error=GovernanceError(code=code, message=message))

    @property
    def error_code(self) -> GovernanceErrorCode | None:
        return self.error.code if self.error else None

    def unwrap(self) -> T | None:
        """Return the value or raise ``GovernanceException``."""
        if self.error is not None:
            raise GovernanceException(self.error)
        return self.value

    def __bool__(self) -> bool:
        return self.success
