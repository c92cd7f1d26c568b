from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.logging import configure_logging
from .datastructures.governance_types import (
    DAY_SECONDS,
    HOUR_SECONDS,
    AmendAuthority,
    DelegationMode,
    GovernanceConfig,
    QuorumFailurePolicy,
)


class GovernanceSettings(BaseSettings):
    """govledger CLI and ledger default settings."""

    model_config = SettingsConfigDict(
        env_prefix="GOVLEDGER_", env_file=".env", extra="ignore"
    )

    log_level: str = Field("WARNING", description="Log level for the CLI.")
    debug_scopes: tuple[str, ...] = Field(
        (),
        description="Modules that log at DEBUG regardless of log_level "
        "(e.g., datastructures.governance_ledger).",
    )
    state_file: Path = Field(
        Path("govledger.json"),
        description="JSON file holding the ledger snapshot used by the CLI.",
    )

    quorum_percent: int = Field(
        50, ge=1, le=100, description="Default quorum percentage for new ledgers."
    )
    voting_period_seconds: float = Field(
        3 * DAY_SECONDS, gt=0, description="Default voting period for new proposals."
    )
    min_voting_period_seconds: float = Field(
        HOUR_SECONDS, gt=0, description="Shortest allowed voting period."
    )
    max_voting_period_seconds: float = Field(
        30 * DAY_SECONDS, gt=0, description="Longest allowed voting period."
    )
    amend_authority: AmendAuthority = Field(
        AmendAuthority.BOTH, description="Who may amend a pending proposal."
    )
    delegation_mode: DelegationMode = Field(
        DelegationMode.REDIRECT,
        description="How delegation changes the slot a vote is recorded in.",
    )
    quorum_failure_policy: QuorumFailurePolicy = Field(
        QuorumFailurePolicy.REJECT,
        description="Whether finalizing without quorum rejects or refuses.",
    )
    event_history_size: int = Field(
        1000, gt=0, description="Number of governance events kept in history."
    )

    def to_governance_config(self, name: str = "governance") -> GovernanceConfig:
        """Build the ledger configuration for a new ledger called ``name``."""
        return GovernanceConfig(
            name=name,
            quorum_percent=self.quorum_percent,
            voting_period_seconds=self.voting_period_seconds,
            min_voting_period_seconds=self.min_voting_period_seconds,
            max_voting_period_seconds=self.max_voting_period_seconds,
            amend_authority=self.amend_authority,
            delegation_mode=self.delegation_mode,
            quorum_failure_policy=self.quorum_failure_policy,
            event_history_size=self.event_history_size,
        )

    def apply_logging(self, *, verbose: bool = False) -> int:
        """Install the govledger log sink; ``verbose`` forces DEBUG everywhere."""
        return configure_logging(
            "DEBUG" if verbose else self.log_level,
            debug_scopes=self.debug_scopes,
        )
