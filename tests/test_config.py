"""Tests for environment-driven settings."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from govledger.config import GovernanceSettings
from govledger.datastructures.governance_types import (
    DAY_SECONDS,
    DelegationMode,
    GovernanceConfig,
    QuorumFailurePolicy,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real environment variables and .env files out of the settings."""
    for name in list(os.environ):
        if name.startswith("GOVLEDGER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


class TestGovernanceSettings:
    def test_defaults_match_ledger_defaults(self):
        settings = GovernanceSettings()
        assert settings.state_file == Path("govledger.json")
        config = settings.to_governance_config()
        assert config == GovernanceConfig()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_QUORUM_PERCENT", "66")
        monkeypatch.setenv("GOVLEDGER_VOTING_PERIOD_SECONDS", str(DAY_SECONDS))
        monkeypatch.setenv("GOVLEDGER_DELEGATION_MODE", "proxy")
        monkeypatch.setenv("GOVLEDGER_QUORUM_FAILURE_POLICY", "revert")
        monkeypatch.setenv("GOVLEDGER_STATE_FILE", "/tmp/org.json")

        settings = GovernanceSettings()
        config = settings.to_governance_config("club")
        assert config.name == "club"
        assert config.quorum_percent == 66
        assert config.voting_period_seconds == DAY_SECONDS
        assert config.delegation_mode == DelegationMode.PROXY
        assert config.quorum_failure_policy == QuorumFailurePolicy.REVERT
        assert settings.state_file == Path("/tmp/org.json")

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("GOVLEDGER_LOG_LEVEL=DEBUG\n")
        assert GovernanceSettings().log_level == "DEBUG"

    def test_invalid_quorum_rejected(self, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_QUORUM_PERCENT", "0")
        with pytest.raises(ValidationError):
            GovernanceSettings()

    def test_inconsistent_periods_rejected_when_building_config(self):
        settings = GovernanceSettings(voting_period_seconds=60)
        with pytest.raises(ValueError, match="Voting period must lie within"):
            settings.to_governance_config()
