"""Tests for JSON snapshot persistence."""

import json

import pytest

from govledger.core.clock import ManualClock
from govledger.core.state_store import (
    SNAPSHOT_FORMAT_VERSION,
    StateStoreError,
    load_ledger,
    save_ledger,
)
from govledger.datastructures.governance_ledger import GovernanceLedger
from govledger.datastructures.governance_types import VoteType


class TestStateStore:
    def test_save_and_load(self, ledger: GovernanceLedger, clock: ManualClock, tmp_path):
        proposal_id = ledger.create_proposal("bob", "Raise dues").unwrap()
        ledger.cast_vote("carol", proposal_id, VoteType.AGAINST).unwrap()

        path = save_ledger(ledger, tmp_path / "state" / "ledger.json", use_fsync=False)
        assert path.exists()
        assert not path.with_suffix(".json.tmp").exists()

        loaded = load_ledger(path, clock=clock)
        assert loaded.to_dict() == ledger.to_dict()
        assert loaded.name == "test-org"
        assert loaded.get_vote(proposal_id, "carol").unwrap() == VoteType.AGAINST

    def test_snapshot_layout(self, ledger: GovernanceLedger, tmp_path):
        path = save_ledger(ledger, tmp_path / "ledger.json")
        snapshot = json.loads(path.read_text())
        assert snapshot["format_version"] == SNAPSHOT_FORMAT_VERSION
        assert snapshot["ledger"]["owner"] == "alice"
        assert snapshot["ledger"]["members"] == ["alice", "bob", "carol"]

    def test_overwrite_replaces_previous_snapshot(self, ledger: GovernanceLedger, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(ledger, path)
        ledger.add_member("alice", "dave").unwrap()
        save_ledger(ledger, path)
        assert load_ledger(path).member_count == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(StateStoreError, match="No ledger state"):
            load_ledger(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(StateStoreError, match="not valid JSON"):
            load_ledger(path)

    def test_unsupported_version(self, ledger: GovernanceLedger, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"format_version": 99, "ledger": ledger.to_dict()}))
        with pytest.raises(StateStoreError, match="Unsupported ledger state format"):
            load_ledger(path)

    def test_malformed_ledger(self, ledger: GovernanceLedger, tmp_path):
        data = ledger.to_dict()
        del data["owner"]
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"format_version": SNAPSHOT_FORMAT_VERSION, "ledger": data}))
        with pytest.raises(StateStoreError, match="malformed"):
            load_ledger(path)
