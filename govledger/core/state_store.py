"""
JSON snapshot persistence for a governance ledger.

Snapshots are written to a temporary file next to the target and then
renamed over it, so a reader never observes a half-written file. This is a
convenience for the CLI, not a durability guarantee.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from ..datastructures.governance_errors import GovernanceInvariantError
from ..datastructures.governance_ledger import GovernanceLedger
from .clock import Clock
from .logging import ledger_logger

SNAPSHOT_FORMAT_VERSION = 1


class StateStoreError(Exception):
    """A snapshot file is missing, unreadable or malformed."""


def _atomic_write_json(file_path: Path, data: Any, use_fsync: bool = True) -> None:
    """Atomically write JSON data to file."""
    temp_file = file_path.with_suffix(file_path.suffix + ".tmp")

    with open(temp_file, "w") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        if use_fsync:
            f.flush()
            os.fsync(f.fileno())

    temp_file.replace(file_path)


def save_ledger(
    ledger: GovernanceLedger, path: str | Path, use_fsync: bool = True
) -> Path:
    """Write a snapshot of ``ledger`` to ``path`` and return the path."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    snapshot = {
        "format_version": SNAPSHOT_FORMAT_VERSION,
        "ledger": ledger.to_dict(),
    }
    _atomic_write_json(file_path, snapshot, use_fsync=use_fsync)

    ledger_logger(ledger.name).debug(f"Saved snapshot to {file_path}")
    return file_path


def load_ledger(path: str | Path, clock: Clock | None = None) -> GovernanceLedger:
    """Rebuild a ledger from a snapshot written by ``save_ledger``."""
    file_path = Path(path)
    if not file_path.exists():
        raise StateStoreError(f"No ledger state at {file_path}")

    try:
        with open(file_path) as f:
            snapshot = json.load(f)
    except json.JSONDecodeError as e:
        raise StateStoreError(f"Ledger state at {file_path} is not valid JSON: {e}") from e

    if not isinstance(snapshot, dict):
        raise StateStoreError(f"Ledger state at {file_path} is not a JSON object")

    version = snapshot.get("format_version")
    if version != SNAPSHOT_FORMAT_VERSION:
        raise StateStoreError(
            f"Unsupported ledger state format {version!r} in {file_path}"
        )

    try:
        ledger = GovernanceLedger.from_dict(snapshot["ledger"], clock=clock)
    except (KeyError, TypeError, ValueError, GovernanceInvariantError) as e:
        raise StateStoreError(f"Ledger state at {file_path} is malformed: {e}") from e

    ledger_logger(ledger.name).debug(f"Loaded snapshot from {file_path}")
    return ledger
