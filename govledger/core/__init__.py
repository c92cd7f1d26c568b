"""
govledger core

Clock sources, the governance event bus, logging setup and JSON snapshot
persistence shared by the ledger and the CLI.
"""

from .clock import Clock, ManualClock, SystemClock
from .events import (
    GovernanceEvent,
    GovernanceEventBus,
    GovernanceEventListener,
    GovernanceEventType,
)
from .logging import configure_logging, ledger_logger

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "GovernanceEvent",
    "GovernanceEventBus",
    "GovernanceEventListener",
    "GovernanceEventType",
    "configure_logging",
    "ledger_logger",
]
