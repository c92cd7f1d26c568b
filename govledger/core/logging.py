"""
Loguru setup for govledger.

Every record carries the name of the ledger that produced it in
``extra["ledger"]``. Ledger code logs through :func:`ledger_logger`, which
binds that name once per ledger; records from elsewhere show ``-``.

A single sink serves both the base level and the debug scopes, so a scoped
DEBUG record and a WARNING from the same module come out in order.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, TextIO

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

PACKAGE_PREFIX = "govledger."
UNBOUND_LEDGER = "-"

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[ledger]: <16} | {name}:{line} - {message}"
)


def ledger_logger(ledger_name: str) -> Logger:
    """Logger whose records are tagged with ``ledger_name``."""
    return logger.bind(ledger=ledger_name)


def _qualify(scope: str) -> str:
    scope = scope.strip()
    if scope == "govledger" or scope.startswith(PACKAGE_PREFIX):
        return scope
    return PACKAGE_PREFIX + scope


class LedgerRecordFilter:
    """
    Admit records at or above ``level``, plus DEBUG records from modules
    under ``debug_scopes``. Fills in the ledger tag for unbound records.
    """

    def __init__(self, level: str, debug_scopes: Iterable[str] = ()):
        self.level_no = logger.level(level.upper()).no
        self.debug_scopes = tuple(
            _qualify(scope) for scope in debug_scopes if scope.strip()
        )

    def __call__(self, record: Mapping[str, Any]) -> bool:
        record["extra"].setdefault("ledger", UNBOUND_LEDGER)
        record_level = record["level"]
        if record_level.no >= self.level_no:
            return True
        if record_level.name != "DEBUG" or not self.debug_scopes:
            return False
        record_name = record["name"] or ""
        return record_name.startswith(self.debug_scopes)


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
    sink: TextIO | None = None,
) -> int:
    """
    Replace loguru's handlers with one govledger sink and return its id.

    ``debug_scopes`` names modules, with or without the ``govledger.``
    prefix, e.g. ``("datastructures.governance_ledger",)``.
    """
    logger.remove()
    record_filter = LedgerRecordFilter(level, debug_scopes)
    return logger.add(
        sink or sys.stderr,
        # The filter applies the real threshold
        level="DEBUG" if record_filter.debug_scopes else level.upper(),
        format=LOG_FORMAT,
        colorize=colorize,
        filter=record_filter,
    )
