"""
Governance Event Management

The ledger publishes one event per committed state change. Observers (audit
logs, UIs, metrics exporters) subscribe to the bus and receive events in the
order the ledger committed them.

Architecture:
- GovernanceEventBus: ordered dispatcher with bounded history
- GovernanceEvent: immutable record of a single state change
- GovernanceEventListener: callable accepted by the bus
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock

from loguru import logger

from ..datastructures.type_aliases import EventPayload, EventSequence, Timestamp


class GovernanceEventType(Enum):
    """Types of governance events."""

    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"
    PROPOSAL_CREATED = "proposal_created"
    VOTE_CAST = "vote_cast"
    VOTE_WITHDRAWN = "vote_withdrawn"
    PROPOSAL_AMENDED = "proposal_amended"
    VOTING_EXTENDED = "voting_extended"
    PROPOSAL_FINALIZED = "proposal_finalized"
    PROPOSAL_CANCELLED = "proposal_cancelled"
    QUORUM_ADJUSTED = "quorum_adjusted"
    VOTING_PERIOD_UPDATED = "voting_period_updated"
    VOTE_DELEGATED = "vote_delegated"
    DELEGATION_REVOKED = "delegation_revoked"


@dataclass(frozen=True, slots=True)
class GovernanceEvent:
    """Event data for a committed governance state change."""

    sequence: EventSequence
    event_type: GovernanceEventType
    timestamp: Timestamp
    payload: EventPayload = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "sequence": self.sequence,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "payload": dict(self.payload),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> GovernanceEvent:
        return cls(
            sequence=int(data["sequence"]),  # type: ignore[arg-type]
            event_type=GovernanceEventType(data["event_type"]),
            timestamp=float(data["timestamp"]),  # type: ignore[arg-type]
            payload=dict(data.get("payload") or {}),  # type: ignore[call-overload]
        )


type GovernanceEventListener = Callable[[GovernanceEvent], None]


class GovernanceEventBus:
    """Central, ordered event bus for governance state changes."""

    def __init__(self, max_history: int = 1000):
        if max_history <= 0:
            raise ValueError("Event history size must be positive")
        self._subscribers: list[GovernanceEventListener] = []
        self._event_history: deque[GovernanceEvent] = deque(maxlen=max_history)
        self._next_sequence: EventSequence = 1
        self._lock = RLock()

    @property
    def next_sequence(self) -> EventSequence:
        return self._next_sequence

    def subscribe(self, listener: GovernanceEventListener) -> None:
        """Subscribe a listener to governance events."""
        with self._lock:
            if listener not in self._subscribers:
                self._subscribers.append(listener)
        logger.debug(f"Listener {listener!r} subscribed to governance events")

    def unsubscribe(self, listener: GovernanceEventListener) -> None:
        """Unsubscribe a listener. Unknown listeners are ignored."""
        with self._lock:
            if listener in self._subscribers:
                self._subscribers.remove(listener)
        logger.debug(f"Listener {listener!r} unsubscribed from governance events")

    def emit(
        self,
        event_type: GovernanceEventType,
        timestamp: Timestamp,
        payload: EventPayload | None = None,
    ) -> GovernanceEvent:
        """Create the next event in sequence and publish it."""
        with self._lock:
            event = GovernanceEvent(
                sequence=self._next_sequence,
                event_type=event_type,
                timestamp=timestamp,
                payload=dict(payload or {}),
            )
            subscribers = self._record(event)
        self._deliver(event, subscribers)
        return event

    def publish(self, event: GovernanceEvent) -> None:
        """Record an event and deliver it to every subscriber."""
        with self._lock:
            subscribers = self._record(event)
        self._deliver(event, subscribers)

    def _record(self, event: GovernanceEvent) -> list[GovernanceEventListener]:
        # Caller holds self._lock
        self._event_history.append(event)
        if event.sequence >= self._next_sequence:
            self._next_sequence = event.sequence + 1
        return list(self._subscribers)

    def _deliver(
        self, event: GovernanceEvent, subscribers: list[GovernanceEventListener]
    ) -> None:
        # Called without the bus lock held
        logger.debug(
            f"Publishing governance event #{event.sequence} "
            f"{event.event_type.value} to {len(subscribers)} subscribers"
        )
        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.error(
                    f"Governance event subscriber {subscriber!r} failed "
                    f"on event #{event.sequence}: {e}"
                )

    def history(
        self, event_type: GovernanceEventType | None = None
    ) -> list[GovernanceEvent]:
        """Recent events, oldest first, optionally filtered by type."""
        with self._lock:
            if event_type is None:
                return list(self._event_history)
            return [e for e in self._event_history if e.event_type == event_type]

    def restore(
        self,
        events: list[GovernanceEvent],
        next_sequence: EventSequence | None = None,
    ) -> None:
        """Reload history without notifying subscribers."""
        with self._lock:
            self._event_history.clear()
            self._event_history.extend(events)
            highest = max((e.sequence for e in events), default=0)
            self._next_sequence = max(next_sequence or 1, highest + 1)

    def clear_history(self) -> None:
        with self._lock:
            self._event_history.clear()
