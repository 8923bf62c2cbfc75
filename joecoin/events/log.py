"""JoeCoin – in-process ledger event log.

The :class:`EventLog` is the observable audit trail of the core. It is
append-only: components call :meth:`EventLog.emit` after a mutation has
been committed, and external watchers either read the log, subscribe to
it, or rely on an attached :class:`EventSink` (typically
:class:`joecoin.events.storage.EventStorage`) for persistence.

Sink and subscriber failures are logged and never undo the committed
ledger mutation.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol

from joecoin.core.ids import generate_event_id
from joecoin.core.logging import get_logger
from joecoin.core.types import Account, Payload
from joecoin.events.types import EventKind, LedgerEvent


logger = get_logger(__name__)

Subscriber = Callable[[LedgerEvent], None]


class EventSink(Protocol):
    """Persistence target for ledger events."""

    def save_event(self, event: LedgerEvent) -> None:  # pragma: no cover - interface
        ...


class EventLog:
    """Append-only, totally ordered list of :class:`LedgerEvent` records."""

    def __init__(self, sink: Optional[EventSink] = None) -> None:
        self._events: List[LedgerEvent] = []
        self._subscribers: List[Subscriber] = []
        self._sink = sink

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def emit(
        self,
        kind: EventKind,
        actor: Account,
        timestamp: int,
        payload: Optional[Payload] = None,
    ) -> LedgerEvent:
        """Append an event and notify the sink and subscribers."""

        event = LedgerEvent(
            event_id=generate_event_id(),
            sequence=len(self._events),
            kind=kind,
            actor=actor,
            timestamp=timestamp,
            payload=dict(payload or {}),
        )
        self._events.append(event)

        logger.debug(
            "EventLog.emit: seq=%d kind=%s actor=%s ts=%d",
            event.sequence,
            kind.value,
            actor,
            timestamp,
        )

        if self._sink is not None:
            try:
                self._sink.save_event(event)
            except Exception:  # pragma: no cover
                logger.exception("EventLog.emit: failed to persist event %s", event.event_id)

        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception("EventLog.emit: subscriber %r failed", subscriber)

        return event

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register ``subscriber`` and return a callable that removes it."""

        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def events(
        self,
        kind: Optional[EventKind] = None,
        actor: Optional[Account] = None,
        limit: Optional[int] = None,
    ) -> List[LedgerEvent]:
        """Return events in commit order, optionally filtered.

        ``limit`` keeps the most recent matching events.
        """

        selected = [
            e
            for e in self._events
            if (kind is None or e.kind is kind) and (actor is None or e.actor == actor)
        ]
        if limit is not None:
            if limit <= 0:
                return []
            selected = selected[-limit:]
        return selected

    def last(self, kind: Optional[EventKind] = None) -> Optional[LedgerEvent]:
        matches = self.events(kind=kind, limit=1)
        return matches[0] if matches else None

    def __len__(self) -> int:
        return len(self._events)
