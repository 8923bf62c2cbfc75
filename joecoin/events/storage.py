"""JoeCoin – ledger event storage.

This module persists :class:`LedgerEvent` records into the
``ledger_events`` table in the runtime database and reads them back for
audit tooling. The table is created by migration ``0001``.
"""

from __future__ import annotations

from typing import List, Optional

from psycopg2.extras import Json

from joecoin.core.database import DatabaseManager
from joecoin.core.logging import get_logger
from joecoin.events.types import EventKind, LedgerEvent


logger = get_logger(__name__)


class EventStorage:
    """Persistence helper for the ``ledger_events`` table."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager = db_manager

    def save_event(self, event: LedgerEvent) -> None:
        """Insert a single event row."""

        sql = """
            INSERT INTO ledger_events (
                event_id,
                sequence,
                kind,
                actor,
                event_ts,
                payload_json,
                created_at
            ) VALUES (%s, %s, %s, %s, %s, %s, NOW())
        """

        data = event.to_dict()
        with self.db_manager.get_runtime_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    sql,
                    (
                        event.event_id,
                        event.sequence,
                        event.kind.value,
                        event.actor,
                        event.timestamp,
                        Json(data["payload"]),
                    ),
                )
                conn.commit()
            finally:
                cursor.close()

    def list_events(
        self,
        kind: Optional[EventKind] = None,
        limit: int = 100,
    ) -> List[LedgerEvent]:
        """Return the most recent events, oldest first."""

        sql = """
            SELECT event_id, sequence, kind, actor, event_ts, payload_json
            FROM ledger_events
            WHERE (%s IS NULL OR kind = %s)
            ORDER BY sequence DESC
            LIMIT %s
        """

        kind_value = kind.value if kind is not None else None
        with self.db_manager.get_runtime_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, (kind_value, kind_value, limit))
                rows = cursor.fetchall()
            finally:
                cursor.close()

        events = [
            LedgerEvent(
                event_id=event_id,
                sequence=sequence,
                kind=EventKind(kind_str),
                actor=actor,
                timestamp=event_ts,
                payload=payload or {},
            )
            for event_id, sequence, kind_str, actor, event_ts, payload in rows
        ]
        events.reverse()
        return events
