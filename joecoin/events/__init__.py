"""JoeCoin – ledger event package.

Auditable records of every accepted state mutation, an in-process log
with subscribers, and PostgreSQL persistence.
"""

from joecoin.events.types import EventKind, LedgerEvent
from joecoin.events.log import EventLog, EventSink

__all__ = [
    "EventKind",
    "LedgerEvent",
    "EventLog",
    "EventSink",
]
