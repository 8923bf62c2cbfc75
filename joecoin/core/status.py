"""JoeCoin – shared system status.

A single :class:`SystemStatus` instance is shared by the oracle, risk
engine, ledgers and vault. It carries the emergency pause flag read at
the top of every state-changing entry point, and the re-entrant lock
that serializes those entry points into one total order.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from joecoin.core.errors import SystemPaused


class SystemStatus:
    """Pause flag plus global serialization lock."""

    def __init__(self, paused: bool = False) -> None:
        self._paused = paused
        self._lock = threading.RLock()

    @property
    def paused(self) -> bool:
        return self._paused

    def set_paused(self, paused: bool) -> None:
        # Callers are responsible for the governance capability check.
        with self._lock:
            self._paused = paused

    def require_active(self, operation: str) -> None:
        """Raise :class:`SystemPaused` if the system is paused."""

        if self._paused:
            raise SystemPaused(operation)

    @contextmanager
    def serialized(self, operation: str | None = None) -> Iterator[None]:
        """Run a block under the global lock.

        If ``operation`` is given the pause flag is checked after the
        lock is acquired, so a concurrent pause cannot slip in between
        the check and the mutation.
        """

        with self._lock:
            if operation is not None:
                self.require_active(operation)
            yield
