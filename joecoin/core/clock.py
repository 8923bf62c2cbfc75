"""
JoeCoin: Time Sources

This module defines the clock abstraction used for every cooldown and
staleness comparison in the core. The core never sleeps or schedules:
waiting is always expressed as a comparison of ``now()`` against a
stored timestamp.

Key responsibilities:
- Define the :class:`Clock` protocol (integer seconds)
- Provide a wall-clock implementation for live use
- Provide a manually driven clock for tests and scenario runs

External dependencies:
- time: Standard library wall clock

Database tables accessed:
- None

Thread safety: :class:`SystemClock` is thread-safe. :class:`ManualClock`
is not; it is meant for single-threaded tests and simulations.

Author: JoeCoin Team
Created: 2026-10-19
Last Modified: 2026-10-19
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

import time
from typing import Protocol

from joecoin.core.logging import get_logger

# ============================================================================
# Module Setup
# ============================================================================

logger = get_logger(__name__)


class Clock(Protocol):
    """Monotonic source of the current time in whole seconds."""

    def now(self) -> int:  # pragma: no cover - interface
        """Return the current timestamp in seconds."""


class SystemClock:
    """Clock backed by the host wall clock (UNIX seconds)."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to.

    Mirrors the ``evm_increaseTime`` style of driving time in ledger
    tests: set a start, then :meth:`advance` between calls.
    """

    def __init__(self, start: int = 1_700_000_000) -> None:
        if start < 0:
            raise ValueError("start must be >= 0")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward by ``seconds`` and return the new time."""

        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self._now += seconds
        logger.debug("ManualClock advanced by %d to %d", seconds, self._now)
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to ``timestamp``; it must not be earlier than the current time."""

        if timestamp < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = timestamp
