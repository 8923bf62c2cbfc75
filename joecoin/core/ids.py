"""
JoeCoin: ID Generation Utilities

This module contains helper functions for generating unique identifiers
used throughout the core. Centralising ID generation keeps event and
scenario identifiers consistent.

Key responsibilities:
- Generate UUID-based identifiers
- Provide event IDs for the ledger event log
- Provide run IDs for scenario simulations

External dependencies:
- uuid: Standard library UUID generation

Database tables accessed:
- None (pure utility functions)

Thread safety: Thread-safe (stateless functions)

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

import uuid
from typing import Optional

# ============================================================================
# Public API
# ============================================================================


def generate_uuid() -> str:
    """Generate a random UUIDv4 string.

    Returns:
        A UUID string in standard 8-4-4-4-12 hexadecimal format.
    """

    return str(uuid.uuid4())


def generate_event_id() -> str:
    """Generate a unique identifier for a ledger event.

    Returns:
        A UUIDv4 string suitable for use as the primary key of
        ``ledger_events``.
    """

    return generate_uuid()


def generate_run_id(prefix: Optional[str] = None) -> str:
    """Generate a unique run ID for scenario simulations.

    Args:
        prefix: Optional prefix to prepend to the UUID (e.g. "scenario").
            If provided, the returned ID will be of the form
            ``prefix_uuid``.

    Returns:
        A unique run identifier string.
    """

    base_id = generate_uuid()
    if prefix:
        return f"{prefix}_{base_id}"
    return base_id
