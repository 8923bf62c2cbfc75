"""
JoeCoin: Core Type Definitions

This module defines common type aliases shared across the core. It
exists to centralise frequently used type definitions and avoid circular
imports between higher-level modules.

Key responsibilities:
- Provide canonical aliases for accounts, asset identifiers and payloads

External dependencies:
- typing: Standard library typing primitives only

Database tables accessed:
- None (pure type definitions)

Thread safety: Thread-safe (no mutable global state)

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

from typing import Any, Dict, TypeAlias

# ============================================================================
# Type Aliases
# ============================================================================

# Account / principal identifier (an address string)
Account: TypeAlias = str

# Asset identifier used by the oracle and the vault allow-list
AssetId: TypeAlias = str

# Structured payload attached to ledger events
Payload: TypeAlias = Dict[str, Any]
