"""JoeCoin – ledger event types.

Every accepted state mutation in the core produces one
:class:`LedgerEvent`. Events carry the acting account, the timestamp of
the clock at which the mutation was committed, and the affected amounts
(fixed-point integers) in ``payload``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from joecoin.core.types import Account, Payload


class EventKind(str, Enum):
    """Enumerated kinds of auditable state mutations."""

    PRICE_UPDATED = "PRICE_UPDATED"
    BASELINES_UPDATED = "BASELINES_UPDATED"
    CURRENT_VALUES_UPDATED = "CURRENT_VALUES_UPDATED"
    RISK_FACTORS_UPDATED = "RISK_FACTORS_UPDATED"
    RISK_PARAMETERS_UPDATED = "RISK_PARAMETERS_UPDATED"
    VAULT_CREATED = "VAULT_CREATED"
    VAULT_UPDATED = "VAULT_UPDATED"
    VAULT_REPAID = "VAULT_REPAID"
    VAULT_CLOSED = "VAULT_CLOSED"
    COLLATERAL_SUPPORT_CHANGED = "COLLATERAL_SUPPORT_CHANGED"
    TOKEN_MINTED = "TOKEN_MINTED"
    TOKEN_BURNED = "TOKEN_BURNED"
    TOKEN_TRANSFERRED = "TOKEN_TRANSFERRED"
    TOKEN_APPROVED = "TOKEN_APPROVED"
    STABILIZATION_TOGGLED = "STABILIZATION_TOGGLED"
    SYSTEM_PAUSED = "SYSTEM_PAUSED"
    SYSTEM_UNPAUSED = "SYSTEM_UNPAUSED"


@dataclass(frozen=True)
class LedgerEvent:
    """Immutable record of one accepted state mutation.

    Attributes:
        event_id: Unique identifier (UUIDv4).
        sequence: Position of the event in the log's total order.
        kind: Mutation kind.
        actor: Account that issued the call.
        timestamp: Clock time of the mutation, in seconds.
        payload: Operation-specific key fields and affected amounts.
    """

    event_id: str
    sequence: int
    kind: EventKind
    actor: Account
    timestamp: int
    payload: Payload = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation.

        Integer amounts are rendered as strings so that 256-bit values
        survive JSON consumers that parse numbers as doubles.
        """

        return {
            "event_id": self.event_id,
            "sequence": self.sequence,
            "kind": self.kind.value,
            "actor": self.actor,
            "timestamp": self.timestamp,
            "payload": {k: _jsonable(v) for k, v in self.payload.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
