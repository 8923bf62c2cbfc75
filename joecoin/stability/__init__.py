"""JoeCoin – Stabilization gate package.

The decision function consumed by the token ledger's mint path: the RBS
risk score must be under its threshold and the peg asset price must be
within the W0 wall.
"""

from joecoin.stability.types import GateDecision, GateReason
from joecoin.stability.gate import StabilizationGate

__all__ = ["GateDecision", "GateReason", "StabilizationGate"]
