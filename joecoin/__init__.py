"""JoeCoin – top-level package exports.

This module re-exports the main stability core components for
convenience.
"""

from joecoin.core.errors import JoeCoinError
from joecoin.oracle.engine import PriceOracle
from joecoin.risk.engine import RiskEngine
from joecoin.stability.gate import StabilizationGate
from joecoin.ledger.token import TokenLedger
from joecoin.vault.engine import Vault
from joecoin.governance.hooks import GovernanceHooks
from joecoin.system import StabilizationSystem, build_system

__all__ = [
    "JoeCoinError",
    "PriceOracle",
    "RiskEngine",
    "StabilizationGate",
    "TokenLedger",
    "Vault",
    "GovernanceHooks",
    "StabilizationSystem",
    "build_system",
]
