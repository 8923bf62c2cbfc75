"""JoeCoin – Risk-Based Stabilization (RBS) package.

Market signal snapshots, governance-owned risk parameters with policy
bounds, and the engine that turns signal deviations into a risk score.
"""

from __future__ import annotations

from joecoin.risk.parameters import ParameterBounds, RiskParameters, validate_parameters
from joecoin.risk.types import MarketSignals, RiskFactors, RiskPhase, RiskSnapshot
from joecoin.risk.engine import (
    RiskEngine,
    compute_risk_factors,
    compute_risk_score,
    deviation_ratio,
)

__all__ = [
    "ParameterBounds",
    "RiskParameters",
    "validate_parameters",
    "MarketSignals",
    "RiskFactors",
    "RiskPhase",
    "RiskSnapshot",
    "RiskEngine",
    "compute_risk_factors",
    "compute_risk_score",
    "deviation_ratio",
]
