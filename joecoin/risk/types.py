"""JoeCoin – Risk engine types.

In-memory representations of market signal snapshots, derived
deviation factors and the engine's lifecycle phase.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from joecoin.core.fixed_point import FixedPoint


SIGNAL_NAMES: Tuple[str, ...] = ("sentiment", "volatility", "obi")


class RiskPhase(str, Enum):
    """Lifecycle of the risk engine.

    ``FACTORS_UPDATED`` cycles back to ``CURRENT_SET`` whenever a new
    current-value window is recorded.
    """

    UNINITIALIZED = "UNINITIALIZED"
    BASELINE_SET = "BASELINE_SET"
    CURRENT_SET = "CURRENT_SET"
    FACTORS_UPDATED = "FACTORS_UPDATED"


@dataclass(frozen=True)
class MarketSignals:
    """Snapshot of the three market signals (fixed point).

    Attributes:
        sentiment: Market sentiment indicator.
        volatility: Market volatility.
        obi: Order-book imbalance.
    """

    sentiment: FixedPoint = 0
    volatility: FixedPoint = 0
    obi: FixedPoint = 0

    def as_dict(self) -> Dict[str, FixedPoint]:
        return {name: getattr(self, name) for name in SIGNAL_NAMES}


@dataclass(frozen=True)
class RiskFactors:
    """Per-signal deviation ratios ``|current - baseline| / baseline``."""

    sentiment: FixedPoint = 0
    volatility: FixedPoint = 0
    obi: FixedPoint = 0

    def as_dict(self) -> Dict[str, FixedPoint]:
        return {name: getattr(self, name) for name in SIGNAL_NAMES}


@dataclass(frozen=True)
class RiskSnapshot:
    """Read-only view of the engine for monitoring and logging."""

    phase: RiskPhase
    baseline: MarketSignals
    current: MarketSignals
    factors: RiskFactors
    risk_score: FixedPoint
    factors_updated_at: Optional[int]
    current_updated_at: Optional[int]
