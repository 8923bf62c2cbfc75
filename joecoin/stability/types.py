"""JoeCoin – Stabilization gate types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from joecoin.core.fixed_point import FixedPoint


class GateReason(str, Enum):
    """Why the gate refused issuance.

    - RISK_SCORE_ABOVE_THRESHOLD: slow-moving sentiment/volatility/
      liquidity stress.
    - PRICE_OUTSIDE_WALL: immediate price dislocation beyond W0.
    """

    RISK_SCORE_ABOVE_THRESHOLD = "RISK_SCORE_ABOVE_THRESHOLD"
    PRICE_OUTSIDE_WALL = "PRICE_OUTSIDE_WALL"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of one gate evaluation.

    Attributes:
        allowed: True when minting is permitted.
        risk_score: Risk score used for the decision.
        risk_threshold: Score at or above which minting is blocked.
        price: Oracle price of the stabilized token.
        peg: Target price.
        deviation: ``|price - peg| / peg``.
        wall: W0 in effect.
        reasons: Empty when allowed, otherwise every failed condition.
    """

    allowed: bool
    risk_score: FixedPoint
    risk_threshold: FixedPoint
    price: FixedPoint
    peg: FixedPoint
    deviation: FixedPoint
    wall: FixedPoint
    reasons: Tuple[GateReason, ...] = ()
