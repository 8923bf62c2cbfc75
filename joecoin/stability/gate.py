"""JoeCoin – Stabilization gate.

The gate holds no mutable state of its own. It combines two signals
that must both be calm before issuance is allowed:

- the RBS risk score, which captures slower-moving sentiment,
  volatility and liquidity stress, must be strictly below the threshold;
- the peg asset price must deviate from the peg by at most W0, which
  captures an immediate price dislocation.

Either condition alone is insufficient: a calm risk score during a
sudden price shock, or a stressed score at a perfect price, both block
minting. The cushion C0 is exposed read-only for band consistency
checks and is not part of the decision.
"""

from __future__ import annotations

from joecoin.core import fixed_point as fp
from joecoin.core.errors import StabilizationBlocked
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.types import AssetId
from joecoin.oracle.engine import PriceOracle
from joecoin.risk.engine import RiskEngine
from joecoin.stability.types import GateDecision, GateReason


logger = get_logger(__name__)


class StabilizationGate:
    """Mint/no-mint decision over the risk engine and the oracle.

    Args:
        risk_engine: Source of the risk score and the W0/C0 bands.
        oracle: Source of the peg asset price.
        peg_asset: Asset identifier of the stabilized token.
        peg: Target price in fixed point.
        risk_threshold: Risk score at or above which minting is blocked.
    """

    def __init__(
        self,
        risk_engine: RiskEngine,
        oracle: PriceOracle,
        peg_asset: AssetId,
        *,
        peg: FixedPoint = fp.SCALE,
        risk_threshold: FixedPoint = fp.SCALE // 2,
    ) -> None:
        if peg <= 0:
            raise ValueError("peg must be > 0")
        if not 0 < risk_threshold <= fp.SCALE:
            raise ValueError("risk_threshold must be in (0, SCALE]")
        self._risk_engine = risk_engine
        self._oracle = oracle
        self._peg_asset = peg_asset
        self._peg = peg
        self._risk_threshold = risk_threshold

    @property
    def peg_asset(self) -> AssetId:
        return self._peg_asset

    @property
    def peg(self) -> FixedPoint:
        return self._peg

    @property
    def risk_threshold(self) -> FixedPoint:
        return self._risk_threshold

    @property
    def wall(self) -> FixedPoint:
        return self._risk_engine.parameters.w0

    @property
    def cushion(self) -> FixedPoint:
        return self._risk_engine.parameters.c0

    def bands_consistent(self) -> bool:
        """Return True when the cushion lies inside the wall."""

        return self.cushion <= self.wall

    def evaluate(self) -> GateDecision:
        """Evaluate both conditions and report every failing one."""

        score = self._risk_engine.calculate_risk_score()
        price = self._oracle.current_price(self._peg_asset)
        deviation = self._oracle.deviation_from_peg(self._peg_asset, self._peg)
        wall = self.wall

        reasons = []
        if score >= self._risk_threshold:
            reasons.append(GateReason.RISK_SCORE_ABOVE_THRESHOLD)
        if deviation > wall:
            reasons.append(GateReason.PRICE_OUTSIDE_WALL)

        return GateDecision(
            allowed=not reasons,
            risk_score=score,
            risk_threshold=self._risk_threshold,
            price=price,
            peg=self._peg,
            deviation=deviation,
            wall=wall,
            reasons=tuple(reasons),
        )

    def can_mint(self) -> bool:
        return self.evaluate().allowed

    def require_can_mint(self) -> GateDecision:
        """Return the decision, raising :class:`StabilizationBlocked` if closed."""

        decision = self.evaluate()
        if not decision.allowed:
            logger.warning(
                "StabilizationGate blocked mint: score=%s threshold=%s deviation=%s wall=%s reasons=%s",
                fp.format_fixed(decision.risk_score),
                fp.format_fixed(decision.risk_threshold),
                fp.format_fixed(decision.deviation),
                fp.format_fixed(decision.wall),
                [r.value for r in decision.reasons],
            )
            raise StabilizationBlocked([r.value for r in decision.reasons])
        return decision
