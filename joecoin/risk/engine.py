"""JoeCoin – Risk-Based Stabilization (RBS) engine.

The engine tracks a ``baseline`` and a ``current`` snapshot of three
market signals (sentiment, volatility, order-book imbalance) and turns
their relative deviations into a single risk score::

    d_x   = |current_x - baseline_x| / baseline_x
    score = clamp(alpha * d_sentiment + beta * d_volatility + gamma * d_obi, 0, 1)

Deviation ratios are computed and cached by :meth:`RiskEngine.update_risk_factors`.
:meth:`RiskEngine.calculate_risk_score` is a pure read of that cache
combined with the current weights; it never recomputes factors, so
callers check :meth:`RiskEngine.is_score_stale` when freshness matters.

Current values follow the same cooldown discipline as the price oracle:
a new window is accepted only after ``current_update_interval`` seconds.
"""

from __future__ import annotations

from typing import Optional

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock
from joecoin.core.errors import (
    CooldownActive,
    DivisionByZeroBaseline,
    InvalidAmount,
    ParameterOutOfRange,
)
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.risk.parameters import (
    PARAMETER_NAMES,
    ParameterBounds,
    RiskParameters,
    validate_parameters,
)
from joecoin.risk.types import (
    SIGNAL_NAMES,
    MarketSignals,
    RiskFactors,
    RiskPhase,
    RiskSnapshot,
)


logger = get_logger(__name__)


# ============================================================================
# Pure scoring functions
# ============================================================================


def deviation_ratio(current: FixedPoint, baseline: FixedPoint, signal: str = "signal") -> FixedPoint:
    """Return ``|current - baseline| / baseline`` in fixed point.

    The ratio rounds up, so any non-zero deviation yields a non-zero
    factor however small it is against the baseline. It saturates at the
    256-bit ceiling instead of overflowing; the score is clamped to
    ``SCALE`` long before that matters.

    Raises:
        DivisionByZeroBaseline: If ``baseline`` is zero.
    """

    if baseline == 0:
        raise DivisionByZeroBaseline(signal)
    ratio = -(-(fp.abs_diff(current, baseline) * fp.SCALE) // baseline)
    return min(ratio, fp.MAX_VALUE)


def compute_risk_factors(baseline: MarketSignals, current: MarketSignals) -> RiskFactors:
    """Compute all three deviation ratios, failing on any zero baseline."""

    return RiskFactors(
        **{
            name: deviation_ratio(getattr(current, name), getattr(baseline, name), name)
            for name in SIGNAL_NAMES
        }
    )


def compute_risk_score(factors: RiskFactors, params: RiskParameters) -> FixedPoint:
    """Return the weighted, clamped risk score in ``[0, SCALE]``.

    The exact integer sum is rounded up once, so the score stays monotone
    in every factor and is zero only when every weighted factor is zero.
    """

    total = (
        params.alpha * factors.sentiment
        + params.beta * factors.volatility
        + params.gamma * factors.obi
    )
    weighted = -(-total // fp.SCALE)
    return fp.clamp(weighted, 0, fp.SCALE)


# ============================================================================
# Engine
# ============================================================================


class RiskEngine:
    """Stateful RBS engine guarded by the shared system status.

    Args:
        clock: Time source for cooldowns and score timestamps.
        status: Shared pause flag and serialization lock.
        access: Principals; baselines and parameters are governor-only.
        events: Event log receiving RBS events.
        parameters: Initial risk parameters; validated against ``bounds``.
        bounds: Policy bounds for every parameter.
        current_update_interval: Minimum seconds between two accepted
            current-value updates.
    """

    def __init__(
        self,
        clock: Clock,
        status: SystemStatus,
        access: AccessControl,
        events: EventLog,
        parameters: RiskParameters,
        bounds: ParameterBounds,
        *,
        current_update_interval: int = 3600,
    ) -> None:
        if current_update_interval < 0:
            raise ValueError("current_update_interval must be >= 0")
        validate_parameters(parameters, bounds)

        self._clock = clock
        self._status = status
        self._access = access
        self._events = events
        self._params = parameters
        self._bounds = bounds
        self._current_update_interval = current_update_interval

        self._phase = RiskPhase.UNINITIALIZED
        self._baseline = MarketSignals()
        self._current = MarketSignals()
        self._factors = RiskFactors()
        self._score: FixedPoint = 0
        self._factors_updated_at: Optional[int] = None
        self._current_updated_at: Optional[int] = None

        logger.info(
            "RiskEngine initialised: params=%s current_update_interval=%ds",
            {k: fp.format_fixed(v) for k, v in parameters.as_dict().items()},
            current_update_interval,
        )

    # ======================================================================
    # Views
    # ======================================================================

    @property
    def phase(self) -> RiskPhase:
        return self._phase

    @property
    def parameters(self) -> RiskParameters:
        return self._params

    @property
    def bounds(self) -> ParameterBounds:
        return self._bounds

    @property
    def baseline(self) -> MarketSignals:
        return self._baseline

    @property
    def current(self) -> MarketSignals:
        return self._current

    @property
    def factors(self) -> RiskFactors:
        return self._factors

    @property
    def last_computed_score(self) -> FixedPoint:
        """Score cached by the last factor update, with the weights of that time."""

        return self._score

    @property
    def risk_score_timestamp(self) -> Optional[int]:
        """Time of the last :meth:`update_risk_factors` call, if any."""

        return self._factors_updated_at

    @property
    def current_updated_at(self) -> Optional[int]:
        return self._current_updated_at

    def calculate_risk_score(self) -> FixedPoint:
        """Return the risk score as of the last factor update.

        Zero before any factor update. Reads the current weights, so a
        governance weight change is reflected without recomputing the
        factors.
        """

        return compute_risk_score(self._factors, self._params)

    def is_score_stale(self, max_age: int) -> bool:
        if self._factors_updated_at is None:
            return True
        return self._clock.now() - self._factors_updated_at > max_age

    def next_current_update_at(self) -> int:
        if self._current_updated_at is None:
            return self._clock.now()
        return max(
            self._current_updated_at + self._current_update_interval,
            self._current_updated_at + 1,
        )

    def snapshot(self) -> RiskSnapshot:
        return RiskSnapshot(
            phase=self._phase,
            baseline=self._baseline,
            current=self._current,
            factors=self._factors,
            risk_score=self.calculate_risk_score(),
            factors_updated_at=self._factors_updated_at,
            current_updated_at=self._current_updated_at,
        )

    # ======================================================================
    # Signal updates
    # ======================================================================

    def update_baselines(
        self,
        caller: Account,
        sentiment: FixedPoint,
        volatility: FixedPoint,
        obi: FixedPoint,
    ) -> MarketSignals:
        """Overwrite the baseline snapshot (governor only).

        Raises:
            SystemPaused: While paused.
            Unauthorized: If ``caller`` is not a governor.
            ParameterOutOfRange: If any value is not strictly positive.
        """

        with self._status.serialized("update_baselines"):
            self._access.require_governor(caller)
            values = {"sentiment": sentiment, "volatility": volatility, "obi": obi}
            for name, value in values.items():
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ParameterOutOfRange(f"baseline.{name}", value)
                if value > fp.MAX_VALUE:
                    raise ParameterOutOfRange(f"baseline.{name}", value, 1, fp.MAX_VALUE)

            baseline = MarketSignals(**values)
            self._baseline = baseline
            if self._phase is RiskPhase.UNINITIALIZED:
                self._phase = RiskPhase.BASELINE_SET

            now = self._clock.now()
            self._events.emit(
                EventKind.BASELINES_UPDATED,
                actor=caller,
                timestamp=now,
                payload=baseline.as_dict(),
            )
            logger.info("RiskEngine.update_baselines: %s by=%s", _fmt(baseline.as_dict()), caller)
            return baseline

    def update_current_values(
        self,
        caller: Account,
        sentiment: FixedPoint,
        volatility: FixedPoint,
        obi: FixedPoint,
    ) -> MarketSignals:
        """Record a new current-value window.

        Raises:
            SystemPaused: While paused.
            InvalidAmount: If any value is negative or not an int.
            CooldownActive: If the previous window is younger than the
                configured interval.
        """

        with self._status.serialized("update_current_values"):
            values = {"sentiment": sentiment, "volatility": volatility, "obi": obi}
            for name, value in values.items():
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    raise InvalidAmount(f"current {name} must be a non-negative int, got {value!r}")
                if value > fp.MAX_VALUE:
                    raise fp.FixedPointOverflow(f"current {name} exceeds 2**256-1")

            now = self._clock.now()
            if self._current_updated_at is not None:
                ready_at = self.next_current_update_at()
                if now < ready_at:
                    logger.warning(
                        "RiskEngine.update_current_values rejected: now=%d ready_at=%d",
                        now,
                        ready_at,
                    )
                    raise CooldownActive("current market values", now, ready_at)

            current = MarketSignals(**values)
            self._current = current
            self._current_updated_at = now
            if self._phase is not RiskPhase.UNINITIALIZED:
                self._phase = RiskPhase.CURRENT_SET

            self._events.emit(
                EventKind.CURRENT_VALUES_UPDATED,
                actor=caller,
                timestamp=now,
                payload=current.as_dict(),
            )
            logger.info("RiskEngine.update_current_values: %s by=%s", _fmt(current.as_dict()), caller)
            return current

    def update_risk_factors(self, caller: Account) -> RiskFactors:
        """Recompute and cache the deviation ratios and the risk score.

        Raises:
            SystemPaused: While paused.
            DivisionByZeroBaseline: If any baseline signal is zero.
        """

        with self._status.serialized("update_risk_factors"):
            factors = compute_risk_factors(self._baseline, self._current)
            score = compute_risk_score(factors, self._params)
            now = self._clock.now()

            self._factors = factors
            self._score = score
            self._factors_updated_at = now
            self._phase = RiskPhase.FACTORS_UPDATED

            payload = dict(factors.as_dict())
            payload["risk_score"] = score
            self._events.emit(
                EventKind.RISK_FACTORS_UPDATED,
                actor=caller,
                timestamp=now,
                payload=payload,
            )
            logger.info(
                "RiskEngine.update_risk_factors: factors=%s score=%s",
                _fmt(factors.as_dict()),
                fp.format_fixed(score),
            )
            return factors

    # ======================================================================
    # Governance setters
    # ======================================================================

    def set_parameters(self, caller: Account, params: RiskParameters) -> RiskParameters:
        """Replace all risk parameters at once (governor only).

        Raises:
            SystemPaused: While paused.
            Unauthorized: If ``caller`` is not a governor.
            ParameterOutOfRange: If any value is outside its bounds or
                ``c0 > w0``.
        """

        with self._status.serialized("set_parameters"):
            self._access.require_governor(caller)
            validate_parameters(params, self._bounds)
            return self._commit_parameters(caller, params)

    def set_parameter(self, caller: Account, name: str, value: FixedPoint) -> RiskParameters:
        """Update a single parameter by name (governor only)."""

        if name not in PARAMETER_NAMES:
            raise KeyError(f"unknown risk parameter: {name}")
        with self._status.serialized(f"set_{name}"):
            self._access.require_governor(caller)
            self._bounds.check(name, value)
            updated = self._params.with_value(name, value)
            validate_parameters(updated, self._bounds)
            return self._commit_parameters(caller, updated)

    def set_c0(self, caller: Account, value: FixedPoint) -> RiskParameters:
        return self.set_parameter(caller, "c0", value)

    def set_w0(self, caller: Account, value: FixedPoint) -> RiskParameters:
        return self.set_parameter(caller, "w0", value)

    def set_alpha(self, caller: Account, value: FixedPoint) -> RiskParameters:
        return self.set_parameter(caller, "alpha", value)

    def set_beta(self, caller: Account, value: FixedPoint) -> RiskParameters:
        return self.set_parameter(caller, "beta", value)

    def set_gamma(self, caller: Account, value: FixedPoint) -> RiskParameters:
        return self.set_parameter(caller, "gamma", value)

    def _commit_parameters(self, caller: Account, params: RiskParameters) -> RiskParameters:
        previous = self._params
        self._params = params
        changed = {
            name: value
            for name, value in params.as_dict().items()
            if getattr(previous, name) != value
        }
        self._events.emit(
            EventKind.RISK_PARAMETERS_UPDATED,
            actor=caller,
            timestamp=self._clock.now(),
            payload={"changed": changed, "parameters": params.as_dict()},
        )
        logger.info("RiskEngine: parameters updated by=%s changed=%s", caller, _fmt(changed))
        return params


def _fmt(values: dict) -> dict:
    return {k: fp.format_fixed(v) for k, v in values.items()}
