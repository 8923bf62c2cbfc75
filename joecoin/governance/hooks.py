"""JoeCoin – governance hook surface.

The token-weighted proposal and voting machinery lives outside the
core. Once a proposal passes, the governance principal calls into this
surface to apply it: replace risk parameters, reset baselines, or pause
and resume every state-changing entry point.
"""

from __future__ import annotations

from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.risk.engine import RiskEngine
from joecoin.risk.parameters import RiskParameters
from joecoin.risk.types import MarketSignals


logger = get_logger(__name__)


class GovernanceHooks:
    """Entry points the external governance module calls."""

    def __init__(
        self,
        clock: Clock,
        status: SystemStatus,
        access: AccessControl,
        events: EventLog,
        risk_engine: RiskEngine,
    ) -> None:
        self._clock = clock
        self._status = status
        self._access = access
        self._events = events
        self._risk_engine = risk_engine

    @property
    def paused(self) -> bool:
        return self._status.paused

    def set_risk_parameters(self, caller: Account, params: RiskParameters) -> RiskParameters:
        return self._risk_engine.set_parameters(caller, params)

    def set_baselines(
        self,
        caller: Account,
        sentiment: FixedPoint,
        volatility: FixedPoint,
        obi: FixedPoint,
    ) -> MarketSignals:
        return self._risk_engine.update_baselines(caller, sentiment, volatility, obi)

    def pause(self, caller: Account) -> None:
        """Halt every state-changing entry point (governor only).

        Raises:
            Unauthorized: If ``caller`` is not a governor.
            SystemPaused: If the system is already paused.
        """

        with self._status.serialized("pause"):
            self._access.require_governor(caller)
            self._status.set_paused(True)
            self._events.emit(
                EventKind.SYSTEM_PAUSED,
                actor=caller,
                timestamp=self._clock.now(),
                payload={},
            )
            logger.warning("System paused by %s", caller)

    def unpause(self, caller: Account) -> None:
        """Resume the system (governor only); a no-op when not paused."""

        # No operation name: resuming must not be blocked by the pause flag.
        with self._status.serialized():
            self._access.require_governor(caller)
            if not self._status.paused:
                return
            self._status.set_paused(False)
            self._events.emit(
                EventKind.SYSTEM_UNPAUSED,
                actor=caller,
                timestamp=self._clock.now(),
                payload={},
            )
            logger.info("System unpaused by %s", caller)
