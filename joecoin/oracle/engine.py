"""JoeCoin – Price Oracle.

The oracle keeps exactly one accepted :class:`PriceSample` per asset.
A new observation is accepted only once ``min_update_interval`` seconds
have elapsed since the previous accepted sample of that asset; an early
submission fails immediately with :class:`CooldownActive` and leaves the
stored price untouched. Callers wanting smoother data recalibrate the
risk engine baselines rather than averaging here.

Assets that have never received a sample report the deployment
``default_price`` (the peg) and are always considered stale. The first
sample of an asset is admitted without a cooldown.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock
from joecoin.core.errors import CooldownActive, InvalidAmount, Unauthorized
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account, AssetId
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.oracle.types import PriceSample


logger = get_logger(__name__)


class PriceOracle:
    """Time-gated latest-price store.

    Args:
        clock: Time source for cooldown and staleness comparisons.
        status: Shared pause flag and serialization lock.
        access: Principals; the owner manages the feeder allow-list.
        events: Event log receiving ``PRICE_UPDATED`` records.
        min_update_interval: Minimum seconds between two accepted samples
            of the same asset.
        default_price: Price reported for assets without a sample.
        feeders: Optional allow-list of accounts that may submit prices.
            ``None`` leaves submission open to anyone obeying the
            cooldown.
    """

    def __init__(
        self,
        clock: Clock,
        status: SystemStatus,
        access: AccessControl,
        events: EventLog,
        *,
        min_update_interval: int = 3600,
        default_price: FixedPoint = fp.SCALE,
        feeders: Optional[Iterable[Account]] = None,
    ) -> None:
        if min_update_interval < 0:
            raise ValueError("min_update_interval must be >= 0")
        if default_price <= 0:
            raise InvalidAmount("default_price must be > 0")

        self._clock = clock
        self._status = status
        self._access = access
        self._events = events
        self._min_update_interval = min_update_interval
        self._default_price = default_price
        self._feeders: Optional[Set[Account]] = set(feeders) if feeders is not None else None
        self._samples: Dict[AssetId, PriceSample] = {}

        logger.info(
            "PriceOracle initialised: min_update_interval=%ds default_price=%s",
            min_update_interval,
            fp.format_fixed(default_price),
        )

    # ======================================================================
    # Properties
    # ======================================================================

    @property
    def min_update_interval(self) -> int:
        return self._min_update_interval

    @property
    def default_price(self) -> FixedPoint:
        return self._default_price

    @property
    def assets(self) -> list[AssetId]:
        return sorted(self._samples)

    # ======================================================================
    # Mutations
    # ======================================================================

    def submit_price(self, caller: Account, asset: AssetId, price: FixedPoint) -> PriceSample:
        """Accept a new price for ``asset`` if its cooldown has elapsed.

        Raises:
            SystemPaused: While the system is paused.
            Unauthorized: If a feeder allow-list is set and ``caller``
                is not on it.
            InvalidAmount: If ``price`` is not strictly positive.
            CooldownActive: If the previous accepted sample of ``asset``
                is younger than ``min_update_interval``.
        """

        with self._status.serialized("submit_price"):
            if self._feeders is not None and caller not in self._feeders:
                raise Unauthorized(caller, "price feeder")
            if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
                raise InvalidAmount(f"price must be a positive fixed-point int, got {price!r}")
            if price > fp.MAX_VALUE:
                raise fp.FixedPointOverflow("price exceeds 2**256-1")

            now = self._clock.now()
            previous = self._samples.get(asset)
            if previous is not None:
                ready_at = self.next_update_at(asset)
                if now < ready_at:
                    logger.warning(
                        "PriceOracle.submit_price rejected: asset=%s now=%d ready_at=%d",
                        asset,
                        now,
                        ready_at,
                    )
                    raise CooldownActive(f"price of {asset}", now, ready_at)

            sample = PriceSample(asset=asset, price=price, timestamp=now)
            self._samples[asset] = sample

            self._events.emit(
                EventKind.PRICE_UPDATED,
                actor=caller,
                timestamp=now,
                payload={
                    "asset": asset,
                    "price": price,
                    "previous_price": previous.price if previous is not None else None,
                },
            )
            logger.info(
                "PriceOracle.submit_price: asset=%s price=%s ts=%d by=%s",
                asset,
                fp.format_fixed(price),
                now,
                caller,
            )
            return sample

    def add_feeder(self, caller: Account, feeder: Account) -> None:
        """Restrict submission to an allow-list and add ``feeder`` to it."""

        with self._status.serialized("add_feeder"):
            self._access.require_owner(caller)
            if self._feeders is None:
                self._feeders = set()
            self._feeders.add(feeder)
            logger.info("PriceOracle.add_feeder: %s", feeder)

    def remove_feeder(self, caller: Account, feeder: Account) -> None:
        with self._status.serialized("remove_feeder"):
            self._access.require_owner(caller)
            if self._feeders is not None:
                self._feeders.discard(feeder)

    # ======================================================================
    # Views
    # ======================================================================

    def latest_sample(self, asset: AssetId) -> Optional[PriceSample]:
        return self._samples.get(asset)

    def current_price(self, asset: AssetId) -> FixedPoint:
        """Return the last accepted price of ``asset`` (default if none)."""

        sample = self._samples.get(asset)
        return sample.price if sample is not None else self._default_price

    def last_updated(self, asset: AssetId) -> Optional[int]:
        sample = self._samples.get(asset)
        return sample.timestamp if sample is not None else None

    def is_stale(self, asset: AssetId, max_age: int) -> bool:
        """Return True when the latest sample is older than ``max_age`` seconds."""

        sample = self._samples.get(asset)
        if sample is None:
            return True
        return self._clock.now() - sample.timestamp > max_age

    def next_update_at(self, asset: AssetId) -> int:
        """Return the earliest time a new sample of ``asset`` is accepted."""

        sample = self._samples.get(asset)
        if sample is None:
            return self._clock.now()
        # Timestamps strictly increase even with a zero interval.
        return max(sample.timestamp + self._min_update_interval, sample.timestamp + 1)

    def deviation_from_peg(self, asset: AssetId, peg: FixedPoint) -> FixedPoint:
        """Return ``|price - peg| / peg`` in fixed point.

        Raises:
            FixedPointDivisionByZero: If ``peg`` is zero.
        """

        return fp.div(fp.abs_diff(self.current_price(asset), peg), peg)
