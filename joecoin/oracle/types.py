"""JoeCoin – price oracle types."""

from __future__ import annotations

from dataclasses import dataclass

from joecoin.core.fixed_point import FixedPoint
from joecoin.core.types import AssetId


@dataclass(frozen=True)
class PriceSample:
    """One accepted price observation.

    Attributes:
        asset: Asset the price refers to.
        price: Price in fixed point (``SCALE`` == 1.0), always > 0.
        timestamp: Clock time at which the sample was accepted.
    """

    asset: AssetId
    price: FixedPoint
    timestamp: int
