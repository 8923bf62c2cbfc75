"""JoeCoin – price oracle package.

Single-sample-with-cooldown price oracle: the latest accepted sample per
asset, a minimum update interval, and staleness checks.
"""

from joecoin.oracle.types import PriceSample
from joecoin.oracle.engine import PriceOracle

__all__ = ["PriceSample", "PriceOracle"]
