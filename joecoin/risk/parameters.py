"""JoeCoin – RBS risk parameters and their admissible bounds.

This module defines the governance-owned :class:`RiskParameters`
structure and the policy :class:`ParameterBounds` every governance
update is validated against. Both are small immutable values; the risk
engine holds the current parameters behind its governor capability
check and replaces them wholesale on every accepted update.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Tuple

from joecoin.core import fixed_point as fp
from joecoin.core.config import RiskEngineConfig
from joecoin.core.errors import ParameterOutOfRange
from joecoin.core.fixed_point import FixedPoint


PARAMETER_NAMES: Tuple[str, ...] = ("c0", "w0", "alpha", "beta", "gamma")


@dataclass(frozen=True)
class RiskParameters:
    """Band and weight parameters of the risk engine (fixed point).

    Attributes:
        c0: Cushion; narrower band reserved for auxiliary stabilization
            actions. Not part of the mint decision.
        w0: Wall; maximum tolerated fractional deviation from peg before
            minting is blocked.
        alpha: Weight of the sentiment deviation.
        beta: Weight of the volatility deviation.
        gamma: Weight of the order-book-imbalance deviation.
    """

    c0: FixedPoint
    w0: FixedPoint
    alpha: FixedPoint
    beta: FixedPoint
    gamma: FixedPoint

    @classmethod
    def from_config(cls, config: RiskEngineConfig) -> "RiskParameters":
        return cls(
            c0=fp.to_fixed(config.c0),
            w0=fp.to_fixed(config.w0),
            alpha=fp.to_fixed(config.alpha),
            beta=fp.to_fixed(config.beta),
            gamma=fp.to_fixed(config.gamma),
        )

    def with_value(self, name: str, value: FixedPoint) -> "RiskParameters":
        if name not in PARAMETER_NAMES:
            raise KeyError(f"unknown risk parameter: {name}")
        return replace(self, **{name: value})

    def as_dict(self) -> Dict[str, FixedPoint]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ParameterBounds:
    """Inclusive ``[min, max]`` range per risk parameter."""

    ranges: Mapping[str, Tuple[FixedPoint, FixedPoint]]

    @classmethod
    def from_config(cls, config: RiskEngineConfig) -> "ParameterBounds":
        ranges = {
            name: (fp.to_fixed(lo), fp.to_fixed(hi))
            for name, (lo, hi) in config.bounds.items()
        }
        missing = set(PARAMETER_NAMES) - set(ranges)
        if missing:
            raise ValueError(f"missing bounds for parameters: {sorted(missing)}")
        for name, (lo, hi) in ranges.items():
            if lo > hi:
                raise ValueError(f"bounds for {name} are inverted")
        return cls(ranges=ranges)

    def check(self, name: str, value: FixedPoint) -> None:
        """Raise :class:`ParameterOutOfRange` unless ``value`` is admissible."""

        lower, upper = self.ranges[name]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ParameterOutOfRange(name, value, lower, upper)
        if value < lower or value > upper:
            raise ParameterOutOfRange(name, value, lower, upper)


def validate_parameters(params: RiskParameters, bounds: ParameterBounds) -> None:
    """Validate every parameter and the band ordering ``c0 <= w0``.

    Raises:
        ParameterOutOfRange: On the first violation found.
    """

    for name in PARAMETER_NAMES:
        bounds.check(name, getattr(params, name))
    if params.c0 > params.w0:
        # The cushion is the inner band; it cannot be wider than the wall.
        raise ParameterOutOfRange("c0", params.c0, None, params.w0)
