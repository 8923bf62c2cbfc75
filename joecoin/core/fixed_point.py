"""
JoeCoin: Fixed-Point Arithmetic

This module implements the deterministic 18-decimal scaled-integer
arithmetic shared by the oracle, risk engine, vault and ledger. A fixed
point value ``x`` represents the real number ``x / SCALE``. Values live
in the unsigned 256-bit range; leaving it is an explicit failure rather
than a silent wrap or a float rounding.

Key responsibilities:
- Convert decimal inputs (strings, ints, Decimals) to fixed point
- Provide checked add/sub/mul/div and helpers (abs_diff, clamp)
- Raise explicit overflow, underflow and division-by-zero errors

External dependencies:
- decimal: Exact decimal parsing of human-entered amounts

Database tables accessed:
- None (pure arithmetic)

Thread safety: Thread-safe (stateless functions)

Author: JoeCoin Team
Created: 2026-10-19
Last Modified: 2026-10-19
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import TypeAlias, Union

from joecoin.core.errors import JoeCoinError

# ============================================================================
# Constants
# ============================================================================

DECIMALS: int = 18
SCALE: int = 10**DECIMALS
MAX_VALUE: int = 2**256 - 1

# Enough digits for any uint256 value plus the 18 decimal places.
_DECIMAL_PRECISION: int = 100

FixedPoint: TypeAlias = int
DecimalLike: TypeAlias = Union[str, int, Decimal]


class FixedPointError(JoeCoinError, ArithmeticError):
    """Base class for fixed-point arithmetic failures."""


class FixedPointOverflow(FixedPointError):
    """Raised when a result exceeds the unsigned 256-bit range."""


class FixedPointUnderflow(FixedPointError):
    """Raised when a result would be negative."""


class FixedPointDivisionByZero(FixedPointError, ZeroDivisionError):
    """Raised when dividing by a zero fixed-point value."""


# ============================================================================
# Internal helpers
# ============================================================================


def _checked(value: int) -> FixedPoint:
    if value < 0:
        raise FixedPointUnderflow(f"result {value} is negative")
    if value > MAX_VALUE:
        raise FixedPointOverflow("result exceeds 2**256-1")
    return value


def _require_int(value: object, name: str) -> int:
    # bool is an int subclass; a flag passed as an amount is a bug.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int fixed-point value, got {type(value).__name__}")
    return value


# ============================================================================
# Conversion
# ============================================================================


def to_fixed(value: DecimalLike) -> FixedPoint:
    """Convert a decimal amount to fixed point.

    ``to_fixed("0.5") == 5 * 10**17``. Digits beyond 18 decimals are
    rejected instead of rounded.

    Args:
        value: A decimal string, int or :class:`~decimal.Decimal`.
            Floats are refused because they cannot be converted exactly.

    Returns:
        The scaled integer.

    Raises:
        TypeError: If ``value`` is a float or another unsupported type.
        ValueError: If ``value`` is not a finite decimal or carries more
            than 18 decimals.
        FixedPointUnderflow / FixedPointOverflow: If the result leaves
            the unsigned 256-bit range.
    """

    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError("to_fixed does not accept floats or bools; pass a decimal string")
    if not isinstance(value, (str, int, Decimal)):
        raise TypeError(f"unsupported type for to_fixed: {type(value).__name__}")

    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        try:
            dec = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation as exc:
            raise ValueError(f"not a decimal amount: {value!r}") from exc
        if not dec.is_finite():
            raise ValueError(f"not a finite decimal amount: {value!r}")

        scaled = dec.scaleb(DECIMALS)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{value!r} has more than {DECIMALS} decimals")
        return _checked(int(scaled))


def from_fixed(value: FixedPoint) -> Decimal:
    """Convert a fixed-point value back to an exact :class:`Decimal`."""

    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return Decimal(_require_int(value, "value")).scaleb(-DECIMALS)


def format_fixed(value: FixedPoint) -> str:
    """Render a fixed-point value as a plain decimal string (no exponent)."""

    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        dec = from_fixed(value).normalize()
        return format(dec, "f")


# ============================================================================
# Arithmetic
# ============================================================================


def add(a: FixedPoint, b: FixedPoint) -> FixedPoint:
    """Return ``a + b``, failing on overflow."""

    return _checked(_require_int(a, "a") + _require_int(b, "b"))


def sub(a: FixedPoint, b: FixedPoint) -> FixedPoint:
    """Return ``a - b``, failing with underflow if ``b > a``."""

    return _checked(_require_int(a, "a") - _require_int(b, "b"))


def mul(a: FixedPoint, b: FixedPoint) -> FixedPoint:
    """Return the fixed-point product ``a * b / SCALE`` (rounded down)."""

    product = _require_int(a, "a") * _require_int(b, "b")
    return _checked(product // SCALE)


def div(a: FixedPoint, b: FixedPoint) -> FixedPoint:
    """Return the fixed-point quotient ``a * SCALE / b`` (rounded down).

    Raises:
        FixedPointDivisionByZero: If ``b`` is zero.
    """

    _require_int(a, "a")
    if _require_int(b, "b") == 0:
        raise FixedPointDivisionByZero("fixed-point division by zero")
    return _checked((a * SCALE) // b)


def abs_diff(a: FixedPoint, b: FixedPoint) -> FixedPoint:
    """Return ``|a - b|``."""

    _require_int(a, "a")
    _require_int(b, "b")
    return a - b if a >= b else b - a


def clamp(value: FixedPoint, lower: FixedPoint = 0, upper: FixedPoint = SCALE) -> FixedPoint:
    """Clamp ``value`` into ``[lower, upper]``."""

    if lower > upper:
        raise ValueError("clamp lower bound must not exceed upper bound")
    return max(lower, min(_require_int(value, "value"), upper))
